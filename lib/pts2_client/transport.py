from __future__ import annotations

import errno
import json
import logging
import ssl
import time
from dataclasses import dataclass
from typing import Any

import httpx

from .config_types import ClientConfig
from .errors import ApiError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unauthorized:
    """HTTP 401 from the controller; auth decisions belong to the caller."""
    headers: httpx.Headers


def _error_code(exc: BaseException) -> str | None:
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        if isinstance(cur, ssl.SSLError) and cur.reason:
            return str(cur.reason)
        if isinstance(cur, OSError) and cur.errno:
            return errno.errorcode.get(cur.errno, str(cur.errno))
        cur = cur.__cause__ or cur.__context__
    return None


class Transport:
    def __init__(self, cfg: ClientConfig, *, http_transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        verify = True
        if cfg.security == "https" and cfg.tls_insecure:
            logger.warning("TLS certificate verification disabled for %s", cfg.url)
            verify = False

        self._client = httpx.Client(
            timeout=cfg.timeout_s,
            headers={"User-Agent": "pts2-client/0.1.0"},
            verify=verify,
            transport=http_transport,
        )

    @property
    def url(self) -> str:
        return self._cfg.url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def post(self, body: Any, headers: dict[str, str] | None = None) -> Any:
        url = self._cfg.url
        timeout_s = self._cfg.timeout_s
        request_headers = {"Content-Type": "application/json"}
        request_headers.update(headers or {})
        request = self._client.build_request("POST", url, content=json.dumps(body), headers=request_headers)
        # httpx timeouts are per phase; the deadline bounds the whole exchange.
        deadline = time.monotonic() + timeout_s
        try:
            r = self._client.send(request, stream=True)
            try:
                if r.status_code == 401:
                    logger.debug("POST %s -> 401", url)
                    return Unauthorized(r.headers)
                chunks = []
                for chunk in r.iter_bytes():
                    if time.monotonic() > deadline:
                        raise httpx.ReadTimeout(f"no complete response within {timeout_s}s", request=request)
                    chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(f"no complete response within {timeout_s}s", request=request)
            finally:
                r.close()
        except httpx.TimeoutException as e:
            raise TransportError(
                "timeout", url, f"PTS2 timeout error calling {url}: {e}", code=_error_code(e)
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                "network", url, f"PTS2 network error calling {url}: {e}", code=_error_code(e)
            ) from e

        logger.debug("POST %s -> %s", url, r.status_code)
        content = b"".join(chunks)
        text = content.decode(r.charset_encoding or "utf-8", errors="replace")

        if r.status_code < 200 or r.status_code >= 300:
            raise ApiError(r.status_code, f"HTTP {r.status_code}: {text[:200]}", text[:1000] or None)

        if "application/json" not in r.headers.get("content-type", ""):
            raise ApiError(r.status_code, f"Non-JSON response: {text[:200]}", text[:1000] or None)

        try:
            return json.loads(content)
        except ValueError as e:
            raise ApiError(r.status_code, f"Invalid JSON response: {e}", text[:1000] or None) from e
