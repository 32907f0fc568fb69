from __future__ import annotations

import base64
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from .config_types import JSONPTS_PATH, ClientConfig
from .digest import build_authorization, parse_challenge
from .errors import ApiError, CorrelationError, ProtocolError, ProtocolViolation
from .jsonpts import (
    PacketRequest,
    PacketResponse,
    coerce_flag,
    coerce_int,
    decode_envelope,
    encode_envelope,
    format_pts_datetime,
    parse_pts_datetime,
)
from .transport import Transport, Unauthorized

logger = logging.getLogger(__name__)

CONFIGURATION_PACKETS = (
    "GetSystemDecimalDigits",
    "GetMeasurementUnits",
    "GetPumpsConfiguration",
    "GetFuelGradesConfiguration",
    "GetPumpNozzlesConfiguration",
    "GetProbesConfiguration",
    "GetUsersConfiguration",
    "GetConfigurationIdentifier",
)


@dataclass(frozen=True)
class DeviceDateTime:
    date_time: datetime
    auto_synchronize: bool
    utc_offset: int


def _as_pts_datetime(value: datetime | str) -> str:
    if isinstance(value, datetime):
        return format_pts_datetime(value)
    return value


class Pts2Client:
    def __init__(self, cfg: ClientConfig, *, transport: Transport | None = None):
        self._cfg = cfg
        self._t = transport or Transport(cfg)
        self._basic_auth: str | None = None
        if cfg.auth == "basic":
            token = base64.b64encode(f"{cfg.login}:{cfg.password}".encode("utf-8")).decode("ascii")
            self._basic_auth = f"Basic {token}"
        self._nc = 0
        self._nc_lock = threading.Lock()

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> Pts2Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _next_nc(self) -> int:
        with self._nc_lock:
            self._nc += 1
            return self._nc

    def _post_with_auth(self, body: Any) -> Any:
        if self._basic_auth is not None:
            result = self._t.post(body, {"Authorization": self._basic_auth})
        else:
            # Digest: the first unauthenticated request fetches the challenge.
            result = self._t.post(body)
            if isinstance(result, Unauthorized):
                header = result.headers.get("www-authenticate")
                if not header:
                    raise ProtocolViolation("401 without WWW-Authenticate header")
                challenge = parse_challenge(header)
                nc = self._next_nc()
                logger.debug("digest challenge realm=%s qop=%s nc=%d", challenge.realm, challenge.qop, nc)
                authorization = build_authorization(
                    self._cfg.login,
                    self._cfg.password,
                    "POST",
                    JSONPTS_PATH,
                    challenge,
                    nc,
                )
                result = self._t.post(body, {"Authorization": authorization})

        if isinstance(result, Unauthorized):
            raise ApiError(401, f"HTTP 401: unauthorized ({self._t.url})")
        return result

    def send_raw_envelope(self, envelope: Any) -> Any:
        """Forward a caller-built jsonPTS envelope unchanged; returns the raw response."""
        return self._post_with_auth(envelope)

    def execute(self, requests: Sequence[PacketRequest]) -> list[PacketResponse]:
        requests = list(requests)
        raw = self._post_with_auth(encode_envelope(requests))
        packets = decode_envelope(raw)

        if len(packets) != len(requests):
            raise CorrelationError(expected=len(requests), actual=len(packets))
        for i, pkt in enumerate(packets):
            if pkt.id != i:
                raise CorrelationError(expected=i, actual=pkt.id, index=i)

        for pkt in packets:
            if pkt.error:
                raise ProtocolError(pkt)
        return packets

    # --- High-level operations ---
    def load_configuration(self) -> list[PacketResponse]:
        return self.execute([PacketRequest(t) for t in CONFIGURATION_PACKETS])

    def get_date_time(self) -> DeviceDateTime:
        [pkt] = self.execute([PacketRequest("GetDateTime")])
        data = pkt.data if isinstance(pkt.data, dict) else {}
        if not data.get("DateTime"):
            raise ProtocolViolation("Missing DateTime in response")
        offset = data.get("UTCOffset")
        utc_offset = coerce_int(offset) if offset is not None else 0
        if utc_offset is None:
            raise ProtocolViolation(f"Invalid UTCOffset in response: {offset!r}")
        return DeviceDateTime(
            date_time=parse_pts_datetime(data["DateTime"]),
            auto_synchronize=coerce_flag(data.get("AutoSynchronize")),
            utc_offset=utc_offset,
        )

    def set_date_time(
            self,
            date_time: datetime | str,
            *,
            utc_offset: int = 0,
            auto_synchronize: bool = False,
    ) -> bool:
        data = {
            "DateTime": _as_pts_datetime(date_time),
            "UTCOffset": int(utc_offset),
            "AutoSynchronize": bool(auto_synchronize),
        }
        [pkt] = self.execute([PacketRequest("SetDateTime", data)])
        # The confirmation payload is device-dependent; only the error flag counts.
        return not pkt.error

    def report_get_pump_transactions(
            self,
            pump: int,
            date_from: datetime | str,
            date_to: datetime | str,
    ) -> list[Any]:
        data = {
            "Pump": int(pump),
            "DateTimeStart": _as_pts_datetime(date_from),
            "DateTimeEnd": _as_pts_datetime(date_to),
        }
        [pkt] = self.execute([PacketRequest("ReportGetPumpTransactions", data)])
        if not isinstance(pkt.data, list):
            return []
        return pkt.data
