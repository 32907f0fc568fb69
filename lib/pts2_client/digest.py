"""HTTP Digest authentication (RFC 2617 / RFC 7616, qop=auth only)."""
from __future__ import annotations

import hashlib
import re
import secrets
from dataclasses import dataclass

from .errors import MalformedChallenge

_DIGEST_PREFIX_RE = re.compile(r"^\s*Digest(?:\s+(.*))?$", re.IGNORECASE | re.DOTALL)
_QUOTED_PAIR_RE = re.compile(r"\\(.)", re.DOTALL)

_HASHES = {
    "MD5": hashlib.md5,
    "MD5-SESS": hashlib.md5,
    "SHA-256": hashlib.sha256,
    "SHA-256-SESS": hashlib.sha256,
}


@dataclass(frozen=True)
class DigestChallenge:
    realm: str | None = None
    nonce: str | None = None
    qop: str | None = None
    opaque: str | None = None
    algorithm: str | None = None
    charset: str | None = None


_FIELDS = {"realm", "nonce", "qop", "opaque", "algorithm", "charset"}


def _split_params(value: str) -> list[str]:
    parts: list[str] = []
    cur: list[str] = []
    in_quotes = False
    escaped = False
    for ch in value:
        if escaped:
            # quoted-pair: the character after a backslash is literal
            escaped = False
        elif in_quotes and ch == "\\":
            escaped = True
        elif ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            parts.append("".join(cur).strip())
            cur = []
            continue
        cur.append(ch)
    tail = "".join(cur).strip()
    if tail:
        parts.append(tail)
    return parts


def parse_challenge(header: str) -> DigestChallenge:
    m = _DIGEST_PREFIX_RE.match(header or "")
    if not m:
        raise MalformedChallenge(f"Not a Digest challenge: {header!r}")

    params: dict[str, str] = {}
    for part in _split_params(m.group(1) or ""):
        key, sep, value = part.partition("=")
        key = key.strip().lower()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = _QUOTED_PAIR_RE.sub(r"\1", value[1:-1])
        if key in _FIELDS:
            params[key] = value
    return DigestChallenge(**params)


def select_qop(qop: str | None) -> str | None:
    if not qop:
        return None
    options = [item.strip() for item in qop.split(",") if item.strip()]
    if "auth" in options:
        return "auth"
    return options[0] if options else None


def _hash(algorithm: str, data: str) -> str:
    fn = _HASHES.get(algorithm.upper(), hashlib.md5)
    return fn(data.encode("utf-8")).hexdigest()


def build_authorization(
        username: str,
        password: str,
        method: str,
        uri: str,
        challenge: DigestChallenge,
        nc: int,
        *,
        cnonce: str | None = None,
) -> str:
    """Return the ``Authorization`` header value answering ``challenge``.

    ``nc`` is the nonce-count for this request and must grow with every
    handshake made against the same nonce. ``cnonce`` is generated when not
    given.
    """
    if nc <= 0:
        raise ValueError(f"nonce-count must be positive, got {nc}")

    realm = challenge.realm or ""
    nonce = challenge.nonce or ""
    algorithm = (challenge.algorithm or "MD5").upper()
    qop = select_qop(challenge.qop)
    cnonce = cnonce or secrets.token_hex(16)
    nc_value = f"{nc:08x}"

    ha1 = _hash(algorithm, f"{username}:{realm}:{password}")
    if algorithm.endswith("-SESS"):
        ha1 = _hash(algorithm, f"{ha1}:{nonce}:{cnonce}")
    ha2 = _hash(algorithm, f"{method}:{uri}")

    if qop:
        response = _hash(algorithm, f"{ha1}:{nonce}:{nc_value}:{cnonce}:{qop}:{ha2}")
    else:
        response = _hash(algorithm, f"{ha1}:{nonce}:{ha2}")

    parts = [
        f'username="{username}"',
        f'realm="{realm}"',
        f'nonce="{nonce}"',
        f'uri="{uri}"',
        f'response="{response}"',
    ]
    if challenge.opaque:
        parts.append(f'opaque="{challenge.opaque}"')
    if challenge.charset:
        parts.append(f'charset="{challenge.charset}"')
    if challenge.algorithm:
        parts.append(f"algorithm={challenge.algorithm}")
    if qop:
        parts.append(f"qop={qop}")
        parts.append(f"nc={nc_value}")
        parts.append(f'cnonce="{cnonce}"')
    return "Digest " + ", ".join(parts)
