from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .jsonpts import PacketResponse


class Pts2ClientError(Exception):
    """Base client error."""


class ConfigError(Pts2ClientError):
    """Invalid or missing client configuration."""


class ProtocolViolation(Pts2ClientError):
    """Response does not follow the jsonPTS envelope rules."""


class MalformedChallenge(ProtocolViolation):
    """WWW-Authenticate header is not a usable Digest challenge."""


class ProtocolError(Pts2ClientError):
    """The controller flagged a packet as failed."""

    def __init__(self, packet: PacketResponse):
        detail = f"{packet.code if packet.code is not None else '?'} {packet.message or ''}".strip()
        type_part = f" type={packet.type}" if packet.type else ""
        super().__init__(f"PTS packet error (id={packet.id}{type_part}): {detail}")
        self.packet = packet


class CorrelationError(Pts2ClientError):
    def __init__(self, expected: int, actual: int, index: int | None = None):
        if index is None:
            msg = f"Packet count mismatch: expected {expected}, got {actual}"
        else:
            msg = f"Packet id mismatch at index {index}: expected {expected}, got {actual}"
        super().__init__(msg)
        self.expected = expected
        self.actual = actual
        self.index = index


class TransportError(Pts2ClientError):
    """Transport/network layer error."""

    def __init__(self, kind: str, url: str, message: str, code: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.url = url
        self.code = code


class ApiError(Pts2ClientError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
