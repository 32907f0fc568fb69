"""jsonPTS envelope codec.

Outgoing packets are numbered by position; incoming envelopes are validated,
their loosely-typed fields normalized, and the packets sorted by ``Id`` so the
client can correlate them with the request regardless of device ordering.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from .errors import ProtocolViolation

PROTOCOL = "jsonPTS"


@dataclass(frozen=True)
class PacketRequest:
    type: str
    data: Any = None


@dataclass(frozen=True)
class PacketResponse:
    id: int
    error: bool = False
    type: str | None = None
    code: int | None = None
    message: str | None = None
    data: Any = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"Id": self.id}
        if self.type is not None:
            out["Type"] = self.type
        out["Error"] = self.error
        if self.code is not None:
            out["Code"] = self.code
        if self.message is not None:
            out["Message"] = self.message
        if self.data is not None:
            out["Data"] = self.data
        return out


def encode_envelope(requests: Iterable[PacketRequest]) -> dict[str, Any]:
    packets = []
    for i, req in enumerate(requests):
        packet: dict[str, Any] = {"Id": i, "Type": req.type}
        if req.data is not None:
            packet["Data"] = req.data
        packets.append(packet)
    return {"Protocol": PROTOCOL, "Packets": packets}


def coerce_int(value: Any) -> int | None:
    """Integers may arrive as JSON numbers or numeric strings; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_flag(value: Any) -> bool:
    """Device booleans arrive either as JSON booleans or as strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() != "false"


def decode_envelope(raw: Any) -> list[PacketResponse]:
    if not isinstance(raw, dict):
        raise ProtocolViolation(f"Expected a jsonPTS envelope object, got {type(raw).__name__}")

    protocol = raw.get("Protocol")
    if protocol != PROTOCOL:
        raise ProtocolViolation(f"Protocol mismatch: expected {PROTOCOL}, got {protocol}")

    raw_packets = raw.get("Packets")
    if not isinstance(raw_packets, list):
        raise ProtocolViolation("Envelope Packets must be an array")

    packets: list[PacketResponse] = []
    for p in raw_packets:
        if not isinstance(p, dict):
            raise ProtocolViolation("Response packet must be an object")
        packet_id = coerce_int(p.get("Id"))
        if packet_id is None:
            raise ProtocolViolation(f"Response packet missing Id: {p.get('Id')!r}")

        packets.append(
            PacketResponse(
                id=packet_id,
                error=coerce_flag(p.get("Error")),
                type=str(p["Type"]) if p.get("Type") is not None else None,
                code=coerce_int(p.get("Code")),
                message=str(p["Message"]) if p.get("Message") is not None else None,
                data=p.get("Data"),
            )
        )

    packets.sort(key=lambda pkt: pkt.id)
    return packets


def format_pts_datetime(dt: datetime) -> str:
    # The controller parses this positionally; no timezone suffix.
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )


def parse_pts_datetime(value: Any) -> datetime:
    text = str(value).strip()
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise ProtocolViolation(f"Invalid device DateTime: {text!r}") from e
    if dt.tzinfo is not None:
        # device clocks are naive local time
        dt = dt.astimezone().replace(tzinfo=None)
    return dt
