from .client import DeviceDateTime, Pts2Client
from .config_types import ClientConfig
from .errors import (
    ApiError,
    ConfigError,
    CorrelationError,
    MalformedChallenge,
    ProtocolError,
    ProtocolViolation,
    Pts2ClientError,
    TransportError,
)
from .jsonpts import PacketRequest, PacketResponse, format_pts_datetime

__all__ = [
    "Pts2Client",
    "ClientConfig",
    "DeviceDateTime",
    "PacketRequest",
    "PacketResponse",
    "format_pts_datetime",
    "Pts2ClientError",
    "ApiError",
    "ConfigError",
    "CorrelationError",
    "MalformedChallenge",
    "ProtocolError",
    "ProtocolViolation",
    "TransportError",
]
