from __future__ import annotations
from dataclasses import dataclass

from .errors import ConfigError

SECURITY_SCHEMES = ("http", "https")
AUTH_SCHEMES = ("basic", "digest")
JSONPTS_PATH = "/jsonPTS"


@dataclass(frozen=True)
class ClientConfig:
    host: str
    security: str = "https"
    http_port: int = 80
    https_port: int = 443
    auth: str = "digest"
    login: str = ""
    password: str = ""
    timeout_ms: int = 15000
    tls_insecure: bool = False

    def __post_init__(self) -> None:
        if not (self.host or "").strip():
            raise ConfigError("host is required")
        if self.security not in SECURITY_SCHEMES:
            raise ConfigError(f"security must be one of {', '.join(SECURITY_SCHEMES)}, got {self.security!r}")
        if self.auth not in AUTH_SCHEMES:
            raise ConfigError(f"auth must be one of {', '.join(AUTH_SCHEMES)}, got {self.auth!r}")
        for name in ("http_port", "https_port", "timeout_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    @property
    def port(self) -> int:
        return self.https_port if self.security == "https" else self.http_port

    @property
    def url(self) -> str:
        return f"{self.security}://{self.host}:{self.port}{JSONPTS_PATH}"

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0
