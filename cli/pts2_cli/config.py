from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any, Mapping

import tomli_w
from platformdirs import user_config_dir

from pts2_client import ClientConfig

APP_NAME = "pts2"
CONFIG_FILENAME = "config.toml"

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


@dataclass
class DeviceConfig:
    host: str = ""
    security: str = "https"
    http_port: int = 80
    https_port: int = 443
    timeout_ms: int = 15000
    tls_insecure: bool = False


@dataclass
class AuthConfig:
    scheme: str = "digest"
    login: str = ""
    password: str = ""


@dataclass
class AppConfig:
    device: DeviceConfig = field(default_factory=DeviceConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    def to_client_config(self) -> ClientConfig:
        return ClientConfig(
            host=self.device.host.strip(),
            security=self.device.security,
            http_port=self.device.http_port,
            https_port=self.device.https_port,
            auth=self.auth.scheme,
            login=self.auth.login,
            password=self.auth.password,
            timeout_ms=self.device.timeout_ms,
            tls_insecure=self.device.tls_insecure,
        )


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig()


def parse_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback
    norm = str(value).strip().lower()
    if norm in _TRUE:
        return True
    if norm in _FALSE:
        return False
    return fallback


def parse_int(value: Any, fallback: int) -> int:
    if value is None or value == "":
        return fallback
    try:
        return int(str(value).strip())
    except ValueError:
        return fallback


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return {
        "device": {
            "host": cfg.device.host,
            "security": cfg.device.security,
            "http_port": cfg.device.http_port,
            "https_port": cfg.device.https_port,
            "timeout_ms": cfg.device.timeout_ms,
            "tls_insecure": cfg.device.tls_insecure,
        },
        "auth": {
            "scheme": cfg.auth.scheme,
            "login": cfg.auth.login,
            "password": cfg.auth.password,
        },
    }


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    device_raw = data.get("device") or {}
    if isinstance(device_raw, dict):
        cfg.device.host = str(device_raw.get("host") or "").strip()
        cfg.device.security = str(device_raw.get("security") or cfg.device.security).strip().lower()
        cfg.device.http_port = parse_int(device_raw.get("http_port"), cfg.device.http_port)
        cfg.device.https_port = parse_int(device_raw.get("https_port"), cfg.device.https_port)
        cfg.device.timeout_ms = parse_int(device_raw.get("timeout_ms"), cfg.device.timeout_ms)
        cfg.device.tls_insecure = parse_bool(device_raw.get("tls_insecure"), cfg.device.tls_insecure)
    auth_raw = data.get("auth") or {}
    if isinstance(auth_raw, dict):
        cfg.auth.scheme = str(auth_raw.get("scheme") or cfg.auth.scheme).strip().lower()
        cfg.auth.login = str(auth_raw.get("login") or "")
        cfg.auth.password = str(auth_raw.get("password") or "")
    return cfg


def apply_env(cfg: AppConfig, env: Mapping[str, str]) -> AppConfig:
    """Overlay PTS2_* environment variables on top of the file settings."""
    device = DeviceConfig(
        host=(env.get("PTS2_HOST") or cfg.device.host).strip(),
        security=(env.get("PTS2_SECURITY") or cfg.device.security).strip().lower(),
        http_port=parse_int(env.get("PTS2_HTTP_PORT"), cfg.device.http_port),
        https_port=parse_int(env.get("PTS2_HTTPS_PORT"), cfg.device.https_port),
        timeout_ms=parse_int(env.get("PTS2_TIMEOUT_MS"), cfg.device.timeout_ms),
        tls_insecure=parse_bool(env.get("PTS2_TLS_INSECURE"), cfg.device.tls_insecure),
    )
    auth = AuthConfig(
        scheme=(env.get("PTS2_AUTH") or cfg.auth.scheme).strip().lower(),
        login=env.get("PTS2_LOGIN", cfg.auth.login),
        password=env.get("PTS2_PASSWORD", cfg.auth.password),
    )
    return AppConfig(device=device, auth=auth)


def load_file_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return from_toml(data)
    except FileNotFoundError:
        return default_config()


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    return apply_env(load_file_config(), os.environ if env is None else env)


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
