from __future__ import annotations

import os
import re

import typer

from .. import console
from ..config import config_path, load_file_config, save_config

app = typer.Typer(help="Controller host stored in the local config file.", no_args_is_help=True)

_HOST_RE = re.compile(r"^[a-z0-9.-]+$", re.IGNORECASE)


@app.command("show")
def show_host():
    env_host = (os.getenv("PTS2_HOST") or "").strip()
    if env_host:
        console.print(f"{env_host} (env)")
        return
    host = load_file_config().device.host
    console.print(f"{host or '-'} (config)")


@app.command("set")
def set_host(
        host: str = typer.Argument(..., help="Controller IP or hostname."),
):
    host = host.strip()
    if not _HOST_RE.match(host):
        console.err("host must be an IP/hostname (letters, digits, dots, hyphen)")
        raise typer.Exit(code=2)
    cfg = load_file_config()
    cfg.device.host = host
    saved = save_config(cfg)
    console.ok(f"Host set to {host}: {saved}")


@app.command("clear")
def clear_host():
    if not os.path.exists(config_path()):
        console.info("No config file; nothing to clear.")
        return
    cfg = load_file_config()
    cfg.device.host = ""
    saved = save_config(cfg)
    console.ok(f"Host cleared: {saved}")
