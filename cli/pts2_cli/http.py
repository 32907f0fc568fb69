from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Iterator

import typer

from pts2_client import ConfigError, ProtocolError, Pts2Client, Pts2ClientError

from . import console
from .config import AppConfig, config_path

EXIT_FAILURE = 1
EXIT_USAGE = 2


def make_client(cfg: AppConfig) -> Pts2Client:
    return Pts2Client(cfg.to_client_config())


@contextmanager
def client_errors() -> Iterator[None]:
    """Turn client failures into console output and an exit code."""
    try:
        yield
    except ConfigError as e:
        console.err(f"PTS2 config is missing/invalid: {e}")
        console.err(f"Set PTS2_HOST (and credentials) in the environment or in {config_path()}.")
        raise typer.Exit(code=EXIT_USAGE) from e
    except ProtocolError as e:
        console.err(str(e))
        console.err(json.dumps(e.packet.as_dict(), indent=2, ensure_ascii=False))
        raise typer.Exit(code=EXIT_FAILURE) from e
    except Pts2ClientError as e:
        console.err(str(e))
        raise typer.Exit(code=EXIT_FAILURE) from e
