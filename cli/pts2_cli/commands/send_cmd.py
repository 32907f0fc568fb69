from __future__ import annotations

import json
import sys

import typer

from .. import console
from ..config import load_config
from ..http import client_errors, make_client


def _read_envelope(source: str):
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            with open(source, "r", encoding="utf-8") as f:
                text = f.read()
        return json.loads(text)
    except OSError as e:
        console.err(f"Cannot read {source}: {e}")
        raise typer.Exit(code=2)
    except json.JSONDecodeError as e:
        console.err(f"Invalid JSON in {source}: {e}")
        raise typer.Exit(code=2)


def send_envelope(
        source: str = typer.Argument(..., help="JSON file with a jsonPTS envelope, or - for stdin."),
):
    """Forward a raw jsonPTS envelope and print the controller's reply."""
    envelope = _read_envelope(source)
    if not isinstance(envelope, dict) or not isinstance(envelope.get("Packets"), list):
        console.err("Envelope must be an object with a Packets array.")
        raise typer.Exit(code=2)
    protocol = envelope.get("Protocol")
    if protocol is not None and protocol != "jsonPTS":
        console.err(f"PROTOCOL_MISMATCH: {protocol}")
        raise typer.Exit(code=2)

    with client_errors():
        client = make_client(load_config())
        try:
            reply = client.send_raw_envelope({"Protocol": "jsonPTS", "Packets": envelope["Packets"]})
        finally:
            client.close()
    console.print_json(reply)
