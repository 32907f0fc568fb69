from __future__ import annotations

import json
from datetime import datetime

import pytest
from typer.testing import CliRunner

from pts2_cli import config, main
from pts2_cli.commands import config_cmd, datetime_cmd, report_cmd, selftest_cmd, send_cmd
from pts2_client import DeviceDateTime, PacketResponse, ProtocolError, TransportError

runner = CliRunner()


class _FakeClient:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.closed = False
        self.rows: list = [{"Transaction": i} for i in range(7)]

    def load_configuration(self):
        self.calls.append(("load_configuration",))
        return [PacketResponse(id=0, type="GetSystemDecimalDigits", data={"Amount": 2})]

    def get_date_time(self):
        self.calls.append(("get_date_time",))
        return DeviceDateTime(date_time=datetime(2024, 5, 6, 7, 8, 9), auto_synchronize=False, utc_offset=180)

    def set_date_time(self, date_time, *, utc_offset=0, auto_synchronize=False):
        self.calls.append(("set_date_time", date_time, utc_offset, auto_synchronize))
        return True

    def report_get_pump_transactions(self, pump, date_from, date_to):
        self.calls.append(("report", pump, date_from, date_to))
        return self.rows

    def send_raw_envelope(self, envelope):
        self.calls.append(("send", envelope))
        return {"Protocol": "jsonPTS", "Packets": [{"Id": 0, "Error": False}]}

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client(monkeypatch):
    client = _FakeClient()
    for mod in (config_cmd, datetime_cmd, report_cmd, selftest_cmd, send_cmd):
        monkeypatch.setattr(mod, "make_client", lambda *_args, **_kwargs: client)
    return client


def test_help_lists_commands() -> None:
    result = runner.invoke(main.app, ["--help"])
    assert result.exit_code == 0
    for name in ("test", "send", "config", "datetime", "report", "host"):
        assert name in result.output


def test_datetime_get_json(fake_client) -> None:
    result = runner.invoke(main.app, ["datetime", "get", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["dateTime"] == "2024-05-06T07:08:09"
    assert data["utcOffset"] == 180
    assert fake_client.closed is True


def test_datetime_set_parses_value(fake_client) -> None:
    result = runner.invoke(main.app, ["datetime", "set", "2024-01-02T03:04:05", "--utc-offset", "60", "--auto-sync"])

    assert result.exit_code == 0
    assert fake_client.calls == [("set_date_time", datetime(2024, 1, 2, 3, 4, 5), 60, True)]
    assert "2024-01-02T03:04:05" in result.output


def test_datetime_set_rejects_bad_value(fake_client) -> None:
    result = runner.invoke(main.app, ["datetime", "set", "tomorrow"])

    assert result.exit_code == 2
    assert fake_client.calls == []


def test_report_transactions_uses_given_bounds(fake_client) -> None:
    result = runner.invoke(
        main.app,
        ["report", "transactions", "--pump", "3", "--from", "2024-01-01T00:00:00", "--to", "2024-01-01T12:00:00", "--json"],
    )

    assert result.exit_code == 0
    assert fake_client.calls == [("report", 3, datetime(2024, 1, 1), datetime(2024, 1, 1, 12))]
    assert len(json.loads(result.output)) == 7


def test_config_load_json(fake_client) -> None:
    result = runner.invoke(main.app, ["config", "load", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"Id": 0, "Type": "GetSystemDecimalDigits", "Error": False, "Data": {"Amount": 2}}]


def test_selftest_runs_safe_flow(fake_client) -> None:
    result = runner.invoke(main.app, ["test", "--pump", "2"])

    assert result.exit_code == 0
    assert [c[0] for c in fake_client.calls] == ["load_configuration", "get_date_time", "report"]
    assert fake_client.calls[2][1] == 2
    assert "Rows: 7" in result.output
    assert "truncated" in result.output


def test_selftest_set_datetime_is_opt_in(fake_client) -> None:
    result = runner.invoke(main.app, ["test", "--set-datetime", "--no-report"])

    assert result.exit_code == 0
    assert [c[0] for c in fake_client.calls] == ["load_configuration", "get_date_time", "set_date_time"]


def test_protocol_error_prints_packet(monkeypatch) -> None:
    class _Failing(_FakeClient):
        def get_date_time(self):
            raise ProtocolError(PacketResponse(id=0, error=True, type="GetDateTime", code=4, message="Busy"))

    monkeypatch.setattr(datetime_cmd, "make_client", lambda *_args, **_kwargs: _Failing())

    result = runner.invoke(main.app, ["datetime", "get"])

    assert result.exit_code == 1
    assert "Busy" in result.output
    assert '"Code": 4' in result.output


def test_transport_error_exit_code(monkeypatch) -> None:
    class _Failing(_FakeClient):
        def load_configuration(self):
            raise TransportError("timeout", "https://pts.local:443/jsonPTS", "PTS2 timeout error")

    monkeypatch.setattr(config_cmd, "make_client", lambda *_args, **_kwargs: _Failing())

    result = runner.invoke(main.app, ["config", "load"])

    assert result.exit_code == 1
    assert "timeout" in result.output


def test_missing_host_is_config_error(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config, "user_config_dir", lambda _: str(tmp_path))
    monkeypatch.delenv("PTS2_HOST", raising=False)

    result = runner.invoke(main.app, ["datetime", "get"])

    assert result.exit_code == 2
    assert "PTS2_HOST" in result.output


def test_send_forwards_envelope_from_file(fake_client, tmp_path) -> None:
    path = tmp_path / "envelope.json"
    path.write_text(json.dumps({"Packets": [{"Id": 0, "Type": "GetPumpsConfiguration"}]}), encoding="utf-8")

    result = runner.invoke(main.app, ["send", str(path)])

    assert result.exit_code == 0
    assert fake_client.calls == [
        ("send", {"Protocol": "jsonPTS", "Packets": [{"Id": 0, "Type": "GetPumpsConfiguration"}]})
    ]
    assert json.loads(result.output)["Protocol"] == "jsonPTS"


def test_send_rejects_other_protocol(fake_client) -> None:
    result = runner.invoke(main.app, ["send", "-"], input=json.dumps({"Protocol": "x", "Packets": []}))

    assert result.exit_code == 2
    assert fake_client.calls == []


def test_config_load_table_prints_markup_like_device_text(monkeypatch) -> None:
    class _Bracketed(_FakeClient):
        def load_configuration(self):
            return [PacketResponse(id=0, type="GetUsersConfiguration", data={"Name": "[/]"})]

    monkeypatch.setattr(config_cmd, "make_client", lambda *_args, **_kwargs: _Bracketed())

    result = runner.invoke(main.app, ["config", "load"])

    assert result.exit_code == 0
    assert result.exception is None
    assert "[/]" in result.output
