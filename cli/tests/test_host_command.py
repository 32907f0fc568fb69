from __future__ import annotations

from typer.testing import CliRunner

from pts2_cli import config, main

runner = CliRunner()


def _use_tmp_config(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config, "user_config_dir", lambda _: str(tmp_path))
    monkeypatch.delenv("PTS2_HOST", raising=False)


def test_host_set_show_clear(tmp_path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)

    result = runner.invoke(main.app, ["host", "set", "192.168.1.117"])
    assert result.exit_code == 0
    assert config.load_file_config().device.host == "192.168.1.117"

    result = runner.invoke(main.app, ["host", "show"])
    assert "192.168.1.117 (config)" in result.output

    result = runner.invoke(main.app, ["host", "clear"])
    assert result.exit_code == 0
    assert config.load_file_config().device.host == ""


def test_host_set_rejects_invalid_host(tmp_path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)

    result = runner.invoke(main.app, ["host", "set", "http://bad/host"])

    assert result.exit_code == 2
    assert not tmp_path.joinpath("config.toml").exists()


def test_host_show_prefers_env(tmp_path, monkeypatch) -> None:
    _use_tmp_config(tmp_path, monkeypatch)
    monkeypatch.setenv("PTS2_HOST", "10.1.1.1")

    result = runner.invoke(main.app, ["host", "show"])

    assert "10.1.1.1 (env)" in result.output
