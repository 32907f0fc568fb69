from __future__ import annotations

import typer

from .commands import config_cmd, datetime_cmd, host_cmd, report_cmd, selftest_cmd, send_cmd
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="pts2",
        help="PTS2 jsonPTS CLI",
        no_args_is_help=True,
    )

    app.command("test")(selftest_cmd.run_test)
    app.command("send")(send_cmd.send_envelope)
    app.add_typer(config_cmd.app, name="config")
    app.add_typer(datetime_cmd.app, name="datetime")
    app.add_typer(report_cmd.app, name="report")
    app.add_typer(host_cmd.app, name="host")

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
    ):
        setup_logging(verbose)

    return app


app = _build_app()
