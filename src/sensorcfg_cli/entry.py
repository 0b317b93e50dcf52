#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import sys
from typing import Optional

import click

from sensorcfg_cli.client import HttpClient, TransportError
from sensorcfg_cli.display import console, error_panel, setup_logging, show_result, show_sensor_config
from sensorcfg_cli.key_manager import edit_body
from sensorcfg_cli.utils import Config, ConfigError, SensorConfig, SubmitResult

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


# ========== Application Orchestrator ==========
class App:
    def __init__(self, cfg: Config):
        self.cfg = cfg
        self.http = HttpClient(cfg)

    def put_config(self, body: str, endpoint: Optional[str] = None, edit: bool = False) -> int:
        if edit:
            body = self._edit(body)
            if body is None:
                return EXIT_INTERRUPTED
        if self.cfg.debug:
            console.print(f"[info]PUT config ->[/info] {self.cfg.endpoint if endpoint is None else endpoint}")
        return self._run(lambda: self.http.submit(body, endpoint))

    def show_status(self, endpoint: Optional[str] = None) -> int:
        return self._run(lambda: self.http.fetch_status(endpoint), on_result=self._show_reported)

    # ========== Internal helpers ==========
    def _run(self, call, on_result=None) -> int:
        try:
            result: SubmitResult = call()
        except TransportError as e:
            error_panel("Network error.", str(e))
            return e.exit_code
        # HTTP error statuses still count as a completed request
        show_result(result, debug=self.cfg.debug)
        if on_result is not None:
            on_result(result)
        return 0

    def _show_reported(self, result: SubmitResult):
        if not (self.cfg.debug and result.ok):
            return
        try:
            reported = SensorConfig.from_json(result.text)
        except ValueError as e:
            logger.debug("Status body is not a sensor config: %s", e)
            return
        show_sensor_config("Reported config", reported)

    def _edit(self, body: str) -> Optional[str]:
        try:
            return edit_body(body)
        except KeyboardInterrupt:
            console.print("[warn] Edit cancelled.（Ctrl+C）[/warn]")
        except EOFError:
            console.print("[warn] Edit cancelled.（Ctrl+D）[/warn]")
        return None


def _validate_body(ctx, param, value):
    if value is None:
        return None
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise click.BadParameter(f"not valid UTF-8 ({e.reason})")
    try:
        json.loads(value)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON ({e})")
    return value


def _build_body(body, sensor_type, frequency, power, squelch) -> str:
    fields = {
        "sensor_type": sensor_type,
        "frequency": frequency,
        "power": power,
        "squelch": squelch,
    }
    overrides = {k: v for k, v in fields.items() if v is not None}
    if body is not None:
        if overrides:
            flags = ", ".join("--" + k.replace("_", "-") for k in overrides)
            raise click.UsageError(f"--body cannot be combined with {flags}.")
        return body
    return SensorConfig(**overrides).to_json()


# ========== CLI with Click ==========

@click.group(invoke_without_command=True)
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="TOML config file.  [default: ~/.sensorcfg.toml]")
@click.option("--timeout", type=click.IntRange(min=0),
              help="Request timeout in seconds, 0 waits forever.  [default: 30]")
@click.option("--insecure", is_flag=True, help="Whether disable tls verification.")
@click.option("--debug", "-d", is_flag=True, help="Start with debug mode.")
@click.pass_context
def cli(ctx, config_path, timeout, insecure, debug):
    """
    sensorcfg: push a radio configuration to a sensor endpoint.

    Without a command, PUTs the default configuration.
    """
    setup_logging(debug)

    class Args:
        pass
    args = Args()
    args.config = config_path
    args.timeout = timeout
    args.insecure = insecure
    args.debug = debug
    try:
        cfg = Config.init_from_args(args)
    except ConfigError as e:
        raise click.UsageError(str(e))
    logger.debug("Config: %s", cfg)
    ctx.obj = {"cfg": cfg}

    if ctx.invoked_subcommand is None:
        ctx.invoke(put_cmd)


@cli.command("put")
@click.option("--endpoint", help="Config endpoint.  [default: localhost:3000/sensor/config]")
@click.option("--body", callback=_validate_body,
              help="Raw JSON request body, sent exactly as given.")
@click.option("--sensor-type", help="Sensor type.  [default: radio]")
@click.option("--frequency", type=int, help="Frequency in Hz.  [default: 2100000]")
@click.option("--power", type=int, help="Transmit power.  [default: 300]")
@click.option("--squelch", type=int, help="Squelch threshold.  [default: 200]")
@click.option("--edit", "-e", is_flag=True, help="Edit the body before sending.")
@click.pass_context
def put_cmd(ctx, endpoint=None, body=None, sensor_type=None, frequency=None,
            power=None, squelch=None, edit=False):
    """Send the sensor configuration with a PUT request."""
    cfg = ctx.obj["cfg"]
    payload = _build_body(body, sensor_type, frequency, power, squelch)
    ctx.exit(App(cfg).put_config(payload, endpoint, edit=edit))


@cli.command("status")
@click.option("--endpoint", help="Status endpoint.  [default: localhost:3000/sensor/status]")
@click.pass_context
def status_cmd(ctx, endpoint):
    """Show the configuration the sensor last reported."""
    cfg = ctx.obj["cfg"]
    ctx.exit(App(cfg).show_status(endpoint))


def main():
    cli(prog_name="sensorcfg")


if __name__ == "__main__":
    sys.exit(main())
