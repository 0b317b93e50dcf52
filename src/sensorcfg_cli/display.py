import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from sensorcfg_cli.utils import SensorConfig, SubmitResult

# ========== UI Theme ==========
custom_theme = Theme({
    "ok":   "bold green",
    "warn": "bold yellow",
    "err":  "bold red",
    "info": "bold cyan",
})
console = Console(theme=custom_theme)
err_console = Console(theme=custom_theme, stderr=True)


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.WARNING
    handler = RichHandler(console=err_console, show_path=debug, markup=False)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                        handlers=[handler], force=True)
    # urllib3 is noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if debug else logging.WARNING)


def info_panel(title: str, msg: str, style: str = "cyan"):
    console.print(Panel.fit(Text(msg, no_wrap=False), title=title, border_style=style))


def warn_panel(title: str, msg: str):
    info_panel(title, msg, style="yellow")


def error_panel(title: str, msg: str):
    err_console.print(Panel.fit(Text(msg, no_wrap=False), title=title, border_style="red"))


def show_result(result: SubmitResult, debug: bool = False):
    """Print the response body verbatim; in debug mode wrap it with request details."""
    if not debug:
        # Raw bytes, rich would rewrite control characters and tabs.
        out = click.get_binary_stream("stdout")
        out.write(result.content)
        out.flush()
        return

    msg = f"{result.method} {result.url}\nStatus: {result.status_code}\nResponse: {result.text}"
    if result.ok:
        info_panel("Success", msg, style="green")
    else:
        warn_panel(f"HTTP {result.status_code}", msg)


def show_sensor_config(title: str, config: SensorConfig):
    lines = [f"{name}: {value}" for name, value in config.to_dict().items()]
    info_panel(title, "\n".join(lines))
