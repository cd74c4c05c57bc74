"""Tether CLI -- inspect how the activation pipeline sees an interaction.

This module is NEVER imported from tether/__init__.py.
It is only loaded via the ``tether`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install tether[cli]"
    ) from None

from tether.cli.formatting import format_error, get_console


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    envvar="TETHER_CONFIG",
    type=click.Path(dir_okay=False),
    help="Path to a JSON configuration file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Tether: methodology reminders for coding agents."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _load_config(ctx: click.Context):
    """Load the TetherConfig named by --config, or the defaults.

    Formats configuration errors as CLI errors and exits with status 1.
    """
    from tether.exceptions import ConfigurationError
    from tether.models.config import TetherConfig

    config_path = ctx.obj.get("config_path") if ctx.obj else None
    if config_path is None:
        return TetherConfig()
    try:
        return TetherConfig.from_json_file(config_path)
    except ConfigurationError as e:
        format_error(str(e), get_console())
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from tether.cli.commands.extract import extract  # noqa: E402
from tether.cli.commands.evaluate import evaluate  # noqa: E402
from tether.cli.commands.schedule import schedule  # noqa: E402
from tether.cli.commands.log import log  # noqa: E402

cli.add_command(extract)
cli.add_command(evaluate)
cli.add_command(schedule)
cli.add_command(log)
