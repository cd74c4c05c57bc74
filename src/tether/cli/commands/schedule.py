"""tether schedule -- preview the injection cadence."""

from __future__ import annotations

import click

from tether.cli.formatting import format_error, format_schedule, get_console


@click.command()
@click.option("-e", "--every", "every_n", default=None, type=int, help="Inject every N interactions (default from config).")
@click.option("-c", "--count", default=10, type=click.IntRange(1, 1000), help="Number of interactions to show.")
@click.option("-p", "--phase", default=None, help="Phase whose cadence override applies.")
@click.pass_context
def schedule(ctx: click.Context, every_n: int | None, count: int, phase: str | None) -> None:
    """Show which interactions would receive reminders."""
    from tether.cli import _load_config
    from tether.exceptions import ConfigurationError
    from tether.scheduler import Scheduler

    console = get_console()
    config = _load_config(ctx)
    try:
        if every_n is None:
            scheduler = Scheduler.from_config(config.schedule)
        else:
            scheduler = Scheduler(
                every_n,
                phase_overrides=config.schedule.phase_overrides,
                inject_on_first_interaction=config.schedule.inject_on_first_interaction,
            )
    except ConfigurationError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_schedule([scheduler.should_inject(n, phase) for n in range(1, count + 1)], console)
