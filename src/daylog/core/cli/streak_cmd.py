"""daylog streak / restore / checkin."""

from __future__ import annotations

import asyncio

import click

from daylog.core.exceptions import DaylogError


def _engine(ctx: click.Context):
    from daylog.core.cli.common import open_store
    from daylog.streak.engine import StreakEngine

    config, store = open_store(ctx)
    return StreakEngine.from_config(store, config)


def render_state(state) -> None:
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Streak", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("current streak", str(state.current_streak))
    table.add_row("last check-in", state.last_checked_day_key or "never")
    table.add_row("checked today", "yes" if state.is_checked_today else "no")
    if state.can_restore:
        table.add_row("restorable", f"yes ({state.missed_days} missed day(s))")
    else:
        table.add_row("restorable", "no")
    Console().print(table)


@click.command()
@click.option("--today", default=None, help="Treat this day (YYYY-MM-DD) as today.")
@click.pass_context
def streak(ctx: click.Context, today: str | None) -> None:
    """Show the current check-in streak."""
    engine = _engine(ctx)
    try:
        state = asyncio.run(engine.get_state(today))
    except (DaylogError, ValueError) as e:
        raise click.ClickException(str(e)) from None
    render_state(state)


@click.command()
@click.option("--today", default=None, help="Treat this day (YYYY-MM-DD) as today.")
@click.pass_context
def restore(ctx: click.Context, today: str | None) -> None:
    """Fill in check-ins for 1-2 missed days to keep the streak alive."""
    engine = _engine(ctx)
    try:
        restored = asyncio.run(engine.restore(today))
    except (DaylogError, ValueError) as e:
        raise click.ClickException(str(e)) from None
    click.echo(f"Restored {len(restored)} day(s): {', '.join(restored)}")


@click.command()
@click.option("--today", default=None, help="Treat this day (YYYY-MM-DD) as today.")
@click.pass_context
def checkin(ctx: click.Context, today: str | None) -> None:
    """Check in for today."""
    engine = _engine(ctx)
    try:
        state = asyncio.run(engine.check_in(today))
    except (DaylogError, ValueError) as e:
        raise click.ClickException(str(e)) from None
    click.echo(f"Checked in. Current streak: {state.current_streak}")
