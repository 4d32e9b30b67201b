"""daylog week: weekly summary and recent weight."""

from __future__ import annotations

import asyncio

import click

from daylog.core.exceptions import DaylogError


@click.command()
@click.option("--today", default=None, help="Treat this day (YYYY-MM-DD) as today.")
@click.pass_context
def week(ctx: click.Context, today: str | None) -> None:
    """Summarize this week's habits and recent weight."""
    from rich.console import Console
    from rich.table import Table

    from daylog.core.cli.common import open_store
    from daylog.journal.dates import to_day_key, today_key
    from daylog.journal.overview import load_home_overview, load_week_records, weekly_summary

    config, store = open_store(ctx)

    async def _load():
        overview = await load_home_overview(
            store,
            day,
            start_date=config.get("journal.start_date", "2025-12-31"),
            weight_days=config.get_int("journal.weight_history_days", 30),
        )
        return overview, await load_week_records(store, overview.today)

    try:
        day = to_day_key(today) if today else today_key()
        overview, records = asyncio.run(_load())
    except (DaylogError, ValueError) as e:
        raise click.ClickException(str(e)) from None

    summary = weekly_summary(records, overview.today)

    table = Table(title=f"Week of {overview.today}", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("perfect days", f"{summary.perfect_days}/{summary.total_possible_days}")
    table.add_row("completion", f"{summary.completion_rate}%")
    table.add_row("perfect streak", str(summary.current_streak))
    table.add_row("running / work / gym", f"{summary.running_days} / {summary.work_days} / {summary.gym_days}")
    table.add_row("best habit", summary.best_habit)
    if overview.weight_history:
        latest = overview.weight_history[-1]
        table.add_row("latest weight", f"{latest.weight:g} ({latest.date})")
    Console().print(table)
