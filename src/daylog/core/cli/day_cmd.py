"""daylog show / daylog set: read and edit a single day."""

from __future__ import annotations

import asyncio
from typing import Any

import click

from daylog.journal.models import BOOLEAN_FLAGS, DailyRecord

_TRUTHY = {"1", "true", "yes", "on", "y"}
_EDITABLE = set(DailyRecord.default("2000-01-01").to_payload()) - {"date", "exercises"}


def parse_assignment(text: str) -> tuple[str, Any]:
    """Parse ``FIELD=VALUE`` into a draft update."""
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise click.BadParameter(f"expected FIELD=VALUE, got {text!r}")
    if name not in _EDITABLE:
        raise click.BadParameter(f"{name!r} is not editable (choose from {', '.join(sorted(_EDITABLE))})")
    if name in BOOLEAN_FLAGS:
        return name, raw.strip().lower() in _TRUTHY
    return name, raw


def render_record(record: DailyRecord) -> None:
    from rich.console import Console
    from rich.table import Table

    table = Table(title=record.date, show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    for name, value in record.to_payload().items():
        if name == "date":
            continue
        if name == "exercises":
            value = ", ".join(f"{e['name']} ({len(e['sets'])} sets)" for e in value) or None
        table.add_row(name, "" if value is None else str(value))
    table.add_row("streak_check", str(record.streak_check))
    Console().print(table)


@click.command()
@click.argument("day")
@click.pass_context
def show(ctx: click.Context, day: str) -> None:
    """Show the journal entry for DAY (YYYY-MM-DD)."""
    from daylog.core.cli.common import open_store
    from daylog.sync.draft_manager import EntryDraftManager

    _, store = open_store(ctx)

    async def _load() -> EntryDraftManager:
        manager = EntryDraftManager(store)
        await manager.select_day(day)
        return manager

    try:
        manager = asyncio.run(_load())
    except ValueError as e:
        raise click.BadParameter(str(e)) from None
    if manager.error:
        raise click.ClickException(f"Could not load {day}: {manager.error}")
    render_record(manager.draft)


@click.command("set")
@click.argument("day")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def set_fields(ctx: click.Context, day: str, assignments: tuple[str, ...]) -> None:
    """Set fields on DAY, e.g. ``daylog set 2026-02-01 running=true daily_steps=9000``."""
    from daylog.core.cli.common import open_store
    from daylog.sync.draft_manager import EntryDraftManager

    updates = dict(parse_assignment(a) for a in assignments)
    config, store = open_store(ctx)

    async def _apply() -> EntryDraftManager:
        manager = EntryDraftManager.from_config(store, config)
        await manager.select_day(day)
        if manager.error is None:
            manager.update(**updates)
            await manager.flush()
        await manager.close()
        return manager

    try:
        manager = asyncio.run(_apply())
    except ValueError as e:
        raise click.BadParameter(str(e)) from None
    if manager.error:
        raise click.ClickException(f"Could not save {day}: {manager.error}")
    click.echo(f"{manager.active_key}: {manager.status}")
