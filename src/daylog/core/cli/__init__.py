"""daylog CLI: inspect and edit journal days, streaks and check-ins."""

import click

from daylog import __version__


@click.group()
@click.version_option(version=__version__, package_name="daylog")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Config file (YAML or JSON).")
@click.pass_context
def main(ctx: click.Context, config_path: str | None) -> None:
    """daylog: your daily habit journal."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# Register subcommands
from .day_cmd import set_fields, show
from .overview_cmd import week
from .streak_cmd import checkin, restore, streak

main.add_command(show)
main.add_command(set_fields)
main.add_command(streak)
main.add_command(restore)
main.add_command(checkin)
main.add_command(week)
