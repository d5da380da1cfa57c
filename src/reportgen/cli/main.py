"""reportgen CLI - reportgen command."""

import click

from reportgen import __version__
from reportgen.cli.parse import parse_command


@click.group()
@click.version_option(version=__version__, prog_name="reportgen")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """reportgen - Turn LCOV tracefiles into a structured coverage model."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


cli.add_command(parse_command, name="parse")


if __name__ == "__main__":
    cli()
