"""reportgen parse command - parse an LCOV tracefile."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reportgen.analysis import ParserResult, build_text_summary, result_to_dict
from reportgen.config import load_config
from reportgen.core.errors import ReportGenError
from reportgen.core.logging import configure_logging, get_log_file_path
from reportgen.parser import parse_tracefile


def _format_quota(quota: float | None) -> str:
    return "-" if quota is None else f"{quota * 100:.1f}%"


def _make_result_table(result: ParserResult) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Class")
    table.add_column("File")
    table.add_column("Lines", justify="right")
    if result.supports_branch_coverage:
        table.add_column("Branches", justify="right")
    table.add_column("Methods", justify="right")

    for cls in result.iter_classes():
        for code_file in cls.files:
            row = [
                escape(cls.name),
                escape(code_file.path),
                f"{code_file.covered_lines}/{code_file.coverable_lines}",
            ]
            if result.supports_branch_coverage:
                row.append(f"{code_file.covered_branches}/{code_file.total_branches}")
            row.append(str(len(code_file.code_elements)))
            table.add_row(*row)
    return table


def _make_methods_table(result: ParserResult) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Method")
    table.add_column("Class")
    table.add_column("Lines", justify="right")
    table.add_column("Coverage", justify="right")

    for cls in result.iter_classes():
        for element in cls.code_elements:
            table.add_row(
                escape(element.name),
                escape(cls.name),
                f"{element.first_line}-{element.last_line}",
                _format_quota(element.coverage_quota),
            )
    return table


@click.command()
@click.argument("tracefile", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--assembly-name", default=None, help="Name of the synthesized assembly")
@click.option(
    "--file-filter",
    "file_filters",
    multiple=True,
    help="File path filter, +Glob to include or -Glob to exclude (repeatable)",
)
@click.option(
    "--class-filter",
    "class_filters",
    multiple=True,
    help="Class name filter, +Glob to include or -Glob to exclude (repeatable)",
)
@click.option("--methods", "show_methods", is_flag=True, help="Also list methods")
@click.option("--summary", "as_summary", is_flag=True, help="One line per class")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ./reportgen.yaml if present)",
)
@click.pass_context
def parse_command(
    ctx: click.Context,
    tracefile: Path,
    assembly_name: str | None,
    file_filters: tuple[str, ...],
    class_filters: tuple[str, ...],
    show_methods: bool,
    as_summary: bool,
    as_json: bool,
    config_path: Path | None,
) -> None:
    """Parse an LCOV tracefile and print the coverage model.

    TRACEFILE is the LCOV report (e.g., coverage/lcov.info).
    """
    parser_overrides: dict[str, Any] = {}
    if assembly_name:
        parser_overrides["default_assembly_name"] = assembly_name
    if file_filters:
        parser_overrides["file_filters"] = list(file_filters)
    if class_filters:
        parser_overrides["class_filters"] = list(class_filters)

    try:
        overrides = {"parser": parser_overrides} if parser_overrides else {}
        config = load_config(config_path, **overrides)

        if ctx.obj and ctx.obj.get("verbose"):
            config.logging.level = "DEBUG"
        configure_logging(config=config.logging)

        result = parse_tracefile(tracefile, config=config.parser)
    except ReportGenError as e:
        message = e.message
        if log_path := get_log_file_path():
            message += f"\nSee log: {log_path}"
        raise click.ClickException(message) from e

    if as_json:
        click.echo(json.dumps(result_to_dict(result), indent=2))
        return
    if as_summary:
        click.echo(build_text_summary(result))
        return

    console = Console()
    assembly_names = ", ".join(a.name for a in result.assemblies)
    console.print(f"[bold]{result.parser_name}[/bold]  assembly: {assembly_names}", highlight=False)
    if not any(a.classes for a in result.assemblies):
        console.print("No coverage data")
        return
    console.print(_make_result_table(result))
    if show_methods:
        console.print()
        console.print(_make_methods_table(result))
