"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to the CommandRunner.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Optional

import click
from dotenv import load_dotenv

from TrialSearch.cli.commands import (
    DeleteCommand,
    ListCommand,
    LogsCommand,
    OptionsCommand,
    RunCommand,
    SaveCommand,
    parse_criteria,
    parse_records,
)
from TrialSearch.cli.runner import CommandRunner
from TrialSearch.config import AppConfig, load_config, load_config_with_defaults
from TrialSearch.config.app import DEFAULT_CONFIG_PATH
from TrialSearch.core.errors import ValidationError
from TrialSearch.core.fields import list_fields, require_field
from TrialSearch.core.models import QueryLogType
from TrialSearch.core.operators import resolve
from TrialSearch.renderers import render_fields, render_operators

_LOG_TYPES = [log_type.value for log_type in QueryLogType]


def _read_json_arg(stream: IO[str], what: str) -> str:
    text = stream.read()
    if not text.strip():
        raise click.UsageError(f"{what} JSON is empty")
    return text


@click.group(help="TrialSearch: build, save and run advanced trial searches.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env before reading config, so the
    remote token can live there. An override file is merged over the
    defaults when both exist.
    """
    load_dotenv()

    if config_path != DEFAULT_CONFIG_PATH and DEFAULT_CONFIG_PATH.is_file():
        ctx.obj = load_config_with_defaults(config_path)
    else:
        ctx.obj = load_config(config_path)


@cli.command("fields")
def fields_cmd() -> None:
    """List searchable fields with their semantic types."""
    click.echo(render_fields(list_fields()), nl=False)


@cli.command("operators")
@click.argument("field_id")
def operators_cmd(field_id: str) -> None:
    """Print the operators allowed for FIELD_ID."""
    try:
        require_field(field_id)
    except ValidationError as e:
        raise click.UsageError(str(e)) from e
    click.echo(render_operators(resolve(field_id)), nl=False)


@cli.command("options")
@click.argument("field_id")
@click.pass_context
def options_cmd(ctx: click.Context, field_id: str) -> None:
    """Print dropdown options for FIELD_ID, falling back to built-in values."""
    CommandRunner(ctx.obj).run(
        ctx.command.name,
        lambda context: OptionsCommand(values=context.values, field_id=field_id),
    )


@cli.command("save")
@click.argument("criteria_file", type=click.File("r"))
@click.option("--title", required=True, help="Display title.")
@click.option("--description", default=None, help="Optional description.")
@click.option("--query-type", default=None, help="Namespace tag (defaults to search.default_query_type).")
@click.option("--edit", "editing_id", default=None, help="Replace the saved query with this id.")
@click.pass_context
def save_cmd(
    ctx: click.Context,
    criteria_file: IO[str],
    title: str,
    description: Optional[str],
    query_type: Optional[str],
    editing_id: Optional[str],
) -> None:
    """Save the criteria read from CRITERIA_FILE ('-' for stdin)."""
    cfg: AppConfig = ctx.obj
    text = _read_json_arg(criteria_file, "Criteria")
    CommandRunner(cfg).run(
        ctx.command.name,
        lambda context: SaveCommand(
            persistence=context.persistence,
            criteria=parse_criteria(text),
            title=title,
            description=description,
            query_type=query_type or cfg.search.default_query_type,
            editing_id=editing_id,
        ),
    )


@cli.command("list")
@click.option("--query-type", default=None, help="Namespace tag (defaults to search.default_query_type).")
@click.option("--search", "search_text", default=None, help="Filter by title or description.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text.")
@click.pass_context
def list_cmd(ctx: click.Context, query_type: Optional[str], search_text: Optional[str], as_json: bool) -> None:
    """List saved queries."""
    cfg: AppConfig = ctx.obj
    CommandRunner(cfg).run(
        ctx.command.name,
        lambda context: ListCommand(
            persistence=context.persistence,
            query_type=query_type or cfg.search.default_query_type,
            search_text=search_text,
            as_json=as_json,
        ),
    )


@cli.command("delete")
@click.argument("query_id")
@click.option("--query-type", default=None, help="Namespace tag (defaults to search.default_query_type).")
@click.pass_context
def delete_cmd(ctx: click.Context, query_id: str, query_type: Optional[str]) -> None:
    """Delete a saved query from both stores."""
    cfg: AppConfig = ctx.obj
    CommandRunner(cfg).run(
        ctx.command.name,
        lambda context: DeleteCommand(
            persistence=context.persistence,
            query_id=query_id,
            query_type=query_type or cfg.search.default_query_type,
        ),
    )


@cli.command("run")
@click.argument("criteria_file", type=click.File("r"))
@click.argument("records_file", type=click.File("r"))
@click.option("--title", default=None, help="Title recorded in the execution log.")
@click.option("--query-id", default=None, help="Saved query id, when running a saved query.")
@click.pass_context
def run_cmd(
    ctx: click.Context,
    criteria_file: IO[str],
    records_file: IO[str],
    title: Optional[str],
    query_id: Optional[str],
) -> None:
    """Filter RECORDS_FILE with CRITERIA_FILE and record the execution."""
    criteria_text = _read_json_arg(criteria_file, "Criteria")
    records_text = _read_json_arg(records_file, "Records")
    CommandRunner(ctx.obj).run(
        ctx.command.name,
        lambda context: RunCommand(
            execution_log=context.execution_log,
            criteria=parse_criteria(criteria_text),
            records=parse_records(records_text),
            title=title,
            query_id=query_id,
        ),
    )


@cli.command("logs")
@click.option("--search", "search_text", default=None, help="Filter by title or description.")
@click.option("--type", "log_type", type=click.Choice(_LOG_TYPES), default=None, help="Filter by log type.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text.")
@click.pass_context
def logs_cmd(ctx: click.Context, search_text: Optional[str], log_type: Optional[str], as_json: bool) -> None:
    """Show the execution log, removing expired entries first."""
    CommandRunner(ctx.obj).run(
        ctx.command.name,
        lambda context: LogsCommand(
            execution_log=context.execution_log,
            search_text=search_text,
            query_type=log_type,
            as_json=as_json,
        ),
    )
