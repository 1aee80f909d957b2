"""Command-line interface for dbview."""

import asyncio
import json
import sys

import click

from .config import settings
from .graph.elements import GraphNode, Position
from .graph.synchronizer import synchronize
from .logging_config import setup_logging
from .mutations.session import ID_COLUMN, SessionState
from .notices import NoticeLog
from .output.formatter import format_graph, format_notices, format_rows
from .schema.errors import SchemaLoadError, SchemaValidationError
from .schema.loader import load_snapshot
from .schema.models import ColumnType
from .transport.client import DbViewerClient
from .workspace import SchemaWorkspace

FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)


def _make_client(api_url: str) -> DbViewerClient:
    return DbViewerClient(api_url)


def _fail(notices: NoticeLog, exit_code: int = 1) -> None:
    """Print active notices to stderr and exit."""
    click.echo(format_notices(notices.active), err=True)
    sys.exit(exit_code)


@click.group()
@click.version_option(package_name="dbview")
@click.option(
    "--api-url",
    envvar="DBVIEW_API_URL",
    default=None,
    help="Backend URL (defaults to DBVIEW_API_URL or http://localhost:8080)",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, api_url: str | None, debug: bool):
    """dbview: inspect and edit a database through its schema graph."""
    setup_logging(debug or settings.debug)
    ctx.obj = {"api_url": api_url or settings.api_url}


@main.command()
@FORMAT_OPTION
@click.pass_obj
def schema(obj: dict, output_format: str):
    """Fetch the schema and print it as a positioned graph.

    Exit codes:
      0 - Success
      1 - The backend could not be reached or refused
    """

    async def run() -> SchemaWorkspace:
        async with _make_client(obj["api_url"]) as client:
            workspace = SchemaWorkspace(client)
            await workspace.refresh()
            return workspace

    workspace = asyncio.run(run())
    if workspace.notices.has_active:
        _fail(workspace.notices)

    click.echo(format_graph(workspace.nodes, workspace.edges, output_format))  # type: ignore


@main.command()
@click.argument("snapshot_file", type=click.Path(exists=True))
@click.option(
    "--previous",
    "previous_file",
    type=click.Path(exists=True),
    default=None,
    help="JSON graph from an earlier run; its node positions are kept",
)
@FORMAT_OPTION
def layout(snapshot_file: str, previous_file: str | None, output_format: str):
    """Lay out a saved schema snapshot without contacting the backend.

    SNAPSHOT_FILE is a YAML or JSON file in the /db-info response format.

    Exit codes:
      0 - Success
      2 - File or schema error
    """
    try:
        snapshot = load_snapshot(snapshot_file)
    except SchemaLoadError as e:
        click.echo(f"Error loading file: {e}", err=True)
        sys.exit(2)
    except SchemaValidationError as e:
        click.echo(f"Schema validation error: {e}", err=True)
        for err in e.errors:
            click.echo(f"  - {err['loc']}: {err['msg']}", err=True)
        sys.exit(2)

    previous_nodes: list[GraphNode] = []
    if previous_file:
        try:
            previous_nodes = _read_previous_nodes(previous_file)
        except (OSError, ValueError, KeyError, TypeError) as e:
            click.echo(f"Error loading previous layout: {e}", err=True)
            sys.exit(2)

    nodes, edges = synchronize(previous_nodes, [], snapshot)
    click.echo(format_graph(nodes, edges, output_format))  # type: ignore


def _read_previous_nodes(path: str) -> list[GraphNode]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [
        GraphNode(
            name=node["id"],
            position=Position(float(node["position"]["x"]), float(node["position"]["y"])),
        )
        for node in data["nodes"]
    ]


@main.command()
@click.argument("sql", required=False)
@FORMAT_OPTION
@click.pass_obj
def query(obj: dict, sql: str | None, output_format: str):
    """Run an ad-hoc query and print the result.

    SQL defaults to the configured default query.

    Exit codes:
      0 - Success
      1 - The query failed
    """

    async def run():
        async with _make_client(obj["api_url"]) as client:
            workspace = SchemaWorkspace(client)
            runner = workspace.query_runner
            await runner.run(sql)
            return runner

    runner = asyncio.run(run())
    output = format_rows(runner.results, runner.error, output_format)  # type: ignore
    if runner.error and output_format == "text":
        click.echo(output, err=True)
    else:
        click.echo(output)
    sys.exit(1 if runner.error else 0)


@main.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def upload(obj: dict, data_file: str):
    """Upload a CSV file as a new table.

    Exit codes:
      0 - Success
      1 - Upload or schema refresh failed
    """

    async def run() -> tuple[bool, SchemaWorkspace]:
        async with _make_client(obj["api_url"]) as client:
            workspace = SchemaWorkspace(client)
            ok = await workspace.upload(data_file)
            return ok, workspace

    ok, workspace = asyncio.run(run())
    if not ok:
        _fail(workspace.notices)

    click.echo(f"Uploaded {data_file}; schema has {len(workspace.nodes)} table(s)")


@main.command()
@click.argument("table")
@FORMAT_OPTION
@click.pass_obj
def rows(obj: dict, table: str, output_format: str):
    """Print every row of TABLE."""

    async def run():
        async with _make_client(obj["api_url"]) as client:
            workspace = SchemaWorkspace(client)
            session = await workspace.open_table(table)
            return session, list(session.rows)

    session, table_rows = asyncio.run(run())
    if session.state == SessionState.FAILED:
        _fail(session.notices)

    click.echo(format_rows(table_rows, format=output_format))  # type: ignore


@main.command("set-cell")
@click.argument("table")
@click.argument("record_id")
@click.argument("column")
@click.argument("value")
@click.pass_obj
def set_cell(obj: dict, table: str, record_id: str, column: str, value: str):
    """Set COLUMN of the row RECORD_ID in TABLE to VALUE.

    Exit codes:
      0 - Success
      1 - The backend refused the change
      2 - The column cannot be edited
    """
    if column == ID_COLUMN:
        click.echo(f"Column {ID_COLUMN!r} cannot be edited", err=True)
        sys.exit(2)

    _run_row_mutation(
        obj["api_url"],
        table,
        lambda session: session.edit_cell(record_id, column, value),
        f"Updated {table}.{column} for id {record_id}",
    )


@main.command("insert-row")
@click.argument("table")
@click.pass_obj
def insert_row(obj: dict, table: str):
    """Insert a row with default values into TABLE."""
    _run_row_mutation(
        obj["api_url"],
        table,
        lambda session: session.insert_row(),
        f"Inserted a row into {table}",
    )


@main.command("delete-row")
@click.argument("table")
@click.argument("record_id")
@click.pass_obj
def delete_row(obj: dict, table: str, record_id: str):
    """Delete the row RECORD_ID from TABLE."""
    _run_row_mutation(
        obj["api_url"],
        table,
        lambda session: session.delete_row(record_id),
        f"Deleted id {record_id} from {table}",
    )


def _run_row_mutation(api_url: str, table: str, mutate, success_message: str) -> None:
    """Open an editing session on a table, apply one mutation, and report."""

    async def run():
        async with _make_client(api_url) as client:
            workspace = SchemaWorkspace(client)
            session = await workspace.open_table(table)
            if session.state == SessionState.FAILED:
                return False, session
            ok = await mutate(session)
            session.close()
            return ok, session

    ok, session = asyncio.run(run())
    if not ok:
        _fail(session.notices)

    click.echo(success_message)


@main.command("add-column")
@click.argument("table")
@click.argument("column")
@click.option(
    "--type",
    "column_type",
    type=click.Choice([t.value for t in ColumnType], case_sensitive=False),
    default=ColumnType.VARCHAR.value,
    help="Column type",
)
@click.pass_obj
def add_column(obj: dict, table: str, column: str, column_type: str):
    """Add COLUMN to TABLE and print the refreshed schema graph.

    Exit codes:
      0 - Success
      1 - The backend refused the change
      2 - The column name is empty
    """
    if not column.strip():
        click.echo("Column name must not be empty", err=True)
        sys.exit(2)

    async def run() -> tuple[bool, SchemaWorkspace]:
        async with _make_client(obj["api_url"]) as client:
            workspace = SchemaWorkspace(client)
            ok = await workspace.columns.add_column(table, column, column_type)
            return ok, workspace

    ok, workspace = asyncio.run(run())
    if not ok or workspace.notices.has_active:
        _fail(workspace.notices)

    click.echo(f"Added column {column.strip()} to {table}")
    click.echo()
    click.echo(format_graph(workspace.nodes, workspace.edges))


@main.command("export-url")
@click.argument("table")
@click.pass_obj
def export_url(obj: dict, table: str):
    """Print the CSV download link for TABLE."""
    client = _make_client(obj["api_url"])
    click.echo(client.export_url(table))
    asyncio.run(client.aclose())


if __name__ == "__main__":
    main()
