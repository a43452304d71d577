"""``depcatalog`` command-line interface."""

from __future__ import annotations

import json
import sys

import click

from depcatalog.app import bootstrap, serve
from depcatalog.config import load_config
from depcatalog.stores.sqlite import connect, init_schema


@click.group()
@click.option("--db", "db_path", envvar="DEPCATALOG_DB_PATH", help="Path to the catalog SQLite database.")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None) -> None:
    """Service dependency catalog."""
    config = load_config()
    if db_path:
        config.database.path = db_path
    ctx.obj = config


@cli.command("init-db")
@click.pass_obj
def init_db(config) -> None:  # type: ignore[no-untyped-def]
    """Create the catalog schema if it does not exist."""
    conn = connect(config.database.path)
    try:
        init_schema(conn)
    finally:
        conn.close()
    click.echo(f"schema ready: {config.database.path}")


@cli.command("serve")
@click.option("--port", type=int, default=None, help="Override DEPCATALOG_API_PORT.")
@click.pass_obj
def serve_cmd(config, port: int | None) -> None:  # type: ignore[no-untyped-def]
    """Serve the REST API."""
    if port is not None:
        config.api.port = port
    serve(bootstrap(config))


@cli.command("graph")
@click.option("--team", default=None, help="Team id: team view.")
@click.option("--service", default=None, help="Service id: upstream subgraph.")
@click.option("--dependency", default=None, help="Dependency id: subgraph of its owning service.")
@click.option("--indent", type=int, default=2, show_default=True)
@click.pass_obj
def graph_cmd(config, team: str | None, service: str | None, dependency: str | None, indent: int) -> None:  # type: ignore[no-untyped-def]
    """Print a graph as JSON."""
    app = bootstrap(config, json_logs=not sys.stderr.isatty())
    try:
        graph = app.graph_service.get_graph(team=team, service=service, dependency=dependency)
    finally:
        app.close()
    click.echo(json.dumps(graph.to_dict(), indent=indent or None))
