from __future__ import annotations

import json
import sys
from typing import Optional

import typer
import uvicorn

from dualstore.api.app import create_application
from dualstore.config import get_settings
from dualstore.errors import DualStoreError
from dualstore.infrastructure.db_factory import open_stores
from dualstore.migrator import BulkMigrator, persist_report
from dualstore.reporter import print_report
from dualstore.utils.logging import configure_logging

app = typer.Typer(help="Dual Store Sync: MongoDB + PostgreSQL dual-write API.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"PostgreSQL={settings.pg_user}@{settings.pg_host}:{settings.pg_port}/{settings.pg_name} | "
        f"MongoDB database={settings.mongo_database} | "
        f"migrate_on_startup={settings.migrate_on_startup} strict={settings.migration_strict} | "
        f"listen={settings.api_host}:{settings.api_port}"
    )


@app.command("init-schema")
def init_schema() -> None:
    """
    Create the relational tables if they do not exist.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        with open_stores(settings) as handles:
            handles.schema.ensure_schema()
    except DualStoreError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo("Schema ready.")


@app.command()
def migrate(
    persist: bool = typer.Option(
        True, "--persist/--no-persist", help="Write the report under --results-dir."
    ),
    results_dir: str = typer.Option("results", "--results-dir", help="Report output directory."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """
    Ensure the schema, then copy every document into PostgreSQL once.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        with open_stores(settings) as handles:
            handles.schema.ensure_schema()
            report = BulkMigrator(
                handles.document, handles.relational, timeout=settings.store_timeout_seconds
            ).migrate_all()
    except DualStoreError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    if persist:
        persist_report(report, results_dir)
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)
    if report.has_source_failures:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(
        None, "--host", help="Bind address (default from settings)."
    ),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """
    Run startup (schema, migration) and serve POST /users and POST /products.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    uvicorn.run(
        create_application(settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
