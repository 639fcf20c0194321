from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from userstore.config import get_settings
from userstore.domain.errors import UserStoreError
from userstore.handler import create_dispatcher
from userstore.orchestrator import UserOrchestrator
from userstore.reporter import print_response, print_user
from userstore.stores.dynamodb import DynamoDBRecordStore
from userstore.stores.factory import available_backends, build_store
from userstore.stores.postgres import PostgresRecordStore
from userstore.utils.logging import configure_logging

app = typer.Typer(help="User record store CLI.")


def _orchestrator() -> UserOrchestrator:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    return UserOrchestrator(build_store(settings))


def _parse_data(data: Optional[str]) -> Dict[str, Any]:
    if not data:
        return {}
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--data is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter("--data must be a JSON object")
    return payload


def _run(coro) -> None:
    try:
        result = asyncio.run(coro)
    except UserStoreError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(code=1)
    print_user(result)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"backend={settings.store_backend} table={settings.table_name} "
        f"region={settings.region} key={settings.table_key} | "
        f"available={', '.join(available_backends())}"
    )


@app.command("init-store")
def init_store() -> None:
    """
    Create the table (DynamoDB) or schema (PostgreSQL) for the configured backend.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    store = build_store(settings)
    if isinstance(store, DynamoDBRecordStore):
        asyncio.run(store.ensure_table())
    elif isinstance(store, PostgresRecordStore):
        asyncio.run(store.ensure_schema())
    typer.echo(f"Store '{store.name}' ready.")


@app.command()
def add(
    user_id: str = typer.Argument(..., help="Id of the user to create."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="User fields as a JSON object."),
) -> None:
    """
    Create a user.
    """
    _run(_orchestrator().add_user(user_id, _parse_data(data)))


@app.command()
def get(user_id: str = typer.Argument(..., help="Id of the user to fetch.")) -> None:
    """
    Fetch a user.
    """
    _run(_orchestrator().get_user(user_id))


@app.command()
def update(
    user_id: str = typer.Argument(..., help="Id of the user to modify."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Fields to change as a JSON object."),
) -> None:
    """
    Apply a partial update to a user.
    """
    _run(_orchestrator().update_user(user_id, _parse_data(data)))


@app.command()
def invoke(
    event_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON event file."),
) -> None:
    """
    Feed an event file through the request dispatcher and print the response.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    event = json.loads(event_file.read_text(encoding="utf-8"))
    response = create_dispatcher(settings)(event)
    print_response(response)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
