from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

import typer

from surreal_crud.config import get_settings
from surreal_crud.errors import QueryError
from surreal_crud.infrastructure.connection import ConnectionManager
from surreal_crud.reporter import print_page
from surreal_crud.results import format_record
from surreal_crud.service import OrderBy, RecordService, run_statement
from surreal_crud.utils.logging import configure_logging

app = typer.Typer(help="surreal-crud CLI: inspect and query a SurrealDB database.")


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_pairs(pairs: Optional[List[str]], option: str) -> Dict[str, Any]:
    """Turn repeated `name=value` options into a dict; values are JSON when they parse."""
    parsed: Dict[str, Any] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected name=value, got '{pair}'", param_hint=option)
        parsed[name.strip()] = _parse_value(value)
    return parsed


def _manager() -> ConnectionManager:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return ConnectionManager(settings.db_config())


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.surreal_username}@{settings.surreal_url} "
        f"ns={settings.surreal_namespace} db={settings.surreal_database} | "
        f"env={settings.app_env} log_level={settings.log_level}"
    )


@app.command()
def ping() -> None:
    """
    Open and close a connection to check that the database is reachable.
    """

    async def _ping() -> None:
        async with _manager():
            pass

    try:
        asyncio.run(_ping())
    except Exception as exc:  # noqa: BLE001 - report any connection failure to the user
        typer.echo(f"Connection failed: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Connection OK.")


@app.command()
def count(
    table: str = typer.Argument(..., help="Table to count."),
    where: Optional[List[str]] = typer.Option(
        None, "--where", "-w", help="Exact-match filter as field=value (repeatable)."
    ),
) -> None:
    """
    Count records in a table, optionally filtered.
    """
    conditions = _parse_pairs(where, "--where")

    async def _count() -> int:
        async with _manager() as manager:
            return await RecordService(table, manager).count(conditions or None)

    typer.echo(str(asyncio.run(_count())))


@app.command("list")
def list_records(
    table: str = typer.Argument(..., help="Table to list."),
    page: int = typer.Option(1, "--page", "-p", help="1-based page number."),
    page_size: int = typer.Option(10, "--page-size", "-n", help="Records per page."),
    order_by: Optional[str] = typer.Option(None, "--order-by", "-o", help="Field to sort by."),
    desc: bool = typer.Option(False, "--desc", help="Sort descending."),
    where: Optional[List[str]] = typer.Option(
        None, "--where", "-w", help="Exact-match filter as field=value (repeatable)."
    ),
) -> None:
    """
    Show one page of records as a table.
    """
    conditions = _parse_pairs(where, "--where")
    ordering = OrderBy(order_by, "DESC" if desc else "ASC") if order_by else None

    async def _list():
        async with _manager() as manager:
            service: RecordService[Dict[str, Any]] = RecordService(table, manager)
            return await service.paginate(page, page_size, conditions or None, ordering)

    print_page(table, asyncio.run(_list()))


@app.command()
def query(
    statement: str = typer.Argument(..., help="SurrealQL statement to execute."),
    var: Optional[List[str]] = typer.Option(
        None, "--var", "-v", help="Statement variable as name=value (repeatable)."
    ),
) -> None:
    """
    Execute a raw statement and print the result as JSON.
    """
    variables = _parse_pairs(var, "--var")

    async def _query() -> List[Any]:
        async with _manager() as manager:
            rows = await run_statement(manager.get(), statement, variables or None)
            return [format_record(row) for row in rows]

    try:
        rows = asyncio.run(_query())
    except QueryError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(rows, indent=2, default=str, ensure_ascii=False))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
