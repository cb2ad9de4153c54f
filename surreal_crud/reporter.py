from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from surreal_crud.service import PaginateResult


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _columns(rows: List[Mapping[str, Any]]) -> List[str]:
    """Union of row keys in first-seen order, with `id` always first."""
    columns: List[str] = ["id"]
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def build_page_table(table_name: str, result: PaginateResult[Any]) -> Table:
    """
    Render one page of records as a rich table.

    Records may be dicts or Pydantic models; models are dumped by alias.
    """
    rows: List[Dict[str, Any]] = [
        row.model_dump(by_alias=True) if hasattr(row, "model_dump") else dict(row)
        for row in result.data
    ]
    table = Table(
        title=f"{table_name}",
        box=box.ROUNDED,
        caption=(
            f"Page {result.page} of {result.total_pages} │ "
            f"{result.total:,} records │ page size {result.page_size}"
        ),
    )
    columns = _columns(rows)
    for name in columns:
        if name == "id":
            table.add_column(name, style="cyan", no_wrap=True)
        else:
            table.add_column(name)
    for row in rows:
        table.add_row(*(_cell(row.get(name)) for name in columns))
    return table


def print_page(table_name: str, result: PaginateResult[Any], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not result.data:
        console.print(f"[yellow]No {table_name} records on page {result.page}.[/yellow]")
        return
    console.print(build_page_table(table_name, result))


__all__ = ["build_page_table", "print_page"]
