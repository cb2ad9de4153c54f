"""
Demo data seeding script for surreal-crud.

Generates deterministic pseudo-random users and inserts them into SurrealDB in
batches through `RecordService.create_many`.
"""

from __future__ import annotations

import asyncio
import json
import random
import sys
import time
from datetime import UTC, datetime

import typer

from surreal_crud.config import get_settings
from surreal_crud.infrastructure.connection import ConnectionManager
from surreal_crud.models import USER_TABLE, User
from surreal_crud.service import RecordService
from surreal_crud.utils.logging import configure_logging

app = typer.Typer(help="Generate demo users and load them into SurrealDB.")

_FIRST_NAMES = ["Ann", "Bruno", "Chen", "Dana", "Emil", "Farah", "Goran", "Hana", "Ivo", "Joan"]
_LAST_NAMES = ["Smith", "Li", "Novak", "Garcia", "Kim", "Okafor", "Rossi", "Berg"]
_DOMAINS = ["example.com", "test.dev", "mail.net"]


def _generate_users(rows: int, seed: int) -> list[dict]:
    rng = random.Random(seed)
    now = datetime.now(UTC).isoformat()
    users: list[dict] = []
    for i in range(rows):
        first = rng.choice(_FIRST_NAMES)
        last = rng.choice(_LAST_NAMES)
        user = User(
            name=f"{first} {last}",
            email=f"{first.lower()}.{last.lower()}{i}@{rng.choice(_DOMAINS)}",
            age=rng.randint(18, 80),
            created_at=now,
        )
        users.append(user.to_payload())
    return users


def _batches(items: list[dict], batch_size: int):
    for start in range(0, len(items), batch_size):
        yield items[start : start + batch_size]


async def _load(users: list[dict], table: str, batch_size: int, truncate: bool) -> int:
    settings = get_settings()
    async with ConnectionManager(settings.db_config()) as manager:
        service: RecordService[dict] = RecordService(table, manager)
        if truncate:
            await service.delete_all()
        created = 0
        for batch in _batches(users, batch_size):
            created += len(await service.create_many(batch))
        return created


@app.command()
def main(
    rows: int = typer.Option(
        100,
        "--rows",
        "-r",
        help="Number of users to generate.",
    ),
    batch_size: int = typer.Option(
        25,
        "--batch-size",
        "-b",
        help="Users inserted concurrently per batch.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    table: str = typer.Option(
        USER_TABLE,
        "--table",
        "-t",
        help="Target table.",
    ),
    truncate: bool = typer.Option(
        False,
        "--truncate",
        help="Delete every record in the table before loading.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the generated users as JSON instead of inserting them.",
    ),
) -> None:
    """
    Generate demo users and optionally load them into SurrealDB.
    """
    users = _generate_users(rows, seed)
    if dry_run:
        typer.echo(json.dumps(users, indent=2, ensure_ascii=False))
        return

    configure_logging(level=get_settings().log_level)
    start = time.perf_counter()
    typer.echo(f"Loading {rows:,} users into '{table}' (batch={batch_size}, seed={seed})")
    created = asyncio.run(_load(users, table, batch_size, truncate))
    duration = time.perf_counter() - start
    typer.echo(f"Created {created:,} records in {duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
