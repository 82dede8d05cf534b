#!/usr/bin/env python
"""
Print favorites analytics straight from the database.

Usage:
    python scripts/favorites_report.py popular --top 10
    python scripts/favorites_report.py trend margarita --interval month
    python scripts/favorites_report.py recommend <user-id> --limit 5
    python scripts/favorites_report.py popular --json  # Output as JSON
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

load_dotenv()

from cocktail_favorites.db.connection import dispose_engine, get_session_context
from cocktail_favorites.schemas.favorites import CocktailCount, TrendPoint
from cocktail_favorites.services.favorites import (
    ALLOWED_TOP_VALUES,
    InvalidTopValueError,
    SQLAlchemyFavoriteStore,
)
from cocktail_favorites.services.favorites.trend import normalize_interval
from cocktail_favorites.services.favorites_service import FavoritesService

console = Console()

T = TypeVar("T")


async def _run_query(query: Callable[[FavoritesService], Awaitable[T]]) -> T:
    """Open a session, run ``query`` against a fresh service and clean up."""

    try:
        async with get_session_context() as session:
            return await query(FavoritesService(SQLAlchemyFavoriteStore(session)))
    finally:
        await dispose_engine()


def run_query(query: Callable[[FavoritesService], Awaitable[T]]) -> T:
    return asyncio.run(_run_query(query))


def render_counts(rows: list[CocktailCount], *, title: str, count_label: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Cocktail")
    table.add_column(count_label, justify="right")
    for rank, row in enumerate(rows, start=1):
        table.add_row(str(rank), row.cocktail_id, str(row.count))
    return table


def render_trend(cocktail_id: str, interval: str, points: list[TrendPoint]) -> Table:
    table = Table(title=f"Favorites for {cocktail_id} per {interval}")
    table.add_column("Period")
    table.add_column("Favorites", justify="right")
    label = "%Y-%m" if interval == "month" else "%Y-%m-%d"
    for point in points:
        table.add_row(point.period.strftime(label), str(point.count))
    return table


def _emit_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
def cli() -> None:
    """Favorites analytics reports."""


@cli.command()
@click.option(
    "--top",
    type=click.Choice([str(value) for value in ALLOWED_TOP_VALUES]),
    default="10",
    show_default=True,
    help="Number of cocktails in the ranking.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def popular(top: str, as_json: bool) -> None:
    """Rank cocktails by how many users favorite them."""

    try:
        rows = run_query(lambda service: service.get_popular(top=int(top)))
    except InvalidTopValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--top") from exc

    if as_json:
        _emit_json([row.model_dump(mode="json") for row in rows])
        return
    if not rows:
        console.print("[yellow]No favorites recorded yet[/yellow]")
        return
    console.print(
        render_counts(rows, title=f"Top {top} cocktails", count_label="Favorites")
    )


@cli.command()
@click.argument("cocktail_id")
@click.option(
    "--interval",
    default="day",
    show_default=True,
    help="'day' (last 30 days) or 'month' (last 12 months).",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def trend(cocktail_id: str, interval: str, as_json: bool) -> None:
    """Show how often a cocktail was favorited per day or month."""

    points = run_query(
        lambda service: service.get_trend(cocktail_id=cocktail_id, interval=interval)
    )

    if as_json:
        _emit_json([point.model_dump(mode="json") for point in points])
        return
    if not points:
        console.print(f"[yellow]No favorites for {cocktail_id} in the window[/yellow]")
        return
    console.print(render_trend(cocktail_id, normalize_interval(interval), points))


@cli.command()
@click.argument("user_id")
@click.option("--limit", type=int, default=10, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def recommend(user_id: str, limit: int, as_json: bool) -> None:
    """Suggest cocktails for a user from similar users' favorites."""

    rows = run_query(
        lambda service: service.get_recommendations(user_id=user_id, limit=limit)
    )

    if as_json:
        _emit_json([row.model_dump(mode="json") for row in rows])
        return
    if not rows:
        console.print(f"[yellow]No recommendations for {user_id}[/yellow]")
        return
    console.print(
        render_counts(
            rows, title=f"Recommended for {user_id}", count_label="Similar users"
        )
    )


if __name__ == "__main__":
    sys.exit(cli())
