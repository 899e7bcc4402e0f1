#!/usr/bin/env python
"""Print character popularity and win-rate leaderboards."""
from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from tekkenstats.db.connection import dispose_engine, get_session_context
from tekkenstats.schemas.stats import CharacterLeaderboardEntry
from tekkenstats.services.enums_mapper import get_enums_mapper
from tekkenstats.services.stats_service import StatsService
from tekkenstats.settings import get_settings, validate_environment

load_dotenv()

console = Console()


def _render(title: str, entries: list[CharacterLeaderboardEntry]) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Region", justify="right")
    table.add_column("Character")
    table.add_column("Wins", justify="right")
    table.add_column("Losses", justify="right")
    table.add_column("Battles", justify="right")
    table.add_column("Win %", justify="right")
    for entry in entries:
        table.add_row(
            str(entry.rank),
            "-" if entry.region_id is None else str(entry.region_id),
            entry.character_name,
            str(entry.total_wins),
            str(entry.total_losses),
            str(entry.total_battles),
            f"{entry.winrate_percentage:.2f}",
        )
    return table


async def main(args: argparse.Namespace) -> None:
    settings = get_settings()
    try:
        async with get_session_context() as session:
            service = StatsService(
                session,
                get_enums_mapper(),
                default_game_version=settings.default_game_version,
            )
            popularity = await service.most_popular_by_region(args.game_version)
            console.print(_render("Most popular character per region", popularity.regions))

            rankings = await service.winrate_rankings(
                region_id=args.region,
                game_version=args.game_version,
                min_battles=args.min_battles,
                limit=args.limit,
            )
            console.print(_render("Win-rate rankings", rankings.entries))
    finally:
        await dispose_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--game-version", type=int, default=None)
    parser.add_argument("--region", type=int, default=None, help="Restrict win rates to a region")
    parser.add_argument("--min-battles", type=int, default=0)
    parser.add_argument("--limit", type=int, default=20)
    args = parser.parse_args()

    logging.basicConfig(
        level=get_settings().log_level_numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    validate_environment()
    asyncio.run(main(args))
