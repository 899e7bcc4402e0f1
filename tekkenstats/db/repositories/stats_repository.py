"""Stats repository for leaderboard aggregates.

This repository handles:
- Character popularity grouped by region
- Character win-rate rankings (global or per region)

All sums are computed by the database; rows come back already shaped as
:class:`~tekkenstats.schemas.stats.PopularCharacterProjection`.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Float, case, cast, func, select
from sqlalchemy.sql import ColumnElement, Select

from tekkenstats.db.models import CharacterStats, Player
from tekkenstats.db.repositories.base import BaseRepository
from tekkenstats.schemas.stats import PopularCharacterProjection

_WINRATE_PRECISION = 2


def _aggregate_columns() -> tuple[ColumnElement[Any], ...]:
    """Return the labelled SUM / win-rate expressions shared by every query."""

    total_wins = func.sum(CharacterStats.wins)
    total_losses = func.sum(CharacterStats.losses)
    total_battles = func.sum(CharacterStats.wins + CharacterStats.losses)
    winrate = case(
        (total_battles > 0, cast(total_wins, Float) * 100.0 / total_battles),
        else_=0.0,
    )
    return (
        total_wins.label("total_wins"),
        total_losses.label("total_losses"),
        total_battles.label("total_battles"),
        winrate.label("winrate_percentage"),
    )


def _to_projection(row: Any, region_id: int | None) -> PopularCharacterProjection:
    return PopularCharacterProjection(
        region_id=region_id,
        character_id=row.character_id,
        total_wins=int(row.total_wins or 0),
        total_losses=int(row.total_losses or 0),
        total_battles=int(row.total_battles or 0),
        winrate_percentage=round(float(row.winrate_percentage or 0.0), _WINRATE_PRECISION),
    )


class StatsRepository(BaseRepository[CharacterStats]):
    """Repository for aggregate statistics over ``character_stats``."""

    model = CharacterStats

    @staticmethod
    def _apply_version_filter(query: Select[Any], game_version: int | None) -> Select[Any]:
        if game_version is None:
            return query
        return query.where(CharacterStats.game_version == game_version)

    async def popular_characters(
        self,
        *,
        game_version: int | None = None,
        region_id: int | None = None,
        limit: int | None = None,
    ) -> list[PopularCharacterProjection]:
        """Sum wins, losses and battles for every (region, character) pair.

        Players without a region are left out. Rows are ordered by region, then
        by battles (most first), then by character ID. ``region_id`` narrows the
        result to one region and ``limit`` caps the number of rows returned.
        """

        total_wins, total_losses, total_battles, winrate = _aggregate_columns()
        query = (
            select(
                Player.region_id.label("region_id"),
                CharacterStats.character_id.label("character_id"),
                total_wins,
                total_losses,
                total_battles,
                winrate,
            )
            .select_from(CharacterStats)
            .join(Player, CharacterStats.player_id == Player.player_id)
            .where(Player.region_id.is_not(None))
            .group_by(Player.region_id, CharacterStats.character_id)
            .order_by(
                Player.region_id.asc(),
                func.sum(CharacterStats.wins + CharacterStats.losses).desc(),
                CharacterStats.character_id.asc(),
            )
        )
        query = self._apply_version_filter(query, game_version)
        if region_id is not None:
            query = query.where(Player.region_id == region_id)
        if limit:
            query = query.limit(limit)

        result = await self._session.execute(query)
        return [_to_projection(row, row.region_id) for row in result.all()]

    async def character_winrates(
        self,
        *,
        region_id: int | None = None,
        game_version: int | None = None,
        min_battles: int = 0,
        limit: int | None = None,
    ) -> list[PopularCharacterProjection]:
        """Rank characters by win rate, optionally within a single region.

        Characters below ``min_battles`` are dropped. Ordering is win rate
        descending, then battles descending, then character ID.
        """

        total_wins, total_losses, total_battles, winrate = _aggregate_columns()
        battles_expr = func.sum(CharacterStats.wins + CharacterStats.losses)
        winrate_expr = case(
            (
                battles_expr > 0,
                cast(func.sum(CharacterStats.wins), Float) * 100.0 / battles_expr,
            ),
            else_=0.0,
        )

        query = (
            select(
                CharacterStats.character_id.label("character_id"),
                total_wins,
                total_losses,
                total_battles,
                winrate,
            )
            .select_from(CharacterStats)
            .group_by(CharacterStats.character_id)
        )
        if region_id is not None:
            query = query.join(Player, CharacterStats.player_id == Player.player_id).where(
                Player.region_id == region_id
            )
        query = self._apply_version_filter(query, game_version)
        if min_battles > 0:
            query = query.having(battles_expr >= min_battles)

        query = query.order_by(
            winrate_expr.desc(),
            battles_expr.desc(),
            CharacterStats.character_id.asc(),
        )
        if limit:
            query = query.limit(limit)

        result = await self._session.execute(query)
        return [_to_projection(row, region_id) for row in result.all()]

    async def region_ids(self) -> list[int]:
        """Return every region that has at least one player with stats."""

        query = (
            select(Player.region_id)
            .join(CharacterStats, CharacterStats.player_id == Player.player_id)
            .where(Player.region_id.is_not(None))
            .distinct()
            .order_by(Player.region_id.asc())
        )
        result = await self._session.execute(query)
        return [int(region_id) for region_id in result.scalars().all()]
