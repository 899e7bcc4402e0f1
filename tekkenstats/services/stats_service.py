"""Service layer for character leaderboards."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from tekkenstats.db.repositories.stats_repository import StatsRepository
from tekkenstats.schemas.stats import (
    CharacterLeaderboardEntry,
    PopularCharacterProjection,
    RegionPopularityResponse,
    WinrateRankingsResponse,
)
from tekkenstats.services.enums_mapper import EnumsMapperProtocol

logger = logging.getLogger(__name__)


class StatsService:
    """Builds leaderboard responses from :class:`StatsRepository` projections."""

    def __init__(
        self,
        session: AsyncSession,
        mapper: EnumsMapperProtocol,
        *,
        default_game_version: int | None = None,
    ):
        self.session = session
        self.mapper = mapper
        self.default_game_version = default_game_version
        self.repository = StatsRepository(session)

    def _resolve_version(self, game_version: int | None) -> int | None:
        return self.default_game_version if game_version is None else game_version

    def _entry(
        self, position: int, projection: PopularCharacterProjection
    ) -> CharacterLeaderboardEntry:
        return CharacterLeaderboardEntry(
            rank=position,
            region_id=projection.region_id,
            character_id=projection.character_id,
            character_name=self.mapper.get_character_name(projection.character_id),
            total_wins=projection.total_wins,
            total_losses=projection.total_losses,
            total_battles=projection.total_battles,
            winrate_percentage=projection.winrate_percentage,
        )

    def _to_entries(
        self, projections: Iterable[PopularCharacterProjection]
    ) -> list[CharacterLeaderboardEntry]:
        return [
            self._entry(position, projection)
            for position, projection in enumerate(projections, start=1)
        ]

    async def most_popular_by_region(
        self, game_version: int | None = None
    ) -> RegionPopularityResponse:
        """Return the most played character of every region.

        The repository already orders rows by region, battles desc and character
        ID, so the first row seen for a region is its winner.
        """
        version = self._resolve_version(game_version)
        projections = await self.repository.popular_characters(game_version=version)

        top_by_region: dict[int, PopularCharacterProjection] = {}
        for projection in projections:
            if projection.region_id is None:
                continue
            top_by_region.setdefault(projection.region_id, projection)

        regions = [
            self._entry(1, top_by_region[region_id]) for region_id in sorted(top_by_region)
        ]
        logger.debug(f"Resolved most popular characters for {len(regions)} regions")
        return RegionPopularityResponse(game_version=version, regions=regions)

    async def region_popularity(
        self,
        region_id: int,
        *,
        game_version: int | None = None,
        limit: int = 10,
    ) -> list[CharacterLeaderboardEntry]:
        """Return the ``limit`` most played characters of a single region."""
        version = self._resolve_version(game_version)
        projections = await self.repository.popular_characters(
            game_version=version, region_id=region_id, limit=limit
        )
        return self._to_entries(projections)

    async def winrate_rankings(
        self,
        *,
        region_id: int | None = None,
        game_version: int | None = None,
        min_battles: int = 0,
        limit: int | None = None,
    ) -> WinrateRankingsResponse:
        """Rank characters by win rate, globally or inside one region."""
        version = self._resolve_version(game_version)
        projections = await self.repository.character_winrates(
            region_id=region_id,
            game_version=version,
            min_battles=min_battles,
            limit=limit,
        )
        return WinrateRankingsResponse(
            game_version=version,
            region_id=region_id,
            min_battles=min_battles,
            entries=self._to_entries(projections),
        )
