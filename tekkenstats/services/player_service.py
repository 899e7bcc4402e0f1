"""Service layer for player profiles and lifecycle."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tekkenstats.db.models import Player
from tekkenstats.db.repositories.player_repository import PlayerRepository
from tekkenstats.schemas.player import (
    CharacterStatsEntry,
    MainCharacterInfo,
    PlayerProfile,
    PlayerSummary,
)
from tekkenstats.services.enums_mapper import EnumsMapperProtocol

logger = logging.getLogger(__name__)


class PlayerNotFoundError(LookupError):
    """Raised when an operation targets a player ID that is not stored."""

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player {player_id} not found")
        self.player_id = player_id


class PlayerService:
    """Read and delete players, resolving display names through ``mapper``."""

    def __init__(self, session: AsyncSession, mapper: EnumsMapperProtocol):
        """Initialize player service with database session and name lookup.

        Args:
            session: Async SQLAlchemy session
            mapper: Character / dan rank name lookup
        """
        self.session = session
        self.mapper = mapper
        self.repository = PlayerRepository(session)

    async def _require_player(self, player_id: str) -> Player:
        player = await self.repository.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    async def get_profile(self, player_id: str) -> PlayerProfile:
        """Return the full profile of ``player_id``.

        Raises:
            PlayerNotFoundError: when the player does not exist
        """
        player = await self._require_player(player_id)
        return PlayerProfile(
            player_id=player.player_id,
            name=player.name,
            polaris_id=player.polaris_id,
            tekken_power=player.tekken_power or 0,
            region_id=player.region_id,
            area_id=player.area_id,
            language=player.language,
            latest_battle=player.latest_battle or 0,
            past_names=[entry.name for entry in player.player_names],
            character_stats=[
                CharacterStatsEntry.model_validate(stats)
                for stats in player.character_stats_map.values()
            ],
            main_character=player.get_most_played_character_info(self.mapper),
        )

    async def get_main_character(self, player_id: str) -> MainCharacterInfo:
        player = await self._require_player(player_id)
        return player.get_most_played_character_info(self.mapper)

    async def search(self, query: str, *, limit: int = 20) -> list[PlayerSummary]:
        players = await self.repository.search_by_name(query, limit=limit)
        return [PlayerSummary.model_validate(player) for player in players]

    async def delete_player(self, player_id: str) -> None:
        """Delete a player and everything it owns in one transaction.

        Raises:
            PlayerNotFoundError: when the player does not exist
        """
        try:
            deleted = await self.repository.delete_player(player_id)
            if not deleted:
                raise PlayerNotFoundError(player_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
