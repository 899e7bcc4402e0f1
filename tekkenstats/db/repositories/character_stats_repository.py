"""Repository for per-character, per-version ranked statistics."""

from __future__ import annotations

from sqlalchemy import select

from tekkenstats.db.models import CharacterStats, CharacterStatsKey, Player
from tekkenstats.db.repositories.base import BaseRepository


class CharacterStatsRepository(BaseRepository[CharacterStats]):
    """Access ``character_stats`` rows by ``(player_id, character_id, game_version)``."""

    model = CharacterStats

    async def get_for_player(
        self, player_id: str, key: CharacterStatsKey
    ) -> CharacterStats | None:
        return await self.get((player_id, key.character_id, key.game_version))

    async def list_for_player(
        self, player_id: str, *, game_version: int | None = None
    ) -> list[CharacterStats]:
        query = select(CharacterStats).where(CharacterStats.player_id == player_id)
        if game_version is not None:
            query = query.where(CharacterStats.game_version == game_version)
        query = query.order_by(
            CharacterStats.character_id.asc(), CharacterStats.game_version.asc()
        )
        result = await self._session.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def get_or_create(player: Player, key: CharacterStatsKey) -> CharacterStats:
        """Return the player's row for ``key``, attaching a zeroed one if missing.

        Works on the already loaded collection, so new rows are persisted by the
        player's cascade on the next flush.
        """
        existing = player.get_character_stats(key)
        if existing is not None:
            return existing
        return player.add_character_stats(
            CharacterStats(character_id=key.character_id, game_version=key.game_version)
        )
