"""Repository for the player aggregate.

Loaded players always carry their name history and character stats (both
relationships are ``selectin`` loaded), so callers can run the aggregate
helpers on :class:`~tekkenstats.db.models.Player` without further queries.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select

from tekkenstats.db.models import PastPlayerName, Player
from tekkenstats.db.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _like_pattern(query: str) -> str:
    """Build a case-insensitive ``LIKE`` pattern with wildcards escaped."""
    escaped = (
        query.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"


class PlayerRepository(BaseRepository[Player]):
    """Async repository for players and the rows they own."""

    model = Player

    async def get_by_polaris_id(self, polaris_id: str) -> Player | None:
        query = select(Player).where(Player.polaris_id == polaris_id).limit(1)
        result = await self._session.execute(query)
        return result.scalars().first()

    async def get_many(self, player_ids: list[str]) -> dict[str, Player]:
        """Load several players at once, keyed by ID. Unknown IDs are omitted."""
        if not player_ids:
            return {}
        query = select(Player).where(Player.player_id.in_(set(player_ids)))
        result = await self._session.execute(query)
        return {player.player_id: player for player in result.scalars().all()}

    async def search_by_name(self, query: str, *, limit: int = 20) -> list[Player]:
        """Find players whose current or any past name contains ``query``.

        Matching is case-insensitive. Results are ordered by tekken power so the
        strongest namesakes come first.
        """
        if not query or not query.strip():
            return []

        pattern = _like_pattern(query)
        past_name_matches = select(PastPlayerName.player_id).where(
            func.lower(PastPlayerName.name).like(pattern, escape="\\")
        )
        stmt = (
            select(Player)
            .where(
                or_(
                    func.lower(Player.name).like(pattern, escape="\\"),
                    Player.player_id.in_(past_name_matches),
                )
            )
            .order_by(Player.tekken_power.desc(), Player.player_id.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def delete_player(self, player_id: str) -> bool:
        """Delete a player together with its name history and character stats.

        The owned rows are removed by the ORM cascade in the same flush, so the
        whole removal commits or rolls back as one transaction.
        """
        player = await self.get(player_id)
        if player is None:
            return False

        owned_names = len(player.player_names)
        owned_stats = len(player.character_stats)
        await self.delete(player)
        logger.info(
            f"Deleted player {player_id} with {owned_names} past names "
            f"and {owned_stats} character stats rows"
        )
        return True
