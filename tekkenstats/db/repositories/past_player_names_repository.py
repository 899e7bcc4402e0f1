"""Repository for the historical display names of players."""

from __future__ import annotations

from sqlalchemy import select

from tekkenstats.db.models import PastPlayerName
from tekkenstats.db.repositories.base import BaseRepository


class PastPlayerNamesRepository(BaseRepository[PastPlayerName]):
    """Standard CRUD access to ``past_player_names`` keyed by row ID."""

    model = PastPlayerName

    async def list_for_player(self, player_id: str) -> list[PastPlayerName]:
        """Return a player's past names in the order they were recorded."""
        query = (
            select(PastPlayerName)
            .where(PastPlayerName.player_id == player_id)
            .order_by(PastPlayerName.id.asc())
        )
        result = await self._session.execute(query)
        return list(result.scalars().all())
