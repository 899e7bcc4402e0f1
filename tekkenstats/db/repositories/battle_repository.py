"""Repository for ingested battle records."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select

from tekkenstats.db.models import Battle
from tekkenstats.db.repositories.base import BaseRepository


class BattleRepository(BaseRepository[Battle]):
    """Battle rows exist only to detect reports that were already applied."""

    model = Battle

    async def existing_ids(self, battle_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``battle_ids`` that is already stored."""
        candidates = set(battle_ids)
        if not candidates:
            return set()
        query = select(Battle.battle_id).where(Battle.battle_id.in_(candidates))
        result = await self._session.execute(query)
        return set(result.scalars().all())

    async def latest_battle_time(self) -> int | None:
        result = await self._session.execute(select(func.max(Battle.battle_at)))
        return result.scalar_one_or_none()
