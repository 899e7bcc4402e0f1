"""Base repository utilities shared across all repository implementations.

Every entity repository in this package needs the same handful of key based
operations; :class:`BaseRepository` provides them once so the concrete classes
only add their entity specific queries.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tekkenstats.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Async create/read/update/delete helpers for a single mapped entity.

    Subclasses set :attr:`model`. Primary keys are passed straight to
    :meth:`AsyncSession.get`, so composite keys are supplied as tuples in
    column order.
    """

    model: ClassVar[type[Base]]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def add(self, instance: ModelT) -> ModelT:
        """Stage ``instance`` and flush so generated keys become available."""

        self._session.add(instance)
        await self._session.flush()
        return instance

    async def add_all(self, instances: Sequence[ModelT]) -> list[ModelT]:
        self._session.add_all(instances)
        await self._session.flush()
        return list(instances)

    async def get(self, key: Any) -> ModelT | None:
        return await self._session.get(self.model, key)

    async def get_all(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ModelT]:
        query = select(self.model)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def update(self, instance: ModelT) -> ModelT:
        """Merge a possibly detached ``instance`` into the session and flush it."""

        merged = await self._session.merge(instance)
        await self._session.flush()
        return merged

    async def delete(self, instance: ModelT) -> None:
        await self._session.delete(instance)
        await self._session.flush()

    async def delete_by_id(self, key: Any) -> bool:
        """Delete the row identified by ``key``; returns ``False`` when absent."""

        instance = await self.get(key)
        if instance is None:
            return False
        await self.delete(instance)
        return True

    async def exists(self, key: Any) -> bool:
        return await self.get(key) is not None

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(self.model))
        return int(result.scalar_one())
