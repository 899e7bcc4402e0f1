"""Shared fixtures: an in-memory SQLite session and a dict-backed name lookup."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tekkenstats.db.models import Base, CharacterStats, Player
from tests import _ensure_repo_on_path


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()


class FakeEnumsMapper:
    """In-memory double satisfying :class:`EnumsMapperProtocol`."""

    def __init__(self) -> None:
        self.characters = {"6": "Jin", "8": "Kazuya", "12": "Devil Jin", "21": "Nina"}
        self.dan_ranks = {"0": "Beginner", "15": "Garyu", "25": "Tekken King"}
        self.calls: list[tuple[str, str]] = []

    def get_character_name(self, character_id: str) -> str:
        self.calls.append(("character", character_id))
        return self.characters.get(character_id, f"?{character_id}")

    def get_dan_name(self, dan_rank: str) -> str:
        self.calls.append(("dan", dan_rank))
        return self.dan_ranks.get(dan_rank, f"?{dan_rank}")


@pytest.fixture
def mapper() -> FakeEnumsMapper:
    return FakeEnumsMapper()


@pytest.fixture
def make_player() -> Callable[..., Player]:
    """Build a transient player with ``(character_id, version, rank, wins, losses, latest)`` rows."""

    def factory(
        player_id: str = "player-1",
        *,
        stats: list[tuple[str, int, int, int, int, int]] | None = None,
        **fields: object,
    ) -> Player:
        player = Player(player_id=player_id, **fields)
        for character_id, game_version, dan_rank, wins, losses, latest in stats or []:
            player.add_character_stats(
                CharacterStats(
                    character_id=character_id,
                    game_version=game_version,
                    dan_rank=dan_rank,
                    wins=wins,
                    losses=losses,
                    latest_battle=latest,
                )
            )
        return player

    return factory


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session for integration-style tests."""
    pytest.importorskip("aiosqlite")
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    async with async_session() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()
