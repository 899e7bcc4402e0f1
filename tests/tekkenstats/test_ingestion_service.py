"""Tests for applying battle reports through :class:`BattleIngestionService`."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tekkenstats.db.models import Battle, CharacterStatsKey
from tekkenstats.db.repositories.player_repository import PlayerRepository
from tekkenstats.schemas.battle import BattleReport
from tekkenstats.services.ingestion_service import (
    BattleIngestionService,
    InvalidBattleReportError,
)


def _report(
    battle_id: str,
    battle_at: int,
    *,
    winner: int = 1,
    game_version: int = 10901,
    p1: dict[str, Any] | None = None,
    p2: dict[str, Any] | None = None,
) -> BattleReport:
    player1 = {
        "player_id": "alpha",
        "name": "Alpha",
        "polaris_id": "1111-2222",
        "character_id": 6,
        "dan_rank": 15,
        "tekken_power": 100_000,
        "region_id": 1,
    }
    player2 = {
        "player_id": "bravo",
        "name": "Bravo",
        "character_id": "8",
        "dan_rank": 14,
        "tekken_power": 90_000,
        "region_id": 2,
    }
    player1.update(p1 or {})
    player2.update(p2 or {})
    return BattleReport.model_validate(
        {
            "battle_id": battle_id,
            "battle_at": battle_at,
            "game_version": game_version,
            "player1": player1,
            "player2": player2,
            "winner": winner,
        }
    )


@pytest.mark.asyncio
async def test_ingest_creates_players_and_stats(session: AsyncSession) -> None:
    result = await BattleIngestionService(session).ingest([_report("b1", 1_000)])

    assert (result.processed, result.duplicates) == (1, 0)
    repo = PlayerRepository(session)
    alpha = await repo.get("alpha")
    bravo = await repo.get("bravo")
    assert alpha is not None and bravo is not None

    alpha_stats = alpha.get_character_stats(CharacterStatsKey("6", 10901))
    bravo_stats = bravo.get_character_stats(CharacterStatsKey("8", 10901))
    assert (alpha_stats.wins, alpha_stats.losses, alpha_stats.dan_rank) == (1, 0, 15)
    assert (bravo_stats.wins, bravo_stats.losses, bravo_stats.dan_rank) == (0, 1, 14)
    assert alpha.latest_battle == 1_000
    assert alpha.tekken_power == 100_000
    assert alpha.polaris_id == "1111-2222"
    assert bravo.region_id == 2


@pytest.mark.asyncio
async def test_ingest_skips_known_and_repeated_battles(session: AsyncSession) -> None:
    service = BattleIngestionService(session)
    await service.ingest([_report("b1", 1_000)])

    result = await service.ingest([_report("b1", 1_000), _report("b2", 2_000), _report("b2", 2_000)])

    assert (result.processed, result.duplicates) == (1, 2)
    battles = await session.execute(select(func.count()).select_from(Battle))
    assert battles.scalar_one() == 2
    alpha = await PlayerRepository(session).get("alpha")
    assert alpha.get_character_stats(CharacterStatsKey("6", 10901)).wins == 2


@pytest.mark.asyncio
async def test_late_report_keeps_newer_power_and_rank(session: AsyncSession) -> None:
    service = BattleIngestionService(session)
    await service.ingest([_report("new", 5_000, p1={"tekken_power": 150_000, "dan_rank": 20})])

    await service.ingest(
        [_report("old", 4_000, winner=2, p1={"tekken_power": 120_000, "dan_rank": 18})]
    )

    alpha = await PlayerRepository(session).get("alpha")
    stats = alpha.get_character_stats(CharacterStatsKey("6", 10901))
    assert alpha.tekken_power == 150_000
    assert alpha.latest_battle == 5_000
    assert stats.dan_rank == 20
    assert (stats.wins, stats.losses) == (1, 1)


@pytest.mark.asyncio
async def test_batch_is_applied_oldest_first(session: AsyncSession) -> None:
    await BattleIngestionService(session).ingest(
        [
            _report("later", 3_000, p1={"tekken_power": 300}),
            _report("earlier", 2_000, p1={"tekken_power": 200}),
        ]
    )

    alpha = await PlayerRepository(session).get("alpha")
    assert alpha.tekken_power == 300
    assert alpha.latest_battle == 3_000


@pytest.mark.asyncio
async def test_name_change_is_recorded_in_history(session: AsyncSession) -> None:
    service = BattleIngestionService(session)
    await service.ingest([_report("b1", 1_000)])

    await service.ingest([_report("b2", 2_000, p1={"name": "AlphaPrime"})])
    await service.ingest([_report("b0", 500, p1={"name": "Ancient"})])

    alpha = await PlayerRepository(session).get("alpha")
    assert alpha.name == "AlphaPrime"
    assert [entry.name for entry in alpha.player_names] == ["Alpha"]


@pytest.mark.asyncio
async def test_new_version_gets_separate_stats_row(session: AsyncSession) -> None:
    service = BattleIngestionService(session)
    await service.ingest([_report("b1", 1_000, game_version=10901)])
    await service.ingest([_report("b2", 2_000, game_version=11001)])

    alpha = await PlayerRepository(session).get("alpha")
    assert list(alpha.character_stats_map) == [
        CharacterStatsKey("6", 10901),
        CharacterStatsKey("6", 11001),
    ]


@pytest.mark.asyncio
async def test_same_player_on_both_sides_is_rejected(session: AsyncSession) -> None:
    report = _report("mirror", 1_000, p2={"player_id": "alpha"})

    with pytest.raises(InvalidBattleReportError):
        await BattleIngestionService(session).ingest([report])

    assert await PlayerRepository(session).get("alpha") is None


def test_report_schema_rejects_unknown_winner() -> None:
    with pytest.raises(ValidationError):
        _report("bad", 1_000, winner=3)
