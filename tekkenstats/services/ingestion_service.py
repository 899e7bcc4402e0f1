"""Apply ranked battle reports to players and their character stats."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from tekkenstats.db.models import Battle, CharacterStatsKey, Player
from tekkenstats.db.repositories.battle_repository import BattleRepository
from tekkenstats.db.repositories.character_stats_repository import (
    CharacterStatsRepository,
)
from tekkenstats.db.repositories.player_repository import PlayerRepository
from tekkenstats.schemas.battle import BattleParticipant, BattleReport, IngestionResult

logger = logging.getLogger(__name__)


class InvalidBattleReportError(ValueError):
    """Raised when a report is well formed but cannot describe a real battle."""


def validate_battle_report(report: BattleReport) -> None:
    """Raise :class:`InvalidBattleReportError` for reports no real battle can produce."""
    if report.player1.player_id == report.player2.player_id:
        raise InvalidBattleReportError(
            f"Battle {report.battle_id} lists player {report.player1.player_id} on both sides"
        )


class BattleIngestionService:
    """Turns a batch of battle reports into player and stats updates.

    Reports are applied oldest first inside a single transaction. Reports whose
    ``battle_id`` was already stored, or that repeat within the batch, are
    counted as duplicates and skipped.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.players = PlayerRepository(session)
        self.battles = BattleRepository(session)

    async def ingest(self, reports: Sequence[BattleReport]) -> IngestionResult:
        ordered = sorted(reports, key=lambda report: report.battle_at)
        for report in ordered:
            validate_battle_report(report)

        seen = await self.battles.existing_ids(report.battle_id for report in ordered)
        player_ids = [
            participant.player_id
            for report in ordered
            for participant in (report.player1, report.player2)
        ]

        processed = 0
        duplicates = 0
        try:
            players = await self.players.get_many(player_ids)
            for report in ordered:
                if report.battle_id in seen:
                    duplicates += 1
                    continue
                seen.add(report.battle_id)
                self._apply_report(report, players)
                processed += 1
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Ingested {processed} battles ({duplicates} duplicates skipped)")
        return IngestionResult(processed=processed, duplicates=duplicates)

    def _apply_report(self, report: BattleReport, players: dict[str, Player]) -> None:
        for side, participant in ((1, report.player1), (2, report.player2)):
            player = players.get(participant.player_id)
            if player is None:
                player = self._create_player(participant)
                players[player.player_id] = player
            elif report.battle_at >= (player.latest_battle or 0):
                self._refresh_profile(player, participant)

            stats = CharacterStatsRepository.get_or_create(
                player,
                CharacterStatsKey(participant.character_id, report.game_version),
            )
            # The power guard compares against the previous latest battle, so it
            # has to run before latest_battle is recomputed.
            if participant.tekken_power is not None:
                player.update_tekken_power(participant.tekken_power, report.battle_at)
            stats.record_result(
                won=report.winner == side,
                dan_rank=participant.dan_rank,
                battle_time=report.battle_at,
            )
            player.set_latest_battle()

        self.session.add(
            Battle(
                battle_id=report.battle_id,
                battle_at=report.battle_at,
                game_version=report.game_version,
                battle_type=report.battle_type,
                player1_id=report.player1.player_id,
                player1_character_id=report.player1.character_id,
                player1_dan_rank=report.player1.dan_rank,
                player2_id=report.player2.player_id,
                player2_character_id=report.player2.character_id,
                player2_dan_rank=report.player2.dan_rank,
                winner=report.winner,
            )
        )

    def _create_player(self, participant: BattleParticipant) -> Player:
        player = Player(
            player_id=participant.player_id,
            name=participant.name,
            polaris_id=participant.polaris_id,
            region_id=participant.region_id,
            area_id=participant.area_id,
            language=participant.language,
        )
        self.session.add(player)
        logger.debug(f"Registered new player {participant.player_id}")
        return player

    @staticmethod
    def _refresh_profile(player: Player, participant: BattleParticipant) -> None:
        """Copy profile fields from a report that is not older than the player's data."""
        if player.record_name_change(participant.name):
            logger.debug(f"Player {player.player_id} is now known as {participant.name!r}")
        if participant.polaris_id:
            player.polaris_id = participant.polaris_id
        if participant.region_id is not None:
            player.region_id = participant.region_id
        if participant.area_id is not None:
            player.area_id = participant.area_id
        if participant.language:
            player.language = participant.language
