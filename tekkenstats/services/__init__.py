"""Domain services built on top of the repositories."""

from tekkenstats.services.enums_mapper import (
    EnumsMapper,
    EnumsMapperProtocol,
    get_enums_mapper,
)
from tekkenstats.services.ingestion_service import (
    BattleIngestionService,
    InvalidBattleReportError,
)
from tekkenstats.services.player_service import PlayerNotFoundError, PlayerService
from tekkenstats.services.stats_service import StatsService

__all__ = [
    "BattleIngestionService",
    "EnumsMapper",
    "EnumsMapperProtocol",
    "InvalidBattleReportError",
    "PlayerNotFoundError",
    "PlayerService",
    "StatsService",
    "get_enums_mapper",
]
