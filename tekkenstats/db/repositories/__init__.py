"""Repository package for database access layer.

One repository per entity plus :class:`StatsRepository` for the aggregate
queries behind the leaderboards.
"""

from tekkenstats.db.repositories.base import BaseRepository
from tekkenstats.db.repositories.battle_repository import BattleRepository
from tekkenstats.db.repositories.character_stats_repository import (
    CharacterStatsRepository,
)
from tekkenstats.db.repositories.past_player_names_repository import (
    PastPlayerNamesRepository,
)
from tekkenstats.db.repositories.player_repository import PlayerRepository
from tekkenstats.db.repositories.stats_repository import StatsRepository

__all__ = [
    "BaseRepository",
    "BattleRepository",
    "CharacterStatsRepository",
    "PastPlayerNamesRepository",
    "PlayerRepository",
    "StatsRepository",
]
