"""Pydantic schemas shared by repositories, services and scripts."""

from tekkenstats.schemas.battle import (  # noqa: F401
    BattleParticipant,
    BattleReport,
    IngestionResult,
)
from tekkenstats.schemas.player import (  # noqa: F401
    CharacterStatsEntry,
    MainCharacterInfo,
    PlayerProfile,
    PlayerSummary,
)
from tekkenstats.schemas.stats import (  # noqa: F401
    CharacterLeaderboardEntry,
    PopularCharacterProjection,
    RegionPopularityResponse,
    WinrateRankingsResponse,
)
