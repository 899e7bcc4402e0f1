"""Pydantic read shapes for leaderboard aggregates."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PopularCharacterProjection(BaseModel):
    """Aggregated ranked results of one character, globally or within a region.

    Produced directly from the grouped SQL query in
    :class:`tekkenstats.db.repositories.stats_repository.StatsRepository`; the
    application never recomputes the sums.
    """

    model_config = ConfigDict(frozen=True)

    region_id: int | None = Field(
        None, description="Region the totals belong to (null for global totals)"
    )
    character_id: str = Field(description="Character identifier")
    total_wins: int = Field(ge=0, description="Sum of wins across matching stats rows")
    total_losses: int = Field(ge=0, description="Sum of losses across matching stats rows")
    total_battles: int = Field(ge=0, description="Wins plus losses")
    winrate_percentage: float = Field(
        ge=0.0,
        le=100.0,
        description="wins / battles * 100, rounded to two decimals (0 with no battles)",
    )


class CharacterLeaderboardEntry(BaseModel):
    """Projection row enriched with a display name and a 1-based position."""

    rank: int = Field(ge=1, description="Position within the leaderboard")
    region_id: int | None = Field(None, description="Region filter applied, if any")
    character_id: str = Field(description="Character identifier")
    character_name: str = Field(description="Display name resolved by the enums mapper")
    total_wins: int = Field(ge=0)
    total_losses: int = Field(ge=0)
    total_battles: int = Field(ge=0)
    winrate_percentage: float = Field(ge=0.0, le=100.0)


class RegionPopularityResponse(BaseModel):
    """Most played character for every region that has ranked data."""

    game_version: int | None = Field(
        None, description="Game version filter applied (null = every version)"
    )
    regions: list[CharacterLeaderboardEntry] = Field(
        default_factory=list,
        description="One entry per region ordered by region ID",
    )


class WinrateRankingsResponse(BaseModel):
    """Characters ordered by win rate."""

    game_version: int | None = Field(None, description="Game version filter applied")
    region_id: int | None = Field(None, description="Region filter applied")
    min_battles: int = Field(0, ge=0, description="Minimum battles required to be listed")
    entries: list[CharacterLeaderboardEntry] = Field(default_factory=list)
