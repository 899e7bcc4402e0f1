"""Pydantic schemas describing players and their per-character records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MainCharacterInfo(BaseModel):
    """Display names of a player's main character and its dan rank."""

    model_config = ConfigDict(frozen=True)

    character_name: str = Field(description="Character display name or the no-data sentinel")
    dan_rank: str = Field(description="Dan rank display name, or 'N/A' without data")


class CharacterStatsEntry(BaseModel):
    """Results of one character in one game version."""

    model_config = ConfigDict(from_attributes=True)

    character_id: str
    game_version: int
    dan_rank: int = Field(ge=0)
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    latest_battle: int = Field(ge=0, description="Epoch seconds of the newest battle")


class PlayerSummary(BaseModel):
    """Lightweight player listing used by search results."""

    model_config = ConfigDict(from_attributes=True)

    player_id: str
    name: str | None = None
    polaris_id: str | None = None
    tekken_power: int = 0
    region_id: int | None = None
    latest_battle: int = 0


class PlayerProfile(PlayerSummary):
    """Full player view including name history and character records."""

    area_id: int | None = None
    language: str | None = None
    past_names: list[str] = Field(default_factory=list)
    character_stats: list[CharacterStatsEntry] = Field(default_factory=list)
    main_character: MainCharacterInfo
