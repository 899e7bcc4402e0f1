"""Input schemas for ranked battle reports delivered by the ingestion feed."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class BattleParticipant(BaseModel):
    """One side of a reported battle."""

    player_id: str = Field(min_length=1, description="Internal player identifier")
    name: str | None = Field(None, description="Display name at the time of the battle")
    polaris_id: str | None = Field(None, description="Platform specific player identifier")
    character_id: str = Field(min_length=1, description="Character played")
    dan_rank: int = Field(ge=0, description="Dan rank code after the battle")
    tekken_power: int | None = Field(None, ge=0, description="Power rating after the battle")
    region_id: int | None = None
    area_id: int | None = None
    language: str | None = None

    @field_validator("character_id", mode="before")
    @classmethod
    def _coerce_character_id(cls, value: object) -> object:
        # The upstream feed sends numeric character codes.
        if isinstance(value, int):
            return str(value)
        return value


class BattleReport(BaseModel):
    """A single ranked battle as reported by the upstream replay feed."""

    battle_id: str = Field(min_length=1)
    battle_at: int = Field(ge=0, description="Epoch seconds when the battle finished")
    game_version: int = Field(ge=0)
    battle_type: int | None = None
    player1: BattleParticipant
    player2: BattleParticipant
    winner: Literal[1, 2] = Field(description="1 when player1 won, 2 when player2 won")


class IngestionResult(BaseModel):
    """Counters returned after applying a batch of reports."""

    processed: int = Field(0, ge=0)
    duplicates: int = Field(0, ge=0)
