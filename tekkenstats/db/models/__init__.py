from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, NamedTuple

from sqlalchemy import (
    BigInteger,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    validates,
)

from tekkenstats.schemas.player import MainCharacterInfo

if TYPE_CHECKING:
    from tekkenstats.services.enums_mapper import EnumsMapperProtocol

NO_CHARACTER_DATA = "No Character Data"
NO_DAN_RANK = "N/A"


class Base(DeclarativeBase):
    pass


class CharacterStatsKey(NamedTuple):
    """Composite key of a stats row within a player's collection.

    Tuple ordering sorts by character ID first and game version second, which
    is the iteration order every aggregate on :class:`Player` relies on.
    """

    character_id: str
    game_version: int


class Player(Base):
    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    polaris_id: Mapped[str | None] = mapped_column(
        String,
        nullable=True,
        index=True,
        doc="Platform specific identifier shown in game, distinct from player_id.",
    )
    tekken_power: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    region_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        doc="Indexed for the per-region popularity aggregates",
    )
    area_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language: Mapped[str | None] = mapped_column(String(16), nullable=True)
    latest_battle: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Epoch seconds of the newest battle across all character stats.",
    )

    # Relationships. Both collections are owned by the player and loaded eagerly so
    # cascades and the aggregate helpers below never need implicit async IO.
    player_names: Mapped[list[PastPlayerName]] = relationship(
        "PastPlayerName",
        back_populates="player",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PastPlayerName.id",
    )
    character_stats: Mapped[list[CharacterStats]] = relationship(
        "CharacterStats",
        back_populates="player",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: [CharacterStats.character_id, CharacterStats.game_version],
    )

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("tekken_power", 0)
        kwargs.setdefault("latest_battle", 0)
        super().__init__(**kwargs)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Player):
            return NotImplemented
        return self.player_id == other.player_id

    def __hash__(self) -> int:
        return hash(self.player_id)

    def __repr__(self) -> str:
        return f"Player(player_id={self.player_id!r}, name={self.name!r})"

    @property
    def character_stats_map(self) -> dict[CharacterStatsKey, CharacterStats]:
        """Return the stats collection keyed and ordered by :class:`CharacterStatsKey`."""

        ordered = sorted(self.character_stats, key=lambda entry: entry.key)
        return {entry.key: entry for entry in ordered}

    def get_character_stats(self, key: CharacterStatsKey) -> CharacterStats | None:
        return self.character_stats_map.get(key)

    def add_character_stats(self, stats: CharacterStats) -> CharacterStats:
        """Attach ``stats`` to this player, rejecting a second row for the same key."""

        if stats.key in self.character_stats_map:
            raise ValueError(
                f"Player {self.player_id} already has stats for {stats.key}"
            )
        self.character_stats.append(stats)
        return stats

    def update_tekken_power(self, new_power: int, battle_time: int) -> None:
        """Apply ``new_power`` unless the report is older than the latest battle."""

        if battle_time >= (self.latest_battle or 0):
            self.tekken_power = new_power

    def set_latest_battle(self) -> None:
        self.latest_battle = max(
            (entry.latest_battle or 0 for entry in self.character_stats),
            default=0,
        )

    def find_main_character(self) -> tuple[str, str]:
        """Return ``(character_id, dan_rank)`` of the player's main character.

        The main is the character with the most matches (summed over every game
        version) among the characters that reached the highest dan rank. Equal
        match counts resolve to the smallest character ID.
        """

        stats = self.character_stats_map
        if not stats:
            return NO_CHARACTER_DATA, "0"

        highest_dan_rank = max(entry.dan_rank for entry in stats.values())

        total_matches: dict[str, int] = defaultdict(int)
        for key, entry in stats.items():
            total_matches[key.character_id] += entry.total_matches

        candidates = sorted(
            {
                key.character_id
                for key, entry in stats.items()
                if entry.dan_rank == highest_dan_rank
            }
        )
        # max() keeps the first maximum, i.e. the smallest ID among ties.
        main_character = max(candidates, key=lambda character_id: total_matches[character_id])
        return main_character, str(highest_dan_rank)

    def get_most_played_character_info(
        self, mapper: EnumsMapperProtocol
    ) -> MainCharacterInfo:
        character_id, dan_rank = self.find_main_character()
        if character_id == NO_CHARACTER_DATA:
            return MainCharacterInfo(character_name=NO_CHARACTER_DATA, dan_rank=NO_DAN_RANK)

        return MainCharacterInfo(
            character_name=mapper.get_character_name(character_id),
            dan_rank=mapper.get_dan_name(dan_rank),
        )

    def has_player_name(self, name: str) -> bool:
        return any(entry.name == name for entry in self.player_names)

    def record_name_change(self, new_name: str | None) -> bool:
        """Switch to ``new_name``, archiving the current name in the history.

        Returns ``True`` when the display name actually changed.
        """

        if not new_name or new_name == self.name:
            return False
        if self.name and not self.has_player_name(self.name):
            self.player_names.append(PastPlayerName(name=self.name))
        self.name = new_name
        return True


class PastPlayerName(Base):
    """A display name the player used before their current one."""

    __tablename__ = "past_player_names"
    __table_args__ = (
        UniqueConstraint("player_id", "name", name="uq_past_player_names_player_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.player_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)

    player: Mapped[Player] = relationship("Player", back_populates="player_names")


class CharacterStats(Base):
    """Ranked results of one player on one character in one game version."""

    __tablename__ = "character_stats"
    __table_args__ = (
        Index("ix_character_stats_character_version", "character_id", "game_version"),
    )

    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.player_id", ondelete="CASCADE"),
        primary_key=True,
    )
    character_id: Mapped[str] = mapped_column(String, primary_key=True)
    game_version: Mapped[int] = mapped_column(Integer, primary_key=True)
    dan_rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    latest_battle: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    player: Mapped[Player] = relationship("Player", back_populates="character_stats")

    def __init__(self, **kwargs: Any) -> None:
        for column in ("dan_rank", "wins", "losses", "latest_battle"):
            kwargs.setdefault(column, 0)
        super().__init__(**kwargs)

    @property
    def key(self) -> CharacterStatsKey:
        return CharacterStatsKey(self.character_id, self.game_version)

    @property
    def total_matches(self) -> int:
        return (self.wins or 0) + (self.losses or 0)

    def record_result(self, *, won: bool, dan_rank: int, battle_time: int) -> None:
        """Count one battle; rank and timestamp only move forward in time."""

        if won:
            self.wins = (self.wins or 0) + 1
        else:
            self.losses = (self.losses or 0) + 1

        if battle_time >= (self.latest_battle or 0):
            self.dan_rank = dan_rank
            self.latest_battle = battle_time


class Battle(Base):
    """A single ingested ranked battle, kept to reject duplicate reports."""

    __tablename__ = "battles"
    __table_args__ = (Index("ix_battles_version_battle_at", "game_version", "battle_at"),)

    battle_id: Mapped[str] = mapped_column(String, primary_key=True)
    battle_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    game_version: Mapped[int] = mapped_column(Integer, nullable=False)
    battle_type: Mapped[int | None] = mapped_column(Integer, nullable=True)

    player1_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    player1_character_id: Mapped[str] = mapped_column(String, nullable=False)
    player1_dan_rank: Mapped[int] = mapped_column(Integer, nullable=False)
    player2_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    player2_character_id: Mapped[str] = mapped_column(String, nullable=False)
    player2_dan_rank: Mapped[int] = mapped_column(Integer, nullable=False)

    winner: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        doc="1 when player1 won, 2 when player2 won.",
    )

    @validates("winner")
    def _validate_winner(self, key: str, value: int) -> int:
        if value not in (1, 2):
            raise ValueError(f"winner must be 1 or 2, got {value!r}")
        return value


__all__ = [
    "Base",
    "Battle",
    "CharacterStats",
    "CharacterStatsKey",
    "NO_CHARACTER_DATA",
    "NO_DAN_RANK",
    "PastPlayerName",
    "Player",
]
