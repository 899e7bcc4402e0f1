"""Translate character IDs and dan rank codes into display names."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from tekkenstats.settings import get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class EnumsMapperProtocol(Protocol):
    """Name lookup consumed by :meth:`Player.get_most_played_character_info`."""

    def get_character_name(self, character_id: str) -> str:
        """Return the display name for ``character_id``."""

    def get_dan_name(self, dan_rank: str) -> str:
        """Return the display name for the dan rank code ``dan_rank``."""


def unknown_label(code: str) -> str:
    return f"Unknown ({code})"


class EnumsMapper:
    """Dictionary backed implementation of :class:`EnumsMapperProtocol`.

    Codes are compared as strings so integer and string inputs resolve to the
    same entry. Unknown codes map to ``"Unknown (<code>)"`` and are logged once.
    """

    def __init__(
        self,
        characters: Mapping[str, str],
        dan_ranks: Mapping[str, str],
    ) -> None:
        self._characters = {str(code): name for code, name in characters.items()}
        self._dan_ranks = {str(code): name for code, name in dan_ranks.items()}
        self._reported_unknown: set[tuple[str, str]] = set()

    @classmethod
    def from_file(cls, path: Path) -> EnumsMapper:
        """Load a mapper from a JSON document with ``fighters`` and ``dan_ranks`` maps."""

        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)

        if not isinstance(payload, dict):
            raise ValueError(f"Enums file {path} must contain a JSON object")
        characters = payload.get("fighters")
        dan_ranks = payload.get("dan_ranks")
        if not isinstance(characters, dict) or not isinstance(dan_ranks, dict):
            raise ValueError(
                f"Enums file {path} must define 'fighters' and 'dan_ranks' objects"
            )

        logger.debug(
            f"Loaded {len(characters)} characters and {len(dan_ranks)} dan ranks from {path}"
        )
        return cls(characters, dan_ranks)

    def _lookup(self, table: Mapping[str, str], kind: str, code: object) -> str:
        key = str(code)
        name = table.get(key)
        if name is not None:
            return name
        if (kind, key) not in self._reported_unknown:
            self._reported_unknown.add((kind, key))
            logger.warning(f"No display name for {kind} code {key!r}")
        return unknown_label(key)

    def get_character_name(self, character_id: str) -> str:
        return self._lookup(self._characters, "character", character_id)

    def get_dan_name(self, dan_rank: str) -> str:
        return self._lookup(self._dan_ranks, "dan rank", dan_rank)


_default_mapper: EnumsMapper | None = None


def get_enums_mapper() -> EnumsMapper:
    """Return the process-wide mapper built from the configured enums file."""
    global _default_mapper
    if _default_mapper is None:
        _default_mapper = EnumsMapper.from_file(get_settings().resolved_enums_file)
    return _default_mapper


__all__ = ["EnumsMapper", "EnumsMapperProtocol", "get_enums_mapper", "unknown_label"]
