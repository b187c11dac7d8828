"""In-memory storage of alliances and matches used by the playoff bracket."""

from __future__ import annotations

import copy
import dataclasses
import enum
from dataclasses import dataclass, field
from datetime import datetime


class MatchStatus(enum.Enum):
    """Outcome of a single match."""

    MATCH_NOT_PLAYED = ""
    RED_WON = "R"
    BLUE_WON = "B"
    TIE = "T"


@dataclass
class Alliance:
    """A playoff alliance and the three teams currently fielded by it."""

    id: int
    team_ids: list[int] = field(default_factory=list)
    lineup: tuple[int, int, int] = (0, 0, 0)

    def __post_init__(self) -> None:
        self.lineup = tuple(self.lineup)
        if len(self.lineup) != 3:
            raise ValueError("an alliance lineup must hold exactly three teams")


@dataclass
class Match:
    """A single scheduled or played match."""

    id: int = 0
    type: str = ""
    display_name: str = ""
    time: datetime | None = None
    elim_round: int = 0
    elim_group: int = 0
    elim_instance: int = 0
    elim_red_alliance: int = 0
    elim_blue_alliance: int = 0
    red1: int = 0
    red2: int = 0
    red3: int = 0
    blue1: int = 0
    blue2: int = 0
    blue3: int = 0
    status: MatchStatus = MatchStatus.MATCH_NOT_PLAYED

    def is_complete(self) -> bool:
        """Return True once the match has a result."""
        return self.status != MatchStatus.MATCH_NOT_PLAYED


def _match_order(match: Match) -> tuple[int, int, int, int]:
    return (match.elim_round, match.elim_instance, match.elim_group, match.id)


class MatchStore:
    """Keeps alliances and matches in memory; values are copied in and out."""

    def __init__(self) -> None:
        self._alliances: dict[int, Alliance] = {}
        self._matches: dict[int, Match] = {}
        self._next_match_id = 1

    # Alliances

    def add_alliance(self, alliance: Alliance) -> None:
        """Store an alliance, replacing any with the same id."""
        self._alliances[alliance.id] = copy.deepcopy(alliance)

    def get_alliance_by_id(self, alliance_id: int) -> Alliance | None:
        """Return a copy of the alliance, or None if there is none."""
        alliance = self._alliances.get(alliance_id)
        return copy.deepcopy(alliance) if alliance is not None else None

    def update_alliance_lineup(self, alliance_id: int, lineup) -> None:
        """Set the lineup of an existing alliance."""
        alliance = self._alliances.get(alliance_id)
        if alliance is None:
            raise LookupError(f"alliance {alliance_id} does not exist")
        lineup = tuple(lineup)
        if len(lineup) != 3:
            raise ValueError("an alliance lineup must hold exactly three teams")
        alliance.lineup = lineup

    def truncate_alliances(self) -> None:
        """Remove every alliance."""
        self._alliances.clear()

    # Matches

    def create_match(self, match: Match) -> int:
        """Store a new match, assign its id and return that id."""
        match.id = self._next_match_id
        self._next_match_id += 1
        self._matches[match.id] = dataclasses.replace(match)
        return match.id

    def update_match(self, match: Match) -> None:
        """Replace the stored match with the same id."""
        if match.id not in self._matches:
            raise LookupError(f"match {match.id} does not exist")
        self._matches[match.id] = dataclasses.replace(match)

    def delete_match(self, match_id: int) -> None:
        """Remove the match with the given id."""
        try:
            del self._matches[match_id]
        except KeyError:
            raise LookupError(f"match {match_id} does not exist") from None

    def get_match_by_name(self, match_type: str, display_name: str) -> Match | None:
        """Return the match of the given type and display name, or None."""
        for match in sorted(self._matches.values(), key=_match_order):
            if match.type == match_type and match.display_name == display_name:
                return dataclasses.replace(match)
        return None

    def get_matches_by_type(self, match_type: str) -> list[Match]:
        """Return matches of a type ordered by round, instance and group."""
        return [
            dataclasses.replace(match)
            for match in sorted(self._matches.values(), key=_match_order)
            if match.type == match_type
        ]

    def get_matches_by_elim_round_group(self, round: int, group: int) -> list[Match]:
        """Return the elimination matches of one matchup ordered by instance."""
        found = [
            match
            for match in self._matches.values()
            if match.type == "elimination" and match.elim_round == round and match.elim_group == group
        ]
        found.sort(key=lambda match: (match.elim_instance, match.id))
        return [dataclasses.replace(match) for match in found]

    def truncate_matches(self) -> None:
        """Remove every match."""
        self._matches.clear()