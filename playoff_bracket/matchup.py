"""Matchups: series of matches between the same two alliances in a playoff."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from playoff_bracket.models import Alliance, Match, MatchStatus, MatchStore

_INTEGER = re.compile(r"[+-]?\d+")


@dataclass(frozen=True, order=True)
class MatchupKey:
    """Identifies a matchup by round and 1-indexed group within the round."""

    round: int
    group: int

    def __str__(self) -> str:
        return f"{{Round:{self.round} Group:{self.group}}}"


@dataclass(frozen=True)
class AllianceSource:
    """Where an alliance comes from: alliance selection or a prior matchup."""

    alliance_id: int = 0
    matchup_key: MatchupKey = MatchupKey(0, 0)
    use_winner: bool = False


def winner_source(round: int, group: int) -> AllianceSource:
    """Source pointing at the winner of another matchup."""
    return AllianceSource(matchup_key=MatchupKey(round, group), use_winner=True)


def loser_source(round: int, group: int) -> AllianceSource:
    """Source pointing at the loser of another matchup."""
    return AllianceSource(matchup_key=MatchupKey(round, group), use_winner=False)


@dataclass
class MatchupTemplate:
    """Static description of a matchup within a bracket format."""

    key: MatchupKey = MatchupKey(0, 0)
    display_name: str = ""
    num_wins_to_advance: int = 0
    red_source: AllianceSource = AllianceSource()
    blue_source: AllianceSource = AllianceSource()

    @property
    def round(self) -> int:
        return self.key.round

    @property
    def group(self) -> int:
        return self.key.group

    def match_display_name(self, instance: int) -> str:
        """Display name of the given match instance within the matchup."""
        if self.num_wins_to_advance > 1 or instance > 1:
            return f"{self.display_name}-{instance}"
        return self.display_name


@dataclass(eq=False)
class Matchup(MatchupTemplate):
    """A matchup with its links to feeding matchups and its current state."""

    red_source_matchup: Matchup | None = field(default=None, repr=False)
    blue_source_matchup: Matchup | None = field(default=None, repr=False)
    red_alliance_id: int = 0
    blue_alliance_id: int = 0
    red_alliance_wins: int = 0
    blue_alliance_wins: int = 0

    def long_display_name(self) -> str:
        """Display name for the matchup as a whole."""
        if self.is_final():
            return "Finals"
        if _INTEGER.fullmatch(self.display_name):
            return "Match " + self.display_name
        return self.display_name

    @staticmethod
    def _source_display_name(source: AllianceSource, matchup: Matchup | None) -> str:
        if matchup is None:
            return ""
        prefix = "W " if source.use_winner else "L "
        return prefix + matchup.display_name

    def red_alliance_source_display_name(self) -> str:
        """Display name of the matchup feeding the red alliance, or ''."""
        return self._source_display_name(self.red_source, self.red_source_matchup)

    def blue_alliance_source_display_name(self) -> str:
        """Display name of the matchup feeding the blue alliance, or ''."""
        return self._source_display_name(self.blue_source, self.blue_source_matchup)

    def status_text(self) -> tuple[str, str]:
        """Return the leading alliance colour and a readable series status."""
        red, blue = self.red_alliance_wins, self.blue_alliance_wins
        win_text = "Wins" if self.is_final() else "Advances"
        if red >= self.num_wins_to_advance:
            return "red", f"Red {win_text} {red}-{blue}"
        if blue >= self.num_wins_to_advance:
            return "blue", f"Blue {win_text} {blue}-{red}"
        if red > blue:
            return "red", f"Red Leads {red}-{blue}"
        if blue > red:
            return "blue", f"Blue Leads {blue}-{red}"
        if red > 0:
            return "", f"Series Tied {red}-{blue}"
        return "", ""

    def winner(self) -> int:
        """Winning alliance id, or 0 if not yet known."""
        if self.red_alliance_wins >= self.num_wins_to_advance:
            return self.red_alliance_id
        if self.blue_alliance_wins >= self.num_wins_to_advance:
            return self.blue_alliance_id
        return 0

    def loser(self) -> int:
        """Losing alliance id, or 0 if not yet known."""
        if self.red_alliance_wins >= self.num_wins_to_advance:
            return self.blue_alliance_id
        if self.blue_alliance_wins >= self.num_wins_to_advance:
            return self.red_alliance_id
        return 0

    def is_complete(self) -> bool:
        """True once the matchup has been won."""
        return self.winner() > 0

    def is_final(self) -> bool:
        """True if this is the final matchup of the bracket."""
        return self.display_name == "F"

    def update(self, store: MatchStore) -> None:
        """Refresh this matchup and those feeding it from stored results.

        Wins are counted and unplayed matches are created, updated or deleted
        as required.
        """
        links = ((self.red_source, self.red_source_matchup), (self.blue_source, self.blue_source_matchup))
        # Only recurse down winner links so that no matchup is visited twice.
        for source, child in links:
            if child is not None and source.use_winner:
                child.update(store)

        if self.red_source_matchup is not None:
            self.red_alliance_id = _resolve(self.red_source, self.red_source_matchup)
        if self.blue_source_matchup is not None:
            self.blue_alliance_id = _resolve(self.blue_source, self.blue_source_matchup)

        matches = store.get_matches_by_elim_round_group(self.round, self.group)

        if not self.red_alliance_id or not self.blue_alliance_id:
            self.red_alliance_wins = 0
            self.blue_alliance_wins = 0
            for match in matches:
                store.delete_match(match.id)
            return

        red_alliance = _require_alliance(store, self.red_alliance_id)
        blue_alliance = _require_alliance(store, self.blue_alliance_id)

        self.red_alliance_wins = 0
        self.blue_alliance_wins = 0
        unplayed: list[Match] = []
        for match in matches:
            if not match.is_complete():
                changed = False
                if (match.red1, match.red2, match.red3) != red_alliance.lineup:
                    _position_red(match, red_alliance)
                    match.elim_red_alliance = red_alliance.id
                    changed = True
                if (match.blue1, match.blue2, match.blue3) != blue_alliance.lineup:
                    _position_blue(match, blue_alliance)
                    match.elim_blue_alliance = blue_alliance.id
                    changed = True
                if changed:
                    store.update_match(match)
                unplayed.append(match)
            elif match.status == MatchStatus.RED_WON:
                self.red_alliance_wins += 1
            elif match.status == MatchStatus.BLUE_WON:
                self.blue_alliance_wins += 1

        needed = self.num_wins_to_advance - max(self.red_alliance_wins, self.blue_alliance_wins)
        if len(unplayed) > needed:
            for match in reversed(unplayed[max(needed, 0):]):
                store.delete_match(match.id)
        elif len(unplayed) < needed:
            for offset in range(needed - len(unplayed)):
                instance = len(matches) + offset + 1
                match = Match(
                    type="elimination",
                    display_name=self.match_display_name(instance),
                    elim_round=self.round,
                    elim_group=self.group,
                    elim_instance=instance,
                    elim_red_alliance=red_alliance.id,
                    elim_blue_alliance=blue_alliance.id,
                )
                _position_red(match, red_alliance)
                _position_blue(match, blue_alliance)
                store.create_match(match)


def _resolve(source: AllianceSource, matchup: Matchup) -> int:
    return matchup.winner() if source.use_winner else matchup.loser()


def _require_alliance(store: MatchStore, alliance_id: int) -> Alliance:
    alliance = store.get_alliance_by_id(alliance_id)
    if alliance is None:
        raise LookupError(f"alliance {alliance_id} does not exist in the database")
    return alliance


def _position_red(match: Match, alliance: Alliance) -> None:
    match.red1, match.red2, match.red3 = alliance.lineup


def _position_blue(match: Match, alliance: Alliance) -> None:
    match.blue1, match.blue2, match.blue3 = alliance.lineup