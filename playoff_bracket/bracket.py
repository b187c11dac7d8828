"""Playoff elimination bracket built from a set of matchup templates."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta

from playoff_bracket.matchup import Matchup, MatchupKey, MatchupTemplate
from playoff_bracket.models import MatchStore

ELIM_MATCH_SPACING_SEC = 600


class BracketError(ValueError):
    """Raised when a bracket cannot be built or queried as asked."""


class Bracket:
    """A playoff bracket: a graph of matchups culminating in the finals."""

    def __init__(self, finals_matchup: Matchup, matchups: dict[MatchupKey, Matchup]) -> None:
        self.finals_matchup = finals_matchup
        self._matchups = matchups

    def winner(self) -> int:
        """Winning alliance id of the whole bracket, or 0 if not yet known."""
        return self.finals_matchup.winner()

    def finalist(self) -> int:
        """Finalist alliance id of the whole bracket, or 0 if not yet known."""
        return self.finals_matchup.loser()

    def is_complete(self) -> bool:
        """True once the bracket has been won."""
        return self.finals_matchup.is_complete()

    def all_matchups(self) -> list[Matchup]:
        """All matchups in the bracket, ordered by round and then group."""
        return sorted(self._matchups.values(), key=lambda matchup: matchup.key)

    def get_matchup(self, round: int, group: int) -> Matchup:
        """Return the matchup for the given round and group."""
        key = MatchupKey(round, group)
        try:
            return self._matchups[key]
        except KeyError:
            raise BracketError(f"bracket does not contain matchup for key {key}") from None

    def update(self, store: MatchStore, start_time: datetime | None) -> None:
        """Update every matchup from match results and reschedule unplayed matches.

        When a start time is given, the unplayed elimination matches are spaced
        out from it in their stored order.
        """
        self.finals_matchup.update(store)
        if start_time is None:
            return
        unplayed = (match for match in store.get_matches_by_type("elimination") if not match.is_complete())
        for index, match in enumerate(unplayed):
            match.time = start_time + timedelta(seconds=index * ELIM_MATCH_SPACING_SEC)
            store.update_match(match)

    def reverse_round_order_traversal(self) -> Iterator[Matchup]:
        """Yield matchups from the finals back to the earliest round.

        Within a round, matchups come in increasing group order. Only winner
        links are followed, so each matchup is yielded once.
        """
        counter = itertools.count()
        queue: list[tuple[int, int, int, Matchup]] = []

        def push(matchup: Matchup) -> None:
            heapq.heappush(queue, (-matchup.round, matchup.group, next(counter), matchup))

        push(self.finals_matchup)
        while queue:
            matchup = heapq.heappop(queue)[-1]
            yield matchup
            for source, child in (
                (matchup.red_source, matchup.red_source_matchup),
                (matchup.blue_source, matchup.blue_source_matchup),
            ):
                if child is not None and source.use_winner:
                    push(child)


def new_bracket(
    templates: Iterable[MatchupTemplate], finals_key: MatchupKey, num_alliances: int
) -> Bracket:
    """Build an unpopulated bracket from templates for the given number of alliances."""
    template_map = {template.key: template for template in templates}
    matchups: dict[MatchupKey, Matchup] = {}
    finals, _ = _build_matchup(finals_key, True, template_map, num_alliances, matchups)
    if finals is None:
        raise BracketError("bracket has no finals matchup for this number of alliances")
    return Bracket(finals, matchups)


def _get_or_create(
    template: MatchupTemplate,
    matchups: dict[MatchupKey, Matchup],
    red_alliance_id: int = 0,
    blue_alliance_id: int = 0,
    red_source_matchup: Matchup | None = None,
    blue_source_matchup: Matchup | None = None,
) -> Matchup:
    matchup = matchups.get(template.key)
    if matchup is None:
        matchup = Matchup(
            key=template.key,
            display_name=template.display_name,
            num_wins_to_advance=template.num_wins_to_advance,
            red_source=template.red_source,
            blue_source=template.blue_source,
            red_source_matchup=red_source_matchup,
            blue_source_matchup=blue_source_matchup,
            red_alliance_id=red_alliance_id,
            blue_alliance_id=blue_alliance_id,
        )
        matchups[template.key] = matchup
    return matchup


def _build_matchup(
    key: MatchupKey,
    use_winner: bool,
    template_map: dict[MatchupKey, MatchupTemplate],
    num_alliances: int,
    matchups: dict[MatchupKey, Matchup],
) -> tuple[Matchup | None, int]:
    """Build the matchup for a key and everything feeding it.

    Returns the matchup, or None with the id of an alliance that has a bye
    (0 if the matchup is pruned altogether).
    """
    template = template_map.get(key)
    if template is None:
        raise BracketError(f"could not find template for matchup {key} in the list of templates")

    red_seed = template.red_source.alliance_id
    blue_seed = template.blue_source.alliance_id
    if red_seed > 0 or blue_seed > 0:
        if red_seed == 0 or blue_seed == 0:
            raise BracketError("both alliances must be populated either from selection or a lower round")
        # Alliances that do not exist at this tournament mean the matchup need not be played.
        if red_seed > num_alliances:
            red_seed = 0
        if blue_seed > num_alliances:
            blue_seed = 0
        if red_seed and blue_seed:
            return _get_or_create(template, matchups, red_seed, blue_seed), 0
        if not red_seed and not blue_seed:
            return None, 0
        return None, (red_seed or blue_seed) if use_winner else 0

    red_matchup, red_bye = _build_matchup(
        template.red_source.matchup_key, template.red_source.use_winner, template_map, num_alliances, matchups
    )
    blue_matchup, blue_bye = _build_matchup(
        template.blue_source.matchup_key, template.blue_source.use_winner, template_map, num_alliances, matchups
    )

    red_empty = red_matchup is None and red_bye == 0
    blue_empty = blue_matchup is None and blue_bye == 0
    if red_empty and blue_empty:
        return None, 0
    if red_bye > 0 and blue_empty:
        return None, red_bye if use_winner else 0
    if blue_bye > 0 and red_empty:
        return None, blue_bye if use_winner else 0

    matchup = _get_or_create(
        template,
        matchups,
        red_alliance_id=red_bye,
        blue_alliance_id=blue_bye,
        red_source_matchup=red_matchup,
        blue_source_matchup=blue_matchup,
    )
    return matchup, 0