# playoff_bracket

Playoff elimination brackets for alliance-based tournaments. A bracket is a
graph of *matchups*: series of one or more matches between the same two
alliances. Each time the bracket is updated it counts wins from the stored
match results, advances winners (and, in double elimination, losers), and
creates, updates or deletes the unplayed matches each matchup still needs.

Two formats are provided in `playoff_bracket.formats`:

- `new_single_elimination_bracket(num_alliances)`: 2 to 16 alliances, best of
  three in every round (EF, QF, SF, F). Matchups a smaller tournament doesn't
  need are pruned, and the top seeds get byes.
- `new_double_elimination_bracket(num_alliances)`: exactly 8 alliances, single
  matches (numbered 1 to 13) until a best-of-three final.

Any other number of alliances raises `BracketError`.

A tied match counts as a win for neither side, so the matchup gets another
match added to it.

## Installation

```
pip install .
```

## Usage

```python
from datetime import datetime

from playoff_bracket.formats import new_single_elimination_bracket
from playoff_bracket.models import Alliance, MatchStatus, MatchStore

store = MatchStore()
for alliance_id in range(1, 5):
    base = 100 * alliance_id
    store.add_alliance(Alliance(id=alliance_id, lineup=[base + 2, base + 1, base + 3]))

bracket = new_single_elimination_bracket(4)
bracket.update(store, datetime(2024, 4, 20, 9, 0))

for match in store.get_matches_by_type("elimination"):
    print(match.display_name, match.elim_red_alliance, match.elim_blue_alliance, match.time)

# Record a result and let the bracket react.
match = store.get_match_by_name("elimination", "SF1-1")
match.status = MatchStatus.RED_WON
store.update_match(match)
bracket.update(store, None)

semifinal = bracket.get_matchup(3, 1)
print(semifinal.long_display_name(), semifinal.status_text())
print(bracket.is_complete(), bracket.winner(), bracket.finalist())
```

`Bracket.winner()` and `Bracket.finalist()` return alliance ids, or 0 while the
final is undecided. `Matchup.status_text()` returns a pair such as
`("red", "Red Leads 1-0")`.

Passing a start time to `Bracket.update` reschedules every unplayed elimination
match ten minutes apart, in stored order; passing `None` leaves the times
alone. An update raises `LookupError` if a matchup needs an alliance that is
not in the store.

`Bracket.all_matchups()` lists the matchups in play ordered by round and group,
`Bracket.get_matchup(round, group)` returns one of them (or raises
`BracketError`), and `Bracket.reverse_round_order_traversal()` yields them from
the finals back to the first round, following winner links.

## The match store

`playoff_bracket.models.MatchStore` keeps `Alliance` and `Match` records and
hands out copies: change a match you fetched and pass it to `update_match` to
save it. `get_matches_by_type` orders matches by round, then instance, then
group, so the first match of every matchup in a round comes before the second.
Match results are `MatchStatus` values: `MATCH_NOT_PLAYED`, `RED_WON`,
`BLUE_WON` and `TIE`. An alliance lineup can be changed with
`update_alliance_lineup`; unplayed matches pick up the new lineup at the next
update.

## Custom formats

A format is a set of `MatchupTemplate` objects from `playoff_bracket.matchup`.
Each side of a template takes its alliance either from selection
(`AllianceSource(alliance_id=...)`) or from a prior matchup
(`winner_source(round, group)` or `loser_source(round, group)`). Build the
bracket with `playoff_bracket.bracket.new_bracket(templates, finals_key,
num_alliances)`; a missing template or a half-seeded matchup raises
`BracketError`.

## What it does not do

The store lives in memory only: nothing is saved to disk, and there is no
command-line tool, server or display for running an event. Scores are not
computed; a match's result is whatever `MatchStatus` is written to it.

## Running the tests

```
pip install .[test]
pytest
```