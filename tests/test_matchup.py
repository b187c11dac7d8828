import pytest

from playoff_bracket.matchup import (
    AllianceSource,
    Matchup,
    MatchupKey,
    MatchupTemplate,
    loser_source,
    winner_source,
)
from playoff_bracket.models import Alliance, MatchStatus, MatchStore


def create_test_alliances(store, count):
    for i in range(1, count + 1):
        store.add_alliance(
            Alliance(
                id=i,
                team_ids=[100 * i + 1, 100 * i + 2, 100 * i + 3, 100 * i + 4],
                lineup=(100 * i + 2, 100 * i + 1, 100 * i + 3),
            )
        )


def assert_match(match, display_name, red, blue):
    assert match.display_name == display_name
    assert match.elim_red_alliance == red
    assert match.elim_blue_alliance == blue
    assert (match.red1, match.red2, match.red3) == (100 * red + 2, 100 * red + 1, 100 * red + 3)
    assert (match.blue1, match.blue2, match.blue3) == (100 * blue + 2, 100 * blue + 1, 100 * blue + 3)


def score_match(store, display_name, status):
    match = store.get_match_by_name("elimination", display_name)
    match.status = status
    store.update_match(match)
    store.update_alliance_lineup(match.elim_red_alliance, [match.red1, match.red2, match.red3])
    store.update_alliance_lineup(match.elim_blue_alliance, [match.blue1, match.blue2, match.blue3])


def leaf(round, group, name, wins, red, blue):
    return Matchup(
        key=MatchupKey(round, group),
        display_name=name,
        num_wins_to_advance=wins,
        red_source=AllianceSource(alliance_id=red),
        blue_source=AllianceSource(alliance_id=blue),
        red_alliance_id=red,
        blue_alliance_id=blue,
    )


def four_alliance_bracket():
    sf1 = leaf(3, 1, "SF1", 2, 1, 4)
    sf2 = leaf(3, 2, "SF2", 2, 2, 3)
    final = Matchup(
        key=MatchupKey(4, 1),
        display_name="F",
        num_wins_to_advance=2,
        red_source=winner_source(3, 1),
        blue_source=winner_source(3, 2),
        red_source_matchup=sf1,
        blue_source_matchup=sf2,
    )
    return final


def test_sources():
    assert winner_source(2, 3) == AllianceSource(matchup_key=MatchupKey(2, 3), use_winner=True)
    assert loser_source(2, 3) == AllianceSource(matchup_key=MatchupKey(2, 3), use_winner=False)
    assert str(MatchupKey(33, 12)) == "{Round:33 Group:12}"


def test_matchup_display_names():
    m11 = Matchup(key=MatchupKey(4, 1), display_name="11", num_wins_to_advance=1)
    m12 = Matchup(key=MatchupKey(4, 2), display_name="12", num_wins_to_advance=1)
    m13 = Matchup(
        key=MatchupKey(5, 1),
        display_name="13",
        num_wins_to_advance=1,
        red_source=loser_source(4, 1),
        blue_source=winner_source(4, 2),
        red_source_matchup=m11,
        blue_source_matchup=m12,
    )
    final = Matchup(
        key=MatchupKey(6, 1),
        display_name="F",
        num_wins_to_advance=2,
        red_source=winner_source(4, 1),
        blue_source=winner_source(5, 1),
        red_source_matchup=m11,
        blue_source_matchup=m13,
    )
    assert final.long_display_name() == "Finals"
    assert final.match_display_name(1) == "F-1"
    assert final.red_alliance_source_display_name() == "W 11"
    assert final.blue_alliance_source_display_name() == "W 13"

    assert m13.long_display_name() == "Match 13"
    assert m13.match_display_name(1) == "13"
    assert m13.match_display_name(2) == "13-2"
    assert m13.red_alliance_source_display_name() == "L 11"
    assert m13.blue_alliance_source_display_name() == "W 12"
    assert m11.red_alliance_source_display_name() == ""

    sf2 = Matchup(
        key=MatchupKey(3, 2),
        display_name="SF2",
        num_wins_to_advance=2,
        red_source=winner_source(2, 3),
        blue_source=winner_source(2, 4),
        red_source_matchup=Matchup(display_name="QF3"),
        blue_source_matchup=Matchup(display_name="QF4"),
    )
    assert sf2.long_display_name() == "SF2"
    assert sf2.match_display_name(1) == "SF2-1"
    assert sf2.match_display_name(3) == "SF2-3"
    assert sf2.red_alliance_source_display_name() == "W QF3"
    assert sf2.blue_alliance_source_display_name() == "W QF4"


def test_template_match_display_name():
    template = MatchupTemplate(key=MatchupKey(1, 1), display_name="1", num_wins_to_advance=1)
    assert template.match_display_name(1) == "1"
    assert template.match_display_name(2) == "1-2"
    assert (template.round, template.group) == (1, 1)


def test_matchup_status_text():
    matchup = Matchup(num_wins_to_advance=1)
    assert matchup.status_text() == ("", "")

    matchup.red_alliance_wins = 1
    assert matchup.status_text() == ("red", "Red Advances 1-0")

    matchup.red_alliance_wins = 0
    matchup.blue_alliance_wins = 2
    assert matchup.status_text() == ("blue", "Blue Advances 2-0")

    matchup.num_wins_to_advance = 3
    matchup.blue_alliance_wins = 2
    assert matchup.status_text() == ("blue", "Blue Leads 2-0")

    matchup.red_alliance_wins = 2
    assert matchup.status_text() == ("", "Series Tied 2-2")

    matchup.blue_alliance_wins = 1
    assert matchup.status_text() == ("red", "Red Leads 2-1")

    matchup.display_name = "F"
    matchup.red_alliance_wins = 3
    assert matchup.status_text() == ("red", "Red Wins 3-1")

    matchup.red_alliance_wins = 2
    matchup.blue_alliance_wins = 4
    assert matchup.status_text() == ("blue", "Blue Wins 4-2")

    matchup.red_alliance_wins = 0
    matchup.blue_alliance_wins = 0
    assert matchup.status_text() == ("", "")


def test_winner_and_loser():
    matchup = Matchup(num_wins_to_advance=2, red_alliance_id=4, blue_alliance_id=7)
    assert (matchup.winner(), matchup.loser(), matchup.is_complete()) == (0, 0, False)
    matchup.blue_alliance_wins = 2
    assert (matchup.winner(), matchup.loser(), matchup.is_complete()) == (7, 4, True)
    matchup.blue_alliance_wins = 0
    matchup.red_alliance_wins = 2
    assert (matchup.winner(), matchup.loser()) == (4, 7)


def test_update_creates_initial_matches():
    store = MatchStore()
    create_test_alliances(store, 4)
    final = four_alliance_bracket()
    final.update(store)
    matches = store.get_matches_by_type("elimination")
    assert len(matches) == 4
    assert_match(matches[0], "SF1-1", 1, 4)
    assert_match(matches[1], "SF2-1", 2, 3)
    assert_match(matches[2], "SF1-2", 1, 4)
    assert_match(matches[3], "SF2-2", 2, 3)


def test_update_creates_next_round():
    store = MatchStore()
    create_test_alliances(store, 4)
    final = four_alliance_bracket()
    final.update(store)
    for name in ("SF1-1", "SF2-1", "SF1-2"):
        score_match(store, name, MatchStatus.BLUE_WON)
        final.update(store)
        assert len(store.get_matches_by_type("elimination")) == 4
    score_match(store, "SF2-2", MatchStatus.BLUE_WON)
    final.update(store)
    matches = store.get_matches_by_type("elimination")
    assert len(matches) == 6
    assert_match(matches[4], "F-1", 4, 3)
    assert_match(matches[5], "F-2", 4, 3)


def test_update_tie_adds_match():
    store = MatchStore()
    create_test_alliances(store, 8)
    matchup = leaf(1, 1, "1", 1, 1, 8)
    matchup.update(store)
    assert len(store.get_matches_by_type("elimination")) == 1
    score_match(store, "1", MatchStatus.TIE)
    matchup.update(store)
    matches = store.get_matches_by_type("elimination")
    assert len(matches) == 2
    assert_match(matches[1], "1-2", 1, 8)
    score_match(store, "1-2", MatchStatus.TIE)
    matchup.update(store)
    matches = store.get_matches_by_type("elimination")
    assert len(matches) == 3
    assert_match(matches[2], "1-3", 1, 8)
    score_match(store, "1-3", MatchStatus.RED_WON)
    matchup.update(store)
    assert len(store.get_matches_by_type("elimination")) == 3
    assert matchup.winner() == 1


def test_update_removes_unneeded_and_recreates():
    store = MatchStore()
    create_test_alliances(store, 2)
    final = leaf(4, 1, "F", 2, 1, 2)
    final.update(store)
    score_match(store, "F-1", MatchStatus.RED_WON)
    score_match(store, "F-2", MatchStatus.TIE)
    final.update(store)
    assert len(store.get_matches_by_type("elimination")) == 3

    score_match(store, "F-2", MatchStatus.RED_WON)
    final.update(store)
    assert final.is_complete() is True
    assert len(store.get_matches_by_type("elimination")) == 2

    score_match(store, "F-2", MatchStatus.BLUE_WON)
    final.update(store)
    assert final.is_complete() is False
    matches = store.get_matches_by_type("elimination")
    assert len(matches) == 3
    assert matches[2].display_name == "F-3"


def test_update_changed_lower_result_deletes_matches():
    store = MatchStore()
    create_test_alliances(store, 4)
    final = four_alliance_bracket()
    final.update(store)
    for name in ("SF1-1", "SF1-2", "SF2-1", "SF2-2"):
        score_match(store, name, MatchStatus.RED_WON)
    final.update(store)
    assert len(store.get_matches_by_type("elimination")) == 6

    score_match(store, "SF2-2", MatchStatus.MATCH_NOT_PLAYED)
    final.update(store)
    matches = store.get_matches_by_type("elimination")
    assert len(matches) == 4
    assert final.red_alliance_wins == 0
    assert final.blue_alliance_id == 0


def test_update_propagates_lineup_changes():
    store = MatchStore()
    create_test_alliances(store, 4)
    final = four_alliance_bracket()
    final.update(store)
    match1 = store.get_match_by_name("elimination", "SF1-1")
    match1.red1, match1.red2 = match1.red2, 104
    store.update_match(match1)
    score_match(store, "SF1-1", MatchStatus.RED_WON)
    final.update(store)
    second = store.get_match_by_name("elimination", "SF1-2")
    assert (second.red1, second.red2, second.red3) == (match1.red1, match1.red2, match1.red3)


def test_update_missing_alliance_raises():
    store = MatchStore()
    create_test_alliances(store, 1)
    matchup = leaf(1, 1, "1", 1, 1, 8)
    with pytest.raises(LookupError, match="alliance 8 does not exist in the database"):
        matchup.update(store)