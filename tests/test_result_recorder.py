from datetime import datetime

import pytest
from dateutil import tz

from clubswiss.exceptions import (
    DuplicateResultError,
    InconsistentOutcomeError,
    UnknownPairingError,
)
from clubswiss.pairing import generate_pairings
from clubswiss.tournament import apply_round_results, sort_standings
from clubswiss.tournament.models import Outcome, RoundResult
from clubswiss.tournament.roster import create_standings


def _fresh(count):
    roster = [(f"p{i}", f"Player {i}") for i in range(1, count + 1)]
    return create_standings("t1", roster)


def _by_id(standings):
    return {s.player_id: s for s in standings}


def test_win_updates_both_players():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)
    pairing = round_pairings.pairings[0]

    updated = _by_id(
        apply_round_results(
            standings, [RoundResult(pairing.id, Outcome.PLAYER1_WIN)], round_pairings
        )
    )

    winner, loser = updated["p1"], updated["p2"]
    assert (winner.wins, winner.games_played, winner.points) == (1, 1, 1.0)
    assert winner.opponents_faced == ["p2"]
    assert (loser.losses, loser.games_played, loser.points) == (1, 1, 0.0)
    assert loser.opponents_faced == ["p1"]
    assert loser.buchholz_score == 1.0
    assert winner.buchholz_score == 0.0
    assert (winner.rank, loser.rank) == (1, 2)


def test_draw_gives_half_point_each():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)
    pairing = round_pairings.pairings[0]

    updated = apply_round_results(
        standings, [RoundResult(pairing.id, "draw")], round_pairings
    )

    for standing in updated:
        assert standing.draws == 1
        assert standing.games_played == 1
        assert standing.points == 0.5
        assert standing.buchholz_score == 0.5


def test_half_bye_outcome_is_not_a_game():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)
    pairing = round_pairings.pairings[0]

    updated = _by_id(
        apply_round_results(
            standings, [RoundResult(pairing.id, Outcome.HALF_BYE_P2)], round_pairings
        )
    )

    assert updated["p2"].points == 0.5
    assert updated["p2"].bye_rounds == {1}
    assert updated["p2"].games_played == 0
    assert updated["p2"].opponents_faced == []
    assert updated["p1"].points == 0.0
    assert updated["p1"].games_played == 0


def test_byes_are_booked_for_the_round():
    standings = create_standings(
        "t1", [("a", "A"), ("b", "B"), ("c", "C"), ("d", "D")], bye_rounds={"a": [1]}
    )
    round_pairings = generate_pairings(standings, 1)
    assert round_pairings.half_point_byes == ["a"]
    assert round_pairings.forced_byes == ["d"]

    updated = _by_id(
        apply_round_results(
            standings,
            [RoundResult(round_pairings.pairings[0].id, Outcome.PLAYER2_WIN)],
            round_pairings,
        )
    )

    assert updated["a"].points == 0.5
    assert updated["a"].bye_rounds == {1}
    assert updated["d"].points == 0.0
    assert updated["d"].bye_rounds == {1}
    assert updated["d"].games_played == 0
    assert updated["c"].points == 1.0


def test_ranks_follow_points_then_buchholz():
    standings = _fresh(6)
    round_pairings = generate_pairings(standings, 1)
    results = [
        RoundResult(round_pairings.pairings[0].id, Outcome.PLAYER1_WIN),
        RoundResult(round_pairings.pairings[1].id, Outcome.DRAW),
        RoundResult(round_pairings.pairings[2].id, Outcome.PLAYER2_WIN),
    ]
    updated = apply_round_results(standings, results, round_pairings)

    assert [s.rank for s in updated] == list(range(1, 7))
    keys = [(s.points, s.buchholz_score) for s in updated]
    assert keys == sorted(keys, reverse=True)
    assert [s.player_id for s in sort_standings(updated)] == [
        s.player_id for s in updated
    ]


def test_last_updated_is_stamped():
    now = datetime(2025, 6, 1, 20, 0, tzinfo=tz.tzutc())
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)

    updated = apply_round_results(
        standings,
        [RoundResult(round_pairings.pairings[0].id, Outcome.DRAW)],
        round_pairings,
        now=now,
    )

    assert all(s.last_updated == now for s in updated)


def test_unknown_pairing_rejects_whole_batch():
    standings = _fresh(4)
    round_pairings = generate_pairings(standings, 1)
    results = [
        RoundResult(round_pairings.pairings[0].id, Outcome.PLAYER1_WIN),
        RoundResult("pairing_elsewhere", Outcome.DRAW),
    ]

    with pytest.raises(UnknownPairingError):
        apply_round_results(standings, results, round_pairings)

    assert all(s.points == 0.0 and s.games_played == 0 for s in standings)


def test_duplicate_result_rejected():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)
    pairing_id = round_pairings.pairings[0].id

    with pytest.raises(DuplicateResultError):
        apply_round_results(
            standings,
            [
                RoundResult(pairing_id, Outcome.PLAYER1_WIN),
                RoundResult(pairing_id, Outcome.DRAW),
            ],
            round_pairings,
        )


def test_result_naming_wrong_player_is_inconsistent():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)
    pairing_id = round_pairings.pairings[0].id

    with pytest.raises(InconsistentOutcomeError):
        apply_round_results(
            standings,
            [RoundResult(pairing_id, Outcome.PLAYER1_WIN, player_id="p2")],
            round_pairings,
        )
    with pytest.raises(InconsistentOutcomeError):
        apply_round_results(
            standings,
            [RoundResult(pairing_id, Outcome.DRAW, player_id="p9")],
            round_pairings,
        )


def test_result_naming_credited_player_is_accepted():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)
    pairing_id = round_pairings.pairings[0].id

    updated = _by_id(
        apply_round_results(
            standings,
            [RoundResult(pairing_id, Outcome.HALF_BYE_P1, player_id="p1")],
            round_pairings,
        )
    )
    assert updated["p1"].points == 0.5


def test_pairing_player_missing_from_standings_is_inconsistent():
    standings = _fresh(2)
    round_pairings = generate_pairings(standings, 1)

    with pytest.raises(InconsistentOutcomeError):
        apply_round_results(
            standings[:1],
            [RoundResult(round_pairings.pairings[0].id, Outcome.DRAW)],
            round_pairings,
        )


def test_unscored_pairing_leaves_players_unchanged():
    standings = _fresh(4)
    round_pairings = generate_pairings(standings, 1)

    updated = _by_id(
        apply_round_results(
            standings,
            [RoundResult(round_pairings.pairings[0].id, Outcome.PLAYER1_WIN)],
            round_pairings,
        )
    )

    assert updated["p3"].games_played == 0
    assert updated["p4"].games_played == 0
