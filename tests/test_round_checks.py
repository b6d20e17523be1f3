from datetime import datetime

from dateutil import tz

from clubswiss.pairing import generate_pairings
from clubswiss.tournament.models import Pairing, RoundPairings, Standing
from clubswiss.validation import CriterionStatus, ViolationType, create_round_validator

NOW = datetime(2025, 1, 1, tzinfo=tz.tzutc())


def _standing(player_id, opponents=(), bye_rounds=(), withdrawn=False):
    opponents = list(opponents)
    return Standing(
        tournament_id="t1",
        player_id=player_id,
        player_name=player_id.upper(),
        games_played=len(opponents),
        draws=len(opponents),
        points=0.5 * len(opponents),
        opponents_faced=opponents,
        bye_rounds=set(bye_rounds),
        withdrawn=withdrawn,
    )


def _pairing(first, second, round_number=1):
    return Pairing(
        id=f"pairing_t1_{round_number}_{first}{second}",
        tournament_id="t1",
        round=round_number,
        player1_id=first,
        player1_name=first.upper(),
        player2_id=second,
        player2_name=second.upper(),
        created_at=NOW,
    )


def _result(report, criterion):
    return next(r for r in report.criteria_results if r.criterion == criterion)


def test_generated_round_passes_every_criterion():
    standings = [_standing(f"p{i}") for i in range(1, 6)]
    round_pairings = generate_pairings(standings, 1)

    report = create_round_validator().validate(round_pairings, standings)

    assert report.is_valid
    assert report.quality_warnings == []
    assert len(report.criteria_results) == 6
    assert "all criteria satisfied" in report.summary


def test_missing_and_duplicate_players_break_partition():
    standings = [_standing("a"), _standing("b"), _standing("c"), _standing("d")]
    round_pairings = RoundPairings(
        tournament_id="t1",
        round=1,
        pairings=[_pairing("a", "b")],
        forced_byes=["b"],
    )

    report = create_round_validator().validate(round_pairings, standings)
    partition = _result(report, "R1")

    assert not report.is_valid
    assert partition.violation_type == ViolationType.ABSOLUTE
    assert partition.details["duplicates"] == ["b"]
    assert partition.details["missing"] == ["c", "d"]


def test_withdrawn_player_in_round_is_unexpected():
    standings = [_standing("a"), _standing("b"), _standing("c", withdrawn=True)]
    round_pairings = RoundPairings(
        tournament_id="t1", round=1, pairings=[_pairing("a", "b")], forced_byes=["c"]
    )

    report = create_round_validator().validate(round_pairings, standings)

    assert _result(report, "R1").details["unexpected"] == ["c"]


def test_rematch_is_a_quality_warning():
    standings = [_standing("a", opponents=["b"]), _standing("b", opponents=["a"])]
    round_pairings = RoundPairings(
        tournament_id="t1", round=2, pairings=[_pairing("a", "b", 2)]
    )

    report = create_round_validator().validate(round_pairings, standings)
    rematch = _result(report, "R4")

    assert report.is_valid
    assert rematch.status == CriterionStatus.VIOLATION
    assert rematch.violation_type == ViolationType.QUALITY
    assert "R4 (warning)" in report.summary


def test_repeat_and_extra_forced_byes_are_warnings():
    standings = [
        _standing("a"),
        _standing("b", bye_rounds=[1]),
        _standing("c"),
        _standing("d"),
    ]
    round_pairings = RoundPairings(
        tournament_id="t1",
        round=2,
        pairings=[_pairing("a", "c", 2)],
        forced_byes=["b", "d"],
    )

    report = create_round_validator().validate(round_pairings, standings)

    assert report.is_valid
    assert _result(report, "R5").details["players"] == ["b"]
    assert _result(report, "R6").details == {"expected": 0, "actual": 2}


def test_forced_bye_check_not_applicable_without_bye():
    standings = [_standing("a"), _standing("b")]
    round_pairings = generate_pairings(standings, 1)

    report = create_round_validator().validate(round_pairings, standings)

    assert _result(report, "R5").status == CriterionStatus.NOT_APPLICABLE


def test_withdrawn_bye_holder_belongs_in_the_round():
    standings = [
        _standing("a"),
        _standing("b"),
        _standing("c", bye_rounds=[2], withdrawn=True),
    ]
    held = RoundPairings(
        tournament_id="t1",
        round=2,
        pairings=[_pairing("a", "b", 2)],
        half_point_byes=["c"],
    )
    dropped = RoundPairings(
        tournament_id="t1", round=2, pairings=[_pairing("a", "b", 2)]
    )

    validator = create_round_validator()

    assert validator.validate(held, standings).is_valid
    report = validator.validate(dropped, standings)
    assert not report.is_valid
    assert _result(report, "R1").details["missing"] == ["c"]
