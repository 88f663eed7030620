from decimal import Decimal

import pytest

from cricfantasy.models import PlayerRecord
from cricfantasy.squad import (
    SelectionError,
    SquadSelection,
    selection_violation,
    validate_captains,
    validate_squad,
)


def _player(player_id: int, role: str, team: str = "CSK", credits: float = 8.0) -> PlayerRecord:
    return PlayerRecord(id=player_id, name=f"Player {player_id}", team_code=team, role=role, credits=credits)


def _valid_squad() -> list[PlayerRecord]:
    return [
        _player(1, "WK", "CSK", 9.0),
        _player(2, "WK", "MI", 8.5),
        _player(3, "BAT", "CSK", 9.0),
        _player(4, "BAT", "MI", 10.0),
        _player(5, "BAT", "MI", 8.5),
        _player(6, "AR", "CSK", 9.5),
        _player(7, "AR", "MI", 9.5),
        _player(8, "BOWL", "CSK", 8.5),
        _player(9, "BOWL", "CSK", 7.5),
        _player(10, "BOWL", "MI", 9.5),
        _player(11, "BOWL", "MI", 7.5),
    ]


def test_valid_squad_passes_and_reports_totals():
    result = validate_squad(_valid_squad())
    assert result.valid
    assert result.violation is None
    assert result.role_counts == {"WK": 2, "BAT": 3, "AR": 2, "BOWL": 4}
    assert result.team_counts == {"CSK": 5, "MI": 6}
    assert result.credits_used == Decimal("97")


def test_five_wicketkeepers_rejected():
    squad = [_player(i, "WK", "CSK" if i % 2 else "MI", 8.0) for i in range(1, 6)]
    squad += [_player(i, "BAT", "MI", 8.0) for i in range(6, 9)]
    squad += [_player(i, "BOWL", "CSK", 8.0) for i in range(9, 12)]
    result = validate_squad(squad)
    assert not result.valid
    assert result.violation.code == "role_max"
    assert "wicketkeepers" in result.violation.message


def test_missing_all_rounder_rejected():
    squad = [player for player in _valid_squad() if player.role != "AR"]
    squad += [_player(20, "BAT", "MI", 8.0), _player(21, "BOWL", "CSK", 8.0)]
    result = validate_squad(squad)
    assert result.violation.code == "role_min"
    assert "all-rounders" in result.violation.message


def test_wrong_squad_size_rejected_first():
    result = validate_squad(_valid_squad()[:10])
    assert result.violation.code == "squad_size"


def test_duplicate_player_rejected():
    squad = _valid_squad()[:10] + [_valid_squad()[0]]
    assert validate_squad(squad).violation.code == "duplicate_player"


def test_credit_cap_exceeded():
    squad = [
        PlayerRecord(**{**player.model_dump(), "credits": 9.5}) for player in _valid_squad()
    ]
    result = validate_squad(squad)
    assert result.violation.code == "credit_cap"
    assert result.credits_used == Decimal("104.5")


def test_exactly_one_hundred_credits_with_fractions_is_allowed():
    credits = [9.1, 9.1, 9.1, 9.1, 9.1, 9.1, 9.1, 9.1, 9.1, 9.1, 9.0]
    squad = [
        PlayerRecord(**{**player.model_dump(), "credits": value})
        for player, value in zip(_valid_squad(), credits)
    ]
    result = validate_squad(squad)
    assert result.credits_used == Decimal("100.0")
    assert result.valid


def test_more_than_seven_from_one_team_rejected():
    squad = [PlayerRecord(**{**player.model_dump(), "team_code": "CSK"}) for player in _valid_squad()]
    result = validate_squad(squad)
    assert result.violation.code == "team_limit"
    assert "CSK" in result.violation.message


def test_captains_must_be_distinct_members():
    ids = [player.id for player in _valid_squad()]
    assert validate_captains(ids, 1, 2) is None
    assert validate_captains(ids, 1, 1).code == "captain_duplicate"
    assert validate_captains(ids, 99, 2).code == "captain_not_in_team"
    assert validate_captains(ids, 1, 99).code == "vice_captain_not_in_team"
    assert validate_captains(ids, None, 2).code == "captain_missing"


def test_selection_violation_checks_each_bound():
    partial = [_player(i, "WK", "CSK", 8.0) for i in range(1, 5)]
    assert selection_violation(partial, _player(5, "WK", "MI", 8.0)).code == "role_max"
    assert selection_violation(partial, _player(5, "BAT", "MI", 8.0)) is None
    assert selection_violation(partial, partial[0]).code == "already_selected"

    seven_csk = [_player(i, "BAT" if i < 5 else "BOWL", "CSK", 8.0) for i in range(1, 8)]
    assert selection_violation(seven_csk, _player(8, "AR", "CSK", 8.0)).code == "team_limit"
    assert selection_violation(seven_csk, _player(8, "AR", "MI", 8.0)) is None


def test_selection_violation_tracks_remaining_credits():
    expensive = [_player(i, role, "CSK" if i % 2 else "MI", 10.0) for i, role in enumerate(
        ["WK", "BAT", "BAT", "BAT", "AR", "BOWL", "BOWL", "BOWL", "BOWL"], start=1
    )]
    # 90 used, 10 left: a 10-credit pick fits, a 10.5 pick does not.
    assert selection_violation(expensive, _player(20, "AR", "MI", 10.0)) is None
    assert selection_violation(expensive, _player(20, "AR", "MI", 10.5)).code == "credit_cap"


def test_full_selection_rejects_twelfth_pick():
    assert selection_violation(_valid_squad(), _player(20, "BAT", "DC", 6.0)).code == "squad_full"


def test_squad_selection_builds_valid_team():
    selection = SquadSelection()
    for player in _valid_squad():
        selection.add(player)
    selection.set_captain(1)
    selection.set_vice_captain(6)
    assert selection.is_complete
    assert selection.validate().valid
    assert selection.captain_violation() is None
    assert selection.remaining_credits == Decimal("3")


def test_squad_selection_add_raises_on_violation():
    selection = SquadSelection()
    for player_id in range(1, 5):
        selection.add(_player(player_id, "WK", "CSK"))
    with pytest.raises(SelectionError) as excinfo:
        selection.add(_player(5, "WK", "MI"))
    assert excinfo.value.violation.code == "role_max"
    assert len(selection.players) == 4


def test_removing_captain_clears_designation():
    selection = SquadSelection()
    for player in _valid_squad():
        selection.add(player)
    selection.set_captain(3)
    selection.set_vice_captain(4)

    selection.remove(3)
    assert selection.captain_id is None
    assert selection.vice_captain_id == 4

    selection.remove(4)
    assert selection.vice_captain_id is None
    assert len(selection.players) == 9


def test_removing_player_frees_role_slot():
    selection = SquadSelection()
    for player_id in range(1, 5):
        selection.add(_player(player_id, "WK", "CSK"))
    assert not selection.can_select(_player(5, "WK", "MI"))
    selection.remove(2)
    assert selection.can_select(_player(5, "WK", "MI"))


def test_captain_must_be_selected():
    selection = SquadSelection()
    selection.add(_player(1, "WK"))
    with pytest.raises(SelectionError):
        selection.set_captain(2)


def test_same_player_cannot_hold_both_designations():
    selection = SquadSelection()
    selection.add(_player(1, "WK"))
    selection.set_captain(1)
    selection.set_vice_captain(1)
    assert selection.captain_id is None
    assert selection.vice_captain_id == 1


def test_pick_that_strands_a_role_minimum_is_rejected():
    # 6 BAT, 3 BOWL and 1 AR leave one slot, which must go to a wicketkeeper.
    roles = ["BAT"] * 6 + ["BOWL"] * 3 + ["AR"]
    partial = [_player(i, role, "CSK" if i % 2 else "MI", 8.0) for i, role in enumerate(roles, start=1)]

    violation = selection_violation(partial, _player(20, "BOWL", "MI", 8.0))
    assert violation.code == "role_min"
    assert "wicketkeepers" in violation.message
    assert selection_violation(partial, _player(20, "WK", "MI", 8.0)) is None


def test_early_pick_checks_remaining_slots_against_all_minimums():
    # After 4 BAT and 2 AR, the 5 open slots need 1 WK and 3 BOWL; a 5th BAT leaves 4 for them.
    roles = ["BAT"] * 4 + ["AR"] * 2
    partial = [_player(i, role, "CSK" if i % 2 else "MI", 8.0) for i, role in enumerate(roles, start=1)]
    assert selection_violation(partial, _player(20, "BAT", "MI", 8.0)) is None

    partial.append(_player(20, "BAT", "MI", 8.0))
    # Now 4 open slots need exactly 1 WK and 3 BOWL; a 3rd AR cannot fit.
    assert selection_violation(partial, _player(21, "AR", "CSK", 8.0)).code == "role_min"
    assert selection_violation(partial, _player(21, "BOWL", "CSK", 8.0)) is None
