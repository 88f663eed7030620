import pytest
from pydantic import ValidationError

from cricfantasy.models import PlayerRecord


def test_player_record_is_frozen():
    record = PlayerRecord(
        id=1,
        name="MS Dhoni",
        team_code="CSK",
        role="WK",
        credits=9.0,
    )

    assert record.id == 1
    assert record.points == 0.0
    assert record.image_url is None

    with pytest.raises((TypeError, ValidationError)):
        record.credits = 5.0  # type: ignore[misc]


def test_player_record_rejects_unknown_role():
    with pytest.raises(ValidationError):
        PlayerRecord(id=2, name="Someone", team_code="MI", role="KEEPER", credits=8.0)


def test_player_record_rejects_negative_credits():
    with pytest.raises(ValidationError):
        PlayerRecord(id=3, name="Someone", team_code="MI", role="BAT", credits=-1.0)
