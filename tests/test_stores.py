from datetime import datetime, timedelta, timezone

import pytest

from cricfantasy.persistence import (
    ContestFullError,
    InsufficientBalanceError,
    MemoryStore,
    SqliteStore,
    seed_demo_data,
)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryStore()
    else:
        backend = SqliteStore(tmp_path / "fantasy.sqlite")
        yield backend
        backend.close()


def _match(store, *, hours: float = 3.0, codes=("CSK", "MI")):
    return store.create_match(
        team1=f"{codes[0]} full name",
        team2=f"{codes[1]} full name",
        team1_code=codes[0],
        team2_code=codes[1],
        match_type="T20",
        start_time=datetime.now(timezone.utc) + timedelta(hours=hours),
    )


def _contest(store, match_id: int, *, total_spots: int = 2):
    return store.create_contest(
        match_id=match_id,
        name="Small Contest",
        entry_fee=15.0,
        total_spots=total_spots,
        prize_pool=100.0,
        first_prize=50.0,
        contest_type="SMALL",
    )


def test_ids_start_at_one_and_defaults_apply(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    match = _match(store)
    contest = _contest(store, match.id)

    assert user.id == 1
    assert user.wallet_balance == pytest.approx(500.0)
    assert user.total_winnings == 0
    assert match.id == 1
    assert not match.is_live and not match.is_completed
    assert contest.id == 1
    assert contest.filled_spots == 0
    assert contest.is_guaranteed
    assert store.create_user(username="bob", email="bob@example.com", full_name="Bob B").id == 2


def test_user_lookups(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    assert store.get_user(user.id) == user
    assert store.get_user_by_username("alice") == user
    assert store.get_user_by_email("alice@example.com") == user
    assert store.get_user(99) is None
    assert store.get_user_by_username("nobody") is None


def test_wallet_updates_track_winnings_for_credits_only(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")

    debited = store.update_user_wallet(user.id, -49.0)
    assert debited.wallet_balance == pytest.approx(451.0)
    assert debited.total_winnings == 0

    credited = store.update_user_wallet(user.id, 100.0)
    assert credited.wallet_balance == pytest.approx(551.0)
    assert credited.total_winnings == pytest.approx(100.0)

    with pytest.raises(KeyError):
        store.update_user_wallet(99, 10.0)


def test_guarded_debit_respects_balance_floor(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")

    with pytest.raises(InsufficientBalanceError):
        store.update_user_wallet(user.id, -600.0, min_balance=0.0)
    assert store.get_user(user.id).wallet_balance == pytest.approx(500.0)

    emptied = store.update_user_wallet(user.id, -500.0, min_balance=0.0)
    assert emptied.wallet_balance == pytest.approx(0.0)
    with pytest.raises(KeyError):
        store.update_user_wallet(99, -1.0, min_balance=0.0)


def test_restore_user_puts_snapshot_back(store):
    snapshot = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    store.update_user_wallet(snapshot.id, -200.0)
    store.restore_user(snapshot)
    assert store.get_user(snapshot.id).wallet_balance == pytest.approx(500.0)


def test_contest_entries_fill_spots_until_full(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    match = _match(store)
    team = store.create_team(user_id=user.id, name="XI", match_id=match.id, captain_id=1, vice_captain_id=2)
    contest = _contest(store, match.id, total_spots=2)

    first = store.create_contest_entry(contest_id=contest.id, user_id=user.id, team_id=team.id)
    store.create_contest_entry(contest_id=contest.id, user_id=user.id, team_id=team.id)

    assert first.rank is None and first.points == 0 and first.prize_won == 0
    assert store.get_contest(contest.id).filled_spots == 2
    assert store.get_contest(contest.id).is_full
    with pytest.raises(ContestFullError):
        store.create_contest_entry(contest_id=contest.id, user_id=user.id, team_id=team.id)
    assert store.get_contest(contest.id).filled_spots == 2
    assert len(store.list_entries_by_contest(contest.id)) == 2
    assert len(store.list_entries_by_user(user.id)) == 2
    assert store.get_contest_entry(first.id) == first

    with pytest.raises(KeyError):
        store.create_contest_entry(contest_id=99, user_id=user.id, team_id=team.id)


def test_team_creation_links_players(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    match = _match(store)
    dhoni = store.create_player(name="MS Dhoni", team_code="CSK", role="WK", credits=9.0)
    rohit = store.create_player(name="Rohit Sharma", team_code="MI", role="BAT", credits=10.0)
    bumrah = store.create_player(name="Jasprit Bumrah", team_code="MI", role="BOWL", credits=9.5)

    team = store.create_team(
        user_id=user.id,
        name="Alice XI",
        match_id=match.id,
        captain_id=dhoni.id,
        vice_captain_id=rohit.id,
        player_ids=[dhoni.id, rohit.id],
    )
    store.add_player_to_team(team_id=team.id, player_id=bumrah.id)

    assert [player.id for player in store.list_team_players(team.id)] == [dhoni.id, rohit.id, bumrah.id]
    assert store.list_teams_by_user(user.id) == [team]
    assert store.list_teams_by_match(match.id) == [team]
    assert team.total_points == 0

    with pytest.raises(KeyError):
        store.create_team(
            user_id=user.id, name="Ghost", match_id=match.id, captain_id=1, vice_captain_id=2, player_ids=[404]
        )
    with pytest.raises(KeyError):
        store.add_player_to_team(team_id=team.id, player_id=404)


def test_player_filters(store):
    match = _match(store)
    store.create_player(name="MS Dhoni", team_code="CSK", role="WK", credits=9.0)
    store.create_player(name="Rohit Sharma", team_code="MI", role="BAT", credits=10.0)
    store.create_player(name="Virat Kohli", team_code="RCB", role="BAT", credits=10.5)

    assert [player.name for player in store.list_players_by_role("BAT")] == ["Rohit Sharma", "Virat Kohli"]
    assert [player.name for player in store.list_players_by_team("CSK")] == ["MS Dhoni"]
    assert [player.name for player in store.list_players_by_match(match.id)] == ["MS Dhoni", "Rohit Sharma"]
    assert store.list_players_by_match(99) == []


def test_match_status_lists(store):
    upcoming = _match(store, hours=2)
    live = _match(store, hours=-1, codes=("RCB", "DC"))
    finished = _match(store, hours=-30, codes=("KKR", "SRH"))
    store.update_match_status(live.id, is_live=True)
    store.update_match_status(finished.id, is_completed=True)

    assert [match.id for match in store.list_upcoming_matches()] == [upcoming.id]
    assert [match.id for match in store.list_live_matches()] == [live.id]
    assert [match.id for match in store.list_completed_matches()] == [finished.id]
    assert store.get_match(upcoming.id).display == "CSK vs MI"


def test_winners_credit_wallet_and_list_newest_first(store):
    user = store.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    match = _match(store)
    contest = _contest(store, match.id)

    first = store.create_winner(user_id=user.id, contest_id=contest.id, match_id=match.id, amount=100.0)
    second = store.create_winner(user_id=user.id, contest_id=contest.id, match_id=match.id, amount=250.0)

    assert [winner.id for winner in store.list_recent_winners()] == [second.id, first.id]
    assert [winner.id for winner in store.list_recent_winners(limit=1)] == [second.id]
    assert [winner.id for winner in store.list_winners_by_user(user.id)] == [first.id, second.id]
    refreshed = store.get_user(user.id)
    assert refreshed.wallet_balance == pytest.approx(850.0)
    assert refreshed.total_winnings == pytest.approx(350.0)


def test_seed_demo_data(store):
    seed_demo_data(store)

    matches = store.list_matches()
    assert [match.display for match in matches] == ["CSK vs MI", "RCB vs DC"]
    assert len(store.list_players()) == 31
    assert len(store.list_players_by_match(1)) == 22
    assert [contest.name for contest in store.list_contests_by_match(1)] == ["MEGA Contest", "Small Contest"]
    demo = store.get_user_by_username("demo")
    assert demo.total_winnings == pytest.approx(525000.0)
    assert [winner.amount for winner in store.list_recent_winners()] == [175000.0, 350000.0]


def test_sqlite_store_persists_between_instances(tmp_path):
    path = tmp_path / "fantasy.sqlite"
    first = SqliteStore(path)
    user = first.create_user(username="alice", email="alice@example.com", full_name="Alice A")
    first.update_user_wallet(user.id, -49.0)

    second = SqliteStore(path)
    assert second.get_user(user.id).wallet_balance == pytest.approx(451.0)
    first.close()
    second.close()


def test_sqlite_guarded_debit_sees_other_connections(tmp_path):
    path = tmp_path / "fantasy.sqlite"
    first = SqliteStore(path)
    second = SqliteStore(path)
    user = first.create_user(username="alice", email="alice@example.com", full_name="Alice A")

    second.update_user_wallet(user.id, -480.0, min_balance=0.0)
    with pytest.raises(InsufficientBalanceError):
        first.update_user_wallet(user.id, -49.0, min_balance=0.0)

    assert first.get_user(user.id).wallet_balance == pytest.approx(20.0)
    first.close()
    second.close()
