"""Demo fixtures loaded into a fresh store."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from .base import FantasyStore
from .records import utcnow


logger = logging.getLogger(__name__)

_PLAYER_IMAGE = "https://images.unsplash.com/photo-1546519638-68e109acd27d?auto=format&fit=crop&w=60&h=60&q=80"

# name, team code, role, credits, selection %, last match points
_PLAYERS = (
    ("MS Dhoni", "CSK", "WK", 9.0, 92, 35),
    ("Devon Conway", "CSK", "WK", 8.5, 61, 48),
    ("Ruturaj Gaikwad", "CSK", "BAT", 9.0, 85, 55),
    ("Ajinkya Rahane", "CSK", "BAT", 8.0, 44, 27),
    ("Shivam Dube", "CSK", "BAT", 8.5, 58, 39),
    ("Ravindra Jadeja", "CSK", "AR", 9.5, 88, 42),
    ("Moeen Ali", "CSK", "AR", 8.5, 52, 31),
    ("Deepak Chahar", "CSK", "BOWL", 8.5, 63, 36),
    ("Tushar Deshpande", "CSK", "BOWL", 7.5, 29, 22),
    ("Maheesh Theekshana", "CSK", "BOWL", 8.0, 41, 30),
    ("Matheesha Pathirana", "CSK", "BOWL", 8.0, 47, 44),
    ("Quinton de Kock", "MI", "WK", 9.5, 78, 28),
    ("Ishan Kishan", "MI", "WK", 8.5, 65, 22),
    ("Rohit Sharma", "MI", "BAT", 10.0, 90, 45),
    ("Suryakumar Yadav", "MI", "BAT", 10.0, 87, 61),
    ("Tilak Varma", "MI", "BAT", 8.5, 49, 33),
    ("Hardik Pandya", "MI", "AR", 9.5, 81, 40),
    ("Tim David", "MI", "AR", 8.5, 38, 26),
    ("Jasprit Bumrah", "MI", "BOWL", 9.5, 91, 52),
    ("Piyush Chawla", "MI", "BOWL", 7.5, 24, 18),
    ("Gerald Coetzee", "MI", "BOWL", 8.0, 33, 29),
    ("Akash Madhwal", "MI", "BOWL", 7.5, 19, 25),
    ("Dinesh Karthik", "RCB", "WK", 8.5, 55, 30),
    ("Virat Kohli", "RCB", "BAT", 10.5, 95, 72),
    ("Faf du Plessis", "RCB", "BAT", 9.5, 70, 41),
    ("Glenn Maxwell", "RCB", "AR", 9.5, 74, 37),
    ("Mohammed Siraj", "RCB", "BOWL", 8.5, 66, 34),
    ("Rishabh Pant", "DC", "WK", 10.0, 83, 46),
    ("David Warner", "DC", "BAT", 9.5, 69, 38),
    ("Axar Patel", "DC", "AR", 9.0, 64, 43),
    ("Kuldeep Yadav", "DC", "BOWL", 8.5, 57, 39),
)


def seed_demo_data(store: FantasyStore, *, now: Optional[datetime] = None) -> None:
    """Populate matches, players, contests and a demo user with recent wins."""

    now = now or utcnow()
    mega = store.create_match(
        team1="Chennai Super Kings",
        team2="Mumbai Indians",
        team1_code="CSK",
        team2_code="MI",
        match_type="IPL",
        start_time=now + timedelta(hours=5),
        tag_text="MEGA",
        tag_color="#d13239",
    )
    store.create_match(
        team1="Royal Challengers Bangalore",
        team2="Delhi Capitals",
        team1_code="RCB",
        team2_code="DC",
        match_type="T20",
        start_time=now + timedelta(hours=2),
        tag_text="HOT",
        tag_color="#ffc107",
    )

    for name, team_code, role, credits, selection, last_points in _PLAYERS:
        store.create_player(
            name=name,
            team_code=team_code,
            role=role,
            credits=credits,
            selection_percentage=selection,
            last_match_points=last_points,
            image_url=_PLAYER_IMAGE,
        )

    mega_contest = store.create_contest(
        match_id=mega.id,
        name="MEGA Contest",
        entry_fee=49,
        total_spots=2_345_678,
        prize_pool=100_000_000,
        first_prize=10_000_000,
        contest_type="MEGA",
        header_color="#d13239",
    )
    small_contest = store.create_contest(
        match_id=mega.id,
        name="Small Contest",
        entry_fee=15,
        total_spots=987_654,
        prize_pool=10_000_000,
        first_prize=2_500_000,
        contest_type="SMALL",
        header_color="#1f2833",
    )

    demo = store.create_user(username="demo", email="demo@example.com", full_name="Demo Player")
    store.create_winner(user_id=demo.id, contest_id=mega_contest.id, match_id=mega.id, amount=350_000)
    store.create_winner(user_id=demo.id, contest_id=small_contest.id, match_id=mega.id, amount=175_000)
    logger.info("Seeded %s players across %s matches", len(_PLAYERS), len(store.list_matches()))
