"""SQLite-backed store for deployments that need data to outlive the process."""

from __future__ import annotations

import sqlite3
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from cricfantasy.models import PlayerRecord

from .base import ContestFullError, FantasyStore, InsufficientBalanceError
from .records import (
    ContestEntryRecord,
    ContestRecord,
    MatchRecord,
    TeamPlayerRecord,
    TeamRecord,
    UserRecord,
    WinnerRecord,
    ensure_utc,
    utcnow,
)


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        full_name TEXT NOT NULL,
        wallet_balance REAL NOT NULL,
        total_winnings REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS players (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        team_code TEXT NOT NULL,
        role TEXT NOT NULL,
        credits REAL NOT NULL,
        points REAL NOT NULL DEFAULT 0,
        selection_percentage REAL NOT NULL DEFAULT 0,
        last_match_points REAL NOT NULL DEFAULT 0,
        image_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS matches (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        team1 TEXT NOT NULL,
        team2 TEXT NOT NULL,
        team1_code TEXT NOT NULL,
        team2_code TEXT NOT NULL,
        team1_logo TEXT,
        team2_logo TEXT,
        match_type TEXT NOT NULL,
        start_time TEXT NOT NULL,
        is_live INTEGER NOT NULL DEFAULT 0,
        is_completed INTEGER NOT NULL DEFAULT 0,
        tag_text TEXT,
        tag_color TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS teams (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        match_id INTEGER NOT NULL,
        total_points REAL NOT NULL DEFAULT 0,
        captain_id INTEGER NOT NULL,
        vice_captain_id INTEGER NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_players (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        team_id INTEGER NOT NULL,
        player_id INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        match_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        entry_fee REAL NOT NULL,
        total_spots INTEGER NOT NULL,
        filled_spots INTEGER NOT NULL DEFAULT 0,
        prize_pool REAL NOT NULL,
        first_prize REAL NOT NULL,
        is_guaranteed INTEGER NOT NULL DEFAULT 1,
        contest_type TEXT NOT NULL,
        header_color TEXT NOT NULL DEFAULT '#d13239'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contest_entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contest_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        team_id INTEGER NOT NULL,
        rank INTEGER,
        points REAL NOT NULL DEFAULT 0,
        prize_won REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS winners (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        contest_id INTEGER NOT NULL,
        match_id INTEGER NOT NULL,
        amount REAL NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_team_players_team ON team_players (team_id)",
    "CREATE INDEX IF NOT EXISTS ix_contest_entries_contest ON contest_entries (contest_id)",
    "CREATE INDEX IF NOT EXISTS ix_contest_entries_user ON contest_entries (user_id)",
)


def _parse_dt(value: str) -> datetime:
    return ensure_utc(datetime.fromisoformat(value))


class SqliteStore(FantasyStore):
    """Store every collection in an SQLite database file or URI."""

    def __init__(self, db_path: Path | str, *, starting_balance: float = 500.0):
        self.starting_balance = starting_balance
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        self._keepalive: Optional[sqlite3.Connection] = None
        if self._use_uri and "mode=memory" in str(db_path):
            # Shared-cache memory databases vanish once the last connection closes.
            self._keepalive = sqlite3.connect(self.db_path, uri=True, check_same_thread=False)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "cricfantasy-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                self.db_path = fallback_dir / "cricfantasy.sqlite"
                conn = sqlite3.connect(self.db_path)
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        for statement in _SCHEMA:
            conn.execute(statement)
        conn.commit()

    def close(self) -> None:
        if self._keepalive is not None:
            self._keepalive.close()
            self._keepalive = None

    # Row conversion

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            full_name=row["full_name"],
            wallet_balance=row["wallet_balance"],
            total_winnings=row["total_winnings"],
            created_at=_parse_dt(row["created_at"]),
        )

    @staticmethod
    def _row_to_player(row: sqlite3.Row) -> PlayerRecord:
        return PlayerRecord(
            id=row["id"],
            name=row["name"],
            team_code=row["team_code"],
            role=row["role"],
            credits=row["credits"],
            points=row["points"],
            selection_percentage=row["selection_percentage"],
            last_match_points=row["last_match_points"],
            image_url=row["image_url"],
        )

    @staticmethod
    def _row_to_match(row: sqlite3.Row) -> MatchRecord:
        return MatchRecord(
            id=row["id"],
            team1=row["team1"],
            team2=row["team2"],
            team1_code=row["team1_code"],
            team2_code=row["team2_code"],
            match_type=row["match_type"],
            start_time=_parse_dt(row["start_time"]),
            team1_logo=row["team1_logo"],
            team2_logo=row["team2_logo"],
            is_live=bool(row["is_live"]),
            is_completed=bool(row["is_completed"]),
            tag_text=row["tag_text"],
            tag_color=row["tag_color"],
        )

    @staticmethod
    def _row_to_team(row: sqlite3.Row) -> TeamRecord:
        return TeamRecord(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            match_id=row["match_id"],
            captain_id=row["captain_id"],
            vice_captain_id=row["vice_captain_id"],
            created_at=_parse_dt(row["created_at"]),
            total_points=row["total_points"],
        )

    @staticmethod
    def _row_to_contest(row: sqlite3.Row) -> ContestRecord:
        return ContestRecord(
            id=row["id"],
            match_id=row["match_id"],
            name=row["name"],
            entry_fee=row["entry_fee"],
            total_spots=row["total_spots"],
            prize_pool=row["prize_pool"],
            first_prize=row["first_prize"],
            contest_type=row["contest_type"],
            filled_spots=row["filled_spots"],
            is_guaranteed=bool(row["is_guaranteed"]),
            header_color=row["header_color"],
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> ContestEntryRecord:
        return ContestEntryRecord(
            id=row["id"],
            contest_id=row["contest_id"],
            user_id=row["user_id"],
            team_id=row["team_id"],
            created_at=_parse_dt(row["created_at"]),
            rank=row["rank"],
            points=row["points"],
            prize_won=row["prize_won"],
        )

    @staticmethod
    def _row_to_winner(row: sqlite3.Row) -> WinnerRecord:
        return WinnerRecord(
            id=row["id"],
            user_id=row["user_id"],
            contest_id=row["contest_id"],
            match_id=row["match_id"],
            amount=row["amount"],
            created_at=_parse_dt(row["created_at"]),
        )

    def _fetch_one(self, sql: str, params: tuple) -> Optional[sqlite3.Row]:
        with self._transaction() as conn:
            return conn.execute(sql, params).fetchone()

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._transaction() as conn:
            return conn.execute(sql, params).fetchall()

    # Users

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return None if row is None else self._row_to_user(row)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        row = self._fetch_one("SELECT * FROM users WHERE username = ?", (username,))
        return None if row is None else self._row_to_user(row)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        row = self._fetch_one("SELECT * FROM users WHERE email = ?", (email,))
        return None if row is None else self._row_to_user(row)

    def create_user(self, *, username: str, email: str, full_name: str) -> UserRecord:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (username, email, full_name, wallet_balance, total_winnings, created_at)
                VALUES (?, ?, ?, ?, 0, ?)
                """,
                (username, email, full_name, self.starting_balance, utcnow().isoformat()),
            )
            row = conn.execute("SELECT * FROM users WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return self._row_to_user(row)

    def update_user_wallet(
        self,
        user_id: int,
        amount: float,
        *,
        min_balance: Optional[float] = None,
    ) -> UserRecord:
        winnings = amount if amount > 0 else 0.0
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE users
                SET wallet_balance = wallet_balance + ?,
                    total_winnings = total_winnings + ?
                WHERE id = ? AND (? IS NULL OR wallet_balance + ? >= ?)
                """,
                (amount, winnings, user_id, min_balance, amount, min_balance),
            )
            if cursor.rowcount == 0:
                if conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone() is None:
                    raise KeyError(f"User {user_id} not found")
                raise InsufficientBalanceError(f"User {user_id} balance too low")
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row)

    def restore_user(self, user: UserRecord) -> UserRecord:
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE users SET wallet_balance = ?, total_winnings = ? WHERE id = ?",
                (user.wallet_balance, user.total_winnings, user.id),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"User {user.id} not found")
        return user

    # Players

    def list_players(self) -> List[PlayerRecord]:
        return [self._row_to_player(row) for row in self._fetch_all("SELECT * FROM players ORDER BY id")]

    def list_players_by_role(self, role: str) -> List[PlayerRecord]:
        rows = self._fetch_all("SELECT * FROM players WHERE role = ? ORDER BY id", (role,))
        return [self._row_to_player(row) for row in rows]

    def list_players_by_team(self, team_code: str) -> List[PlayerRecord]:
        rows = self._fetch_all("SELECT * FROM players WHERE team_code = ? ORDER BY id", (team_code,))
        return [self._row_to_player(row) for row in rows]

    def get_player(self, player_id: int) -> Optional[PlayerRecord]:
        row = self._fetch_one("SELECT * FROM players WHERE id = ?", (player_id,))
        return None if row is None else self._row_to_player(row)

    def create_player(
        self,
        *,
        name: str,
        team_code: str,
        role: str,
        credits: float,
        points: float = 0.0,
        selection_percentage: float = 0.0,
        last_match_points: float = 0.0,
        image_url: Optional[str] = None,
    ) -> PlayerRecord:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO players (
                    name, team_code, role, credits, points,
                    selection_percentage, last_match_points, image_url
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (name, team_code, role, credits, points, selection_percentage, last_match_points, image_url),
            )
            row = conn.execute("SELECT * FROM players WHERE id = ?", (cursor.lastrowid,)).fetchone()
            # Validation failure raises inside the transaction and rolls the insert back.
            return self._row_to_player(row)

    # Matches

    def list_matches(self) -> List[MatchRecord]:
        return [self._row_to_match(row) for row in self._fetch_all("SELECT * FROM matches ORDER BY id")]

    def get_match(self, match_id: int) -> Optional[MatchRecord]:
        row = self._fetch_one("SELECT * FROM matches WHERE id = ?", (match_id,))
        return None if row is None else self._row_to_match(row)

    def create_match(
        self,
        *,
        team1: str,
        team2: str,
        team1_code: str,
        team2_code: str,
        match_type: str,
        start_time: datetime,
        team1_logo: Optional[str] = None,
        team2_logo: Optional[str] = None,
        tag_text: Optional[str] = None,
        tag_color: Optional[str] = None,
    ) -> MatchRecord:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO matches (
                    team1, team2, team1_code, team2_code, team1_logo, team2_logo,
                    match_type, start_time, is_live, is_completed, tag_text, tag_color
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, 0, ?, ?)
                """,
                (
                    team1,
                    team2,
                    team1_code,
                    team2_code,
                    team1_logo,
                    team2_logo,
                    match_type,
                    ensure_utc(start_time).isoformat(),
                    tag_text,
                    tag_color,
                ),
            )
            row = conn.execute("SELECT * FROM matches WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return self._row_to_match(row)

    def update_match_status(
        self,
        match_id: int,
        *,
        is_live: Optional[bool] = None,
        is_completed: Optional[bool] = None,
    ) -> MatchRecord:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM matches WHERE id = ?", (match_id,)).fetchone()
            if row is None:
                raise KeyError(f"Match {match_id} not found")
            live = bool(row["is_live"]) if is_live is None else is_live
            completed = bool(row["is_completed"]) if is_completed is None else is_completed
            conn.execute(
                "UPDATE matches SET is_live = ?, is_completed = ? WHERE id = ?",
                (int(live), int(completed), match_id),
            )
            row = conn.execute("SELECT * FROM matches WHERE id = ?", (match_id,)).fetchone()
        return self._row_to_match(row)

    # Teams

    def list_teams_by_user(self, user_id: int) -> List[TeamRecord]:
        rows = self._fetch_all("SELECT * FROM teams WHERE user_id = ? ORDER BY id", (user_id,))
        return [self._row_to_team(row) for row in rows]

    def list_teams_by_match(self, match_id: int) -> List[TeamRecord]:
        rows = self._fetch_all("SELECT * FROM teams WHERE match_id = ? ORDER BY id", (match_id,))
        return [self._row_to_team(row) for row in rows]

    def get_team(self, team_id: int) -> Optional[TeamRecord]:
        row = self._fetch_one("SELECT * FROM teams WHERE id = ?", (team_id,))
        return None if row is None else self._row_to_team(row)

    def create_team(
        self,
        *,
        user_id: int,
        name: str,
        match_id: int,
        captain_id: int,
        vice_captain_id: int,
        player_ids: Sequence[int] = (),
    ) -> TeamRecord:
        with self._transaction() as conn:
            for player_id in player_ids:
                if conn.execute("SELECT 1 FROM players WHERE id = ?", (player_id,)).fetchone() is None:
                    raise KeyError(f"Player {player_id} not found")
            cursor = conn.execute(
                """
                INSERT INTO teams (user_id, name, match_id, total_points, captain_id, vice_captain_id, created_at)
                VALUES (?, ?, ?, 0, ?, ?, ?)
                """,
                (user_id, name, match_id, captain_id, vice_captain_id, utcnow().isoformat()),
            )
            team_id = cursor.lastrowid
            conn.executemany(
                "INSERT INTO team_players (team_id, player_id) VALUES (?, ?)",
                [(team_id, player_id) for player_id in player_ids],
            )
            row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        return self._row_to_team(row)

    def list_team_players(self, team_id: int) -> List[PlayerRecord]:
        rows = self._fetch_all(
            """
            SELECT players.* FROM team_players
            JOIN players ON players.id = team_players.player_id
            WHERE team_players.team_id = ?
            ORDER BY team_players.id
            """,
            (team_id,),
        )
        return [self._row_to_player(row) for row in rows]

    def add_player_to_team(self, *, team_id: int, player_id: int) -> TeamPlayerRecord:
        with self._transaction() as conn:
            if conn.execute("SELECT 1 FROM teams WHERE id = ?", (team_id,)).fetchone() is None:
                raise KeyError(f"Team {team_id} not found")
            if conn.execute("SELECT 1 FROM players WHERE id = ?", (player_id,)).fetchone() is None:
                raise KeyError(f"Player {player_id} not found")
            cursor = conn.execute(
                "INSERT INTO team_players (team_id, player_id) VALUES (?, ?)",
                (team_id, player_id),
            )
        return TeamPlayerRecord(id=cursor.lastrowid, team_id=team_id, player_id=player_id)

    # Contests

    def list_contests_by_match(self, match_id: int) -> List[ContestRecord]:
        rows = self._fetch_all("SELECT * FROM contests WHERE match_id = ? ORDER BY id", (match_id,))
        return [self._row_to_contest(row) for row in rows]

    def get_contest(self, contest_id: int) -> Optional[ContestRecord]:
        row = self._fetch_one("SELECT * FROM contests WHERE id = ?", (contest_id,))
        return None if row is None else self._row_to_contest(row)

    def create_contest(
        self,
        *,
        match_id: int,
        name: str,
        entry_fee: float,
        total_spots: int,
        prize_pool: float,
        first_prize: float,
        contest_type: str,
        is_guaranteed: bool = True,
        header_color: str = "#d13239",
    ) -> ContestRecord:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO contests (
                    match_id, name, entry_fee, total_spots, filled_spots, prize_pool,
                    first_prize, is_guaranteed, contest_type, header_color
                ) VALUES (?, ?, ?, ?, 0, ?, ?, ?, ?, ?)
                """,
                (
                    match_id,
                    name,
                    entry_fee,
                    total_spots,
                    prize_pool,
                    first_prize,
                    int(is_guaranteed),
                    contest_type,
                    header_color,
                ),
            )
            row = conn.execute("SELECT * FROM contests WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return self._row_to_contest(row)

    # Contest entries

    def list_entries_by_contest(self, contest_id: int) -> List[ContestEntryRecord]:
        rows = self._fetch_all("SELECT * FROM contest_entries WHERE contest_id = ? ORDER BY id", (contest_id,))
        return [self._row_to_entry(row) for row in rows]

    def list_entries_by_user(self, user_id: int) -> List[ContestEntryRecord]:
        rows = self._fetch_all("SELECT * FROM contest_entries WHERE user_id = ? ORDER BY id", (user_id,))
        return [self._row_to_entry(row) for row in rows]

    def get_contest_entry(self, entry_id: int) -> Optional[ContestEntryRecord]:
        row = self._fetch_one("SELECT * FROM contest_entries WHERE id = ?", (entry_id,))
        return None if row is None else self._row_to_entry(row)

    def create_contest_entry(self, *, contest_id: int, user_id: int, team_id: int) -> ContestEntryRecord:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE contests
                SET filled_spots = filled_spots + 1
                WHERE id = ? AND filled_spots < total_spots
                """,
                (contest_id,),
            )
            if cursor.rowcount == 0:
                if conn.execute("SELECT 1 FROM contests WHERE id = ?", (contest_id,)).fetchone() is None:
                    raise KeyError(f"Contest {contest_id} not found")
                raise ContestFullError(f"Contest {contest_id} is full")
            cursor = conn.execute(
                """
                INSERT INTO contest_entries (contest_id, user_id, team_id, rank, points, prize_won, created_at)
                VALUES (?, ?, ?, NULL, 0, 0, ?)
                """,
                (contest_id, user_id, team_id, utcnow().isoformat()),
            )
            row = conn.execute("SELECT * FROM contest_entries WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return self._row_to_entry(row)

    # Winners

    def list_recent_winners(self, limit: int = 10) -> List[WinnerRecord]:
        rows = self._fetch_all(
            "SELECT * FROM winners ORDER BY datetime(created_at) DESC, id DESC LIMIT ?",
            (limit,),
        )
        return [self._row_to_winner(row) for row in rows]

    def list_winners_by_user(self, user_id: int) -> List[WinnerRecord]:
        rows = self._fetch_all("SELECT * FROM winners WHERE user_id = ? ORDER BY id", (user_id,))
        return [self._row_to_winner(row) for row in rows]

    def create_winner(
        self,
        *,
        user_id: int,
        contest_id: int,
        match_id: int,
        amount: float,
    ) -> WinnerRecord:
        winnings = amount if amount > 0 else 0.0
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO winners (user_id, contest_id, match_id, amount, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, contest_id, match_id, amount, utcnow().isoformat()),
            )
            conn.execute(
                """
                UPDATE users
                SET wallet_balance = wallet_balance + ?,
                    total_winnings = total_winnings + ?
                WHERE id = ?
                """,
                (amount, winnings, user_id),
            )
            row = conn.execute("SELECT * FROM winners WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return self._row_to_winner(row)
