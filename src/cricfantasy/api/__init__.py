"""REST API for the fantasy cricket service."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse

from cricfantasy.api.schemas import (
    ContestCreate,
    ContestEntryDetailResponse,
    ContestEntryResponse,
    ContestResponse,
    JoinContestRequest,
    MatchCreate,
    MatchResponse,
    PlayerResponse,
    SquadCheckRequest,
    SquadCheckResponse,
    TeamCreate,
    TeamPlayerCreate,
    TeamPlayerResponse,
    TeamResponse,
    UserCreate,
    UserResponse,
    WalletResponse,
    WinnerDetailResponse,
    WinnerResponse,
)
from cricfantasy.config import ROLES, Settings
from cricfantasy.errors import FantasyError, NotFoundError, ValidationFailedError
from cricfantasy.persistence import FantasyStore, UserRecord, open_store
from cricfantasy.services import AccountService, ContestService, EntryDetail, TeamService, WinnerDetail


logger = logging.getLogger("uvicorn.error")


def _entry_detail_response(detail: EntryDetail) -> ContestEntryDetailResponse:
    return ContestEntryDetailResponse(
        **asdict(detail.entry),
        username=detail.username,
        team_name=detail.team_name,
    )


def _winner_detail_response(detail: WinnerDetail) -> WinnerDetailResponse:
    return WinnerDetailResponse(
        **asdict(detail.winner),
        username=detail.username,
        full_name=detail.full_name,
        contest_name=detail.contest_name,
        match_details=detail.match_details,
    )


def create_app(store: FantasyStore | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logger.setLevel(settings.log_level)
    if store is None:
        store = open_store(settings)

    app = FastAPI(title="cricfantasy")
    app.state.store = store
    accounts = AccountService(store)
    teams = TeamService(store)
    contests = ContestService(store)
    app.state.contests = contests

    @app.exception_handler(FantasyError)
    async def fantasy_error_handler(request: Request, exc: FantasyError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    def current_user(x_user_id: int | None = Header(default=None)) -> UserRecord:
        return accounts.authenticate(x_user_id)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    # Users and wallet

    @app.post("/users", response_model=UserResponse, status_code=201)
    async def register(payload: UserCreate) -> UserResponse:
        user = accounts.register(username=payload.username, email=payload.email, full_name=payload.full_name)
        return UserResponse.model_validate(user)

    @app.get("/users/me", response_model=UserResponse)
    async def me(user: UserRecord = Depends(current_user)) -> UserResponse:
        return UserResponse.model_validate(user)

    @app.get("/wallet/{user_id}", response_model=WalletResponse)
    async def wallet(user_id: int, user: UserRecord = Depends(current_user)) -> WalletResponse:
        record = accounts.wallet(requesting_user_id=user.id, user_id=user_id)
        return WalletResponse.model_validate(record)

    # Matches

    @app.get("/matches", response_model=List[MatchResponse])
    async def list_matches():
        return [MatchResponse.model_validate(match) for match in store.list_matches()]

    @app.get("/matches/upcoming", response_model=List[MatchResponse])
    async def upcoming_matches():
        return [MatchResponse.model_validate(match) for match in store.list_upcoming_matches()]

    @app.get("/matches/live", response_model=List[MatchResponse])
    async def live_matches():
        return [MatchResponse.model_validate(match) for match in store.list_live_matches()]

    @app.get("/matches/completed", response_model=List[MatchResponse])
    async def completed_matches():
        return [MatchResponse.model_validate(match) for match in store.list_completed_matches()]

    @app.get("/matches/{match_id}", response_model=MatchResponse)
    async def get_match(match_id: int):
        match = store.get_match(match_id)
        if match is None:
            raise NotFoundError("Match not found")
        return MatchResponse.model_validate(match)

    @app.post("/matches", response_model=MatchResponse, status_code=201)
    async def create_match(payload: MatchCreate, user: UserRecord = Depends(current_user)):
        match = store.create_match(**payload.model_dump())
        logger.info("User %s created match %s (%s)", user.id, match.id, match.display)
        return MatchResponse.model_validate(match)

    # Players

    @app.get("/players", response_model=List[PlayerResponse])
    async def list_players():
        return [PlayerResponse.model_validate(player) for player in store.list_players()]

    @app.get("/players/role/{role}", response_model=List[PlayerResponse])
    async def players_by_role(role: str):
        role = role.upper()
        if role not in ROLES:
            raise ValidationFailedError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")
        return [PlayerResponse.model_validate(player) for player in store.list_players_by_role(role)]

    @app.get("/players/team/{team_code}", response_model=List[PlayerResponse])
    async def players_by_team(team_code: str):
        return [PlayerResponse.model_validate(player) for player in store.list_players_by_team(team_code)]

    @app.get("/players/match/{match_id}", response_model=List[PlayerResponse])
    async def players_by_match(match_id: int):
        return [PlayerResponse.model_validate(player) for player in store.list_players_by_match(match_id)]

    @app.get("/players/{player_id}", response_model=PlayerResponse)
    async def get_player(player_id: int):
        player = store.get_player(player_id)
        if player is None:
            raise NotFoundError("Player not found")
        return PlayerResponse.model_validate(player)

    # Teams

    @app.post("/squads/validate", response_model=SquadCheckResponse)
    async def validate_squad(payload: SquadCheckRequest):
        result = teams.check_squad(payload.player_ids, match_id=payload.match_id)
        return SquadCheckResponse(
            valid=result.valid,
            code=result.violation.code if result.violation else None,
            message=result.violation.message if result.violation else None,
            role_counts=dict(result.role_counts),
            team_counts=dict(result.team_counts),
            credits_used=float(result.credits_used),
        )

    @app.post("/teams", response_model=TeamResponse, status_code=201)
    async def create_team(payload: TeamCreate, user: UserRecord = Depends(current_user)):
        team = teams.create_team(
            user_id=user.id,
            name=payload.name,
            match_id=payload.match_id,
            captain_id=payload.captain_id,
            vice_captain_id=payload.vice_captain_id,
            player_ids=payload.player_ids,
        )
        return TeamResponse.model_validate(team)

    @app.get("/teams/user/{user_id}", response_model=List[TeamResponse])
    async def teams_by_user(user_id: int, user: UserRecord = Depends(current_user)):
        records = teams.teams_for_user(requesting_user_id=user.id, user_id=user_id)
        return [TeamResponse.model_validate(team) for team in records]

    @app.get("/teams/match/{match_id}", response_model=List[TeamResponse])
    async def teams_by_match(match_id: int, user: UserRecord = Depends(current_user)):
        records = teams.teams_for_match(user_id=user.id, match_id=match_id)
        return [TeamResponse.model_validate(team) for team in records]

    @app.get("/teams/{team_id}", response_model=TeamResponse)
    async def get_team(team_id: int, user: UserRecord = Depends(current_user)):
        return TeamResponse.model_validate(teams.get_owned_team(user_id=user.id, team_id=team_id))

    @app.get("/teams/{team_id}/players", response_model=List[PlayerResponse])
    async def team_players(team_id: int, user: UserRecord = Depends(current_user)):
        players = teams.team_players(user_id=user.id, team_id=team_id)
        return [PlayerResponse.model_validate(player) for player in players]

    @app.post("/teams/{team_id}/players", response_model=TeamPlayerResponse, status_code=201)
    async def add_team_player(team_id: int, payload: TeamPlayerCreate, user: UserRecord = Depends(current_user)):
        link = teams.add_player(user_id=user.id, team_id=team_id, player_id=payload.player_id)
        return TeamPlayerResponse.model_validate(link)

    # Contests

    @app.get("/contests/match/{match_id}", response_model=List[ContestResponse])
    async def contests_by_match(match_id: int):
        return [ContestResponse.model_validate(contest) for contest in contests.contests_for_match(match_id)]

    @app.get("/contests/user", response_model=List[ContestResponse])
    async def contests_by_user(user: UserRecord = Depends(current_user)):
        return [ContestResponse.model_validate(contest) for contest in contests.contests_for_user(user.id)]

    @app.get("/contests/{contest_id}", response_model=ContestResponse)
    async def get_contest(contest_id: int):
        return ContestResponse.model_validate(contests.get_contest(contest_id))

    @app.post("/contests", response_model=ContestResponse, status_code=201, dependencies=[Depends(current_user)])
    async def create_contest(payload: ContestCreate):
        contest = contests.create_contest(**payload.model_dump())
        return ContestResponse.model_validate(contest)

    @app.get("/contests/{contest_id}/entries", response_model=List[ContestEntryDetailResponse])
    async def contest_entries(contest_id: int):
        return [_entry_detail_response(detail) for detail in contests.entries(contest_id)]

    @app.get("/contests/{contest_id}/leaderboard", response_model=List[ContestEntryDetailResponse])
    async def contest_leaderboard(contest_id: int):
        return [_entry_detail_response(detail) for detail in contests.leaderboard(contest_id)]

    @app.post("/contests/{contest_id}/join", response_model=ContestEntryResponse, status_code=201)
    async def join_contest(contest_id: int, payload: JoinContestRequest, user: UserRecord = Depends(current_user)):
        entry = contests.join_contest(user_id=user.id, contest_id=contest_id, team_id=payload.team_id)
        return ContestEntryResponse.model_validate(entry)

    # Winners

    @app.get("/winners", response_model=List[WinnerDetailResponse])
    async def recent_winners(limit: int = Query(10, ge=1, le=100)):
        return [_winner_detail_response(detail) for detail in contests.recent_winners(limit)]

    @app.get("/winners/user", response_model=List[WinnerResponse])
    async def winners_by_user(user: UserRecord = Depends(current_user)):
        return [WinnerResponse.model_validate(winner) for winner in contests.winners_for_user(user.id)]

    return app
