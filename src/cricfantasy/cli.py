"""Command-line interface for serving the API and checking squads offline."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from cricfantasy.config import Settings
from cricfantasy.errors import FantasyError
from cricfantasy.persistence import open_store
from cricfantasy.services import TeamService


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fantasy cricket team builder")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the REST API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on")

    players = subparsers.add_parser("players", help="List players eligible for a match")
    players.add_argument("match_id", type=int, help="Match id")
    players.add_argument("--role", default=None, help="Only show one role (WK, BAT, AR, BOWL)")

    validate = subparsers.add_parser("validate", help="Check an 11-player squad against the rules")
    validate.add_argument("player_ids", type=int, nargs="+", help="Player ids making up the squad")
    validate.add_argument("--match", dest="match_id", type=int, default=None, help="Match the squad is for")
    return parser.parse_args(argv)


def _serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from cricfantasy.api import create_app

    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


def _list_players(args: argparse.Namespace, settings: Settings) -> int:
    store = open_store(settings)
    match = store.get_match(args.match_id)
    if match is None:
        print(f"Match {args.match_id} not found")
        return 1
    role = args.role.upper() if args.role else None
    print(f"{match.team1} vs {match.team2} ({match.match_type})")
    for player in store.list_players_by_match(match.id):
        if role and player.role != role:
            continue
        print(f"{player.id:>4}  {player.name:<24} {player.team_code:<5} {player.role:<5} {player.credits:>5.1f}")
    return 0


def _validate(args: argparse.Namespace, settings: Settings) -> int:
    service = TeamService(open_store(settings))
    try:
        result = service.check_squad(args.player_ids, match_id=args.match_id)
    except FantasyError as exc:
        print(f"Cannot validate squad: {exc.message}")
        return 1

    counts = ", ".join(f"{role}={count}" for role, count in result.role_counts.items())
    print(f"Roles: {counts}")
    print(f"Credits used: {result.credits_used}")
    if result.valid:
        print("Squad is valid")
        return 0
    print(f"Squad is invalid: {result.violation.message}")
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    handlers = {
        "serve": _serve,
        "players": _list_players,
        "validate": _validate,
    }
    return handlers[args.command](args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
