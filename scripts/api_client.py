"""Lightweight REST client for the cricfantasy API."""

from __future__ import annotations

import argparse
import json

import httpx


def _print(resp: httpx.Response) -> None:
    if resp.is_error:
        try:
            detail = resp.json().get("error", resp.text)
        except json.JSONDecodeError:
            detail = resp.text
        raise SystemExit(f"{resp.status_code}: {detail}")
    print(json.dumps(resp.json(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the cricfantasy REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--user-id", type=int, default=None, help="Acting user id (sent as X-User-Id)")
    parser.add_argument("--list-matches", action="store_true", help="List upcoming matches and exit")
    parser.add_argument("--players", metavar="MATCH_ID", type=int, help="List players for a match and exit")
    parser.add_argument("--contests", metavar="MATCH_ID", type=int, help="List contests for a match and exit")
    parser.add_argument("--wallet", action="store_true", help="Show the acting user's wallet and exit")
    parser.add_argument("--create-team", metavar="MATCH_ID", type=int, help="Create a team for a match")
    parser.add_argument("--team-name", default="My Team", help="Name for --create-team")
    parser.add_argument("--squad", type=int, nargs="*", default=None, help="Player ids for --create-team")
    parser.add_argument("--captain", type=int, help="Captain player id for --create-team")
    parser.add_argument("--vice-captain", type=int, help="Vice-captain player id for --create-team")
    parser.add_argument("--join", metavar="CONTEST_ID", type=int, help="Join a contest")
    parser.add_argument("--team", type=int, help="Team id for --join")
    args = parser.parse_args()

    headers = {"X-User-Id": str(args.user_id)} if args.user_id is not None else {}
    with httpx.Client(base_url=args.base_url, headers=headers) as client:
        if args.list_matches:
            _print(client.get("/matches/upcoming"))
        elif args.players is not None:
            _print(client.get(f"/players/match/{args.players}"))
        elif args.contests is not None:
            _print(client.get(f"/contests/match/{args.contests}"))
        elif args.wallet:
            if args.user_id is None:
                raise SystemExit("--wallet requires --user-id")
            _print(client.get(f"/wallet/{args.user_id}"))
        elif args.create_team is not None:
            if args.captain is None or args.vice_captain is None:
                raise SystemExit("--create-team requires --captain and --vice-captain")
            body = {
                "name": args.team_name,
                "matchId": args.create_team,
                "captainId": args.captain,
                "viceCaptainId": args.vice_captain,
            }
            if args.squad:
                body["playerIds"] = args.squad
            _print(client.post("/teams", json=body))
        elif args.join is not None:
            if args.team is None:
                raise SystemExit("--join requires --team")
            _print(client.post(f"/contests/{args.join}/join", json={"teamId": args.team}))
        else:
            _print(client.get("/health"))


if __name__ == "__main__":
    main()
