from __future__ import annotations

import argparse
import datetime
import getpass
import json
import os
import sys
from typing import Iterable

from ffl.api.espn import EspnClient, week_to_dict
from ffl.api.store import LeagueStore
from ffl.auth import authenticate_admin, check_admin_session
from ffl.cli.standings_report import configure_logging
from ffl.config import LEAGUE_ID, SEASON
from ffl.errors import LeagueError, TeamMappingError
from ffl.importer import EspnImportService

ESPN_LEAGUE_ID = os.environ.get("ESPN_LEAGUE_ID", "")
ESPN_S2 = os.environ.get("ESPN_S2")
ESPN_SWID = os.environ.get("ESPN_SWID")


def _iter_weeks(
    *,
    first_week: int,
    last_week: int,
    from_week: int | None,
    to_week: int | None,
    include_all: bool,
) -> Iterable[int]:
    if not (include_all or from_week is not None or to_week is not None):
        return []
    w1 = from_week if from_week is not None else first_week
    w2 = to_week if to_week is not None else last_week
    if w1 > w2:
        w1, w2 = w2, w1
    w1 = max(first_week, w1)
    w2 = min(last_week, w2)
    return range(w1, w2 + 1)


def main(argv: list[str] | None = None) -> int:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Import ESPN weekly scores and matchups into the league store")
    parser.add_argument("--league-id", default=LEAGUE_ID, help="League id in the store (default from FFL_LEAGUE_ID)")
    parser.add_argument("--season", default=SEASON, help="Season (default from FFL_SEASON)")
    parser.add_argument("--espn-league-id", default=ESPN_LEAGUE_ID, help="ESPN league id (default from env)")
    parser.add_argument("--week", type=int, default=None, help="Single week to import (default: current ESPN week)")
    parser.add_argument("--all", action="store_true", help="Import every regular-season week")
    parser.add_argument("--from-week", type=int, default=None, help="Start week (inclusive)")
    parser.add_argument("--to-week", type=int, default=None, help="End week (inclusive)")
    parser.add_argument("--preview", action="store_true", help="Show mapped data without writing")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging (debug level)")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not (args.league_id and args.season and args.espn_league_id):
        print("Error: --league-id, --season and --espn-league-id are required", file=sys.stderr)
        return 1

    if not args.preview:
        password = os.environ.get("FFL_ADMIN_PASSWORD_INPUT") or getpass.getpass("Admin password: ")
        session = authenticate_admin(password)
        if not check_admin_session(session, datetime.datetime.now(datetime.timezone.utc)):
            print("Error: admin authentication failed", file=sys.stderr)
            return 1

    try:
        store = LeagueStore()
        espn = EspnClient(args.espn_league_id, int(args.season), espn_s2=ESPN_S2, swid=ESPN_SWID)
        service = EspnImportService(store, espn, args.league_id, args.season)

        weeks = list(
            _iter_weeks(
                first_week=1,
                last_week=store.fetch_season_config(args.league_id, args.season).regular_season_weeks,
                from_week=args.from_week,
                to_week=args.to_week,
                include_all=args.all,
            )
        )
        if not weeks:
            weeks = [args.week if args.week is not None else service.get_current_week()]

        failures = 0
        for wk in weeks:
            try:
                if args.preview:
                    data = service.preview_week(wk)
                    print(json.dumps(data.to_dict(), indent=2, sort_keys=True))
                    if args.verbose:
                        print(json.dumps(week_to_dict(espn.get_week_data(wk)), indent=2, sort_keys=True))
                    continue
                result = service.import_week(wk)
                print(f"OK  Week {wk:02d}: {result.message}")
            except TeamMappingError as e:
                failures += 1
                print(f"Mapping error on week {wk}:", file=sys.stderr)
                for line in e.errors:
                    print(f"  {line}", file=sys.stderr)
            except LeagueError as e:
                failures += 1
                print(f"Error on week {wk}: {e}", file=sys.stderr)
        if failures:
            print(f"Completed with {failures} failures.")
            return 1
        return 0
    except (LeagueError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
