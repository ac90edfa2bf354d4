from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from ffl.api.store import LeagueStore
from ffl.config import LEAGUE_ID, SEASON, load_season_config
from ffl.constants import SCHEMA_VERSION
from ffl.errors import LeagueError
from ffl.report.collect import SeasonSource, build_season_context
from ffl.report.formatters import format_json, format_markdown
from ffl.report.history import player_history


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def generate_standings_report(
    store: SeasonSource,
    *,
    league_id: str = LEAGUE_ID,
    season: str = SEASON,
    through_week: int | None = None,
    include_postseason: bool = False,
    config_overrides: dict | None = None,
    out_dir: str = "reports/standings",
    output_formats: Sequence[str] | None = None,
    json_pretty: bool = True,
    verbose: bool = False,
    dry_run: bool = False,
) -> dict:
    formats = list(output_formats) if output_formats else ["markdown"]
    ctx = build_season_context(
        store,
        league_id,
        season,
        include_postseason=include_postseason,
        week_limit=through_week,
        config_overrides=config_overrides,
    )
    dest_dir = Path(out_dir) / ctx.season
    if not dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)

    results: dict[str, dict[str, Any]] = {}
    for fmt in formats:
        fmt_norm = fmt.lower()
        if fmt_norm in {"md", "markdown"}:
            content = format_markdown(ctx)
            path = dest_dir / f"standings-week-{ctx.through_week:02d}.md"
        elif fmt_norm == "json":
            content = format_json(ctx, SCHEMA_VERSION, pretty=json_pretty)
            path = dest_dir / f"standings-week-{ctx.through_week:02d}.json"
        else:
            raise ValueError(f"Unsupported format: {fmt}")
        if not dry_run:
            path.write_text(content, encoding="utf-8")
        if verbose:
            print(f"[standings_report] wrote {fmt_norm} -> {path} ({len(content)} bytes)")
        key = "markdown" if fmt_norm in {"md", "markdown"} else fmt_norm
        results[key] = {
            "path": str(path),
            "bytes": len(content),
            "written": not dry_run,
        }

    return {
        "formats": results,
        "meta": {
            "schema_version": SCHEMA_VERSION,
            "league_id": ctx.league_id,
            "season": ctx.season,
            "through_week": ctx.through_week,
            "standings_mode": ctx.standings_mode,
        },
        "written": not dry_run,
        "entries": {
            "standings": len(ctx.standings),
            "playoff_seeds": len(ctx.playoff_seeds),
            "divisions": len(ctx.division_standings),
        },
    }


def main(argv: list[str] | None = None) -> int:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Generate league standings, playoff seeds and special prizes")
    parser.add_argument("--league-id", default=LEAGUE_ID, help="League id (default from FFL_LEAGUE_ID)")
    parser.add_argument("--season", default=SEASON, help="Season, e.g. 2024 (default from FFL_SEASON)")
    parser.add_argument(
        "--through-week",
        type=int,
        default=None,
        help="Standings as of this week (defaults to the end of the regular season)",
    )
    parser.add_argument(
        "--include-postseason", action="store_true", help="Count playoff weeks and recorded final placings"
    )
    parser.add_argument("--config", default=None, help="YAML file with season config overrides")
    parser.add_argument("--history", default=None, metavar="MANAGER", help="Print a manager's season history")
    parser.add_argument("--out-dir", default="reports/standings", help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging (debug level)")
    parser.add_argument("--dry-run", action="store_true", help="Build report but do not write files")
    parser.add_argument(
        "--formats",
        default="markdown",
        help="Comma-separated list of output formats (markdown,json)",
    )
    parser.set_defaults(json_pretty=True)
    parser.add_argument(
        "--json-compact",
        dest="json_pretty",
        action="store_false",
        help="Use compact JSON (no whitespace)",
    )
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    formats = [f.strip() for f in args.formats.split(",") if f.strip()]

    if not args.league_id:
        print("Error: --league-id is required", file=sys.stderr)
        return 1
    if not args.history and not args.season:
        print("Error: --season is required", file=sys.stderr)
        return 1

    try:
        store = LeagueStore()
        if args.history:
            seasons = store.fetch_seasons(args.league_id)
            history = player_history(store, args.league_id, args.history, seasons)
            print(_pretty([p.to_dict() for p in history]))
            return 0
        overrides = load_season_config(args.config) if args.config else None
        summary = generate_standings_report(
            store,
            league_id=args.league_id,
            season=args.season,
            through_week=args.through_week,
            include_postseason=args.include_postseason,
            config_overrides=overrides,
            out_dir=args.out_dir,
            output_formats=formats,
            json_pretty=args.json_pretty,
            verbose=args.verbose,
            dry_run=args.dry_run,
        )
        print(_pretty(summary))
        for fmt_name, info in summary["formats"].items():
            print(f"Wrote [{fmt_name}]: {info['path']}")
        return 0
    except LeagueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
