"""Output format helpers for season report contexts.

Markdown is meant for people (one section per table); JSON keeps every value
typed, with ``null`` wherever a number has no data.
"""

from __future__ import annotations
import json

from ffl.compute.prizes import special_prize_display_name
from .models import SeasonContext
from .render import fmt_count, fmt_points, md_table


def _standings_section(ctx: SeasonContext) -> list[str]:
    lines = [f"## Standings Through Week {ctx.through_week}", ""]
    headers = ["rank", "manager", "team", "division", "W", "L", "T", "PF", "avg", "PA", "weeks_won"]
    rows = []
    for e in ctx.standings:
        rows.append(
            [
                e.rank,
                e.member.manager_name,
                e.member.team_name,
                e.member.division or "-",
                fmt_count(e.wins),
                fmt_count(e.losses),
                fmt_count(e.ties),
                fmt_points(e.total_points),
                fmt_points(e.average_points),
                fmt_points(e.points_against),
                ",".join(str(w) for w in e.weeks_won) or "-",
            ]
        )
    lines.extend(md_table(headers, rows))
    lines.append("")
    return lines


def _division_section(ctx: SeasonContext) -> list[str]:
    lines = ["## Division Standings", ""]
    for div in ctx.division_standings:
        lines.append(f"### {div['division']} Division")
        lines.append("")
        rows = [
            [
                r["division_rank"],
                r["manager_name"],
                r["team_name"],
                fmt_count(r["wins"]),
                fmt_count(r["losses"]),
                fmt_count(r["ties"]),
                fmt_points(r["total_points"]),
            ]
            for r in div["rows"]
        ]
        lines.extend(md_table(["rank", "manager", "team", "W", "L", "T", "PF"], rows))
        lines.append("")
    return lines


def _playoff_section(ctx: SeasonContext) -> list[str]:
    lines = [f"## Playoff Seeds (Through Week {ctx.seeding_week})", ""]
    rows = [
        [
            s.seed,
            s.member.manager_name,
            s.member.team_name,
            s.division or "-",
            "Division Winner" if s.is_division_winner else "Wildcard",
        ]
        for s in ctx.playoff_seeds
    ]
    lines.extend(md_table(["seed", "manager", "team", "division", "type"], rows))
    lines.append("")
    return lines


def _prize_section(ctx: SeasonContext) -> list[str]:
    lines = ["## Special Prizes", ""]
    rows = []
    for key, amount_key in (
        ("fourth_place", "fourth"),
        ("highest_weekly", "highest_weekly"),
        ("lowest_weekly", "lowest_weekly"),
    ):
        winner = getattr(ctx.special_prizes, key)
        rows.append(
            [
                special_prize_display_name(key),
                winner.member.manager_name if winner else "-",
                fmt_points(winner.value) if winner else "-",
                fmt_count(winner.week) if winner else "-",
                fmt_points(ctx.prize_amounts.get(amount_key)),
            ]
        )
    lines.extend(md_table(["prize", "manager", "points", "week", "amount"], rows))
    lines.append("")
    return lines


def build_markdown_lines(ctx: SeasonContext) -> list[str]:
    lines = [f"# League {ctx.league_id} Season {ctx.season}", ""]
    lines.extend(md_table(["key", "value"], [[k, v] for k, v in ctx.meta_rows()]))
    lines.append("")
    lines.extend(_standings_section(ctx))
    if ctx.division_standings:
        lines.extend(_division_section(ctx))
    if ctx.playoff_seeds:
        lines.extend(_playoff_section(ctx))
    lines.extend(_prize_section(ctx))
    return lines


def format_markdown(ctx: SeasonContext) -> str:
    return "\n".join(build_markdown_lines(ctx)).rstrip("\n") + "\n"


def format_json(ctx: SeasonContext, schema_version: str, *, pretty: bool = False) -> str:
    """Render context to JSON (indented when ``pretty``)."""
    payload = ctx.to_json_payload(schema_version)
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)
    return json.dumps(payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
