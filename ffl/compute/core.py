"""Standings computation over a league/season snapshot.

Two modes are supported:

- ``matchups``: a matchup collection is supplied (possibly empty). Wins,
  losses and ties come from paired results; entries sort by wins then total
  points.
- ``points``: no matchup data. Win/loss accounting is undefined, so
  ``wins``/``losses``/``ties`` are ``None`` and entries sort by total points.

Scores outside ``1..total_weeks`` (or past ``week_limit``), scores for
members missing from the roster and duplicate (member, week) scores are
excluded and logged. Ties on every sort key keep roster order.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from collections.abc import Iterable, Sequence

from ffl.constants import DEFAULT_TOTAL_WEEKS
from ffl.models import Matchup, Member, StandingEntry, WeeklyScore

logger = logging.getLogger(__name__)

MODE_MATCHUPS = "matchups"
MODE_POINTS = "points"


def standings_mode(matchups: Iterable[Matchup] | None) -> str:
    return MODE_POINTS if matchups is None else MODE_MATCHUPS


def _week_window(total_weeks: int, week_limit: int | None) -> int:
    if week_limit is None:
        return total_weeks
    return max(0, min(total_weeks, week_limit))


def qualifying_scores(
    members: Sequence[Member],
    scores: Iterable[WeeklyScore],
    *,
    total_weeks: int = DEFAULT_TOTAL_WEEKS,
    week_limit: int | None = None,
) -> list[WeeklyScore]:
    """Scores that count toward standings, in input order."""
    last_week = _week_window(total_weeks, week_limit)
    known = {m.id for m in members}
    seen: set[tuple[str, int]] = set()
    kept: list[WeeklyScore] = []
    for s in scores:
        if s.member_id not in known:
            logger.warning("Skipping week %s score for unknown member %s", s.week_number, s.member_id)
            continue
        if s.week_number > total_weeks:
            logger.warning(
                "Skipping score for member %s in week %s (season has %s weeks)",
                s.member_id,
                s.week_number,
                total_weeks,
            )
            continue
        if s.week_number > last_week:
            continue
        key = (s.member_id, s.week_number)
        if key in seen:
            logger.warning("Skipping duplicate week %s score for member %s", s.week_number, s.member_id)
            continue
        seen.add(key)
        kept.append(s)
    return kept


def resolve_matchups(
    members: Sequence[Member],
    matchups: Iterable[Matchup],
    scores: Sequence[WeeklyScore],
    *,
    total_weeks: int = DEFAULT_TOTAL_WEEKS,
    week_limit: int | None = None,
) -> list[Matchup]:
    """Fill missing matchup scores from weekly scores and drop unusable matchups.

    ``scores`` must already be qualifying. Stored matchup scores take
    precedence. A matchup whose scores cannot be resolved is pending and left
    out, which tolerates a score set that lags behind the matchup set. Each
    member plays at most once per week; later matchups for the same member and
    week are dropped.
    """
    last_week = _week_window(total_weeks, week_limit)
    known = {m.id for m in members}
    points_by_week = {(s.member_id, s.week_number): s.points for s in scores}
    resolved: list[Matchup] = []
    booked: set[tuple[str, int]] = set()
    for m in matchups:
        if m.team1_member_id not in known or m.team2_member_id not in known:
            logger.warning(
                "Skipping week %s matchup with unknown member (%s vs %s)",
                m.week_number,
                m.team1_member_id,
                m.team2_member_id,
            )
            continue
        if m.team1_member_id == m.team2_member_id:
            logger.warning("Skipping week %s matchup of member %s against itself", m.week_number, m.team1_member_id)
            continue
        if m.week_number > last_week:
            continue
        slots = [(m.team1_member_id, m.week_number), (m.team2_member_id, m.week_number)]
        if any(slot in booked for slot in slots):
            logger.warning(
                "Skipping extra week %s matchup %s vs %s (member already paired that week)",
                m.week_number,
                m.team1_member_id,
                m.team2_member_id,
            )
            continue
        booked.update(slots)
        a = m.team1_score
        if a is None:
            a = points_by_week.get((m.team1_member_id, m.week_number))
        b = m.team2_score
        if b is None:
            b = points_by_week.get((m.team2_member_id, m.week_number))
        if a is None or b is None:
            logger.debug("Week %s matchup %s vs %s is pending", m.week_number, m.team1_member_id, m.team2_member_id)
            continue
        resolved.append(Matchup(m.week_number, m.team1_member_id, m.team2_member_id, a, b))
    return resolved


def weekly_high_scores(scores: Iterable[WeeklyScore]) -> dict[int, WeeklyScore]:
    """Top score per week; the first record in input order wins ties."""
    best: dict[int, WeeklyScore] = {}
    for s in scores:
        cur = best.get(s.week_number)
        if cur is None or s.points > cur.points:
            best[s.week_number] = s
    return best


def standing_sort_key(entry: StandingEntry) -> tuple:
    if entry.wins is None:
        return (-entry.total_points,)
    return (-entry.wins, -entry.total_points)


def compare_standings(a: StandingEntry, b: StandingEntry) -> int:
    """-1 when ``a`` ranks ahead of ``b``, 1 when behind, 0 when tied on every key."""
    ka, kb = standing_sort_key(a), standing_sort_key(b)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def compute_standings(
    members: Sequence[Member],
    scores: Iterable[WeeklyScore],
    matchups: Iterable[Matchup] | None = None,
    *,
    total_weeks: int = DEFAULT_TOTAL_WEEKS,
    week_limit: int | None = None,
) -> list[StandingEntry]:
    """Rank every active member (plus inactive members that scored).

    ``week_limit`` gives "standings as of week N". Output is sorted by
    :func:`standing_sort_key` and ranked from 1.
    """
    mode = standings_mode(matchups)
    kept = qualifying_scores(members, scores, total_weeks=total_weeks, week_limit=week_limit)

    records: dict[str, dict] = {}
    for s in kept:
        rec = records.setdefault(s.member_id, {"points_for": 0.0, "games": 0, "weeks_won": []})
        rec["points_for"] += s.points
        rec["games"] += 1
    for week, top in sorted(weekly_high_scores(kept).items()):
        records[top.member_id]["weeks_won"].append(week)

    results: dict[str, dict] = {}
    if mode == MODE_MATCHUPS:
        for m in resolve_matchups(members, matchups, kept, total_weeks=total_weeks, week_limit=week_limit):
            a = results.setdefault(m.team1_member_id, {"wins": 0, "losses": 0, "ties": 0, "points_against": 0.0})
            b = results.setdefault(m.team2_member_id, {"wins": 0, "losses": 0, "ties": 0, "points_against": 0.0})
            a["points_against"] += m.team2_score
            b["points_against"] += m.team1_score
            outcome = m.outcome
            if outcome == "team1":
                a["wins"] += 1
                b["losses"] += 1
            elif outcome == "team2":
                b["wins"] += 1
                a["losses"] += 1
            else:
                a["ties"] += 1
                b["ties"] += 1

    table: list[StandingEntry] = []
    placed: set[str] = set()
    for member in members:
        rec = records.get(member.id)
        if rec is None and not member.is_active:
            continue
        if member.id in placed:
            logger.warning("Skipping duplicate roster entry for member %s", member.id)
            continue
        placed.add(member.id)
        rec = rec or {"points_for": 0.0, "games": 0, "weeks_won": []}
        games = rec["games"]
        entry = StandingEntry(
            member=member,
            rank=0,
            wins=None,
            losses=None,
            ties=None,
            total_points=rec["points_for"],
            average_points=(rec["points_for"] / games) if games else None,
            games_played=games,
            weeks_won=rec["weeks_won"],
        )
        if mode == MODE_MATCHUPS:
            res = results.get(member.id, {"wins": 0, "losses": 0, "ties": 0, "points_against": 0.0})
            entry.wins = res["wins"]
            entry.losses = res["losses"]
            entry.ties = res["ties"]
            entry.points_against = res["points_against"]
        table.append(entry)

    table.sort(key=standing_sort_key)
    for rank, entry in enumerate(table, start=1):
        entry.rank = rank
    return table


def apply_final_placings(standings: Sequence[StandingEntry], placings: Sequence[str]) -> list[StandingEntry]:
    """Move recorded champion, runner-up and third place to the top and re-rank.

    ``placings`` lists member ids in finishing order; unknown ids are ignored.
    """
    by_id = {e.member.id: e for e in standings}
    top_ids: list[str] = []
    for mid in placings:
        if mid in by_id and mid not in top_ids:
            top_ids.append(mid)
    ordered = [by_id[mid] for mid in top_ids] + [e for e in standings if e.member.id not in top_ids]
    return [replace(e, rank=rank) for rank, e in enumerate(ordered, start=1)]
