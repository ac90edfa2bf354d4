"""Special prizes: fourth place on points, highest and lowest single week.

Ties go to the record encountered first in the input (store order), both for
the single-week prizes and for equal season totals.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from ffl.errors import FetchError
from ffl.models import Member, SpecialPrizes, SpecialPrizeWinner, WeeklyScore

if TYPE_CHECKING:
    from ffl.api.store import LeagueStore

logger = logging.getLogger(__name__)

PRIZE_DISPLAY_NAMES = {
    "fourth_place": "4th Place",
    "highest_weekly": "Highest Weekly",
    "lowest_weekly": "Lowest Weekly",
}


def compute_special_prizes(members: Sequence[Member], scores: Iterable[WeeklyScore]) -> SpecialPrizes:
    roster = {m.id: m for m in members}
    scores = list(scores)
    prizes = SpecialPrizes()

    totals: dict[str, float] = {}
    for s in scores:
        totals[s.member_id] = totals.get(s.member_id, 0.0) + s.points
    ranked = sorted(totals.items(), key=lambda kv: -kv[1])
    if len(ranked) >= 4:
        member_id, total = ranked[3]
        if member_id in roster:
            prizes.fourth_place = SpecialPrizeWinner(member=roster[member_id], value=total)
        else:
            logger.warning("Fourth place member %s is not on the roster; prize omitted", member_id)

    if scores:
        highest = scores[0]
        lowest = scores[0]
        for s in scores[1:]:
            if s.points > highest.points:
                highest = s
            if s.points < lowest.points:
                lowest = s
        prizes.highest_weekly = _winner(roster, highest, "highest_weekly")
        prizes.lowest_weekly = _winner(roster, lowest, "lowest_weekly")
    return prizes


def _winner(roster: dict[str, Member], score: WeeklyScore, prize: str) -> SpecialPrizeWinner | None:
    member = roster.get(score.member_id)
    if member is None:
        logger.warning("%s member %s is not on the roster; prize omitted", prize, score.member_id)
        return None
    return SpecialPrizeWinner(member=member, value=score.points, week=score.week_number)


def calculate_special_prizes(
    store: LeagueStore,
    league_id: str,
    season: str,
    members: Sequence[Member],
) -> SpecialPrizes:
    """Fetch the season's scores and compute prizes.

    Never raises: any failure is logged and yields an empty :class:`SpecialPrizes`.
    """
    try:
        scores = store.fetch_weekly_scores(league_id, season)
        return compute_special_prizes(members, scores)
    except FetchError as exc:
        logger.error("Error fetching weekly scores for special prizes: %s", exc)
    except Exception:
        logger.exception("Error calculating special prizes for league %s season %s", league_id, season)
    return SpecialPrizes()


def has_special_prize(member_id: str, prizes: SpecialPrizes, prize_type: str) -> bool:
    winner = getattr(prizes, prize_type, None)
    return winner is not None and winner.member.id == member_id


def special_prize_display_name(prize_type: str) -> str:
    return PRIZE_DISPLAY_NAMES.get(prize_type, "Special Prize")
