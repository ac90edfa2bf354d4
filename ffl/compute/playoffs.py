"""Playoff seeding and division tables built from ranked standings."""

from __future__ import annotations

from collections.abc import Sequence

from ffl.compute.core import standing_sort_key
from ffl.models import PlayoffSeed, StandingEntry


def _seeding_key(entry: StandingEntry) -> tuple:
    # rank breaks full ties so the order never depends on input containers
    return (*standing_sort_key(entry), entry.rank)


def seed_playoffs(
    standings: Sequence[StandingEntry],
    playoff_spots: int,
    divisions: Sequence[str] | None = None,
) -> list[PlayoffSeed]:
    """Seed the playoff field.

    Without divisions the top ``playoff_spots`` entries are seeded in rank
    order. With divisions, each division present among the entries sends its
    best member; those winners take seeds 1..D ordered by record, and the
    best remaining entries across all divisions fill the wild-card seeds.
    Returns ``min(playoff_spots, len(standings))`` seeds.
    """
    if playoff_spots <= 0 or not standings:
        return []
    ranked = sorted(standings, key=_seeding_key)
    configured = list(dict.fromkeys(divisions or []))

    div_winners: list[StandingEntry] = []
    for division in configured:
        leader = next((e for e in ranked if e.member.division == division), None)
        if leader is not None:
            div_winners.append(leader)

    if not div_winners:
        return [
            PlayoffSeed(member=e.member, seed=idx, is_division_winner=False, division=e.member.division)
            for idx, e in enumerate(ranked[:playoff_spots], start=1)
        ]

    div_winners.sort(key=_seeding_key)
    div_winners = div_winners[:playoff_spots]
    winner_ids = {e.member.id for e in div_winners}
    wild_cards = [e for e in ranked if e.member.id not in winner_ids]
    wild_cards = wild_cards[: playoff_spots - len(div_winners)]

    seeds: list[PlayoffSeed] = []
    for idx, e in enumerate(div_winners + wild_cards, start=1):
        seeds.append(
            PlayoffSeed(
                member=e.member,
                seed=idx,
                is_division_winner=e.member.id in winner_ids,
                division=e.member.division,
            )
        )
    return seeds


def division_standings(
    standings: Sequence[StandingEntry],
    divisions: Sequence[str] | None = None,
) -> list[dict]:
    """Group ranked entries per division with an in-division rank.

    Configured divisions come first in configured order, then any other
    division found on members, alphabetically. Members without a division
    are left out. Empty divisions are omitted.
    """
    by_div: dict[str, list[StandingEntry]] = {}
    for entry in sorted(standings, key=_seeding_key):
        div = entry.member.division
        if div is None:
            continue
        by_div.setdefault(div, []).append(entry)

    configured = [d for d in dict.fromkeys(divisions or []) if d in by_div]
    extra = sorted(d for d in by_div if d not in configured)
    out: list[dict] = []
    for div in configured + extra:
        rows = [{"division_rank": rank, **e.to_dict()} for rank, e in enumerate(by_div[div], start=1)]
        out.append({"division": div, "teams": len(rows), "rows": rows})
    return out
