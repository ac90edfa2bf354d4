"""Map ESPN teams onto league members by manager name.

Names are compared after normalization (case, whitespace, accents,
punctuation) and a couple of loose variations (first + last name only). A
team maps only when exactly one member matches.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass, field

from ffl.models import Member

logger = logging.getLogger(__name__)

_SPACES = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\s]")


@dataclass(slots=True, frozen=True)
class TeamMapping:
    espn_team_id: int
    espn_team_name: str
    espn_owner_name: str
    member_id: str
    team_name: str
    manager_name: str


@dataclass(slots=True)
class MappingResult:
    mappings: list[TeamMapping] = field(default_factory=list)
    unmapped_teams: list[dict] = field(default_factory=list)
    unmapped_members: list[Member] = field(default_factory=list)
    duplicate_matches: list[str] = field(default_factory=list)


@dataclass(slots=True)
class MappingValidation:
    is_valid: bool
    errors: list[str]
    warnings: list[str]
    summary: str


def normalize_name(name: str) -> str:
    text = _SPACES.sub(" ", name.lower().strip())
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _NON_WORD.sub("", text)


def name_variations(name: str) -> list[str]:
    """Normalized name plus first+last variants, without duplicates."""
    normalized = normalize_name(name)
    variations = [normalized]
    parts = [p for p in normalized.split(" ") if len(p) > 1]
    if len(parts) > 2:
        variations.append(f"{parts[0]} {parts[-1]}")
    words = normalized.split(" ")
    if len(words) >= 2:
        variations.append(f"{words[0]} {words[-1]}")
    return list(dict.fromkeys(variations))


def espn_team_name(team: dict) -> str:
    if team.get("name"):
        return team["name"]
    if team.get("location") and team.get("nickname"):
        return f"{team['location']} {team['nickname']}"
    return f"Team {team.get('id')}"


def create_team_mapping(
    espn_members: Sequence[dict],
    espn_teams: Sequence[dict],
    members: Sequence[Member],
) -> MappingResult:
    result = MappingResult(unmapped_members=list(members))
    owners = {m.get("id"): m for m in espn_members}
    by_name: dict[str, list[Member]] = {}
    for member in members:
        for variation in name_variations(member.manager_name):
            by_name.setdefault(variation, []).append(member)

    for team in espn_teams:
        team_owners = team.get("owners") or []
        owner = owners.get(team_owners[0]) if team_owners else None
        if owner is None:
            logger.warning("ESPN team %s (%s) has no valid owner", team.get("id"), espn_team_name(team))
            result.unmapped_teams.append(team)
            continue
        owner_name = f"{owner.get('firstName', '')} {owner.get('lastName', '')}".strip()
        matches: list[Member] = []
        for variation in name_variations(owner_name):
            for candidate in by_name.get(variation, []):
                if candidate not in matches:
                    matches.append(candidate)

        if not matches:
            logger.warning('No league member matches ESPN owner "%s"', owner_name)
            result.unmapped_teams.append(team)
        elif len(matches) == 1:
            member = matches[0]
            result.mappings.append(
                TeamMapping(
                    espn_team_id=int(team["id"]),
                    espn_team_name=espn_team_name(team),
                    espn_owner_name=owner_name,
                    member_id=member.id,
                    team_name=member.team_name,
                    manager_name=member.manager_name,
                )
            )
            if member in result.unmapped_members:
                result.unmapped_members.remove(member)
        else:
            names = ", ".join(m.manager_name for m in matches)
            result.duplicate_matches.append(f'ESPN "{owner_name}" matched multiple members: {names}')
            result.unmapped_teams.append(team)
    return result


def validate_mapping(result: MappingResult) -> MappingValidation:
    errors: list[str] = []
    warnings: list[str] = []
    if result.unmapped_teams:
        errors.append(f"{len(result.unmapped_teams)} ESPN teams could not be mapped to league members")
        for team in result.unmapped_teams:
            errors.append(f'  - ESPN Team {team.get("id")}: "{espn_team_name(team)}"')
    if result.unmapped_members:
        warnings.append(f"{len(result.unmapped_members)} league members have no corresponding ESPN team")
        for member in result.unmapped_members:
            warnings.append(f'  - Member: "{member.manager_name}" ({member.team_name})')
    if result.duplicate_matches:
        errors.append("Duplicate name matches found:")
        errors.extend(f"  - {msg}" for msg in result.duplicate_matches)
    summary = (
        f"Successfully mapped {len(result.mappings)} teams. "
        f"{len(errors)} errors, {len(warnings)} warnings."
    )
    return MappingValidation(is_valid=not errors, errors=errors, warnings=warnings, summary=summary)


def lookup_map(mappings: Sequence[TeamMapping]) -> dict[int, str]:
    """ESPN team id -> member id."""
    return {m.espn_team_id: m.member_id for m in mappings}
