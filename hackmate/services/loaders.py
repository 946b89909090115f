from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as SchemaValidationError

from hackmate.gateway import (
    PROFILE_SKILLS_JOIN,
    PROFILES,
    SKILLS,
    USER_SKILL_ROWS_JOIN,
    USER_SKILLS,
    Gateway,
    GatewayError,
)
from hackmate.schemas.profile import DirectoryEntry
from hackmate.schemas.skills import Skill


logger = logging.getLogger(__name__)


def _unique_skills(raw: Iterable[Mapping[str, Any] | None]) -> list[Skill]:
    skills: list[Skill] = []
    seen: set[str] = set()
    for item in raw:
        if not item:
            continue
        skill = Skill.model_validate(item)
        if skill.id in seen:
            continue
        seen.add(skill.id)
        skills.append(skill)
    return skills


def build_directory_entry(row: Mapping[str, Any]) -> DirectoryEntry:
    """Flatten ``{..., "user_skills": [{"skills": {...}}]}`` into a directory entry."""

    links = row.get(USER_SKILLS) or []
    skills = _unique_skills(link.get(SKILLS) for link in links if isinstance(link, Mapping))
    return DirectoryEntry.model_validate({**row, "skills": skills})


def skills_from_association_rows(rows: Iterable[Mapping[str, Any]]) -> list[Skill]:
    return _unique_skills(row.get(SKILLS) for row in rows)


async def fetch_skill_catalog(gateway: Gateway) -> list[Skill]:
    rows = await gateway.select_all(SKILLS, order_by="category")
    return [Skill.model_validate(row) for row in rows]


async def load_skill_catalog(gateway: Gateway) -> list[Skill]:
    try:
        return await fetch_skill_catalog(gateway)
    except (GatewayError, SchemaValidationError) as exc:
        logger.error("loader.skills failed error=%s", exc)
        return []


async def load_directory(gateway: Gateway) -> list[DirectoryEntry]:
    try:
        rows = await gateway.select_joined(PROFILES, PROFILE_SKILLS_JOIN)
        return [build_directory_entry(row) for row in rows]
    except (GatewayError, SchemaValidationError) as exc:
        logger.error("loader.profiles failed error=%s", exc)
        return []


async def fetch_profile_skills(gateway: Gateway, profile_id: str) -> list[Skill]:
    rows = await gateway.select_joined(USER_SKILLS, USER_SKILL_ROWS_JOIN, {"profile_id": profile_id})
    return skills_from_association_rows(rows)
