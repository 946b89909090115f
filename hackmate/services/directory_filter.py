from __future__ import annotations

from typing import Iterable, Sequence

from hackmate.schemas.profile import DirectoryEntry
from hackmate.schemas.skills import Skill


def _contains(value: str | None, needle: str) -> bool:
    return bool(value) and needle in value.lower()


def matches_search(profile: DirectoryEntry, search_term: str) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    return (
        _contains(profile.username, needle)
        or _contains(profile.full_name, needle)
        or _contains(profile.bio, needle)
    )


def matches_skills(profile: DirectoryEntry, selected_skills: Iterable[str]) -> bool:
    required = set(selected_skills)
    if not required:
        return True
    return required <= profile.skill_ids()


def matches_category(profile: DirectoryEntry, selected_category: str | None) -> bool:
    if not selected_category:
        return True
    return any(skill.category == selected_category for skill in profile.skills)


def filter_profiles(
    profiles: Sequence[DirectoryEntry] | None,
    search_term: str = "",
    selected_skills: Iterable[str] = (),
    selected_category: str | None = None,
) -> list[DirectoryEntry]:
    """Return the profiles passing the search, skills and category filters.

    All three predicates must hold. Surviving entries keep their input order;
    a missing or empty collection yields an empty list.
    """

    if not profiles:
        return []
    required = frozenset(selected_skills)
    return [
        profile
        for profile in profiles
        if matches_search(profile, search_term)
        and matches_skills(profile, required)
        and matches_category(profile, selected_category)
    ]


def category_options(catalog: Iterable[Skill]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for skill in catalog:
        if skill.category not in seen:
            seen.add(skill.category)
            ordered.append(skill.category)
    return ordered


def skill_options(catalog: Iterable[Skill], selected_category: str | None = None) -> list[Skill]:
    # Narrows which checkboxes are offered; it does not change matching.
    return [skill for skill in catalog if not selected_category or skill.category == selected_category]


def toggle_skill(selected_skills: Sequence[str], skill_id: str) -> list[str]:
    if skill_id in selected_skills:
        return [existing for existing in selected_skills if existing != skill_id]
    return [*selected_skills, skill_id]
