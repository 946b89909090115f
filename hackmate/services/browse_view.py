from __future__ import annotations

import asyncio
from typing import Iterable

from hackmate.gateway import Gateway
from hackmate.schemas.browse import BrowseResponse
from hackmate.schemas.profile import DirectoryEntry
from hackmate.schemas.skills import Skill
from hackmate.services.directory_filter import category_options, filter_profiles, skill_options, toggle_skill
from hackmate.services.loaders import load_directory, load_skill_catalog


class BrowseView:
    """State behind the browse page: loaded data plus the current filter criteria."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway
        self.loading = True
        self.catalog: list[Skill] = []
        self.profiles: list[DirectoryEntry] = []
        self.search_term = ""
        self.selected_skills: list[str] = []
        self.selected_category: str | None = None

    async def mount(self) -> None:
        try:
            self.catalog, self.profiles = await asyncio.gather(
                load_skill_catalog(self._gateway),
                load_directory(self._gateway),
            )
        finally:
            self.loading = False

    def set_search(self, term: str | None) -> None:
        self.search_term = term or ""

    def set_category(self, category: str | None) -> None:
        self.selected_category = category or None

    def toggle_skill(self, skill_id: str) -> None:
        self.selected_skills = toggle_skill(self.selected_skills, skill_id)

    def select_skills(self, skill_ids: Iterable[str]) -> None:
        self.selected_skills = []
        for skill_id in skill_ids:
            if skill_id and skill_id not in self.selected_skills:
                self.selected_skills.append(skill_id)

    @property
    def categories(self) -> list[str]:
        return category_options(self.catalog)

    @property
    def skill_options(self) -> list[Skill]:
        return skill_options(self.catalog, self.selected_category)

    def visible_profiles(self) -> list[DirectoryEntry]:
        if self.loading:
            return []
        return filter_profiles(self.profiles, self.search_term, self.selected_skills, self.selected_category)

    def snapshot(self) -> BrowseResponse:
        visible = self.visible_profiles()
        return BrowseResponse(
            loading=self.loading,
            search_term=self.search_term,
            selected_skills=list(self.selected_skills),
            selected_category=self.selected_category,
            categories=self.categories,
            skill_options=self.skill_options,
            profiles=visible,
            total=len(visible),
        )
