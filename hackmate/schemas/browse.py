from pydantic import BaseModel, Field

from hackmate.schemas.profile import DirectoryEntry
from hackmate.schemas.skills import Skill


class BrowseResponse(BaseModel):
    loading: bool
    search_term: str = ""
    selected_skills: list[str] = Field(default_factory=list)
    selected_category: str | None = None
    categories: list[str] = Field(default_factory=list)
    skill_options: list[Skill] = Field(default_factory=list)
    profiles: list[DirectoryEntry] = Field(default_factory=list)
    total: int = 0
