from __future__ import annotations

from pydantic import BaseModel, Field

from hackmate.schemas.profile import Profile, ProfileDraft
from hackmate.schemas.skills import Skill


class AuthFormState(BaseModel):
    email: str = ""
    username: str = ""


class ProfileViewState(BaseModel):
    state: str
    auth_mode: str
    loading: bool
    error: str | None = None
    auth_form: AuthFormState = Field(default_factory=AuthFormState)
    profile: Profile | None = None
    draft: ProfileDraft | None = None
    skills: list[Skill] = Field(default_factory=list)
    catalog: list[Skill] = Field(default_factory=list)
    selected_skill: str | None = None


class AddSkillRequest(BaseModel):
    skill_id: str | None = None
