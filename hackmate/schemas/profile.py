from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hackmate.schemas.skills import Skill


# Fields the owner may edit; id and email are bound to the identity.
EDITABLE_FIELDS: tuple[str, ...] = (
    "username",
    "full_name",
    "avatar_url",
    "bio",
    "location",
    "github_url",
    "linkedin_url",
)


class Profile(BaseModel):
    id: str
    username: str
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    github_url: str | None = None
    linkedin_url: str | None = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class ProfileSkill(BaseModel):
    profile_id: str
    skill_id: str


class ProfileDraft(BaseModel):
    """Editable copy of a profile, held locally until saved."""

    username: str = ""
    full_name: str = ""
    avatar_url: str = ""
    bio: str = ""
    location: str = ""
    github_url: str = ""
    linkedin_url: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @classmethod
    def from_profile(cls, profile: Profile) -> ProfileDraft:
        return cls(**{name: getattr(profile, name) for name in EDITABLE_FIELDS})

    def to_record(self) -> dict[str, str | None]:
        # Blank optional fields are stored as NULL; username is kept verbatim.
        record: dict[str, str | None] = {}
        for name in EDITABLE_FIELDS:
            value = getattr(self, name)
            if name == "username":
                record[name] = value.strip()
            else:
                record[name] = value.strip() or None
        return record


class ProfileDraftUpdate(BaseModel):
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    github_url: str | None = None
    linkedin_url: str | None = None


class DirectoryEntry(Profile):
    """A profile decorated with its resolved skills; read-only join result."""

    # Not shown in the public directory.
    email: str | None = Field(default=None, exclude=True)
    skills: list[Skill] = Field(default_factory=list)

    def skill_ids(self) -> set[str]:
        return {skill.id for skill in self.skills}
