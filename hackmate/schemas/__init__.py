from hackmate.schemas.auth import AuthSession, Identity, SignInRequest, SignUpRequest
from hackmate.schemas.browse import BrowseResponse
from hackmate.schemas.profile import DirectoryEntry, Profile, ProfileDraft, ProfileDraftUpdate, ProfileSkill
from hackmate.schemas.session import AddSkillRequest, AuthFormState, ProfileViewState
from hackmate.schemas.skills import Skill

__all__ = [
	"AuthSession",
	"Identity",
	"SignInRequest",
	"SignUpRequest",
	"BrowseResponse",
	"DirectoryEntry",
	"Profile",
	"ProfileDraft",
	"ProfileDraftUpdate",
	"ProfileSkill",
	"AddSkillRequest",
	"AuthFormState",
	"ProfileViewState",
	"Skill",
]
