from hackmate.models.identity import AuthSessionRecord, Identity
from hackmate.models.profile import ProfileModel
from hackmate.models.skills import Skill
from hackmate.models.user_skill import UserSkill

__all__ = [
	"AuthSessionRecord",
	"Identity",
	"ProfileModel",
	"Skill",
	"UserSkill",
]
