from hackmate.data.skills import DEFAULT_SKILLS, skill_id_for

__all__ = ["DEFAULT_SKILLS", "skill_id_for"]
