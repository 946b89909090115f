from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hackmate.database import Base


class UserSkill(Base):
    __tablename__ = "user_skills"

    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    skill_id = Column(String(36), ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationship names mirror the embedded table names so joined reads come back
    # shaped like a REST embed: {"user_skills": [{"skills": {...}}]}.
    profiles = relationship("ProfileModel", back_populates="user_skills")
    skills = relationship("Skill", lazy="joined")
