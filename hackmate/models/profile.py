from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship
from hackmate.database import Base


class ProfileModel(Base):
    __tablename__ = "profiles"

    id = Column(String(36), ForeignKey("auth_identities.id", ondelete="CASCADE"), primary_key=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    github_url = Column(String(1024), nullable=True)
    linkedin_url = Column(String(1024), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user_skills = relationship(
        "UserSkill",
        back_populates="profiles",
        order_by="UserSkill.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
