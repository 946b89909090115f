from sqlalchemy import Column, String
from hackmate.database import Base


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), unique=True, index=True, nullable=False)
    category = Column(String(255), index=True, nullable=False)
