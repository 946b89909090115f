from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func
from hackmate.database import Base


class Identity(Base):
    __tablename__ = "auth_identities"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class AuthSessionRecord(Base):
    __tablename__ = "auth_sessions"

    # Matches the "jti" claim of the access token issued at sign-in.
    id = Column(String(36), primary_key=True)
    identity_id = Column(String(36), ForeignKey("auth_identities.id", ondelete="CASCADE"), nullable=False, index=True)
    revoked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
