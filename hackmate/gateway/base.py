from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from hackmate.schemas.auth import AuthSession, Identity


PROFILES = "profiles"
SKILLS = "skills"
USER_SKILLS = "user_skills"

TABLES: tuple[str, ...] = (PROFILES, SKILLS, USER_SKILLS)


class GatewayError(RuntimeError):
    """Any failure reported by (or while reaching) the backing service."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class JoinSpec:
    """Nested relation path to embed in a select.

    ``JoinSpec(path=("user_skills", "skills"), columns=("id", "name", "category"))``
    reads as "for each row, embed its user_skills, and inside each of those the
    referenced skills row restricted to the given columns".
    """

    path: tuple[str, ...]
    columns: tuple[str, ...] = field(default_factory=tuple)

    def to_select(self) -> str:
        inner = ",".join(self.columns) if self.columns else "*"
        for name in reversed(self.path):
            inner = f"{name}({inner})"
        return f"*,{inner}"


PROFILE_SKILLS_JOIN = JoinSpec(path=(USER_SKILLS, SKILLS), columns=("id", "name", "category"))
USER_SKILL_ROWS_JOIN = JoinSpec(path=(SKILLS,))


class Gateway(ABC):
    """Authentication plus CRUD over profiles, skills and user_skills."""

    @abstractmethod
    async def auth_sign_up(self, email: str, password: str) -> AuthSession: ...

    @abstractmethod
    async def auth_sign_in(self, email: str, password: str) -> AuthSession: ...

    @abstractmethod
    async def auth_sign_out(self, access_token: str) -> None: ...

    @abstractmethod
    async def auth_current_user(self, access_token: str | None) -> Identity | None: ...

    @abstractmethod
    async def select_all(self, table: str, order_by: str | None = None) -> list[dict[str, Any]]: ...

    @abstractmethod
    async def select_one_by_id(self, table: str, id: str) -> dict[str, Any]: ...

    @abstractmethod
    async def select_joined(
        self,
        table: str,
        join: JoinSpec,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]: ...

    @abstractmethod
    async def insert(self, table: str, record: Mapping[str, Any]) -> None: ...

    @abstractmethod
    async def update(self, table: str, id: str, partial: Mapping[str, Any]) -> None: ...

    @abstractmethod
    async def delete_by_keys(self, table: str, keys: Mapping[str, Any]) -> None: ...

    def bind(self, access_token: str | None) -> Gateway:
        """Return a gateway whose data calls run as the given session."""
        return self

    async def aclose(self) -> None:
        return None


def require_table(table: str) -> str:
    if table not in TABLES:
        raise GatewayError(f'relation "{table}" does not exist', status_code=404)
    return table
