from __future__ import annotations

import os
from typing import Any, Mapping

import pytest
from fastapi.testclient import TestClient


def pytest_configure() -> None:
    # Ensure the SQLAlchemy engine is created against sqlite for tests.
    os.environ["DB_URL"] = "sqlite:///./test.db"
    os.environ["GATEWAY_BACKEND"] = "sql"
    os.environ["ENVIRONMENT"] = "test"
    os.environ["JWT_SECRET"] = "test-secret"


CATALOG = [
    {"id": "1", "name": "React", "category": "Frontend"},
    {"id": "2", "name": "Go", "category": "Backend"},
    {"id": "3", "name": "Figma", "category": "Design"},
]


def _make_fake_gateway_class():
    from hackmate.gateway import Gateway, GatewayError
    from hackmate.schemas.auth import AuthSession, Identity

    class FakeGateway(Gateway):
        """In-memory gateway that records every call and can be told to fail."""

        def __init__(self) -> None:
            self.passwords: dict[str, str] = {}
            self.identities: dict[str, Identity] = {}
            self.tokens: dict[str, Identity] = {}
            self.tables: dict[str, list[dict[str, Any]]] = {"profiles": [], "skills": [], "user_skills": []}
            self.calls: list[tuple[Any, ...]] = []
            self.failures: dict[str, GatewayError] = {}

        def _record(self, op: str, *args: Any) -> None:
            self.calls.append((op, *args))
            exc = self.failures.get(op)
            if exc is not None:
                raise exc

        def ops(self) -> list[str]:
            return [call[0] for call in self.calls]

        def add_user(self, email: str, password: str, username: str, **profile: Any) -> Identity:
            identity = Identity(id=f"user-{len(self.identities) + 1}", email=email)
            self.passwords[email] = password
            self.identities[email] = identity
            self.tables["profiles"].append({"id": identity.id, "username": username, "email": email, **profile})
            return identity

        def _session(self, identity: Identity) -> AuthSession:
            token = f"token-{identity.id}-{len(self.tokens)}"
            self.tokens[token] = identity
            return AuthSession(access_token=token, identity=identity)

        async def auth_sign_up(self, email: str, password: str) -> AuthSession:
            self._record("auth_sign_up", email)
            if email in self.identities:
                raise GatewayError("User already registered", status_code=422)
            identity = Identity(id=f"user-{len(self.identities) + 1}", email=email)
            self.passwords[email] = password
            self.identities[email] = identity
            return self._session(identity)

        async def auth_sign_in(self, email: str, password: str) -> AuthSession:
            self._record("auth_sign_in", email)
            if self.passwords.get(email) != password:
                raise GatewayError("Invalid login credentials", status_code=400)
            return self._session(self.identities[email])

        async def auth_sign_out(self, access_token: str) -> None:
            self._record("auth_sign_out")
            self.tokens.pop(access_token, None)

        async def auth_current_user(self, access_token: str | None) -> Identity | None:
            self._record("auth_current_user")
            return self.tokens.get(access_token or "")

        async def select_all(self, table: str, order_by: str | None = None) -> list[dict[str, Any]]:
            self._record("select_all", table)
            rows = [dict(row) for row in self.tables[table]]
            if order_by:
                rows.sort(key=lambda row: row[order_by])
            return rows

        async def select_one_by_id(self, table: str, id: str) -> dict[str, Any]:
            self._record("select_one_by_id", table, id)
            rows = [row for row in self.tables[table] if row.get("id") == id]
            if len(rows) != 1:
                raise GatewayError("JSON object requested, multiple (or no) rows returned", status_code=406)
            return dict(rows[0])

        async def select_joined(self, table: str, join, filters: Mapping[str, Any] | None = None):
            self._record("select_joined", table)
            rows = [
                row
                for row in self.tables[table]
                if all(row.get(name) == value for name, value in (filters or {}).items())
            ]
            return [self._embed(table, row, join.path) for row in rows]

        def _embed(self, table: str, row: dict[str, Any], path: tuple[str, ...]) -> dict[str, Any]:
            data = dict(row)
            if not path:
                return data
            name = path[0]
            if table == "profiles" and name == "user_skills":
                links = [link for link in self.tables["user_skills"] if link["profile_id"] == row["id"]]
                data[name] = [self._embed("user_skills", link, path[1:]) for link in links]
            elif table == "user_skills" and name == "skills":
                skill = next((s for s in self.tables["skills"] if s["id"] == row["skill_id"]), None)
                data[name] = None if skill is None else dict(skill)
            return data

        async def insert(self, table: str, record: Mapping[str, Any]) -> None:
            self._record("insert", table, dict(record))
            if table == "user_skills":
                key = (record["profile_id"], record["skill_id"])
                if any((r["profile_id"], r["skill_id"]) == key for r in self.tables[table]):
                    raise GatewayError('duplicate key value violates unique constraint "user_skills_pkey"', 409)
            self.tables[table].append(dict(record))

        async def update(self, table: str, id: str, partial: Mapping[str, Any]) -> None:
            self._record("update", table, id, dict(partial))
            for row in self.tables[table]:
                if row.get("id") == id:
                    row.update(partial)

        async def delete_by_keys(self, table: str, keys: Mapping[str, Any]) -> None:
            self._record("delete_by_keys", table, dict(keys))
            self.tables[table] = [
                row for row in self.tables[table] if not all(row.get(k) == v for k, v in keys.items())
            ]

    return FakeGateway


@pytest.fixture()
def fake_gateway() -> Any:
    gateway = _make_fake_gateway_class()()
    gateway.tables["skills"] = [dict(skill) for skill in CATALOG]
    return gateway


def reset_database() -> None:
    from hackmate import models  # noqa: F401
    from hackmate.database import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_catalog() -> None:
    from hackmate.database import SessionLocal
    from hackmate.models.skills import Skill

    with SessionLocal() as db:
        for skill in CATALOG:
            db.add(Skill(**skill))
        db.commit()


@pytest.fixture()
def sql_gateway() -> Any:
    from hackmate.gateway.sql import SqlGateway

    reset_database()
    seed_catalog()
    return SqlGateway()


@pytest.fixture()
def client() -> Any:
    from hackmate.main import create_app

    reset_database()
    seed_catalog()

    app = create_app()
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def broken_sql_gateway() -> Any:
    """SqlGateway over a fresh in-memory database that has no tables."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker

    from hackmate.gateway.sql import SqlGateway

    return SqlGateway(sessionmaker(bind=create_engine("sqlite://"), future=True))
