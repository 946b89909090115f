from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Mapping
from uuid import uuid4

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hackmate.config import settings
from hackmate.database import SessionLocal
from hackmate.gateway.base import PROFILES, SKILLS, USER_SKILLS, Gateway, GatewayError, JoinSpec, require_table
from hackmate.models.identity import AuthSessionRecord, Identity as IdentityModel
from hackmate.models.profile import ProfileModel
from hackmate.models.skills import Skill
from hackmate.models.user_skill import UserSkill
from hackmate.schemas.auth import AuthSession, Identity
from hackmate.utils.jwt_handler import TokenError, create_access_token, decode_access_token
from hackmate.utils.password_hash import hash_password, verify_password


logger = logging.getLogger(__name__)

_MODELS: dict[str, type] = {
    PROFILES: ProfileModel,
    SKILLS: Skill,
    USER_SKILLS: UserSkill,
}

MIN_PASSWORD_LENGTH = 6


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _row_to_dict(row: Any, columns: tuple[str, ...] | None = None) -> dict[str, Any]:
    names = [c.name for c in row.__table__.columns]
    if columns:
        names = [n for n in names if n in columns]
    return {name: _jsonable(getattr(row, name)) for name in names}


def _integrity_message(table: str, exc: IntegrityError) -> str:
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = detail.lower()
    if "unique" in lowered or "duplicate" in lowered:
        return f'duplicate key value violates unique constraint on "{table}"'
    if "foreign key" in lowered:
        return f'insert or update on table "{table}" violates foreign key constraint'
    if "not null" in lowered:
        return f'null value in column violates not-null constraint on "{table}"'
    return detail


def _database_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class SqlGateway(Gateway):
    """In-process gateway on SQLAlchemy; mirrors the hosted service's contract.

    Each call runs its blocking session work on the threadpool and reports
    database failures as ``GatewayError``.
    """

    def __init__(self, session_factory: sessionmaker | None = None, *, token_ttl: timedelta | None = None) -> None:
        self._session_factory = session_factory or SessionLocal
        self._token_ttl = token_ttl or timedelta(minutes=settings.access_token_expire_minutes)

    async def _run(self, op: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await run_in_threadpool(func, *args)
        except SQLAlchemyError as exc:
            logger.exception("gateway.%s failed", op)
            raise GatewayError(_database_message(exc), status_code=500) from exc

    # --- auth -------------------------------------------------------------

    async def auth_sign_up(self, email: str, password: str) -> AuthSession:
        return await self._run("auth_sign_up", self._sign_up, email, password)

    async def auth_sign_in(self, email: str, password: str) -> AuthSession:
        return await self._run("auth_sign_in", self._sign_in, email, password)

    async def auth_sign_out(self, access_token: str) -> None:
        await self._run("auth_sign_out", self._sign_out, access_token)

    async def auth_current_user(self, access_token: str | None) -> Identity | None:
        return await self._run("auth_current_user", self._current_user, access_token)

    def _sign_up(self, email: str, password: str) -> AuthSession:
        email = _normalize_email(email)
        if not email or "@" not in email:
            raise GatewayError("Unable to validate email address: invalid format", status_code=400)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise GatewayError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                status_code=422,
            )
        with self._session_factory() as db:
            if db.query(IdentityModel).filter(IdentityModel.email == email).first():
                raise GatewayError("User already registered", status_code=422)
            identity = IdentityModel(id=str(uuid4()), email=email, password=hash_password(password))
            db.add(identity)
            db.commit()
            db.refresh(identity)
            logger.info("auth.sign_up identity=%s", identity.id)
            return self._issue_session(db, identity)

    def _sign_in(self, email: str, password: str) -> AuthSession:
        email = _normalize_email(email)
        with self._session_factory() as db:
            identity = db.query(IdentityModel).filter(IdentityModel.email == email).first()
            if not identity or not verify_password(password or "", identity.password):
                raise GatewayError("Invalid login credentials", status_code=400)
            return self._issue_session(db, identity)

    def _sign_out(self, access_token: str) -> None:
        claims = self._claims(access_token)
        if claims is None:
            return
        with self._session_factory() as db:
            record = db.get(AuthSessionRecord, claims.get("jti"))
            if record is not None and not record.revoked:
                record.revoked = True
                db.commit()
                logger.info("auth.sign_out identity=%s", record.identity_id)

    def _current_user(self, access_token: str | None) -> Identity | None:
        claims = self._claims(access_token)
        if claims is None:
            return None
        with self._session_factory() as db:
            record = db.get(AuthSessionRecord, claims.get("jti"))
            if record is None or record.revoked:
                return None
            identity = db.get(IdentityModel, record.identity_id)
            if identity is None:
                return None
            return Identity(id=identity.id, email=identity.email)

    def _issue_session(self, db: Session, identity: IdentityModel) -> AuthSession:
        record = AuthSessionRecord(id=str(uuid4()), identity_id=identity.id)
        db.add(record)
        db.commit()
        token = create_access_token({"sub": identity.id, "email": identity.email, "jti": record.id}, self._token_ttl)
        return AuthSession(access_token=token, identity=Identity(id=identity.id, email=identity.email))

    @staticmethod
    def _claims(access_token: str | None) -> dict | None:
        if not access_token:
            return None
        try:
            claims = decode_access_token(access_token)
        except TokenError:
            return None
        if not claims.get("sub") or not claims.get("jti"):
            return None
        return claims

    # --- data -------------------------------------------------------------

    async def select_all(self, table: str, order_by: str | None = None) -> list[dict[str, Any]]:
        return await self._run("select_all", self._select_all, table, order_by)

    async def select_one_by_id(self, table: str, id: str) -> dict[str, Any]:
        return await self._run("select_one_by_id", self._select_one_by_id, table, id)

    async def select_joined(
        self,
        table: str,
        join: JoinSpec,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        return await self._run("select_joined", self._select_joined, table, join, filters)

    async def insert(self, table: str, record: Mapping[str, Any]) -> None:
        await self._run("insert", self._insert, table, record)

    async def update(self, table: str, id: str, partial: Mapping[str, Any]) -> None:
        await self._run("update", self._update, table, id, partial)

    async def delete_by_keys(self, table: str, keys: Mapping[str, Any]) -> None:
        await self._run("delete_by_keys", self._delete_by_keys, table, keys)

    def _select_all(self, table: str, order_by: str | None) -> list[dict[str, Any]]:
        model = self._model(table)
        with self._session_factory() as db:
            query = db.query(model)
            if order_by:
                query = query.order_by(self._column(table, order_by))
            return [_row_to_dict(row) for row in query.all()]

    def _select_one_by_id(self, table: str, id: str) -> dict[str, Any]:
        model = self._model(table)
        column = self._column(table, "id")
        with self._session_factory() as db:
            rows = db.query(model).filter(column == id).limit(2).all()
            if len(rows) != 1:
                raise GatewayError(
                    "JSON object requested, multiple (or no) rows returned",
                    status_code=406,
                )
            return _row_to_dict(rows[0])

    def _select_joined(
        self,
        table: str,
        join: JoinSpec,
        filters: Mapping[str, Any] | None,
    ) -> list[dict[str, Any]]:
        model = self._model(table)
        with self._session_factory() as db:
            query = db.query(model)
            for name, value in (filters or {}).items():
                query = query.filter(self._column(table, name) == value)
            return [self._embed(row, join.path, join.columns) for row in query.all()]

    def _insert(self, table: str, record: Mapping[str, Any]) -> None:
        model = self._model(table)
        values = dict(record)
        for name in values:
            self._column(table, name)
        if table == SKILLS and not values.get("id"):
            values["id"] = str(uuid4())
        with self._session_factory() as db:
            db.add(model(**values))
            self._commit(db, table)

    def _update(self, table: str, id: str, partial: Mapping[str, Any]) -> None:
        model = self._model(table)
        values = {name: value for name, value in partial.items() if name != "id"}
        for name in values:
            self._column(table, name)
        if not values:
            return
        with self._session_factory() as db:
            db.query(model).filter(self._column(table, "id") == id).update(values, synchronize_session=False)
            self._commit(db, table)

    def _delete_by_keys(self, table: str, keys: Mapping[str, Any]) -> None:
        model = self._model(table)
        if not keys:
            # Mirrors the hosted service: an unfiltered DELETE is refused.
            raise GatewayError("DELETE requires a WHERE clause", status_code=400)
        with self._session_factory() as db:
            query = db.query(model)
            for name, value in keys.items():
                query = query.filter(self._column(table, name) == value)
            query.delete(synchronize_session=False)
            self._commit(db, table)

    # --- helpers ----------------------------------------------------------

    @staticmethod
    def _model(table: str) -> type:
        return _MODELS[require_table(table)]

    def _column(self, table: str, name: str):
        model = self._model(table)
        if name not in model.__table__.columns:
            raise GatewayError(f"Could not find the '{name}' column of '{table}'", status_code=400)
        return getattr(model, name)

    def _embed(self, row: Any, path: tuple[str, ...], columns: tuple[str, ...]) -> dict[str, Any]:
        data = _row_to_dict(row, None if path else columns)
        if not path:
            return data
        name, rest = path[0], path[1:]
        if name not in inspect(type(row)).relationships:
            raise GatewayError(
                f"Could not find a relationship between '{row.__tablename__}' and '{name}'",
                status_code=400,
            )
        related = getattr(row, name)
        if isinstance(related, list):
            data[name] = [self._embed(item, rest, columns) for item in related]
        else:
            data[name] = None if related is None else self._embed(related, rest, columns)
        return data

    @staticmethod
    def _commit(db: Session, table: str) -> None:
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise GatewayError(_integrity_message(table, exc), status_code=409) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("gateway.commit failed table=%s", table)
            raise GatewayError(_database_message(exc), status_code=500) from exc
