from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

from hackmate.gateway import PROFILES, USER_SKILLS, GatewayError
from hackmate.schemas.profile import EDITABLE_FIELDS, Profile, ProfileDraft, ProfileSkill
from hackmate.schemas.session import AuthFormState, ProfileViewState
from hackmate.schemas.skills import Skill
from hackmate.services.loaders import fetch_profile_skills, fetch_skill_catalog
from hackmate.services.session_context import SessionContext


logger = logging.getLogger(__name__)

USERNAME_REQUIRED = "Username is required"


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VIEWING = "viewing"
    EDITING = "editing"


class AuthMode(str, Enum):
    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


class ValidationError(ValueError):
    """Rejected locally, before any gateway call."""


class SessionStateError(RuntimeError):
    """Operation is not available in the controller's current state."""


def _require_username(username: str | None) -> str:
    value = (username or "").strip()
    if not value:
        raise ValidationError(USERNAME_REQUIRED)
    return value


class ProfileSessionController:
    """Profile page state machine: sign-in/up/out, profile editing and skill membership.

    Errors from the gateway and from local validation are surfaced the same
    way: the message lands in ``error`` and the state does not advance.
    """

    def __init__(self, context: SessionContext) -> None:
        self.context = context
        self.state = SessionState.UNAUTHENTICATED
        self.auth_mode = AuthMode.SIGN_IN
        self.auth_form = AuthFormState()
        self.loading = True
        self.error: str | None = None
        self.profile: Profile | None = None
        self.draft: ProfileDraft | None = None
        self.skills: list[Skill] = []
        self.catalog: list[Skill] = []
        self.selected_skill: str | None = None

    # --- lifecycle --------------------------------------------------------

    async def init(self) -> None:
        """Mount: resume an existing session if the context still holds one."""
        try:
            await self._check_user()
        except GatewayError as exc:
            self._fail("session.init", exc)
        finally:
            self.loading = False

    async def _check_user(self) -> None:
        identity = await self.context.init()
        if identity is not None:
            await self._load_user_data(identity.id)

    async def _load_user_data(self, user_id: str) -> None:
        data = self.context.data
        profile_row, catalog, skills = await asyncio.gather(
            data.select_one_by_id(PROFILES, user_id),
            fetch_skill_catalog(data),
            fetch_profile_skills(data, user_id),
        )
        self.profile = Profile.model_validate(profile_row)
        self.catalog = catalog
        self.skills = skills
        self.draft = None
        self.selected_skill = None
        self.state = SessionState.VIEWING

    # --- unauthenticated --------------------------------------------------

    def toggle_auth_mode(self) -> None:
        self._require(SessionState.UNAUTHENTICATED)
        self.auth_mode = AuthMode.SIGN_UP if self.auth_mode is AuthMode.SIGN_IN else AuthMode.SIGN_IN
        self.error = None
        self.auth_form = AuthFormState()

    async def sign_in(self, email: str, password: str) -> None:
        self._require(SessionState.UNAUTHENTICATED)
        self.error = None
        self.auth_form = AuthFormState(email=email)
        try:
            session = await self.context.gateway.auth_sign_in(email, password)
            self.context.establish(session)
            await self._check_user()
        except GatewayError as exc:
            await self._discard_session()
            self._fail("auth.sign_in", exc)

    async def sign_up(self, email: str, password: str, username: str | None) -> None:
        self._require(SessionState.UNAUTHENTICATED)
        self.error = None
        self.auth_form = AuthFormState(email=email, username=username or "")
        try:
            username = _require_username(username)
            session = await self.context.gateway.auth_sign_up(email, password)
            self.context.establish(session)
            # The identity is not rolled back if this insert fails.
            await self.context.data.insert(
                PROFILES,
                {"id": session.identity.id, "username": username, "email": email},
            )
            await self._check_user()
        except (ValidationError, GatewayError) as exc:
            await self._discard_session()
            self._fail("auth.sign_up", exc)

    # --- authenticated ----------------------------------------------------

    async def sign_out(self) -> None:
        self._require(SessionState.VIEWING, SessionState.EDITING)
        try:
            await self.context.teardown()
        except GatewayError as exc:
            self._reset()
            self._fail("auth.sign_out", exc)
            return
        self._reset()

    def begin_edit(self) -> None:
        self._require(SessionState.VIEWING)
        self.draft = ProfileDraft.from_profile(self.profile)
        self.selected_skill = None
        self.error = None
        self.state = SessionState.EDITING

    def update_draft(self, **fields: Any) -> None:
        self._require(SessionState.EDITING)
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        changes = {name: value for name, value in fields.items() if value is not None}
        self.draft = self.draft.model_copy(update=changes)

    async def save(self) -> None:
        self._require(SessionState.EDITING)
        self.error = None
        record = self.draft.to_record()
        try:
            _require_username(record["username"])
            await self.context.data.update(PROFILES, self._identity_id(), record)
        except (ValidationError, GatewayError) as exc:
            self._fail("profile.save", exc)
            return
        self.profile = self.profile.model_copy(update=record)
        self.draft = None
        self.state = SessionState.VIEWING
        logger.info("profile.save user=%s", self.profile.id)

    def select_skill(self, skill_id: str | None) -> None:
        self._require(SessionState.EDITING)
        self.selected_skill = skill_id or None

    async def add_skill(self, skill_id: str | None = None) -> None:
        self._require(SessionState.EDITING)
        skill_id = skill_id or self.selected_skill
        if not skill_id:
            return
        self.error = None
        try:
            await self.context.data.insert(USER_SKILLS, self._membership(skill_id))
        except GatewayError as exc:
            self._fail("skills.add", exc)
            return
        skill = next((s for s in self.catalog if s.id == skill_id), None)
        if skill is not None and all(s.id != skill_id for s in self.skills):
            self.skills = [*self.skills, skill]
        self.selected_skill = None

    async def remove_skill(self, skill_id: str) -> None:
        self._require(SessionState.EDITING)
        self.error = None
        try:
            await self.context.data.delete_by_keys(USER_SKILLS, self._membership(skill_id))
        except GatewayError as exc:
            self._fail("skills.remove", exc)
            return
        self.skills = [s for s in self.skills if s.id != skill_id]

    # --- helpers ----------------------------------------------------------

    def snapshot(self) -> ProfileViewState:
        return ProfileViewState(
            state=self.state.value,
            auth_mode=self.auth_mode.value,
            loading=self.loading,
            error=self.error,
            auth_form=self.auth_form,
            profile=self.profile,
            draft=self.draft,
            skills=list(self.skills),
            catalog=list(self.catalog),
            selected_skill=self.selected_skill,
        )

    def _require(self, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise SessionStateError(f"Not allowed while {self.state.value}")

    def _identity_id(self) -> str:
        identity = self.context.identity
        if identity is None:
            raise SessionStateError("No active session")
        return identity.id

    async def _discard_session(self) -> None:
        """Revoke a session that was issued but never reached Viewing."""
        try:
            await self.context.teardown()
        except GatewayError as exc:
            logger.warning("auth.revoke failed error=%s", exc.message)

    def _membership(self, skill_id: str) -> dict[str, str]:
        return ProfileSkill(profile_id=self._identity_id(), skill_id=skill_id).model_dump()

    def _reset(self) -> None:
        self.state = SessionState.UNAUTHENTICATED
        self.auth_mode = AuthMode.SIGN_IN
        self.auth_form = AuthFormState()
        self.error = None
        self.profile = None
        self.draft = None
        self.skills = []
        self.selected_skill = None

    def _fail(self, event: str, exc: Exception) -> None:
        self.error = exc.message if isinstance(exc, GatewayError) else str(exc)
        if isinstance(exc, GatewayError):
            user = self.context.identity.id if self.context.identity else None
            logger.warning("%s failed user=%s status=%s error=%s", event, user, exc.status_code, exc.message)
        else:
            logger.info("%s rejected error=%s", event, exc)
