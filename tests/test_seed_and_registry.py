from __future__ import annotations

import asyncio

from hackmate.data.skills import DEFAULT_SKILLS, skill_id_for
from hackmate.database import SessionLocal
from hackmate.models.skills import Skill
from hackmate.services.profile_session import SessionState
from hackmate.services.session_registry import SessionRegistry
from scripts.seed_skills import seed


def test_skill_ids_are_stable() -> None:
    assert skill_id_for("React") == skill_id_for(" react ")
    assert skill_id_for("React") != skill_id_for("Vue")


def test_seed_is_idempotent(sql_gateway) -> None:
    inserted = seed(DEFAULT_SKILLS)
    assert inserted == len(DEFAULT_SKILLS) - 3  # React, Go and Figma are already in the test catalog

    assert seed(DEFAULT_SKILLS) == 0
    with SessionLocal() as db:
        assert db.query(Skill).count() == len(DEFAULT_SKILLS)


def test_registry_reuses_and_evicts_controllers(fake_gateway) -> None:
    registry = SessionRegistry(fake_gateway, max_sessions=2)

    async def scenario() -> None:
        first_id, first = await registry.get_or_create(None)
        assert first.state is SessionState.UNAUTHENTICATED
        assert first.loading is False

        same_id, same = await registry.get_or_create(first_id)
        assert (same_id, same) == (first_id, first)

        await registry.get_or_create(None)
        await registry.get_or_create(None)
        assert len(registry) == 2
        assert registry.get(first_id) is None

        unknown_id, _ = await registry.get_or_create("forged-cookie")
        assert unknown_id != "forged-cookie"

    asyncio.run(scenario())
