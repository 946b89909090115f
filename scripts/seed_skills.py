from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    # Allow running as: python scripts/seed_skills.py
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from hackmate.data.skills import DEFAULT_SKILLS, skill_id_for  # noqa: E402
from hackmate.database import Base, SessionLocal, engine  # noqa: E402
from hackmate.models.skills import Skill  # noqa: E402


def _load_dataset(path: Path) -> list[tuple[str, str]]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError("dataset must be a JSON array of {name, category} objects")

    items: list[tuple[str, str]] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        category = str(entry.get("category") or "").strip()
        if name and category:
            items.append((name, category))
    return items


def seed(items: list[tuple[str, str]]) -> int:
    inserted = 0
    with SessionLocal() as db:
        for name, category in items:
            exists = db.query(Skill).filter(Skill.name == name).first()
            if exists:
                if exists.category != category:
                    exists.category = category
                continue
            db.add(Skill(id=skill_id_for(name), name=name, category=category))
            inserted += 1
        db.commit()
    return inserted


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the skill catalog into the ORM DB.")
    parser.add_argument("--dataset", default=None, help="Optional JSON file: [{\"name\": ..., \"category\": ...}]")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)

    items = _load_dataset(Path(args.dataset)) if args.dataset else DEFAULT_SKILLS
    inserted = seed(items)
    print(f"Seeded skills: inserted={inserted} total={len(items)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
