from __future__ import annotations

from uuid import NAMESPACE_URL, uuid5


# (name, category) pairs seeded into the skill catalog.
DEFAULT_SKILLS: list[tuple[str, str]] = [
    ("React", "Frontend"),
    ("Vue", "Frontend"),
    ("TypeScript", "Frontend"),
    ("Tailwind CSS", "Frontend"),
    ("Python", "Backend"),
    ("Go", "Backend"),
    ("Node.js", "Backend"),
    ("PostgreSQL", "Backend"),
    ("Swift", "Mobile"),
    ("Kotlin", "Mobile"),
    ("Flutter", "Mobile"),
    ("PyTorch", "Machine Learning"),
    ("Data Analysis", "Machine Learning"),
    ("Figma", "Design"),
    ("UX Research", "Design"),
    ("Docker", "DevOps"),
    ("AWS", "DevOps"),
    ("Solidity", "Blockchain"),
]


def skill_id_for(name: str) -> str:
    # Stable ids so reseeding never duplicates a skill.
    return str(uuid5(NAMESPACE_URL, f"hackmate:skill:{name.strip().lower()}"))
