"""Seed script for the shared task template library.

Creates the standard design-project task list that new projects are
materialized from (`designhub.scheduling.library`).

Usage:
    python -m designhub.scripts.seed_task_templates

Existing templates are left untouched: a template is only inserted when its
position is free, so the script can be re-run after the library grows.
"""

import asyncio
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from designhub.db.session import async_session_factory
from designhub.models.project import TaskTemplate
from designhub.scheduling.library import TEMPLATE_LIBRARY


async def seed_task_templates(db: AsyncSession) -> int:
    """Insert missing templates and wire offset anchors. Returns the number inserted."""
    result = await db.execute(select(TaskTemplate))
    existing = {t.position: t for t in result.scalars().all()}

    created = 0
    for data in TEMPLATE_LIBRARY:
        if data["position"] in existing:
            continue
        template = TaskTemplate(
            id=uuid4(),
            title=data["title"],
            role=data["role"],
            position=data["position"],
            schedule_kind="offset" if "anchor" in data else "none",
            offset_days=data.get("offset_days"),
        )
        db.add(template)
        existing[template.position] = template
        created += 1
    await db.flush()

    # First template with the anchor title wins
    by_title: dict[str, TaskTemplate] = {}
    for position in sorted(existing):
        by_title.setdefault(existing[position].title, existing[position])

    for data in TEMPLATE_LIBRARY:
        if "anchor" not in data:
            continue
        template = existing[data["position"]]
        anchor = by_title.get(data["anchor"])
        if anchor is None:
            print(f"  Anchor {data['anchor']!r} not found for {template.title!r}")
            continue
        if template.anchor_template_id is None:
            template.anchor_template_id = anchor.id

    await db.commit()
    return created


async def main() -> None:
    """Main entry point."""
    print("Seeding task templates...")
    print("-" * 50)

    async with async_session_factory() as db:
        try:
            created = await seed_task_templates(db)
        except Exception as e:
            print(f"Error seeding task templates: {e}")
            await db.rollback()
            raise

    print(f"Created {created} task templates ({len(TEMPLATE_LIBRARY)} in library)")


if __name__ == "__main__":
    asyncio.run(main())
