"""Management CLI.

Usage:
    python -m flockpak.cli init-db             # Create all tables (dev only; use Alembic elsewhere)
    python -m flockpak.cli seed-crate-types    # Insert the standard crate catalog
"""

import asyncio
import sys

from sqlalchemy import select

from flockpak.database import Base, async_session, engine
from flockpak.models import CrateType

# name, length, width, height (cm), tare (kg)
STANDARD_CRATES = [
    ("Standard broiler crate", 96.0, 57.0, 27.0, 7.5),
    ("Large broiler crate", 120.0, 60.0, 27.0, 9.0),
    ("Compact crate", 80.0, 60.0, 27.0, 6.0),
]


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("Tables created.")


async def seed_crate_types():
    created = 0
    async with async_session() as db:
        for name, length, width, height, tare in STANDARD_CRATES:
            existing = await db.scalar(select(CrateType).where(CrateType.name == name))
            if existing:
                print(f"  {name}: exists")
                continue
            db.add(CrateType(
                name=name,
                length_cm=length,
                width_cm=width,
                height_cm=height,
                tare_weight_kg=tare,
            ))
            created += 1
            print(f"  {name}: created")
        await db.commit()
    await engine.dispose()
    print(f"\n{created} crate type(s) created")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "init-db":
        asyncio.run(init_db())
    elif cmd == "seed-crate-types":
        asyncio.run(seed_crate_types())
    else:
        print("Usage: python -m flockpak.cli [init-db|seed-crate-types]")
