"""
horizons_api.db.init_db

Schema bootstrap.

Responsibilities:
- Create tables (and their unique slug indexes) on startup when missing.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from horizons_api.db import models  # noqa: F401  # register models on Base.metadata
from horizons_api.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    # create_all is checkfirst; existing tables are left untouched.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
