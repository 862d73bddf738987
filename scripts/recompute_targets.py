"""
scripts/recompute_targets.py
────────────────────────────────────────────────────────────────────────
Recompute bmr / tdee / calorie + macro targets for stored profiles, e.g.
after a change to the nutrition formulas.

    python -m scripts.recompute_targets            # all profiles
    python -m scripts.recompute_targets --user ID  # one profile
"""
from __future__ import annotations

import asyncio
import logging
from argparse import ArgumentParser

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.models.profile import ProfileDraft
from core.nutrition_calc import InvalidProfileInput
from core.profile_draft import to_profile
from services.db import ProfileStore, UserProfileRow, engine

_LOG = logging.getLogger("scripts.recompute_targets")


async def refresh_user(db: AsyncSession, user_id: str) -> bool:
    """Recompute one profile; returns False when it was skipped."""
    store = ProfileStore(db)
    current = await store.get_profile(user_id)
    if current is None:
        print(f"· skip {user_id} – no profile")
        return False

    draft = ProfileDraft.model_validate(current.model_dump(exclude={"user_id", "updated_at"}))
    try:
        fresh = to_profile(draft, user_id)
    except InvalidProfileInput as exc:
        print(f"  ! {user_id} has unusable body stats: {exc}")
        return False

    if fresh.model_dump(exclude={"updated_at"}) == current.model_dump(exclude={"updated_at"}):
        print(f"· {user_id} already up to date")
        return False

    await store.upsert_profile(fresh)
    print(f"✓ targets updated for {user_id}")
    return True


# ───────────────────────────────
# CLI entrypoint
# ───────────────────────────────
async def _async_main() -> None:
    ap = ArgumentParser()
    ap.add_argument("--user", help="update only this user id")
    args = ap.parse_args()

    session_factory = async_sessionmaker(engine(), expire_on_commit=False)
    async with session_factory() as db:
        if args.user:
            ids = [args.user]
        else:
            ids = (await db.execute(select(UserProfileRow.user_id))).scalars().all()
        updated = 0
        for uid in ids:
            updated += await refresh_user(db, uid)
    _LOG.info("recomputed %d of %d profiles", updated, len(ids))


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_async_main())
