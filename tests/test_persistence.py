"""Profile store and saved-plan endpoints against a real (SQLite) session."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, patch

from sqlalchemy import func, select

from core.models.profile import ProfileDraft
from core.profile_draft import to_profile
from services.db import MealPlanRow, ProfileStore, UserProfileRow, WorkoutPlanRow
from tests.conftest import USER_ID, make_profile

OLDER = datetime(2026, 1, 10, 8, 0)
NEWER = datetime(2026, 1, 12, 8, 0)


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestProfileStore:
    async def test_unknown_user_has_no_profile(self, sqlite_session):
        assert await ProfileStore(sqlite_session).get_profile("nobody") is None

    async def test_upsert_inserts_then_updates_same_row(self, sqlite_session):
        store = ProfileStore(sqlite_session)

        first = await store.upsert_profile(make_profile(updated_at=None))
        assert first.updated_at is not None
        assert first.target_calories == 2894

        heavier = ProfileDraft.model_validate(
            first.model_dump(exclude={"user_id", "updated_at"}) | {"weight": 72.0}
        )
        second = await store.upsert_profile(to_profile(heavier, USER_ID))

        assert await _count(sqlite_session, UserProfileRow) == 1
        loaded = await store.get_profile(USER_ID)
        assert loaded.weight == 72.0
        assert loaded.bmr == second.bmr == 1694
        assert loaded.dietary_restrictions == ["lactose-free"]

    async def test_profiles_are_per_user(self, sqlite_session):
        store = ProfileStore(sqlite_session)
        await store.upsert_profile(make_profile())
        await store.upsert_profile(make_profile(user_id="other-user", age=40))

        assert await _count(sqlite_session, UserProfileRow) == 2
        assert (await store.get_profile(USER_ID)).age == 25
        assert (await store.get_profile("other-user")).age == 40


class TestProfileRoundTripThroughApi:
    async def test_chat_intro_lands_in_user_profiles(self, db_client, auth_headers, sqlite_session):
        reply = AsyncMock(return_value={"response": "ok"})
        with patch("services.chat_agent.send_chat", reply):
            resp = await db_client.post(
                "/api/v1/chat",
                json={"message": "I'm 25 years old, 70kg, 175cm tall, male, want to build muscle"},
                headers=auth_headers,
            )
        assert resp.json()["saved"] is True

        got = await db_client.get("/api/v1/user-profile", headers=auth_headers)
        profile = got.json()["profile"]
        assert profile["target_protein"] == 217
        assert profile["activity_level"] == "moderately_active"


class TestSavedPlanListing:
    async def test_meal_plans_newest_first_and_own_only(self, db_client, auth_headers, sqlite_session):
        sqlite_session.add_all(
            [
                MealPlanRow(user_id=USER_ID, goal="old", ingredients=[], meals=[], created_at=OLDER),
                MealPlanRow(user_id=USER_ID, goal="new", ingredients=[], meals=[], created_at=NEWER),
                MealPlanRow(user_id="someone-else", goal="theirs", ingredients=[], meals=[]),
            ]
        )
        await sqlite_session.commit()

        resp = await db_client.get("/api/v1/meal-plans", headers=auth_headers)
        assert resp.status_code == 200
        assert [p["goal"] for p in resp.json()] == ["new", "old"]

    async def test_workout_plans_newest_first(self, db_client, auth_headers, sqlite_session):
        sqlite_session.add_all(
            [
                WorkoutPlanRow(user_id=USER_ID, goal="base", days=3, created_at=OLDER),
                WorkoutPlanRow(user_id=USER_ID, goal="peak", days=5, created_at=NEWER),
            ]
        )
        await sqlite_session.commit()

        resp = await db_client.get("/api/v1/workout-plans", headers=auth_headers)
        assert [p["goal"] for p in resp.json()] == ["peak", "base"]

    async def test_empty_listing(self, db_client, auth_headers):
        resp = await db_client.get("/api/v1/workout-plans", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == []


class TestWorkoutPlanUpdate:
    async def test_update_replaces_latest_plan(self, db_client, auth_headers, sqlite_session):
        old = WorkoutPlanRow(user_id=USER_ID, goal="base", days=3, created_at=OLDER)
        latest = WorkoutPlanRow(user_id=USER_ID, goal="peak", days=5, created_at=NEWER)
        sqlite_session.add_all([old, latest])
        await sqlite_session.commit()

        body = {
            "action": "update",
            "workout_plan": {"goal": "deload", "split": ["Full body"], "days": 2},
        }
        resp = await db_client.post("/api/v1/workout-plans", json=body, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["id"] == latest.id
        assert resp.json()["goal"] == "deload"

        assert await _count(sqlite_session, WorkoutPlanRow) == 2
        assert (await sqlite_session.get(WorkoutPlanRow, old.id)).goal == "base"

    async def test_update_without_saved_plan_adds_one(self, db_client, auth_headers, sqlite_session):
        body = {"action": "update", "workout_plan": {"goal": "start", "days": 3}}
        resp = await db_client.post("/api/v1/workout-plans", json=body, headers=auth_headers)
        assert resp.status_code == 201
        assert await _count(sqlite_session, WorkoutPlanRow) == 1

    async def test_update_ignores_other_users_plans(self, db_client, auth_headers, sqlite_session):
        theirs = WorkoutPlanRow(user_id="someone-else", goal="theirs", days=4, created_at=NEWER)
        sqlite_session.add(theirs)
        await sqlite_session.commit()

        body = {"action": "update", "workout_plan": {"goal": "mine", "days": 3}}
        resp = await db_client.post("/api/v1/workout-plans", json=body, headers=auth_headers)
        assert resp.json()["id"] != theirs.id
        assert (await sqlite_session.get(WorkoutPlanRow, theirs.id)).goal == "theirs"
