"""Saved programs, scheduling onto the calendar and scheduled workouts."""

import uuid
from datetime import date, timedelta

import pytest

from app.models.program import SavedProgram
from tests.conftest import API

PLAN = {
    "weeks": 2,
    "workouts": [
        {"day": 1, "name": "Push", "focus": "Chest", "exercises": [{"name": "Bench Press", "sets": 3}]},
        {"day": 3, "name": "Pull", "focus": "Back", "exercises": [{"name": "Row", "sets": 3}]},
    ],
}


@pytest.fixture
async def program(client, auth_headers):
    resp = await client.post(
        f"{API}/programs",
        json={"name": "Push/Pull", "days_per_week": 2, "weeks": 2, "goal": "strength", "plan_data": PLAN},
        headers=auth_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_create_and_list_programs(client, auth_headers, program):
    assert program["is_active"] is False
    assert program["source"] == "manual"
    assert program["plan_data"] == PLAN

    resp = await client.get(f"{API}/programs", headers=auth_headers)
    assert [p["id"] for p in resp.json()["data"]] == [program["id"]]


async def test_create_program_validation(client, auth_headers):
    resp = await client.post(
        f"{API}/programs",
        json={"name": "Too Many Days", "days_per_week": 8, "plan_data": PLAN},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid days_per_week: Value must be between 1 and 7"


async def test_schedule_program(client, auth_headers, program):
    start = date.today() + timedelta(days=1)
    resp = await client.post(
        f"{API}/programs/schedule",
        json={"program_id": program["id"], "start_date": start.isoformat()},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["data"] == {
        "scheduled_count": 4,
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=9)).isoformat(),
    }
    assert body["message"] == "Scheduled 4 workouts"

    resp = await client.get(f"{API}/scheduled-workouts", headers=auth_headers)
    scheduled = resp.json()["data"]
    assert [s["title"] for s in scheduled] == [
        "Push (Week 1)",
        "Pull (Week 1)",
        "Push (Week 2)",
        "Pull (Week 2)",
    ]
    assert all(s["status"] == "planned" and s["program_id"] == program["id"] for s in scheduled)
    assert scheduled[0]["notes"] == "From program: Push/Pull\nFocus: Chest"

    resp = await client.get(f"{API}/programs/{program['id']}", headers=auth_headers)
    assert resp.json()["data"]["is_active"] is True

    resp = await client.post(
        f"{API}/programs/schedule",
        json={"program_id": program["id"], "start_date": start.isoformat()},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("This program is already active")


async def test_schedule_program_errors(client, auth_headers):
    url = f"{API}/programs/schedule"
    resp = await client.post(url, json={"program_id": "nope", "start_date": "2024-07-01"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid program_id: Invalid program ID"

    resp = await client.post(url, json={"program_id": str(uuid.uuid4()), "start_date": ""}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid start_date: Start date is required"

    resp = await client.post(
        url, json={"program_id": str(uuid.uuid4()), "start_date": "2024-07-01"}, headers=auth_headers
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "Program not found"


async def test_schedule_program_without_workouts(client, auth_headers):
    resp = await client.post(
        f"{API}/programs",
        json={"name": "Empty", "days_per_week": 3, "plan_data": {"workouts": []}},
        headers=auth_headers,
    )
    resp = await client.post(
        f"{API}/programs/schedule",
        json={"program_id": resp.json()["data"]["id"], "start_date": "2024-07-01"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Program has no workouts"


@pytest.mark.parametrize(
    "plan_data, error",
    [
        ("weekly", "Invalid plan_data: Plan data must be an object"),
        ({"workouts": "Push"}, "Invalid plan_data.workouts: Workouts must be a list"),
        ({"workouts": ["Push"]}, "Invalid plan_data.workouts.0: "),
        ({"workouts": [{"day": "monday"}]}, "Invalid plan_data.workouts.0.day: Value must be a number"),
        ({"workouts": [{"day": 8}]}, "Invalid plan_data.workouts.0.day: Value must be between 1 and 7"),
        ({"workouts": [{"day": 1, "exercises": ["Bench"]}]}, "Invalid plan_data.workouts.0.exercises.0: "),
        ({"weeks": 500, "workouts": [{"day": 1}]}, "Invalid plan_data.weeks: Value must be between 1 and 52"),
        ({"workouts": [{"day": 1}] * 51}, "Invalid plan_data.workouts: A plan can have at most 50 workouts"),
    ],
)
async def test_create_program_rejects_bad_plan(client, auth_headers, plan_data, error):
    resp = await client.post(
        f"{API}/programs",
        json={"name": "Bad Plan", "days_per_week": 3, "plan_data": plan_data},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"].startswith(error)


async def test_update_program_rejects_bad_plan(client, auth_headers, program):
    resp = await client.patch(
        f"{API}/programs/{program['id']}",
        json={"plan_data": {"workouts": [{"day": 1, "exercises": ["Bench"]}]}},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid plan_data.workouts.0.exercises.0: ")

    resp = await client.get(f"{API}/programs/{program['id']}", headers=auth_headers)
    assert resp.json()["data"]["plan_data"] == PLAN


async def test_plan_extra_keys_kept_and_defaults_scheduled(client, auth_headers):
    plan = {"split": "full body", "workouts": [{"day": "2", "name": "Full Body", "tempo": "3-1-1"}]}
    resp = await client.post(
        f"{API}/programs",
        json={"name": "Minimal", "weeks": 1, "days_per_week": 1, "plan_data": plan},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    stored = resp.json()["data"]["plan_data"]
    assert stored == {"split": "full body", "workouts": [{"day": 2, "name": "Full Body", "tempo": "3-1-1"}]}

    resp = await client.post(
        f"{API}/programs/schedule",
        json={"program_id": resp.json()["data"]["id"], "start_date": "2030-01-07"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["end_date"] == "2030-01-08"

    resp = await client.get(f"{API}/scheduled-workouts", headers=auth_headers)
    assert resp.status_code == 200
    [entry] = resp.json()["data"]
    assert entry["scheduled_exercises"] == []
    assert entry["notes"] == "From program: Minimal\nFocus: "


async def test_schedule_stored_plan_with_bad_shape(client, register, db_session):
    headers, login = await register()
    program = SavedProgram(
        user_id=uuid.UUID(login["user_id"]),
        name="Imported",
        days_per_week=1,
        plan_data={"workouts": ["Push"]},
    )
    db_session.add(program)
    await db_session.commit()

    resp = await client.post(
        f"{API}/programs/schedule",
        json={"program_id": str(program.id), "start_date": "2030-01-07"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Program plan is invalid"
    assert (await client.get(f"{API}/scheduled-workouts", headers=headers)).json()["data"] == []


async def test_discontinue_removes_upcoming_open_workouts(client, auth_headers, program):
    start = date.today() + timedelta(days=1)
    await client.post(
        f"{API}/programs/schedule",
        json={"program_id": program["id"], "start_date": start.isoformat()},
        headers=auth_headers,
    )
    scheduled = (await client.get(f"{API}/scheduled-workouts", headers=auth_headers)).json()["data"]
    await client.patch(
        f"{API}/scheduled-workouts/{scheduled[0]['id']}", json={"status": "skipped"}, headers=auth_headers
    )

    resp = await client.post(f"{API}/programs/{program['id']}/discontinue", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"deleted_count": 3}

    remaining = (await client.get(f"{API}/scheduled-workouts", headers=auth_headers)).json()["data"]
    assert [s["status"] for s in remaining] == ["skipped"]
    resp = await client.get(f"{API}/programs/{program['id']}", headers=auth_headers)
    assert resp.json()["data"]["is_active"] is False


async def test_activating_program_deactivates_others(client, auth_headers, program):
    resp = await client.post(
        f"{API}/programs",
        json={"name": "Second", "days_per_week": 3, "plan_data": PLAN},
        headers=auth_headers,
    )
    second = resp.json()["data"]

    await client.patch(f"{API}/programs/{program['id']}", json={"is_active": True}, headers=auth_headers)
    await client.patch(f"{API}/programs/{second['id']}", json={"is_active": True}, headers=auth_headers)

    programs = (await client.get(f"{API}/programs", headers=auth_headers)).json()["data"]
    assert {p["name"]: p["is_active"] for p in programs} == {"Push/Pull": False, "Second": True}


async def test_delete_program_keeps_schedule(client, auth_headers, program):
    await client.post(
        f"{API}/programs/schedule",
        json={"program_id": program["id"], "start_date": "2030-01-07"},
        headers=auth_headers,
    )
    resp = await client.delete(f"{API}/programs/{program['id']}", headers=auth_headers)
    assert resp.status_code == 200

    scheduled = (await client.get(f"{API}/scheduled-workouts", headers=auth_headers)).json()["data"]
    assert len(scheduled) == 4
    assert all(s["program_id"] is None for s in scheduled)
    assert (await client.get(f"{API}/programs/{program['id']}", headers=auth_headers)).status_code == 404


async def test_scheduled_workouts_date_range(client, auth_headers, program):
    await client.post(
        f"{API}/programs/schedule",
        json={"program_id": program["id"], "start_date": "2030-01-07"},
        headers=auth_headers,
    )
    resp = await client.get(
        f"{API}/scheduled-workouts", params={"start": "2030-01-08", "end": "2030-01-14"}, headers=auth_headers
    )
    assert [s["workout_date"] for s in resp.json()["data"]] == ["2030-01-09", "2030-01-14"]

    resp = await client.get(f"{API}/scheduled-workouts", params={"start": "01/08/2030"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid date range: Date must be in YYYY-MM-DD format"


async def test_link_completed_workout(client, auth_headers, program):
    await client.post(
        f"{API}/programs/schedule",
        json={"program_id": program["id"], "start_date": "2030-01-07"},
        headers=auth_headers,
    )
    scheduled = (await client.get(f"{API}/scheduled-workouts", headers=auth_headers)).json()["data"][0]
    url = f"{API}/scheduled-workouts/{scheduled['id']}"

    resp = await client.patch(url, json={"completed_workout_id": str(uuid.uuid4())}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Workout not found"

    workout = await client.post(
        f"{API}/workouts", json={"title": "Push", "workout_date": "2030-01-07"}, headers=auth_headers
    )
    workout_id = workout.json()["data"]["id"]
    resp = await client.patch(url, json={"completed_workout_id": workout_id}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "completed"
    assert resp.json()["data"]["completed_workout_id"] == workout_id

    resp = await client.delete(url, headers=auth_headers)
    assert resp.status_code == 200
    assert (await client.get(url, headers=auth_headers)).status_code == 404


async def test_invalid_scheduled_workout_id(client, auth_headers):
    resp = await client.patch(f"{API}/scheduled-workouts/xyz", json={"status": "skipped"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid scheduled workout ID"
