"""Progress endpoints over real logged workouts."""

from datetime import date, timedelta

from tests.conftest import API


async def log_workout(client, headers, workout_date, exercise_name, sets, status=None):
    resp = await client.post(
        f"{API}/workouts",
        json={"title": exercise_name, "workout_date": workout_date.isoformat()},
        headers=headers,
    )
    workout_id = resp.json()["data"]["id"]
    if status:
        await client.patch(f"{API}/workouts/{workout_id}", json={"status": status}, headers=headers)
    resp = await client.post(
        f"{API}/workouts/{workout_id}/exercises",
        json={"exercise_name": exercise_name},
        headers=headers,
    )
    exercise_id = resp.json()["data"]["id"]
    for number, (weight, reps) in enumerate(sets, start=1):
        await client.post(
            f"{API}/exercises/{exercise_id}/sets",
            json={"set_number": number, "weight": weight, "reps": reps},
            headers=headers,
        )
    return workout_id


async def test_personal_records(client, auth_headers):
    today = date.today()
    await log_workout(client, auth_headers, today - timedelta(days=3), "Squat", [(120, 5), (130, 3)])
    await log_workout(client, auth_headers, today, "Bench Press", [(90, 5)])
    await log_workout(client, auth_headers, today, "squat", [(125, 5)])

    resp = await client.get(f"{API}/progress/prs", headers=auth_headers)
    assert resp.status_code == 200
    prs = resp.json()["data"]
    assert [(p["exercise_name"], p["weight"], p["reps"]) for p in prs] == [
        ("Squat", 130.0, 3),
        ("Bench Press", 90.0, 5),
    ]
    assert prs[0]["date"] == (today - timedelta(days=3)).isoformat()

    resp = await client.get(f"{API}/progress/prs", params={"exercise": "bench"}, headers=auth_headers)
    assert [p["exercise_name"] for p in resp.json()["data"]] == ["Bench Press"]


async def test_volume_ignores_planned_and_old_workouts(client, auth_headers):
    today = date.today()
    await log_workout(client, auth_headers, today, "Deadlift", [(100, 5), (100, 5)])
    await log_workout(client, auth_headers, today - timedelta(days=1), "Row", [(50, 10)])
    await log_workout(client, auth_headers, today, "Planned Press", [(60, 10)], status="planned")
    await log_workout(client, auth_headers, today - timedelta(days=60), "Old Squat", [(100, 10)])

    resp = await client.get(f"{API}/progress/volume", params={"days": 30}, headers=auth_headers)
    assert resp.status_code == 200
    report = resp.json()["data"]
    assert [d["date"] for d in report["daily"]] == [
        (today - timedelta(days=1)).isoformat(),
        today.isoformat(),
    ]
    assert report["summary"] == {
        "total_volume": 1500.0,
        "total_sets": 3,
        "total_reps": 20,
        "workout_count": 2,
        "avg_volume_per_workout": 750,
        "period_days": 30,
    }

    resp = await client.get(
        f"{API}/progress/volume", params={"days": 1, "exercise": "dead"}, headers=auth_headers
    )
    report = resp.json()["data"]
    assert report["summary"]["period_days"] == 7
    assert report["summary"]["total_volume"] == 1000.0


async def test_volume_exercise_filter_is_literal(client, auth_headers):
    today = date.today()
    await log_workout(client, auth_headers, today, "Bench", [(100, 5)])
    await log_workout(client, auth_headers, today, "Pause Row 50%", [(60, 8)])

    async def sets_matching(text):
        resp = await client.get(f"{API}/progress/volume", params={"exercise": text}, headers=auth_headers)
        assert resp.status_code == 200
        return resp.json()["data"]["summary"]["total_sets"]

    assert await sets_matching("_") == 0
    assert await sets_matching("%") == 1
    assert await sets_matching("50%") == 1
    assert await sets_matching("BENCH") == 1


async def test_streaks(client, auth_headers):
    today = date.today()
    for offset in (0, 2, 3, 10):
        await log_workout(client, auth_headers, today - timedelta(days=offset), "Run", [(0, 1)])

    resp = await client.get(f"{API}/progress/streaks", headers=auth_headers)
    assert resp.status_code == 200
    stats = resp.json()["data"]
    assert stats["current_streak"] == 3
    assert stats["longest_streak"] == 3
    assert stats["total_workouts"] == 4
    assert stats["workouts_last_7_days"] == 3
    assert stats["last_workout_date"] == today.isoformat()


async def test_progress_requires_auth(client):
    for path in ("prs", "volume", "streaks"):
        assert (await client.get(f"{API}/progress/{path}")).status_code == 401
