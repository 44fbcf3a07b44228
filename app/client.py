"""Async client for the ImpactHub JSON API.

Wraps ``httpx.AsyncClient``; every method unwraps the response envelope and
returns ``data`` (or the whole envelope for paginated listings). A response
with ``success: false`` raises ApiError.

    async with ImpactHubClient("https://api.example.com") as client:
        await client.login("me@example.com", "Secret123!")
        workout = await client.create_workout("Push day", "2024-05-01")
"""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx

DEFAULT_PREFIX = "/api/v1"


class ApiError(Exception):
    """Raised when the API answers with ``success: false``."""

    def __init__(self, status_code: int, error: str):
        super().__init__(f"{status_code}: {error}")
        self.status_code = status_code
        self.error = error


def _date(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else value


class ImpactHubClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        prefix: str = DEFAULT_PREFIX,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self._prefix = prefix.rstrip("/")
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> ImpactHubClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = await self._http.request(method, f"{self._prefix}{path}", headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            raise ApiError(response.status_code, response.text or response.reason_phrase) from None
        if not body.get("success", response.is_success):
            raise ApiError(response.status_code, body.get("error") or "Request failed")
        return body

    async def _data(self, method: str, path: str, **kwargs) -> Any:
        return (await self._request(method, path, **kwargs)).get("data")

    # ── Auth ──

    async def signup(self, email: str, password: str, full_name: str) -> str | None:
        body = await self._request(
            "POST", "/auth/signup", json={"email": email, "password": password, "full_name": full_name}
        )
        return body.get("message")

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and keep the bearer token for later calls."""
        data = await self._data("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    # ── Workouts ──

    async def list_workouts(self, page: int = 1, page_size: int = 20, **filters: Any) -> dict[str, Any]:
        """Returns the envelope so callers get both ``data`` and ``pagination``."""
        params = {"page": page, "page_size": page_size, **filters}
        return await self._request("GET", "/workouts", params=params)

    async def create_workout(
        self, title: str, workout_date: date | str, notes: str | None = None
    ) -> dict[str, Any]:
        payload = {"title": title, "workout_date": _date(workout_date)}
        if notes is not None:
            payload["notes"] = notes
        return await self._data("POST", "/workouts", json=payload)

    async def get_workout(self, workout_id: str) -> dict[str, Any]:
        return await self._data("GET", f"/workouts/{workout_id}")

    async def update_workout(self, workout_id: str, **fields: Any) -> dict[str, Any]:
        if "workout_date" in fields:
            fields["workout_date"] = _date(fields["workout_date"])
        return await self._data("PATCH", f"/workouts/{workout_id}", json=fields)

    async def delete_workout(self, workout_id: str) -> None:
        await self._request("DELETE", f"/workouts/{workout_id}")

    async def add_exercise(self, workout_id: str, exercise_name: str, order_index: int = 0) -> dict[str, Any]:
        return await self._data(
            "POST",
            f"/workouts/{workout_id}/exercises",
            json={"exercise_name": exercise_name, "order_index": order_index},
        )

    async def add_set(
        self,
        exercise_id: str,
        set_number: int,
        weight: float,
        reps: int,
        rir: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"set_number": set_number, "weight": weight, "reps": reps}
        if rir is not None:
            payload["rir"] = rir
        return await self._data("POST", f"/exercises/{exercise_id}/sets", json=payload)

    # ── Progress ──

    async def personal_records(self, exercise: str | None = None, limit: int = 10) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": limit}
        if exercise:
            params["exercise"] = exercise
        return await self._data("GET", "/progress/prs", params=params)

    async def volume(self, days: int = 30, exercise: str | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {"days": days}
        if exercise:
            params["exercise"] = exercise
        return await self._data("GET", "/progress/volume", params=params)

    async def streaks(self) -> dict[str, Any]:
        return await self._data("GET", "/progress/streaks")

    # ── Plan ──

    async def entitlements(self) -> dict[str, Any]:
        return await self._data("GET", "/entitlements")

    async def subscription(self) -> dict[str, Any]:
        return await self._data("GET", "/billing/subscription")
