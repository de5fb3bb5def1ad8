"""Client for the hosted table-storage API (Airtable-style REST).

Finished sessions are mirrored into two tables:

- ``Sessions``: one row per finished session, stamped with ``completed_at``
- ``Attempts``: one row per attempt, linked by ``session_ref``

Presets and history reads stay with the primary store (SQL or local file).

Requests authenticate with ``Authorization: Bearer <TABLE_API_KEY>``.
Any non-2xx answer or transport error becomes PersistenceFailure; nothing
is retried.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.schemas.history import HistoryCreate
from accumulation_tracker.settings import get_settings

log = logging.getLogger(__name__)

SESSIONS = "Sessions"
ATTEMPTS = "Attempts"


def _flatten(record: dict[str, Any]) -> dict[str, Any]:
    return {"id": record["id"], **record.get("fields", {})}


class TableClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_id: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        s = get_settings()
        root = (base_url or s.TABLE_API_URL).rstrip("/")
        self.http = httpx.Client(
            base_url=f"{root}/{base_id or s.TABLE_API_BASE_ID}",
            headers={
                "Authorization": f"Bearer {api_key or s.TABLE_API_KEY}",
                "Content-Type": "application/json",
            },
            timeout=timeout or s.TABLE_API_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> TableClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, endpoint: str, *, body=None) -> dict[str, Any]:
        try:
            response = self.http.request(method, endpoint, json=body)
        except httpx.RequestError as e:
            raise PersistenceFailure(f"table API unreachable: {e}") from e
        if response.is_error:
            raise PersistenceFailure(f"table API error: {response.text}")
        return response.json()

    def create_session(self, fields: dict[str, Any]) -> dict[str, Any]:
        stamped = {**fields, "completed_at": datetime.now(timezone.utc).isoformat()}
        return _flatten(self._request("POST", SESSIONS, body={"fields": stamped}))

    def create_attempts(self, attempts: list[dict[str, Any]]) -> list[dict[str, Any]]:
        data = self._request("POST", ATTEMPTS, body={"records": [{"fields": a} for a in attempts]})
        return [_flatten(r) for r in data["records"]]


class TableSessionSink:
    """Mirrors finished sessions into the Sessions/Attempts tables."""

    def __init__(self, client: TableClient):
        self.client = client

    def save(self, history: HistoryCreate) -> dict[str, Any]:
        session = self.client.create_session({
            "exercise_name": history.exercise_name,
            "mode": history.mode.value if history.mode else None,
            "target": history.target,
            "rest_time": history.rest_time,
            "adjustment": history.adjustment,
            "total_accumulated": history.total_accumulated,
            "session_duration": history.session_duration,
            "attempt_count": history.attempt_count,
        })
        if history.attempts:
            self.client.create_attempts([
                {
                    "session_ref": session["id"],
                    "attempt_number": i,
                    "value": a.value,
                    "adjustment": a.adjustment,
                    "total_counted": a.total_counted,
                }
                for i, a in enumerate(history.attempts, start=1)
            ])
        log.info("mirrored session %s (%s attempts) to table storage", session["id"], history.attempt_count)
        return session
