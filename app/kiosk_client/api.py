"""Kiosk device HTTP client over httpx.

Accepts any httpx.Client, so FastAPI's TestClient works in tests.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from app.kiosk_client.offline_queue import SubmitFn
from app.kiosk_client.session import KioskDeviceSession

logger = logging.getLogger(__name__)

KIOSK_TOKEN_HEADER = "X-Kiosk-Token"
DUPLICATE_SIGNATURE = "duplicate_signature"


class KioskApiError(Exception):
    def __init__(self, status_code: int, code: str | None, detail: str, body: dict[str, Any] | None = None):
        super().__init__(detail)
        self.status_code = status_code
        self.code = code
        self.detail = detail
        self.body = body or {}


def _error_from(response: httpx.Response) -> KioskApiError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    detail = body.get("detail") if isinstance(body, dict) else None
    return KioskApiError(
        response.status_code,
        body.get("code") if isinstance(body, dict) else None,
        detail if isinstance(detail, str) else f"HTTP {response.status_code}",
        body if isinstance(body, dict) else None,
    )


class KioskApiClient:
    def __init__(self, http: httpx.Client):
        self.http = http

    def _post(self, path: str, token: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = self.http.post(path, json=payload, headers={KIOSK_TOKEN_HEADER: token})
        if response.status_code >= 400:
            raise _error_from(response)
        return response.json()

    def start_session(self, staff_jwt: str, event_id: int) -> KioskDeviceSession:
        response = self.http.post(
            "/kiosk/sessions",
            json={"event_id": event_id},
            headers={"Authorization": f"Bearer {staff_jwt}"},
        )
        if response.status_code >= 400:
            raise _error_from(response)
        body = response.json()
        return KioskDeviceSession(
            token=body["kiosk_token"],
            session_id=body["session_id"],
            event_id=body["event_id"],
            event_name=body.get("event_name") or "",
            expires_at=datetime.fromisoformat(body["expires_at"].replace("Z", "+00:00")),
        )

    def event(self, session: KioskDeviceSession) -> dict[str, Any]:
        response = self.http.get(f"/kiosk/events/{session.event_id}", headers={KIOSK_TOKEN_HEADER: session.token})
        if response.status_code >= 400:
            raise _error_from(response)
        return response.json()

    def verify_username(self, session: KioskDeviceSession, sm_username: str, language: str = "no") -> dict[str, Any]:
        return self._post("/kiosk/lookup", session.token, {
            "step": "verify_username",
            "event_id": session.event_id,
            "sm_username": sm_username,
            "language": language,
        })

    def lookup_phone(self, session: KioskDeviceSession, sm_username: str, phone: str, language: str = "no") -> dict[str, Any]:
        return self._post("/kiosk/lookup", session.token, {
            "step": "lookup_phone",
            "event_id": session.event_id,
            "sm_username": sm_username,
            "phone": phone,
            "language": language,
        })

    def submit_signature(self, event_id: int, kiosk_token: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._post("/kiosk/signatures", kiosk_token, {**data, "event_id": event_id})


def make_submit_fn(client: KioskApiClient) -> SubmitFn:
    """Queue replay adapter: delivered on success or when the server already has the signature."""
    def submit(event_id: int, kiosk_token: str, data: dict[str, Any]) -> bool:
        try:
            client.submit_signature(event_id, kiosk_token, data)
        except KioskApiError as e:
            if e.code == DUPLICATE_SIGNATURE:
                logger.info("queued signature for event %s was already on the server", event_id)
                return True
            logger.warning("queued signature for event %s rejected: %s (%s)", event_id, e.code, e.status_code)
            return False
        except httpx.HTTPError as e:
            logger.warning("queued signature for event %s not delivered: %s", event_id, e)
            return False
        return True
    return submit
