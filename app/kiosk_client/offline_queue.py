"""Encrypted offline queue for signature submissions made while the kiosk is offline.

Entries are replayed oldest-first. A duplicate-signature rejection counts as
delivered; any other failure leaves the entry queued for the next attempt.
"""
from __future__ import annotations

import json
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable

from cryptography.exceptions import InvalidTag

from app.kiosk_client.crypto import DeviceCipher
from app.kiosk_client.store import KeyValueStore

logger = logging.getLogger(__name__)

PENDING_SIGNATURES_PREFIX = "pending_sig_"

SubmitFn = Callable[[int, str, dict[str, Any]], bool]


@dataclass
class PendingSignature:
    id: str
    timestamp: int  # epoch ms at save time
    event_id: int
    kiosk_token: str
    data: dict[str, Any]


@dataclass(frozen=True)
class SyncResult:
    synced: int
    failed: int


def _now_ms() -> int:
    return int(time.time() * 1000)


class OfflineQueue:
    def __init__(self, store: KeyValueStore, cipher: DeviceCipher | None = None):
        self.store = store
        self.cipher = cipher or DeviceCipher(store)

    def _pending_keys(self) -> list[str]:
        return [k for k in self.store.keys() if k.startswith(PENDING_SIGNATURES_PREFIX)]

    def save(self, event_id: int, kiosk_token: str, data: dict[str, Any]) -> str:
        timestamp = _now_ms()
        entry_id = f"{timestamp}_{secrets.token_hex(5)}"
        self.store.set(PENDING_SIGNATURES_PREFIX + entry_id, {
            "id": entry_id,
            "timestamp": timestamp,
            "event_id": event_id,
            "kiosk_token": kiosk_token,
            "data": self.cipher.encrypt(json.dumps(data)),
            "encrypted": True,
        })
        logger.info("queued signature %s for event %s", entry_id, event_id)
        return entry_id

    def get_pending(self) -> list[PendingSignature]:
        entries = []
        for key in self._pending_keys():
            # One unreadable entry must not hide the rest of the queue
            try:
                stored = self.store.get(key)
                if not stored:
                    continue
                data = stored.get("data")
                if stored.get("encrypted"):
                    data = json.loads(self.cipher.decrypt(data["iv"], data["ciphertext"]))
                entry = PendingSignature(
                    id=stored["id"],
                    timestamp=stored["timestamp"],
                    event_id=stored["event_id"],
                    kiosk_token=stored["kiosk_token"],
                    data=data,
                )
            except (InvalidTag, ValueError, KeyError, TypeError, AttributeError):
                logger.error("failed to read pending signature %s; skipping", key)
                continue
            entries.append(entry)
        entries.sort(key=lambda e: (e.timestamp, e.id))
        return entries

    def remove(self, entry_id: str) -> None:
        self.store.delete(PENDING_SIGNATURES_PREFIX + entry_id)

    def get_pending_count(self) -> int:
        return len(self._pending_keys())

    def sync(self, submit_fn: SubmitFn) -> SyncResult:
        synced = failed = 0
        for entry in self.get_pending():
            try:
                ok = submit_fn(entry.event_id, entry.kiosk_token, entry.data)
            except Exception:
                logger.exception("replay of pending signature %s raised", entry.id)
                ok = False
            if ok:
                self.remove(entry.id)
                synced += 1
            else:
                failed += 1
        if synced or failed:
            logger.info("offline sync finished: synced=%s failed=%s", synced, failed)
        return SyncResult(synced=synced, failed=failed)
