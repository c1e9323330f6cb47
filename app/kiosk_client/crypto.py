"""AES-256-GCM at-rest encryption for queued submissions.

The key is generated once per device and kept in the same key-value store as
the queue, as a JWK-style dict. IV and ciphertext travel as hex strings.
"""
from __future__ import annotations

import base64
import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.kiosk_client.store import KeyValueStore

ENCRYPTION_KEY_NAME = "encryption_key"
IV_BYTES = 12


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


class DeviceCipher:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self._aesgcm: AESGCM | None = None

    def _get_or_create_key(self) -> AESGCM:
        if self._aesgcm is not None:
            return self._aesgcm
        stored = self.store.get(ENCRYPTION_KEY_NAME)
        if stored:
            key = _b64url_decode(stored["k"])
        else:
            key = AESGCM.generate_key(bit_length=256)
            self.store.set(ENCRYPTION_KEY_NAME, {"kty": "oct", "alg": "A256GCM", "k": _b64url(key), "ext": True})
        self._aesgcm = AESGCM(key)
        return self._aesgcm

    def encrypt(self, plaintext: str) -> dict[str, str]:
        iv = os.urandom(IV_BYTES)
        ciphertext = self._get_or_create_key().encrypt(iv, plaintext.encode("utf-8"), None)
        return {"iv": iv.hex(), "ciphertext": ciphertext.hex()}

    def decrypt(self, iv: str, ciphertext: str) -> str:
        """Raises cryptography's InvalidTag or ValueError on tampered or foreign data."""
        plaintext = self._get_or_create_key().decrypt(bytes.fromhex(iv), bytes.fromhex(ciphertext), None)
        return plaintext.decode("utf-8")
