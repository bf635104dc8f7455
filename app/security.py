"""Secret material, random identifiers and keyed hashing."""

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass

from app.errors import ConfigError

logger = logging.getLogger(__name__)

SECRET_KEY_BYTES = 32
SESSION_ID_BYTES = 24

# 0/o and 1/l are left out so printed codes stay readable
INVITATION_CODE_ALPHABET = "abcdefghijkmnpqrstuvwxyz23456789"
INVITATION_CODE_LENGTH = 8


@dataclass(frozen=True)
class SecretMaterial:
    """Signing key held for the lifetime of the process.

    A generated key is not persisted anywhere: every outstanding cookie
    becomes invalid when the process restarts.
    """

    key: bytes
    generated: bool = False

    @classmethod
    def from_setting(cls, value: str) -> "SecretMaterial":
        value = value.strip()
        if value:
            try:
                key = base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError):
                key = value.encode()
            if not key:
                key = value.encode()
            logger.info("Using secret key from configuration")
            return cls(key=key)

        try:
            key = secrets.token_bytes(SECRET_KEY_BYTES)
        except NotImplementedError as exc:
            raise ConfigError(f"Failed to generate secret key: {exc}") from exc

        logger.warning(
            "Using a temporary secret key; sessions will not survive a restart. "
            "Set RSVP_SECRET_KEY=%s to keep it.",
            base64.b64encode(key).decode(),
        )
        return cls(key=key, generated=True)

    def hash_ip(self, ip_address: str) -> str:
        return hmac.new(self.key, ip_address.encode(), hashlib.sha256).hexdigest()


def generate_session_id() -> str:
    return secrets.token_hex(SESSION_ID_BYTES)


def generate_invitation_code() -> str:
    return "".join(
        secrets.choice(INVITATION_CODE_ALPHABET)
        for _ in range(INVITATION_CODE_LENGTH)
    )
