import binascii
from datetime import datetime, timezone

import jwt
from jwt.utils import base64url_decode, base64url_encode

from app.security import SecretMaterial

TOKEN_ALGORITHM = "HS256"


def _canonical_signature(token: str) -> bool:
    """Reject signatures whose trailing base64 bits were altered.

    Such edits decode to the same bytes, so the HMAC check alone would
    accept them.
    """
    signature = token.rpartition(".")[2].encode("ascii", "replace")
    try:
        return base64url_encode(base64url_decode(signature)) == signature
    except binascii.Error:
        return False


class TokenCodec:
    """Signs session ids into cookie values and verifies them back.

    A valid token only proves the session id was minted by a holder of the
    secret key. Expiry lives on the session row, so tokens carry no ``exp``.
    """

    def __init__(self, secret: SecretMaterial):
        self._secret = secret

    def create(self, session_id: str, issued_at: datetime | None = None) -> str:
        issued_at = issued_at or datetime.now(timezone.utc)
        payload = {"sid": session_id, "iat": int(issued_at.timestamp())}
        return jwt.encode(payload, self._secret.key, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: str | None) -> tuple[str, bool]:
        if not token or not isinstance(token, str):
            return "", False
        if not _canonical_signature(token):
            return "", False
        try:
            payload = jwt.decode(
                token,
                self._secret.key,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["iat"], "verify_iat": False},
            )
        except jwt.InvalidTokenError:
            return "", False

        session_id = payload.get("sid")
        if not isinstance(session_id, str) or not session_id:
            return "", False
        return session_id, True
