"""
Bearer token codec and password hashing.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from wordnest.errors import InvalidInput, InvalidToken, MissingSecret, TokenExpired

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as carried by a verified token."""
    id: int
    username: str


class TokenCodec:
    """
    Issues and verifies signed, time-limited bearer tokens.

    Tokens are stateless: verification only checks the signature and
    expiry, there is no server-side revocation list.
    """

    def __init__(self, secret: Optional[str], expiry_days: int = 7):
        if not secret:
            raise MissingSecret("JWT_SECRET is not configured - cannot sign tokens")
        self._secret = secret
        self.lifetime = timedelta(days=expiry_days)

    def issue(self, subject_id: int, subject_name: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": subject_id,
            "username": subject_name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise InvalidToken()

        subject_id = payload.get("userId")
        subject_name = payload.get("username")
        if not isinstance(subject_id, int) or isinstance(subject_id, bool) \
                or not isinstance(subject_name, str):
            raise InvalidToken()
        return Identity(id=subject_id, username=subject_name)


def _password_bytes(password: str) -> bytes:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise InvalidInput(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")
    return encoded


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash could not be parsed")
        return False
