"""
Credential helpers: bcrypt password hashes and opaque session tokens.

Session tokens are handed to the browser as-is; the database stores only
their SHA-256 digest.
"""

import hashlib
import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_TOKEN_BYTES = 18


class SecurityUtils:
    """Password hashing and session token utilities"""

    @staticmethod
    def hash_password(plain_password: str) -> str:
        return pwd_context.hash(plain_password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str | None) -> bool:
        if not hashed_password:
            return False
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def generate_session_token() -> str:
        """Random URL-safe token for the session cookie."""
        return secrets.token_urlsafe(SESSION_TOKEN_BYTES)

    @staticmethod
    def session_id_from_token(token: str) -> str:
        """Primary key under which a session token is stored."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
