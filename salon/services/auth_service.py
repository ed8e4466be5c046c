"""Token verification and user lookup for the API."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from salon.config import JWT_CONFIG
from salon.db.postgres_client import db
from salon.errors import AuthError, AuthorizationError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.secret = JWT_CONFIG["secret"]
        self.algorithm = JWT_CONFIG["algorithm"]
        self.expires_minutes = JWT_CONFIG["expires_minutes"]

    def create_access_token(self, user_id: str) -> str:
        """Sign a token for a user. Login lives elsewhere; this is for tooling and tests."""
        payload = {
            "id": user_id,
            "exp": datetime.now(timezone.utc) + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        with db.get_cursor() as cursor:
            cursor.execute(
                """
                SELECT id, name, email, provider, verified, avatar, is_admin
                FROM users
                WHERE id = %s
                """,
                (user_id,),
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    def authenticate(self, token: str | None) -> dict[str, Any]:
        """Resolve a bearer token to its user row."""
        if not token:
            raise AuthError("Authentication required")

        payload = self.decode_token(token)
        user = self.get_user(payload.get("id"))
        if not user:
            raise AuthError("User not found")
        return user

    def authenticate_optional(self, token: str | None) -> dict[str, Any] | None:
        """Like authenticate, but any failure just means an anonymous caller."""
        if not token:
            return None
        try:
            return self.authenticate(token)
        except Exception as e:
            logger.debug(f"Ignoring optional credentials: {e}")
            return None

    @staticmethod
    def require_admin(user: dict[str, Any]) -> dict[str, Any]:
        if not user.get("is_admin"):
            raise AuthorizationError("Admin access required")
        return user


# Singleton instance
auth_service = AuthService()
