"""Tests for AuthService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import jwt
import pytest

from salon.errors import AuthError, AuthorizationError
from salon.services.auth_service import AuthService


class TestAuthService:
    @pytest.fixture
    def auth_service(self):
        service = AuthService()
        service.secret = "test-secret-key-long-enough-for-hs256-signing"
        return service

    @pytest.fixture
    def mock_db_cursor(self):
        with patch("salon.services.auth_service.db.get_cursor") as mock_cursor:
            cursor = MagicMock()
            mock_cursor.return_value.__enter__.return_value = cursor
            yield cursor

    @pytest.fixture
    def sample_user(self):
        return {
            "id": "U001",
            "name": "Lan",
            "email": "lan@example.com",
            "provider": "local",
            "verified": True,
            "avatar": None,
            "is_admin": False,
        }

    def test_token_round_trip(self, auth_service):
        token = auth_service.create_access_token("U001")

        assert auth_service.decode_token(token)["id"] == "U001"

    def test_expired_token(self, auth_service):
        token = jwt.encode(
            {"id": "U001", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            auth_service.secret,
            algorithm=auth_service.algorithm,
        )

        with pytest.raises(AuthError) as exc_info:
            auth_service.decode_token(token)

        assert exc_info.value.message == "Token expired"

    def test_token_signed_with_other_secret(self, auth_service):
        token = jwt.encode({"id": "U001"}, "another-secret-key-long-enough-for-hs256-signing", algorithm=auth_service.algorithm)

        with pytest.raises(AuthError) as exc_info:
            auth_service.decode_token(token)

        assert exc_info.value.message == "Invalid token"

    def test_authenticate(self, auth_service, mock_db_cursor, sample_user):
        mock_db_cursor.fetchone.return_value = sample_user

        user = auth_service.authenticate(auth_service.create_access_token("U001"))

        assert user == sample_user
        assert mock_db_cursor.execute.call_args.args[1] == ("U001",)

    def test_authenticate_without_token(self, auth_service, mock_db_cursor):
        with pytest.raises(AuthError) as exc_info:
            auth_service.authenticate(None)

        assert exc_info.value.message == "Authentication required"
        mock_db_cursor.execute.assert_not_called()

    def test_authenticate_unknown_user(self, auth_service, mock_db_cursor):
        mock_db_cursor.fetchone.return_value = None

        with pytest.raises(AuthError) as exc_info:
            auth_service.authenticate(auth_service.create_access_token("U404"))

        assert exc_info.value.message == "User not found"

    def test_authenticate_optional(self, auth_service, mock_db_cursor):
        """Test bad optional credentials mean an anonymous caller."""
        assert auth_service.authenticate_optional(None) is None
        assert auth_service.authenticate_optional("garbage") is None

    def test_require_admin(self, sample_user):
        with pytest.raises(AuthorizationError):
            AuthService.require_admin(sample_user)

        admin = {**sample_user, "is_admin": True}
        assert AuthService.require_admin(admin) is admin
