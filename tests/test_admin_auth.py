"""Tests for admin token validation."""

import pytest

from src.middleware.admin_auth import AdminAuthValidator
from src.utils.exceptions import AuthenticationError, ConfigurationError


def make_config(token="test_token", required=True):
    class MockConfig:
        class EnvConfig:
            admin_token = token

        class AuthConfig:
            require_admin_token = required
            token_header = "X-Admin-Token"
            user_header = "X-User-Id"
            default_user = "admin"

        env = EnvConfig()
        auth = AuthConfig()

    return MockConfig()


class TestAdminAuthValidator:
    """Tests for AdminAuthValidator."""

    @pytest.fixture
    def validator(self, monkeypatch):
        """Create a validator with a test token."""
        monkeypatch.setattr("src.middleware.admin_auth.get_config", lambda: make_config())
        return AdminAuthValidator()

    def test_validate_token_success(self, validator):
        assert validator.validate_token("test_token") is True

    def test_validate_token_invalid(self, validator):
        with pytest.raises(AuthenticationError, match="Not authorized as an admin"):
            validator.validate_token("wrong")

    def test_validate_token_missing(self, validator):
        with pytest.raises(AuthenticationError, match="no token"):
            validator.validate_token(None)

    def test_missing_secret(self, monkeypatch):
        monkeypatch.setattr("src.middleware.admin_auth.get_config", lambda: make_config(token=None))

        with pytest.raises(ConfigurationError, match="ADMIN_TOKEN is not configured"):
            AdminAuthValidator().validate_token("anything")

    def test_validation_disabled(self, monkeypatch):
        monkeypatch.setattr("src.middleware.admin_auth.get_config",
                            lambda: make_config(token=None, required=False))

        assert AdminAuthValidator().validate_token(None) is True

    def test_resolve_user(self, validator):
        assert validator.resolve_user("clerk-7") == "clerk-7"
        assert validator.resolve_user("  ") == "admin"
        assert validator.resolve_user(None) == "admin"
