"""Admin token validation for the HTTP API."""

import hmac
from typing import Optional

from fastapi import Request

from ..utils.config import get_config
from ..utils.exceptions import AuthenticationError, ConfigurationError
from ..utils.logger import get_api_logger


class AdminAuthValidator:
    """Validates the shared admin token sent with every ``/api`` request."""

    def __init__(self):
        config = get_config()
        self.secret = config.env.admin_token
        self.validate_enabled = config.auth.require_admin_token
        self.token_header = config.auth.token_header
        self.user_header = config.auth.user_header
        self.default_user = config.auth.default_user
        self.logger = get_api_logger()

    def validate_token(self, token: Optional[str]) -> bool:
        """
        Validate an admin token.

        Args:
            token: Value of the admin token header

        Returns:
            True if the token is valid

        Raises:
            ConfigurationError: Validation is enabled but no ADMIN_TOKEN is set
            AuthenticationError: Missing or wrong token
        """
        if not self.validate_enabled:
            self.logger.warning("Admin token validation is disabled!")
            return True

        if not self.secret:
            raise ConfigurationError("ADMIN_TOKEN is not configured")

        if not token:
            raise AuthenticationError(
                "Not authorized, no token",
                details={"header": self.token_header}
            )

        # Constant-time comparison
        if not hmac.compare_digest(self.secret.encode("utf-8"), token.encode("utf-8")):
            raise AuthenticationError("Not authorized as an admin")

        self.logger.debug("Admin token validated")
        return True

    def resolve_user(self, user_id: Optional[str]) -> str:
        """User id recorded as ``createdBy`` on ledger entries."""
        return user_id.strip() if user_id and user_id.strip() else self.default_user

    def authorize(self, request: Request) -> str:
        """Validate the request's token and return the acting user id."""
        self.validate_token(request.headers.get(self.token_header))
        return self.resolve_user(request.headers.get(self.user_header))


def require_admin(request: Request) -> str:
    """FastAPI dependency guarding admin routes; returns the acting user id."""
    return AdminAuthValidator().authorize(request)
