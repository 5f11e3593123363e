"""Access token verification."""

import logging
from dataclasses import dataclass
from typing import Protocol

from recipe_finder.domain.auth import Caller

logger = logging.getLogger(__name__)


class InvalidTokenError(RuntimeError):
    """Raised when an access token does not resolve to a user."""


class TokenVerifier(Protocol):
    """Resolves access tokens issued by the auth provider."""

    def get_user_id(self, access_token: str) -> str | None:
        """Return the user id for a valid token, otherwise None."""


@dataclass
class AuthService:
    """Turns bearer tokens into callers."""

    verifier: TokenVerifier

    def authenticate(self, access_token: str) -> Caller:
        """Return the caller for a token or raise InvalidTokenError."""
        user_id = self.verifier.get_user_id(access_token)
        if not user_id:
            logger.warning("Rejected access token")
            raise InvalidTokenError("Invalid or expired access token")
        return Caller(user_id=user_id, access_token=access_token)
