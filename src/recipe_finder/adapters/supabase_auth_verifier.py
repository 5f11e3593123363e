"""Supabase Auth token verification."""

import logging
from dataclasses import dataclass

from supabase import AuthError, Client

from recipe_finder.services.auth import TokenVerifier

logger = logging.getLogger(__name__)


@dataclass
class SupabaseTokenVerifier(TokenVerifier):
    """Resolves user access tokens through Supabase Auth."""

    client: Client

    def get_user_id(self, access_token: str) -> str | None:
        """Return the id of the user owning the token, if it is valid."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthError as exc:
            logger.warning("Supabase rejected access token: %s", exc)
            return None
        user = response.user if response else None
        return str(user.id) if user else None
