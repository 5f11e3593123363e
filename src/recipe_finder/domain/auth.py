"""Authenticated caller identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Caller:
    """A user resolved from a verified access token."""

    user_id: str
    access_token: str
