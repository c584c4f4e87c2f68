"""Shared helpers for API tests."""

from hackshield.models.user import User
from hackshield.services.auth import create_access_token

PASSWORD = "secret123"


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
