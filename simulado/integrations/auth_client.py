"""
Users API client with a persisted bearer token.

The access token lives in the PersistedStore under `access_token`, so a
login survives between invocations. `get_token` doubles as the token
provider handed to the other clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from simulado.core.app_state import APP_STATE_KEY
from simulado.core.errors import SimuladoApiError, SimuladoValidationError
from simulado.core.persisted_store import PersistedStore
from simulado.integrations.base import BaseApiClient

ACCESS_TOKEN_KEY = "access_token"


@dataclass
class User:
    id: str
    email: str
    name: str
    is_active: bool = True
    is_superuser: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data.get("id", "")),
            email=data.get("email", ""),
            name=data.get("name", ""),
            is_active=data.get("is_active", True),
            is_superuser=data.get("is_superuser", False),
        )


@dataclass
class Token:
    access_token: str
    token_type: str = "bearer"


class AuthClient(BaseApiClient):
    """HTTP client for /users: register, login, me, update."""

    def __init__(self, base_url: str, store: PersistedStore, **kwargs: Any):
        kwargs.setdefault("token_provider", self.get_token)
        super().__init__(base_url, **kwargs)
        self.store = store

    # =========================================================================
    # Token storage
    # =========================================================================

    def get_token(self) -> str | None:
        return self.store.get(ACCESS_TOKEN_KEY)

    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    def logout(self) -> None:
        """Forget the token and the navigation state tied to the session."""
        self.store.delete(ACCESS_TOKEN_KEY)
        self.store.delete(APP_STATE_KEY)
        logger.info("Logged out")

    # =========================================================================
    # Users API
    # =========================================================================

    async def register(self, email: str, name: str, password: str) -> User:
        response = await self._request(
            "POST",
            "/register",
            "register user",
            json={"email": email, "name": name, "password": password},
        )
        return self._parse(response, "register user", User.from_dict)

    async def login(self, username: str, password: str) -> Token:
        """Exchange credentials (form-encoded) for a token and persist it."""
        response = await self._request(
            "POST",
            "/login/access-token",
            "log in",
            data={"username": username, "password": password},
        )
        token = self._parse(
            response,
            "log in",
            lambda data: Token(
                access_token=data["access_token"],
                token_type=data.get("token_type", "bearer"),
            ),
        )
        self.store.set(ACCESS_TOKEN_KEY, token.access_token)
        logger.info(f"Logged in as {username}")
        return token

    async def get_current_user(self) -> User:
        """
        Fetch the logged-in user.

        Raises:
            SimuladoValidationError: When no token is stored
            SimuladoApiError: On failure; a 401 also drops the stored token
        """
        if not self.is_authenticated():
            raise SimuladoValidationError("Not logged in")
        try:
            response = await self._request("GET", "/me", "fetch current user")
        except SimuladoApiError as e:
            if e.is_unauthorized:
                self.store.delete(ACCESS_TOKEN_KEY)
                raise SimuladoApiError("Token expired", status_code=401, detail=e.detail) from e
            raise
        return self._parse(response, "fetch current user", User.from_dict)

    async def update_current_user(
        self,
        email: str | None = None,
        name: str | None = None,
        password: str | None = None,
        confirm_password: str | None = None,
    ) -> User:
        """
        Update profile fields. Only the fields given are sent.

        A new password must match its confirmation; a mismatch is rejected
        locally without calling the API.
        """
        if password is not None and password != confirm_password:
            raise SimuladoValidationError("Passwords do not match")

        payload = {
            k: v for k, v in {"email": email, "name": name, "password": password}.items() if v
        }
        if not payload:
            raise SimuladoValidationError("Nothing to update")

        response = await self._request("PUT", "/me", "update user", json=payload)
        return self._parse(response, "update user", User.from_dict)
