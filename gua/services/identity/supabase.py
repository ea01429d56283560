"""Supabase Auth (GoTrue) REST integration."""

import logging
from typing import Any

import httpx

from gua.core.config import settings
from gua.core.errors import AuthError, ConfigurationError
from gua.services.identity.base import BaseIdentityProvider, User

logger = logging.getLogger(__name__)


def _user_from_payload(data: dict[str, Any]) -> User:
    return User(
        id=data["id"],
        email=data.get("email") or "",
        metadata=data.get("user_metadata") or {},
    )


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return f"Identity service returned {resp.status_code}"
    return (
        data.get("error_description")
        or data.get("msg")
        or data.get("message")
        or data.get("error")
        or f"Identity service returned {resp.status_code}"
    )


class SupabaseIdentityProvider(BaseIdentityProvider):
    """Password auth against a Supabase project, keeping the access token in memory."""

    def __init__(self, url: str | None = None, anon_key: str | None = None, timeout: float = 15.0):
        self._url = (url or settings.supabase_url).rstrip("/")
        self._anon_key = anon_key or settings.supabase_anon_key
        self._timeout = timeout
        self._access_token: str | None = None

    def _headers(self, token: str | None = None) -> dict[str, str]:
        if not self._url or not self._anon_key:
            raise ConfigurationError(
                "Supabase not configured. Set GUA_SUPABASE_URL and GUA_SUPABASE_ANON_KEY."
            )
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {token or self._anon_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, payload: dict[str, Any], token: str | None = None) -> httpx.Response:
        try:
            headers = self._headers(token)
        except ConfigurationError as e:
            raise AuthError(str(e)) from e
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.post(f"{self._url}{path}", headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise AuthError(f"Identity service unreachable: {e}") from e

    async def get_session(self) -> User | None:
        if not self._access_token:
            return None

        headers = self._headers(self._access_token)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(f"{self._url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Session check failed: {e}")
            return None

        if resp.status_code != 200:
            logger.debug(f"Session no longer valid ({resp.status_code})")
            self._access_token = None
            return None
        return _user_from_payload(resp.json())

    async def sign_in_with_password(self, email: str, password: str) -> User:
        resp = await self._post(
            "/auth/v1/token?grant_type=password",
            {"email": email, "password": password},
        )
        if resp.status_code != 200:
            raise AuthError(_error_message(resp))

        data = resp.json()
        self._access_token = data.get("access_token")
        return _user_from_payload(data["user"])

    async def sign_up(self, email: str, password: str, name: str = "") -> User | None:
        resp = await self._post(
            "/auth/v1/signup",
            {"email": email, "password": password, "data": {"name": name}},
        )
        if resp.status_code >= 400:
            raise AuthError(_error_message(resp))

        data = resp.json()
        # Depending on project settings the user is returned bare or wrapped
        user = data.get("user") if "user" in data else data
        if user and user.get("id"):
            return _user_from_payload(user)
        return None

    async def sign_out(self) -> None:
        token, self._access_token = self._access_token, None
        if not token:
            return
        resp = await self._post("/auth/v1/logout", {}, token=token)
        if resp.status_code >= 400:
            logger.warning(f"Sign-out rejected by identity service: {_error_message(resp)}")
