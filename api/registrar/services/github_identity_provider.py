"""GitHub OAuth identity provider.

Exchanges an OAuth authorization code for an access token, then resolves the
numeric GitHub user id behind that token.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from registrar.config import GitHubOAuthConfig
from registrar.services.registration_errors import AuthenticationError, IdentificationError

logger = logging.getLogger(__name__)


class AccessToken(str):
    """Opaque OAuth access token. Never rendered by ``repr``."""

    def __repr__(self) -> str:
        return "AccessToken('***')"


class IdentityProvider(Protocol):
    async def new_access_token(self, authorization_code: str) -> AccessToken:
        ...

    async def get_user_id(self, access_token: AccessToken) -> int:
        ...


class GitHubIdentityProvider:
    def __init__(self, config: GitHubOAuthConfig, user_agent: str = "github-starknet-registrar/1.0"):
        self._config = config
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }

    async def new_access_token(self, authorization_code: str) -> AccessToken:
        payload = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "code": authorization_code,
        }
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds, headers=self._headers) as client:
                response = await client.post(self._config.access_token_url, json=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthenticationError(f"github_access_token_request_failed:{exc}") from exc

        # GitHub answers 200 with {"error": ...} for bad or expired codes.
        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            error = body.get("error") if isinstance(body, dict) else None
            raise AuthenticationError(f"github_access_token_missing:{error or 'unknown'}")
        return AccessToken(token)

    async def get_user_id(self, access_token: AccessToken) -> int:
        headers = {"Authorization": f"token {access_token}"}
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds, headers=self._headers) as client:
                response = await client.get(self._config.user_api_url, headers=headers)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise IdentificationError(f"github_user_request_failed:{exc}") from exc

        return self._user_id_from_body(body)

    def _user_id_from_body(self, body: Any) -> int:
        user_id = body.get("id") if isinstance(body, dict) else None
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
            raise IdentificationError("github_user_id_missing")
        return user_id
