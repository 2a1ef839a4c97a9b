"""Managed auth provider client.

Talks to a GoTrue-compatible REST API: ``GET /user`` resolves an access
token, ``/admin/users`` creates and deletes users with the service role key.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from fusion_edge.exceptions import DependencyError

logger = logging.getLogger(__name__)


class AuthProviderError(DependencyError):
    """Auth provider call failed."""


@dataclass
class AuthUser:
    """User as returned by the auth provider."""

    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "AuthUser":
        # Admin endpoints return the user directly, some versions wrap it
        user = data.get("user", data)
        return cls(
            id=user["id"],
            email=user.get("email"),
            user_metadata=user.get("user_metadata") or {},
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("msg", "message", "error_description", "error"):
        if isinstance(body, dict) and body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


class AuthClient:
    """Client for the managed auth provider."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers={"apikey": self.service_key},
            timeout=self.timeout,
            transport=self.transport,
        )

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        """
        Resolve an access token to its user.

        Returns:
            AuthUser, or None if the provider rejects the token

        Raises:
            AuthProviderError: Provider unreachable or answered with a server error
        """
        try:
            with self._client() as client:
                response = client.get("/user", headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Auth provider unavailable: {e}")

        if response.status_code in (400, 401, 403, 404):
            logger.info(f"Auth provider rejected token: {_error_message(response)}")
            return None
        if response.is_error:
            raise AuthProviderError(f"Auth provider error: {_error_message(response)}")
        return AuthUser.from_response(response.json())

    def create_user(
        self,
        email: str,
        password: str,
        user_metadata: Optional[Dict[str, Any]] = None,
        email_confirm: bool = True,
    ) -> AuthUser:
        """
        Create a confirmed user.

        Raises:
            AuthProviderError: With the provider's message on any failure
        """
        body = {
            "email": email,
            "password": password,
            "email_confirm": email_confirm,
            "user_metadata": user_metadata or {},
        }
        try:
            with self._client() as client:
                response = client.post(
                    "/admin/users",
                    json=body,
                    headers={"Authorization": f"Bearer {self.service_key}"},
                )
        except httpx.HTTPError as e:
            raise AuthProviderError(str(e))

        if response.is_error:
            raise AuthProviderError(_error_message(response))
        return AuthUser.from_response(response.json())

    def delete_user(self, user_id: str) -> None:
        """
        Delete a user.

        Raises:
            AuthProviderError: If the provider refuses or is unreachable
        """
        try:
            with self._client() as client:
                response = client.delete(
                    f"/admin/users/{user_id}",
                    headers={"Authorization": f"Bearer {self.service_key}"},
                )
        except httpx.HTTPError as e:
            raise AuthProviderError(str(e))

        if response.is_error and response.status_code != 404:
            raise AuthProviderError(_error_message(response))
