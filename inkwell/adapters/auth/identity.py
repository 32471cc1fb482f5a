"""
Identity provider adapters.

Both implement IdentityProviderPort: ``verify(token)`` returns claims for a
valid token, None for an invalid one, and raises ProviderUnavailable only when
the provider itself cannot answer.
"""

import logging
from typing import Any

import httpx

from inkwell.adapters.auth.crypto import read_token
from inkwell.components.auth.models import IdentityClaims
from inkwell.domain.errors import ProviderUnavailable

logger = logging.getLogger(__name__)


class JWTIdentityProvider:
    """Verifies tokens signed by this service. Local, so never unavailable."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._secret_key = secret_key

    def verify(self, token: str) -> IdentityClaims | None:
        payload = read_token(token, secret_key=self._secret_key)
        if not payload:
            return None

        subject = payload.get("sub")
        if subject is None or not isinstance(subject, str):
            return None

        email = payload.get("email")
        return IdentityClaims(subject=subject, email=email if isinstance(email, str) else None)


class RemoteIdentityProvider:
    """
    Asks a hosted auth service who owns a token.

    Calls ``GET {base_url}/auth/v1/user`` with the bearer token and the
    project API key. 401/403 mean the token is bad; timeouts, transport
    errors and 5xx responses mean the provider is down.
    """

    USER_PATH = "/auth/v1/user"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._http = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def verify(self, token: str) -> IdentityClaims | None:
        try:
            response = self._http.get(
                self.USER_PATH,
                headers={"Authorization": f"Bearer {token}", "apikey": self._api_key},
            )
        except httpx.TimeoutException as e:
            logger.error("Timeout while verifying token with identity provider")
            raise ProviderUnavailable("Identity provider timed out") from e
        except httpx.TransportError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise ProviderUnavailable("Identity provider unreachable") from e

        if response.status_code in (401, 403):
            return None

        if response.status_code >= 500:
            logger.error(f"Identity provider error: {response.status_code}")
            raise ProviderUnavailable(f"Identity provider returned {response.status_code}")

        if response.status_code != 200:
            logger.warning(f"Unexpected identity provider status: {response.status_code}")
            return None

        try:
            data: Any = response.json()
        except ValueError as e:
            raise ProviderUnavailable("Identity provider sent an unreadable response") from e
        if not isinstance(data, dict):
            raise ProviderUnavailable("Identity provider sent an unexpected response body")

        subject = data.get("id")
        if not subject:
            return None

        email = data.get("email")
        return IdentityClaims(subject=str(subject), email=email if isinstance(email, str) else None)

    def close(self) -> None:
        self._http.close()
