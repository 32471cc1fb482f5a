from typing import Protocol

from inkwell.domain.entities import User

from .models import IdentityClaims


class IdentityProviderPort(Protocol):
    """Verifies bearer tokens."""

    def verify(self, token: str) -> IdentityClaims | None:
        """
        Return claims for a valid token, None for an invalid or expired one.

        Raises ProviderUnavailable when the provider cannot be reached.
        """
        ...


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: str) -> User | None: ...
    def save(self, user: User) -> User: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(self, user_id: object, ttl_minutes: int, email: str | None = None) -> str: ...
