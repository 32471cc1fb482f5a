import logging
from typing import cast

from inkwell.domain.entities import RoleType, User
from inkwell.domain.policy import Actor

from .models import (
    AuthOutput,
    CreateUserInput,
    LoginInput,
    ResolveSessionInput,
    ResolveSessionOutput,
    UserOutput,
)
from .ports import AuthAdapterPort, IdentityProviderPort, UserRepoPort

logger = logging.getLogger(__name__)

_ACTOR_ROLES = ("author", "admin")


def parse_credential(credential: str | None) -> str | None:
    """
    Extract the token from a header or cookie value.

    Accepts ``"Bearer <token>"`` or a bare token. Returns None when the value
    is missing or malformed, including a scheme with no token.
    """
    if not credential:
        return None

    parts = credential.split()
    if parts and parts[0].lower() == "bearer":
        parts = parts[1:]

    if len(parts) != 1:
        return None
    return parts[0]


class SessionResolver:
    """
    Maps an inbound credential to an Actor.

    Invalid, expired or missing credentials resolve to the anonymous actor;
    authorization is left to the access policy. A provider outage is not an
    anonymous caller: ProviderUnavailable propagates.
    """

    def __init__(self, identity_provider: IdentityProviderPort, user_repo: UserRepoPort) -> None:
        self._provider = identity_provider
        self._users = user_repo

    def resolve(self, credential: str | None) -> Actor:
        token = parse_credential(credential)
        if token is None:
            return Actor.anonymous()

        claims = self._provider.verify(token)
        if claims is None:
            return Actor.anonymous()

        user = self._users.get_by_id(claims.subject)
        if user is None and claims.email:
            user = self._users.get_by_email(claims.email)
        if user is None:
            logger.info("Token subject %s has no profile", claims.subject)
            return Actor.anonymous()

        if user.status != "active":
            return Actor.anonymous()

        if user.role not in _ACTOR_ROLES:
            logger.warning("User %s has unsupported role %r", user.id, user.role)
            return Actor.anonymous()

        return Actor(id=str(user.id), role=user.role, email=user.email)


def run_resolve(inp: ResolveSessionInput, resolver: SessionResolver) -> ResolveSessionOutput:
    return ResolveSessionOutput(actor=resolver.resolve(inp.credential))


def run_login(
    inp: LoginInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    ttl_minutes: int = 24 * 60,
) -> AuthOutput:
    user = user_repo.get_by_email(inp.email)
    if not user:
        return AuthOutput(success=False, error="Invalid credentials")

    if not auth_adapter.verify_password(inp.password, user.password_hash):
        return AuthOutput(success=False, error="Invalid credentials")

    if user.status != "active":
        return AuthOutput(success=False, error="User account is disabled")

    token = auth_adapter.create_token(user.id, ttl_minutes, email=user.email)
    return AuthOutput(user=user, token_raw=token, success=True)


def run_create_user(
    inp: CreateUserInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
) -> UserOutput:
    if inp.role not in _ACTOR_ROLES:
        return UserOutput(success=False, error=f"Unknown role: {inp.role}")

    if user_repo.get_by_email(inp.email):
        return UserOutput(success=False, error="Email already in use")

    new_user = User(
        email=inp.email,
        display_name=inp.display_name or inp.email.split("@")[0],
        password_hash=auth_adapter.hash_password(inp.password),
        role=cast(RoleType, inp.role),
        status="active",
    )
    user_repo.save(new_user)
    return UserOutput(user=new_user, success=True)


def run(
    inp: LoginInput | ResolveSessionInput | CreateUserInput,
    *,
    user_repo: UserRepoPort | None = None,
    auth_adapter: AuthAdapterPort | None = None,
    resolver: SessionResolver | None = None,
) -> AuthOutput | ResolveSessionOutput | UserOutput:
    if isinstance(inp, LoginInput):
        assert user_repo and auth_adapter
        return run_login(inp, user_repo, auth_adapter)

    elif isinstance(inp, ResolveSessionInput):
        assert resolver
        return run_resolve(inp, resolver)

    elif isinstance(inp, CreateUserInput):
        assert user_repo and auth_adapter
        return run_create_user(inp, user_repo, auth_adapter)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
