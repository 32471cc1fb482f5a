"""
Auth component - Session resolution, login and user provisioning.
"""

from .component import (
    SessionResolver,
    parse_credential,
    run,
    run_create_user,
    run_login,
    run_resolve,
)
from .models import (
    AuthOutput,
    CreateUserInput,
    IdentityClaims,
    LoginInput,
    ResolveSessionInput,
    ResolveSessionOutput,
    UserOutput,
)
from .ports import AuthAdapterPort, IdentityProviderPort, UserRepoPort

__all__ = [
    # Entry points
    "SessionResolver",
    "parse_credential",
    "run",
    "run_create_user",
    "run_login",
    "run_resolve",
    # Models
    "AuthOutput",
    "CreateUserInput",
    "IdentityClaims",
    "LoginInput",
    "ResolveSessionInput",
    "ResolveSessionOutput",
    "UserOutput",
    # Ports
    "AuthAdapterPort",
    "IdentityProviderPort",
    "UserRepoPort",
]
