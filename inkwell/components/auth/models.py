from dataclasses import dataclass

from inkwell.domain.entities import User
from inkwell.domain.policy import Actor


@dataclass(frozen=True)
class IdentityClaims:
    """What an identity provider vouches for after verifying a token."""

    subject: str
    email: str | None = None


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class ResolveSessionInput:
    credential: str | None


@dataclass
class CreateUserInput:
    email: str
    password: str
    role: str = "author"
    display_name: str | None = None


@dataclass
class AuthOutput:
    user: User | None = None
    token_raw: str | None = None
    success: bool = False
    error: str | None = None


@dataclass
class ResolveSessionOutput:
    actor: Actor
    success: bool = True


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
