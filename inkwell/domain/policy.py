import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal

logger = logging.getLogger(__name__)

ActorRole = Literal["anonymous", "author", "admin"]


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN_NOT_OWNER = "forbidden_not_owner"
    FORBIDDEN_ADMIN_REQUIRED = "forbidden_admin_required"
    UNKNOWN = "unknown"


_MUTATIONS = frozenset({Action.CREATE, Action.UPDATE, Action.DELETE})


# --- Actor ---


@dataclass(frozen=True)
class Actor:
    """The caller of one request. Built by the session resolver, never persisted."""

    role: ActorRole = "anonymous"
    id: str | None = None
    email: str | None = None

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.role != "anonymous" and self.id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# --- Resources ---


@dataclass(frozen=True)
class ArticleResource:
    id: int | None = None
    owner_id: str | None = None
    kind: Literal["article"] = "article"


@dataclass(frozen=True)
class CategoryResource:
    id: int | None = None
    kind: Literal["category"] = "category"


@dataclass(frozen=True)
class MessageResource:
    id: int | None = None
    kind: Literal["message"] = "message"


@dataclass(frozen=True)
class DashboardStatsResource:
    kind: Literal["dashboard_stats"] = "dashboard_stats"


Resource = ArticleResource | CategoryResource | MessageResource | DashboardStatsResource


# --- Decision ---


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)

    @property
    def status_code(self) -> int:
        """HTTP status for this decision (200 when allowed)."""
        if self.allowed:
            return 200
        if self.reason == DenyReason.UNAUTHENTICATED:
            return 401
        return 403


def decide(actor: Actor, action: Action, resource: Resource) -> Decision:
    """
    Decide whether ``actor`` may perform ``action`` on ``resource``.

    Rules are evaluated in order and the first match wins:
    1. Reading articles and categories is public.
    2. Anonymous actors may not mutate anything.
    3. Articles may be updated/deleted by their owner or an admin.
    4. Dashboard stats, messages and category mutations are admin only.
    5. Authors and admins may create articles.
    6. Everything else is denied.

    Pure: no I/O, never raises.
    """
    is_article = isinstance(resource, ArticleResource)

    if action == Action.READ and (is_article or isinstance(resource, CategoryResource)):
        return Decision.allow()

    if action in _MUTATIONS and actor.role == "anonymous":
        return Decision.deny(DenyReason.UNAUTHENTICATED)

    if is_article and action in (Action.UPDATE, Action.DELETE):
        owner_id = resource.owner_id  # type: ignore[union-attr]
        if actor.is_admin:
            return Decision.allow()
        if actor.id is not None and owner_id is not None and str(actor.id) == str(owner_id):
            return Decision.allow()
        return Decision.deny(DenyReason.FORBIDDEN_NOT_OWNER)

    admin_only = (
        (action == Action.READ and isinstance(resource, DashboardStatsResource | MessageResource))
        or (action != Action.READ and isinstance(resource, CategoryResource))
    )
    if admin_only:
        if actor.is_admin:
            return Decision.allow()
        return Decision.deny(DenyReason.FORBIDDEN_ADMIN_REQUIRED)

    if is_article and action == Action.CREATE:
        if actor.role in ("author", "admin"):
            return Decision.allow()

    return Decision.deny(DenyReason.UNKNOWN)


class PolicyEngine:
    """Thin wrapper over ``decide`` that records denials server-side."""

    def check(self, actor: Actor, action: Action, resource: Resource) -> Decision:
        decision = decide(actor, action, resource)
        if not decision.allowed:
            logger.info(
                "Denied %s on %s for actor=%s role=%s: %s",
                action.value,
                resource.kind,
                actor.id,
                actor.role,
                decision.reason.value if decision.reason else None,
            )
        return decision

    def is_allowed(self, actor: Actor, action: Action, resource: Resource) -> bool:
        return self.check(actor, action, resource).allowed
