import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from inkwell.adapters.auth.crypto import JWTAuthAdapter
from inkwell.adapters.auth.identity import JWTIdentityProvider, RemoteIdentityProvider
from inkwell.adapters.clock import SystemClock
from inkwell.adapters.sqlite.repos import (
    SQLiteArticleRepo,
    SQLiteCategoryRepo,
    SQLiteMessageRepo,
    SQLiteStatsRepo,
    SQLiteSubscriberRepo,
    SQLiteUserRepo,
)
from inkwell.components.auth import IdentityProviderPort, SessionResolver
from inkwell.components.views import RecentViewGuard
from inkwell.domain.errors import AccessDenied
from inkwell.domain.policy import Action, Actor, PolicyEngine, Resource
from inkwell.rules.loader import load_rules
from inkwell.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("INKWELL_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "inkwell.db")
        self.migrations_dir = str(self.base_dir / "migrations")
        self.rules_path = Path(os.environ.get("INKWELL_RULES_PATH", self.base_dir / "rules.yaml"))
        self.secret_key = os.environ.get("INKWELL_SECRET_KEY") or None
        self.idp_url = os.environ.get("INKWELL_IDP_URL", "")
        self.idp_api_key = os.environ.get("INKWELL_IDP_API_KEY", "")
        self.idp_timeout = float(os.environ.get("INKWELL_IDP_TIMEOUT_SECONDS", "5"))
        self.db_timeout = float(os.environ.get("INKWELL_DB_TIMEOUT_SECONDS", "5"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    if not path.exists():
        logger.warning("Rules file %s not found, using defaults", path)
        return Rules()
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


# --- Repos ---
def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path, timeout=settings.db_timeout)


def get_article_repo(settings: Settings = Depends(get_settings)) -> SQLiteArticleRepo:
    return SQLiteArticleRepo(settings.db_path, timeout=settings.db_timeout)


def get_category_repo(settings: Settings = Depends(get_settings)) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(settings.db_path, timeout=settings.db_timeout)


def get_stats_repo(settings: Settings = Depends(get_settings)) -> SQLiteStatsRepo:
    return SQLiteStatsRepo(settings.db_path, timeout=settings.db_timeout)


def get_message_repo(settings: Settings = Depends(get_settings)) -> SQLiteMessageRepo:
    return SQLiteMessageRepo(settings.db_path, timeout=settings.db_timeout)


def get_subscriber_repo(settings: Settings = Depends(get_settings)) -> SQLiteSubscriberRepo:
    return SQLiteSubscriberRepo(settings.db_path, timeout=settings.db_timeout)


# --- Services ---
def get_policy() -> PolicyEngine:
    return PolicyEngine()


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_auth_adapter(settings: Settings = Depends(get_settings)) -> JWTAuthAdapter:
    return JWTAuthAdapter(secret_key=settings.secret_key)


_view_guard_instance: RecentViewGuard | None = None


def get_view_guard(rules: Rules = Depends(get_rules)) -> RecentViewGuard:
    """Per-process "already viewed" set shared by all requests."""
    global _view_guard_instance
    if _view_guard_instance is None:
        _view_guard_instance = RecentViewGuard(
            ttl_seconds=rules.analytics.view_dedupe_window_seconds
        )
    return _view_guard_instance


_remote_provider_instance: RemoteIdentityProvider | None = None


def get_identity_provider(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> IdentityProviderPort:
    if rules.auth.provider == "remote":
        global _remote_provider_instance
        if _remote_provider_instance is None:
            _remote_provider_instance = RemoteIdentityProvider(
                base_url=settings.idp_url,
                api_key=settings.idp_api_key,
                timeout=settings.idp_timeout,
            )
        return _remote_provider_instance
    return JWTIdentityProvider(secret_key=settings.secret_key)


def get_session_resolver(
    provider: IdentityProviderPort = Depends(get_identity_provider),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> SessionResolver:
    return SessionResolver(identity_provider=provider, user_repo=user_repo)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_actor(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    resolver: SessionResolver = Depends(get_session_resolver),
    rules: Rules = Depends(get_rules),
) -> Actor:
    """
    Resolve the caller once per request.

    Cookie first (HttpOnly, "Bearer <jwt>"), then the Authorization header,
    which is also tried when the cookie resolves to nobody.
    Never raises for bad credentials; ProviderUnavailable propagates.
    """
    cookie = request.cookies.get(rules.auth.cookie_name)
    actor = resolver.resolve(cookie or token)
    if cookie and token and not actor.is_authenticated:
        actor = resolver.resolve(token)
    return actor


def authorize(policy: PolicyEngine, actor: Actor, action: Action, resource: Resource) -> None:
    """Raise AccessDenied unless the policy allows the action."""
    decision = policy.check(actor, action, resource)
    if not decision.allowed:
        raise AccessDenied(decision, actor=actor)


def reset_singletons() -> None:
    """Reset process-wide singletons (for testing)."""
    global _clock_instance, _view_guard_instance, _remote_provider_instance
    _clock_instance = None
    _view_guard_instance = None
    _remote_provider_instance = None
    _load_rules_cached.cache_clear()
