from typing import Literal

from pydantic import BaseModel, Field


class AnalyticsRules(BaseModel):
    comparison_window_days: int = Field(default=180, gt=0)
    view_dedupe_window_seconds: int = Field(default=1800, ge=0)
    record_page_views: bool = True


class AuthRules(BaseModel):
    provider: Literal["local", "remote"] = "local"
    token_ttl_minutes: int = Field(default=60 * 24, gt=0)
    cookie_name: str = "access_token"
    cookie_secure: bool = False


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class HttpRules(BaseModel):
    cors_origins: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    analytics: AnalyticsRules = Field(default_factory=AnalyticsRules)
    auth: AuthRules = Field(default_factory=AuthRules)
    ops: OpsRules = Field(default_factory=OpsRules)
    http: HttpRules = Field(default_factory=HttpRules)
