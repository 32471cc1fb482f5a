from datetime import UTC, date, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Enums / Literals ---
RoleType = Literal["author", "admin"]
UserStatus = Literal["active", "disabled"]

# --- Users ---

class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    email: str
    display_name: str
    password_hash: str
    role: RoleType = "author"
    status: UserStatus = "active"
    created_at: datetime = Field(default_factory=_utcnow)

# --- Content ---

class Category(BaseModel):
    id: int | None = None
    name: str
    slug: str
    description: str = ""
    icon: str | None = None
    gradient: str | None = None
    image: str | None = None

class Article(BaseModel):
    id: int | None = None
    title: str
    slug: str
    summary: str
    content: str
    image: str
    category_id: int
    author_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    views: int = 0
    published_at: datetime = Field(default_factory=_utcnow)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

# --- Intake ---

class Subscriber(BaseModel):
    id: int | None = None
    email: str
    active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)

class ContactMessage(BaseModel):
    id: int | None = None
    name: str
    email: str
    subject: str
    message: str
    read: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

# --- Site statistics ---

class DailyStat(BaseModel):
    """One row per UTC calendar day."""

    date: date
    page_views: int = Field(default=0, ge=0)
    unique_visitors: int = Field(default=0, ge=0)
    bounce_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    avg_session_duration: float = Field(default=0.0, ge=0.0)
