from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

_SLUG = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
_EMAIL = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# --- Categories ---
class CategoryBase(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1, pattern=_SLUG)
    description: str = ""
    icon: str | None = None
    gradient: str | None = None
    image: str | None = None


class CategoryCreateRequest(CategoryBase):
    pass


class CategoryUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    slug: str | None = Field(default=None, pattern=_SLUG)
    description: str | None = None
    icon: str | None = None
    gradient: str | None = None
    image: str | None = None


class CategoryResponse(CategoryBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# --- Articles ---
class ArticleBase(BaseModel):
    title: str = Field(min_length=1)
    slug: str = Field(min_length=1, pattern=_SLUG)
    summary: str
    content: str
    image: str
    category_id: int
    tags: list[str] = []
    featured: bool = False


class ArticleCreateRequest(ArticleBase):
    pass


class ArticleUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    slug: str | None = Field(default=None, pattern=_SLUG)
    summary: str | None = None
    content: str | None = None
    image: str | None = None
    category_id: int | None = None
    tags: list[str] | None = None
    featured: bool | None = None


class ArticleResponse(ArticleBase):
    id: int
    author_id: str | None = None
    views: int
    published_at: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ViewCountResponse(BaseModel):
    article_id: int
    views: int | None
    counted: bool


# --- Intake ---
class SubscribeRequest(BaseModel):
    email: str = Field(pattern=_EMAIL)


class ContactRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=_EMAIL)
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)


class ContactMessageResponse(BaseModel):
    id: int
    name: str
    email: str
    subject: str
    message: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubscriberResponse(BaseModel):
    id: int
    email: str
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Stats ---
class StatsAggregateResponse(BaseModel):
    total_page_views: int
    total_unique_visitors: int
    avg_bounce_rate: float
    avg_session_duration: float
    days_with_data: int

    model_config = ConfigDict(from_attributes=True)


class DateRangeResponse(BaseModel):
    start: date
    end: date  # exclusive

    model_config = ConfigDict(from_attributes=True)


class MetricChangesResponse(BaseModel):
    """Percentage change per metric; null means not available."""

    page_views: float | None = None
    unique_visitors: float | None = None
    bounce_rate: float | None = None
    session_duration: float | None = None

    model_config = ConfigDict(from_attributes=True)


class StatsComparisonResponse(BaseModel):
    period_days: int
    current_range: DateRangeResponse
    previous_range: DateRangeResponse
    current: StatsAggregateResponse | None
    previous: StatsAggregateResponse | None
    changes: MetricChangesResponse
    has_data: bool


class DailyStatResponse(BaseModel):
    date: date
    page_views: int
    unique_visitors: int
    bounce_rate: float
    avg_session_duration: float

    model_config = ConfigDict(from_attributes=True)


class PageViewRequest(BaseModel):
    bounce_rate: float | None = Field(default=None, ge=0, le=100)
    avg_session_duration: float | None = Field(default=None, ge=0)


# --- Auth ---
class ActorResponse(BaseModel):
    id: str | None
    role: str
    email: str | None
    authenticated: bool
