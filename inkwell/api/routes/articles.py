import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from inkwell.adapters.sqlite.repos import SQLiteArticleRepo, SQLiteCategoryRepo
from inkwell.api.deps import (
    authorize,
    get_article_repo,
    get_category_repo,
    get_current_actor,
    get_policy,
    get_view_guard,
)
from inkwell.api.schemas import (
    ArticleCreateRequest,
    ArticleResponse,
    ArticleUpdateRequest,
    ViewCountResponse,
)
from inkwell.components.views import IncrementViewInput, RecentViewGuard, run_increment
from inkwell.domain.entities import Article
from inkwell.domain.errors import StorageError
from inkwell.domain.policy import Action, Actor, ArticleResource, PolicyEngine

logger = logging.getLogger(__name__)

router = APIRouter()

VIEWER_COOKIE = "inkwell_vid"


def _viewer_key(request: Request, response: Response) -> str:
    """Anonymous browsing-session key, issued on first visit."""
    key = request.cookies.get(VIEWER_COOKIE)
    if not key:
        key = uuid4().hex
        response.set_cookie(key=VIEWER_COOKIE, value=key, httponly=True, samesite="lax")
    return key


def _load_for_mutation(
    article_id: int,
    action: Action,
    repo: SQLiteArticleRepo,
    policy: PolicyEngine,
    actor: Actor,
) -> Article:
    existing = repo.get_by_id(article_id)
    if existing is None:
        # Anonymous callers learn nothing about which ids exist.
        if not actor.is_authenticated:
            authorize(policy, actor, action, ArticleResource(id=article_id))
        raise HTTPException(status_code=404, detail="Article not found")

    authorize(policy, actor, action, ArticleResource(id=existing.id, owner_id=existing.author_id))
    return existing


# --- Public reads ---


@router.get("", response_model=list[ArticleResponse])
def list_articles(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
) -> list[ArticleResponse]:
    return repo.list(limit=limit, offset=offset)  # type: ignore[return-value]


@router.get("/featured", response_model=list[ArticleResponse])
def list_featured_articles(
    limit: int = Query(6, ge=1, le=50),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
) -> list[ArticleResponse]:
    return repo.list_featured(limit=limit)  # type: ignore[return-value]


@router.get("/latest", response_model=list[ArticleResponse])
def list_latest_articles(
    limit: int = Query(6, ge=1, le=50),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
) -> list[ArticleResponse]:
    return repo.list(limit=limit)  # type: ignore[return-value]


@router.get("/search", response_model=list[ArticleResponse])
def search_articles(
    q: str = Query(..., min_length=2),
    limit: int = Query(20, ge=1, le=100),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
) -> list[ArticleResponse]:
    return repo.search(q.strip(), limit=limit)  # type: ignore[return-value]


@router.get("/category/{slug}", response_model=list[ArticleResponse])
def list_articles_by_category(
    slug: str,
    repo: SQLiteArticleRepo = Depends(get_article_repo),
    category_repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> list[ArticleResponse]:
    if category_repo.get_by_slug(slug) is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return repo.list_by_category_slug(slug)  # type: ignore[return-value]


@router.get("/{slug}", response_model=ArticleResponse)
def get_article(
    slug: str,
    request: Request,
    response: Response,
    repo: SQLiteArticleRepo = Depends(get_article_repo),
    guard: RecentViewGuard = Depends(get_view_guard),
) -> ArticleResponse:
    """Get one article by slug. Counts a view once per browsing session."""
    article = repo.get_by_slug(slug)
    if article is None or article.id is None:
        raise HTTPException(status_code=404, detail="Article not found")

    viewer = _viewer_key(request, response)
    try:
        result = run_increment(
            IncrementViewInput(article_id=article.id, viewer_key=viewer), repo, guard
        )
    except StorageError:
        logger.exception("View increment failed for article %s", article.id)
        return article  # type: ignore[return-value]

    if result.counted and result.views is not None:
        article = article.model_copy(update={"views": result.views})
    return article  # type: ignore[return-value]


@router.post("/{article_id}/view", response_model=ViewCountResponse)
def record_article_view(
    article_id: int,
    request: Request,
    response: Response,
    repo: SQLiteArticleRepo = Depends(get_article_repo),
    guard: RecentViewGuard = Depends(get_view_guard),
) -> ViewCountResponse:
    """Count one view. Repeat views in the same session are acknowledged but not counted."""
    if repo.get_views(article_id) is None:
        raise HTTPException(status_code=404, detail="Article not found")

    viewer = _viewer_key(request, response)
    result = run_increment(
        IncrementViewInput(article_id=article_id, viewer_key=viewer), repo, guard
    )
    if not result.success:
        raise HTTPException(status_code=404, detail=result.error or "Article not found")

    return ViewCountResponse(article_id=article_id, views=result.views, counted=result.counted)


# --- Authoring ---


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
def create_article(
    req: ArticleCreateRequest,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
    category_repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> ArticleResponse:
    authorize(policy, actor, Action.CREATE, ArticleResource())

    if category_repo.get_by_id(req.category_id) is None:
        raise HTTPException(status_code=400, detail="Unknown category")

    article = Article(**req.model_dump(), author_id=actor.id)
    logger.info("Article %r created by %s", article.slug, actor.id)
    return repo.create(article)  # type: ignore[return-value]


@router.put("/{article_id}", response_model=ArticleResponse)
def update_article(
    article_id: int,
    req: ArticleUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
    category_repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> ArticleResponse:
    _load_for_mutation(article_id, Action.UPDATE, repo, policy, actor)

    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes and category_repo.get_by_id(changes["category_id"]) is None:
        raise HTTPException(status_code=400, detail="Unknown category")

    updated = repo.update(article_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return updated  # type: ignore[return-value]


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(
    article_id: int,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteArticleRepo = Depends(get_article_repo),
) -> None:
    _load_for_mutation(article_id, Action.DELETE, repo, policy, actor)
    repo.delete(article_id)
    logger.info("Article %s deleted by %s", article_id, actor.id)
