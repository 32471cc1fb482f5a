from fastapi import APIRouter, Depends, HTTPException, status

from inkwell.adapters.sqlite.repos import SQLiteCategoryRepo
from inkwell.api.deps import authorize, get_category_repo, get_current_actor, get_policy
from inkwell.api.schemas import CategoryCreateRequest, CategoryResponse, CategoryUpdateRequest
from inkwell.domain.entities import Category
from inkwell.domain.policy import Action, Actor, CategoryResource, PolicyEngine

router = APIRouter()


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> list[CategoryResponse]:
    return repo.list_all()  # type: ignore[return-value]


@router.get("/{slug}", response_model=CategoryResponse)
def get_category(
    slug: str,
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> CategoryResponse:
    category = repo.get_by_slug(slug)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category  # type: ignore[return-value]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    req: CategoryCreateRequest,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> CategoryResponse:
    authorize(policy, actor, Action.CREATE, CategoryResource())
    return repo.create(Category(**req.model_dump()))  # type: ignore[return-value]


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    req: CategoryUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> CategoryResponse:
    authorize(policy, actor, Action.UPDATE, CategoryResource(id=category_id))

    updated = repo.update(category_id, req.model_dump(exclude_unset=True, exclude_none=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated  # type: ignore[return-value]


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    actor: Actor = Depends(get_current_actor),
    policy: PolicyEngine = Depends(get_policy),
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
) -> None:
    authorize(policy, actor, Action.DELETE, CategoryResource(id=category_id))
    if not repo.delete(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
