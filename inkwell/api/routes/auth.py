from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from inkwell.adapters.auth.crypto import JWTAuthAdapter
from inkwell.adapters.sqlite.repos import SQLiteUserRepo
from inkwell.api.deps import get_auth_adapter, get_current_actor, get_rules, get_user_repo
from inkwell.api.schemas import ActorResponse
from inkwell.components.auth import LoginInput, run_login
from inkwell.domain.policy import Actor
from inkwell.rules.models import Rules

router = APIRouter()


class Token(BaseModel):
    access_token: str
    token_type: str


@router.post("/login", response_model=Token)
async def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
) -> Token:
    """Authenticate with email/password and return an access token."""
    ttl = rules.auth.token_ttl_minutes
    result = run_login(
        LoginInput(email=form_data.username, password=form_data.password),
        user_repo,
        auth_adapter,
        ttl_minutes=ttl,
    )
    if not result.success or not result.token_raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Set HttpOnly Cookie
    response.set_cookie(
        key=rules.auth.cookie_name,
        value=f"Bearer {result.token_raw}",
        httponly=True,
        max_age=ttl * 60,
        expires=ttl * 60,
        samesite="lax",
        secure=rules.auth.cookie_secure,
    )

    return Token(access_token=result.token_raw, token_type="bearer")


@router.post("/logout")
def logout(response: Response, rules: Rules = Depends(get_rules)) -> dict[str, str]:
    """Log out by clearing the session cookie."""
    response.delete_cookie(key=rules.auth.cookie_name)
    return {"status": "success"}


@router.get("/me", response_model=ActorResponse)
def read_current_actor(actor: Actor = Depends(get_current_actor)) -> ActorResponse:
    """Who the server thinks the caller is. Anonymous callers get role "anonymous"."""
    return ActorResponse(
        id=actor.id,
        role=actor.role,
        email=actor.email,
        authenticated=actor.is_authenticated,
    )
