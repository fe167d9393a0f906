"""Auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from tokenauth.dependencies import (
    clear_refresh_cookie,
    get_config,
    get_current_claims,
    get_token_manager,
    raise_http,
    set_refresh_cookie,
)
from tokenauth.exceptions import AuthException
from tokenauth.models import Principal, TokenClaims
from tokenauth.schemas import ClaimsResponse, LoginRequest, MessageResponse, TokenResponse
from tokenauth.services.token_service import TokenLifecycleManager

router = APIRouter()


def _refresh_cookie(request: Request) -> str | None:
    return request.cookies.get(get_config().COOKIE_NAME)


async def _login(principal: Principal, response: Response, manager: TokenLifecycleManager) -> TokenResponse:
    try:
        tokens = await manager.issue(principal)
    except AuthException as exc:
        raise_http(exc)
    set_refresh_cookie(response, tokens.refresh_token)
    return TokenResponse(token=tokens.access_token)


@router.get("/", response_model=MessageResponse)
async def welcome() -> MessageResponse:
    return MessageResponse(message="Welcome to the token auth service")


@router.get("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def login_demo(
    response: Response,
    manager: TokenLifecycleManager = Depends(get_token_manager),
) -> TokenResponse:
    config = get_config()
    principal = Principal(username=config.DEMO_USERNAME, role=config.DEMO_ROLE)
    return await _login(principal, response, manager)


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    response: Response,
    manager: TokenLifecycleManager = Depends(get_token_manager),
) -> TokenResponse:
    # Credentials are checked upstream; this endpoint only starts the session.
    return await _login(payload.to_principal(), response, manager)


@router.get("/refresh", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def refresh(
    request: Request,
    response: Response,
    manager: TokenLifecycleManager = Depends(get_token_manager),
) -> TokenResponse:
    token = _refresh_cookie(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token missing")
    try:
        tokens = await manager.rotate(token)
    except AuthException as exc:
        raise_http(exc)
    set_refresh_cookie(response, tokens.refresh_token)
    return TokenResponse(token=tokens.access_token)


@router.post("/revoke", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def revoke(
    request: Request,
    manager: TokenLifecycleManager = Depends(get_token_manager),
) -> MessageResponse:
    token = _refresh_cookie(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token is required")
    try:
        await manager.revoke(token)
    except AuthException as exc:
        raise_http(exc)
    return MessageResponse(message="Refresh token revoked successfully")


@router.get("/protected", response_model=ClaimsResponse, status_code=status.HTTP_200_OK)
async def protected(claims: TokenClaims = Depends(get_current_claims)) -> ClaimsResponse:
    return ClaimsResponse.from_claims(claims)


@router.get("/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def logout(
    request: Request,
    response: Response,
    manager: TokenLifecycleManager = Depends(get_token_manager),
) -> MessageResponse:
    token = _refresh_cookie(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No refresh token provided")
    try:
        await manager.logout(token)
    except AuthException as exc:
        raise_http(exc)
    clear_refresh_cookie(response)
    return MessageResponse(message="Logged out successfully")
