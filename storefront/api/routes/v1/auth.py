from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from storefront.api.dependencies import get_auth_service, get_bearer_token, get_current_user, get_optional_user
from storefront.api.responses import ErrorResponseModel, default_error_responses
from storefront.db.models import User
from storefront.schemas.auth import (
    AuthResponse,
    IsAdminResponse,
    MessageResponse,
    SignInRequest,
    SignUpRequest,
    UserPublic,
)
from storefront.services.auth import AuthService

router = APIRouter()

unauthorized_response = {
    status.HTTP_401_UNAUTHORIZED: {
        "model": ErrorResponseModel,
        "description": "Unauthorized – Invalid, expired or missing token",
    }
}


@router.post(
    "/signup",
    response_model=AuthResponse,
    summary="Register a new user.",
    responses={
        **default_error_responses,
        status.HTTP_409_CONFLICT: {"model": ErrorResponseModel, "description": "Email already registered"},
    },
)
async def signup(
    user_in: SignUpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """Create a user account and open a session for it."""
    user, token = await auth_service.sign_up(user_in.email, user_in.password)
    return AuthResponse(user=UserPublic.model_validate(user), token=token)


@router.post(
    "/signin",
    response_model=AuthResponse,
    summary="Sign in and get a session token.",
    responses={**default_error_responses, **unauthorized_response},
)
async def signin(
    credentials: SignInRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    user, token = await auth_service.sign_in(credentials.email, credentials.password)
    return AuthResponse(user=UserPublic.model_validate(user), token=token)


@router.get(
    "/current-user",
    response_model=UserPublic,
    summary="Get the signed-in user.",
    responses=unauthorized_response,
)
async def current_user(
    user: User = Depends(get_current_user),
) -> Any:
    return user


@router.get(
    "/is-admin",
    response_model=IsAdminResponse,
    summary="Check whether the caller is an admin.",
)
async def is_admin(
    user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """Never fails on a bad token; anonymous callers are simply not admins."""
    return IsAdminResponse(is_admin=bool(user and user.is_admin))


@router.post(
    "/signout",
    response_model=MessageResponse,
    summary="Sign out and revoke the session token.",
    responses=default_error_responses,
)
async def signout(
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    if token is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No token provided")

    if not await auth_service.sign_out(token):
        logger.info("Sign-out for unknown or already revoked token")
    return MessageResponse(message="Successfully signed out")
