"""
Authentication API endpoints for registration, login and token management.
"""

from fastapi import APIRouter, Depends, Response, status
from app.models.user import User
from app.services.auth import AuthService
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterResponse,
    RefreshTokenRequest,
    AccessTokenResponse
)
from app.schemas.user import UserCreate, UserResponse
from app.schemas.error import get_error_responses
from app.utils.dependencies import (
    get_auth_service,
    get_current_active_user
)
from app.config import settings


router = APIRouter(tags=["Authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account with name, email and password",
    responses=get_error_responses(400, 422)
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
) -> RegisterResponse:
    """
    Register a new user.

    Raises:
        DuplicateEmailError: If the email already has an account
    """
    await auth_service.register(user_data)
    return RegisterResponse(ok=True)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns JWT tokens",
    responses=get_error_responses(401, 403, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Args:
        login_data: Login credentials (email and password)
        auth_service: Authentication service

    Returns:
        Login response with user info and JWT tokens

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveUserError: If user account is inactive
    """
    user, access_token, refresh_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return LoginResponse(
        token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user.to_dict())
    )


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Generate new access token using refresh token",
    responses=get_error_responses(401, 403)
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    """
    Create new access token from refresh token.

    Raises:
        InvalidTokenError: If refresh token is invalid
        TokenExpiredError: If refresh token is expired
    """
    access_token = await auth_service.refresh_access_token(
        refresh_token=refresh_data.refresh_token
    )

    return AccessTokenResponse(
        token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get current authenticated user information",
    responses=get_error_responses(401, 403)
)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="User logout",
    description="Tokens are stateless; the client discards them",
    responses=get_error_responses(401)
)
async def logout(
    current_user: User = Depends(get_current_active_user)
) -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)
