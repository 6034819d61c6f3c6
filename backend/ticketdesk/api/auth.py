"""
Authentication API endpoints.

WHY: These endpoints provide the account and session flow:
1. Register - Create an organization and its first admin
2. Join - Request access to an existing organization
3. Login / Refresh - Obtain and rotate token pairs
4. Logout - Revoke refresh tokens
5. Me - Read and update the caller's profile

Security:
- Login failures use one generic message so accounts can't be enumerated
- Only SHA-256 hashes of refresh tokens are stored
- Every refresh consumes the presented token
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.deps import get_current_principal
from ticketdesk.core.exceptions import AuthenticationError
from ticketdesk.core.principal import Principal
from ticketdesk.db.session import get_db
from ticketdesk.models.organization import Organization
from ticketdesk.models.user import User
from ticketdesk.schemas.auth import (
    RegisterRequest,
    JoinRequest,
    LoginRequest,
    RefreshRequest,
    LogoutRequest,
    UpdateProfileRequest,
    AuthResponse,
    TokenPairResponse,
    UserResponse,
    OrganizationSummary,
    MessageResponse,
)
from ticketdesk.services.auth_service import AuthService, INVALID_REFRESH_TOKEN


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(
    user: User, organization: Organization, access_token: str, refresh_token: str
) -> AuthResponse:
    return AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserResponse.model_validate(user),
        organization=OrganizationSummary.model_validate(organization),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register organization",
    description="Create an organization and its first administrator account",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """
    Register a new organization.

    The slug is derived from the organization name and must be unique.

    Raises:
        ValidationError (400): If the name has no usable characters
        ResourceAlreadyExistsError (409): If the slug is already taken
    """
    service = AuthService(db)
    user, organization, access_token, refresh_token = await service.register(
        organization_name=data.organization_name,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    return _auth_response(user, organization, access_token, refresh_token)


@router.post(
    "/join",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join organization",
    description="Request access to an existing organization; an admin must approve it",
)
async def join(
    data: JoinRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = AuthService(db)
    message = await service.join(
        organization_slug=data.organization_slug,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    return MessageResponse(message=message)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Login user",
    description="Authenticate with organization slug, email and password",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """
    Authenticate a user and return a token pair.

    Raises:
        AuthenticationError (401): Bad credentials, or the account is not active
    """
    service = AuthService(db)
    user, organization, access_token, refresh_token = await service.login(
        organization_slug=credentials.organization_slug,
        email=credentials.email,
        password=credentials.password,
    )
    return _auth_response(user, organization, access_token, refresh_token)


@router.post(
    "/refresh",
    response_model=TokenPairResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh tokens",
    description="Exchange a refresh token for a new token pair",
)
async def refresh(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenPairResponse:
    """
    Rotate a refresh token.

    Storage errors during rotation are reported as an invalid token so the
    client simply signs in again.
    """
    service = AuthService(db)
    try:
        access_token, refresh_token = await service.refresh(data.refresh_token)
    except SQLAlchemyError as e:
        logger.error(f"Refresh token rotation failed: {e}")
        await db.rollback()
        raise AuthenticationError(message=INVALID_REFRESH_TOKEN)
    return TokenPairResponse(access_token=access_token, refresh_token=refresh_token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout",
    description="Revoke a refresh token",
)
async def logout(
    data: LogoutRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = AuthService(db)
    await service.logout(data.refresh_token)
    logger.info(f"User {principal.id} logged out")
    return MessageResponse(message="Déconnexion réussie")


@router.post(
    "/logout-all",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout everywhere",
    description="Revoke every refresh token of the current user",
)
async def logout_all(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    service = AuthService(db)
    await service.logout_all(principal)
    return MessageResponse(message="Déconnexion de toutes les sessions réussie")


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    service = AuthService(db)
    user, _organization = await service.get_profile(principal)
    return UserResponse.model_validate(user)


@router.patch(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Update current user",
    description="Change name and/or password; a new password requires the current one",
)
async def update_me(
    data: UpdateProfileRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    service = AuthService(db)
    user = await service.update_profile(
        principal,
        first_name=data.first_name,
        last_name=data.last_name,
        current_password=data.current_password,
        new_password=data.new_password,
    )
    return UserResponse.model_validate(user)
