"""
Account API endpoints: registration, sessions, profile and channel views
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_user,
    get_optional_user
)
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    AccountUpdate,
    PasswordChange,
    RefreshTokenRequest,
    TokenPair,
    UserLogin,
    UserProfile
)
from app.schemas.response import ApiResponse
from app.services.account_service import AccountService
from app.services.auth import AuthService
from app.services.file_service import FileService
from app.services.media_service import MediaService, get_media_service
from app.services.view_service import ViewService

settings = get_settings()

router = APIRouter()


def _set_token_cookies(response: Response, tokens: TokenPair) -> None:
    options = {"httponly": True, "secure": settings.cookie_secure}
    response.set_cookie(ACCESS_TOKEN_COOKIE, tokens.access_token, **options)
    response.set_cookie(REFRESH_TOKEN_COOKIE, tokens.refresh_token, **options)


@router.post("/register", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    media: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Register a new account from a multipart form with avatar and optional cover image.

    Returns:
        ApiResponse: Masked user record
    """
    file_service = FileService()
    avatar_path = cover_image_path = None
    try:
        avatar_path = await file_service.save_temp(avatar)
        cover_image_path = await file_service.save_temp(cover_image)

        user = await AuthService.register(
            db,
            media,
            full_name=full_name,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_image_path
        )
    finally:
        file_service.discard(avatar_path, cover_image_path)

    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=user,
        message="User registered successfully"
    )


@router.post("/login", response_model=ApiResponse)
async def login_user(
    credentials: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """Log in with username or email; tokens are set as cookies and returned."""
    result = await AuthService.login(
        db,
        username=credentials.username,
        email=credentials.email,
        password=credentials.password
    )
    _set_token_cookies(
        response,
        TokenPair(access_token=result.access_token, refresh_token=result.refresh_token)
    )

    return ApiResponse(data=result, message="User logged in successfully")


@router.post("/logout", response_model=ApiResponse)
async def logout_user(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """End the session: clear the stored refresh token and both cookies."""
    await AuthService.logout(db, current_user.id)

    options = {"httponly": True, "secure": settings.cookie_secure}
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **options)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **options)

    return ApiResponse(data={}, message="User logged out")


@router.post("/refresh-token", response_model=ApiResponse)
async def refresh_access_token(
    request: Request,
    response: Response,
    refresh_request: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Rotate tokens using the refresh token from the cookie or the request body.

    Returns:
        ApiResponse: New access and refresh tokens
    """
    incoming_refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not incoming_refresh_token and refresh_request:
        incoming_refresh_token = refresh_request.refresh_token

    tokens = await AuthService.refresh(db, incoming_refresh_token)
    _set_token_cookies(response, tokens)

    return ApiResponse(data=tokens, message="Access token refreshed")


@router.post("/change-password", response_model=ApiResponse)
async def change_current_password(
    password_change: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    await AuthService.change_password(
        db,
        current_user.id,
        password_change.old_password,
        password_change.new_password
    )
    return ApiResponse(data={}, message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user)
) -> ApiResponse:
    return ApiResponse(
        data=UserProfile.model_validate(current_user),
        message="User fetched successfully"
    )


@router.patch("/update-account", response_model=ApiResponse)
async def update_account_details(
    account_update: AccountUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    user = await AccountService(db).update_account_details(
        current_user,
        full_name=account_update.full_name,
        email=account_update.email
    )
    return ApiResponse(data=user, message="Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse)
async def update_user_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    media: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    file_service = FileService()
    avatar_path = None
    try:
        avatar_path = await file_service.save_temp(avatar)
        user = await AccountService(db).update_avatar(current_user, media, avatar_path)
    finally:
        file_service.discard(avatar_path)

    return ApiResponse(data=user, message="Avatar image updated successfully")


@router.patch("/cover-image", response_model=ApiResponse)
async def update_user_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    media: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    file_service = FileService()
    cover_image_path = None
    try:
        cover_image_path = await file_service.save_temp(cover_image)
        user = await AccountService(db).update_cover_image(current_user, media, cover_image_path)
    finally:
        file_service.discard(cover_image_path)

    return ApiResponse(data=user, message="Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse)
async def get_user_channel_profile(
    username: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """
    Channel profile with subscriber counts.

    ``is_subscribed`` reflects the caller when an access token is presented.
    """
    channel = await ViewService(db).channel_profile(
        username,
        viewer_id=current_user.id if current_user else None
    )
    return ApiResponse(data=channel, message="User channel fetched successfully")


@router.get("/history", response_model=ApiResponse)
async def get_watch_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    history = await ViewService(db).watch_history(current_user.id)
    return ApiResponse(data=history, message="Watch history fetched successfully")
