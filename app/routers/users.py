"""
User avatar endpoints.
Uploaded avatars live in the database; users without one are redirected to a generated image.
"""

from fastapi import APIRouter, Depends, File, Path, Response, UploadFile, status
from fastapi.responses import RedirectResponse
from typing import Optional
from uuid import UUID

from app.config import settings
from app.models.user import User
from app.services.user import UserService
from app.schemas.hotel import OkResponse
from app.schemas.user import AvatarResponse
from app.schemas.error import get_crud_error_responses, get_error_responses
from app.utils.dependencies import get_current_active_user, get_user_service
from app.utils.file_utils import read_image_upload


router = APIRouter(tags=["Users"])


@router.get(
    "/user/avatar/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="User avatar",
    description="Uploaded avatar bytes, or a redirect to a generated placeholder",
    responses={
        status.HTTP_307_TEMPORARY_REDIRECT: {"description": "No avatar uploaded; redirect to placeholder"},
        **get_error_responses(404, 422)
    }
)
async def get_avatar(
    user_id: UUID = Path(..., description="User ID"),
    user_service: UserService = Depends(get_user_service)
) -> Response:
    avatar = await user_service.get_avatar(user_id)
    if avatar is None:
        return RedirectResponse(
            user_service.placeholder_avatar_url(user_id),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT
        )

    content, content_type = avatar
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": "private, max-age=300"}
    )


@router.post(
    "/user/avatar/{user_id}",
    response_model=AvatarResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload avatar",
    description="Replace your avatar (multipart form, field 'avatar')",
    responses=get_crud_error_responses()
)
async def upload_avatar(
    user_id: UUID = Path(..., description="User ID"),
    avatar: Optional[UploadFile] = File(None, description="Avatar image"),
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> AvatarResponse:
    """
    Store a new avatar for the current user.

    Raises:
        ForbiddenError: If the avatar belongs to another user
        FileUploadError: If no image was sent or it cannot be read
    """
    upload = await read_image_upload(avatar)
    await user_service.set_avatar(user_id, upload, current_user)
    return AvatarResponse(avatar_url=f"{settings.api_prefix}/user/avatar/{user_id}")


@router.delete(
    "/user/avatar/{user_id}",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete avatar",
    description="Remove your avatar and fall back to the generated placeholder",
    responses=get_crud_error_responses()
)
async def delete_avatar(
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> OkResponse:
    await user_service.delete_avatar(user_id, current_user)
    return OkResponse(ok=True)
