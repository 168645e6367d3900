# File: api/routers/notifications/notifications.py

from typing import Annotated

from fastapi import APIRouter, status, Depends, Query

from civiclens.common.dependencies.service_deps import get_notification_service
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import get_current_user
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.pagination import paginate_response
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.notification.services.notification_service import NotificationService

router = APIRouter()


def _serialize(notification: dict) -> dict:
    return {**{k: v for k, v in notification.items() if k != "_id"}, "id": notification["_id"]}


@router.get(
    "/notifications",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="In-app notifications of the current user, newest first",
    tags=["Notifications"]
)
async def list_notifications(
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20
):
    items, total = await notification_service.list_for_user(current_user.user_id, page, page_size)
    return StandardResponse.success(
        data=paginate_response([_serialize(n) for n in items], total, page, page_size),
        message=get_message("notification.listed")
    )


@router.post(
    "/notifications/{notification_id}/read",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Mark a notification as read",
    tags=["Notifications"]
)
async def mark_notification_read(
    notification_id: str,
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)]
):
    notification = await notification_service.mark_read(notification_id, current_user.user_id)
    return StandardResponse.success(data=_serialize(notification), message=get_message("notification.read"))
