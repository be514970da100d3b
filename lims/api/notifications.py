from fastapi import APIRouter, Depends

from lims.api.auth import get_current_user
from lims.models.user import User
from lims.repositories.sql import SqlAlchemyRepository, get_repository
from lims.schemas.notification import NotificationOut
from lims.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return notification_service.list_notifications(repo)


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return notification_service.mark_read(repo, notification_id)
