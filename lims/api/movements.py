from fastapi import APIRouter, Depends, Query

from lims.api.auth import get_current_user
from lims.models.user import User
from lims.repositories.sql import SqlAlchemyRepository, get_repository
from lims.schemas.movement import MovementCreate, MovementRecord
from lims.services import ledger_service, stock_service

router = APIRouter(prefix="/movements", tags=["Movements"])


@router.post("", response_model=MovementRecord, status_code=201)
def record_movement(
    data: MovementCreate,
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return stock_service.record_movement(
        repo,
        data.component_id,
        data.type,
        data.quantity,
        user_id=user.id,
        username=user.username,
        reason=data.reason,
        project=data.project,
    )


@router.get("", response_model=list[MovementRecord])
def list_movements(
    component_id: str | None = None,
    limit: int | None = Query(None, ge=1),
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    if component_id:
        return ledger_service.list_by_component(repo, component_id)[:limit]
    return ledger_service.list_all(repo, limit=limit)
