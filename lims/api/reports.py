from fastapi import APIRouter, Depends, Query

from lims.api.auth import get_current_user, require_admin
from lims.models.user import User
from lims.repositories.sql import SqlAlchemyRepository, get_repository
from lims.schemas.movement import MovementRecord
from lims.schemas.report import DashboardMetrics, InventorySummary
from lims.services import report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard", response_model=DashboardMetrics)
def dashboard(
    months: int | None = Query(None, ge=1),
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return report_service.dashboard_metrics(repo, months=months)


@router.get("/inventory", response_model=InventorySummary)
def inventory_report(
    admin: User = Depends(require_admin),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return report_service.inventory_summary(repo)


@router.get("/movements", response_model=list[MovementRecord])
def movement_report(
    component_id: str | None = None,
    limit: int = Query(50, ge=1),
    admin: User = Depends(require_admin),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return report_service.movement_history(repo, component_id=component_id, limit=limit)
