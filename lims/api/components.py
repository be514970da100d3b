from fastapi import APIRouter, Depends, Query

from lims.api.auth import get_current_user, require_admin
from lims.models.component import ComponentCategory
from lims.models.user import User
from lims.repositories.sql import SqlAlchemyRepository, get_repository
from lims.schemas.component import (
    ComponentCreate,
    ComponentFilter,
    ComponentRecord,
    ComponentUpdate,
    StockLevelOut,
)
from lims.schemas.movement import MovementRecord
from lims.services import catalog_service, ledger_service
from lims.services.notification_service import low_stock_check

router = APIRouter(prefix="/components", tags=["Components"])


@router.get("", response_model=list[ComponentRecord])
def search_components(
    query: str | None = Query(None, description="Matches name, part number, manufacturer or description"),
    category: ComponentCategory | None = None,
    location: str | None = None,
    min_quantity: int | None = None,
    max_quantity: int | None = None,
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    filters = ComponentFilter(
        query=query,
        category=category,
        location=location,
        min_quantity=min_quantity,
        max_quantity=max_quantity,
    )
    return catalog_service.search(repo, filters)


@router.post("", response_model=ComponentRecord, status_code=201)
def create_component(
    data: ComponentCreate,
    admin: User = Depends(require_admin),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return catalog_service.create_component(repo, data, user_id=admin.id, username=admin.username)


@router.get("/{component_id}", response_model=ComponentRecord)
def get_component(
    component_id: str,
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return catalog_service.get_component(repo, component_id)


@router.patch("/{component_id}", response_model=ComponentRecord)
def update_component(
    component_id: str,
    data: ComponentUpdate,
    admin: User = Depends(require_admin),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return catalog_service.update_component(repo, component_id, data)


@router.delete("/{component_id}", status_code=204)
def delete_component(
    component_id: str,
    admin: User = Depends(require_admin),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    catalog_service.delete_component(repo, component_id)


@router.get("/{component_id}/movements", response_model=list[MovementRecord])
def component_movements(
    component_id: str,
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    return ledger_service.list_by_component(repo, component_id)


@router.get("/{component_id}/stock-level", response_model=StockLevelOut)
def stock_level(
    component_id: str,
    user: User = Depends(get_current_user),
    repo: SqlAlchemyRepository = Depends(get_repository),
):
    component = catalog_service.get_component(repo, component_id)
    return StockLevelOut(
        component_id=component.id,
        level=low_stock_check(component).value,
        quantity=component.quantity,
        critical_low_threshold=component.critical_low_threshold,
    )
