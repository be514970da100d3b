import logging
import uuid
from datetime import datetime, timezone

from lims.errors import NotFoundError
from lims.models.movement import MovementType
from lims.repositories.base import InventoryRepository
from lims.schemas.component import ComponentCreate, ComponentFilter, ComponentRecord, ComponentUpdate
from lims.services import ledger_service
from lims.services.locking import component_locks

logger = logging.getLogger(__name__)

# Fields that may be explicitly cleared with null in an update
_NULLABLE_FIELDS = {"datasheet_link"}


def create_component(
    repo: InventoryRepository,
    data: ComponentCreate,
    user_id: str = "",
    username: str = "system",
    now: datetime | None = None,
) -> ComponentRecord:
    now = now or datetime.now(timezone.utc)
    component = ComponentRecord(
        id=str(uuid.uuid4()),
        **data.model_dump(),
        created_by=user_id or None,
        created_at=now,
        last_movement=now if data.quantity > 0 else None,
    )
    with repo.transaction():
        saved = repo.save_component(component)
        if data.quantity > 0:
            ledger_service.append_movement(
                repo,
                saved.id,
                MovementType.INWARD,
                data.quantity,
                user_id,
                username,
                "Initial stock on component creation",
                balance_after=data.quantity,
                now=now,
            )
    logger.info("Created component %s (%s) with %d in stock", saved.id, saved.name, saved.quantity)
    return saved


def get_component(repo: InventoryRepository, component_id: str) -> ComponentRecord:
    component = repo.get_component(component_id)
    if component is None:
        raise NotFoundError(f"Component {component_id} not found")
    return component


def update_component(repo: InventoryRepository, component_id: str, data: ComponentUpdate) -> ComponentRecord:
    update_data = data.model_dump(exclude_unset=True)
    with component_locks.hold(component_id):
        with repo.transaction():
            component = repo.get_component(component_id, for_update=True)
            if component is None:
                raise NotFoundError(f"Component {component_id} not found")
            for field, value in update_data.items():
                if value is None and field not in _NULLABLE_FIELDS:
                    continue
                setattr(component, field, value)
            saved = repo.save_component(component)
    return saved


def delete_component(repo: InventoryRepository, component_id: str) -> None:
    """Hard delete. Movements recorded against the component stay in the ledger."""
    with component_locks.hold(component_id):
        with repo.transaction():
            if not repo.delete_component(component_id):
                raise NotFoundError(f"Component {component_id} not found")
    logger.info("Deleted component %s", component_id)


def matches(component: ComponentRecord, filters: ComponentFilter) -> bool:
    if filters.query:
        needle = filters.query.lower()
        haystack = (
            component.name,
            component.part_number,
            component.manufacturer,
            component.description,
        )
        if not any(needle in (value or "").lower() for value in haystack):
            return False
    if filters.category is not None and component.category != filters.category:
        return False
    if filters.location and filters.location.lower() not in component.location.lower():
        return False
    if filters.min_quantity is not None and component.quantity < filters.min_quantity:
        return False
    if filters.max_quantity is not None and component.quantity > filters.max_quantity:
        return False
    return True


def search(repo: InventoryRepository, filters: ComponentFilter | None = None) -> list[ComponentRecord]:
    filters = filters or ComponentFilter()
    return [c for c in repo.list_components() if matches(c, filters)]
