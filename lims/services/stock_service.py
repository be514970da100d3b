"""
Stock update rule.

``record_movement`` is the only code path that changes a component's
quantity. It holds the component's lock for the whole check-and-mutate and
does the ledger append and the quantity update in one repository
transaction, so concurrent outward movements can never overdraw stock and a
failed request leaves both the catalog and the ledger untouched.
"""

import logging
from datetime import datetime, timezone

from lims.errors import InsufficientStockError, NotFoundError
from lims.models.movement import MovementType
from lims.repositories.base import InventoryRepository
from lims.schemas.movement import MovementRecord
from lims.services import ledger_service
from lims.services.locking import component_locks

logger = logging.getLogger(__name__)


def record_movement(
    repo: InventoryRepository,
    component_id: str,
    type,
    quantity: int,
    user_id: str,
    username: str,
    reason: str,
    project: str | None = None,
    *,
    now: datetime | None = None,
) -> MovementRecord:
    movement_type, reason = ledger_service.validate_movement(type, quantity, reason)

    with component_locks.hold(component_id):
        with repo.transaction():
            component = repo.get_component(component_id, for_update=True)
            if component is None:
                raise NotFoundError(f"Component {component_id} not found")

            if movement_type == MovementType.OUTWARD:
                if component.quantity < quantity:
                    logger.warning(
                        "Rejected outward movement for %s: requested %d, available %d",
                        component_id, quantity, component.quantity,
                    )
                    raise InsufficientStockError(component_id, component.quantity, quantity)
                new_qty = component.quantity - quantity
            else:
                new_qty = component.quantity + quantity

            now = now or datetime.now(timezone.utc)
            movement = ledger_service.append_movement(
                repo,
                component_id,
                movement_type,
                quantity,
                user_id,
                username,
                reason,
                project,
                balance_after=new_qty,
                now=now,
            )
            component.quantity = new_qty
            component.last_movement = now
            repo.save_component(component)

    logger.info(
        "Recorded %s movement of %d for %s by %s (balance %d)",
        movement_type.value, quantity, component_id, username, new_qty,
    )
    return movement
