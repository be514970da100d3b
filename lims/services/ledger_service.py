import uuid
from datetime import datetime, timezone

from lims.errors import ValidationError
from lims.models.movement import MovementType
from lims.repositories.base import InventoryRepository
from lims.schemas.movement import MovementFilter, MovementRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_movement(type, quantity, reason) -> tuple[MovementType, str]:
    """Check the caller-supplied fields of a movement; return the parsed type and trimmed reason."""
    try:
        movement_type = MovementType(type)
    except ValueError:
        raise ValidationError(f"Invalid movement type '{type}'. Allowed: inward, outward")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")
    if not isinstance(reason, str) or not reason.strip():
        raise ValidationError("Reason is required")
    return movement_type, reason.strip()


def append_movement(
    repo: InventoryRepository,
    component_id: str,
    type,
    quantity: int,
    user_id: str,
    username: str,
    reason: str,
    project: str | None = None,
    *,
    balance_after: int = 0,
    now: datetime | None = None,
) -> MovementRecord:
    """Append one entry to the ledger. Component stock is not touched here."""
    movement_type, reason = validate_movement(type, quantity, reason)
    movement = MovementRecord(
        id=str(uuid.uuid4()),
        component_id=component_id,
        type=movement_type,
        quantity=quantity,
        balance_after=balance_after,
        user_id=user_id or "",
        username=username or "",
        reason=reason,
        project=(project or "").strip() or None,
        created_at=now or _utcnow(),
    )
    return repo.append_movement(movement)


def list_by_component(repo: InventoryRepository, component_id: str) -> list[MovementRecord]:
    return repo.list_movements(MovementFilter(component_id=component_id))


def list_all(repo: InventoryRepository, limit: int | None = None) -> list[MovementRecord]:
    return repo.list_movements(MovementFilter(limit=limit))
