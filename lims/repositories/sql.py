from contextlib import contextmanager

from fastapi import Depends
from sqlalchemy.orm import Session

from lims.database import get_db
from lims.models.component import Component
from lims.models.movement import Movement
from lims.models.notification import NotificationRead
from lims.schemas.component import ComponentRecord
from lims.schemas.movement import MovementFilter, MovementRecord

_COMPONENT_FIELDS = (
    "name",
    "manufacturer",
    "part_number",
    "description",
    "category",
    "location",
    "unit_price",
    "quantity",
    "critical_low_threshold",
    "datasheet_link",
    "created_by",
    "created_at",
    "last_movement",
)


class SqlAlchemyRepository:
    """Repository backed by a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._depth = 0

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._depth = 0

    # --- components ---

    def get_component(self, component_id: str, for_update: bool = False) -> ComponentRecord | None:
        q = self.db.query(Component).filter(Component.id == component_id)
        if for_update:
            # Row lock on backends that support it; always re-read from the database.
            q = q.with_for_update().populate_existing()
        row = q.first()
        if not row:
            return None
        return ComponentRecord.model_validate(row)

    def _component_row(self, component_id: str) -> Component | None:
        return self.db.query(Component).filter(Component.id == component_id).first()

    def list_components(self) -> list[ComponentRecord]:
        rows = self.db.query(Component).order_by(Component.seq.asc()).all()
        return [ComponentRecord.model_validate(r) for r in rows]

    def save_component(self, component: ComponentRecord) -> ComponentRecord:
        row = self._component_row(component.id)
        if row is None:
            row = Component(id=component.id)
            self.db.add(row)
        for field in _COMPONENT_FIELDS:
            setattr(row, field, getattr(component, field))
        self.db.flush()
        self.db.refresh(row)
        return ComponentRecord.model_validate(row)

    def delete_component(self, component_id: str) -> bool:
        row = self._component_row(component_id)
        if not row:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    # --- movements ---

    def append_movement(self, movement: MovementRecord) -> MovementRecord:
        row = Movement(**movement.model_dump())
        self.db.add(row)
        self.db.flush()
        return movement

    def list_movements(self, filter: MovementFilter) -> list[MovementRecord]:
        q = self.db.query(Movement)
        if filter.component_id is not None:
            q = q.filter(Movement.component_id == filter.component_id)
        if filter.type is not None:
            q = q.filter(Movement.type == filter.type)
        if filter.since is not None:
            q = q.filter(Movement.created_at >= filter.since)
        q = q.order_by(Movement.created_at.desc(), Movement.seq.desc())
        if filter.limit is not None:
            q = q.limit(filter.limit)
        return [MovementRecord.model_validate(r) for r in q.all()]

    # --- notification read state ---

    def read_notification_ids(self) -> set[str]:
        return {r.notification_id for r in self.db.query(NotificationRead).all()}

    def mark_notification_read(self, notification_id: str) -> None:
        if self.db.get(NotificationRead, notification_id) is None:
            self.db.add(NotificationRead(notification_id=notification_id))
            self.db.flush()

    def forget_notification_reads(self, notification_ids: set[str]) -> None:
        if not notification_ids:
            return
        (
            self.db.query(NotificationRead)
            .filter(NotificationRead.notification_id.in_(notification_ids))
            .delete(synchronize_session="fetch")
        )


def get_repository(db: Session = Depends(get_db)) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db)
