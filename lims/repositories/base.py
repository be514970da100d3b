"""
Persistence interface consumed by the inventory services.

Services never talk to a database directly: they receive an object that
satisfies :class:`InventoryRepository` and do all mutations inside
``repo.transaction()``. Two implementations ship with the project:
``SqlAlchemyRepository`` for the web app and ``InMemoryRepository`` for
tests and embedding.
"""

from typing import ContextManager, Protocol

from lims.schemas.component import ComponentRecord
from lims.schemas.movement import MovementFilter, MovementRecord


class InventoryRepository(Protocol):
    def get_component(self, component_id: str, for_update: bool = False) -> ComponentRecord | None:
        """Return a detached copy of the component, or None.

        ``for_update`` asks the backend to lock the row until the surrounding
        transaction ends, where the backend supports it.
        """
        ...

    def list_components(self) -> list[ComponentRecord]:
        """All components in insertion order."""
        ...

    def save_component(self, component: ComponentRecord) -> ComponentRecord:
        ...

    def delete_component(self, component_id: str) -> bool:
        ...

    def append_movement(self, movement: MovementRecord) -> MovementRecord:
        ...

    def list_movements(self, filter: MovementFilter) -> list[MovementRecord]:
        """Matching movements, newest first."""
        ...

    def transaction(self) -> ContextManager[None]:
        """Group writes: all become visible on success, none on error.

        Nested calls join the outermost transaction.
        """
        ...

    def read_notification_ids(self) -> set[str]:
        ...

    def mark_notification_read(self, notification_id: str) -> None:
        ...

    def forget_notification_reads(self, notification_ids: set[str]) -> None:
        """Drop read flags, e.g. for notifications that no longer derive."""
        ...
