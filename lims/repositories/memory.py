import threading
from contextlib import contextmanager

from lims.schemas.component import ComponentRecord
from lims.schemas.movement import MovementFilter, MovementRecord


class _PendingWrites:
    """Writes staged by one thread's open transaction."""

    def __init__(self) -> None:
        self.components: dict[str, ComponentRecord | None] = {}  # None = deleted
        self.movements: list[MovementRecord] = []
        self.read_ids: set[str] = set()
        self.forgotten_ids: set[str] = set()
        self.depth = 0


class InMemoryRepository:
    """Thread-safe in-process repository.

    Writes made inside ``transaction()`` are staged per thread and published
    under a single lock on commit, so readers see a movement and the
    matching quantity change together or not at all.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._components: dict[str, ComponentRecord] = {}
        self._movements: list[MovementRecord] = []
        self._read_ids: set[str] = set()
        self._local = threading.local()

    def _pending(self) -> _PendingWrites | None:
        return getattr(self._local, "pending", None)

    @contextmanager
    def transaction(self):
        pending = self._pending()
        if pending is not None:
            pending.depth += 1
            try:
                yield
            finally:
                pending.depth -= 1
            return

        pending = _PendingWrites()
        self._local.pending = pending
        try:
            yield
            with self._lock:
                self._publish(pending)
        finally:
            self._local.pending = None

    def _publish(self, pending: _PendingWrites) -> None:
        for component_id, component in pending.components.items():
            if component is None:
                self._components.pop(component_id, None)
            else:
                self._components[component_id] = component
        self._movements.extend(pending.movements)
        self._read_ids -= pending.forgotten_ids
        self._read_ids.update(pending.read_ids)

    # --- components ---

    def get_component(self, component_id: str, for_update: bool = False) -> ComponentRecord | None:
        pending = self._pending()
        if pending is not None and component_id in pending.components:
            staged = pending.components[component_id]
            return staged.model_copy() if staged is not None else None
        with self._lock:
            component = self._components.get(component_id)
            return component.model_copy() if component is not None else None

    def list_components(self) -> list[ComponentRecord]:
        with self._lock:
            merged = dict(self._components)
        pending = self._pending()
        if pending is not None:
            for component_id, staged in pending.components.items():
                if staged is None:
                    merged.pop(component_id, None)
                else:
                    merged[component_id] = staged
        return [c.model_copy() for c in merged.values()]

    def save_component(self, component: ComponentRecord) -> ComponentRecord:
        stored = component.model_copy()
        pending = self._pending()
        if pending is not None:
            pending.components[stored.id] = stored
        else:
            with self._lock:
                self._components[stored.id] = stored
        return stored.model_copy()

    def delete_component(self, component_id: str) -> bool:
        if self.get_component(component_id) is None:
            return False
        pending = self._pending()
        if pending is not None:
            pending.components[component_id] = None
        else:
            with self._lock:
                self._components.pop(component_id, None)
        return True

    # --- movements ---

    def append_movement(self, movement: MovementRecord) -> MovementRecord:
        pending = self._pending()
        if pending is not None:
            pending.movements.append(movement)
        else:
            with self._lock:
                self._movements.append(movement)
        return movement

    def list_movements(self, filter: MovementFilter) -> list[MovementRecord]:
        with self._lock:
            movements = list(self._movements)
        pending = self._pending()
        if pending is not None:
            movements.extend(pending.movements)

        if filter.component_id is not None:
            movements = [m for m in movements if m.component_id == filter.component_id]
        if filter.type is not None:
            movements = [m for m in movements if m.type == filter.type]
        if filter.since is not None:
            movements = [m for m in movements if m.created_at >= filter.since]

        # Newest first; equal timestamps keep reverse insertion order.
        movements = sorted(reversed(movements), key=lambda m: m.created_at, reverse=True)
        if filter.limit is not None:
            movements = movements[: filter.limit]
        return movements

    # --- notification read state ---

    def read_notification_ids(self) -> set[str]:
        with self._lock:
            ids = set(self._read_ids)
        pending = self._pending()
        if pending is not None:
            ids = (ids - pending.forgotten_ids) | pending.read_ids
        return ids

    def mark_notification_read(self, notification_id: str) -> None:
        pending = self._pending()
        if pending is not None:
            pending.forgotten_ids.discard(notification_id)
            pending.read_ids.add(notification_id)
        else:
            with self._lock:
                self._read_ids.add(notification_id)

    def forget_notification_reads(self, notification_ids: set[str]) -> None:
        pending = self._pending()
        if pending is not None:
            pending.read_ids -= notification_ids
            pending.forgotten_ids |= notification_ids
        else:
            with self._lock:
                self._read_ids -= notification_ids
