import threading
from contextlib import contextmanager


class ComponentLocks:
    """One lock per component id, created on demand and dropped when unused."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # component_id -> [lock, holders + waiters]

    @contextmanager
    def hold(self, component_id: str):
        with self._guard:
            entry = self._locks.get(component_id)
            if entry is None:
                entry = self._locks[component_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[component_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every service that mutates a component.
component_locks = ComponentLocks()
