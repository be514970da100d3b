"""
Low-stock and old-stock signals.

Notifications are never stored: they are recomputed from the catalog on
every call. The only persisted piece is the read flag, kept by the
repository and keyed by the notification id. The id embeds the component's
last-movement time, so a new movement produces a fresh, unread notification.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone

from lims.config import settings
from lims.errors import NotFoundError
from lims.repositories.base import InventoryRepository
from lims.schemas.component import ComponentRecord
from lims.schemas.notification import NotificationKind, NotificationOut, StockLevel


def low_stock_check(component: ComponentRecord) -> StockLevel:
    threshold = component.critical_low_threshold
    if component.quantity <= threshold:
        return StockLevel.CRITICAL
    if component.quantity <= 2 * threshold:
        return StockLevel.LOW
    return StockLevel.GOOD


def _reference_time(component: ComponentRecord) -> datetime:
    return component.last_movement or component.created_at


def stale_stock_check(component: ComponentRecord, now: datetime, window_days: int) -> bool:
    return now - _reference_time(component) > timedelta(days=window_days)


def _notification_id(kind: NotificationKind, component: ComponentRecord) -> str:
    return f"{kind.value}:{component.id}:{int(_reference_time(component).timestamp())}"


def _low_stock_message(component: ComponentRecord, level: StockLevel) -> str:
    if level == StockLevel.CRITICAL:
        return (
            f"Stock level is at or below critical threshold "
            f"({component.quantity} remaining, threshold {component.critical_low_threshold})"
        )
    return (
        f"Stock level is running low "
        f"({component.quantity} remaining, threshold {component.critical_low_threshold})"
    )


def derive_notifications(
    components: Iterable[ComponentRecord],
    now: datetime,
    window_days: int | None = None,
    read_ids: Iterable[str] = (),
) -> Iterator[NotificationOut]:
    """Yield low-stock notifications, then old-stock ones, each by component id."""
    if window_days is None:
        window_days = settings.STALE_STOCK_WINDOW_DAYS
    read_ids = set(read_ids)
    ordered = sorted(components, key=lambda c: c.id)

    for component in ordered:
        level = low_stock_check(component)
        if level == StockLevel.GOOD:
            continue
        notification_id = _notification_id(NotificationKind.LOW_STOCK, component)
        yield NotificationOut(
            id=notification_id,
            kind=NotificationKind.LOW_STOCK,
            component_id=component.id,
            component_name=component.name,
            level=level,
            message=_low_stock_message(component, level),
            timestamp=now,
            read=notification_id in read_ids,
        )

    for component in ordered:
        if not stale_stock_check(component, now, window_days):
            continue
        notification_id = _notification_id(NotificationKind.OLD_STOCK, component)
        yield NotificationOut(
            id=notification_id,
            kind=NotificationKind.OLD_STOCK,
            component_id=component.id,
            component_name=component.name,
            message=f"No stock movement for over {window_days} days",
            timestamp=now,
            read=notification_id in read_ids,
        )


def list_notifications(
    repo: InventoryRepository,
    now: datetime | None = None,
    window_days: int | None = None,
) -> list[NotificationOut]:
    return list(
        derive_notifications(
            repo.list_components(),
            now or datetime.now(timezone.utc),
            window_days=window_days,
            read_ids=repo.read_notification_ids(),
        )
    )


def mark_read(
    repo: InventoryRepository,
    notification_id: str,
    now: datetime | None = None,
    window_days: int | None = None,
) -> NotificationOut:
    """Flag a currently derived notification as read.

    Read flags of notifications that no longer derive (superseded by a newer
    movement, or resolved) are dropped at the same time.
    """
    current = list_notifications(repo, now=now, window_days=window_days)
    for notification in current:
        if notification.id == notification_id:
            superseded = repo.read_notification_ids() - {n.id for n in current}
            with repo.transaction():
                repo.forget_notification_reads(superseded)
                repo.mark_notification_read(notification_id)
            return notification.model_copy(update={"read": True})
    raise NotFoundError(f"Notification {notification_id} not found")
