from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal

from lims.config import settings
from lims.errors import ValidationError
from lims.models.movement import MovementType
from lims.repositories.base import InventoryRepository
from lims.schemas.component import ComponentRecord
from lims.schemas.movement import MovementFilter, MovementRecord
from lims.schemas.notification import StockLevel
from lims.schemas.report import (
    CategoryCount,
    CategorySummary,
    DashboardMetrics,
    InventorySummary,
    LowStockItem,
    MonthlyMovement,
)
from lims.services.notification_service import low_stock_check, stale_stock_check

CENTS = Decimal("0.01")


def _stock_value(components: list[ComponentRecord]) -> Decimal:
    return sum((c.unit_price * c.quantity for c in components), Decimal("0")).quantize(CENTS)


def _month_keys(now: datetime, months: int) -> list[str]:
    """The last ``months`` calendar months up to and including ``now``, oldest first."""
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(keys))


def _monthly(movements: list[MovementRecord], keys: list[str], movement_type: MovementType) -> list[MonthlyMovement]:
    buckets = {k: MonthlyMovement(month=k) for k in keys}
    for m in movements:
        if m.type != movement_type:
            continue
        bucket = buckets.get(m.created_at.astimezone(timezone.utc).strftime("%Y-%m"))
        if bucket is None:
            continue
        bucket.count += 1
        bucket.quantity += m.quantity
    return list(buckets.values())


def dashboard_metrics(
    repo: InventoryRepository,
    now: datetime | None = None,
    months: int | None = None,
    window_days: int | None = None,
) -> DashboardMetrics:
    now = now or datetime.now(timezone.utc)
    if months is None:
        months = settings.REPORT_MONTHS
    if months < 1:
        raise ValidationError("months must be at least 1")
    window_days = window_days if window_days is not None else settings.STALE_STOCK_WINDOW_DAYS

    components = repo.list_components()
    keys = _month_keys(now, months)
    first_year, first_month = (int(p) for p in keys[0].split("-"))
    since = datetime(first_year, first_month, 1, tzinfo=timezone.utc)
    movements = repo.list_movements(MovementFilter(since=since))

    categories = Counter(c.category.value for c in components)

    return DashboardMetrics(
        total_components=len(components),
        low_stock_count=sum(1 for c in components if low_stock_check(c) != StockLevel.GOOD),
        old_stock_count=sum(1 for c in components if stale_stock_check(c, now, window_days)),
        total_value=_stock_value(components),
        monthly_inward=_monthly(movements, keys, MovementType.INWARD),
        monthly_outward=_monthly(movements, keys, MovementType.OUTWARD),
        category_distribution=[
            CategoryCount(category=cat, count=count)
            for cat, count in sorted(categories.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    )


def inventory_summary(repo: InventoryRepository) -> InventorySummary:
    components = repo.list_components()

    low_stock = []
    for c in components:
        level = low_stock_check(c)
        if level != StockLevel.GOOD:
            low_stock.append(
                LowStockItem(
                    component_id=c.id,
                    name=c.name,
                    part_number=c.part_number,
                    quantity=c.quantity,
                    critical_low_threshold=c.critical_low_threshold,
                    level=level.value,
                )
            )

    return InventorySummary(
        total_components=len(components),
        total_units_in_stock=sum(c.quantity for c in components),
        total_inventory_value=_stock_value(components),
        low_stock_items=low_stock,
        by_category=_group_by_category(components),
    )


def _group_by_category(components: list[ComponentRecord]) -> list[CategorySummary]:
    cats: dict[str, CategorySummary] = {}
    for c in components:
        cat = c.category.value
        if cat not in cats:
            cats[cat] = CategorySummary(category=cat)
        cats[cat].component_count += 1
        cats[cat].total_units += c.quantity
        cats[cat].total_value += c.unit_price * c.quantity
    for v in cats.values():
        v.total_value = v.total_value.quantize(CENTS)
    return list(cats.values())


def movement_history(
    repo: InventoryRepository,
    component_id: str | None = None,
    limit: int = 50,
) -> list[MovementRecord]:
    return repo.list_movements(MovementFilter(component_id=component_id, limit=limit))
