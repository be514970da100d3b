from decimal import Decimal

from pydantic import BaseModel


class MonthlyMovement(BaseModel):
    month: str  # YYYY-MM
    count: int = 0
    quantity: int = 0


class CategoryCount(BaseModel):
    category: str
    count: int


class DashboardMetrics(BaseModel):
    total_components: int
    low_stock_count: int
    old_stock_count: int
    total_value: Decimal
    monthly_inward: list[MonthlyMovement]
    monthly_outward: list[MonthlyMovement]
    category_distribution: list[CategoryCount]


class CategorySummary(BaseModel):
    category: str
    component_count: int = 0
    total_units: int = 0
    total_value: Decimal = Decimal("0")


class LowStockItem(BaseModel):
    component_id: str
    name: str
    part_number: str
    quantity: int
    critical_low_threshold: int
    level: str


class InventorySummary(BaseModel):
    total_components: int
    total_units_in_stock: int
    total_inventory_value: Decimal
    low_stock_items: list[LowStockItem]
    by_category: list[CategorySummary]
