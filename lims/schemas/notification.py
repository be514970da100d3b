from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel


class StockLevel(str, PyEnum):
    CRITICAL = "critical"
    LOW = "low"
    GOOD = "good"


class NotificationKind(str, PyEnum):
    LOW_STOCK = "low_stock"
    OLD_STOCK = "old_stock"


class NotificationOut(BaseModel):
    id: str
    kind: NotificationKind
    component_id: str
    component_name: str
    level: StockLevel | None = None
    message: str
    timestamp: datetime
    read: bool = False

    model_config = {"frozen": True}
