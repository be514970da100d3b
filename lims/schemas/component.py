from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from lims.models.component import ComponentCategory


def ensure_utc(v):
    # SQLite hands back naive datetimes; everything in the core is UTC.
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class ComponentRecord(BaseModel):
    """A catalog entry as seen by the services and returned by the API."""

    id: str
    name: str
    manufacturer: str = ""
    part_number: str = ""
    description: str = ""
    category: ComponentCategory = ComponentCategory.OTHER
    location: str = ""
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=0, ge=0)
    critical_low_threshold: int = Field(default=0, ge=0)
    datasheet_link: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    last_movement: datetime | None = None

    model_config = {"from_attributes": True, "validate_assignment": True}

    @field_validator("created_at", "updated_at", "last_movement", mode="before")
    @classmethod
    def attach_utc(cls, v):
        return ensure_utc(v)


class ComponentCreate(BaseModel):
    name: str = Field(min_length=1)
    manufacturer: str = ""
    part_number: str = ""
    description: str = ""
    category: ComponentCategory = ComponentCategory.OTHER
    location: str = ""
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=0, ge=0)  # initial stock, recorded as an inward movement
    critical_low_threshold: int = Field(default=0, ge=0)
    datasheet_link: str | None = None


class ComponentUpdate(BaseModel):
    # No quantity / last_movement: stock only changes through recorded movements.
    name: str | None = Field(default=None, min_length=1)
    manufacturer: str | None = None
    part_number: str | None = None
    description: str | None = None
    category: ComponentCategory | None = None
    location: str | None = None
    unit_price: Decimal | None = Field(default=None, ge=0)
    critical_low_threshold: int | None = Field(default=None, ge=0)
    datasheet_link: str | None = None

    model_config = {"extra": "forbid"}


class ComponentFilter(BaseModel):
    query: str | None = None
    category: ComponentCategory | None = None
    location: str | None = None
    min_quantity: int | None = None
    max_quantity: int | None = None


class StockLevelOut(BaseModel):
    component_id: str
    level: str
    quantity: int
    critical_low_threshold: int
