import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from lims.database import Base


class ComponentCategory(str, PyEnum):
    RESISTORS = "Resistors"
    CAPACITORS = "Capacitors"
    INDUCTORS = "Inductors"
    SEMICONDUCTORS = "Semiconductors"
    ICS = "ICs"
    CONNECTORS = "Connectors"
    SENSORS = "Sensors"
    TOOLS = "Tools"
    PCBS = "PCBs"
    OTHER = "Other"


class Component(Base):
    __tablename__ = "components"

    # Insertion order; breaks ties between equal created_at values
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    manufacturer: Mapped[str] = mapped_column(String, default="")
    part_number: Mapped[str] = mapped_column(String, default="", index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(
        Enum(ComponentCategory, values_callable=lambda x: [e.value for e in x]),
        default=ComponentCategory.OTHER,
    )
    location: Mapped[str] = mapped_column(String, default="")
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=Decimal("0"))
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    critical_low_threshold: Mapped[int] = mapped_column(Integer, default=0)
    datasheet_link: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    # Set only by the stock update rule
    last_movement: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
