from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from lims.database import Base


class NotificationRead(Base):
    """Read flags for derived notifications, keyed by the derived notification id."""

    __tablename__ = "notification_reads"

    notification_id: Mapped[str] = mapped_column(String, primary_key=True)
    read_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
