from datetime import datetime

from pydantic import BaseModel, Field, StrictInt, field_validator

from lims.models.movement import MovementType
from lims.schemas.component import ensure_utc


class MovementRecord(BaseModel):
    id: str
    component_id: str
    type: MovementType
    quantity: int
    balance_after: int
    user_id: str = ""
    username: str = ""
    reason: str
    project: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created_at", mode="before")
    @classmethod
    def attach_utc(cls, v):
        return ensure_utc(v)


class MovementCreate(BaseModel):
    # Type and reason are checked by the ledger; booleans and numeric strings
    # are not quantities.
    component_id: str = Field(alias="componentId")
    type: str
    quantity: StrictInt
    reason: str = ""
    project: str | None = None

    model_config = {"populate_by_name": True}


class MovementFilter(BaseModel):
    component_id: str | None = None
    type: MovementType | None = None
    since: datetime | None = None
    limit: int | None = None
