import datetime as dt
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from .utils.time import to_minute

# "reserved" is only ever set on creation.
SettableStatus = Literal["canceled", "completed"]


class CreateReservationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_id: int = Field(..., alias="tableId", gt=0)
    meal_id: int | None = Field(None, alias="mealId", gt=0)
    restaurant_id: int = Field(..., alias="restaurantId", gt=0)
    date: dt.date
    time: dt.time

    @field_validator("meal_id", mode="before")
    @classmethod
    def blank_meal_is_none(cls, v):
        # 0 and "" mean "no meal", as older clients send them
        return None if v in (0, "") and not isinstance(v, bool) else v

    @field_validator("time")
    @classmethod
    def truncate_time(cls, v: dt.time):
        return to_minute(v)


class UpdateReservationRequest(BaseModel):
    """
    Partial update. Only keys present in the body are applied, so the
    handler reads ``model_fields_set`` rather than testing values.
    """
    date: dt.date | None = None
    time: dt.time | None = None
    status: SettableStatus | None = None

    @field_validator("time")
    @classmethod
    def truncate_time(cls, v: dt.time | None):
        return to_minute(v) if v is not None else v

    @model_validator(mode="after")
    def reject_explicit_null(self):
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null.")
        return self


class ReservationStatusRequest(BaseModel):
    status: SettableStatus
