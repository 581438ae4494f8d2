from enum import Enum
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..core.exceptions import InvalidArgument
from ..core.timeslots import TimeOfDay


class Condition(str, Enum):
    PAST = "past"
    FUTURE = "future"


class FilterCriteria(BaseModel):
    """Optional predicates for doctor and appointment listings.

    A field left as ``None`` places no constraint on the result. Blank
    strings are treated the same as ``None``.
    """

    name: Optional[str] = None
    specialty: Optional[str] = None
    time_of_day: Optional[TimeOfDay] = None
    condition: Optional[Condition] = None
    doctor_name: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("time_of_day", mode="before")
    @classmethod
    def upper_time_of_day(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("condition", mode="before")
    @classmethod
    def lower_condition(cls, value):
        return value.lower() if isinstance(value, str) else value

    @classmethod
    def build(cls, **fields) -> "FilterCriteria":
        """Construct from raw request values, reporting bad values as ``InvalidArgument``."""
        try:
            return cls(**fields)
        except ValidationError as exc:
            bad = ", ".join(str(err["loc"][0]) for err in exc.errors())
            raise InvalidArgument(f"Invalid filter value for: {bad}")

    @property
    def is_empty(self) -> bool:
        return not any(
            value is not None for value in self.model_dump().values()
        )
