from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from ..core.exceptions import InvalidArgument
from ..core.timeslots import WEEKDAYS, normalize_slot


def _normalize_slots(slots: List[str]) -> List[str]:
    normalized = []
    for slot in slots:
        try:
            value = normalize_slot(slot)
        except InvalidArgument:
            raise ValueError(f"time slots must look like '09:00 AM', got {slot!r}")
        if value not in normalized:
            normalized.append(value)
    return normalized


def _normalize_weekly(template: Dict[str, List[str]]) -> Dict[str, List[str]]:
    normalized = {}
    for day, slots in template.items():
        key = day.strip().lower()
        if key not in WEEKDAYS:
            raise ValueError(f"unknown weekday {day!r}")
        normalized[key] = _normalize_slots(slots)
    return normalized


SlotList = Annotated[List[str], AfterValidator(_normalize_slots)]
WeeklyTemplate = Annotated[Dict[str, List[str]], AfterValidator(_normalize_weekly)]


class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    specialty: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, pattern=r"^\d{10}$")
    available_times: Optional[SlotList] = None
    weekly_availability: Optional[WeeklyTemplate] = None


class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    specialty: Optional[str] = Field(None, min_length=3, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^\d{10}$")
    available_times: Optional[SlotList] = None
    weekly_availability: Optional[WeeklyTemplate] = None


class DoctorResponse(BaseModel):
    id: int
    name: str
    specialty: str
    email: str
    phone: Optional[str] = None
    available_times: List[str] = []
    weekly_availability: Optional[Dict[str, List[str]]] = None

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: str
    available_times: List[str]
