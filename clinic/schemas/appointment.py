import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..models.appointment import AppointmentStatus


class AppointmentRequest(BaseModel):
    """A patient's request for a doctor's slot on a given day."""

    doctor_id: int
    date: datetime.date
    time: str = Field(..., description="Slot from the doctor's availability, e.g. '09:00 AM'")
    reason: Optional[str] = Field(None, max_length=500)


class AppointmentReschedule(BaseModel):
    date: datetime.date
    time: str
    reason: Optional[str] = Field(None, max_length=500)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    doctor_name: str
    patient_id: int
    patient_name: str
    date: datetime.date
    time: str
    status: AppointmentStatus
    reason: Optional[str] = None

    @classmethod
    def from_model(cls, appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            doctor_name=appointment.doctor.name,
            patient_id=appointment.patient_id,
            patient_name=appointment.patient.name,
            date=appointment.appointment_date,
            time=appointment.appointment_time,
            status=appointment.status,
            reason=appointment.reason,
        )
