from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional

from ...core.database import get_db
from ...core.timeslots import parse_date
from ...api.deps import get_conflict_validator, get_current_doctor, get_current_patient
from ...models import Doctor, Patient
from ...services.appointment_service import AppointmentService
from ...services.conflicts import ConflictValidator
from ...schemas.appointment import (
    AppointmentRequest, AppointmentReschedule, AppointmentResponse, AppointmentStatusUpdate
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("")
async def get_doctor_appointments(
    date: str,
    patient_name: Optional[str] = None,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    """The authenticated doctor's appointments on a date."""
    appointments = AppointmentService(db).for_doctor_on(doctor.id, parse_date(date), patient_name)
    return {"appointments": [AppointmentResponse.from_model(a) for a in appointments]}

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    request: AppointmentRequest,
    patient: Patient = Depends(get_current_patient),
    validator: ConflictValidator = Depends(get_conflict_validator),
    db: Session = Depends(get_db),
):
    """Book an appointment for the authenticated patient."""
    appointment = AppointmentService(db, validator).book(patient.id, request)
    return AppointmentResponse.from_model(appointment)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    change: AppointmentReschedule,
    patient: Patient = Depends(get_current_patient),
    validator: ConflictValidator = Depends(get_conflict_validator),
    db: Session = Depends(get_db),
):
    """Move one of the authenticated patient's appointments to another slot."""
    appointment = AppointmentService(db, validator).reschedule(patient.id, appointment_id, change)
    return AppointmentResponse.from_model(appointment)

@router.delete("/{appointment_id}", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    """Cancel one of the authenticated patient's appointments."""
    appointment = AppointmentService(db).cancel(patient.id, appointment_id)
    return AppointmentResponse.from_model(appointment)

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    """Record the outcome of one of the authenticated doctor's appointments."""
    appointment = AppointmentService(db).set_status(doctor.id, appointment_id, update.status)
    return AppointmentResponse.from_model(appointment)
