from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_doctor
from ...models import Doctor
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import PrescriptionCreate, PrescriptionResponse

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def save_prescription(
    data: PrescriptionCreate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    """Write a prescription for one of the authenticated doctor's appointments."""
    prescription = PrescriptionService(db).save_prescription(doctor.id, data)
    return PrescriptionResponse.model_validate(prescription)

@router.get("/{appointment_id}", response_model=PrescriptionResponse)
async def get_prescription(
    appointment_id: int,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    """Prescription attached to one of the authenticated doctor's appointments."""
    prescription = PrescriptionService(db).get_prescription(doctor.id, appointment_id)
    return PrescriptionResponse.model_validate(prescription)
