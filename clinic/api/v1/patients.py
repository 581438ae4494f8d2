from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional

from ...core.database import get_db
from ...api.deps import get_current_patient, get_filter_engine, rate_limit_check
from ...models import Patient
from ...services.auth_service import AuthService
from ...services.filtering import FilterEngine
from ...schemas.appointment import AppointmentResponse
from ...schemas.auth import MessageResponse, PatientRegister, TokenResponse, UserLogin
from ...schemas.filters import FilterCriteria
from ...schemas.patient import PatientResponse

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register_patient(
    data: PatientRegister,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Sign up a new patient."""
    AuthService(db).register_patient(data)
    return MessageResponse(message="Signup successful")

@router.post("/login", response_model=TokenResponse)
async def patient_login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a patient and return an access token."""
    return AuthService(db).login_patient(login_data)

@router.get("/me", response_model=PatientResponse)
async def get_my_details(patient: Patient = Depends(get_current_patient)):
    """Details of the authenticated patient."""
    return PatientResponse.model_validate(patient)

@router.get("/me/appointments")
async def get_my_appointments(
    condition: Optional[str] = None,
    doctor_name: Optional[str] = None,
    patient: Patient = Depends(get_current_patient),
    engine: FilterEngine = Depends(get_filter_engine),
):
    """The authenticated patient's appointments, filtered by condition and doctor name."""
    criteria = FilterCriteria.build(condition=condition, doctor_name=doctor_name)
    appointments = engine.filter_appointments(criteria, patient.id)
    return {"appointments": [AppointmentResponse.from_model(a) for a in appointments]}
