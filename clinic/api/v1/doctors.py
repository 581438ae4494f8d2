from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ...core.database import get_db
from ...core.timeslots import parse_date
from ...api.deps import (
    get_access_gate, get_availability_calculator, get_current_admin_id,
    get_current_doctor, get_filter_engine, get_token, rate_limit_check
)
from ...core.security import AccessGate
from ...models import Doctor
from ...services.auth_service import AuthService
from ...services.availability import AvailabilityCalculator
from ...services.doctor_service import DoctorService
from ...services.filtering import FilterEngine
from ...schemas.auth import MessageResponse, TokenResponse, UserLogin
from ...schemas.doctor import AvailabilityResponse, DoctorCreate, DoctorResponse, DoctorUpdate
from ...schemas.filters import FilterCriteria

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("")
async def list_doctors(
    name: Optional[str] = None,
    specialty: Optional[str] = None,
    time_of_day: Optional[str] = Query(None, description="AM or PM"),
    engine: FilterEngine = Depends(get_filter_engine),
):
    """List doctors, optionally filtered by name, specialty and time of day."""
    criteria = FilterCriteria.build(name=name, specialty=specialty, time_of_day=time_of_day)
    doctors = engine.filter_doctors(criteria)
    return {"doctors": [DoctorResponse.model_validate(d) for d in doctors]}

@router.post("/login", response_model=TokenResponse)
async def doctor_login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a doctor and return an access token."""
    return AuthService(db).login_doctor(login_data)

@router.get("/me", response_model=DoctorResponse)
async def get_my_profile(doctor: Doctor = Depends(get_current_doctor)):
    """Profile of the authenticated doctor."""
    return DoctorResponse.model_validate(doctor)

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_doctor_availability(
    doctor_id: int,
    date: str,
    role: str = Query("patient", description="Role the token is presented as"),
    token: Optional[str] = Depends(get_token),
    gate: AccessGate = Depends(get_access_gate),
    calculator: AvailabilityCalculator = Depends(get_availability_calculator),
):
    """Free slots of a doctor on a date."""
    gate.authorize(token, role)
    on = parse_date(date)
    return AvailabilityResponse(
        doctor_id=doctor_id,
        date=on.isoformat(),
        available_times=calculator.free_slots_for(doctor_id, on),
    )

@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    data: DoctorCreate,
    db: Session = Depends(get_db),
    _: int = Depends(get_current_admin_id),
):
    """Add a doctor (admin only)."""
    return DoctorResponse.model_validate(DoctorService(db).create_doctor(data))

@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: int,
    data: DoctorUpdate,
    db: Session = Depends(get_db),
    _: int = Depends(get_current_admin_id),
):
    """Update a doctor's details or availability (admin only)."""
    return DoctorResponse.model_validate(DoctorService(db).update_doctor(doctor_id, data))

@router.delete("/{doctor_id}", response_model=MessageResponse)
async def delete_doctor(
    doctor_id: int,
    db: Session = Depends(get_db),
    _: int = Depends(get_current_admin_id),
):
    """Delete a doctor and all of their appointments (admin only)."""
    DoctorService(db).delete_doctor(doctor_id)
    return MessageResponse(message="Doctor deleted successfully")
