from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import TooManyRequests, Unauthorized
from ..core.security import AccessGate, TokenAuthority, UserRole, security
from ..models import Doctor, Patient
from ..repositories import (
    AppointmentRepository, DoctorRepository, PatientRepository, UserRepository
)
from ..services.availability import AvailabilityCalculator
from ..services.conflicts import ConflictValidator
from ..services.filtering import FilterEngine

async def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[str]:
    """Extract the bearer token from the Authorization header, if any."""
    return credentials.credentials if credentials else None

def get_token_authority(db: Session = Depends(get_db)) -> TokenAuthority:
    return TokenAuthority(UserRepository(db))

def get_access_gate(
    authority: TokenAuthority = Depends(get_token_authority)
) -> AccessGate:
    return AccessGate(authority)

def get_availability_calculator(db: Session = Depends(get_db)) -> AvailabilityCalculator:
    return AvailabilityCalculator(DoctorRepository(db), AppointmentRepository(db))

def get_conflict_validator(
    db: Session = Depends(get_db),
    calculator: AvailabilityCalculator = Depends(get_availability_calculator),
) -> ConflictValidator:
    return ConflictValidator(DoctorRepository(db), calculator)

def get_filter_engine(db: Session = Depends(get_db)) -> FilterEngine:
    return FilterEngine(DoctorRepository(db), AppointmentRepository(db))

# Role-based access control dependencies
def require_role(role: UserRole):
    """Create a dependency resolving the caller's subject id for ``role``."""
    async def role_checker(
        token: Optional[str] = Depends(get_token),
        gate: AccessGate = Depends(get_access_gate),
    ) -> int:
        return gate.authorize(token, role)

    return role_checker

async def get_current_admin_id(
    subject_id: int = Depends(require_role(UserRole.ADMIN))
) -> int:
    """Require admin role."""
    return subject_id

async def get_current_doctor(
    subject_id: int = Depends(require_role(UserRole.DOCTOR)),
    db: Session = Depends(get_db),
) -> Doctor:
    """Require doctor role and load the caller's doctor profile."""
    doctor = DoctorRepository(db).find_by_user_id(subject_id)
    if not doctor:
        raise Unauthorized()
    return doctor

async def get_current_patient(
    subject_id: int = Depends(require_role(UserRole.PATIENT)),
    db: Session = Depends(get_db),
) -> Patient:
    """Require patient role and load the caller's patient profile."""
    patient = PatientRepository(db).find_by_user_id(subject_id)
    if not patient:
        raise Unauthorized()
    return patient

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for login and signup endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)  # one hour window
    else:
        if int(current_requests) >= settings.LOGIN_RATE_LIMIT:
            raise TooManyRequests()
        redis_client.incr(key)
