from sqlalchemy.orm import Session
import logging

from ..models import Admin, Patient, User
from ..core.exceptions import Conflict, Unauthorized
from ..core.security import (
    TokenAuthority, UserRole, get_password_hash, verify_password
)
from ..repositories import AdminRepository, PatientRepository, UserRepository
from ..schemas.auth import AdminLogin, PatientRegister, TokenResponse, UserLogin

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session, authority: TokenAuthority = None):
        self.db = db
        self.users = UserRepository(db)
        self.admins = AdminRepository(db)
        self.patients = PatientRepository(db)
        self.authority = authority or TokenAuthority(self.users)
    
    def register_patient(self, data: PatientRegister) -> Patient:
        """Register a new patient account."""
        if self.patients.find_by_email_or_phone(data.email, data.phone) or \
                self.users.find_by_email(data.email):
            raise Conflict("Patient with email id or phone no already exist")
        
        user = User(
            email=data.email,
            password_hash=get_password_hash(data.password),
            role=UserRole.PATIENT,
            is_active=True,
        )
        patient = Patient(
            user=user,
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
        )
        patient = self.patients.save(patient)
        logger.info(f"Registered patient {patient.id}")
        return patient
    
    def create_admin(self, username: str, password: str, email: str) -> Admin:
        """Create an admin account unless the username is already taken."""
        admin = self.admins.find_by_username(username)
        if admin:
            return admin
        if self.users.find_by_email(email):
            raise Conflict("Email already registered")
        
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            role=UserRole.ADMIN,
            is_active=True,
        )
        admin = self.admins.save(Admin(user=user, username=username))
        logger.info(f"Created admin {username}")
        return admin
    
    def login_admin(self, login_data: AdminLogin) -> TokenResponse:
        """Authenticate an admin by username."""
        admin = self.admins.find_by_username(login_data.username)
        return self._issue_for(admin.user if admin else None, login_data.password, UserRole.ADMIN)
    
    def login_doctor(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate a doctor by email."""
        user = self.users.find_by_email(login_data.email)
        return self._issue_for(user, login_data.password, UserRole.DOCTOR)
    
    def login_patient(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate a patient by email."""
        user = self.users.find_by_email(login_data.email)
        return self._issue_for(user, login_data.password, UserRole.PATIENT)
    
    def _issue_for(self, user: User, password: str, role: UserRole) -> TokenResponse:
        if (
            not user
            or user.role != role
            or not user.is_active
            or not verify_password(password, user.password_hash)
        ):
            logger.info(f"Failed {role.value} login")
            raise Unauthorized("Invalid credentials")
        
        return TokenResponse(token=self.authority.issue(user.id))
