from .base import (
    AdminStore,
    AppointmentStore,
    DoctorStore,
    PatientStore,
    PrescriptionStore,
    RoleDirectory,
)
from .appointment_repo import AppointmentRepository
from .doctor_repo import DoctorRepository
from .patient_repo import PatientRepository
from .prescription_repo import PrescriptionRepository
from .user_repo import AdminRepository, UserRepository

__all__ = [
    "AdminStore",
    "AppointmentStore",
    "DoctorStore",
    "PatientStore",
    "PrescriptionStore",
    "RoleDirectory",
    "AdminRepository",
    "AppointmentRepository",
    "DoctorRepository",
    "PatientRepository",
    "PrescriptionRepository",
    "UserRepository",
]
