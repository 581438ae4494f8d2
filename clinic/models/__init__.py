from .user import User, Admin
from .doctor import Doctor
from .patient import Patient
from .appointment import Appointment, AppointmentStatus, RELEASED_STATUSES
from .prescription import Prescription

__all__ = [
    "User",
    "Admin",
    "Doctor",
    "Patient",
    "Appointment",
    "AppointmentStatus",
    "RELEASED_STATUSES",
    "Prescription",
]
