"""
Store interfaces consumed by the scheduling and access-control services.

One narrow interface per entity; the SQLAlchemy implementations live in
the sibling ``*_repo`` modules and are assembled per request in
``clinic.api.deps``.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from ..core.security import UserRole
from ..models import Admin, Appointment, Doctor, Patient, Prescription


class RoleDirectory(ABC):
    """Resolves a token subject to its persisted role."""

    @abstractmethod
    def role_of(self, subject_id: int) -> Optional[UserRole]:
        """Role of an active subject, or None if it does not exist."""
        pass


class DoctorStore(ABC):
    @abstractmethod
    def find_by_id(self, doctor_id: int) -> Optional[Doctor]:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: int) -> Optional[Doctor]:
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Doctor]:
        pass

    @abstractmethod
    def find_all(self) -> List[Doctor]:
        pass

    @abstractmethod
    def find_by_name(self, name: str) -> List[Doctor]:
        """Doctors whose name contains ``name``, ignoring case."""
        pass

    @abstractmethod
    def find_by_name_and_specialty(self, name: str, specialty: str) -> List[Doctor]:
        """Name contains ``name`` and specialty equals ``specialty``, ignoring case."""
        pass

    @abstractmethod
    def find_by_specialty(self, specialty: str) -> List[Doctor]:
        """Specialty equals ``specialty``, ignoring case."""
        pass

    @abstractmethod
    def save(self, doctor: Doctor) -> Doctor:
        pass

    @abstractmethod
    def delete(self, doctor: Doctor) -> None:
        pass


class AppointmentStore(ABC):
    @abstractmethod
    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        pass

    @abstractmethod
    def find_by_doctor_and_date(self, doctor_id: int, on: date) -> List[Appointment]:
        pass

    @abstractmethod
    def find_by_patient(self, patient_id: int) -> List[Appointment]:
        pass

    @abstractmethod
    def save(self, appointment: Appointment) -> Appointment:
        pass

    @abstractmethod
    def delete_all_by_doctor(self, doctor_id: int) -> int:
        """Delete every appointment of a doctor, returning how many were removed."""
        pass


class PatientStore(ABC):
    @abstractmethod
    def find_by_id(self, patient_id: int) -> Optional[Patient]:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: int) -> Optional[Patient]:
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Patient]:
        pass

    @abstractmethod
    def find_by_email_or_phone(self, email: str, phone: str) -> Optional[Patient]:
        pass

    @abstractmethod
    def save(self, patient: Patient) -> Patient:
        pass


class AdminStore(ABC):
    @abstractmethod
    def find_by_username(self, username: str) -> Optional[Admin]:
        pass


class PrescriptionStore(ABC):
    @abstractmethod
    def find_by_appointment(self, appointment_id: int) -> Optional[Prescription]:
        pass

    @abstractmethod
    def save(self, prescription: Prescription) -> Prescription:
        pass
