from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import Patient
from .base import PatientStore


class PatientRepository(PatientStore):
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, patient_id: int) -> Optional[Patient]:
        return self.db.get(Patient, patient_id)

    def find_by_user_id(self, user_id: int) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.user_id == user_id).first()

    def find_by_email(self, email: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.email == email).first()

    def find_by_email_or_phone(self, email: str, phone: str) -> Optional[Patient]:
        return (
            self.db.query(Patient)
            .filter(or_(Patient.email == email, Patient.phone == phone))
            .first()
        )

    def save(self, patient: Patient) -> Patient:
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        return patient
