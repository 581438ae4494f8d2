from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Doctor
from .base import DoctorStore


class DoctorRepository(DoctorStore):
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, doctor_id: int) -> Optional[Doctor]:
        return self.db.get(Doctor, doctor_id)

    def find_by_user_id(self, user_id: int) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.user_id == user_id).first()

    def find_by_email(self, email: str) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(func.lower(Doctor.email) == email.lower()).first()

    def find_all(self) -> List[Doctor]:
        return self.db.query(Doctor).order_by(Doctor.id).all()

    def find_by_name(self, name: str) -> List[Doctor]:
        return (
            self.db.query(Doctor)
            .filter(self._name_contains(name))
            .order_by(Doctor.id)
            .all()
        )

    def find_by_name_and_specialty(self, name: str, specialty: str) -> List[Doctor]:
        return (
            self.db.query(Doctor)
            .filter(self._name_contains(name), self._specialty_is(specialty))
            .order_by(Doctor.id)
            .all()
        )

    def find_by_specialty(self, specialty: str) -> List[Doctor]:
        return (
            self.db.query(Doctor)
            .filter(self._specialty_is(specialty))
            .order_by(Doctor.id)
            .all()
        )

    def save(self, doctor: Doctor) -> Doctor:
        self.db.add(doctor)
        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def delete(self, doctor: Doctor) -> None:
        user = doctor.user
        self.db.delete(doctor)
        if user is not None:
            self.db.delete(user)
        self.db.commit()

    @staticmethod
    def _name_contains(name: str):
        return func.lower(Doctor.name).contains(name.lower(), autoescape=True)

    @staticmethod
    def _specialty_is(specialty: str):
        return func.lower(Doctor.specialty) == specialty.lower()
