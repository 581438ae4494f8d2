from typing import Optional

from sqlalchemy.orm import Session

from ..models import Prescription
from .base import PrescriptionStore


class PrescriptionRepository(PrescriptionStore):
    def __init__(self, db: Session):
        self.db = db

    def find_by_appointment(self, appointment_id: int) -> Optional[Prescription]:
        return (
            self.db.query(Prescription)
            .filter(Prescription.appointment_id == appointment_id)
            .first()
        )

    def save(self, prescription: Prescription) -> Prescription:
        self.db.add(prescription)
        self.db.commit()
        self.db.refresh(prescription)
        return prescription
