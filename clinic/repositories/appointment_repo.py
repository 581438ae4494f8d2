from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import Appointment, Prescription
from .base import AppointmentStore


class AppointmentRepository(AppointmentStore):
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.get(Appointment, appointment_id)

    def find_by_doctor_and_date(self, doctor_id: int, on: date) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on,
            )
            .order_by(Appointment.id)
            .all()
        )

    def find_by_patient(self, patient_id: int) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date, Appointment.id)
            .all()
        )

    def save(self, appointment: Appointment) -> Appointment:
        """Persist ``appointment``; the active-slot index may reject it with ``IntegrityError``."""
        self.db.add(appointment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(appointment)
        return appointment

    def delete_all_by_doctor(self, doctor_id: int) -> int:
        appointment_ids = self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id
        )
        self.db.query(Prescription).filter(
            Prescription.appointment_id.in_(appointment_ids.scalar_subquery())
        ).delete(synchronize_session=False)
        deleted = (
            self.db.query(Appointment)
            .filter(Appointment.doctor_id == doctor_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
