from sqlalchemy.orm import Session

from ..core.exceptions import Conflict, NotFound
from ..models import Appointment, Prescription
from ..repositories import AppointmentRepository, PrescriptionRepository
from ..schemas.prescription import PrescriptionCreate


class PrescriptionService:
    def __init__(self, db: Session):
        self.db = db
        self.appointments = AppointmentRepository(db)
        self.prescriptions = PrescriptionRepository(db)

    def save_prescription(self, doctor_id: int, data: PrescriptionCreate) -> Prescription:
        """Attach a prescription to one of the doctor's appointments."""
        self._doctors_appointment(doctor_id, data.appointment_id)
        if self.prescriptions.find_by_appointment(data.appointment_id):
            raise Conflict("Prescription already exists for this appointment")

        return self.prescriptions.save(Prescription(**data.model_dump()))

    def get_prescription(self, doctor_id: int, appointment_id: int) -> Prescription:
        self._doctors_appointment(doctor_id, appointment_id)
        prescription = self.prescriptions.find_by_appointment(appointment_id)
        if not prescription:
            raise NotFound("No prescription found")
        return prescription

    def _doctors_appointment(self, doctor_id: int, appointment_id: int) -> Appointment:
        appointment = self.appointments.find_by_id(appointment_id)
        if not appointment or appointment.doctor_id != doctor_id:
            raise NotFound("Appointment not found")
        return appointment
