from datetime import date
from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import Conflict, InvalidArgument, NotFound
from ..core.results import Outcome
from ..core.timeslots import normalize_slot, slot_sort_key
from ..models import Appointment, AppointmentStatus
from ..repositories import AppointmentRepository, DoctorRepository
from ..schemas.appointment import AppointmentRequest, AppointmentReschedule
from .availability import AvailabilityCalculator
from .conflicts import ConflictValidator

logger = logging.getLogger(__name__)

# Transitions a doctor may record on a scheduled appointment
DOCTOR_STATUS_CHANGES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
    AppointmentStatus.CANCELLED,
})


class AppointmentService:
    """Booking, rescheduling and status changes for appointments.

    Every write that takes a slot runs its availability check inside the
    slot's reservation, and the active-slot unique index rejects anything
    that still slips through from another process.
    """

    def __init__(self, db: Session, validator: ConflictValidator = None):
        self.db = db
        self.doctors = DoctorRepository(db)
        self.appointments = AppointmentRepository(db)
        self.calculator = AvailabilityCalculator(self.doctors, self.appointments)
        self.validator = validator or ConflictValidator(self.doctors, self.calculator)

    def book(self, patient_id: int, request: AppointmentRequest) -> Appointment:
        """Book ``request`` for the patient identified by the caller's token."""
        request = self._normalized(request)

        with self.validator.reserve(request.doctor_id, request.date, request.time):
            self._check_slot(request)
            appointment = Appointment(
                doctor_id=request.doctor_id,
                patient_id=patient_id,
                appointment_date=request.date,
                appointment_time=request.time,
                status=AppointmentStatus.SCHEDULED,
                reason=request.reason,
            )
            appointment = self._save(appointment)

        logger.info(
            f"Booked appointment {appointment.id} with doctor {request.doctor_id} "
            f"on {request.date} at {request.time}"
        )
        return appointment

    def reschedule(
        self, patient_id: int, appointment_id: int, change: AppointmentReschedule
    ) -> Appointment:
        appointment = self._owned_by_patient(patient_id, appointment_id)
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise Conflict("Only scheduled appointments can be rescheduled")

        request = self._normalized(AppointmentRequest(
            doctor_id=appointment.doctor_id,
            date=change.date,
            time=change.time,
            reason=change.reason,
        ))

        with self.validator.reserve(request.doctor_id, request.date, request.time):
            self._check_slot(request, reschedule_of=appointment.id)
            appointment.appointment_date = request.date
            appointment.appointment_time = request.time
            if request.reason is not None:
                appointment.reason = request.reason
            appointment = self._save(appointment)

        logger.info(f"Rescheduled appointment {appointment.id} to {request.date} {request.time}")
        return appointment

    def cancel(self, patient_id: int, appointment_id: int) -> Appointment:
        appointment = self._owned_by_patient(patient_id, appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            return appointment
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise Conflict("Only scheduled appointments can be cancelled")

        appointment.status = AppointmentStatus.CANCELLED
        appointment = self.appointments.save(appointment)
        logger.info(f"Cancelled appointment {appointment.id}")
        return appointment

    def set_status(
        self, doctor_id: int, appointment_id: int, status: AppointmentStatus
    ) -> Appointment:
        """Record the outcome of one of the doctor's own scheduled appointments."""
        appointment = self.appointments.find_by_id(appointment_id)
        if not appointment or appointment.doctor_id != doctor_id:
            raise NotFound("Appointment not found")
        if status not in DOCTOR_STATUS_CHANGES:
            raise InvalidArgument(f"Cannot set status to {status.value}")
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise Conflict(f"Appointment is already {appointment.status.value}")

        appointment.status = status
        return self.appointments.save(appointment)

    def for_doctor_on(
        self, doctor_id: int, on: date, patient_name: Optional[str] = None
    ) -> List[Appointment]:
        """A doctor's appointments for one day, optionally narrowed by patient name."""
        appointments = self.appointments.find_by_doctor_and_date(doctor_id, on)
        if patient_name and patient_name.strip():
            needle = patient_name.strip().lower()
            appointments = [a for a in appointments if needle in a.patient.name.lower()]
        return sorted(appointments, key=lambda a: (slot_sort_key(a.appointment_time), a.id))

    def _check_slot(self, request: AppointmentRequest, reschedule_of: int = None):
        result = self.validator.validate(request, reschedule_of=reschedule_of)
        if result.outcome == Outcome.DOCTOR_NOT_FOUND:
            raise NotFound("Doctor not found")
        if result.outcome == Outcome.SLOT_UNAVAILABLE:
            logger.info(
                f"Slot {request.date} {request.time} unavailable for doctor {request.doctor_id}"
            )
            raise Conflict("Appointment time not available")

    def _save(self, appointment: Appointment) -> Appointment:
        try:
            return self.appointments.save(appointment)
        except IntegrityError:
            logger.warning(
                f"Active-slot index rejected doctor {appointment.doctor_id} "
                f"on {appointment.appointment_date} at {appointment.appointment_time}"
            )
            raise Conflict("Appointment time not available")

    def _owned_by_patient(self, patient_id: int, appointment_id: int) -> Appointment:
        appointment = self.appointments.find_by_id(appointment_id)
        if not appointment or appointment.patient_id != patient_id:
            raise NotFound("Appointment not found")
        return appointment

    @staticmethod
    def _normalized(request: AppointmentRequest) -> AppointmentRequest:
        return request.model_copy(update={"time": normalize_slot(request.time)})
