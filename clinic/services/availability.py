from datetime import date
from typing import List, Optional

from ..core.exceptions import NotFound
from ..core.timeslots import weekday_name
from ..models import Doctor
from ..repositories.base import AppointmentStore, DoctorStore


class AvailabilityCalculator:
    """Computes a doctor's bookable slots for a day from the doctor's own template."""

    def __init__(self, doctors: DoctorStore, appointments: AppointmentStore):
        self.doctors = doctors
        self.appointments = appointments

    def slots_for(self, doctor_id: int, on: date) -> List[str]:
        """Every slot the doctor offers on ``on``, in template order."""
        return self.template_for(self._get_doctor(doctor_id), on)

    def free_slots_for(
        self,
        doctor_id: int,
        on: date,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[str]:
        """Slots on ``on`` not held by a scheduled or completed appointment.

        ``exclude_appointment_id`` leaves that appointment's own slot free,
        which is what rescheduling needs.
        """
        slots = self.slots_for(doctor_id, on)
        taken = {
            appointment.appointment_time
            for appointment in self.appointments.find_by_doctor_and_date(doctor_id, on)
            if appointment.holds_slot and appointment.id != exclude_appointment_id
        }
        return [slot for slot in slots if slot not in taken]

    @staticmethod
    def template_for(doctor: Doctor, on: date) -> List[str]:
        weekly = doctor.weekly_availability or {}
        weekday = weekday_name(on)
        if weekday in weekly:
            return list(weekly[weekday])
        return list(doctor.available_times or [])

    def _get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.doctors.find_by_id(doctor_id)
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor
