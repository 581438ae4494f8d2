from typing import List

from ..core.timeslots import TimeOfDay, slot_sort_key, time_of_day
from ..core.exceptions import InvalidArgument
from ..models import Appointment, AppointmentStatus, Doctor
from ..repositories.base import AppointmentStore, DoctorStore
from ..schemas.filters import Condition, FilterCriteria

# Statuses that count as "already happened" / "still to come"
CONDITION_STATUSES = {
    Condition.PAST: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW}),
    Condition.FUTURE: frozenset({AppointmentStatus.SCHEDULED}),
}


class FilterEngine:
    """Composes optional, AND-ed predicates over doctors and appointments."""

    def __init__(self, doctors: DoctorStore, appointments: AppointmentStore):
        self.doctors = doctors
        self.appointments = appointments

    def filter_doctors(self, criteria: FilterCriteria) -> List[Doctor]:
        if criteria.is_empty:
            return self.doctors.find_all()

        if criteria.name and criteria.specialty:
            doctors = self.doctors.find_by_name_and_specialty(criteria.name, criteria.specialty)
        elif criteria.specialty:
            doctors = self.doctors.find_by_specialty(criteria.specialty)
        elif criteria.name:
            doctors = self.doctors.find_by_name(criteria.name)
        else:
            doctors = self.doctors.find_all()

        if criteria.time_of_day is not None:
            doctors = [
                doctor for doctor in doctors
                if self._offers(doctor, criteria.time_of_day)
            ]
        return doctors

    def filter_appointments(
        self, criteria: FilterCriteria, owner_patient_id: int
    ) -> List[Appointment]:
        """Appointments of ``owner_patient_id`` only, narrowed by condition and doctor name."""
        appointments = self.appointments.find_by_patient(owner_patient_id)
        appointments = [a for a in appointments if a.patient_id == owner_patient_id]

        if criteria.condition is not None:
            statuses = CONDITION_STATUSES.get(criteria.condition)
            if statuses is None:
                raise InvalidArgument(f"Invalid condition: {criteria.condition!r}")
            appointments = [a for a in appointments if a.status in statuses]

        if criteria.doctor_name:
            needle = criteria.doctor_name.lower()
            appointments = [a for a in appointments if needle in a.doctor.name.lower()]

        return sorted(
            appointments,
            key=lambda a: (a.appointment_date, slot_sort_key(a.appointment_time), a.id),
        )

    @staticmethod
    def _offers(doctor: Doctor, half: TimeOfDay) -> bool:
        slots = list(doctor.available_times or [])
        for day_slots in (doctor.weekly_availability or {}).values():
            slots.extend(day_slots)
        for slot in slots:
            try:
                if time_of_day(slot) == half:
                    return True
            except InvalidArgument:
                continue
        return False
