from contextlib import contextmanager
from datetime import date
from typing import Optional
import threading

from ..core.results import Outcome, ValidationResult
from ..repositories.base import DoctorStore
from ..schemas.appointment import AppointmentRequest
from .availability import AvailabilityCalculator


class SlotLocks:
    """In-process mutual exclusion keyed by ``(doctor_id, date, time)``.

    Entries are reference counted and dropped once no request holds or
    waits on them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    @contextmanager
    def hold(self, doctor_id: int, on: date, time: str):
        key = (doctor_id, on, time)
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        try:
            with lock:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


# Shared by every request in this process
slot_locks = SlotLocks()


class ConflictValidator:
    """Decides whether a requested appointment slot is free.

    ``validate`` has no side effects. Callers that go on to write must do
    so inside ``reserve`` for the same slot so the check and the write
    cannot interleave with another request for it.
    """

    def __init__(
        self,
        doctors: DoctorStore,
        calculator: AvailabilityCalculator,
        locks: SlotLocks = None,
    ):
        self.doctors = doctors
        self.calculator = calculator
        self.locks = locks if locks is not None else slot_locks

    def validate(
        self,
        request: AppointmentRequest,
        reschedule_of: Optional[int] = None,
    ) -> ValidationResult:
        if not self.doctors.find_by_id(request.doctor_id):
            return ValidationResult.failure(Outcome.DOCTOR_NOT_FOUND)

        free = self.calculator.free_slots_for(
            request.doctor_id, request.date, exclude_appointment_id=reschedule_of
        )
        if request.time not in free:
            return ValidationResult.failure(Outcome.SLOT_UNAVAILABLE)

        return ValidationResult.success()

    def reserve(self, doctor_id: int, on: date, time: str):
        return self.locks.hold(doctor_id, on, time)
