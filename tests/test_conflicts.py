from concurrent.futures import ThreadPoolExecutor
import threading

import pytest
from sqlalchemy.exc import IntegrityError

from clinic.core.database import SessionLocal
from clinic.core.exceptions import Conflict, InvalidArgument, NotFound
from clinic.core.results import Outcome
from clinic.models import Appointment, AppointmentStatus
from clinic.repositories import AppointmentRepository, DoctorRepository
from clinic.schemas.appointment import AppointmentRequest, AppointmentReschedule
from clinic.services.appointment_service import AppointmentService
from clinic.services.availability import AvailabilityCalculator
from clinic.services.conflicts import ConflictValidator, SlotLocks

from .conftest import BOOKING_DATE


@pytest.fixture
def validator(db):
    doctors = DoctorRepository(db)
    calculator = AvailabilityCalculator(doctors, AppointmentRepository(db))
    return ConflictValidator(doctors, calculator, SlotLocks())


def request_for(doctor, time="09:00 AM", on=BOOKING_DATE):
    return AppointmentRequest(doctor_id=doctor.id, date=on, time=time)


class TestConflictValidator:

    def test_free_slot_is_ok(self, validator, make_doctor):
        doctor = make_doctor()
        assert validator.validate(request_for(doctor)).outcome == Outcome.OK

    def test_unknown_doctor(self, validator):
        request = AppointmentRequest(doctor_id=404, date=BOOKING_DATE, time="09:00 AM")
        assert validator.validate(request).outcome == Outcome.DOCTOR_NOT_FOUND

    def test_slot_outside_template(self, validator, make_doctor):
        doctor = make_doctor()
        assert validator.validate(request_for(doctor, "04:00 PM")).outcome == Outcome.SLOT_UNAVAILABLE

    def test_validation_is_idempotent(self, db, validator, make_doctor):
        doctor = make_doctor()
        request = request_for(doctor)

        results = [validator.validate(request) for _ in range(3)]
        assert all(result == results[0] for result in results)
        assert AppointmentRepository(db).find_by_doctor_and_date(doctor.id, BOOKING_DATE) == []


class TestBooking:

    def test_book_cancel_rebook_scenario(self, db, make_doctor, make_patient):
        doctor = make_doctor(available_times=["09:00 AM", "10:00 AM"])
        first, second = make_patient(), make_patient(name="Sam Lee")
        service = AppointmentService(db)

        booked = service.book(first.id, request_for(doctor))
        assert booked.status == AppointmentStatus.SCHEDULED

        with pytest.raises(Conflict):
            service.book(second.id, request_for(doctor))
        assert service.validator.validate(request_for(doctor)).outcome == Outcome.SLOT_UNAVAILABLE

        service.cancel(first.id, booked.id)
        rebooked = service.book(second.id, request_for(doctor))
        assert rebooked.patient_id == second.id

    def test_book_normalizes_slot_spelling(self, db, make_doctor, make_patient):
        doctor = make_doctor()
        appointment = AppointmentService(db).book(make_patient().id, request_for(doctor, "9:00 am"))
        assert appointment.appointment_time == "09:00 AM"

    def test_book_rejects_malformed_time(self, db, make_doctor, make_patient):
        doctor = make_doctor()
        with pytest.raises(InvalidArgument):
            AppointmentService(db).book(make_patient().id, request_for(doctor, "nine-ish"))

    def test_book_unknown_doctor(self, db, make_patient):
        request = AppointmentRequest(doctor_id=77, date=BOOKING_DATE, time="09:00 AM")
        with pytest.raises(NotFound):
            AppointmentService(db).book(make_patient().id, request)

    def test_reschedule_to_adjacent_slot(self, db, make_doctor, make_patient):
        doctor = make_doctor(available_times=["09:00 AM", "10:00 AM"])
        patient = make_patient()
        service = AppointmentService(db)
        booked = service.book(patient.id, request_for(doctor, "09:00 AM"))

        moved = service.reschedule(
            patient.id, booked.id, AppointmentReschedule(date=BOOKING_DATE, time="10:00 AM")
        )
        assert moved.appointment_time == "10:00 AM"
        assert service.calculator.free_slots_for(doctor.id, BOOKING_DATE) == ["09:00 AM"]

    def test_reschedule_to_same_slot_does_not_collide_with_itself(
        self, db, make_doctor, make_patient
    ):
        doctor = make_doctor()
        patient = make_patient()
        service = AppointmentService(db)
        booked = service.book(patient.id, request_for(doctor, "09:00 AM"))

        moved = service.reschedule(
            patient.id, booked.id,
            AppointmentReschedule(date=BOOKING_DATE, time="09:00 AM", reason="same time"),
        )
        assert moved.appointment_time == "09:00 AM"
        assert moved.reason == "same time"

    def test_reschedule_into_taken_slot(self, db, make_doctor, make_patient):
        doctor = make_doctor()
        first, second = make_patient(), make_patient(name="Sam Lee")
        service = AppointmentService(db)
        service.book(first.id, request_for(doctor, "09:00 AM"))
        mine = service.book(second.id, request_for(doctor, "10:00 AM"))

        with pytest.raises(Conflict):
            service.reschedule(
                second.id, mine.id, AppointmentReschedule(date=BOOKING_DATE, time="09:00 AM")
            )

    def test_cannot_touch_other_patients_appointment(self, db, make_doctor, make_patient):
        doctor = make_doctor()
        owner, intruder = make_patient(), make_patient(name="Eve Intruder")
        service = AppointmentService(db)
        booked = service.book(owner.id, request_for(doctor))

        with pytest.raises(NotFound):
            service.cancel(intruder.id, booked.id)
        with pytest.raises(NotFound):
            service.reschedule(
                intruder.id, booked.id, AppointmentReschedule(date=BOOKING_DATE, time="10:00 AM")
            )

    def test_doctor_records_outcome(self, db, make_doctor, make_patient):
        doctor = make_doctor()
        service = AppointmentService(db)
        booked = service.book(make_patient().id, request_for(doctor))

        done = service.set_status(doctor.id, booked.id, AppointmentStatus.COMPLETED)
        assert done.status == AppointmentStatus.COMPLETED
        with pytest.raises(Conflict):
            service.set_status(doctor.id, booked.id, AppointmentStatus.NO_SHOW)
        with pytest.raises(InvalidArgument):
            service.set_status(doctor.id, booked.id, AppointmentStatus.SCHEDULED)

    def test_concurrent_bookings_yield_one_winner(self, db, make_doctor, make_patient):
        doctor = make_doctor()
        doctor_id = doctor.id
        patient_ids = [make_patient(name=f"Patient {i}").id for i in range(8)]
        start = threading.Barrier(len(patient_ids))

        def attempt(patient_id):
            session = SessionLocal()
            try:
                start.wait()
                request = AppointmentRequest(doctor_id=doctor_id, date=BOOKING_DATE, time="09:00 AM")
                AppointmentService(session).book(patient_id, request)
                return "ok"
            except Conflict:
                return "conflict"
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=len(patient_ids)) as pool:
            outcomes = list(pool.map(attempt, patient_ids))

        assert outcomes.count("ok") == 1
        assert outcomes.count("conflict") == len(patient_ids) - 1
        active = [
            a for a in AppointmentRepository(db).find_by_doctor_and_date(doctor_id, BOOKING_DATE)
            if a.holds_slot
        ]
        assert len(active) == 1


class TestActiveSlotIndex:

    def _insert(self, db, doctor, patient, status=AppointmentStatus.SCHEDULED):
        return AppointmentRepository(db).save(Appointment(
            doctor_id=doctor.id,
            patient_id=patient.id,
            appointment_date=BOOKING_DATE,
            appointment_time="09:00 AM",
            status=status,
        ))

    def test_second_active_row_is_rejected(self, db, make_doctor, make_patient):
        doctor, patient = make_doctor(), make_patient()
        self._insert(db, doctor, patient)

        with pytest.raises(IntegrityError):
            self._insert(db, doctor, patient)

    def test_released_rows_do_not_count(self, db, make_doctor, make_patient):
        doctor, patient = make_doctor(), make_patient()
        self._insert(db, doctor, patient, AppointmentStatus.CANCELLED)
        self._insert(db, doctor, patient, AppointmentStatus.NO_SHOW)

        assert self._insert(db, doctor, patient).id is not None


class TestSlotLocks:

    def test_entries_are_released(self):
        locks = SlotLocks()
        with locks.hold(1, BOOKING_DATE, "09:00 AM"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_same_slot_is_exclusive(self):
        locks = SlotLocks()
        inside = []
        overlap = []

        def worker():
            with locks.hold(1, BOOKING_DATE, "09:00 AM"):
                if inside:
                    overlap.append(True)
                inside.append(True)
                threading.Event().wait(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlap == []
        assert len(locks) == 0
