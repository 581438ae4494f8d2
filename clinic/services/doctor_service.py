from typing import List
import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import Conflict, NotFound
from ..core.security import UserRole, get_password_hash
from ..models import Doctor, User
from ..repositories import AppointmentRepository, DoctorRepository, UserRepository
from ..schemas.doctor import DoctorCreate, DoctorUpdate

logger = logging.getLogger(__name__)


class DoctorService:
    def __init__(self, db: Session):
        self.db = db
        self.doctors = DoctorRepository(db)
        self.appointments = AppointmentRepository(db)
        self.users = UserRepository(db)

    def list_doctors(self) -> List[Doctor]:
        return self.doctors.find_all()

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.doctors.find_by_id(doctor_id)
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        if self.doctors.find_by_email(data.email) or self.users.find_by_email(data.email):
            raise Conflict("Doctor already exists")

        user = User(
            email=data.email,
            password_hash=get_password_hash(data.password),
            role=UserRole.DOCTOR,
            is_active=True,
        )
        doctor = Doctor(
            user=user,
            name=data.name,
            specialty=data.specialty,
            email=data.email,
            phone=data.phone,
            available_times=(
                list(settings.DEFAULT_TIME_SLOTS)
                if data.available_times is None
                else data.available_times
            ),
            weekly_availability=data.weekly_availability,
        )
        doctor = self.doctors.save(doctor)
        logger.info(f"Created doctor {doctor.id}")
        return doctor

    def update_doctor(self, doctor_id: int, data: DoctorUpdate) -> Doctor:
        doctor = self.get_doctor(doctor_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            # weekly_availability may be cleared; every other column is required
            if value is None and field != "weekly_availability":
                continue
            setattr(doctor, field, value)
        return self.doctors.save(doctor)

    def delete_doctor(self, doctor_id: int) -> None:
        doctor = self.get_doctor(doctor_id)
        removed = self.appointments.delete_all_by_doctor(doctor_id)
        self.doctors.delete(doctor)
        logger.info(f"Deleted doctor {doctor_id} and {removed} appointment(s)")
