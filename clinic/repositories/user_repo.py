from typing import Optional

from sqlalchemy.orm import Session

from ..core.security import UserRole
from ..models import Admin, User
from .base import AdminStore, RoleDirectory


class UserRepository(RoleDirectory):
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def role_of(self, subject_id: int) -> Optional[UserRole]:
        user = self.find_by_id(subject_id)
        if not user or not user.is_active:
            return None
        return user.role


class AdminRepository(AdminStore):
    def __init__(self, db: Session):
        self.db = db

    def find_by_username(self, username: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.username == username).first()

    def save(self, admin: Admin) -> Admin:
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        return admin
