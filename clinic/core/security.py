from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel, ValidationError
from enum import Enum
import logging

from .config import settings
from .exceptions import Unauthorized
from .results import Outcome, ValidationResult

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=4 if settings.TESTING else 12,
)

# JWT Security
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

class TokenPayload(BaseModel):
    sub: int
    iat: int
    exp: int

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


class TokenAuthority:
    """Issues and validates signed session tokens.

    Tokens carry only the subject id and issue time. The role is never
    embedded: it is supplied by the caller at validation time and checked
    against the subject's persisted role through ``directory``, an object
    exposing ``role_of(subject_id) -> Optional[UserRole]``.
    """

    def __init__(
        self,
        directory,
        secret_key: str = None,
        algorithm: str = None,
        expire_minutes: int = None,
    ):
        self.directory = directory
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM
        if expire_minutes is None:
            expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.lifetime = timedelta(minutes=expire_minutes)

    def issue(self, subject_id: int) -> str:
        """Create a signed token for ``subject_id``."""
        issued_at = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(subject_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Union[TokenPayload, Outcome]:
        """Verify the signature and claims, returning the payload or the failure outcome."""
        if not token:
            return Outcome.MALFORMED
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            return Outcome.EXPIRED
        except JWTError:
            return Outcome.MALFORMED

        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub.isdecimal():
            return Outcome.MALFORMED
        try:
            return TokenPayload(sub=int(sub), iat=payload.get("iat", 0), exp=payload["exp"])
        except (ValueError, ValidationError):
            return Outcome.MALFORMED

    def validate(self, token: str, expected_role: UserRole) -> ValidationResult:
        """Validate ``token`` for a subject whose persisted role is ``expected_role``."""
        decoded = self.decode(token)
        if isinstance(decoded, Outcome):
            return ValidationResult.failure(decoded)

        role = self.directory.role_of(decoded.sub)
        if role is None:
            return ValidationResult.failure(Outcome.UNKNOWN_SUBJECT)
        if role != expected_role:
            return ValidationResult.failure(Outcome.ROLE_MISMATCH)

        return ValidationResult.success(subject_id=decoded.sub)


class AccessGate:
    """Role gate in front of every protected operation.

    Every failure reason is logged but surfaces as the same ``Unauthorized``.
    """

    def __init__(self, authority: TokenAuthority):
        self.authority = authority

    def authorize(self, token: Optional[str], role: Union[UserRole, str]) -> int:
        """Return the subject id behind ``token`` if its role is ``role``."""
        required = self._coerce_role(role)
        if required is None:
            logger.warning(f"Rejected authorization for unknown role {role!r}")
            raise Unauthorized()

        result = self.authority.validate(token, required)
        if not result.ok:
            logger.warning(
                f"Authorization failed for role {required.value}: {result.outcome.value}"
            )
            raise Unauthorized()

        return result.subject_id

    @staticmethod
    def _coerce_role(role: Union[UserRole, str]) -> Optional[UserRole]:
        if isinstance(role, UserRole):
            return role
        try:
            return UserRole(str(role).strip().lower())
        except ValueError:
            return None
