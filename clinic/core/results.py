from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Outcome(str, Enum):
    OK = "ok"
    # Token checks
    EXPIRED = "expired"
    MALFORMED = "malformed"
    UNKNOWN_SUBJECT = "unknown_subject"
    ROLE_MISMATCH = "role_mismatch"
    # Slot checks
    DOCTOR_NOT_FOUND = "doctor_not_found"
    SLOT_UNAVAILABLE = "slot_unavailable"


class ValidationResult(BaseModel):
    """Tagged result returned by every validation path.

    ``subject_id`` is only set by successful token validation.
    """

    outcome: Outcome
    subject_id: Optional[int] = None

    class Config:
        frozen = True

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.OK

    @classmethod
    def success(cls, subject_id: Optional[int] = None) -> "ValidationResult":
        return cls(outcome=Outcome.OK, subject_id=subject_id)

    @classmethod
    def failure(cls, outcome: Outcome) -> "ValidationResult":
        return cls(outcome=outcome)
