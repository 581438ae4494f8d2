from typing import Optional

from pydantic import BaseModel


class PatientResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: Optional[str] = None

    class Config:
        from_attributes = True
