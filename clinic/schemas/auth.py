from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class AdminLogin(BaseModel):
    username: str
    password: str


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str


class PatientRegister(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., pattern=r"^\d{10}$")
    address: Optional[str] = Field(None, max_length=255)
