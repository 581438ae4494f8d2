from fastapi import APIRouter

from .auth import router as auth_router
from .appointments import router as appointments_router
from .doctors import router as doctors_router
from .patients import router as patients_router
from .prescriptions import router as prescriptions_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(doctors_router)
api_router.include_router(patients_router)
api_router.include_router(appointments_router)
api_router.include_router(prescriptions_router)
