"""
Clinic Scheduling Service

A FastAPI-based clinic backend with role-scoped authentication,
doctor availability, conflict-free appointment booking and filtering.
"""

__version__ = "1.0.0"
