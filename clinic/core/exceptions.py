from fastapi import HTTPException, status


class ClinicError(HTTPException):
    """Base error carrying a stable ``kind`` alongside the HTTP status."""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unexpected error occurred"

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class Unauthorized(ClinicError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid or expired token"

    def __init__(self, detail: str = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class NotFound(ClinicError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "The requested resource was not found"


class Conflict(ClinicError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with existing data"


class InvalidArgument(ClinicError):
    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid argument"


class Internal(ClinicError):
    pass


class TooManyRequests(ClinicError):
    kind = "rate_limited"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests. Please try again later."
