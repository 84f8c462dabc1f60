"""Service-layer error taxonomy shared by stores, the cascade and routers."""

from typing import Optional


class ServiceError(Exception):
    """Base error carrying the HTTP status the routers should answer with."""

    status_code = 500

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class TransactionFailedError(ServiceError):
    status_code = 500


class EmailAlreadyExistsError(ServiceError):
    status_code = 400

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    status_code = 400

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InvalidSessionError(ServiceError):
    status_code = 401

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class UploadRejectedError(ServiceError):
    status_code = 422

    def __init__(self, message: str, status_code: int = 422):
        super().__init__(message)
        self.status_code = status_code


class BlobIoError(ServiceError):
    """Filesystem failure other than not-found. Never aborts a cascade."""

    def __init__(self, locator: str, message: str):
        super().__init__(message)
        self.locator = locator
