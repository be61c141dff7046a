from fastapi import HTTPException, status


class GradebookError(HTTPException):
    """Base class for errors raised by the service layer.

    Each subclass carries the HTTP status it maps to, so routers can
    re-raise them the same way they re-raise any HTTPException.
    """
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, headers: dict = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationFailed(GradebookError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(GradebookError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Unauthorized(GradebookError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(GradebookError):
    status_code = status.HTTP_404_NOT_FOUND


class DeadlinePassed(GradebookError):
    status_code = status.HTTP_409_CONFLICT


class QuotaExceeded(GradebookError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
