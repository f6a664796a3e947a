import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception.

    ``error_code`` names the error kind. Callers and the HTTP layer branch on
    it (or on the class), never on ``message``.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: object = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ZoneNotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "ZONE_NOT_FOUND"

    def __init__(self, zone_id: str | None) -> None:
        if zone_id:
            super().__init__(f"Zone {zone_id} not found", details={"zone_id": zone_id})
        else:
            super().__init__("Zone not found: no zone assigned")


class QubeNotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "QUBE_NOT_FOUND"

    def __init__(self, qube_id: str) -> None:
        super().__init__(f"Qube {qube_id} not found", details={"qube_id": qube_id})


class InvalidInputError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_INPUT"

    def __init__(self, field: str, reason: str = "is required") -> None:
        super().__init__(f"{field} {reason}", details={"field": field})


class InvalidZoneTypeError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_ZONE_TYPE"

    def __init__(self, zone_type: str) -> None:
        super().__init__(f"Invalid zone type '{zone_type}'", details={"type": zone_type})


class InvalidQubeTypeError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_QUBE_TYPE"

    def __init__(self, qube_type: str) -> None:
        super().__init__(f"Invalid qube type '{qube_type}'", details={"type": qube_type})


class ZoneInUseError(AppException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ZONE_IN_USE"

    def __init__(self, zone_id: str) -> None:
        super().__init__(f"Zone {zone_id} is in use by qubes", details={"zone_id": zone_id})


class QubeNotStoppedError(AppException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "QUBE_NOT_STOPPED"

    def __init__(self, qube_id: str, current_status: str) -> None:
        super().__init__(
            f"Qube {qube_id} must be stopped before this operation",
            details={"qube_id": qube_id, "current_status": current_status},
        )


class ZoneDisconnectedError(AppException):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    error_code = "ZONE_DISCONNECTED"

    def __init__(self, zone_id: str) -> None:
        super().__init__(f"Zone {zone_id} is disconnected", details={"zone_id": zone_id})


class StorageError(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "STORAGE_FAILURE"

    def __init__(self, operation: str) -> None:
        super().__init__(f"Storage failure during {operation}", details={"operation": operation})


def _error_response(
    status_code: int, code: str, message: str, details: object = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            exc.error_code,
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "path": request.url.path,
                "detail": exc.message,
            },
        )
        return _error_response(exc.status_code, exc.error_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Convert errors to plain dicts to ensure JSON serializability
        errors = [
            {
                "loc": list(e.get("loc", [])),
                "msg": e.get("msg", ""),
                "type": e.get("type", ""),
            }
            for e in exc.errors()
        ]
        logger.info(
            "Request validation failed",
            extra={"path": request.url.path, "error_count": len(errors)},
        )
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            errors,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            exc_info=True,
            extra={"path": request.url.path, "exc_type": type(exc).__name__},
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        )
