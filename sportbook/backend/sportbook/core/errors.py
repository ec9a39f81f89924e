"""Error kinds raised by the booking engine.

Every service operation fails with exactly one of these. The HTTP layer maps
``status_code`` and ``code`` onto the response, the message is shown as-is.
"""


class ServiceError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(ServiceError):
    status_code = 400
    code = "BAD_REQUEST"


class InvalidIntervalError(BadRequestError):
    code = "INVALID_INTERVAL"


class UnauthorizedError(ServiceError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ServiceError):
    status_code = 409
    code = "CONFLICT"
