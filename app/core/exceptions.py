"""
Error taxonomy for registration and team operations.

Services raise these; ``app.main`` renders them as ``{"detail", "error"}``
responses with the status code carried by the class.
"""


class RegistrationError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RegistrationError):
    status_code = 404
    code = "not_found"


class ForbiddenError(RegistrationError):
    status_code = 403
    code = "forbidden"


class ConflictError(RegistrationError):
    status_code = 409
    code = "conflict"


class InvalidInputError(RegistrationError):
    status_code = 400
    code = "invalid_input"


class CapacityExceededError(RegistrationError):
    status_code = 409
    code = "capacity_exceeded"


class LockUnavailableError(RegistrationError):
    status_code = 503
    code = "busy"
