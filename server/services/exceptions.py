"""
Typed failures raised by the rules engine.

Each carries the HTTP status the transport layer answers with; the core
itself never retries or recovers from them.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class Forbidden(DomainError):
    status_code = 403


class ValidationError(DomainError):
    status_code = 400


class Conflict(DomainError):
    status_code = 400


class InvalidState(DomainError):
    status_code = 400


class CapacityExceeded(DomainError):
    status_code = 400
