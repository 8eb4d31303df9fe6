class DomainException(Exception):
    """Base for errors a handler turns into a client response."""

    status_code = 400


class ValidationException(DomainException):
    status_code = 400


class NotFoundException(DomainException):
    def __init__(self, resource: str, identifier: str, status_code: int = 404):
        self.resource = resource
        self.identifier = identifier
        self.status_code = status_code
    def __str__(self):
        return f"{self.resource} '{self.identifier}' not found"


class AuthorizationException(DomainException):
    status_code = 403


class InvalidStateException(DomainException):
    status_code = 400


class ConflictException(DomainException):
    status_code = 409
