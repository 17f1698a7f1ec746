"""Error taxonomy shared by the ProPath services.

Domain code raises these; ``libs.common.error_handler`` turns them into
``{"error": <message>, "code": <code>}`` responses at the HTTP boundary.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for errors that map onto a structured error response."""

    status_code: int = 500
    code: str = "service_error"
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, *, details: dict = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class InvalidRequest(ServiceError):
    status_code = 400
    code = "invalid_request"
    default_message = "Invalid request"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Could not validate credentials"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"
    default_message = "You do not have access to this resource"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    code = "conflict"
    default_message = "Conflicting update"


class PersistenceFailure(ServiceError):
    """Store-layer error not otherwise classified."""

    status_code = 500
    code = "persistence_failure"
    default_message = "The request could not be saved. Please try again."
