from __future__ import annotations


class PortalError(Exception):
    """Typed failure surfaced to the caller as ``{"error": message}``."""

    status_code = 400
    default_message = "request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(PortalError):
    status_code = 400
    default_message = "invalid input"


class Unauthorized(PortalError):
    status_code = 401
    default_message = "authentication required"


class Forbidden(PortalError):
    status_code = 403
    default_message = "forbidden"


class NotFound(PortalError):
    status_code = 404
    default_message = "not found"


class InvalidPatient(NotFound):
    default_message = "patient id does not exist"


class InvalidAdmin(NotFound):
    default_message = "admin id does not exist"


class Conflict(PortalError):
    status_code = 409
    default_message = "conflict"


class DuplicatePending(Conflict):
    default_message = "invitation already pending"


class AlreadyMember(Conflict):
    default_message = "patient already in household"


class NotPending(Conflict):
    default_message = "invitation has already been processed"
