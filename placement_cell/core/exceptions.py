"""
Domain errors.

Services raise these; the API layer turns them into JSON responses with a
machine-checkable ``kind`` and a human-readable ``detail``.
"""


class PlacementError(Exception):
    """Base class for all errors reported by the placement services."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "detail": self.message}


class ValidationError(PlacementError):
    """Malformed input, e.g. unacknowledged eligibility or unknown status."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(PlacementError):
    kind = "not_found"
    status_code = 404


class ConflictError(PlacementError):
    """Duplicate application or a concurrent update lost the race."""

    kind = "conflict"
    status_code = 409


class InvalidTransitionError(ConflictError):
    """Status change not allowed from the application's current state."""

    kind = "invalid_transition"


class AuthorizationError(PlacementError):
    kind = "forbidden"
    status_code = 403
