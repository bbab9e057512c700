"""Tagged failures raised by the credit engine.

Every error carries a ``kind`` tag and the HTTP status the request layer
answers with. None of them should crash the process.
"""
from decimal import Decimal


class SidebetsError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(SidebetsError):
    kind = "not_found"
    status_code = 404


class Forbidden(SidebetsError):
    kind = "forbidden"
    status_code = 403


class InvalidState(SidebetsError):
    kind = "invalid_state"
    status_code = 400


class ValidationError(SidebetsError):
    kind = "validation_error"
    status_code = 422


class Conflict(SidebetsError):
    kind = "conflict"
    status_code = 409


class NoCreditsInGroup(SidebetsError):
    kind = "no_credits_in_group"
    status_code = 400

    def __init__(self, message: str = "You don't have credits in this group"):
        super().__init__(message)


class InsufficientCredits(SidebetsError):
    kind = "insufficient_credits"
    status_code = 400

    def __init__(self, available: Decimal, required: Decimal):
        self.available = available
        self.required = required
        self.shortfall = required - available
        super().__init__(
            f"Insufficient credits. Available: {available:.2f}, "
            f"Required: {required:.2f}, Short by: {self.shortfall:.2f}"
        )
