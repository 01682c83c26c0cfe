from typing import List, Optional


class WashWishError(Exception):
    """Base class for every error raised by the order core."""


class ValidationError(WashWishError):
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details or []

    def __str__(self):
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class NotFoundError(WashWishError):
    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} {identifier} not found")
        self.resource = resource
        self.identifier = identifier


class InvalidTransitionError(WashWishError):
    def __init__(self, current, requested):
        # Accept enums or raw strings so the message is readable either way
        self.current = getattr(current, "value", current)
        self.requested = getattr(requested, "value", requested)
        super().__init__(f"Cannot move order from '{self.current}' to '{self.requested}'")


class ConflictError(WashWishError):
    """The record changed between read and write."""


class StorageFault(WashWishError):
    """The backing store failed. The original exception is chained as __cause__."""


class PaymentVerificationError(WashWishError):
    pass
