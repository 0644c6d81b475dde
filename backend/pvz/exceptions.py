"""
Domain exceptions for the PVZ service.

``UserError`` subclasses are caller-correctable outcomes and are mapped to
4xx responses by the API layer.  ``InternalError`` subclasses are store or
infrastructure failures and are mapped to a generic 5xx response.
"""


class PvzError(Exception):
    """Base exception for all PVZ service errors."""

    message = "pvz service error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UserError(PvzError):
    """Base exception for caller-correctable errors."""


class InternalError(PvzError):
    """Base exception for failures the caller cannot correct."""


# --- Validation ---

class InvalidCity(UserError):
    message = "invalid city"


class InvalidProductType(UserError):
    message = "invalid product type"


class InvalidDateRange(UserError):
    message = "end date cannot be before start date"


class InvalidLimit(UserError):
    message = "limit must be between 1 and 30"


class InvalidPage(UserError):
    message = "page must be greater than zero"


class InvalidRole(UserError):
    message = "invalid user role"


class InvalidPassword(UserError):
    message = "password must be at least 6 characters"


# --- Reception lifecycle ---

class ReceptionAlreadyOpen(UserError):
    message = "pickup point already has a reception in progress"


class NoOpenReception(UserError):
    message = "no open reception"


class NoReceptionFound(UserError):
    message = "no reception"


# --- Pickup points ---

class PickupPointExists(UserError):
    message = "pickup point already exists"


class PickupPointNotFound(UserError):
    message = "pickup point not found"


# --- Accounts ---

class EmailAlreadyRegistered(UserError):
    message = "email already registered"


class InvalidCredentials(UserError):
    message = "invalid email or password"


class UserNotFound(UserError):
    message = "user not found"


class InvalidToken(UserError):
    message = "invalid token"


# --- Store ---

class StoreError(InternalError):
    """Raised when a store operation fails; the driver error is chained."""

    message = "store operation failed"
