# backend/utils/errors.py
"""
Domain errors raised by the service layer.

Every error carries a stable ``code`` (the class name unless overridden), a
human readable ``message`` and the HTTP status the API layer answers with.
``main.py`` renders them as ``{"detail": message, "code": code}``.
"""


class CanteenError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__


# --- 400: bad input ---

class ValidationError(CanteenError):
    status_code = 400
    default_message = "Invalid request"


class MissingField(ValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Please provide all required fields: {field} is missing")


class MissingCredential(ValidationError):
    default_message = "Please provide email/college ID and password"


class EmptyOrder(ValidationError):
    default_message = "Order must contain at least one item"


class InvalidItem(ValidationError):
    default_message = "Invalid order item"


# --- 400: duplicates ---

class ConflictError(CanteenError):
    status_code = 400
    default_message = "Conflict"


class DuplicateUser(ConflictError):
    default_message = "User already exists"


# --- 401 ---

class AuthenticationError(CanteenError):
    status_code = 401
    default_message = "Could not validate credentials"


class InvalidCredentials(AuthenticationError):
    default_message = "Invalid credentials"


class InvalidToken(AuthenticationError):
    default_message = "Invalid token"


class TokenExpired(AuthenticationError):
    default_message = "Token expired"


# --- 403 ---

class AuthorizationError(CanteenError):
    status_code = 403
    default_message = "Forbidden"


class Forbidden(AuthorizationError):
    pass


# --- 404 ---

class NotFoundError(CanteenError):
    status_code = 404
    default_message = "Not found"


class UserNotFound(NotFoundError):
    default_message = "User not found"


class OrderNotFound(NotFoundError):
    default_message = "Order not found"


class FoodNotFound(NotFoundError):
    default_message = "Food item not found"


# --- lifecycle ---

class StateError(CanteenError):
    status_code = 400
    default_message = "Invalid state"


class InvalidTransition(StateError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from {current} to {requested}")


# --- 500 ---

class InternalError(CanteenError):
    pass
