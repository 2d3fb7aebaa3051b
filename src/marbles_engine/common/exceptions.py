"""Marbles-Engine exception hierarchy."""


class MarblesError(Exception):
    """Base exception for all Marbles errors."""

    def __init__(self, message: str = "", code: str = "MARBLES_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(MarblesError):
    """Raised when a user or marble cannot be found on the ledger."""

    def __init__(self, message: str = "Entity not found"):
        super().__init__(message, code="NOT_FOUND")


class AlreadyExistsError(MarblesError):
    """Raised when creating an entity whose id is already taken."""

    def __init__(self, message: str = "Entity already exists"):
        super().__init__(message, code="ALREADY_EXISTS")


class ValidationError(MarblesError):
    """Raised when an invocation argument is missing, empty, oversized or malformed.

    ``index`` identifies the offending argument position when there is one.
    """

    def __init__(self, message: str = "Invalid argument", index: int | None = None):
        self.index = index
        super().__init__(message, code="INVALID_ARGUMENT")


class AuthorizationError(MarblesError):
    """Raised when the acting user or company may not perform the operation."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="UNAUTHORIZED")


class StateError(MarblesError):
    """Raised when a marble is not in the workflow state the operation requires."""

    def __init__(self, message: str = "Invalid workflow state"):
        super().__init__(message, code="INVALID_STATE")


class StoreError(MarblesError):
    """Raised when the ledger store fails to read or write."""

    def __init__(self, message: str = "Ledger store failure"):
        super().__init__(message, code="STORE_ERROR")


class UnknownFunctionError(MarblesError):
    """Raised when the dispatcher receives a function name it does not route."""

    def __init__(self, message: str = "Unknown function"):
        super().__init__(message, code="UNKNOWN_FUNCTION")
