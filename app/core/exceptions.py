# auth_code_api/app/core/exceptions.py


class AuthCodeError(Exception):
    """Base class for every failure of the authorization-code lifecycle."""
    default_message = "Authorization code operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(AuthCodeError):
    """A required field is missing or out of range."""
    default_message = "Incomplete parameters"


class CodeNotFoundError(AuthCodeError):
    default_message = "Authorization code does not exist"

    def __init__(self, code: str | None = None, message: str | None = None):
        self.code = code
        super().__init__(message)


class CodeAlreadyUsedError(AuthCodeError):
    default_message = "Authorization code has already been used"

    def __init__(self, code: str | None = None, message: str | None = None):
        self.code = code
        super().__init__(message)


class StorageFailureError(AuthCodeError):
    """Underlying database error (I/O, constraint, connection)."""
    default_message = "Database error"
