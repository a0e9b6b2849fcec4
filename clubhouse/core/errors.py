"""
Error kinds raised by the data service and reported by the stores
"""


class StoreError(Exception):
    """Base class for failures surfaced to users as a result value"""

    error_code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """A required field is missing or malformed"""

    error_code = "validation_error"


class ConflictError(StoreError):
    """The requested slot is already taken"""

    error_code = "conflict"


class RemoteError(StoreError):
    """The data service call failed; the backend message is passed through"""

    error_code = "remote_error"


class NotFoundError(StoreError):
    """Access code or record absent"""

    error_code = "not_found"
