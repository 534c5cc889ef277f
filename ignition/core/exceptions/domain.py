from ignition.core.exceptions.base import AppException


class ResourceNotFoundError(AppException):
    """Raised when a workspace, board or card id is not in the working set."""

    def __init__(self, resource: str = "Resource", identifier: str = ""):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        self.resource = resource
        self.identifier = identifier
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class StoreError(AppException):
    """Raised when the key-value store cannot be reached or written."""

    def __init__(self, message: str = "Key-value store operation failed"):
        super().__init__(message)
