from typing import Any


class AppError(Exception):
    """Base class for all application exceptions."""
    pass

class ResourceNotFoundError(AppError):
    """Generic error when a requested resource is not found."""
    def __init__(self, resource_name: str, identifier: Any):
        self.message = f"{resource_name} with id {identifier} was not found."
        super().__init__(self.message)

class ResourceAccessDeniedError(AppError):
    """Raised when a resource exists but belongs to another user."""
    def __init__(self, resource_name: str, identifier: Any):
        self.message = f"You do not have access to {resource_name} with id {identifier}."
        self.resource_name = resource_name
        self.identifier = identifier
        super().__init__(self.message)
