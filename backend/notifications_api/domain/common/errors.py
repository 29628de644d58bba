"""Domain error types."""


class DomainError(Exception):
    """Base domain error."""
    pass


class NotFoundError(DomainError):
    """Resource not found."""
    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with id {identifier} not found")


class ValidationError(DomainError):
    """Invalid or missing input, raised before the store is touched."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MappingError(DomainError):
    """A row returned by the store does not have the expected shape."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StoreError(DomainError):
    """Connectivity, constraint or transaction failure. The transaction was rolled back."""
    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        self.message = f"Store failure during {operation}"
        super().__init__(f"{self.message}: {cause.__class__.__name__}")
