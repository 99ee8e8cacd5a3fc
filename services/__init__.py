from .errors import (
    DirectoryError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
    ConflictError,
    RejectedError,
)
