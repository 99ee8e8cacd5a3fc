"""Error taxonomy shared by the venue, image and report services.

Routes never build error responses for these by hand; ``app.py`` registers a
single handler that renders any :class:`DirectoryError` as JSON.
"""


class DirectoryError(Exception):
    """Base class for expected, client-visible failures."""

    status_code = 400
    message = "Bad request"

    def __init__(self, message=None, fields=None, status_code=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.fields = list(fields or [])

    def to_dict(self):
        body = {"error": self.message}
        if self.fields:
            body["fields"] = self.fields
        return body


class ValidationError(DirectoryError):
    """Malformed or missing required input; ``fields`` names what failed."""

    status_code = 400
    message = "Invalid input"


class NotFoundError(DirectoryError):
    status_code = 404
    message = "Not found"


class AuthorizationError(DirectoryError):
    """Authenticated but not permitted."""

    status_code = 403
    message = "Access denied"


class ConflictError(DirectoryError):
    status_code = 409
    message = "Conflict"


class RejectedError(DirectoryError):
    """Uploaded image failed the type or size constraints."""

    status_code = 400
    message = "File rejected"
