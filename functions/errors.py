class ContactError(Exception):
    """Base for faults that end a request with a known status code."""

    status_code = 500
    default_error = "Internal Server Error"

    def __init__(self, error=None, message=None):
        self.error = error or self.default_error
        self.message = message
        super().__init__(self.error if message is None else f"{self.error}: {message}")


class ValidationError(ContactError):
    status_code = 400
    default_error = "Invalid request"


class NotFoundError(ContactError):
    status_code = 404
    default_error = "Message not found"


class RouteNotFoundError(ContactError):
    status_code = 404
    default_error = "Not Found"


class PersistenceError(ContactError):
    status_code = 500
    default_error = "Database error"
