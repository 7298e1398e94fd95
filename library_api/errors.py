"""Domain errors raised by the services layer.

Controllers catch :class:`LibraryError` and turn it into a JSON failure
payload using ``status_code`` and ``kind``; anything else that escapes a
request is logged and answered with a generic 500.
"""


class LibraryError(ValueError):
    status_code = 400
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(LibraryError):
    status_code = 400
    kind = "validation"


class NotFoundError(LibraryError):
    status_code = 404
    kind = "not_found"


class ConflictError(LibraryError):
    status_code = 409
    kind = "conflict"


class TransactionFailure(LibraryError):
    """The atomic unit could not commit; callers may retry."""

    status_code = 503
    kind = "transaction_failure"
