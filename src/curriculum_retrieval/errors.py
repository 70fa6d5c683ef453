"""Exceptions raised by curriculum-retrieval."""


class RetrievalError(Exception):
    """Base exception for retrieval errors.

    ``kind`` and ``status_code`` let transports translate the error without
    inspecting its type (e.g. into an HTTP-style status).
    """
    kind = "error"
    status_code = 500

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": str(self), "status": self.status_code}


class ValidationError(RetrievalError, ValueError):
    """Raised when a request or record is malformed."""
    kind = "validation"
    status_code = 400


class NotFoundError(RetrievalError):
    """Raised when a well-formed request names a resource that does not exist."""
    kind = "not_found"
    status_code = 404


class StoreFailureError(RetrievalError):
    """Raised when the corpus store is unreachable or a query fails."""
    kind = "store_failure"
    status_code = 500
