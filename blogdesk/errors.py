"""Error hierarchy for the blog data layer.

Every failure that leaves a service or the RPC router is a BlogError carrying
a stable code and an HTTP status. Internal errors never carry storage details
in their message; those go to the server log.
"""
from typing import Optional


class BlogError(Exception):
    """Base exception for all blogdesk errors."""

    code = "INTERNAL_SERVER_ERROR"
    http_status = 500

    def __init__(self, message: str, code: Optional[str] = None, http_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the JSON error envelope returned by the transport."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "httpStatus": self.http_status,
            }
        }


class ValidationError(BlogError):
    """Input failed a structural constraint; raised before storage is touched."""
    code = "BAD_REQUEST"
    http_status = 400


class NotFound(BlogError):
    code = "NOT_FOUND"
    http_status = 404


class Conflict(BlogError):
    """A unique constraint (slug or name) would be violated."""
    code = "CONFLICT"
    http_status = 409


class InternalError(BlogError):
    code = "INTERNAL_SERVER_ERROR"
    http_status = 500


class MethodNotSupported(BlogError):
    """Query procedure called as a mutation, or the other way around."""
    code = "METHOD_NOT_SUPPORTED"
    http_status = 405


def from_pydantic(exc) -> ValidationError:
    """Turn a pydantic ValidationError into a ValidationError with a readable message."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "Invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return ValidationError("; ".join(parts) or "Invalid input")
