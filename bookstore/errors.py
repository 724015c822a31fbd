"""Error types surfaced by the API layer."""
from typing import Dict, Any


DEFAULT_ERROR_MESSAGE = "An error occurred"


class ApiError(Exception):
    """Normalized transport or HTTP failure: a message plus a status code."""

    def __init__(self, message: str = DEFAULT_ERROR_MESSAGE, status: int = 500):
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "status": self.status}

    def __repr__(self):
        return f"ApiError(message={self.message!r}, status={self.status})"
