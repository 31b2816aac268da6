# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Application error taxonomy.

Services raise these instead of ``HTTPException`` so that they stay usable
outside a request.  ``main.py`` turns every ``AppError`` into the standard
failure envelope  {"success": false, "message": ..., "errors": ...}.
"""

from typing import List, Optional

from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        errors: Optional[List[str]] = None,
    ):
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input.  ``errors`` lists one message per field."""

    message = "Validation failed"


class ConflictError(AppError):
    """Duplicate value for a unique key."""

    message = "Resource already exists"


class AuthenticationError(AppError):
    """Missing, invalid or expired credential (401, or 403 on /auth/refresh)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication failed"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"


class NotFoundError(AppError):
    # Also used for rows owned by someone else, so ids cannot be probed.
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"
