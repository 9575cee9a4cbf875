"""
Domain errors raised by the services layer.

Routers let these propagate; ``main.py`` registers a handler that renders
``{"detail": message}`` with the error's status code.
"""
from typing import Optional
from fastapi import status


class SocialNetworkError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(SocialNetworkError):
    """A referenced entity is missing. Rendered as 400 unless overridden."""


class InvalidOperationError(SocialNetworkError):
    """The current state does not allow the requested transition."""


class ConflictError(SocialNetworkError):
    """The entity being created already exists."""


class InvalidArgumentError(SocialNetworkError):
    pass


class AccessDeniedError(SocialNetworkError):
    status_code = status.HTTP_403_FORBIDDEN
