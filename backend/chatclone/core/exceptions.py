"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class ChatCloneError(Exception):
    """Base exception for chatclone."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ChatCloneError):
    """Resource not found."""

    pass


class ValidationError(ChatCloneError):
    """Validation error."""

    pass


class LLMError(ChatCloneError):
    """LLM-related error."""

    pass


class AuthenticationError(ChatCloneError):
    """Authentication failed."""

    pass


class InfrastructureError(ChatCloneError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass
