"""Base exception shared by the templating and rendering contexts."""

from typing import Optional


class CVRenderError(Exception):
    """
    Base class for every typed failure raised to callers.

    Attributes:
        message: Internal description, suitable for logs
        user_message: Caller-facing description. Never contains compiler or
            template-engine internals.
    """

    default_user_message = "The resume could not be generated."

    def __init__(self, message: str, user_message: Optional[str] = None):
        self.message = message
        self.user_message = user_message or self.default_user_message
        super().__init__(message)
