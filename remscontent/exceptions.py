"""Exceptions raised while planning and applying REMS content."""

from typing import Iterable


class SystemException(Exception):
    """Exception raised for internal errors that are not caused by the configuration."""

    def __init__(self, message: str) -> None:
        """Initialize exception."""
        self.message = message
        super().__init__(message)


class UserException(Exception):
    """Exception raised for errors in the configuration or the requested REMS content."""

    def __init__(self, message: str) -> None:
        """Initialize exception."""
        self.message = message
        super().__init__(message)


class NotFoundUserException(UserException):
    """Exception raised when the requested REMS object does not exist."""


class UserErrors(Exception):
    """Exception raised for multiple user errors."""

    def __init__(self, messages: Iterable[str]) -> None:
        """
        Initialize the exception.

        Args:
            messages: An iterable of error messages.
        """
        self.messages: list[str] = list(messages)
        super().__init__("; ".join(self.messages))

    def __str__(self) -> str:
        """Return all messages joined by newlines."""

        return "\n".join(self.messages)


class ProviderError(Exception):
    """A failed provider operation, reported as a summary line and a detail message."""

    def __init__(self, summary: str, detail: str) -> None:
        """Initialize exception."""
        self.summary = summary
        self.detail = detail
        super().__init__(f"{summary}: {detail}")


class FunctionError(UserException):
    """Exception raised when a provider function is called with invalid arguments."""

    def __init__(self, message: str, parameter: str | None = None) -> None:
        """Initialize exception."""
        self.parameter = parameter
        super().__init__(message)
