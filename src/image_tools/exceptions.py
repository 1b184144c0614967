"""
Custom exceptions for the image tools.

Exception hierarchy:
- ImageToolsError (base)
  - InvalidParameterError (also inherits from ValueError)
  - ImageLoadError (also inherits from ValueError)
  - UnknownToolError
"""

from typing import Any


class ImageToolsError(Exception):
    """
    Base exception for all image tool errors.

    Catch this at the protocol boundary; more specific exceptions inherit from it.
    """
    pass


class InvalidParameterError(ImageToolsError, ValueError):
    """
    Raised when a caller-supplied argument is outside its valid range.

    This occurs when:
    - A detection threshold is negative or out of [0, 1]
    - A radius range is empty or starts below 1
    - A region or point lies outside the image
    """

    def __init__(self, message: str, parameter: str = None, value: Any = None):
        """
        Initialize InvalidParameterError.

        Args:
            message: Human-readable error message
            parameter: Name of the offending argument
            value: The rejected value
        """
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.value = value

    def __str__(self) -> str:
        if self.parameter is None:
            return self.message
        return f"Invalid {self.parameter}={self.value!r}: {self.message}"


class ImageLoadError(ImageToolsError, ValueError):
    """Raised when an image file exists but cannot be decoded."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"Failed to load image '{self.path}': {self.message}"
        return self.message


class UnknownToolError(ImageToolsError):
    """Raised when a tool name has no registered handler."""

    def __init__(self, tool_name: str):
        super().__init__(tool_name)
        self.tool_name = tool_name
        self.message = f"Unknown tool: {tool_name}"

    def __str__(self) -> str:
        return self.message


__all__ = [
    'ImageToolsError',
    'InvalidParameterError',
    'ImageLoadError',
    'UnknownToolError',
]
