"""Base exception classes for envyml.

Every envyml exception carries structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context (file path, line number, command, ...)
"""

from typing import Any, Dict, Optional


class EnvymlError(Exception):
    """Base exception for all envyml errors.

    Attributes:
        code: Machine-readable error code (e.g., "FORMAT_ERROR")
        message: Human-readable error message
        details: Optional additional context for debugging
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class FileAccessError(EnvymlError):
    """Raised when a configuration file is missing, unreadable or a directory.

    Aborts the load for that path.
    """

    def __init__(self, path: str, reason: str = "not readable"):
        self.path = path
        self.reason = reason
        super().__init__(
            code="FILE_ACCESS",
            message=f'Unable to read the "{path}" file ({reason})',
            details={"path": path, "reason": reason},
        )


class FormatError(EnvymlError):
    """Raised for any grammar violation while parsing a file.

    Carries the file path and the 1-based line number where the problem
    was detected, plus a short excerpt of the offending input.
    """

    def __init__(
        self,
        message: str,
        path: str = ".env",
        lineno: int = 1,
        context: str = "",
    ):
        self.path = path
        self.lineno = lineno
        self.context = context
        details: Dict[str, Any] = {"path": path, "line": lineno}
        if context:
            details["context"] = context
        super().__init__(
            code="FORMAT_ERROR",
            message=f'{message} in "{path}" at line {lineno}.',
            details=details,
        )


class CommandExecutionError(EnvymlError):
    """Raised when command substitution fails or cannot run at all."""

    def __init__(
        self,
        message: str,
        code: str = "COMMAND_FAILED",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code=code, message=message, details=details)


class CacheError(EnvymlError):
    """Raised when the persistent cache cannot be read or written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CACHE_ERROR", message=message, details=details)


class ConfigurationError(EnvymlError):
    """Raised when envyml's own settings are invalid or incomplete."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONFIGURATION_ERROR", message=message, details=details)
