# logsanitizer/core/exceptions.py

"""Custom exception hierarchy for the log sanitizer.

Address matching itself never fails. These error types cover the layers
around it: pattern loading, engine construction, file handling and input
validation.
"""


class SanitizerError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigurationError(SanitizerError):
    """Raised when pattern loading or settings validation fails."""

    pass


class InitializationError(SanitizerError):
    """Raised when the matcher or auditor cannot be constructed."""

    pass


class PipelineError(SanitizerError):
    """Raised when reading, writing or archiving a file fails."""

    pass


class ValidationError(SanitizerError):
    """Raised when input validation fails (e.g., missing target path)."""

    pass
