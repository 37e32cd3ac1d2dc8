"""
ProjectMap Exception Hierarchy

Errors raised while configuring the scanner. Traversal, classification and
token accounting never raise; they degrade to empty results and log instead.
"""


class ProjectMapError(Exception):
    """Base exception for all projectmap errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ConfigurationError(ProjectMapError):
    """Invalid limit or environment value."""

    pass


class LimiterError(ProjectMapError):
    """Invalid concurrency limiter setup."""

    pass
