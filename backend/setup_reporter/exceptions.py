# backend/setup_reporter/exceptions.py
"""
Custom exceptions for the setup reporter.

Centralized location for all custom exception classes to avoid
duplicating exception definitions across modules.
"""

# Each exception type marks a distinct error domain with its own handling:
# row-level parse failures never escalate, connection and transport failures
# escalate to the retry boundary, config failures are reported to the operator.


class ReporterError(Exception):
    """Base exception for all setup-reporter errors."""

    pass


class ParseError(ReporterError):
    """Raised when a database row cannot be turned into a setup event."""

    pass


class ReporterConnectionError(ReporterError):
    """Raised when (re)connecting to the database or mail server fails."""

    pass


class TransportError(ReporterError):
    """Raised when fetching events or sending the report fails."""

    pass


class ConfigError(ReporterError):
    """Raised when settings cannot be loaded or contain invalid values."""

    pass


class RetryCancelledError(ReporterError):
    """Raised when shutdown interrupts the wait between retry attempts."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(
            f"Retry cancelled by shutdown after {attempts} attempt(s): {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error
