"""Exceptions shared across the toolpath pipeline."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when geometric or structural parameters are invalid.

    Covers non-divisible side lengths, wrong-length axis or shift
    vectors, unknown pattern names, malformed coordinate tables and
    build files that fail schema validation.  Always raised before any
    output is produced.
    """

    pass


class GCodeParseError(ValueError):
    """Raised by the strict G-code parser on malformed command content."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
