"""
Domain errors for the stats engine.

Each error carries the HTTP status it maps to; ``main.py`` registers one
exception handler for the base class.
"""

from __future__ import annotations


class StudyStatsError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StudyStatsError):
    """Referenced user / record does not exist."""

    status_code = 404


class UnauthorizedError(StudyStatsError):
    """Actor is missing or does not own the record."""

    status_code = 401


class ValidationFailure(StudyStatsError):
    """Malformed input; raised before any state is touched."""

    status_code = 400


class ConflictError(StudyStatsError):
    """A concurrent write won the compare-and-swap. Retry the whole event."""

    status_code = 409
