"""Custom exception hierarchy for pyanalytics."""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base exception for all pyanalytics errors."""


class AnalyticsConfigError(AnalyticsError):
    """Invalid or missing configuration."""


class PayloadValidationError(AnalyticsError, ValueError):
    """A payload builder was given a missing or empty required field.

    Raised synchronously while building, before anything is handed to a
    dispatcher.  This is a caller error and must not be retried.
    """


class PayloadBuilderStateError(AnalyticsError):
    """A builder was used again after :meth:`build` returned."""


class SettingsStoreError(AnalyticsError):
    """Persisted settings could not be read or written."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
