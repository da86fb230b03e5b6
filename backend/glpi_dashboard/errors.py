"""Exceptions raised by the dashboard services and translated by the API."""


class DashboardError(Exception):
    """Base class for dashboard errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Raised when a user supplied date range cannot be parsed."""

    status_code = 422


class FetchError(DashboardError):
    """Raised when the ticket store could not serve a read."""

    status_code = 502
