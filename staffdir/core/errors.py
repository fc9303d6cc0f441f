"""
Error taxonomy surfaced by record stores.
"""


class StoreError(Exception):
    """Base class for failures reported by a record store."""


class ValidationError(StoreError):
    """A required employee field is empty or malformed."""


class DuplicateRecord(StoreError):
    """An employee with the same name, designation and department already exists."""


class BackendUnavailable(StoreError):
    """Transport, authentication or missing-schema failure talking to the backend."""


class PermissionDenied(StoreError):
    """The backend rejected the request through its access-control policies."""
