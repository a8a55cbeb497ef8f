"""
Exception hierarchy for fixplesk.

Fatal conditions (`PreconditionError`, `StoreConnectionError`, `StoreQueryError`)
abort the run before or between domains. `RestoreError` only skips the domain
it was raised for.
"""

from __future__ import annotations


class FixPleskError(Exception):
    """Base class for all fixplesk errors."""


class PreconditionError(FixPleskError):
    """Start-up requirement not met (credentials, privileges, configuration)."""


class StoreConnectionError(FixPleskError, ConnectionError):
    """The Plesk database could not be reached."""


class StoreQueryError(FixPleskError):
    """The lookup query failed after a connection was established."""


class RestoreError(FixPleskError):
    """A restore pass could not start for one domain."""


__all__ = [
    "FixPleskError",
    "PreconditionError",
    "RestoreError",
    "StoreConnectionError",
    "StoreQueryError",
]
