"""
Domain package for fixplesk.

Exports the core models shared by the resolver, the restorer and the CLI.
Keep this package focused on data definitions and validation concerns.
"""

from fixplesk.domain.models import DomainRecord, EntryFailure, PermissionPolicy, RestoreReport

__all__ = [
    "DomainRecord",
    "EntryFailure",
    "PermissionPolicy",
    "RestoreReport",
]
