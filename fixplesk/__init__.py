"""
fixplesk - restore ownership and permissions of Plesk domain web roots.

For every domain given on the command line the owning system user and the
document root are looked up in the Plesk `psa` database, then the tree is
reset to the Plesk defaults:

- files and directories owned by <login>:psacln
- the document root owned by <login>:psaserv
- files 644, directories 755, document root 750 (overridable)
"""

from __future__ import annotations

__version__ = "1.1.0"
__license__ = "MIT"

# Public API exports
from fixplesk.config import Settings, get_settings
from fixplesk.domain.models import DomainRecord, EntryFailure, PermissionPolicy, RestoreReport
from fixplesk.errors import (
    FixPleskError,
    PreconditionError,
    RestoreError,
    StoreConnectionError,
    StoreQueryError,
)
from fixplesk.resolver import DomainResolver
from fixplesk.restorer import PermissionRestorer, restore
from fixplesk.runner import RunResult, run_domains
from fixplesk.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Models
    "DomainRecord",
    "EntryFailure",
    "PermissionPolicy",
    "RestoreReport",
    # Errors
    "FixPleskError",
    "PreconditionError",
    "RestoreError",
    "StoreConnectionError",
    "StoreQueryError",
    # Operations
    "DomainResolver",
    "PermissionRestorer",
    "restore",
    "RunResult",
    "run_domains",
    # Logging
    "configure_logging",
    "get_logger",
]
