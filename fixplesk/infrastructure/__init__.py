"""
Infrastructure package for fixplesk.

Centralizes Plesk database connectivity. Keep this layer focused on I/O and
resource management, decoupled from the resolver and restorer logic.
"""

from fixplesk.infrastructure.db_factory import (
    build_connect_kwargs,
    get_connection,
    read_admin_password,
)

__all__ = [
    "build_connect_kwargs",
    "get_connection",
    "read_admin_password",
]
