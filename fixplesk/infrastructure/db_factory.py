"""
Database connection factory for the Plesk `psa` database.

Plesk keeps the MySQL `admin` password in a root-only shadow file; connection
parameters are composed from that file and the settings. Includes retry logic
for transient connection failures using tenacity.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import pymysql
from pymysql.connections import Connection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fixplesk.config import Settings, get_settings
from fixplesk.utils.logging import get_logger

log = get_logger(__name__)


def read_admin_password(path: Path | str) -> str:
    """
    Read the MySQL admin password from the Plesk shadow file.

    Only the trailing newline is removed; the rest of the file is the password.
    """
    return Path(path).read_text(encoding="utf-8").rstrip("\r\n")


def build_connect_kwargs(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Compose PyMySQL connection keyword arguments from settings."""
    settings = settings or get_settings()
    kwargs: Dict[str, Any] = {
        "host": settings.db_host,
        "port": settings.db_port,
        "user": settings.db_user,
        "password": read_admin_password(settings.psa_shadow_file),
        "database": settings.db_name,
        "charset": "utf8mb4",
        "connect_timeout": settings.db_connect_timeout,
        "autocommit": True,
    }
    if settings.db_socket:
        kwargs["unix_socket"] = settings.db_socket
    return kwargs


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((pymysql.err.OperationalError, pymysql.err.InterfaceError)),
    reraise=True,
)
def get_connection(settings: Optional[Settings] = None) -> Connection:
    """
    Open a dedicated connection to the `psa` database with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    pymysql.err.OperationalError
        If connection fails after all retry attempts.
    """
    kwargs = build_connect_kwargs(settings)
    log.debug(
        "Connecting to Plesk database",
        extra={"db_host": kwargs["host"], "db_name": kwargs["database"]},
    )
    return pymysql.connect(**kwargs)


__all__ = [
    "build_connect_kwargs",
    "get_connection",
    "read_admin_password",
]
