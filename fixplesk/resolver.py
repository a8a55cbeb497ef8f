"""
Domain resolver: maps a domain name to its system account and document root.

One lookup joins `domains`, `hosting` and `sys_users` in the Plesk `psa`
database. The domain name is always sent as a bound parameter.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import Any, Callable, Optional, Type

import pymysql
from pymysql.constants import CR

from fixplesk.config import Settings, get_settings
from fixplesk.domain.models import DomainRecord
from fixplesk.errors import StoreConnectionError, StoreQueryError
from fixplesk.infrastructure.db_factory import get_connection
from fixplesk.utils.logging import get_logger

log = get_logger(__name__)

LOOKUP_SQL = (
    "SELECT s.login, h.www_root "
    "FROM domains d, hosting h, sys_users s "
    "WHERE s.id = h.sys_user_id AND h.dom_id = d.id AND d.name = %s"
)

_CONNECTION_ERRORS = (pymysql.err.OperationalError, pymysql.err.InterfaceError)

# Client-side codes PyMySQL raises when the server cannot be reached or drops.
_LINK_ERROR_CODES = frozenset(
    {CR.CR_CONNECTION_ERROR, CR.CR_CONN_HOST_ERROR, CR.CR_SERVER_GONE_ERROR, CR.CR_SERVER_LOST}
)


def _is_link_error(exc: pymysql.MySQLError) -> bool:
    if isinstance(exc, pymysql.err.InterfaceError):
        return True
    code = exc.args[0] if exc.args else None
    return isinstance(exc, pymysql.err.OperationalError) and code in _LINK_ERROR_CODES


def _clean(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("utf-8", errors="replace")
    return str(value).strip()


class DomainResolver:
    """
    Resolve domains against the `psa` database over a single lazy connection.

    Use as a context manager so the connection is released when the run ends:

        with DomainResolver() as resolver:
            record = resolver.resolve("example.com")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        connect: Optional[Callable[[Settings], Any]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._connect = connect or get_connection
        self._conn: Any = None

    def _connection(self) -> Any:
        if self._conn is None:
            try:
                self._conn = self._connect(self._settings)
            except _CONNECTION_ERRORS as exc:
                raise StoreConnectionError(f"Could not connect to the Plesk database: {exc}") from exc
            except OSError as exc:
                raise StoreConnectionError(f"Could not read Plesk database credentials: {exc}") from exc
        return self._conn

    def resolve(self, domain: str) -> Optional[DomainRecord]:
        """
        Look up the system user and web root of a domain.

        Returns None when the domain is unknown or the row is incomplete.

        Raises
        ------
        StoreConnectionError
            If the database is unreachable or the connection drops.
        StoreQueryError
            If the query itself fails.
        """
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                cur.execute(LOOKUP_SQL, (domain,))
                row = cur.fetchone()
        except pymysql.MySQLError as exc:
            if _is_link_error(exc):
                raise StoreConnectionError(f"Lost connection to the Plesk database: {exc}") from exc
            raise StoreQueryError(f"Lookup for {domain} failed: {exc}") from exc

        if not row:
            log.debug("No psa row for domain", extra={"domain": domain})
            return None

        system_user = _clean(row[0])
        www_root = _clean(row[1]) if len(row) > 1 else ""
        if not system_user or not www_root:
            log.debug("Incomplete psa row for domain", extra={"domain": domain})
            return None

        record = DomainRecord(domain=domain, system_user=system_user, document_root=Path(www_root))
        log.info(
            f"Resolved {domain}",
            extra={"domain": domain, "system_user": system_user, "document_root": www_root},
        )
        return record

    def close(self) -> None:
        """Close the connection if one was opened. Safe to call repeatedly."""
        if self._conn is None:
            return
        try:
            self._conn.close()
        except pymysql.MySQLError as exc:
            log.debug("Ignoring error while closing connection", extra={"error": str(exc)})
        finally:
            self._conn = None

    def __enter__(self) -> "DomainResolver":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


__all__ = ["DomainResolver", "LOOKUP_SQL"]
