"""
Permission restorer: resets ownership and mode bits over a document root.

The passes run in a fixed order, mirroring the Plesk defaults:

1. files   -> <login>:psacln
2. dirs    -> <login>:psacln   (document root included)
3. root    -> <login>:psaserv
4. files   -> file_mode
5. dirs    -> dir_mode         (document root included)
6. root    -> root_mode

Ownership goes before modes because chown clears setuid/setgid bits. The
document root is overridden last so no recursive pass undoes it.

Symbolic links are never followed or modified and only regular files and
directories are touched. Per-entry errors are collected in the report and
never abort a pass.
"""

from __future__ import annotations

import grp
import os
import pwd
import stat
from pathlib import Path
from typing import Iterator, List, Set

from fixplesk.domain.models import DomainRecord, EntryFailure, PermissionPolicy, RestoreReport
from fixplesk.errors import RestoreError
from fixplesk.utils.logging import get_logger

log = get_logger(__name__)

FILES_GROUP = "psacln"
DOCROOT_GROUP = "psaserv"

# chmod keeps these on directories when given a numeric mode without them.
_DIR_PRESERVED_BITS = stat.S_ISUID | stat.S_ISGID


def _lookup_uid(login: str) -> int:
    try:
        return pwd.getpwnam(login).pw_uid
    except KeyError:
        raise RestoreError(f"System user '{login}' does not exist") from None


def _lookup_gid(group: str) -> int:
    try:
        return grp.getgrnam(group).gr_gid
    except KeyError:
        raise RestoreError(f"Group '{group}' does not exist") from None


class PermissionRestorer:
    """
    Apply a `PermissionPolicy` to the tree of one `DomainRecord`.

    A restorer instance handles exactly one restore; use `restore()` for the
    one-shot form.
    """

    def __init__(self, record: DomainRecord, policy: PermissionPolicy) -> None:
        self.record = record
        self.policy = policy
        self.root = record.document_root
        self._report = RestoreReport(record=record)
        self._unreadable: Set[Path] = set()

    # Walking

    def _iter_tree(self, want_dirs: bool) -> Iterator[Path]:
        """
        Yield regular files (want_dirs=False) or directories (want_dirs=True)
        below the root, like `find <root> -type f|d`.
        """
        if want_dirs:
            yield self.root
        pending: List[Path] = [self.root]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as exc:
                self._scan_failed(current, exc)
                continue
            subdirs: List[Path] = []
            for entry in entries:
                path = Path(entry.path)
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_file = not is_dir and entry.is_file(follow_symlinks=False)
                except OSError as exc:
                    self._scan_failed(path, exc)
                    continue
                if is_dir:
                    subdirs.append(path)
                elif is_file and not want_dirs:
                    yield path
            if want_dirs:
                yield from subdirs
            pending.extend(reversed(subdirs))

    def _scan_failed(self, path: Path, exc: OSError) -> None:
        if path in self._unreadable:
            return
        self._unreadable.add(path)
        self._fail(path, "scan", exc)

    def _fail(self, path: Path, operation: str, exc: OSError) -> None:
        failure = EntryFailure(path=path, operation=operation, error=exc.strerror or str(exc))
        self._report.failures.append(failure)
        log.debug(
            f"{operation} failed for {path}: {failure.error}",
            extra={"domain": self.record.domain, "path": str(path), "operation": operation},
        )

    # Mutations

    def _chown(self, path: Path, uid: int, gid: int) -> None:
        try:
            st = os.lstat(path)
            if st.st_uid == uid and st.st_gid == gid:
                return
            os.chown(path, uid, gid, follow_symlinks=False)
        except OSError as exc:
            self._fail(path, "chown", exc)
            return
        self._report.owner_changes += 1
        log.debug(
            f"changed ownership of {path} from {st.st_uid}:{st.st_gid} to {uid}:{gid}",
            extra={"domain": self.record.domain, "path": str(path)},
        )

    def _chmod(self, path: Path, mode: int, is_dir: bool) -> None:
        try:
            st = os.lstat(path)
            if stat.S_ISLNK(st.st_mode):
                return
            current = stat.S_IMODE(st.st_mode)
            target = mode
            if is_dir and not mode & _DIR_PRESERVED_BITS:
                target |= current & _DIR_PRESERVED_BITS
            if current == target:
                return
            os.chmod(path, target)
        except OSError as exc:
            self._fail(path, "chmod", exc)
            return
        self._report.mode_changes += 1
        log.debug(
            f"mode of {path} changed from {current:04o} to {target:04o}",
            extra={"domain": self.record.domain, "path": str(path)},
        )

    # Entry point

    def run(self) -> RestoreReport:
        """
        Run all six passes and return the report.

        Raises
        ------
        RestoreError
            If the document root is not a directory or the account/groups are
            unknown. Nothing is modified in that case.
        """
        root = self.root
        if root.is_symlink() or not root.is_dir():
            raise RestoreError(f"Document root {root} is not a directory")

        uid = _lookup_uid(self.record.system_user)
        files_gid = _lookup_gid(FILES_GROUP)
        root_gid = _lookup_gid(DOCROOT_GROUP)
        policy = self.policy

        log.info(
            f"Restoring {self.record.domain} ({root}) with {policy.describe()}",
            extra={"domain": self.record.domain, "document_root": str(root)},
        )

        for path in self._iter_tree(want_dirs=False):
            self._chown(path, uid, files_gid)
        for path in self._iter_tree(want_dirs=True):
            self._chown(path, uid, files_gid)
        self._chown(root, uid, root_gid)

        for path in self._iter_tree(want_dirs=False):
            self._chmod(path, policy.file_mode, is_dir=False)
        for path in self._iter_tree(want_dirs=True):
            self._chmod(path, policy.dir_mode, is_dir=True)
        self._chmod(root, policy.root_mode, is_dir=True)

        report = self._report
        log.info(
            f"Restored {self.record.domain}: {report.owner_changes} ownership and "
            f"{report.mode_changes} mode changes, {len(report.failures)} failures",
            extra={
                "domain": self.record.domain,
                "owner_changes": report.owner_changes,
                "mode_changes": report.mode_changes,
                "failures": len(report.failures),
            },
        )
        return report


def restore(record: DomainRecord, policy: PermissionPolicy) -> RestoreReport:
    """Restore ownership and modes for one resolved domain."""
    return PermissionRestorer(record, policy).run()


__all__ = ["DOCROOT_GROUP", "FILES_GROUP", "PermissionRestorer", "restore"]
