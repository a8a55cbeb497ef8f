"""
Pytest configuration for fixplesk.

Provides fixtures for:
- Environment isolation and settings cache reset
- A Plesk password file and matching Settings
- A small document root tree
- Fake system accounts and a recording chown, so restores run without root
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, Generator, Tuple

import pytest

from fixplesk import restorer
from fixplesk.config import Settings, get_settings
from fixplesk.domain.models import DomainRecord

ENV_KEYS = (
    "FILE_MODE",
    "DIR_MODE",
    "DOCROOT_MODE",
    "PSA_SHADOW_FILE",
    "PSA_DB_HOST",
    "PSA_DB_PORT",
    "PSA_DB_USER",
    "PSA_DB_NAME",
    "PSA_DB_SOCKET",
    "PSA_DB_CONNECT_TIMEOUT",
    "LOG_LEVEL",
    "LOG_JSON",
)

FAKE_UIDS = {"ex_user": 4242}
FAKE_GIDS = {restorer.FILES_GROUP: 4301, restorer.DOCROOT_GROUP: 4302}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path) -> Generator[None, None, None]:
    """
    Remove fixplesk variables from the environment and reset cached settings.

    Also runs each test from an empty directory so a stray `.env` is never read.
    """
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers configured by the CLI so they never outlive a test's streams."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


@pytest.fixture
def shadow_file(tmp_path: Path) -> Path:
    path = tmp_path / "etc" / "psa" / ".psa.shadow"
    path.parent.mkdir(parents=True)
    path.write_text("s3cr3t\n", encoding="utf-8")
    return path


@pytest.fixture
def test_settings(shadow_file: Path) -> Settings:
    """
    Settings fixture pointing at the temporary password file.
    """
    return Settings(PSA_SHADOW_FILE=str(shadow_file), LOG_LEVEL="DEBUG")


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    Build a small vhost tree with deliberately wrong modes:

        httpdocs/            0700
        httpdocs/index.html  0600
        httpdocs/css/        0700
        httpdocs/css/site.css
        httpdocs/css/img/
        httpdocs/css/img/logo.png
        httpdocs/empty/
    """
    root = tmp_path / "vhosts" / "example.com" / "httpdocs"
    (root / "css" / "img").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "index.html").write_text("<h1>hello</h1>", encoding="utf-8")
    (root / "css" / "site.css").write_text("body {}", encoding="utf-8")
    (root / "css" / "img" / "logo.png").write_bytes(b"\x89PNG")

    for path in (root / "index.html", root / "css" / "site.css", root / "css" / "img" / "logo.png"):
        os.chmod(path, 0o600)
    for path in (root / "css" / "img", root / "css", root / "empty", root):
        os.chmod(path, 0o700)
    return root


@pytest.fixture
def record(docroot: Path) -> DomainRecord:
    return DomainRecord(domain="example.com", system_user="ex_user", document_root=docroot)


@pytest.fixture
def fake_accounts(monkeypatch) -> None:
    """Resolve `ex_user`, `psacln` and `psaserv` without touching /etc/passwd."""

    def getpwnam(name: str) -> SimpleNamespace:
        if name not in FAKE_UIDS:
            raise KeyError(name)
        return SimpleNamespace(pw_uid=FAKE_UIDS[name], pw_name=name)

    def getgrnam(name: str) -> SimpleNamespace:
        if name not in FAKE_GIDS:
            raise KeyError(name)
        return SimpleNamespace(gr_gid=FAKE_GIDS[name], gr_name=name)

    monkeypatch.setattr(restorer.pwd, "getpwnam", getpwnam)
    monkeypatch.setattr(restorer.grp, "getgrnam", getgrnam)


@pytest.fixture
def ownership(monkeypatch, fake_accounts) -> Dict[Path, Tuple[int, int]]:
    """
    Replace os.chown with a recorder; returns the final (uid, gid) per path.
    """
    owners: Dict[Path, Tuple[int, int]] = {}

    def fake_chown(path, uid, gid, *, follow_symlinks=True):
        assert follow_symlinks is False
        owners[Path(path)] = (uid, gid)

    monkeypatch.setattr(restorer.os, "chown", fake_chown)
    return owners
