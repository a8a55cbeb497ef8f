"""
Start-up checks that must pass before any domain is touched.
"""

from __future__ import annotations

import os
from pathlib import Path

from fixplesk.config import Settings
from fixplesk.errors import PreconditionError


def check_credentials_file(settings: Settings) -> None:
    if not Path(settings.psa_shadow_file).exists():
        raise PreconditionError("Could not find Plesk MySQL password file.")


def check_root() -> None:
    if os.geteuid() != 0:
        raise PreconditionError("This script must be run as root")


def check_preconditions(settings: Settings) -> None:
    """Raise PreconditionError on the first unmet requirement."""
    check_credentials_file(settings)
    check_root()


__all__ = ["check_credentials_file", "check_preconditions", "check_root"]
