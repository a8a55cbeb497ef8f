"""
Domain models for fixplesk.

`DomainRecord` mirrors the row returned by the `psa` lookup, `PermissionPolicy`
carries the modes applied during a restore, and `RestoreReport` collects what a
restore pass changed and which entries it could not touch.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class DomainRecord(BaseModel):
    """
    A hosted domain resolved to its system account and document root.
    """

    domain: str = Field(..., min_length=1, description="Domain name as stored in psa.domains.")
    system_user: str = Field(..., min_length=1, description="Login from psa.sys_users.")
    document_root: Path = Field(..., description="Web root from psa.hosting.www_root.")

    model_config = {
        "frozen": True,
    }


class PermissionPolicy(BaseModel):
    """
    Numeric modes applied to files, directories and the document root itself.
    """

    file_mode: int = Field(0o644, ge=0, le=0o7777)
    dir_mode: int = Field(0o755, ge=0, le=0o7777)
    root_mode: int = Field(0o750, ge=0, le=0o7777)

    model_config = {
        "frozen": True,
    }

    def describe(self) -> str:
        return f"files={self.file_mode:o} dirs={self.dir_mode:o} docroot={self.root_mode:o}"


class EntryFailure(BaseModel):
    """A single chown/chmod (or directory scan) that did not succeed."""

    path: Path
    operation: Literal["chown", "chmod", "scan"]
    error: str

    model_config = {
        "frozen": True,
    }


class RestoreReport(BaseModel):
    """
    Outcome of one restore pass over a document root.
    """

    record: DomainRecord
    owner_changes: int = 0
    mode_changes: int = 0
    failures: List[EntryFailure] = Field(default_factory=list)
    duration_seconds: Optional[float] = None

    @property
    def ok(self) -> bool:
        return not self.failures


__all__ = ["DomainRecord", "EntryFailure", "PermissionPolicy", "RestoreReport"]
