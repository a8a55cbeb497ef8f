"""
Configuration settings for fixplesk.

Uses Pydantic Settings to load environment variables for the permission modes,
the Plesk database connection and logging. Mode variables keep the names the
Plesk shell tooling uses (`FILE_MODE`, `DIR_MODE`, `DOCROOT_MODE`).
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fixplesk.domain.models import PermissionPolicy

_OCTAL_MODE = re.compile(r"^[0-7]{3,4}$")


class Settings(BaseSettings):
    # Permission modes (octal strings, as passed to chmod)
    file_mode: str = Field("644", alias="FILE_MODE")
    dir_mode: str = Field("755", alias="DIR_MODE")
    docroot_mode: str = Field("750", alias="DOCROOT_MODE")

    # Plesk database
    psa_shadow_file: str = Field("/etc/psa/.psa.shadow", alias="PSA_SHADOW_FILE")
    db_host: str = Field("localhost", alias="PSA_DB_HOST")
    db_port: int = Field(3306, alias="PSA_DB_PORT")
    db_user: str = Field("admin", alias="PSA_DB_USER")
    db_name: str = Field("psa", alias="PSA_DB_NAME")
    db_socket: Optional[str] = Field(None, alias="PSA_DB_SOCKET")
    db_connect_timeout: int = Field(10, alias="PSA_DB_CONNECT_TIMEOUT")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("file_mode", "dir_mode", "docroot_mode")
    @classmethod
    def _check_octal(cls, value: str) -> str:
        value = value.strip()
        if not _OCTAL_MODE.match(value):
            raise ValueError(f"'{value}' is not an octal mode (expected e.g. 644 or 0755)")
        return value

    def policy(self) -> PermissionPolicy:
        """
        Build the immutable permission policy used for the whole run.
        """
        return PermissionPolicy(
            file_mode=int(self.file_mode, 8),
            dir_mode=int(self.dir_mode, 8),
            root_mode=int(self.docroot_mode, 8),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
