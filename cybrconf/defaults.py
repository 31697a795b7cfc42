from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Tuple

from .profiles import DEFAULT_PROFILE

APP_DIR = ".cybr"


def user_home_dir() -> Path:
    """Return the current user's home directory, or an empty path if unknown."""
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        # Path.home() fails when neither HOME nor the passwd entry is available
        home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
        return Path(home)


def default_config_filename(home: Path | None = None) -> str:
    """Default location of the shared config file: <home>/.cybr/config."""
    return str((home if home is not None else user_home_dir()) / APP_DIR / "config")


def default_credentials_filename(home: Path | None = None) -> str:
    """Default location of the shared credentials file: <home>/.cybr/credentials."""
    return str((home if home is not None else user_home_dir()) / APP_DIR / "credentials")


@dataclass(frozen=True)
class SharedConfigDefaults:
    """
    Profile and file locations used when no source provides them.

    Instances are immutable; build a new one with `with_files()` or
    `dataclasses.replace()` instead of changing shared state.
    """

    profile: str = DEFAULT_PROFILE
    config_files: Tuple[str, ...] = field(default_factory=tuple)
    credentials_files: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_home(cls, home: Path | None = None) -> "SharedConfigDefaults":
        home = home if home is not None else user_home_dir()
        return cls(
            config_files=(default_config_filename(home),),
            credentials_files=(default_credentials_filename(home),),
        )

    def with_files(
        self,
        config_files: Iterable[str | Path] | None = None,
        credentials_files: Iterable[str | Path] | None = None,
    ) -> "SharedConfigDefaults":
        changes = {}
        if config_files is not None:
            changes["config_files"] = tuple(str(f) for f in config_files)
        if credentials_files is not None:
            changes["credentials_files"] = tuple(str(f) for f in credentials_files)
        return replace(self, **changes)


DEFAULT_SHARED_CONFIG = SharedConfigDefaults.from_home()
