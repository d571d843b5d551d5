from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

DEFAULT_HOUSES_FILE = "houses.txt"
DEFAULT_TENANTS_FILE = "tenants.txt"
DEFAULT_AGREEMENTS_FILE = "agreements.txt"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Where the flat files live and how hard saves should try."""

    data_dir: Path = Path(".")
    houses_file: str = DEFAULT_HOUSES_FILE
    tenants_file: str = DEFAULT_TENANTS_FILE
    agreements_file: str = DEFAULT_AGREEMENTS_FILE
    save_retries: int = 3
    save_backoff_seconds: float = 0.05

    @property
    def houses_path(self) -> Path:
        return self.data_dir / self.houses_file

    @property
    def tenants_path(self) -> Path:
        return self.data_dir / self.tenants_file

    @property
    def agreements_path(self) -> Path:
        return self.data_dir / self.agreements_file

    @classmethod
    def from_env(cls, data_dir: Optional[Union[str, Path]] = None) -> "Settings":
        """
        Build settings from RENTAL_* environment variables.

        An explicit `data_dir` (e.g. from --data-dir) wins over RENTAL_DATA_DIR.
        """
        directory = data_dir if data_dir is not None else os.getenv("RENTAL_DATA_DIR", ".")
        return cls(
            data_dir=Path(directory).expanduser(),
            houses_file=os.getenv("RENTAL_HOUSES_FILE", DEFAULT_HOUSES_FILE),
            tenants_file=os.getenv("RENTAL_TENANTS_FILE", DEFAULT_TENANTS_FILE),
            agreements_file=os.getenv("RENTAL_AGREEMENTS_FILE", DEFAULT_AGREEMENTS_FILE),
            save_retries=_env_int("RENTAL_SAVE_RETRIES", 3),
            save_backoff_seconds=_env_float("RENTAL_SAVE_BACKOFF", 0.05),
        )
