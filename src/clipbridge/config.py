from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from clipbridge import API_VERSION
from clipbridge.utils.staging import resolve_staging_dir


def _load_env_file(env_path: Optional[Path] = None) -> None:
    if env_path is not None:
        load_dotenv(dotenv_path=env_path)
        return

    repo_env = Path(__file__).resolve().parents[2] / ".env"
    if repo_env.exists():
        load_dotenv(dotenv_path=repo_env)
    else:
        load_dotenv()


def _to_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8086
    temp_dir: str = "temp"
    api_version: str = API_VERSION
    log_level: str = "INFO"
    tray: bool = True

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "Settings":
        _load_env_file(env_path)

        port_raw = os.getenv("CLIPBRIDGE_PORT")
        try:
            port = int(port_raw) if port_raw else cls.port
        except ValueError:
            raise ValueError(f"CLIPBRIDGE_PORT must be an integer, got {port_raw!r}") from None

        return cls(
            host=os.getenv("CLIPBRIDGE_HOST", cls.host),
            port=port,
            temp_dir=os.getenv("CLIPBRIDGE_TEMP_DIR", cls.temp_dir),
            api_version=os.getenv("CLIPBRIDGE_API_VERSION", cls.api_version),
            log_level=os.getenv("CLIPBRIDGE_LOG_LEVEL", cls.log_level).upper(),
            tray=_to_bool(os.getenv("CLIPBRIDGE_TRAY"), default=cls.tray),
        )

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Copy with every non-None override applied (CLI flags win over env)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    @property
    def staging_dir(self) -> Path:
        return resolve_staging_dir(self.temp_dir)
