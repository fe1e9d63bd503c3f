"""
Runtime settings.

Loaded from ``BOUNDED_ACCUMULATION_*`` environment variables and an
optional ``.env`` file; every field has a default so an empty
environment is valid.  Variables already set in the process win over
the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

ENV_PREFIX = "BOUNDED_ACCUMULATION_"
ENV_FILE = Path(".env")


@dataclass(frozen=True)
class Settings:
    default_steps: int = 5              # steps used by the driver and demo
    max_steps: int = 1_000_000          # largest steps accepted over HTTP
    verification_samples: int = 500     # samples per contract property
    verification_seed: int | None = 0   # None draws a fresh seed
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self):
        for name in ("default_steps", "max_steps", "verification_samples"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        env_file: str | Path | None = ENV_FILE,
    ) -> "Settings":
        """
        Build settings from the environment.

        With no explicit ``environ`` the ``.env`` file (if present) is
        loaded into ``os.environ`` first.
        """
        if environ is None:
            if env_file is not None:
                load_dotenv(dotenv_path=env_file, override=False)
            env: Mapping[str, str] = os.environ
        else:
            env = environ

        def get(key: str) -> str | None:
            value = env.get(ENV_PREFIX + key)
            if value is None or not value.strip():
                return None
            return value.strip()

        def get_int(key: str, default: int) -> int:
            value = get(key)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError:
                raise ValueError(
                    f"{ENV_PREFIX + key} must be an integer, got {value!r}"
                ) from None

        def get_bool(key: str, default: bool) -> bool:
            value = get(key)
            if value is None:
                return default
            if value.lower() in ("true", "1", "yes"):
                return True
            if value.lower() in ("false", "0", "no"):
                return False
            raise ValueError(f"{ENV_PREFIX + key} must be a boolean, got {value!r}")

        seed_raw = get("VERIFICATION_SEED")
        if seed_raw is not None and seed_raw.lower() == "none":
            seed: int | None = None
        else:
            seed = get_int("VERIFICATION_SEED", 0)

        return cls(
            default_steps=get_int("DEFAULT_STEPS", 5),
            max_steps=get_int("MAX_STEPS", 1_000_000),
            verification_samples=get_int("VERIFICATION_SAMPLES", 500),
            verification_seed=seed,
            log_level=(get("LOG_LEVEL") or "INFO").upper(),
            log_json=get_bool("LOG_JSON", False),
        )
