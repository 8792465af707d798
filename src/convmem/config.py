"""Configuration loading from environment variables and convmem.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from convmem.errors import ConfigurationError

_CONFIG_FILENAME = "convmem.toml"
_DEFAULT_SKILL_NAME = "conversation-memory"

LANGUAGES = ("en", "zh")


@dataclass
class ArchiveConfig:
    """Thresholds for the archival policy."""

    archive_after_days: float = 14
    max_active: int = 20


@dataclass
class ConvmemConfig:
    """Top-level convmem configuration."""

    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    skill_name: str = _DEFAULT_SKILL_NAME
    language: str = "en"
    workdir: Path | None = None
    log_level: str = "INFO"


def _number(key: str, value, cast):
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid {key}: {value!r}") from e


def load_config(config_path: Path | None = None) -> ConvmemConfig:
    """Load configuration from environment variables and optional convmem.toml.

    Priority: environment variables > convmem.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    else:
        # Search current dir and ~/.convmem/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".convmem" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text(encoding="utf-8"))
                break

    archive_data = file_data.get("archive", {})
    workdir = os.getenv("CONVMEM_WORKDIR", file_data.get("workdir"))

    config = ConvmemConfig(
        archive=ArchiveConfig(
            archive_after_days=_number(
                "archive_after_days",
                os.getenv(
                    "CONVMEM_ARCHIVE_AFTER_DAYS", archive_data.get("archive_after_days", 14)
                ),
                float,
            ),
            max_active=_number(
                "max_active",
                os.getenv("CONVMEM_MAX_ACTIVE", archive_data.get("max_active", 20)),
                int,
            ),
        ),
        skill_name=os.getenv(
            "CONVMEM_SKILL_NAME", file_data.get("skill_name", _DEFAULT_SKILL_NAME)
        ),
        language=os.getenv("CONVMEM_LANGUAGE", file_data.get("language", "en")),
        workdir=Path(workdir).expanduser() if workdir else None,
        log_level=os.getenv("CONVMEM_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    if config.language not in LANGUAGES:
        raise ConfigurationError(
            f"Unsupported language {config.language!r} (expected one of: {', '.join(LANGUAGES)})"
        )
    return config
