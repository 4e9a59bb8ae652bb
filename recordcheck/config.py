"""Configuration utilities for the record-check harness.

This module loads harness configuration with the following rules:
- Primary source: `recordcheck.json` in the working directory.
- Overrides: environment variables.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


ROOT_CONFIG_FILE = Path("recordcheck.json")
logger = logging.getLogger(__name__)

COMPARISON_MODES = {"native", "strict"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class ComparisonConfig(BaseModel):
    mode: str = Field(default="native")  # one of: native, strict

    @field_validator("mode")
    @classmethod
    def mode_must_be_allowed(cls, v: str) -> str:
        if v not in COMPARISON_MODES:
            raise ValueError(f"comparison.mode must be one of {sorted(COMPARISON_MODES)}")
        return v


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        up = str(v).strip().upper()
        if up not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {sorted(LOG_LEVELS)}")
        return up


class HarnessConfig(BaseModel):
    database: DatabaseConfig
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config(path: Path | None = None) -> HarnessConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) recordcheck.json in the working directory (or ``path``)
    3) Safe defaults for local test runs
    """

    base = _read_json_file(path or ROOT_CONFIG_FILE)

    def _base(dotted: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in dotted.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("RECORDCHECK_DATABASE_URL")
        or _env("DATABASE_URL")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    mode = (_env("RECORDCHECK_COMPARISON") or _base("comparison.mode", "native")).strip().lower()
    level = (_env("RECORDCHECK_LOG_LEVEL") or _base("logging.level", "INFO")).strip()

    try:
        return HarnessConfig(
            database=DatabaseConfig(dsn=dsn),
            comparison=ComparisonConfig(mode=mode),
            logging=LoggingConfig(level=level),
        )
    except PydanticValidationError as e:
        logger.error("Invalid harness configuration: %s", e)
        raise


__all__ = [
    "HarnessConfig",
    "DatabaseConfig",
    "ComparisonConfig",
    "LoggingConfig",
    "load_config",
]
