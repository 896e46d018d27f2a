"""
Store options.

Provides:
- Per-operation timeouts (select, insert, delete)
- Slow query threshold for logging
- Loading from JSON or YAML files
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from rdf_quadstore.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0


@dataclass
class StoreOptions:
    """
    Options customizing the behaviour of a relational quad store.

    Timeouts bound the worst-case duration of each kind of statement;
    an operation running longer is interrupted and fails.
    """
    select_timeout: float = DEFAULT_TIMEOUT_SECONDS
    insert_timeout: float = DEFAULT_TIMEOUT_SECONDS
    delete_timeout: float = DEFAULT_TIMEOUT_SECONDS
    slow_query_threshold: float = 1.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in ("select_timeout", "insert_timeout", "delete_timeout", "slow_query_threshold"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive number, got {value!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "select_timeout": self.select_timeout,
            "insert_timeout": self.insert_timeout,
            "delete_timeout": self.delete_timeout,
            "slow_query_threshold": self.slow_query_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreOptions":
        known = cls().to_dict()
        unknown = set(data) - set(known)
        if unknown:
            logger.warning(f"Ignoring unknown store options: {sorted(unknown)}")
        return cls(
            select_timeout=data.get("select_timeout", DEFAULT_TIMEOUT_SECONDS),
            insert_timeout=data.get("insert_timeout", DEFAULT_TIMEOUT_SECONDS),
            delete_timeout=data.get("delete_timeout", DEFAULT_TIMEOUT_SECONDS),
            slow_query_threshold=data.get("slow_query_threshold", 1.0),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Save options to a JSON or YAML file (chosen by extension)."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "StoreOptions":
        """Load options from a JSON or YAML file; a missing file gives defaults."""
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read store options from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Store options in {path} must be a mapping")
        return cls.from_dict(data)
