"""TOML configuration with per-environment files and env var overrides.

Resolution order, later wins:

1. ``config/default.toml``
2. ``config/{env}.toml`` (optional)
3. ``STOCKED__section__key=value`` environment variables
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

ENV_PREFIX = "STOCKED"


class ConfigError(Exception):
    """Raised when config loading or validation fails."""


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _coerce_value(value: str) -> Any:
    """Env var string → int, float, bool, list of ints or the string itself.

    Numbers are tried before booleans so "0" and "1" stay integers.
    """
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if "," in value:
        items = [v.strip() for v in value.split(",") if v.strip()]
        if items and all(v.isdigit() for v in items):
            return [int(v) for v in items]
    return value


def _env_overrides(prefix: str) -> Iterator[tuple[list[str], Any]]:
    marker = f"{prefix}__"
    for name, raw in os.environ.items():
        if name.startswith(marker):
            yield name[len(marker) :].lower().split("__"), _coerce_value(raw)


def _set_path(config: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``value`` at ``path``, creating tables; a scalar in the way blocks it."""
    node = config
    for part in path[:-1]:
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            return
        node = child
    node[path[-1]] = value


def _apply_env_overrides(config: dict[str, Any], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    result = _deep_merge({}, config)
    for path, value in _env_overrides(prefix):
        _set_path(result, path, value)
    return result


# dotted key → (check, expectation shown in the error)
_RANGE_RULES: dict[str, tuple[Callable[[Any], bool], str]] = {
    "trading.payout_pct": (lambda v: 0 < v <= 1000, "in (0, 1000]"),
    "trading.durations": (lambda v: bool(v) and all(d > 0 for d in v), "positive seconds"),
    "binance.kline_limit": (lambda v: 1 <= v <= 1000, "in [1, 1000]"),
}


class ConfigLoader:
    """Loads the merged config once and answers dotted-key lookups."""

    def __init__(
        self,
        config_dir: str | Path = "config",
        env: str | None = None,
        prefix: str = ENV_PREFIX,
    ) -> None:
        self._config_dir = Path(config_dir)
        self._env = env or os.environ.get(f"{prefix}_ENV", "development")
        self._prefix = prefix
        self._config: dict[str, Any] = {}

    @property
    def env(self) -> str:
        return self._env

    @property
    def config(self) -> dict[str, Any]:
        if not self._config:
            self.load()
        return self._config

    def load(self) -> dict[str, Any]:
        default_path = self._config_dir / "default.toml"
        if not default_path.exists():
            msg = f"Default config not found: {default_path}"
            raise ConfigError(msg)

        merged = self._read(default_path)
        env_path = self._config_dir / f"{self._env}.toml"
        if env_path.exists():
            merged = _deep_merge(merged, self._read(env_path))

        self._config = _apply_env_overrides(merged, self._prefix)
        return self._config

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Value at ``a.b.c`` or ``default`` when any segment is missing."""
        node: Any = self.config
        for part in dotted_key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def require(self, dotted_key: str) -> Any:
        value = self.get(dotted_key)
        if value is None:
            msg = f"Required config key missing: {dotted_key}"
            raise ConfigError(msg)
        return value

    def validate_keys(self, required_keys: list[str]) -> None:
        missing = [k for k in required_keys if self.get(k) is None]
        if missing:
            msg = f"Missing required config keys: {', '.join(missing)}"
            raise ConfigError(msg)

    def validate_ranges(self) -> None:
        """Check trading, polling and exchange parameters.

        Raises:
            ConfigError: Listing every out-of-range value.
        """
        errors: list[str] = []
        for key, (check, expected) in _RANGE_RULES.items():
            value = self.get(key)
            if value is not None and not check(value):
                errors.append(f"{key} must be {expected}, got {value}")

        durations = self.get("trading.durations")
        default_duration = self.get("trading.default_duration")
        if durations and default_duration is not None and default_duration not in durations:
            errors.append(
                f"trading.default_duration must be one of {durations}, got {default_duration}"
            )

        for key, value in self.get("polling", {}).items():
            if key.endswith("_seconds") and value <= 0:
                errors.append(f"polling.{key} must be > 0, got {value}")

        if errors:
            msg = "Config validation failed:\n  " + "\n  ".join(errors)
            raise ConfigError(msg)

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        with path.open("rb") as fh:
            return tomllib.load(fh)
