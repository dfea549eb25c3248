from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

CONFIG_ENV = "SCHEMAKIT_CONFIG"

REPORT_FORMATS = {"jsonl", "json"}


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class EngineSettings:
    max_errors: int = 200
    indent: int = 2
    report_format: str = "jsonl"

    def with_overrides(self, **overrides: Any) -> EngineSettings:
        """Apply CLI overrides, ignoring options the caller left unset."""

        changes = {k: v for k, v in overrides.items() if v is not None}
        return _checked(replace(self, **changes))


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _checked(settings: EngineSettings) -> EngineSettings:
    for name in ("max_errors", "indent"):
        if not _is_count(getattr(settings, name)):
            raise SettingsError(f"{name} must be an integer")
    if not isinstance(settings.report_format, str):
        raise SettingsError("report_format must be a string")
    if settings.max_errors < 1:
        raise SettingsError("max_errors must be at least 1")
    if settings.indent < 0:
        raise SettingsError("indent must not be negative")
    if settings.report_format not in REPORT_FORMATS:
        raise SettingsError(
            f"report_format must be one of {', '.join(sorted(REPORT_FORMATS))}"
        )
    return settings


def load_settings(path: str | Path | None = None) -> EngineSettings:
    """Read settings from YAML, falling back to ``$SCHEMAKIT_CONFIG``.

    With neither a path nor the environment variable, defaults apply.
    """

    if path is None:
        env = os.environ.get(CONFIG_ENV)
        if not env:
            return EngineSettings()
        path = env

    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise SettingsError(f"{path}: settings must be a mapping")

    known = {f.name for f in fields(EngineSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise SettingsError(f"{path}: unknown settings: {', '.join(unknown)}")
    return _checked(EngineSettings(**data))


__all__ = ["CONFIG_ENV", "EngineSettings", "SettingsError", "load_settings"]
