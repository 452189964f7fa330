from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping

import yaml


@dataclass(slots=True)
class LintOptions:
    """Global options for the lint engine (the host's options page)."""

    linting_enabled: bool = True
    rules: Dict[str, bool] = field(
        default_factory=lambda: {"MD013": False, "MD041": False}
    )
    settings_prefix: str = "md"
    settings_cache_ttl: float = 30.0
    max_workers: int | None = None
    debounce_seconds: float = 0.3

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the options."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(LintOptions)}
    kwargs = {key: data[key] for key in data if key in allowed}
    if "rules" in kwargs:
        rules_value = kwargs["rules"]
        if rules_value is None:
            kwargs["rules"] = {}
        elif isinstance(rules_value, Mapping):
            kwargs["rules"] = {str(key): bool(value) for key, value in rules_value.items()}
        else:
            raise ValueError("'rules' must map rule ids or aliases to booleans.")
    if "linting_enabled" in kwargs and not isinstance(kwargs["linting_enabled"], bool):
        raise ValueError("'linting_enabled' must be true or false.")
    if "settings_prefix" in kwargs and not isinstance(kwargs["settings_prefix"], str):
        raise ValueError("'settings_prefix' must be a string.")
    for name in ("settings_cache_ttl", "debounce_seconds"):
        if name in kwargs:
            kwargs[name] = _non_negative_number(name, kwargs[name])
    if kwargs.get("max_workers") is not None:
        workers = kwargs["max_workers"]
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ValueError("'max_workers' must be a positive integer or null.")
    return kwargs


def _non_negative_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"'{name}' must be a non-negative number of seconds.")
    return float(value)


def config_from_dict(data: Mapping[str, Any] | None) -> LintOptions:
    """Build LintOptions from a dictionary-like input."""
    if data is None:
        return LintOptions()
    return LintOptions(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> LintOptions:
    """Load options from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> LintOptions:
    """Load options from YAML when provided, otherwise return defaults."""
    if path is None:
        return LintOptions()
    return config_from_yaml(path)
