"""
Layered rule configuration.

Per-file settings (``.editorconfig`` by default) take precedence over the
global :class:`~mdlint_engine.config.LintOptions`, which take precedence over
the defaults compiled into each :class:`~mdlint_engine.models.RuleDescriptor`.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple, TypeVar

import editorconfig

from .catalog import DEFAULT_CATALOG, RuleCatalog, normalize_rule_key
from .config import LintOptions
from .models import RuleConfiguration, RuleDescriptor, Severity

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEVERITY_KEYWORDS: Dict[str, Severity] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "suggestion": Severity.SUGGESTION,
    "info": Severity.SUGGESTION,
    "information": Severity.SUGGESTION,
    "hint": Severity.SUGGESTION,
    "silent": Severity.SILENT,
    "refactoring": Severity.SILENT,
    "none": Severity.NONE,
}
DISABLE_KEYWORDS = frozenset({"false", "off", "none"})
ENABLE_KEYWORDS = frozenset({"true", "on"})


def parse_severity(raw: str) -> Severity | None:
    return SEVERITY_KEYWORDS.get(raw.strip().lower())


def parse_rule_value(
    raw: str | None, default_severity: Severity = Severity.WARNING
) -> RuleConfiguration:
    """Parse a settings value such as ``false``, ``error`` or ``atx:error``."""
    if raw is None or not raw.strip():
        return RuleConfiguration(enabled=True, severity=default_severity)

    text = raw.strip()
    lowered = text.lower()
    # `none` disables the rule outright rather than only setting the severity.
    if lowered in DISABLE_KEYWORDS:
        return RuleConfiguration(enabled=False, severity=default_severity)
    if lowered in ENABLE_KEYWORDS:
        return RuleConfiguration(enabled=True, severity=default_severity)

    severity = parse_severity(lowered)
    if severity is not None:
        return RuleConfiguration(enabled=True, severity=severity)

    colon = text.rfind(":")
    if 0 < colon < len(text) - 1:
        severity = parse_severity(text[colon + 1 :])
        if severity is not None:
            return RuleConfiguration(
                enabled=True, severity=severity, value=text[:colon].strip()
            )

    return RuleConfiguration(enabled=True, severity=default_severity, value=text)


@dataclass(frozen=True, slots=True)
class FileSettings:
    """Raw per-file settings keyed by normalized rule key."""

    values: Mapping[str, str] = field(default_factory=dict)
    parameters: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    indent_size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(
            self,
            "parameters",
            MappingProxyType(
                {key: MappingProxyType(dict(value)) for key, value in self.parameters.items()}
            ),
        )

    @property
    def is_empty(self) -> bool:
        return not self.values and not self.parameters and self.indent_size is None


EMPTY_SETTINGS = FileSettings()


def settings_from_properties(
    properties: Mapping[str, str], prefix: str = "md"
) -> FileSettings:
    """Convert flat ``<prefix>_<rule>[.<param>]`` properties into :class:`FileSettings`."""
    marker = f"{prefix.lower()}_"
    values: Dict[str, str] = {}
    parameters: Dict[str, Dict[str, str]] = {}
    for raw_key, raw_value in properties.items():
        key = raw_key.strip().lower()
        if not key.startswith(marker) or len(key) == len(marker):
            continue
        rule_part = key[len(marker) :]
        value = "" if raw_value is None else str(raw_value)
        if "." in rule_part:
            rule, _, param = rule_part.partition(".")
            if rule and param:
                parameters.setdefault(normalize_rule_key(rule), {})[param] = value
            continue
        values[normalize_rule_key(rule_part)] = value
    return FileSettings(
        values=values,
        parameters=parameters,
        indent_size=_parse_indent_size(properties.get("indent_size")),
    )


def _parse_indent_size(raw: str | None) -> int | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return int(text) if text.isdigit() else None


class SettingsSource(ABC):
    """Provider of raw per-file settings."""

    @abstractmethod
    def read(self, file_path: str) -> FileSettings:
        """Return the settings that apply to ``file_path``."""
        raise NotImplementedError


class EditorConfigSettingsSource(SettingsSource):
    """Reads ``<prefix>_*`` properties from the ``.editorconfig`` files above a path."""

    def __init__(self, prefix: str = "md") -> None:
        self.prefix = prefix

    def read(self, file_path: str) -> FileSettings:
        properties = editorconfig.get_properties(os.path.abspath(file_path))
        return settings_from_properties(properties, self.prefix)


class MappingSettingsSource(SettingsSource):
    """In-memory source: one flat property mapping, optionally overridden per path."""

    def __init__(
        self,
        properties: Mapping[str, str] | None = None,
        per_path: Mapping[str, Mapping[str, str]] | None = None,
        prefix: str = "md",
    ) -> None:
        self.properties = dict(properties or {})
        self.per_path = {
            os.path.abspath(path): dict(values) for path, values in (per_path or {}).items()
        }
        self.prefix = prefix
        self.reads = 0

    def read(self, file_path: str) -> FileSettings:
        self.reads += 1
        properties = self.per_path.get(os.path.abspath(file_path), self.properties)
        return settings_from_properties(properties, self.prefix)


class SettingsCache:
    """Thread-safe per-path cache of :class:`FileSettings` with a fixed time-to-live."""

    def __init__(
        self, ttl: float = 30.0, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, FileSettings]] = {}
        self._lock = threading.Lock()

    def get(self, path: str, loader: Callable[[], FileSettings]) -> FileSettings:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(path)
        if entry is not None and now < entry[0]:
            return entry[1]

        # Loading happens outside the lock; a concurrent miss may load twice.
        settings = loader()
        with self._lock:
            self._entries[path] = (self._clock() + self.ttl, settings)
        logger.debug("Cached settings for %s (ttl=%.1fs)", path, self.ttl)
        return settings

    def invalidate(self, path: str | None = None) -> None:
        with self._lock:
            if path is None:
                self._entries.clear()
            else:
                self._entries.pop(path, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ConfigurationResolver:
    """Resolve the effective :class:`RuleConfiguration` of each rule for a file."""

    def __init__(
        self,
        source: SettingsSource | None = None,
        options: LintOptions | None = None,
        cache: SettingsCache | None = None,
        catalog: RuleCatalog = DEFAULT_CATALOG,
    ) -> None:
        self.options = options or LintOptions()
        self.source = source or EditorConfigSettingsSource(self.options.settings_prefix)
        self.cache = cache or SettingsCache(ttl=self.options.settings_cache_ttl)
        self.catalog = catalog
        self._option_flags = {
            normalize_rule_key(key): bool(value) for key, value in self.options.rules.items()
        }

    def settings_changed(self, file_path: str | Path | None = None) -> None:
        """Drop cached settings (all of them unless ``file_path`` is given)."""
        self.cache.invalidate(None if file_path is None else _cache_key(file_path))

    def file_settings(self, file_path: str | Path | None) -> FileSettings:
        if file_path is None or not str(file_path):
            return EMPTY_SETTINGS
        key = _cache_key(file_path)
        return self.cache.get(key, lambda: self._read(key))

    def resolve(
        self, descriptor: RuleDescriptor, file_path: str | Path | None = None
    ) -> RuleConfiguration:
        return self._resolve(descriptor, self.file_settings(file_path))

    def resolve_all(self, file_path: str | Path | None = None) -> Dict[str, RuleConfiguration]:
        settings = self.file_settings(file_path)
        return {descriptor.id: self._resolve(descriptor, settings) for descriptor in self.catalog}

    def _resolve(self, descriptor: RuleDescriptor, settings: FileSettings) -> RuleConfiguration:
        keys = [normalize_rule_key(identifier) for identifier in descriptor.identifiers]
        parameters = _first_hit(settings.parameters, keys) or {}

        raw = _first_hit(settings.values, keys)
        if raw is not None:
            parsed = parse_rule_value(raw, descriptor.default_severity)
            return RuleConfiguration(
                enabled=parsed.enabled,
                severity=parsed.severity,
                value=parsed.value,
                parameters=parameters,
                indent_size=settings.indent_size,
            )

        flag = _first_hit(self._option_flags, keys)
        enabled = descriptor.enabled_by_default if flag is None else flag
        return RuleConfiguration(
            enabled=enabled,
            severity=descriptor.default_severity,
            parameters=parameters,
            indent_size=settings.indent_size,
        )

    def _read(self, path: str) -> FileSettings:
        try:
            return self.source.read(path)
        except Exception:  # noqa: broad-except
            logger.warning("Failed to read settings for %s; using defaults", path, exc_info=True)
            return EMPTY_SETTINGS


def _first_hit(mapping: Mapping[str, T], keys: list[str]) -> Optional[T]:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def _cache_key(file_path: str | Path) -> str:
    return os.path.abspath(str(file_path))
