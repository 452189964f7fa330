"""
mdlint_engine package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .analysis_cache import AnalysisCache
from .cancellation import AnalysisCancelled, CancellationToken, check_cancelled
from .catalog import DEFAULT_CATALOG, DuplicateRuleError, RuleCatalog, normalize_rule_key
from .checks import CallableCheck, Check, create_check, default_checks
from .config import LintOptions, config_from_dict, config_from_yaml, load_config
from .document import Document, build_document
from .engine import LintEngine
from .models import RuleConfiguration, RuleDescriptor, Severity, Violation
from .settings import (
    ConfigurationResolver,
    EditorConfigSettingsSource,
    MappingSettingsSource,
    SettingsCache,
    SettingsSource,
    parse_rule_value,
)
from .suppression import SuppressionMap, parse_suppressions

__all__ = [
    "AnalysisCache",
    "AnalysisCancelled",
    "CancellationToken",
    "check_cancelled",
    "DEFAULT_CATALOG",
    "DuplicateRuleError",
    "RuleCatalog",
    "normalize_rule_key",
    "CallableCheck",
    "Check",
    "create_check",
    "default_checks",
    "LintOptions",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "Document",
    "build_document",
    "LintEngine",
    "RuleConfiguration",
    "RuleDescriptor",
    "Severity",
    "Violation",
    "ConfigurationResolver",
    "EditorConfigSettingsSource",
    "MappingSettingsSource",
    "SettingsCache",
    "SettingsSource",
    "parse_rule_value",
    "SuppressionMap",
    "parse_suppressions",
]

__version__ = "0.1.0"
