from __future__ import annotations

from typing import Dict, List, Type

from ..catalog import DEFAULT_CATALOG
from .base import CallableCheck, Check, CheckFunction
from .code import FencedCodeLanguageCheck, FirstLineHeadingCheck, SingleTrailingNewlineCheck
from .headings import (
    HeadingIncrementCheck,
    HeadingStyleCheck,
    NoMissingSpaceAtxCheck,
    SingleTitleCheck,
)
from .lists import UlIndentCheck
from .whitespace import (
    LineLengthCheck,
    NoHardTabsCheck,
    NoMultipleBlanksCheck,
    NoTrailingSpacesCheck,
)

__all__ = [
    "Check",
    "CallableCheck",
    "CheckFunction",
    "BUILTIN_CHECKS",
    "create_check",
    "default_checks",
]

# Registration order is the tie-break order for violations on the same position.
BUILTIN_CHECKS: tuple[Type[Check], ...] = (
    HeadingIncrementCheck,
    HeadingStyleCheck,
    UlIndentCheck,
    NoTrailingSpacesCheck,
    NoHardTabsCheck,
    NoMultipleBlanksCheck,
    LineLengthCheck,
    NoMissingSpaceAtxCheck,
    SingleTitleCheck,
    FencedCodeLanguageCheck,
    FirstLineHeadingCheck,
    SingleTrailingNewlineCheck,
)

_CHECKS_BY_ID: Dict[str, Type[Check]] = {cls.rule_id: cls for cls in BUILTIN_CHECKS}


def create_check(rule_id: str) -> Check:
    """Factory for building a built-in check by rule id, name or alias."""
    descriptor = DEFAULT_CATALOG.lookup(rule_id)
    if descriptor is None or descriptor.id not in _CHECKS_BY_ID:
        raise ValueError(f"Unknown check '{rule_id}'.")
    return _CHECKS_BY_ID[descriptor.id](descriptor)


def default_checks() -> List[Check]:
    """Instantiate every built-in check in registration order."""
    return [cls() for cls in BUILTIN_CHECKS]
