from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, ClassVar, Iterable, Iterator

from ..cancellation import CancellationToken, check_cancelled
from ..catalog import DEFAULT_CATALOG
from ..document import Document
from ..models import RuleConfiguration, RuleDescriptor, Violation

CheckFunction = Callable[[Document, RuleConfiguration], Iterable[Violation]]


class Check(ABC):
    """A single lint rule implementation.

    ``analyze`` must be pure: it may be called concurrently with other checks on
    the same document, and calling it twice yields the same violations. Long
    loops pass ``cancellation`` to :meth:`Document.iter_lines` or call
    :func:`check_cancelled` themselves.
    """

    rule_id: ClassVar[str] = ""

    def __init__(self, descriptor: RuleDescriptor | None = None) -> None:
        if descriptor is None:
            descriptor = DEFAULT_CATALOG.lookup(self.rule_id)
        if descriptor is None:
            raise ValueError(f"Unknown rule '{self.rule_id}' for {type(self).__name__}.")
        self.descriptor = descriptor

    @abstractmethod
    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        """Yield the violations found in ``document``."""
        raise NotImplementedError

    def violation(
        self,
        config: RuleConfiguration,
        line: int,
        column_start: int,
        column_end: int,
        message: str,
        fix_hint: str | None = None,
    ) -> Violation:
        return Violation(
            rule_id=self.descriptor.id,
            line=line,
            column_start=column_start,
            column_end=column_end,
            message=message,
            severity=config.severity,
            fix_hint=fix_hint,
        )

    def line_violation(
        self,
        config: RuleConfiguration,
        document: Document,
        line: int,
        message: str,
        fix_hint: str | None = None,
    ) -> Violation:
        """Violation spanning the whole text of ``line``."""
        return self.violation(
            config, line, 0, len(document.get_line(line)), message, fix_hint
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.descriptor.id})"


class CallableCheck(Check):
    """Adapter that lets a plain function act as a check."""

    def __init__(self, descriptor: RuleDescriptor, func: CheckFunction) -> None:
        super().__init__(descriptor)
        self._func = func

    def analyze(
        self,
        document: Document,
        config: RuleConfiguration,
        cancellation: CancellationToken | None = None,
    ) -> Iterator[Violation]:
        check_cancelled(cancellation)
        for violation in self._func(document, config):
            check_cancelled(cancellation)
            yield violation
