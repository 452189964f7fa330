from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .cancellation import AnalysisCancelled, CancellationToken
from .catalog import DEFAULT_CATALOG, RuleCatalog
from .checks import Check, default_checks
from .config import LintOptions
from .document import Document, build_document
from .models import RuleConfiguration, Severity, Violation
from .settings import ConfigurationResolver
from .suppression import SuppressionMap, parse_suppressions

logger = logging.getLogger(__name__)

PlannedCheck = Tuple[Check, RuleConfiguration]


class LintEngine:
    """Run the enabled checks against a document and collect ordered violations."""

    def __init__(
        self,
        checks: Iterable[Check] | None = None,
        catalog: RuleCatalog = DEFAULT_CATALOG,
        resolver: ConfigurationResolver | None = None,
        options: LintOptions | None = None,
        max_workers: int | None = None,
    ) -> None:
        if options is None:
            options = resolver.options if resolver is not None else LintOptions()
        self.options = options
        self.catalog = catalog
        self.resolver = resolver or ConfigurationResolver(options=options, catalog=catalog)
        self.checks: Tuple[Check, ...] = tuple(default_checks() if checks is None else checks)
        self.max_workers = max_workers or options.max_workers or os.cpu_count() or 1
        self._validate_checks()

    def _validate_checks(self) -> None:
        seen: set[str] = set()
        for check in self.checks:
            descriptor = check.descriptor
            if descriptor not in self.catalog:
                raise ValueError(f"Check {check!r} uses a rule that is not in the catalog.")
            if descriptor.id in seen:
                raise ValueError(f"Rule {descriptor.id} has more than one check registered.")
            seen.add(descriptor.id)

    def settings_changed(self) -> None:
        """Forget cached per-file settings, e.g. after an ``.editorconfig`` save."""
        self.resolver.settings_changed()

    def lint_text(
        self,
        text: str | None,
        file_path: str | Path | None = None,
        cancellation: CancellationToken | None = None,
    ) -> List[Violation]:
        """Build the document for ``text`` and analyze it."""
        if not text:
            return []
        document = build_document(text)
        return self.analyze(
            document,
            file_path=file_path,
            cancellation=cancellation,
            suppressions=parse_suppressions(document.lines),
        )

    def analyze(
        self,
        document: Document,
        file_path: str | Path | None = None,
        cancellation: CancellationToken | None = None,
        suppressions: SuppressionMap | None = None,
    ) -> List[Violation]:
        """Return the unsuppressed violations sorted by (line, column_start).

        Raises AnalysisCancelled when ``cancellation`` fires before the run
        completes; a partial result is never returned.
        """
        if not self.options.linting_enabled:
            return []
        token = cancellation or CancellationToken()
        token.raise_if_cancelled()
        if suppressions is None:
            suppressions = parse_suppressions(document.lines)

        planned = self._plan(file_path)
        if not planned:
            return []

        workers = max(1, min(self.max_workers, len(planned)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mdlint") as executor:
            batches = list(
                executor.map(lambda entry: self._run_check(entry, document, token), planned)
            )
        token.raise_if_cancelled()

        kept: List[Violation] = []
        for (check, _), batch in zip(planned, batches):
            if suppressions.has_any_suppressions:
                batch = [
                    violation
                    for violation in batch
                    if not suppressions.is_rule_suppressed(violation.line, check.descriptor)
                ]
            kept.extend(batch)
        # Stable sort keeps check registration order for equal positions.
        kept.sort(key=lambda violation: (violation.line, violation.column_start))
        logger.debug(
            "Analyzed %s with %d checks: %d violations",
            file_path or "<text>",
            len(planned),
            len(kept),
        )
        return kept

    def _plan(self, file_path: str | Path | None) -> List[PlannedCheck]:
        planned: List[PlannedCheck] = []
        for check in self.checks:
            config = self.resolver.resolve(check.descriptor, file_path)
            if config.enabled and config.severity != Severity.NONE:
                planned.append((check, config))
        return planned

    @staticmethod
    def _run_check(
        entry: PlannedCheck, document: Document, token: CancellationToken
    ) -> Sequence[Violation]:
        check, config = entry
        token.raise_if_cancelled()
        found: List[Violation] = []
        try:
            for violation in check.analyze(document, config, token):
                token.raise_if_cancelled()
                found.append(violation)
        except AnalysisCancelled:
            raise
        except Exception:  # noqa: broad-except
            logger.exception("Check %s failed; discarding its results", check.descriptor.id)
            return []
        return found
