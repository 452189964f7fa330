"""
Per-document analysis results for interactive hosts.

Results are keyed by a document key (usually its path) and the host's content
version. A newer request for the same key cancels the in-flight or pending one,
so listeners never receive results older than ones already delivered.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Deque, Dict, List, Optional, Tuple

from .cancellation import AnalysisCancelled, CancellationToken
from .engine import LintEngine
from .models import Violation

logger = logging.getLogger(__name__)

AnalysisListener = Callable[[str, int, List[Violation]], None]


@dataclass(frozen=True, slots=True)
class CachedAnalysis:
    version: int
    violations: Tuple[Violation, ...]


class AnalysisCache:
    def __init__(self, engine: LintEngine, debounce: float | None = None) -> None:
        self.engine = engine
        self.debounce = engine.options.debounce_seconds if debounce is None else debounce
        self._results: Dict[str, CachedAnalysis] = {}
        self._tokens: Dict[str, CancellationToken] = {}
        self._timers: Dict[str, threading.Timer] = {}
        self._listeners: List[AnalysisListener] = []
        self._lock = threading.Lock()
        # Stored results wait here until the single draining thread hands them to
        # listeners; callbacks never run under a lock, so they may call back in.
        self._pending: Deque[Tuple[str, int, Tuple[Violation, ...]]] = deque()
        self._delivering = False
        self._closed = False

    def add_listener(self, listener: AnalysisListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def get(self, key: str) -> Optional[CachedAnalysis]:
        with self._lock:
            return self._results.get(key)

    def get_or_analyze(
        self,
        key: str,
        version: int,
        text: str,
        file_path: str | Path | None = None,
    ) -> List[Violation]:
        """Return cached violations for ``version``, analyzing synchronously on a miss."""
        cached = self.get(key)
        if cached is not None and cached.version == version:
            return list(cached.violations)

        violations = self.engine.lint_text(text, file_path)
        with self._lock:
            current = self._results.get(key)
            if current is None or current.version <= version:
                self._results[key] = CachedAnalysis(version, tuple(violations))
        return violations

    def submit(
        self,
        key: str,
        version: int,
        text: str,
        file_path: str | Path | None = None,
    ) -> List[Violation] | None:
        """Analyze now, cancelling any earlier run for ``key``.

        Returns None when this run was itself superseded or cancelled.
        """
        token = self._begin(key)
        return self._run(key, version, text, file_path, token)

    def schedule(
        self,
        key: str,
        version: int,
        text: str,
        file_path: str | Path | None = None,
        delay: float | None = None,
    ) -> None:
        """Analyze after ``delay`` seconds (the debounce interval by default)."""
        token = self._begin(key)
        timer = threading.Timer(
            self.debounce if delay is None else delay,
            self._run,
            args=(key, version, text, file_path, token),
        )
        timer.daemon = True
        with self._lock:
            if self._tokens.get(key) is not token:
                return
            self._timers[key] = timer
            timer.start()

    def cancel(self, key: str) -> None:
        with self._lock:
            self._cancel_locked(key)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cancel_locked(key)
            self._results.pop(key, None)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            for key in list(self._tokens) + list(self._timers):
                self._cancel_locked(key)
            self._results.clear()
            self._pending.clear()

    def _begin(self, key: str) -> CancellationToken:
        with self._lock:
            if self._closed:
                raise RuntimeError("Analysis cache is closed.")
            self._cancel_locked(key)
            token = CancellationToken()
            self._tokens[key] = token
            return token

    def _cancel_locked(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        token = self._tokens.pop(key, None)
        if token is not None:
            token.cancel()

    def _run(
        self,
        key: str,
        version: int,
        text: str,
        file_path: str | Path | None,
        token: CancellationToken,
    ) -> List[Violation] | None:
        if token.is_cancelled:
            return None
        try:
            violations = self.engine.lint_text(text, file_path, cancellation=token)
        except AnalysisCancelled:
            logger.debug("Analysis of %s (version %s) was superseded", key, version)
            return None
        except Exception:  # noqa: broad-except
            logger.exception("Analysis of %s (version %s) failed", key, version)
            return None

        with self._lock:
            if token.is_cancelled or self._tokens.get(key) is not token:
                return None
            del self._tokens[key]
            self._timers.pop(key, None)
            stored = CachedAnalysis(version, tuple(violations))
            self._results[key] = stored
            self._pending.append((key, version, stored.violations))
            if self._delivering:
                return violations
            self._delivering = True
        self._drain()
        return violations

    def _drain(self) -> None:
        """Deliver queued results in store order until the queue is empty."""
        while True:
            with self._lock:
                if not self._pending:
                    self._delivering = False
                    return
                key, version, violations = self._pending.popleft()
                listeners = list(self._listeners)
            for listener in listeners:
                try:
                    listener(key, version, list(violations))
                except Exception:  # noqa: broad-except
                    logger.exception("Analysis listener failed for %s", key)
