from __future__ import annotations

import threading


class AnalysisCancelled(RuntimeError):
    """Raised when an analysis run is cancelled before it completes."""


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and running checks."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("Analysis was cancelled.")


def check_cancelled(token: CancellationToken | None) -> None:
    """Raise :class:`AnalysisCancelled` if ``token`` is set; ``None`` never cancels."""
    if token is not None:
        token.raise_if_cancelled()
