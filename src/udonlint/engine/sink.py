"""Concurrency-safe diagnostic accumulation."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from udonlint.rules.models import Diagnostic, Severity


class DiagnosticSink:
    """Collects diagnostics from every worker and keeps running counts.

    The run fails exactly when at least one error-severity diagnostic was
    recorded; warnings never fail it.
    """

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []
        self._errors = 0
        self._warnings = 0
        self._lock = threading.Lock()

    def add(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._add(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        batch = list(diagnostics)
        with self._lock:
            for diagnostic in batch:
                self._add(diagnostic)

    def _add(self, diagnostic: Diagnostic) -> None:
        self._items.append(diagnostic)
        if diagnostic.severity is Severity.ERROR:
            self._errors += 1
        else:
            self._warnings += 1

    @property
    def error_count(self) -> int:
        with self._lock:
            return self._errors

    @property
    def warning_count(self) -> int:
        with self._lock:
            return self._warnings

    @property
    def failed(self) -> bool:
        return self.error_count > 0

    def sorted(self) -> list[Diagnostic]:
        """All diagnostics in a stable order (path, line, column, code)."""
        with self._lock:
            return sorted(self._items, key=Diagnostic.sort_key)

    def by_file(self) -> dict[str, list[Diagnostic]]:
        grouped: dict[str, list[Diagnostic]] = {}
        for diagnostic in self.sorted():
            grouped.setdefault(diagnostic.path, []).append(diagnostic)
        return grouped

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
