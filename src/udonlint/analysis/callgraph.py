"""Call graph from helper files back to the entry-point files invoking them."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from concurrent.futures import Executor

from udonlint.analysis.context import CompilationContext, ErrorHandler
from udonlint.analysis.models import SymbolKind
from udonlint.core.logging import get_logger
from udonlint.parsing import nodes

log = get_logger("analysis.callgraph")

_INVOCATIONS = frozenset({"invocation_expression"})


class CallGraph:
    """helper path -> set of entry-point paths that statically invoke it.

    Entry-point files are scanned concurrently; the shared map is guarded
    by a single lock. Read accessors are meant for after the build.
    """

    def __init__(self) -> None:
        self._edges: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    @classmethod
    def build(
        cls,
        context: CompilationContext,
        entry_files: Iterable[str],
        executor: Executor | None = None,
        on_error: ErrorHandler | None = None,
    ) -> CallGraph:
        """Scan every entry-point file; without ``on_error`` a failing file raises."""
        graph = cls()

        def add(path: str) -> None:
            try:
                graph.add_entry_file(context, path)
            except Exception as e:
                if on_error is None:
                    raise
                on_error(path, e)

        files = sorted(entry_files)
        if executor is not None:
            # Drain the iterator so worker exceptions surface here
            list(executor.map(add, files))
        else:
            for path in files:
                add(path)
        log.debug("call_graph_built", entry_files=len(files), helper_files=len(graph))
        return graph

    def add_entry_file(self, context: CompilationContext, entry_path: str) -> int:
        """Record edges for every static routine invoked from ``entry_path``.

        Returns the number of invocations that produced an edge.
        """
        tree = context.tree(entry_path)
        if tree is None:
            return 0
        model = context.semantic_model(entry_path)
        helpers: list[str] = []
        for invocation in nodes.descendants(tree.root, _INVOCATIONS):
            symbol = model.resolve_invocation(invocation)
            if symbol is None or symbol.kind is not SymbolKind.METHOD or not symbol.is_static:
                continue
            if symbol.path == entry_path:
                continue
            helpers.append(symbol.path)
        if helpers:
            with self._lock:
                for helper in helpers:
                    self._edges.setdefault(helper, set()).add(entry_path)
        return len(helpers)

    def callers_of(self, helper_path: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._edges.get(helper_path, ()))

    def helper_files(self) -> list[str]:
        with self._lock:
            return sorted(self._edges)

    def __iter__(self) -> Iterator[tuple[str, frozenset[str]]]:
        for helper in self.helper_files():
            yield helper, self.callers_of(helper)

    def __len__(self) -> int:
        with self._lock:
            return len(self._edges)

    def __contains__(self, helper_path: object) -> bool:
        with self._lock:
            return helper_path in self._edges
