"""Lint run orchestration.

Phase 1 reads, parses and outlines every file in parallel. After the
barrier the compilation context and entry-point classification are built
over the whole corpus; then structural and semantic rules run per
entry-point file, the call graph is built, and call-graph-gated rules run
on the helper files it reaches.

A failure while processing one file is converted into a code-000
diagnostic for that file and the run continues.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.markup import escape

from udonlint.analysis.callgraph import CallGraph
from udonlint.analysis.context import CompilationContext
from udonlint.analysis.declarations import collect_outline
from udonlint.analysis.entrypoints import FileClassification, classify_all, entry_type_nodes
from udonlint.analysis.models import FileOutline
from udonlint.config.models import UdonLintConfig
from udonlint.core.errors import InputError, InternalError
from udonlint.core.logging import get_logger
from udonlint.core.progress import progress, status
from udonlint.engine.sink import DiagnosticSink
from udonlint.parsing.discovery import discover_sources
from udonlint.parsing.models import SyntaxTree
from udonlint.parsing.treesitter import SyntaxTreeBuilder
from udonlint.rules.codes import LintCode
from udonlint.rules.models import Diagnostic, RuleDefinition, RuleFamily, RuleInput, Severity
from udonlint.rules.registry import RuleRegistry
from udonlint.rules.registry import registry as default_registry

log = get_logger("engine")


@dataclass
class LintResult:
    """Outcome of one lint run."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    files_checked: int = 0
    entry_files: list[str] = field(default_factory=list)
    helper_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    error_count: int = 0
    warning_count: int = 0
    duration_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error_count > 0

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


@dataclass(frozen=True, slots=True)
class _Parsed:
    tree: SyntaxTree
    outline: FileOutline


class LintRunner:
    """Runs the rule catalog over a corpus of C# files.

    Usage::

        runner = LintRunner(load_config(project_root))
        result = runner.check_directory(Path("Assets"))
        for diagnostic in result.diagnostics:
            ...
    """

    def __init__(self, config: UdonLintConfig | None = None, *, rules: RuleRegistry | None = None) -> None:
        self._config = config or UdonLintConfig()
        self._rules = rules or default_registry

    @property
    def config(self) -> UdonLintConfig:
        return self._config

    def check_directory(self, root: Path, *, exclude_test_scripts: bool = False) -> LintResult:
        """Discover sources under ``root`` and lint them.

        Raises:
            InputError: If ``root`` is not a directory or no file can be read.
        """
        paths = discover_sources(root, exclude_test_scripts=exclude_test_scripts, config=self._config.discovery)
        return self.check_files(paths)

    def check_files(self, paths: Sequence[Path]) -> LintResult:
        """Lint an explicit set of files.

        Raises:
            InputError: If files were given but none could be read.
        """
        start = time.perf_counter()
        analysis = self._config.analysis
        sink = DiagnosticSink()
        result = LintResult()
        workers = analysis.max_workers or None

        log.info("lint_started", files=len(paths), workers=workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="udonlint") as executor:
            parsed = self._parse_all(paths, executor, sink, result)
            if paths and not parsed and not len(sink):
                raise InputError.no_readable_files(len(paths))
            result.files_checked = len(parsed)

            # Barrier: everything below sees the whole corpus
            context = CompilationContext.build(
                {p.tree.path: p.tree for p in parsed.values()},
                analysis,
                outlines={p.tree.path: p.outline for p in parsed.values()},
                executor=executor,
                on_error=lambda path, exc: self._report_failure(sink, path, exc),
            )
            classifications = classify_all(context)
            entry_files = sorted(path for path, c in classifications.items() if c.is_entry_point)
            result.entry_files = entry_files
            log.debug("entry_points_classified", entry_files=len(entry_files), files=len(classifications))

            if entry_files:
                self._run_entry_rules(context, classifications, entry_files, executor, sink)
                graph = CallGraph.build(
                    context,
                    entry_files,
                    executor,
                    on_error=lambda path, exc: self._report_failure(sink, path, exc),
                )
                result.helper_files = graph.helper_files()
                self._run_gated_rules(context, classifications, graph, executor, sink)

        result.diagnostics = sink.sorted()
        result.error_count = sink.error_count
        result.warning_count = sink.warning_count
        result.duration_seconds = time.perf_counter() - start
        log.info(
            "lint_completed",
            files=result.files_checked,
            entry_files=len(result.entry_files),
            errors=result.error_count,
            warnings=result.warning_count,
            duration_ms=round(result.duration_seconds * 1000, 1),
        )
        return result

    # ------------------------------------------------------------------
    # Phase 1
    # ------------------------------------------------------------------

    def _parse_all(
        self,
        paths: Sequence[Path],
        executor: Executor,
        sink: DiagnosticSink,
        result: LintResult,
    ) -> dict[str, _Parsed]:
        builder = SyntaxTreeBuilder()
        marker = self._config.analysis.marker_import

        def parse_one(path: Path) -> _Parsed | None:
            try:
                source = builder.read(path)
            except OSError as e:
                log.warning("file_read_failed", path=str(path), error=str(e))
                status(escape(f"Skipping unreadable file {path}: {e.strerror or e}"), style="warning")
                result.skipped_files.append(str(path))
                return None
            try:
                tree = builder.parse(source)
            except Exception as e:
                log.warning("file_parse_failed", path=source.path, error=str(e))
                status(escape(f"Skipping file that could not be parsed {path}: {e}"), style="warning")
                result.skipped_files.append(source.path)
                return None
            outline = self._guarded(sink, tree.path, collect_outline, tree, marker)
            if outline is None:
                return None
            return _Parsed(tree, outline)

        parsed: dict[str, _Parsed] = {}
        for item in progress(executor.map(parse_one, paths), desc="Parsing", total=len(paths)):
            if item is not None:
                parsed[item.tree.path] = item
        result.skipped_files.sort()
        return parsed

    # ------------------------------------------------------------------
    # Phase 2
    # ------------------------------------------------------------------

    def _rules_for(self, family: RuleFamily) -> list[RuleDefinition]:
        return self._rules.for_family(family, disabled=self._config.analysis.disabled_rules)

    def _rule_input(
        self,
        context: CompilationContext,
        classification: FileClassification,
        graph: CallGraph | None = None,
    ) -> RuleInput:
        tree = context.tree(classification.path)
        if tree is None:
            raise KeyError(classification.path)
        return RuleInput(
            tree=tree,
            classification=classification,
            entry_types=tuple(entry_type_nodes(context, classification)),
            config=self._config.analysis,
            context=context,
            graph=graph,
        )

    def _run_entry_rules(
        self,
        context: CompilationContext,
        classifications: dict[str, FileClassification],
        entry_files: list[str],
        executor: Executor,
        sink: DiagnosticSink,
    ) -> None:
        rules = self._rules_for(RuleFamily.STRUCTURAL) + self._rules_for(RuleFamily.SEMANTIC)

        def check(path: str) -> None:
            rule_input = self._rule_input(context, classifications[path])
            for rule in rules:
                sink.extend(rule.run(rule_input))

        list(executor.map(lambda path: self._guarded(sink, path, check, path), entry_files))

    def _run_gated_rules(
        self,
        context: CompilationContext,
        classifications: dict[str, FileClassification],
        graph: CallGraph,
        executor: Executor,
        sink: DiagnosticSink,
    ) -> None:
        rules = self._rules_for(RuleFamily.CALL_GRAPH)
        helpers = [path for path in graph.helper_files() if path in classifications]
        if not rules or not helpers:
            return

        def check(path: str) -> None:
            rule_input = self._rule_input(context, classifications[path], graph)
            for rule in rules:
                sink.extend(rule.run(rule_input))

        list(executor.map(lambda path: self._guarded(sink, path, check, path), helpers))

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    def _guarded(self, sink: DiagnosticSink, path: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Call ``fn``; an unexpected exception becomes a file-level diagnostic."""
        try:
            return fn(*args)
        except Exception as e:
            self._report_failure(sink, path, e)
            return None

    @staticmethod
    def _report_failure(sink: DiagnosticSink, path: str, exc: BaseException) -> None:
        error = InternalError.unexpected(
            f"unexpected failure while processing file: {type(exc).__name__}: {exc}",
            path=path,
        )
        log.error("file_processing_failed", path=path, error=error.message, exc_info=exc)
        sink.add(
            Diagnostic(
                path=path,
                line=1,
                column=1,
                severity=Severity.ERROR,
                code=LintCode.FILE_FAILURE,
                message=error.message,
            )
        )
