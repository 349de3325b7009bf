"""Rule models - definitions, inputs and diagnostics."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from udonlint.config.models import AnalysisConfig
from udonlint.core.logging import get_logger
from udonlint.parsing.models import SyntaxTree

if TYPE_CHECKING:
    from udonlint.analysis.callgraph import CallGraph
    from udonlint.analysis.context import CompilationContext, SemanticModel
    from udonlint.analysis.entrypoints import FileClassification

log = get_logger("rules")

T = TypeVar("T")


class Severity(Enum):
    """Diagnostic severity level."""

    ERROR = "error"
    WARNING = "warning"


class RuleFamily(Enum):
    """Which inputs a rule needs, and therefore when it may run."""

    STRUCTURAL = "structural"  # tree (+ entry classification)
    SEMANTIC = "semantic"  # + compilation context
    CALL_GRAPH = "call_graph"  # + call graph, runs on helper files


class RuleCategory(Enum):
    """Documentation grouping used by ``udonlint rules``."""

    LANGUAGE = "language"
    API = "api"
    SEMANTIC = "semantic"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single reported rule violation."""

    path: str
    line: int
    column: int
    severity: Severity
    code: int
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def sort_key(self) -> tuple[str, int, int, int, str]:
        return (self.path, self.line, self.column, self.code, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class RuleInput:
    """Read-only inputs shared by every rule evaluated on one file."""

    tree: SyntaxTree
    classification: FileClassification
    entry_types: tuple[Any, ...]  # class_declaration nodes of entry-point types
    config: AnalysisConfig
    context: CompilationContext | None = None
    graph: CallGraph | None = None

    def model(self) -> SemanticModel:
        if self.context is None:
            raise ValueError("rule requires a compilation context")
        return self.context.semantic_model(self.tree.path)

    def resolve(self, resolver: Callable[[Any], T | None], node: Any) -> T | None:
        """Resolve one site; an unexpected failure leaves only that site unknown."""
        try:
            return resolver(node)
        except Exception as e:
            log.warning(
                "site_resolution_failed",
                path=self.tree.path,
                line=self.tree.span(node).line,
                error=f"{type(e).__name__}: {e}",
            )
            return None


# A finding is the offending node plus the rendered message
Finding = tuple[Any, str]
Evaluate = Callable[[RuleInput], Iterable[Finding]]


@dataclass(frozen=True)
class RuleDefinition:
    """One entry of the rule catalog."""

    code: int
    name: str
    family: RuleFamily
    severity: Severity
    category: RuleCategory
    summary: str
    evaluate: Evaluate

    def run(self, rule_input: RuleInput) -> list[Diagnostic]:
        tree = rule_input.tree
        diagnostics = []
        for node, message in self.evaluate(rule_input):
            span = tree.span(node)
            diagnostics.append(
                Diagnostic(
                    path=tree.path,
                    line=span.line,
                    column=span.column,
                    severity=self.severity,
                    code=self.code,
                    message=message,
                )
            )
        return diagnostics
