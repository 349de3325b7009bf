"""Analysis module - declarations, symbol resolution, entry points and call graph."""

from udonlint.analysis.callgraph import CallGraph
from udonlint.analysis.context import CompilationContext, SemanticModel
from udonlint.analysis.declarations import collect_outline
from udonlint.analysis.entrypoints import FileClassification, classify, classify_all, entry_type_nodes
from udonlint.analysis.models import (
    FieldDecl,
    FileOutline,
    MethodDecl,
    Symbol,
    SymbolKind,
    TypeDecl,
    TypeKind,
    TypeRef,
)

__all__ = [
    "CallGraph",
    "CompilationContext",
    "FieldDecl",
    "FileClassification",
    "FileOutline",
    "MethodDecl",
    "SemanticModel",
    "Symbol",
    "SymbolKind",
    "TypeDecl",
    "TypeKind",
    "TypeRef",
    "classify",
    "classify_all",
    "collect_outline",
    "entry_type_nodes",
]
