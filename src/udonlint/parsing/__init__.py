"""Parsing module - source discovery and tree-sitter syntax trees."""

from udonlint.parsing.discovery import discover_sources
from udonlint.parsing.models import SourceFile, Span, SyntaxTree
from udonlint.parsing.treesitter import SyntaxTreeBuilder

__all__ = [
    "SourceFile",
    "Span",
    "SyntaxTree",
    "SyntaxTreeBuilder",
    "discover_sources",
]
