"""Source and syntax tree models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A candidate source file as handed over by the source provider."""

    path: str  # Normalized absolute path
    text: str

    @classmethod
    def from_text(cls, path: str | Path, text: str) -> SourceFile:
        return cls(path=str(Path(path).resolve()), text=text)


@dataclass(frozen=True, slots=True)
class Span:
    """1-based source position of a node."""

    line: int
    column: int
    end_line: int
    end_column: int
    start_byte: int
    end_byte: int


@dataclass(frozen=True, slots=True)
class SyntaxTree:
    """Parsed form of one source file.

    ``root`` is the tree-sitter ``compilation_unit`` node. Tree-sitter
    rows and columns are 0-based byte positions; ``span`` converts them
    to 1-based line/character columns.
    """

    path: str
    text: str
    source: bytes
    tree: Any  # tree_sitter.Tree
    error_count: int

    @property
    def root(self) -> Any:
        return self.tree.root_node

    def span(self, node: Any) -> Span:
        start_row, start_col = node.start_point
        end_row, end_col = node.end_point
        return Span(
            line=start_row + 1,
            column=self._char_column(node.start_byte, start_col) + 1,
            end_line=end_row + 1,
            end_column=self._char_column(node.end_byte, end_col) + 1,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
        )

    def _char_column(self, byte_offset: int, byte_column: int) -> int:
        line_start = byte_offset - byte_column
        prefix = self.source[line_start:byte_offset]
        if prefix.isascii():
            return byte_column
        return len(prefix.decode("utf-8", errors="replace"))
