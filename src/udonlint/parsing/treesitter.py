"""Tree-sitter parsing of C# sources.

One ``tree_sitter.Parser`` per worker thread: parsers are not safe to share
across threads, the loaded ``Language`` is.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import tree_sitter
import tree_sitter_c_sharp

from udonlint.core.logging import get_logger
from udonlint.parsing.models import SourceFile, SyntaxTree

log = get_logger("parsing")

_LANGUAGE: Any = None
_LANGUAGE_LOCK = threading.Lock()


def get_language() -> Any:
    """Load the C# grammar once per process."""
    global _LANGUAGE
    with _LANGUAGE_LOCK:
        if _LANGUAGE is None:
            _LANGUAGE = tree_sitter.Language(tree_sitter_c_sharp.language())
        return _LANGUAGE


def count_errors(root: Any) -> int:
    """Count ERROR and missing nodes produced by error recovery."""
    errors = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            errors += 1
        if node.has_error:
            stack.extend(node.children)
    return errors


class SyntaxTreeBuilder:
    """Parses C# source text into ``SyntaxTree`` values.

    Usage::

        builder = SyntaxTreeBuilder()
        source = builder.read(Path("Assets/Scripts/Door.cs"))
        tree = builder.parse(source)
    """

    def __init__(self) -> None:
        self._language = get_language()
        self._local = threading.local()

    def _parser(self) -> Any:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = tree_sitter.Parser()
            parser.language = self._language
            self._local.parser = parser
        return parser

    @staticmethod
    def read(path: Path) -> SourceFile:
        """Read a file as UTF-8, tolerating a BOM and undecodable bytes.

        Raises:
            OSError: If the file cannot be read.
        """
        data = path.read_bytes()
        return SourceFile.from_text(path, data.decode("utf-8-sig", errors="replace"))

    def parse(self, source: SourceFile) -> SyntaxTree:
        """Parse one file. Malformed input yields a partial tree, never an exception."""
        encoded = source.text.encode("utf-8")
        tree = self._parser().parse(encoded)
        error_count = count_errors(tree.root_node)
        if error_count:
            log.debug("parse_recovered", path=source.path, error_nodes=error_count)
        return SyntaxTree(
            path=source.path,
            text=source.text,
            source=encoded,
            tree=tree,
            error_count=error_count,
        )
