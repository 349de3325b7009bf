"""Entry-point classification.

A file is an entry-point file when it declares at least one type reaching
the sandboxed base type through its base chain AND carries the marker
import. Either signal alone is not enough.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from udonlint.analysis.context import CompilationContext
from udonlint.analysis.models import FileOutline


@dataclass(frozen=True, slots=True)
class FileClassification:
    path: str
    has_marker_import: bool
    entry_types: tuple[str, ...]  # qualified names declared in this file

    @property
    def is_entry_point(self) -> bool:
        return self.has_marker_import and bool(self.entry_types)


def classify(context: CompilationContext, outline: FileOutline) -> FileClassification:
    entry_types = tuple(
        fragment.qualified_name
        for fragment in outline.types
        if fragment.node.type == "class_declaration"
        and (decl := context.type(fragment.qualified_name)) is not None
        and context.inherits_from_base(decl)
    )
    return FileClassification(
        path=outline.path,
        has_marker_import=outline.has_marker_import,
        entry_types=entry_types,
    )


def classify_all(context: CompilationContext) -> dict[str, FileClassification]:
    classifications = {}
    for path in context.paths:
        outline = context.outline(path)
        if outline is not None:
            classifications[path] = classify(context, outline)
    return classifications


def entry_type_nodes(context: CompilationContext, classification: FileClassification) -> list[Any]:
    """Class declaration nodes of the file's entry-point types, in source order."""
    outline = context.outline(classification.path)
    if outline is None or not classification.entry_types:
        return []
    wanted = set(classification.entry_types)
    return [
        fragment.node
        for fragment in outline.types
        if fragment.qualified_name in wanted and fragment.node.type == "class_declaration"
    ]
