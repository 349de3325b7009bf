"""Rendering of diagnostics for the console and for CI tooling."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from udonlint.rules.models import Diagnostic


def display_path(path: str, base_dir: Path) -> str:
    """``path`` relative to ``base_dir`` with ``/`` separators, else absolute."""
    try:
        return Path(path).relative_to(base_dir.resolve()).as_posix()
    except ValueError:
        return Path(path).as_posix()


def diagnostic_id(code: int, prefix: str = "UDON") -> str:
    return f"{prefix}{code:03d}"


def format_diagnostic(diagnostic: Diagnostic, base_dir: Path, prefix: str = "UDON") -> str:
    """``Assets/Door.cs(12,9): error UDON001: <message>``."""
    return (
        f"{display_path(diagnostic.path, base_dir)}({diagnostic.line},{diagnostic.column}): "
        f"{diagnostic.severity.value} {diagnostic_id(diagnostic.code, prefix)}: {diagnostic.message}"
    )


def format_summary(errors: int, warnings: int, tool_name: str = "udonsharp-lint") -> str:
    return f"[{tool_name}] Summary: {errors} errors, {warnings} warnings"


def to_json(
    diagnostics: Sequence[Diagnostic],
    *,
    base_dir: Path,
    errors: int,
    warnings: int,
    prefix: str = "UDON",
    tool_name: str = "udonsharp-lint",
) -> str:
    """JSON document with every diagnostic and the run totals."""
    items: list[dict[str, Any]] = []
    for diagnostic in diagnostics:
        item = diagnostic.to_dict()
        item["path"] = display_path(diagnostic.path, base_dir)
        item["id"] = diagnostic_id(diagnostic.code, prefix)
        items.append(item)
    document = {
        "tool": tool_name,
        "diagnostics": items,
        "summary": {"errors": errors, "warnings": warnings, "passed": errors == 0},
    }
    return json.dumps(document, indent=2)
