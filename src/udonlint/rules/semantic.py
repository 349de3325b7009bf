"""Semantic rules - cross-file locality of plain-data types.

A plain-data type (marker-annotated, not deriving the sandboxed base) may
only be touched from the single file that declares it, and only when no
other file references it. Sites that cannot be resolved, or whose
resolution fails, are skipped.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any

from udonlint.analysis.context import CompilationContext
from udonlint.analysis.models import Symbol, SymbolKind, TypeDecl
from udonlint.parsing import nodes
from udonlint.rules.models import Finding, RuleInput

_MEMBER_ACCESSES = frozenset({"member_access_expression"})
_INVOCATIONS = frozenset({"invocation_expression"})


def plain_data_owner(context: CompilationContext, symbol: Symbol | None, kind: SymbolKind) -> TypeDecl | None:
    """Containing type of ``symbol`` when it is a ``kind`` member of a plain-data type."""
    if symbol is None or symbol.kind is not kind or symbol.containing_type is None:
        return None
    if not context.is_plain_data_type(symbol.containing_type):
        return None
    return symbol.containing_type


def _field_accesses(rule_input: RuleInput) -> Iterator[tuple[Any, TypeDecl]]:
    model = rule_input.model()
    for node in nodes.descendants(rule_input.tree.root, _MEMBER_ACCESSES):
        symbol = rule_input.resolve(model.resolve_member_access, node)
        owner = plain_data_owner(model.context, symbol, SymbolKind.FIELD)
        if owner is not None:
            yield node, owner


def cross_file_field_access(rule_input: RuleInput) -> Iterator[Finding]:
    context = rule_input.model().context
    for node, owner in _field_accesses(rule_input):
        if rule_input.tree.path not in owner.declaring_files:
            yield node, (
                "UdonSharp does not support field access to custom classes defined in other files. "
                f"Type '{owner.name}' is defined in '{os.path.basename(owner.path)}'. "
                "Move the class definition to this file as a top-level class."
            )
        elif context.is_shared(owner):
            yield node, (
                "UdonSharp does not support field access to custom classes that are shared across multiple files. "
                f"Type '{owner.name}' is defined in this file but also used in other files. "
                "Custom serializable classes must be defined and used only within a single file."
            )


def cross_file_method_invocation(rule_input: RuleInput) -> Iterator[Finding]:
    model = rule_input.model()
    for node in nodes.descendants(rule_input.tree.root, _INVOCATIONS):
        symbol = rule_input.resolve(model.resolve_invocation, node)
        owner = plain_data_owner(model.context, symbol, SymbolKind.METHOD)
        if owner is None or symbol is None or symbol.is_static:
            continue
        if rule_input.tree.path not in owner.declaring_files:
            yield node, (
                "UdonSharp does not support method invocations on custom classes defined in other files. "
                f"Method '{symbol.name}' on type '{owner.name}' is defined in '{os.path.basename(owner.path)}'. "
                "Use field access or refactor to return values directly from the owning class."
            )
        elif model.context.is_shared(owner):
            yield node, (
                "UdonSharp does not support method invocations on custom classes that are shared across multiple files. "
                f"Method '{symbol.name}' on type '{owner.name}' is defined in this file but the type is also used in "
                "other files. Custom serializable classes must be defined and used only within a single file."
            )


def serializable_class_usage(rule_input: RuleInput) -> Iterator[Finding]:
    base = rule_input.config.base_type
    for node, owner in _field_accesses(rule_input):
        yield node, (
            "UdonSharp does not support [System.Serializable] classes. "
            f"Type '{owner.name}' must inherit from {base}. "
            f"Consider converting '{owner.name}' to a {base} class."
        )
