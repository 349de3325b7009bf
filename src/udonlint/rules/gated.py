"""Call-graph-gated rules - evaluated only on helper files invoked from entry points."""

from __future__ import annotations

from collections.abc import Iterator

from udonlint.analysis.models import SymbolKind
from udonlint.parsing import nodes
from udonlint.rules.models import Finding, RuleInput
from udonlint.rules.semantic import plain_data_owner

_METHODS = frozenset({"method_declaration"})
_MEMBER_ACCESSES = frozenset({"member_access_expression"})


def static_method_field_access(rule_input: RuleInput) -> Iterator[Finding]:
    """Plain-data field reads inside static routines of a called helper file."""
    graph = rule_input.graph
    if graph is None or not graph.callers_of(rule_input.tree.path):
        return
    model = rule_input.model()
    base = rule_input.config.base_type
    for method in nodes.descendants(rule_input.tree.root, _METHODS):
        if "static" not in nodes.modifiers(method):
            continue
        method_name = nodes.name_of(method)
        for node in nodes.descendants(method, _MEMBER_ACCESSES):
            symbol = rule_input.resolve(model.resolve_member_access, node)
            owner = plain_data_owner(model.context, symbol, SymbolKind.FIELD)
            if owner is None or symbol is None:
                continue
            yield node, (
                "UdonSharp does not support field access to custom classes in static methods called from UdonSharp. "
                f"Field '{symbol.name}' of type '{owner.name}' is accessed in static method '{method_name}'. "
                f"Move the logic to a {base} class where field access is supported."
            )
