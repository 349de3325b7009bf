"""Lexical bindings of function-like members.

Bindings are flattened per member (method, constructor, property, field
initializer...): C# rejects a simple name meaning two different things in
overlapping scopes, so one name -> binding map per member is enough to
type local expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from udonlint.parsing import nodes
from udonlint.parsing.models import SyntaxTree

MemberKey = tuple[int, int, str]

_LAMBDAS = frozenset(
    {
        "lambda_expression",
        "anonymous_method_expression",
        "local_function_statement",
    }
)

_BINDING_SITES = _LAMBDAS | frozenset(
    {
        "variable_declaration",
        "foreach_statement",
        "catch_declaration",
        "declaration_expression",
        "declaration_pattern",
    }
)


@dataclass(frozen=True, slots=True)
class Binding:
    name: str
    kind: str  # parameter, local, foreach, catch, pattern, local_function
    type_text: str  # "var" or "" when implicit
    initializer: Any | None = None
    foreach_source: Any | None = None


def member_key(node: Any) -> MemberKey:
    return (node.start_byte, node.end_byte, node.type)


def enclosing_member(node: Any) -> Any | None:
    if node.type in nodes.FUNCTION_MEMBERS:
        return node
    return nodes.enclosing(node, nodes.FUNCTION_MEMBERS)


def _is_member_own_declaration(site: Any, member: Any) -> bool:
    return site.type == "variable_declaration" and member.type == "field_declaration" and nodes.same_node(
        site.parent, member
    )


def _site_bindings(site: Any) -> list[Binding]:
    kind = site.type
    if kind == "variable_declaration":
        type_text = nodes.text(site.child_by_field_name("type"))
        return [Binding(d.name, "local", type_text, initializer=d.initializer) for d in nodes.declarators(site)]
    if kind == "foreach_statement":
        left = site.child_by_field_name("left")
        if left is None or left.type != "identifier":
            return []
        return [
            Binding(
                nodes.text(left),
                "foreach",
                nodes.text(site.child_by_field_name("type")),
                foreach_source=site.child_by_field_name("right"),
            )
        ]
    if kind in ("catch_declaration", "declaration_expression", "declaration_pattern"):
        name = site.child_by_field_name("name")
        if name is None or name.type != "identifier":
            return []
        label = "catch" if kind == "catch_declaration" else "pattern"
        return [Binding(nodes.text(name), label, nodes.text(site.child_by_field_name("type")))]
    # lambdas and local functions
    found = [Binding(p.name, "parameter", p.type_text) for p in nodes.parameters(site) if p.name]
    if kind == "local_function_statement":
        found.append(Binding(nodes.name_of(site), "local_function", ""))
    return found


def member_bindings(member: Any) -> MappingProxyType[str, Binding]:
    bindings: dict[str, Binding] = {}
    if member.type != "field_declaration":
        for param in nodes.parameters(member):
            if param.name:
                bindings.setdefault(param.name, Binding(param.name, "parameter", param.type_text))
    for site in nodes.descendants(member, _BINDING_SITES):
        if _is_member_own_declaration(site, member):
            continue
        for binding in _site_bindings(site):
            bindings.setdefault(binding.name, binding)
    return MappingProxyType(bindings)


def collect_scopes(tree: SyntaxTree) -> MappingProxyType[MemberKey, MappingProxyType[str, Binding]]:
    """Bindings for every function-like member of a file."""
    scopes: dict[MemberKey, MappingProxyType[str, Binding]] = {}
    for member in nodes.descendants(tree.root, nodes.FUNCTION_MEMBERS):
        scopes[member_key(member)] = member_bindings(member)
    return MappingProxyType(scopes)
