"""Helpers over tree-sitter-c-sharp nodes.

The grammar exposes some constructs through fields (``name``, ``type``,
``body``) and others only as anonymous tokens or ``modifier`` children, so
the accessors here look at both forms.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

# C# preprocessor wrapper node types that may contain declarations.
# Tree-sitter wraps code inside #if/#region blocks under these types.
PREPROC_WRAPPERS = frozenset(
    {
        "preproc_if",
        "preproc_ifdef",
        "preproc_elif",
        "preproc_else",
        "preproc_region",
    }
)

TYPE_DECLARATIONS = frozenset(
    {
        "class_declaration",
        "struct_declaration",
        "interface_declaration",
        "enum_declaration",
        "record_declaration",
        "record_struct_declaration",
    }
)

# Type declarations that may hold fields and methods (enums only hold members)
MEMBER_HOLDING_TYPES = TYPE_DECLARATIONS - {"enum_declaration"}

NAMESPACE_DECLARATIONS = frozenset({"namespace_declaration", "file_scoped_namespace_declaration"})

# Members whose bodies open a lexical scope
FUNCTION_MEMBERS = frozenset(
    {
        "method_declaration",
        "constructor_declaration",
        "destructor_declaration",
        "operator_declaration",
        "conversion_operator_declaration",
        "property_declaration",
        "indexer_declaration",
        "event_declaration",
        "field_declaration",
    }
)

THIS_NODES = frozenset({"this", "this_expression"})
BASE_NODES = frozenset({"base", "base_expression"})


def text(node: Any) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def same_node(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def descendants(node: Any, types: frozenset[str] | set[str] | None = None) -> Iterator[Any]:
    """Yield ``node`` and all nodes below it in pre-order, optionally filtered by type."""
    stack = [node]
    while stack:
        current = stack.pop()
        if types is None or current.type in types:
            yield current
        stack.extend(reversed(current.children))


def ancestors(node: Any) -> Iterator[Any]:
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def enclosing(node: Any, types: frozenset[str] | set[str]) -> Any | None:
    """Nearest ancestor of one of ``types``."""
    for parent in ancestors(node):
        if parent.type in types:
            return parent
    return None


def flatten_members(container: Any) -> Iterator[Any]:
    """Yield the member declarations of a declaration_list, looking through #if/#region."""
    for child in container.children:
        if child.type in PREPROC_WRAPPERS:
            yield from flatten_members(child)
        elif child.is_named:
            yield child


def type_members(type_node: Any) -> list[Any]:
    body = type_node.child_by_field_name("body")
    if body is None:
        return []
    return list(flatten_members(body))


def name_of(node: Any) -> str:
    name = node.child_by_field_name("name")
    if name is not None:
        return text(name)
    for child in node.children:
        if child.type == "identifier":
            return text(child)
    return ""


def modifiers(node: Any) -> set[str]:
    """Modifier keywords of a declaration (``static``, ``async``, ``ref``...)."""
    found: set[str] = set()
    for child in node.children:
        if child.type == "modifier":
            found.update(text(child).split())
    return found


def has_type_parameters(node: Any) -> bool:
    if node.child_by_field_name("type_parameters") is not None:
        return True
    return any(child.type == "type_parameter_list" for child in node.children)


def type_parameter_list(node: Any) -> Any | None:
    tp = node.child_by_field_name("type_parameters")
    if tp is not None:
        return tp
    for child in node.children:
        if child.type == "type_parameter_list":
            return child
    return None


# =============================================================================
# Names
# =============================================================================


def simple_type_name(type_text: str) -> str:
    """``global::System.Collections.Generic.List<int>[]`` -> ``List``."""
    name = type_text.strip()
    if "<" in name:
        name = name[: name.index("<")]
    name = name.split("::")[-1]
    name = name.rstrip("[]?, ")
    if "[" in name:
        name = name[: name.index("[")]
    return name.rsplit(".", 1)[-1].strip()


def attribute_simple_name(name_text: str) -> str:
    """``System.SerializableAttribute`` -> ``Serializable``."""
    return simple_type_name(name_text).removesuffix("Attribute")


@dataclass(frozen=True, slots=True)
class AttributeUse:
    name: str  # normalized simple name
    node: Any
    arguments: str  # raw text of the argument list, "" when absent


def attributes(node: Any) -> list[AttributeUse]:
    """Attributes applied directly to a declaration."""
    found: list[AttributeUse] = []
    for child in node.children:
        if child.type != "attribute_list":
            continue
        for attr in child.named_children:
            if attr.type != "attribute":
                continue
            name_node = attr.child_by_field_name("name")
            if name_node is None:
                name_node = next((c for c in attr.named_children), None)
            args = next((c for c in attr.children if c.type == "attribute_argument_list"), None)
            found.append(AttributeUse(attribute_simple_name(text(name_node)), attr, text(args)))
    return found


def has_attribute(node: Any, name: str) -> bool:
    target = attribute_simple_name(name)
    return any(a.name == target for a in attributes(node))


def base_types(type_node: Any) -> list[Any]:
    """Type nodes listed in a declaration's base list."""
    base_list = next((c for c in type_node.children if c.type == "base_list"), None)
    if base_list is None:
        return []
    found = []
    for child in base_list.named_children:
        if child.type == "primary_constructor_base_type":
            inner = child.child_by_field_name("type") or next(iter(child.named_children), None)
            if inner is not None:
                found.append(inner)
        elif child.type != "argument_list":
            found.append(child)
    return found


# =============================================================================
# Namespaces and usings
# =============================================================================


def namespace_name(ns_node: Any) -> str:
    name = ns_node.child_by_field_name("name")
    if name is not None:
        return text(name)
    for child in ns_node.children:
        if child.type in ("qualified_name", "identifier"):
            return text(child)
    return ""


def file_scoped_namespace(root: Any) -> str:
    for child in root.children:
        if child.type == "file_scoped_namespace_declaration":
            return namespace_name(child)
        if child.type in PREPROC_WRAPPERS:
            found = file_scoped_namespace(child)
            if found:
                return found
    return ""


def namespace_of(node: Any, file_namespace: str = "") -> str:
    """Namespace enclosing ``node``, composing nested block namespaces."""
    parts = [namespace_name(p) for p in ancestors(node) if p.type == "namespace_declaration"]
    parts.reverse()
    if file_namespace:
        parts.insert(0, file_namespace)
    return ".".join(p for p in parts if p)


@dataclass(frozen=True, slots=True)
class UsingDirective:
    target: str
    alias: str | None = None
    is_static: bool = False


def using_directives(root: Any) -> list[UsingDirective]:
    """Using directives anywhere in the file (top level or inside namespaces)."""
    found: list[UsingDirective] = []
    for node in descendants(root, frozenset({"using_directive"})):
        children = node.children
        is_static = any(c.type == "static" for c in children)
        has_equals = any(c.type == "=" for c in children)
        names = [c for c in children if c.type in ("qualified_name", "identifier", "generic_name")]
        if not names:
            continue
        name_equals = next((c for c in children if c.type == "name_equals"), None)
        if name_equals is not None:
            found.append(UsingDirective(text(names[-1]), alias=name_of(name_equals)))
        elif has_equals and len(names) >= 2:
            found.append(UsingDirective(text(names[-1]), alias=text(names[0])))
        else:
            found.append(UsingDirective(text(names[-1]), is_static=is_static))
    return found


# =============================================================================
# Parameters
# =============================================================================

_PARAMETER_FLAGS = frozenset({"ref", "out", "in", "params", "this"})


@dataclass(frozen=True, slots=True)
class Parameter:
    node: Any  # parameter node, or first token of a bare params array
    name: str
    type_text: str
    flags: frozenset[str]
    has_default: bool

    @property
    def is_by_reference(self) -> bool:
        return "ref" in self.flags or "out" in self.flags

    @property
    def is_params(self) -> bool:
        return "params" in self.flags


def _parameter_from_nodes(group: list[Any]) -> Parameter | None:
    nodes = group
    if len(group) == 1 and group[0].type == "parameter":
        nodes = list(group[0].children)
    flags: set[str] = set()
    has_default = False
    type_text = ""
    name = ""
    for node in nodes:
        node_text = text(node)
        if node.type == "modifier" or node.type == "parameter_modifier":
            flags.update(w for w in node_text.split() if w in _PARAMETER_FLAGS)
        elif not node.is_named and node_text in _PARAMETER_FLAGS:
            flags.add(node_text)
        elif node.type == "=" or node.type == "equals_value_clause":
            has_default = True
        elif node.type == "ref_type":
            flags.add("ref")
    owner = group[0] if len(group) == 1 else None
    if owner is not None and owner.type == "parameter":
        type_node = owner.child_by_field_name("type")
        type_text = text(type_node)
        name = text(owner.child_by_field_name("name")) or name_of(owner)
        if type_node is not None and type_node.type == "ref_type":
            flags.add("ref")
    else:
        named = [n for n in nodes if n.is_named and n.type not in ("attribute_list", "modifier")]
        if named:
            name = text(named[-1])
            if len(named) > 1:
                type_text = text(named[-2])
    if not name and not type_text:
        return None
    return Parameter(group[0], name, type_text, frozenset(flags), has_default)


def parameters(node: Any) -> list[Parameter]:
    """Parameters of a method-like declaration or lambda."""
    plist = node.child_by_field_name("parameters")
    if plist is None:
        plist = next((c for c in node.children if c.type == "parameter_list"), None)
    if plist is None:
        return []
    if plist.type in ("identifier", "implicit_parameter"):
        # x => ... (single untyped lambda parameter)
        return [Parameter(plist, text(plist), "", frozenset(), False)]
    groups: list[list[Any]] = [[]]
    for child in plist.children:
        if child.type in ("(", ")"):
            continue
        if child.type == ",":
            groups.append([])
            continue
        groups[-1].append(child)
    params = []
    for group in groups:
        if group:
            param = _parameter_from_nodes(group)
            if param is not None:
                params.append(param)
    return params


def argument_count(invocation: Any) -> int:
    args = invocation.child_by_field_name("arguments")
    if args is None:
        return 0
    return sum(1 for c in args.named_children if c.type == "argument")


def arguments(invocation: Any) -> list[Any]:
    """Expression nodes of an invocation's arguments, in order."""
    args = invocation.child_by_field_name("arguments")
    if args is None:
        return []
    found = []
    for arg in args.named_children:
        if arg.type != "argument":
            continue
        expr = arg.child_by_field_name("expression")
        if expr is None:
            named = [c for c in arg.named_children if c.type != "name_colon"]
            expr = named[-1] if named else None
        found.append(expr)
    return found


# =============================================================================
# Variables
# =============================================================================


@dataclass(frozen=True, slots=True)
class Declarator:
    name: str
    node: Any
    initializer: Any | None


def declarators(variable_declaration: Any) -> list[Declarator]:
    found = []
    for child in variable_declaration.named_children:
        if child.type != "variable_declarator":
            continue
        name = child.child_by_field_name("name")
        if name is None:
            name = next((c for c in child.children if c.type == "identifier"), None)
        if name is None:
            continue
        init = None
        seen_equals = False
        for sub in child.children:
            if sub.type == "equals_value_clause":
                init = next(iter(sub.named_children), None)
                break
            if sub.type == "=":
                seen_equals = True
            elif seen_equals and sub.is_named:
                init = sub
                break
        found.append(Declarator(text(name), name, init))
    return found


def variable_declaration(node: Any) -> Any | None:
    for child in node.children:
        if child.type == "variable_declaration":
            return child
    return None
