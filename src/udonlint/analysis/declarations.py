"""Declaration collection from a single syntax tree.

Produces a ``FileOutline``: the file's namespace, using directives and every
type declaration with its fields, properties and methods. Needs nothing but
the tree, so it runs per file in phase 1.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from udonlint.analysis.models import (
    FieldDecl,
    FileOutline,
    MethodDecl,
    TypeFragment,
    TypeKind,
    TypeRef,
)
from udonlint.parsing import nodes
from udonlint.parsing.models import SyntaxTree

_KINDS = {
    "class_declaration": TypeKind.CLASS,
    "struct_declaration": TypeKind.STRUCT,
    "interface_declaration": TypeKind.INTERFACE,
    "enum_declaration": TypeKind.ENUM,
    "record_declaration": TypeKind.RECORD,
    "record_struct_declaration": TypeKind.RECORD,
}


def qualified_type_name(type_node: Any, file_namespace: str) -> str:
    """``Namespace.Outer.Inner`` for a type declaration node."""
    names = [nodes.name_of(type_node)]
    names.extend(nodes.name_of(p) for p in nodes.ancestors(type_node) if p.type in nodes.TYPE_DECLARATIONS)
    names.reverse()
    namespace = nodes.namespace_of(type_node, file_namespace)
    return ".".join([namespace, *names]) if namespace else ".".join(names)


def _outer_type(type_node: Any, file_namespace: str) -> str | None:
    outer = nodes.enclosing(type_node, nodes.TYPE_DECLARATIONS)
    if outer is None:
        return None
    return qualified_type_name(outer, file_namespace)


def _field_decls(member: Any, tree: SyntaxTree) -> list[FieldDecl]:
    mods = nodes.modifiers(member)
    decl = nodes.variable_declaration(member)
    if decl is None:
        return []
    type_ref = TypeRef.parse(nodes.text(decl.child_by_field_name("type")))
    is_const = "const" in mods
    return [
        FieldDecl(
            name=d.name,
            type=type_ref,
            path=tree.path,
            span=tree.span(d.node),
            is_static=is_const or "static" in mods,
            is_const=is_const,
        )
        for d in nodes.declarators(decl)
    ]


def _property_decl(member: Any, tree: SyntaxTree) -> FieldDecl | None:
    name = member.child_by_field_name("name")
    if name is None:
        return None
    mods = nodes.modifiers(member)
    return FieldDecl(
        name=nodes.text(name),
        type=TypeRef.parse(nodes.text(member.child_by_field_name("type"))),
        path=tree.path,
        span=tree.span(name),
        is_static="static" in mods,
        is_property=True,
    )


def _method_decl(member: Any, tree: SyntaxTree) -> MethodDecl:
    params = nodes.parameters(member)
    returns = nodes.text(member.child_by_field_name("returns") or member.child_by_field_name("type"))
    regular = [p for p in params if not p.is_params]
    name = member.child_by_field_name("name")
    return MethodDecl(
        name=nodes.name_of(member),
        return_type=None if returns.strip() == "void" else TypeRef.parse(returns),
        path=tree.path,
        span=tree.span(name if name is not None else member),
        is_static="static" in nodes.modifiers(member),
        required_parameters=sum(1 for p in regular if not p.has_default),
        total_parameters=len(regular),
        has_params_array=len(regular) != len(params),
    )


def _fragment(type_node: Any, tree: SyntaxTree, file_namespace: str) -> TypeFragment:
    fields: list[FieldDecl] = []
    methods: list[MethodDecl] = []
    if type_node.type in nodes.MEMBER_HOLDING_TYPES:
        for member in nodes.type_members(type_node):
            if member.type == "field_declaration":
                fields.extend(_field_decls(member, tree))
            elif member.type == "property_declaration":
                prop = _property_decl(member, tree)
                if prop is not None:
                    fields.append(prop)
            elif member.type == "method_declaration":
                methods.append(_method_decl(member, tree))

    type_params = nodes.type_parameter_list(type_node)
    name_node = type_node.child_by_field_name("name")
    return TypeFragment(
        name=nodes.name_of(type_node),
        qualified_name=qualified_type_name(type_node, file_namespace),
        namespace=nodes.namespace_of(type_node, file_namespace),
        kind=_KINDS[type_node.type],
        path=tree.path,
        span=tree.span(name_node if name_node is not None else type_node),
        node=type_node,
        base_names=tuple(nodes.text(b) for b in nodes.base_types(type_node)),
        attributes=frozenset(a.name for a in nodes.attributes(type_node)),
        fields=tuple(fields),
        methods=tuple(methods),
        is_partial="partial" in nodes.modifiers(type_node),
        outer_type=_outer_type(type_node, file_namespace),
        type_parameter_count=(
            sum(1 for c in type_params.named_children if c.type == "type_parameter")
            if type_params is not None
            else 0
        ),
    )


def collect_outline(tree: SyntaxTree, marker_import: str) -> FileOutline:
    """Collect the declarations and imports of one file."""
    root = tree.root
    file_namespace = nodes.file_scoped_namespace(root)

    usings: list[str] = []
    static_usings: list[str] = []
    aliases: dict[str, str] = {}
    for using in nodes.using_directives(root):
        if using.alias is not None:
            aliases[using.alias] = using.target
        elif using.is_static:
            static_usings.append(using.target)
        else:
            usings.append(using.target)

    types = tuple(
        _fragment(node, tree, file_namespace)
        for node in nodes.descendants(root, nodes.TYPE_DECLARATIONS)
    )
    return FileOutline(
        path=tree.path,
        namespace=file_namespace,
        usings=tuple(usings),
        static_usings=tuple(static_usings),
        aliases=MappingProxyType(aliases),
        types=types,
        has_marker_import=marker_import in usings,
    )
