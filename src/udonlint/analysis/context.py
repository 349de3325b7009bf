"""Whole-program symbol space.

The ``CompilationContext`` is built exactly once per run, after every file
has been parsed, and is never mutated afterwards: all tables are frozen
mappings so rule workers can read it concurrently without locking.

Resolution goes through a per-file ``SemanticModel`` (tree-sitter nodes do
not know which file they came from). Every resolution operation returns
``None`` when the target cannot be determined uniquely: unknown names,
external library types, ambiguous overloads. Callers treat ``None`` as
"no opinion", never as a violation.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Executor
from types import MappingProxyType
from typing import Any

from udonlint.analysis.declarations import collect_outline, qualified_type_name
from udonlint.analysis.models import (
    FieldDecl,
    FileOutline,
    MethodDecl,
    Symbol,
    SymbolKind,
    TypeDecl,
    TypeFragment,
    TypeKind,
    TypeRef,
)
from udonlint.analysis.scopes import Binding, MemberKey, collect_scopes, enclosing_member, member_key
from udonlint.config.models import AnalysisConfig
from udonlint.core.logging import get_logger
from udonlint.parsing import nodes
from udonlint.parsing.models import SyntaxTree

log = get_logger("analysis.context")

_MAX_DEPTH = 24

# Identifiers in these positions declare a name rather than reference one
_DECLARING_PARENTS = frozenset(
    {
        *nodes.TYPE_DECLARATIONS,
        *nodes.NAMESPACE_DECLARATIONS,
        "method_declaration",
        "constructor_declaration",
        "destructor_declaration",
        "property_declaration",
        "event_declaration",
        "local_function_statement",
        "variable_declarator",
        "parameter",
        "type_parameter",
        "enum_member_declaration",
        "catch_declaration",
        "declaration_expression",
        "declaration_pattern",
        "labeled_statement",
        "name_colon",
        "name_equals",
    }
)

Scopes = Mapping[MemberKey, Mapping[str, Binding]]
ErrorHandler = Callable[[str, Exception], None]


def _namespace_visible(type_namespace: str, from_namespace: str, usings: Iterable[str]) -> bool:
    if not type_namespace:
        return True
    if from_namespace == type_namespace or from_namespace.startswith(type_namespace + "."):
        return True
    return type_namespace in usings


def _merge_fragments(outlines: Iterable[FileOutline]) -> dict[str, TypeDecl]:
    grouped: dict[str, list[TypeFragment]] = {}
    for outline in sorted(outlines, key=lambda o: o.path):
        for fragment in outline.types:
            grouped.setdefault(fragment.qualified_name, []).append(fragment)

    merged: dict[str, TypeDecl] = {}
    for qualified, fragments in grouped.items():
        first = fragments[0]
        fields: dict[str, FieldDecl] = {}
        methods: dict[str, list[MethodDecl]] = {}
        base_names: list[str] = []
        attributes: set[str] = set()
        for fragment in fragments:
            for fld in fragment.fields:
                fields.setdefault(fld.name, fld)
            for method in fragment.methods:
                methods.setdefault(method.name, []).append(method)
            base_names.extend(b for b in fragment.base_names if b not in base_names)
            attributes.update(fragment.attributes)
        merged[qualified] = TypeDecl(
            name=first.name,
            qualified_name=qualified,
            namespace=first.namespace,
            kind=first.kind,
            path=first.path,
            span=first.span,
            base_names=tuple(base_names),
            attributes=frozenset(attributes),
            fields=MappingProxyType(fields),
            methods=MappingProxyType({k: tuple(v) for k, v in methods.items()}),
            declaring_files=frozenset(f.path for f in fragments),
            outer_type=first.outer_type,
            type_parameter_count=first.type_parameter_count,
            ambiguous=len(fragments) > 1 and not all(f.is_partial for f in fragments),
        )
    return merged


class CompilationContext:
    """Immutable aggregate of every parsed tree and its declarations.

    Usage::

        context = CompilationContext.build(trees, config)
        model = context.semantic_model(path)
        symbol = model.resolve_member_access(node)
    """

    def __init__(
        self,
        trees: Mapping[str, SyntaxTree],
        outlines: Mapping[str, FileOutline],
        config: AnalysisConfig,
    ) -> None:
        self.config = config
        self._trees = MappingProxyType(dict(sorted(trees.items())))
        self._outlines = MappingProxyType(dict(outlines))
        self._types = MappingProxyType(_merge_fragments(outlines.values()))

        by_name: dict[str, list[TypeDecl]] = {}
        for decl in self._types.values():
            by_name.setdefault(decl.name, []).append(decl)
        self._by_name = MappingProxyType({k: tuple(v) for k, v in by_name.items()})

        self._bases = MappingProxyType({q: self._resolve_bases(d) for q, d in self._types.items()})
        memo: dict[str, bool] = {}
        for decl in self._types.values():
            self._compute_inherits(decl, memo, set())
        self._inherits = MappingProxyType(memo)

        self._scopes: Mapping[str, Scopes] = MappingProxyType({})
        self._referencing_files: Mapping[str, frozenset[str]] = MappingProxyType({})

    @classmethod
    def build(
        cls,
        trees: Mapping[str, SyntaxTree],
        config: AnalysisConfig,
        *,
        outlines: Mapping[str, FileOutline] | None = None,
        executor: Executor | None = None,
        on_error: ErrorHandler | None = None,
    ) -> CompilationContext:
        """Build the context from a complete set of trees.

        Per-file indexing (lexical scopes and type references) runs on
        ``executor`` when given. A file whose indexing raises is reported to
        ``on_error`` and left without scopes; without a handler the
        exception propagates.
        """
        start = time.perf_counter()
        if outlines is None:
            outlines = {path: collect_outline(tree, config.marker_import) for path, tree in trees.items()}
        context = cls(trees, outlines, config)

        def index(path: str) -> tuple[str, Scopes, set[str]] | None:
            try:
                scopes = collect_scopes(context._trees[path])
                return path, scopes, context._scan_type_references(path, scopes)
            except Exception as e:
                if on_error is None:
                    raise
                on_error(path, e)
                return None

        paths = list(context._trees)
        results = list(executor.map(index, paths)) if executor is not None else [index(p) for p in paths]

        scopes_by_file: dict[str, Scopes] = {}
        referencing: dict[str, set[str]] = {}
        for result in results:
            if result is None:
                continue
            path, scopes, referenced = result
            scopes_by_file[path] = scopes
            for qualified in referenced:
                referencing.setdefault(qualified, set()).add(path)

        context._scopes = MappingProxyType(scopes_by_file)
        context._referencing_files = MappingProxyType({q: frozenset(p) for q, p in referencing.items()})
        log.debug(
            "compilation_context_built",
            files=len(paths),
            types=len(context._types),
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return context

    # ------------------------------------------------------------------
    # Corpus views
    # ------------------------------------------------------------------

    @property
    def paths(self) -> list[str]:
        return list(self._trees)

    def tree(self, path: str) -> SyntaxTree | None:
        return self._trees.get(path)

    def outline(self, path: str) -> FileOutline | None:
        return self._outlines.get(path)

    def types(self) -> list[TypeDecl]:
        return list(self._types.values())

    def type(self, qualified_name: str) -> TypeDecl | None:
        return self._types.get(qualified_name)

    def types_named(self, name: str) -> tuple[TypeDecl, ...]:
        return self._by_name.get(name, ())

    def semantic_model(self, path: str) -> SemanticModel:
        tree = self._trees[path]
        return SemanticModel(self, tree, self._outlines[path], self._scopes.get(path, MappingProxyType({})))

    # ------------------------------------------------------------------
    # Type classification
    # ------------------------------------------------------------------

    def bases_of(self, decl: TypeDecl) -> tuple[TypeDecl, ...]:
        """Corpus types named in ``decl``'s base list (external bases omitted)."""
        return self._bases.get(decl.qualified_name, ())

    def inherits_from_base(self, decl: TypeDecl) -> bool:
        """True if ``decl`` reaches the sandboxed base type through its base chain."""
        return self._inherits.get(decl.qualified_name, False)

    def is_external(self, decl: TypeDecl) -> bool:
        return any(
            decl.namespace == ns or decl.namespace.startswith(ns + ".") for ns in self.config.external_namespaces
        )

    def is_plain_data_type(self, decl: TypeDecl) -> bool:
        """Marker-annotated type that does not inherit the sandboxed base."""
        if self.is_external(decl) or self.inherits_from_base(decl):
            return False
        return decl.has_attribute(frozenset(self.config.serializable_attributes))

    def referencing_files(self, decl: TypeDecl) -> frozenset[str]:
        """Files with at least one identifier resolving to ``decl``."""
        return self._referencing_files.get(decl.qualified_name, frozenset())

    def is_shared(self, decl: TypeDecl) -> bool:
        """Referenced from a file other than its declaring file."""
        return any(path not in decl.declaring_files for path in self.referencing_files(decl))

    # ------------------------------------------------------------------
    # Member lookup (walks corpus base chains)
    # ------------------------------------------------------------------

    def _chain(self, decl: TypeDecl) -> list[TypeDecl]:
        chain: list[TypeDecl] = []
        seen: set[str] = set()
        pending = [decl]
        while pending:
            current = pending.pop(0)
            if current.qualified_name in seen:
                continue
            seen.add(current.qualified_name)
            chain.append(current)
            pending.extend(self.bases_of(current))
        return chain

    def find_field(self, decl: TypeDecl, name: str) -> tuple[TypeDecl, FieldDecl] | None:
        for owner in self._chain(decl):
            fld = owner.fields.get(name)
            if fld is not None:
                return owner, fld
        return None

    def find_methods(self, decl: TypeDecl, name: str) -> tuple[TypeDecl, tuple[MethodDecl, ...]] | None:
        """Methods named ``name`` on the nearest type in the chain that declares any."""
        for owner in self._chain(decl):
            methods = owner.methods.get(name)
            if methods:
                return owner, methods
        return None

    def nested_type(self, decl: TypeDecl, name: str) -> TypeDecl | None:
        return self._types.get(f"{decl.qualified_name}.{name}")

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------

    def resolve_type_name(
        self,
        type_text: str,
        *,
        path: str,
        namespace: str,
        enclosing: tuple[str, ...] = (),
    ) -> TypeDecl | None:
        """Resolve a type as written at a site in ``path``.

        ``enclosing`` holds qualified names of the types around the site,
        innermost first.
        """
        ref = TypeRef.parse(type_text)
        if ref is None:
            return None
        return self.resolve_type_ref(ref, path=path, namespace=namespace, enclosing=enclosing)

    def resolve_type_ref(
        self,
        ref: TypeRef,
        *,
        path: str,
        namespace: str,
        enclosing: tuple[str, ...] = (),
    ) -> TypeDecl | None:
        outline = self._outlines.get(path)
        usings: tuple[str, ...] = outline.usings if outline is not None else ()
        aliases: Mapping[str, str] = outline.aliases if outline is not None else {}

        qualifier = ref.qualifier
        if not qualifier and ref.name in aliases:
            return self.resolve_type_name(aliases[ref.name], path=path, namespace="", enclosing=())
        if qualifier:
            head, _, rest = qualifier.partition(".")
            if head in aliases:
                qualifier = ".".join(p for p in (aliases[head], rest) if p)

        candidates = self._by_name.get(ref.name, ())
        if not candidates:
            return None

        if qualifier:
            full = f"{qualifier}.{ref.name}"
            matches = [c for c in candidates if c.qualified_name == full]
            if not matches:
                matches = [
                    c
                    for c in candidates
                    if c.qualified_name.endswith("." + full)
                    and _namespace_visible(c.qualified_name[: -len(full) - 1], namespace, usings)
                ]
            return self._unique(matches)

        # Nested types of the enclosing types (and their bases) win over namespace members
        for outer in enclosing:
            outer_decl = self._types.get(outer)
            if outer_decl is None:
                continue
            for owner in self._chain(outer_decl):
                nested = self.nested_type(owner, ref.name)
                if nested is not None:
                    return None if nested.ambiguous else nested

        visible = [
            c
            for c in candidates
            if c.outer_type is None and _namespace_visible(c.namespace, namespace, usings)
        ]
        if len(visible) > 1 and namespace:
            # Types of the site's own namespace shadow imported ones
            own = [c for c in visible if c.namespace == namespace]
            if own:
                visible = own
        return self._unique(visible)

    @staticmethod
    def _unique(matches: list[TypeDecl]) -> TypeDecl | None:
        if len(matches) != 1 or matches[0].ambiguous:
            return None
        return matches[0]

    def _enclosing_chain(self, decl: TypeDecl) -> tuple[str, ...]:
        chain: list[str] = []
        outer = decl.outer_type
        while outer is not None:
            chain.append(outer)
            outer_decl = self._types.get(outer)
            outer = outer_decl.outer_type if outer_decl is not None else None
        return tuple(chain)

    def canonical_ref(self, ref: TypeRef | None, owner: TypeDecl, path: str) -> TypeRef | None:
        """Re-qualify a type written inside ``owner`` so it resolves from any file."""
        if ref is None:
            return None
        target = self.resolve_type_ref(
            ref,
            path=path,
            namespace=owner.namespace,
            enclosing=(owner.qualified_name, *self._enclosing_chain(owner)),
        )
        if target is None:
            return ref
        return ref_for(target, ref.array_rank)

    def _resolve_bases(self, decl: TypeDecl) -> tuple[TypeDecl, ...]:
        resolved: list[TypeDecl] = []
        for base in decl.base_names:
            target = self.resolve_type_name(
                base,
                path=decl.path,
                namespace=decl.namespace,
                enclosing=self._enclosing_chain(decl),
            )
            if target is not None and target.qualified_name != decl.qualified_name:
                resolved.append(target)
        return tuple(resolved)

    def _compute_inherits(self, decl: TypeDecl, memo: dict[str, bool], visiting: set[str]) -> bool:
        key = decl.qualified_name
        if key in memo:
            return memo[key]
        if key in visiting:
            # Cyclic base chain
            return False
        visiting.add(key)
        result = any(nodes.simple_type_name(b) == self.config.base_type for b in decl.base_names) or any(
            self._compute_inherits(base, memo, visiting) for base in self.bases_of(decl)
        )
        visiting.discard(key)
        memo[key] = result
        return result

    def _scan_type_references(self, path: str, scopes: Scopes) -> set[str]:
        tree = self._trees[path]
        outline = self._outlines[path]
        model = SemanticModel(self, tree, outline, scopes)
        referenced: set[str] = set()
        for node in nodes.descendants(tree.root, frozenset({"identifier"})):
            if nodes.text(node) not in self._by_name:
                continue
            decl = model.resolve_type_reference(node)
            if decl is not None:
                referenced.add(decl.qualified_name)
        return referenced


def ref_for(decl: TypeDecl, array_rank: int = 0) -> TypeRef:
    qualifier = decl.qualified_name[: -len(decl.name) - 1] if "." in decl.qualified_name else ""
    return TypeRef(decl.name, array_rank, qualifier)


class SemanticModel:
    """Resolution for nodes of one file against the whole corpus."""

    def __init__(
        self,
        context: CompilationContext,
        tree: SyntaxTree,
        outline: FileOutline,
        scopes: Mapping[MemberKey, Mapping[str, Binding]],
    ) -> None:
        self.context = context
        self.tree = tree
        self.outline = outline
        self._scopes = scopes

    @property
    def path(self) -> str:
        return self.tree.path

    # ------------------------------------------------------------------
    # Site context
    # ------------------------------------------------------------------

    def _enclosing_names(self, node: Any) -> tuple[str, ...]:
        names = []
        for parent in nodes.ancestors(node):
            if parent.type in nodes.TYPE_DECLARATIONS:
                names.append(qualified_type_name(parent, self.outline.namespace))
        return tuple(names)

    def _namespace(self, node: Any) -> str:
        return nodes.namespace_of(node, self.outline.namespace)

    def enclosing_type(self, node: Any) -> TypeDecl | None:
        for qualified in self._enclosing_names(node):
            return self.context.type(qualified)
        return None

    def _statically_imported(self, name: str) -> tuple[TypeDecl, tuple[MethodDecl, ...]] | None:
        """Static methods named ``name`` brought into scope by ``using static``; ambiguity is unknown."""
        matches: list[tuple[TypeDecl, tuple[MethodDecl, ...]]] = []
        for target in self.outline.static_usings:
            decl = self.context.resolve_type_name(target, path=self.path, namespace="")
            found = self.context.find_methods(decl, name) if decl is not None else None
            if found is None:
                continue
            owner, methods = found
            statics = tuple(m for m in methods if m.is_static)
            if statics:
                matches.append((owner, statics))
        return matches[0] if len(matches) == 1 else None

    def binding(self, node: Any, name: str) -> Binding | None:
        member = enclosing_member(node)
        if member is None:
            return None
        bindings = self._scopes.get(member_key(member))
        return bindings.get(name) if bindings is not None else None

    def lookup(self, ref: TypeRef | None, node: Any) -> TypeDecl | None:
        """Corpus type for ``ref`` as seen from ``node``'s position."""
        if ref is None or ref.is_implicit:
            return None
        return self.context.resolve_type_ref(
            ref,
            path=self.path,
            namespace=self._namespace(node),
            enclosing=self._enclosing_names(node),
        )

    # ------------------------------------------------------------------
    # Resolution operations
    # ------------------------------------------------------------------

    def resolve_type_reference(self, node: Any) -> TypeDecl | None:
        """Type named by an identifier, generic name or qualified name node."""
        if node.type == "identifier":
            parent = node.parent
            if parent is not None:
                if parent.type in _DECLARING_PARENTS and nodes.same_node(parent.child_by_field_name("name"), node):
                    return None
                if parent.type == "foreach_statement" and nodes.same_node(parent.child_by_field_name("left"), node):
                    return None
                if parent.type in ("qualified_name", "member_access_expression"):
                    if nodes.same_node(parent.child_by_field_name("name"), node):
                        if parent.type == "qualified_name":
                            return self.resolve_type_reference(parent)
                        return None
                if parent.type == "generic_name":
                    return self.resolve_type_reference(parent)
            if self.binding(node, nodes.text(node)) is not None:
                return None
            return self.lookup(TypeRef(nodes.text(node)), node)
        if node.type in ("generic_name", "qualified_name"):
            return self.lookup(TypeRef.parse(nodes.text(node)), node)
        return None

    def resolve_member_access(self, node: Any, _depth: int = 0) -> Symbol | None:
        """Field, property, method group or nested type named by ``expr.Name``."""
        if node is None or node.type != "member_access_expression" or _depth > _MAX_DEPTH:
            return None
        name = _simple_name(node.child_by_field_name("name"))
        decl = self._receiver_type(node.child_by_field_name("expression"), _depth + 1)
        if decl is None or not name:
            return None

        found = self.context.find_field(decl, name)
        if found is not None:
            owner, fld = found
            return Symbol(
                kind=SymbolKind.PROPERTY if fld.is_property else SymbolKind.FIELD,
                name=fld.name,
                path=fld.path,
                span=fld.span,
                containing_type=owner,
                is_static=fld.is_static,
                type=self.context.canonical_ref(fld.type, owner, fld.path),
                annotations=owner.attributes,
            )
        methods = self.context.find_methods(decl, name)
        if methods is not None:
            owner, overloads = methods
            if len(overloads) == 1:
                return self._method_symbol(owner, overloads[0])
            return None
        nested = self.context.nested_type(decl, name)
        if nested is not None:
            return _type_symbol(nested)
        return None

    def resolve_invocation(self, node: Any, _depth: int = 0) -> Symbol | None:
        """Method invoked by an invocation expression, filtered by argument count."""
        if node is None or node.type != "invocation_expression" or _depth > _MAX_DEPTH:
            return None
        function = node.child_by_field_name("function")
        if function is None:
            return None

        found: tuple[TypeDecl, tuple[MethodDecl, ...]] | None = None
        if function.type in ("identifier", "generic_name"):
            name = _simple_name(function)
            binding = self.binding(node, name)
            if binding is not None:
                # Local function or delegate-typed local
                return None
            for qualified in self._enclosing_names(node):
                decl = self.context.type(qualified)
                if decl is not None:
                    found = self.context.find_methods(decl, name)
                    if found is not None:
                        break
            if found is None:
                found = self._statically_imported(name)
        elif function.type == "member_access_expression":
            decl = self._receiver_type(function.child_by_field_name("expression"), _depth + 1)
            name = _simple_name(function.child_by_field_name("name"))
            if decl is not None and name:
                found = self.context.find_methods(decl, name)

        if found is None:
            return None
        owner, overloads = found
        argc = nodes.argument_count(node)
        applicable = [m for m in overloads if m.accepts(argc)]
        if len(applicable) != 1:
            return None
        return self._method_symbol(owner, applicable[0])

    def type_of(self, node: Any, _depth: int = 0) -> TypeRef | None:
        """Static type of an expression, when it can be determined."""
        if node is None or _depth > _MAX_DEPTH:
            return None
        kind = node.type
        depth = _depth + 1

        if kind == "parenthesized_expression":
            inner = next(iter(node.named_children), None)
            return self.type_of(inner, depth)
        if kind == "identifier":
            return self._identifier_type(node, depth)
        if kind in nodes.THIS_NODES:
            decl = self.enclosing_type(node)
            return ref_for(decl) if decl is not None else None
        if kind in nodes.BASE_NODES:
            decl = self.enclosing_type(node)
            bases = [b for b in self.context.bases_of(decl) if b.kind is not TypeKind.INTERFACE] if decl else []
            return ref_for(bases[0]) if bases else None
        if kind == "member_access_expression":
            symbol = self.resolve_member_access(node, depth)
            if symbol is not None:
                if symbol.kind in (SymbolKind.FIELD, SymbolKind.PROPERTY):
                    return symbol.type
                if symbol.kind is SymbolKind.TYPE and symbol.containing_type is not None:
                    return ref_for(symbol.containing_type)
                return None
            # Namespace-qualified type name used as an expression
            decl = self.lookup(TypeRef.parse(nodes.text(node)), node)
            return ref_for(decl) if decl is not None else None
        if kind == "invocation_expression":
            symbol = self.resolve_invocation(node, depth)
            return symbol.type if symbol is not None else None
        if kind == "element_access_expression":
            collection = self.type_of(node.child_by_field_name("expression"), depth)
            return collection.element() if collection is not None else None
        if kind in ("object_creation_expression", "array_creation_expression", "cast_expression"):
            return TypeRef.parse(nodes.text(node.child_by_field_name("type")))
        if kind == "as_expression":
            return TypeRef.parse(nodes.text(node.child_by_field_name("right")))
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _identifier_type(self, node: Any, depth: int) -> TypeRef | None:
        name = nodes.text(node)
        binding = self.binding(node, name)
        if binding is not None:
            return self._binding_type(binding, depth)

        for qualified in self._enclosing_names(node):
            decl = self.context.type(qualified)
            if decl is None:
                continue
            found = self.context.find_field(decl, name)
            if found is not None:
                owner, fld = found
                return self.context.canonical_ref(fld.type, owner, fld.path)

        decl = self.lookup(TypeRef(name), node)
        return ref_for(decl) if decl is not None else None

    def _binding_type(self, binding: Binding, depth: int) -> TypeRef | None:
        declared = TypeRef.parse(binding.type_text)
        if declared is not None and not declared.is_implicit:
            return declared
        if binding.initializer is not None:
            return self.type_of(binding.initializer, depth)
        if binding.foreach_source is not None:
            collection = self.type_of(binding.foreach_source, depth)
            return collection.element() if collection is not None else None
        return None

    def _receiver_type(self, receiver: Any, depth: int) -> TypeDecl | None:
        ref = self.type_of(receiver, depth)
        if ref is None or ref.is_array:
            return None
        return self.lookup(ref, receiver)

    def _method_symbol(self, owner: TypeDecl, method: MethodDecl) -> Symbol:
        return Symbol(
            kind=SymbolKind.METHOD,
            name=method.name,
            path=method.path,
            span=method.span,
            containing_type=owner,
            is_static=method.is_static,
            type=self.context.canonical_ref(method.return_type, owner, method.path),
            annotations=owner.attributes,
        )


def _simple_name(node: Any) -> str:
    if node is None:
        return ""
    if node.type == "generic_name":
        return nodes.name_of(node)
    return nodes.text(node)


def _type_symbol(decl: TypeDecl) -> Symbol:
    return Symbol(
        kind=SymbolKind.TYPE,
        name=decl.name,
        path=decl.path,
        span=decl.span,
        containing_type=decl,
        annotations=decl.attributes,
    )
