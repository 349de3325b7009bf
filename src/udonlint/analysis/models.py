"""Declaration and symbol models for the compilation context.

Everything here is immutable; the compilation context is built once per run
and read concurrently by every later phase.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from udonlint.parsing.models import Span
from udonlint.parsing.nodes import simple_type_name


class TypeKind(Enum):
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"


class SymbolKind(Enum):
    TYPE = "type"
    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"


@dataclass(frozen=True, slots=True)
class TypeRef:
    """A referenced type reduced to its simple name and array rank."""

    name: str
    array_rank: int = 0
    qualifier: str = ""  # namespace/outer-type prefix as written, if any

    @classmethod
    def parse(cls, type_text: str) -> TypeRef | None:
        raw = type_text.strip().rstrip("?").strip()
        if not raw:
            return None
        rank = 0
        while raw.endswith("]") and "[" in raw:
            raw = raw[: raw.rindex("[")].rstrip()
            rank += 1
        base = raw[: raw.index("<")] if "<" in raw else raw
        base = base.split("::")[-1]
        qualifier, _, _ = base.rpartition(".")
        name = simple_type_name(base)
        if not name:
            return None
        return cls(name=name, array_rank=rank, qualifier=qualifier)

    @property
    def is_array(self) -> bool:
        return self.array_rank > 0

    @property
    def is_implicit(self) -> bool:
        return self.name == "var" and not self.is_array

    def element(self) -> TypeRef | None:
        if not self.is_array:
            return None
        return TypeRef(self.name, self.array_rank - 1, self.qualifier)


@dataclass(frozen=True, slots=True)
class FieldDecl:
    name: str
    type: TypeRef | None
    path: str
    span: Span
    is_static: bool = False
    is_const: bool = False
    is_property: bool = False


@dataclass(frozen=True, slots=True)
class MethodDecl:
    name: str
    return_type: TypeRef | None
    path: str
    span: Span
    is_static: bool
    required_parameters: int
    total_parameters: int
    has_params_array: bool = False

    def accepts(self, argument_count: int) -> bool:
        if argument_count < self.required_parameters:
            return False
        return self.has_params_array or argument_count <= self.total_parameters


@dataclass(frozen=True, eq=False)
class TypeDecl:
    """A declared type, with partial declarations merged.

    ``path``/``span`` point at the first declaration in path order.
    ``declaring_files`` lists every file holding a part of the type.
    """

    name: str
    qualified_name: str
    namespace: str
    kind: TypeKind
    path: str
    span: Span
    base_names: tuple[str, ...]
    attributes: frozenset[str]
    fields: MappingProxyType[str, FieldDecl]
    methods: MappingProxyType[str, tuple[MethodDecl, ...]]
    declaring_files: frozenset[str]
    outer_type: str | None = None  # qualified name of the containing type
    type_parameter_count: int = 0
    ambiguous: bool = False  # same qualified name declared twice without ``partial``

    def has_attribute(self, names: frozenset[str] | set[str]) -> bool:
        return not self.attributes.isdisjoint(names)


@dataclass(frozen=True, slots=True)
class Symbol:
    """Resolved identity of a referenced member or type."""

    kind: SymbolKind
    name: str
    path: str
    span: Span
    containing_type: TypeDecl | None
    is_static: bool = False
    type: TypeRef | None = None  # field/property type or method return type
    annotations: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class TypeFragment:
    """One syntactic declaration of a type, before partial merging."""

    name: str
    qualified_name: str
    namespace: str
    kind: TypeKind
    path: str
    span: Span
    node: Any
    base_names: tuple[str, ...]
    attributes: frozenset[str]
    fields: tuple[FieldDecl, ...]
    methods: tuple[MethodDecl, ...]
    is_partial: bool
    outer_type: str | None
    type_parameter_count: int


@dataclass(frozen=True, slots=True)
class FileOutline:
    """Per-file facts collected from one tree alone (phase 1)."""

    path: str
    namespace: str  # file-scoped namespace, "" if none
    usings: tuple[str, ...]
    static_usings: tuple[str, ...]
    aliases: MappingProxyType[str, str]
    types: tuple[TypeFragment, ...]
    has_marker_import: bool
