"""Tests for analysis/context.py (compilation context and semantic model)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from udonlint.analysis.context import CompilationContext
from udonlint.analysis.models import SymbolKind, TypeRef
from udonlint.parsing import nodes

BuildContext = Callable[..., CompilationContext]


def _path(context: CompilationContext, name: str) -> str:
    return next(p for p in context.paths if p.endswith(name))


def _node(context: CompilationContext, file_name: str, node_type: str, node_text: str) -> Any:
    tree = context.tree(_path(context, file_name))
    assert tree is not None
    return next(n for n in nodes.descendants(tree.root, frozenset({node_type})) if nodes.text(n) == node_text)


class TestTypeTable:
    """Merging and classification of declared types."""

    def test_partial_declarations_merge(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "A1.cs": "partial class Door { int open; }",
                "A2.cs": "partial class Door { void Toggle() { } }",
            }
        )

        door = context.type("Door")

        assert door is not None
        assert not door.ambiguous
        assert set(door.fields) == {"open"}
        assert set(door.methods) == {"Toggle"}
        assert door.declaring_files == {_path(context, "A1.cs"), _path(context, "A2.cs")}

    def test_duplicate_non_partial_is_ambiguous(self, build_context: BuildContext) -> None:
        """Two unrelated declarations of one name never resolve."""
        context = build_context({"A.cs": "class Twin { }", "B.cs": "class Twin { }"})

        twin = context.type("Twin")
        assert twin is not None and twin.ambiguous
        assert context.resolve_type_name("Twin", path=_path(context, "A.cs"), namespace="") is None

    def test_inherits_from_base_transitively(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Base.cs": "abstract class Interactable : UdonSharpBehaviour { }",
                "Door.cs": "class Door : Interactable { }",
                "Plain.cs": "class Plain { }",
            }
        )

        assert context.inherits_from_base(context.type("Door"))  # type: ignore[arg-type]
        assert context.inherits_from_base(context.type("Interactable"))  # type: ignore[arg-type]
        assert not context.inherits_from_base(context.type("Plain"))  # type: ignore[arg-type]

    def test_cyclic_bases_terminate(self, build_context: BuildContext) -> None:
        context = build_context({"Cycle.cs": "class A : B { } class B : A { }"})

        assert not context.inherits_from_base(context.type("A"))  # type: ignore[arg-type]

    def test_configured_base_type(self, build_context: BuildContext) -> None:
        context = build_context({"Door.cs": "class Door : SandboxBehaviour { }"}, base_type="SandboxBehaviour")

        assert context.inherits_from_base(context.type("Door"))  # type: ignore[arg-type]

    def test_plain_data_types(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Data.cs": "[System.Serializable] class Data { public int hp; }",
                "Lib.cs": "namespace UnityEngine { [Serializable] class Vector { } }",
                "Script.cs": "[Serializable] class Script : UdonSharpBehaviour { }",
            }
        )

        assert context.is_plain_data_type(context.type("Data"))  # type: ignore[arg-type]
        assert not context.is_plain_data_type(context.type("UnityEngine.Vector"))  # type: ignore[arg-type]
        assert not context.is_plain_data_type(context.type("Script"))  # type: ignore[arg-type]

    def test_namespace_visibility(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Lib.cs": "namespace Game.Data { class Item { } }",
                "Uses.cs": "using Game.Data;\nclass UsesIt { Item item; }",
                "Blind.cs": "class Blind { Item item; }",
            }
        )

        uses = context.resolve_type_name("Item", path=_path(context, "Uses.cs"), namespace="")
        blind = context.resolve_type_name("Item", path=_path(context, "Blind.cs"), namespace="")

        assert uses is not None and uses.qualified_name == "Game.Data.Item"
        assert blind is None


class TestReferences:
    """Cross-file reference tracking."""

    def test_referencing_files_and_sharing(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Data.cs": "class Data { public int hp; }",
                "User.cs": "class User { void M() { Data d = null; } }",
                "Solo.cs": "class Solo { } class Owner { Solo s; }",
            }
        )

        data = context.type("Data")
        solo = context.type("Solo")
        assert data is not None and solo is not None

        assert _path(context, "User.cs") in context.referencing_files(data)
        assert context.is_shared(data)
        assert not context.is_shared(solo)

    def test_member_lookup_walks_base_chain(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Base.cs": "class Base { public int hp; public void Heal() { } }",
                "Derived.cs": "class Derived : Base { }",
            }
        )
        derived = context.type("Derived")
        assert derived is not None

        field = context.find_field(derived, "hp")
        methods = context.find_methods(derived, "Heal")

        assert field is not None and field[0].name == "Base"
        assert methods is not None and methods[0].name == "Base"
        assert context.find_field(derived, "missing") is None


class TestSemanticModel:
    """Resolution operations of the per-file semantic model."""

    def test_resolve_member_access_on_typed_local(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Data.cs": "class Data { public int hp; public static int count; }",
                "User.cs": "class User { void M() { Data d = new Data(); d.hp = 1; } }",
            }
        )
        model = context.semantic_model(_path(context, "User.cs"))

        symbol = model.resolve_member_access(_node(context, "User.cs", "member_access_expression", "d.hp"))

        assert symbol is not None
        assert symbol.kind is SymbolKind.FIELD
        assert symbol.name == "hp"
        assert symbol.path == _path(context, "Data.cs")
        assert symbol.containing_type is not None and symbol.containing_type.name == "Data"

    def test_resolve_member_access_through_var_and_foreach(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Data.cs": "class Data { public int hp; }",
                "User.cs": "class User { Data[] all; void M() { foreach (var d in all) { d.hp = 0; } } }",
            }
        )
        model = context.semantic_model(_path(context, "User.cs"))

        symbol = model.resolve_member_access(_node(context, "User.cs", "member_access_expression", "d.hp"))

        assert symbol is not None and symbol.name == "hp"

    def test_unknown_receiver_has_no_opinion(self, build_context: BuildContext) -> None:
        context = build_context({"User.cs": "class User { void M() { transform.position = default; } }"})
        model = context.semantic_model(_path(context, "User.cs"))

        node = _node(context, "User.cs", "member_access_expression", "transform.position")

        assert model.resolve_member_access(node) is None

    def test_resolve_invocation_by_argument_count(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Util.cs": (
                    "class Util { public static int F(int a) { return a; } "
                    "public static int F(int a, int b) { return a; } }"
                ),
                "User.cs": "class User { void M() { Util.F(1, 2); } }",
            }
        )
        model = context.semantic_model(_path(context, "User.cs"))

        symbol = model.resolve_invocation(_node(context, "User.cs", "invocation_expression", "Util.F(1, 2)"))

        assert symbol is not None
        assert symbol.kind is SymbolKind.METHOD
        assert symbol.is_static
        assert symbol.type == TypeRef("int")

    def test_ambiguous_overloads_unresolved(self, build_context: BuildContext) -> None:
        context = build_context(
            {
                "Util.cs": "class Util { public static void F(int a) { } public static void F(string a) { } }",
                "User.cs": "class User { void M() { Util.F(1); } }",
            }
        )
        model = context.semantic_model(_path(context, "User.cs"))

        assert model.resolve_invocation(_node(context, "User.cs", "invocation_expression", "Util.F(1)")) is None

    def test_local_shadows_type_name(self, build_context: BuildContext) -> None:
        """A local named like a type is not a reference to the type."""
        context = build_context(
            {
                "Data.cs": "class Data { }",
                "User.cs": "class User { void M(int Data) { int x = Data; } }",
            }
        )
        model = context.semantic_model(_path(context, "User.cs"))
        tree = context.tree(_path(context, "User.cs"))
        assert tree is not None
        usage = [n for n in nodes.descendants(tree.root, frozenset({"identifier"})) if nodes.text(n) == "Data"][-1]

        assert model.resolve_type_reference(usage) is None

    def test_type_of_this_and_fields(self, build_context: BuildContext) -> None:
        context = build_context({"Door.cs": "class Door { int hp; void M() { var x = this.hp; } }"})
        model = context.semantic_model(_path(context, "Door.cs"))

        this_node = next(
            n
            for n in nodes.descendants(context.tree(_path(context, "Door.cs")).root)  # type: ignore[union-attr]
            if n.type in nodes.THIS_NODES
        )
        access = _node(context, "Door.cs", "member_access_expression", "this.hp")

        assert model.type_of(this_node) == TypeRef("Door")
        assert model.type_of(access) == TypeRef("int")
