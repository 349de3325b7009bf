"""Tests for rules/structural.py, run through the full linter.

Each test writes a small entry-point script and checks the diagnostics of
one rule code.
"""

from __future__ import annotations

from collections.abc import Callable

from udonlint.engine.runner import LintResult
from udonlint.rules import LintCode, Severity
from udonlint.rules.models import Diagnostic

Lint = Callable[..., LintResult]

HEADER = "using UdonSharp;\nusing UnityEngine;\n\n"


def door(body: str, *, declaration: str = "public class Door : UdonSharpBehaviour") -> str:
    return HEADER + declaration + "\n{\n" + body + "\n}\n"


def only(result: LintResult, code: LintCode) -> list[Diagnostic]:
    return [d for d in result.diagnostics if d.code == code]


class TestEntryPointGating:
    def test_non_entry_file_is_not_checked(self, lint: Lint) -> None:
        """A helper without the marker import may use any C# feature."""
        result = lint({"Util.cs": "static class Util { static void M() { try { } catch { } } }"})

        assert result.diagnostics == []
        assert result.exit_code == 0

    def test_base_without_marker_is_not_checked(self, lint: Lint) -> None:
        source = "class Door : UdonSharpBehaviour { void M() { try { } catch { } } }"

        assert lint({"Door.cs": source}).diagnostics == []


class TestLanguageFeatures:
    """Whole-file language restrictions."""

    def test_try_catch(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    void Start()\n    {\n        try { } catch { }\n    }")})

        (diag,) = only(result, LintCode.TRY_CATCH)
        assert (diag.line, diag.column) == (8, 9)
        assert diag.severity is Severity.ERROR
        assert diag.message == "Try/Catch/Finally statements are not supported in UdonSharp"

    def test_throw(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    void Start() { throw new System.Exception(); }")})

        assert len(only(result, LintCode.THROW)) == 1

    def test_local_function(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    void Start() { int Twice(int v) { return v * 2; } }")})

        assert len(only(result, LintCode.LOCAL_FUNCTION)) == 1

    def test_object_and_collection_initializers(self, lint: Lint) -> None:
        body = """
    void Start()
    {
        var v = new Vector3 { x = 1 };
        var list = new System.Collections.Generic.List<int> { 1, 2 };
        int[] allowed = new int[] { 1, 2 };
        int[] alsoAllowed = { 3 };
        var plain = new Vector3(1, 2, 3);
    }"""
        result = lint({"Door.cs": door(body)})

        assert len(only(result, LintCode.OBJECT_INITIALIZER)) == 1
        (collection,) = only(result, LintCode.COLLECTION_INITIALIZER)
        assert "array initializers are allowed" in collection.message

    def test_multidimensional_arrays(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    int[,] grid;\n    int[][] jagged;")})

        (diag,) = only(result, LintCode.MULTIDIMENSIONAL_ARRAY)
        assert diag.line == 6
        assert diag.message.endswith("Use jagged arrays instead")

    def test_goto_and_labels(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    void Start()\n    {\n    again:\n        goto again;\n    }")})

        messages = sorted(d.message for d in only(result, LintCode.GOTO_STATEMENT))
        assert messages == [
            "Goto statements are not supported in UdonSharp",
            "Labeled statements are not supported in UdonSharp",
        ]

    def test_null_conditional(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    public GameObject target;\n    void Start() { var n = target?.name; }")})

        assert len(only(result, LintCode.NULL_CONDITIONAL)) == 1

    def test_null_coalescing(self, lint: Lint) -> None:
        body = "    public GameObject a, b;\n    void Start() { var g = a ?? b; a ??= b; }"
        result = lint({"Door.cs": door(body)})

        assert len(only(result, LintCode.NULL_COALESCING)) == 2

    def test_async_await(self, lint: Lint) -> None:
        body = "    async void Load() { await System.Threading.Tasks.Task.Delay(1); }"
        result = lint({"Door.cs": door(body)})

        messages = sorted(d.message for d in only(result, LintCode.ASYNC_AWAIT))
        assert messages == [
            "Async methods are not supported in UdonSharp",
            "Await expressions are not supported in UdonSharp",
        ]


class TestEntryMembers:
    """Restrictions on the direct members of entry-point classes."""

    def test_constructor(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    public Door() { }")})

        (diag,) = only(result, LintCode.CONSTRUCTOR)
        assert diag.message == "Constructors are not supported in UdonSharpBehaviour"

    def test_constructor_in_non_entry_class_allowed(self, lint: Lint) -> None:
        source = door("") + "\npublic class Plain { public Plain() { } }\n"

        assert only(lint({"Door.cs": source}), LintCode.CONSTRUCTOR) == []

    def test_generic_method(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    void Pick<T>() { }")})

        assert len(only(result, LintCode.GENERIC_METHOD)) == 1

    def test_static_fields_but_not_const(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    static int count;\n    const int Max = 3;")})

        (diag,) = only(result, LintCode.STATIC_FIELD)
        assert diag.line == 6
        assert "(const is allowed)" in diag.message

    def test_nested_type(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    class Inner { }")})

        assert len(only(result, LintCode.NESTED_TYPE)) == 1

    def test_generic_class(self, lint: Lint) -> None:
        result = lint({"Box.cs": door("", declaration="public class Box<T> : UdonSharpBehaviour")})

        (diag,) = only(result, LintCode.GENERIC_CLASS)
        assert (diag.line, diag.column) == (4, 17)

    def test_property_without_callback(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    public int Value { get; set; }")})

        (diag,) = only(result, LintCode.PROPERTY)
        assert diag.message == (
            "Properties are not supported in UdonSharp (except when used with [FieldChangeCallback])"
        )

    def test_property_backed_by_callback_allowed(self, lint: Lint) -> None:
        body = """
    [FieldChangeCallback(nameof(Value))] private int _value;
    public int Value { get => _value; set => _value = value; }"""

        assert only(lint({"Door.cs": door(body)}), LintCode.PROPERTY) == []

    def test_method_overloads(self, lint: Lint) -> None:
        result = lint({"Door.cs": door("    void Play() { }\n    void Play(int times) { }")})

        (diag,) = only(result, LintCode.METHOD_OVERLOAD)
        assert diag.line == 7
        assert diag.message == "Method overloads are not supported in UdonSharp: 'Play'"

    def test_interface_implementation(self, lint: Lint) -> None:
        result = lint(
            {"Door.cs": door("", declaration="public class Door : UdonSharpBehaviour, System.IDisposable")}
        )

        assert len(only(result, LintCode.INTERFACE)) == 1

    def test_intermediate_base_class_is_not_an_interface(self, lint: Lint) -> None:
        result = lint(
            {
                "Interactable.cs": door("", declaration="public abstract class Interactable : UdonSharpBehaviour"),
                "Door.cs": door("", declaration="public class Door : Interactable"),
            }
        )

        assert only(result, LintCode.INTERFACE) == []
        assert len(result.entry_files) == 2


class TestApis:
    """API and attribute restrictions."""

    def test_network_callable_parameter_limit(self, lint: Lint) -> None:
        nine = ", ".join(f"int p{i}" for i in range(9))
        eight = ", ".join(f"int q{i}" for i in range(8))
        body = (
            f"    [NetworkCallable] public void Nine({nine}) {{ }}\n"
            f"    [NetworkCallable] public void Eight({eight}) {{ }}"
        )
        result = lint({"Door.cs": door(body)})

        (diag,) = only(result, LintCode.NETWORK_CALLABLE)
        assert diag.line == 6
        assert diag.message == "NetworkCallable methods cannot have more than 8 parameters"

    def test_network_callable_signature(self, lint: Lint) -> None:
        body = """
    [NetworkCallable] public int Count() { return 0; }
    [NetworkCallable] public void Move(ref int a, int b = 2) { }
    [NetworkCallable] public static void Ping() { }"""
        result = lint({"Door.cs": door(body)})

        messages = {d.message for d in only(result, LintCode.NETWORK_CALLABLE)}
        assert messages == {
            "NetworkCallable methods must return void",
            "NetworkCallable methods cannot have ref/out parameters",
            "NetworkCallable methods cannot have parameters with default values",
            "NetworkCallable methods cannot be static, abstract, virtual, override, or sealed",
        }

    def test_configured_parameter_limit(self, lint: Lint) -> None:
        body = "    [NetworkCallable] public void Two(int a, int b) { }"
        result = lint({"Door.cs": door(body)}, max_network_callable_parameters=1)

        assert len(only(result, LintCode.NETWORK_CALLABLE)) == 1

    def test_textmeshpro_is_a_warning(self, lint: Lint) -> None:
        body = "    public TMPro.TextMeshProUGUI tmpText;\n    void Start() { tmpText.fontSize = 3; }"
        result = lint({"Door.cs": door(body)})

        (diag,) = only(result, LintCode.TEXTMESHPRO_API)
        assert diag.severity is Severity.WARNING
        assert diag.message == "Property/Method may not be exposed to Udon: 'tmpText.fontSize' (TextMeshPro)"
        assert result.error_count == 0
        assert result.exit_code == 0

    def test_unexposed_apis(self, lint: Lint) -> None:
        body = "    void Start()\n    {\n        System.Threading.Thread.Sleep(1);\n        Application.OpenURL(\"x\");\n    }"
        result = lint({"Door.cs": door(body)})

        messages = [d.message for d in only(result, LintCode.UNEXPOSED_API)]
        assert messages == [
            "Threading APIs are not exposed to Udon",
            "Application.OpenURL is not exposed to Udon",
        ]

    def test_send_custom_event_missing_target(self, lint: Lint) -> None:
        body = """
    public void Open() { }
    void Start()
    {
        SendCustomEvent("Open");
        SendCustomEvent("Opne");
        this.SendCustomEventDelayedSeconds("Close", 1f);
        SendCustomNetworkEvent(VRC.Udon.Common.Interfaces.NetworkEventTarget.All, "Open");
    }"""
        result = lint({"Door.cs": door(body)})

        messages = [d.message for d in only(result, LintCode.SEND_CUSTOM_EVENT_TARGET)]
        assert messages == [
            "SendCustomEvent target method 'Opne' does not exist in 'Door'",
            "SendCustomEventDelayedSeconds target method 'Close' does not exist in 'Door'",
        ]

    def test_send_custom_event_on_other_object_ignored(self, lint: Lint) -> None:
        body = "    public UdonSharpBehaviour other;\n    void Start() { other.SendCustomEvent(\"Anything\"); }"

        assert only(lint({"Door.cs": door(body)}), LintCode.SEND_CUSTOM_EVENT_TARGET) == []

    def test_send_custom_event_inherited_target(self, lint: Lint) -> None:
        result = lint(
            {
                "Interactable.cs": door(
                    "    public void Open() { }",
                    declaration="public abstract class Interactable : UdonSharpBehaviour",
                ),
                "Door.cs": door(
                    "    void Start() { SendCustomEvent(\"Open\"); }",
                    declaration="public class Door : Interactable",
                ),
            }
        )

        assert only(result, LintCode.SEND_CUSTOM_EVENT_TARGET) == []
