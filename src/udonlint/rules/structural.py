"""Structural rules - decided from the syntax tree alone.

Whole-file rules scan every node of an entry-point file. Member rules only
look at the direct members of the file's entry-point classes.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Any

from udonlint.parsing import nodes
from udonlint.rules.models import Finding, RuleInput

_OBJECT_CREATIONS = frozenset({"object_creation_expression", "implicit_object_creation_expression"})
_NETWORK_CALLABLE_FORBIDDEN = frozenset({"static", "abstract", "virtual", "override", "sealed"})

_TMP_MEMBERS = frozenset(
    {
        "fontSize", "fontSizeMin", "fontSizeMax", "fontStyle", "fontWeight",
        "enableAutoSizing", "fontSharedMaterial", "fontSharedMaterials",
        "fontMaterial", "fontMaterials", "maskable", "isVolumetricText",
        "margin", "textBounds", "preferredWidth", "preferredHeight",
        "flexibleWidth", "flexibleHeight", "minWidth", "minHeight",
        "maxWidth", "maxHeight", "layoutPriority", "isUsingLegacyAnimationComponent",
        "onCullStateChanged", "maskOffset", "renderMode",
        "geometrySortingOrder", "vertexBufferAutoSizeReduction", "firstVisibleCharacter",
        "maxVisibleCharacters", "maxVisibleWords", "maxVisibleLines", "useMaxVisibleDescender",
        "pageToDisplay", "linkedTextComponent", "isTextOverflowing", "firstOverflowCharacterIndex",
        "isTextTruncated", "parseCtrlCharacters", "isOrthographic", "enableCulling",
        "ignoreVisibility", "horizontalMapping", "verticalMapping", "mappingUvLineOffset",
        "enableWordWrapping", "wordWrapingRatios", "overflowMode",
        "textInfo", "havePropertiesChanged", "isUsingBold", "spriteAnimator",
        "layoutElement", "ignoreRectMaskCulling", "isOverlay",
    }
)  # fmt: skip
_TMP_RECEIVER = re.compile(r"\b(TextMeshPro|TextMeshProUGUI|TMP_Text|TMP_InputField|tmpText|tmpPro)\b", re.IGNORECASE)

_BANNED_NAMESPACES = {
    "System.Reflection": "Reflection APIs are not exposed to Udon",
    "System.Threading": "Threading APIs are not exposed to Udon",
    "System.IO.File": "File I/O APIs are not exposed to Udon",
    "System.Net": "Networking APIs are not exposed to Udon",
}
_BANNED_PATTERNS = {
    re.compile(r"\bApplication\.OpenURL\b"): "Application.OpenURL is not exposed to Udon",
    re.compile(r"\bApplication\.Quit\b"): "Application.Quit is not exposed to Udon",
}

# Event-dispatch routine -> index of its string target argument
_SEND_CUSTOM_EVENT = {
    "SendCustomEvent": 0,
    "SendCustomEventDelayedSeconds": 0,
    "SendCustomEventDelayedFrames": 0,
    "SendCustomNetworkEvent": 1,
}
_STRING_LITERALS = frozenset({"string_literal", "verbatim_string_literal", "raw_string_literal"})


def _find(rule_input: RuleInput, *types: str) -> Iterator[Any]:
    return nodes.descendants(rule_input.tree.root, frozenset(types))


def _entry_members(rule_input: RuleInput, *types: str) -> Iterator[Any]:
    for type_node in rule_input.entry_types:
        for member in nodes.type_members(type_node):
            if member.type in types:
                yield member


# =============================================================================
# Language features (whole file)
# =============================================================================


def try_catch(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "try_statement"):
        yield node, "Try/Catch/Finally statements are not supported in UdonSharp"


def throw(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "throw_statement", "throw_expression"):
        yield node, "Throw statements are not supported in UdonSharp"


def local_functions(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "local_function_statement"):
        yield node, "Local functions are not supported in UdonSharp"


def _initializer_kind(creation: Any) -> str | None:
    """``"object"`` or ``"collection"`` for a creation expression with braces."""
    init = creation.child_by_field_name("initializer")
    if init is None:
        init = next((c for c in creation.children if c.type == "initializer_expression"), None)
    if init is None:
        return None
    items = [c for c in init.named_children if c.type != "comment"]
    if not items or items[0].type == "assignment_expression":
        return "object"
    return "collection"


def object_initializers(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, *_OBJECT_CREATIONS):
        if _initializer_kind(node) == "object":
            yield node, "Object initializers are not supported in UdonSharp"


def collection_initializers(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, *_OBJECT_CREATIONS):
        if _initializer_kind(node) == "collection":
            yield node, "Collection initializers are not supported in UdonSharp (array initializers are allowed)"


def multidimensional_arrays(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "array_type"):
        rank = node.child_by_field_name("rank")
        if rank is None:
            rank = next((c for c in node.children if c.type == "array_rank_specifier"), None)
        if rank is not None and any(c.type == "," for c in rank.children):
            yield node, "Multidimensional arrays are not supported in UdonSharp. Use jagged arrays instead"


def goto_statements(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "goto_statement"):
        yield node, "Goto statements are not supported in UdonSharp"
    for node in _find(rule_input, "labeled_statement"):
        yield node, "Labeled statements are not supported in UdonSharp"


def null_conditional(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "conditional_access_expression"):
        yield node, "Null-conditional operators (?. and ?[]) are not supported in UdonSharp"


def _operator(node: Any) -> str:
    op = node.child_by_field_name("operator")
    if op is not None:
        return nodes.text(op)
    for child in node.children:
        if not child.is_named or child.type == "assignment_operator":
            return nodes.text(child)
    return ""


def null_coalescing(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "binary_expression", "assignment_expression"):
        if _operator(node) in ("??", "??="):
            yield node, "Null-coalescing operators (?? and ??=) are not supported in UdonSharp"


def _is_async(node: Any) -> bool:
    if "async" in nodes.modifiers(node):
        return True
    return any(not c.is_named and nodes.text(c) == "async" for c in node.children)


def async_await(rule_input: RuleInput) -> Iterator[Finding]:
    functions = ("method_declaration", "local_function_statement", "lambda_expression", "anonymous_method_expression")
    for node in _find(rule_input, *functions):
        if _is_async(node):
            yield node, "Async methods are not supported in UdonSharp"
    for node in _find(rule_input, "await_expression"):
        yield node, "Await expressions are not supported in UdonSharp"


# =============================================================================
# Entry-class members
# =============================================================================


def constructors(rule_input: RuleInput) -> Iterator[Finding]:
    base = rule_input.config.base_type
    for member in _entry_members(rule_input, "constructor_declaration"):
        yield member, f"Constructors are not supported in {base}"


def generic_methods(rule_input: RuleInput) -> Iterator[Finding]:
    base = rule_input.config.base_type
    for member in _entry_members(rule_input, "method_declaration"):
        if nodes.has_type_parameters(member):
            yield member, f"Generic methods are not supported in {base}"


def static_fields(rule_input: RuleInput) -> Iterator[Finding]:
    base = rule_input.config.base_type
    for member in _entry_members(rule_input, "field_declaration"):
        mods = nodes.modifiers(member)
        if "static" in mods and "const" not in mods:
            yield member, f"Static fields are not supported in {base} (const is allowed)"


def nested_types(rule_input: RuleInput) -> Iterator[Finding]:
    base = rule_input.config.base_type
    for member in _entry_members(rule_input, *nodes.MEMBER_HOLDING_TYPES):
        yield member, f"Nested types are not supported in {base}"


def _callback_targets(type_node: Any, attribute: str) -> list[str]:
    """Argument texts of the field-change-callback attributes on the class's fields."""
    target = nodes.attribute_simple_name(attribute)
    found = []
    for member in nodes.type_members(type_node):
        if member.type != "field_declaration":
            continue
        found.extend(a.arguments for a in nodes.attributes(member) if a.name == target)
    return found


def properties(rule_input: RuleInput) -> Iterator[Finding]:
    attribute = rule_input.config.field_change_callback_attribute
    for type_node in rule_input.entry_types:
        callbacks = _callback_targets(type_node, attribute)
        for member in nodes.type_members(type_node):
            if member.type != "property_declaration":
                continue
            name = re.compile(rf"\b{re.escape(nodes.name_of(member))}\b")
            if any(name.search(args) for args in callbacks):
                continue
            yield member, f"Properties are not supported in UdonSharp (except when used with [{attribute}])"


def method_overloads(rule_input: RuleInput) -> Iterator[Finding]:
    for type_node in rule_input.entry_types:
        seen: set[str] = set()
        for member in nodes.type_members(type_node):
            if member.type != "method_declaration":
                continue
            name = nodes.name_of(member)
            if name in seen:
                yield member, f"Method overloads are not supported in UdonSharp: '{name}'"
            seen.add(name)


def interfaces(rule_input: RuleInput) -> Iterator[Finding]:
    base = rule_input.config.base_type
    model = rule_input.model() if rule_input.context is not None else None
    for type_node in rule_input.entry_types:
        for base_node in nodes.base_types(type_node):
            if nodes.simple_type_name(nodes.text(base_node)) == base:
                continue
            if model is not None:
                decl = rule_input.resolve(model.resolve_type_reference, base_node)
                if decl is not None and model.context.inherits_from_base(decl):
                    continue
            yield base_node, "Interface implementation is not supported in UdonSharp"


def generic_classes(rule_input: RuleInput) -> Iterator[Finding]:
    for type_node in rule_input.entry_types:
        type_params = nodes.type_parameter_list(type_node)
        if type_params is not None:
            yield type_params, "Generic classes are not supported in UdonSharp"


# =============================================================================
# APIs and attributes (whole file)
# =============================================================================


def network_callable(rule_input: RuleInput) -> Iterator[Finding]:
    attribute = rule_input.config.network_callable_attribute
    limit = rule_input.config.max_network_callable_parameters
    for method in _find(rule_input, "method_declaration"):
        if not nodes.has_attribute(method, attribute):
            continue
        returns = method.child_by_field_name("returns") or method.child_by_field_name("type")
        if returns is not None and nodes.text(returns) != "void":
            yield returns, f"{attribute} methods must return void"

        params = nodes.parameters(method)
        if len(params) > limit:
            plist = method.child_by_field_name("parameters")
            if plist is None:
                plist = next((c for c in method.children if c.type == "parameter_list"), method)
            yield plist, f"{attribute} methods cannot have more than {limit} parameters"
        for param in params:
            if param.is_by_reference:
                yield param.node, f"{attribute} methods cannot have ref/out parameters"
            if param.is_params:
                yield param.node, f"{attribute} methods cannot have params parameters"
            if param.has_default:
                yield param.node, f"{attribute} methods cannot have parameters with default values"

        if nodes.modifiers(method) & _NETWORK_CALLABLE_FORBIDDEN:
            yield method, f"{attribute} methods cannot be static, abstract, virtual, override, or sealed"


def textmeshpro_api(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "member_access_expression"):
        name = nodes.text(node.child_by_field_name("name"))
        if name not in _TMP_MEMBERS:
            continue
        receiver = nodes.text(node.child_by_field_name("expression"))
        if _TMP_RECEIVER.search(receiver):
            yield node, f"Property/Method may not be exposed to Udon: '{receiver}.{name}' (TextMeshPro)"


def unexposed_apis(rule_input: RuleInput) -> Iterator[Finding]:
    for node in _find(rule_input, "invocation_expression"):
        call = nodes.text(node)
        for namespace, message in _BANNED_NAMESPACES.items():
            if re.search(rf"\b{re.escape(namespace)}\b", call):
                yield node, message
                break
        for pattern, message in _BANNED_PATTERNS.items():
            if pattern.search(call):
                yield node, message
                break


def _event_target(invocation: Any) -> tuple[str, Any] | None:
    """(routine name, literal node) of an event dispatch on the current object."""
    function = invocation.child_by_field_name("function")
    if function is None:
        return None
    if function.type == "identifier":
        routine = nodes.text(function)
    elif function.type == "member_access_expression":
        receiver = function.child_by_field_name("expression")
        if receiver is None or receiver.type not in nodes.THIS_NODES:
            return None
        routine = nodes.text(function.child_by_field_name("name"))
    else:
        return None
    index = _SEND_CUSTOM_EVENT.get(routine)
    if index is None:
        return None
    args = nodes.arguments(invocation)
    if len(args) <= index or args[index] is None or args[index].type not in _STRING_LITERALS:
        return None
    return routine, args[index]


def _literal_value(literal: Any) -> str:
    raw = nodes.text(literal)
    if raw.startswith('@"'):
        return raw[2:-1]
    return raw.strip('"')


def send_custom_event_targets(rule_input: RuleInput) -> Iterator[Finding]:
    model = rule_input.model() if rule_input.context is not None else None
    for invocation in _find(rule_input, "invocation_expression"):
        found = _event_target(invocation)
        if found is None:
            continue
        routine, literal = found
        type_node = nodes.enclosing(invocation, frozenset({"class_declaration"}))
        if type_node is None or not any(nodes.same_node(type_node, t) for t in rule_input.entry_types):
            continue
        target = _literal_value(literal)
        declared = {nodes.name_of(m) for m in nodes.type_members(type_node) if m.type == "method_declaration"}
        if target in declared:
            continue
        if model is not None:
            decl = model.enclosing_type(invocation)
            if decl is not None and model.context.find_methods(decl, target) is not None:
                continue
        class_name = nodes.name_of(type_node)
        yield literal, f"{routine} target method '{target}' does not exist in '{class_name}'"
