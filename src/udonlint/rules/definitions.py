"""Rule definitions - register every rule of the catalog."""

from udonlint.rules import gated, semantic, structural
from udonlint.rules.codes import LintCode
from udonlint.rules.models import RuleCategory, RuleDefinition, RuleFamily, Severity
from udonlint.rules.registry import registry

# =============================================================================
# Language features
# =============================================================================

registry.register(
    RuleDefinition(
        code=LintCode.TRY_CATCH,
        name="try-catch",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="try/catch/finally statements",
        evaluate=structural.try_catch,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.THROW,
        name="throw",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="throw statements and expressions",
        evaluate=structural.throw,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.LOCAL_FUNCTION,
        name="local-function",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Local functions",
        evaluate=structural.local_functions,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.CONSTRUCTOR,
        name="constructor",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Constructors in entry-point classes",
        evaluate=structural.constructors,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.GENERIC_METHOD,
        name="generic-method",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Generic methods in entry-point classes",
        evaluate=structural.generic_methods,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.OBJECT_INITIALIZER,
        name="object-initializer",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Object initializers",
        evaluate=structural.object_initializers,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.COLLECTION_INITIALIZER,
        name="collection-initializer",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Collection initializers on non-array types",
        evaluate=structural.collection_initializers,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.MULTIDIMENSIONAL_ARRAY,
        name="multidimensional-array",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Rectangular arrays such as int[,]",
        evaluate=structural.multidimensional_arrays,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.STATIC_FIELD,
        name="static-field",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Non-const static fields in entry-point classes",
        evaluate=structural.static_fields,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.NESTED_TYPE,
        name="nested-type",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Types nested in entry-point classes",
        evaluate=structural.nested_types,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.GENERIC_CLASS,
        name="generic-class",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="Generic entry-point classes",
        evaluate=structural.generic_classes,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.GOTO_STATEMENT,
        name="goto",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="goto statements and labels",
        evaluate=structural.goto_statements,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.NULL_CONDITIONAL,
        name="null-conditional",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="?. and ?[] operators",
        evaluate=structural.null_conditional,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.NULL_COALESCING,
        name="null-coalescing",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="?? and ??= operators",
        evaluate=structural.null_coalescing,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.ASYNC_AWAIT,
        name="async-await",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="async routines and await expressions",
        evaluate=structural.async_await,
    )
)

# =============================================================================
# APIs and attributes
# =============================================================================

registry.register(
    RuleDefinition(
        code=LintCode.NETWORK_CALLABLE,
        name="network-callable",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.API,
        summary="Signature constraints of network-callable methods",
        evaluate=structural.network_callable,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.TEXTMESHPRO_API,
        name="textmeshpro-api",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.WARNING,
        category=RuleCategory.API,
        summary="TextMeshPro members that may not be exposed",
        evaluate=structural.textmeshpro_api,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.PROPERTY,
        name="property",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.API,
        summary="Properties without a field-change callback",
        evaluate=structural.properties,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.METHOD_OVERLOAD,
        name="method-overload",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.API,
        summary="Overloaded methods in entry-point classes",
        evaluate=structural.method_overloads,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.INTERFACE,
        name="interface",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.API,
        summary="Interface implementation on entry-point classes",
        evaluate=structural.interfaces,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.UNEXPOSED_API,
        name="unexposed-api",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.API,
        summary="Reflection, threading, file, network and application APIs",
        evaluate=structural.unexposed_apis,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.SEND_CUSTOM_EVENT_TARGET,
        name="send-custom-event-target",
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.API,
        summary="Event dispatch naming a method the class does not declare",
        evaluate=structural.send_custom_event_targets,
    )
)

# =============================================================================
# Cross-file analysis
# =============================================================================

registry.register(
    RuleDefinition(
        code=LintCode.CROSS_FILE_FIELD_ACCESS,
        name="cross-file-field-access",
        family=RuleFamily.SEMANTIC,
        severity=Severity.ERROR,
        category=RuleCategory.SEMANTIC,
        summary="Field access on plain-data types declared or shared elsewhere",
        evaluate=semantic.cross_file_field_access,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.STATIC_METHOD_FIELD_ACCESS,
        name="static-method-field-access",
        family=RuleFamily.CALL_GRAPH,
        severity=Severity.ERROR,
        category=RuleCategory.SEMANTIC,
        summary="Plain-data field access in static helpers called from entry points",
        evaluate=gated.static_method_field_access,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.CROSS_FILE_METHOD_INVOCATION,
        name="cross-file-method-invocation",
        family=RuleFamily.SEMANTIC,
        severity=Severity.ERROR,
        category=RuleCategory.SEMANTIC,
        summary="Instance calls on plain-data types declared or shared elsewhere",
        evaluate=semantic.cross_file_method_invocation,
    )
)

registry.register(
    RuleDefinition(
        code=LintCode.SERIALIZABLE_CLASS_USAGE,
        name="serializable-class-usage",
        family=RuleFamily.SEMANTIC,
        severity=Severity.ERROR,
        category=RuleCategory.SEMANTIC,
        summary="Any field access on a plain-data type",
        evaluate=semantic.serializable_class_usage,
    )
)
