"""Rules module - the lint rule catalog.

Importing this package registers every rule with the global registry.
"""

from udonlint.rules import definitions as _definitions  # noqa: F401
from udonlint.rules.codes import RESERVED_CODES, RETIRED_CODES, LintCode
from udonlint.rules.models import (
    Diagnostic,
    RuleCategory,
    RuleDefinition,
    RuleFamily,
    RuleInput,
    Severity,
)
from udonlint.rules.registry import RuleRegistry, registry

__all__ = [
    "Diagnostic",
    "LintCode",
    "RESERVED_CODES",
    "RETIRED_CODES",
    "RuleCategory",
    "RuleDefinition",
    "RuleFamily",
    "RuleInput",
    "RuleRegistry",
    "Severity",
    "registry",
]
