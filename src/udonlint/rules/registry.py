"""Rule registry - explicit code -> rule registration."""

from __future__ import annotations

from collections.abc import Iterable

from udonlint.rules.codes import RESERVED_CODES, RETIRED_CODES, LintCode
from udonlint.rules.models import RuleCategory, RuleDefinition, RuleFamily


class RuleRegistry:
    """Registry of lint rules.

    Every rule is registered explicitly with its code, family and category;
    nothing is inferred from names.
    """

    def __init__(self) -> None:
        self._rules: dict[int, RuleDefinition] = {}

    def register(self, rule: RuleDefinition) -> RuleDefinition:
        """Register a rule.

        Raises:
            ValueError: If the code is taken, reserved, retired, or the file-failure code.
        """
        if rule.code in self._rules:
            existing = self._rules[rule.code]
            raise ValueError(f"Rule code {rule.code:03d} already registered by '{existing.name}'")
        if rule.code in RESERVED_CODES or rule.code in RETIRED_CODES or rule.code == LintCode.FILE_FAILURE:
            raise ValueError(f"Rule code {rule.code:03d} is not assignable")
        self._rules[rule.code] = rule
        return rule

    def get(self, code: int) -> RuleDefinition | None:
        return self._rules.get(code)

    def all(self) -> list[RuleDefinition]:
        """All registered rules, ordered by code."""
        return [self._rules[code] for code in sorted(self._rules)]

    def for_family(self, family: RuleFamily, disabled: Iterable[int] = ()) -> list[RuleDefinition]:
        skip = set(disabled)
        return [r for r in self.all() if r.family is family and r.code not in skip]

    def for_category(self, category: RuleCategory) -> list[RuleDefinition]:
        return [r for r in self.all() if r.category is category]

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, code: object) -> bool:
        return code in self._rules

    def clear(self) -> None:
        """Clear all registered rules."""
        self._rules.clear()


# Global registry
registry = RuleRegistry()
