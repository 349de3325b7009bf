"""Tests for rules/registry.py and the registered catalog."""

from __future__ import annotations

import pytest

from udonlint.rules import (
    RESERVED_CODES,
    RETIRED_CODES,
    LintCode,
    RuleCategory,
    RuleDefinition,
    RuleFamily,
    RuleRegistry,
    Severity,
    registry,
)


def _rule(code: int, name: str = "sample") -> RuleDefinition:
    return RuleDefinition(
        code=code,
        name=name,
        family=RuleFamily.STRUCTURAL,
        severity=Severity.ERROR,
        category=RuleCategory.LANGUAGE,
        summary="sample",
        evaluate=lambda rule_input: iter(()),
    )


class TestRuleRegistry:
    def test_register_and_get(self) -> None:
        rules = RuleRegistry()
        rule = rules.register(_rule(1))

        assert rules.get(1) is rule
        assert 1 in rules
        assert len(rules) == 1

    def test_duplicate_code_raises(self) -> None:
        rules = RuleRegistry()
        rules.register(_rule(1, "first"))

        with pytest.raises(ValueError, match="already registered by 'first'"):
            rules.register(_rule(1, "second"))

    @pytest.mark.parametrize("code", [0, 4, 10, 23, 24])
    def test_unassignable_codes_raise(self, code: int) -> None:
        with pytest.raises(ValueError, match="not assignable"):
            RuleRegistry().register(_rule(code))

    def test_all_is_ordered_by_code(self) -> None:
        rules = RuleRegistry()
        for code in (12, 2, 7):
            rules.register(_rule(code))

        assert [r.code for r in rules.all()] == [2, 7, 12]

    def test_for_family_skips_disabled(self) -> None:
        rules = RuleRegistry()
        rules.register(_rule(1))
        rules.register(_rule(2))

        assert [r.code for r in rules.for_family(RuleFamily.STRUCTURAL, disabled=[1])] == [2]
        assert rules.for_family(RuleFamily.SEMANTIC) == []

    def test_clear(self) -> None:
        rules = RuleRegistry()
        rules.register(_rule(1))
        rules.clear()

        assert len(rules) == 0


class TestCatalog:
    """The global registry holds the full, stable catalog."""

    def test_every_code_registered(self) -> None:
        expected = {code for code in LintCode if code is not LintCode.FILE_FAILURE}

        assert {r.code for r in registry.all()} == expected
        assert len(registry) == 26

    def test_no_gaps_reused(self) -> None:
        codes = {r.code for r in registry.all()}

        assert codes.isdisjoint(RESERVED_CODES | RETIRED_CODES)

    def test_only_textmeshpro_is_a_warning(self) -> None:
        warnings = [r.code for r in registry.all() if r.severity is Severity.WARNING]

        assert warnings == [LintCode.TEXTMESHPRO_API]

    def test_families(self) -> None:
        semantic = {r.code for r in registry.for_family(RuleFamily.SEMANTIC)}
        gated = {r.code for r in registry.for_family(RuleFamily.CALL_GRAPH)}

        assert semantic == {20, 22, 25}
        assert gated == {21}

    def test_names_are_unique(self) -> None:
        names = [r.name for r in registry.all()]

        assert len(names) == len(set(names))
