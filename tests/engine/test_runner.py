"""Tests for engine/runner.py."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from udonlint.config.models import AnalysisConfig, UdonLintConfig
from udonlint.core.errors import ErrorCode, InputError
from udonlint.engine.runner import LintResult, LintRunner
from udonlint.parsing.treesitter import SyntaxTreeBuilder
from udonlint.rules import LintCode, RuleCategory, RuleDefinition, RuleFamily, RuleRegistry, Severity
from udonlint.rules.models import RuleInput

Lint = Callable[..., LintResult]
Corpus = Callable[[dict[str, str]], Path]

ENTRY = """
using UdonSharp;

public class Door : UdonSharpBehaviour
{
    public Data data;

    void Start()
    {
        try { Util.Read(data); } catch { }
    }
}
"""

HELPER = """
public static class Util
{
    public static int Read(Data d) { return d.hp; }
}

[System.Serializable]
public class Data { public int hp; }
"""


def _runner(**analysis: object) -> LintRunner:
    analysis.setdefault("max_workers", 2)
    return LintRunner(UdonLintConfig(analysis=AnalysisConfig(**analysis)))  # type: ignore[arg-type]


class TestLintRunner:
    """End-to-end runs over small corpora."""

    def test_no_entry_points_is_clean(self, lint: Lint) -> None:
        result = lint({"Util.cs": "public static class Util { static void M() { try { } catch { } } }"})

        assert result.diagnostics == []
        assert result.entry_files == []
        assert result.files_checked == 1
        assert result.exit_code == 0

    def test_entry_and_helper(self, lint: Lint) -> None:
        """try/catch in the entry file, plain-data field access in the called helper."""
        result = lint({"Door.cs": ENTRY, "Util.cs": HELPER})

        found = [(Path(d.path).name, d.code) for d in result.diagnostics]
        assert found == [
            ("Door.cs", LintCode.TRY_CATCH),
            ("Util.cs", LintCode.STATIC_METHOD_FIELD_ACCESS),
        ]
        assert [Path(p).name for p in result.entry_files] == ["Door.cs"]
        assert [Path(p).name for p in result.helper_files] == ["Util.cs"]
        assert result.error_count == 2
        assert result.failed
        assert result.exit_code == 1

    def test_plain_data_declared_in_entry_file(self, lint: Lint) -> None:
        """The helper reads a field of a type declared beside the entry point."""
        entry = ENTRY + "\n[System.Serializable]\npublic class Data { public int hp; }\n"
        helper = "public static class Util\n{\n    public static int Read(Data d) { return d.hp; }\n}\n"

        result = lint({"A.cs": entry, "B.cs": helper})

        found = [(Path(d.path).name, d.code, d.line) for d in result.diagnostics]
        assert found == [
            ("A.cs", LintCode.TRY_CATCH, 9),
            ("B.cs", LintCode.STATIC_METHOD_FIELD_ACCESS, 3),
        ]
        assert result.exit_code == 1

    def test_runs_are_deterministic(self, corpus: Corpus) -> None:
        root = corpus({"Door.cs": ENTRY, "Util.cs": HELPER, "Gate.cs": ENTRY.replace("class Door", "class Gate")})

        first = _runner(max_workers=1).check_directory(root)
        second = _runner(max_workers=4).check_directory(root)

        assert first.diagnostics == second.diagnostics
        assert first.diagnostics == sorted(first.diagnostics, key=lambda d: d.sort_key())

    def test_disabled_rules(self, lint: Lint) -> None:
        result = lint({"Door.cs": ENTRY, "Util.cs": HELPER}, disabled_rules=[1, 21])

        assert result.diagnostics == []

    def test_empty_directory(self, tmp_path: Path) -> None:
        result = _runner().check_directory(tmp_path)

        assert result.files_checked == 0
        assert result.exit_code == 0

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(InputError):
            _runner().check_directory(tmp_path / "missing")

    def test_test_scripts_excluded(self, corpus: Corpus) -> None:
        root = corpus({"Door.cs": ENTRY, "Util.cs": HELPER, "TestScripts/Lever.cs": ENTRY.replace("Door", "Lever")})

        everything = _runner().check_directory(root)
        filtered = _runner().check_directory(root, exclude_test_scripts=True)

        assert len(everything.entry_files) == 2
        assert len(filtered.entry_files) == 1


class TestFailureHandling:
    def test_unreadable_file_is_skipped(self, corpus: Corpus, monkeypatch: pytest.MonkeyPatch) -> None:
        root = corpus({"Door.cs": ENTRY, "Util.cs": HELPER, "Broken.cs": "class Broken { }"})
        original = SyntaxTreeBuilder.read

        def read(path: Path):  # type: ignore[no-untyped-def]
            if path.name == "Broken.cs":
                raise PermissionError(13, "Permission denied", str(path))
            return original(path)

        monkeypatch.setattr(SyntaxTreeBuilder, "read", staticmethod(read))

        result = _runner().check_directory(root)

        assert [Path(p).name for p in result.skipped_files] == ["Broken.cs"]
        assert result.files_checked == 2
        assert result.error_count == 2

    def test_no_readable_files_raises(self, corpus: Corpus, monkeypatch: pytest.MonkeyPatch) -> None:
        root = corpus({"Door.cs": ENTRY})

        def read(path: Path):  # type: ignore[no-untyped-def]
            raise OSError(5, "I/O error", str(path))

        monkeypatch.setattr(SyntaxTreeBuilder, "read", staticmethod(read))

        with pytest.raises(InputError) as exc_info:
            _runner().check_directory(root)
        assert exc_info.value.code == ErrorCode.INPUT_NO_READABLE_FILES

    def test_rule_crash_becomes_file_diagnostic(self, corpus: Corpus) -> None:
        """A failing rule reports code 000 for that file; other files still run."""
        root = corpus({"Door.cs": ENTRY, "Gate.cs": ENTRY.replace("class Door", "class Gate")})

        def explode(rule_input: RuleInput):  # type: ignore[no-untyped-def]
            if rule_input.tree.path.endswith("Gate.cs"):
                raise RuntimeError("boom")
            yield from ()

        rules = RuleRegistry()
        rules.register(
            RuleDefinition(
                code=1,
                name="explode",
                family=RuleFamily.STRUCTURAL,
                severity=Severity.ERROR,
                category=RuleCategory.LANGUAGE,
                summary="test",
                evaluate=explode,
            )
        )

        result = LintRunner(UdonLintConfig(), rules=rules).check_directory(root)

        (diag,) = result.diagnostics
        assert Path(diag.path).name == "Gate.cs"
        assert diag.code == LintCode.FILE_FAILURE
        assert (diag.line, diag.column) == (1, 1)
        assert "RuntimeError: boom" in diag.message
        assert result.exit_code == 1
