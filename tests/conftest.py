"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides fixtures for writing small C# corpora to disk and linting them.
"""

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local udonlint package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of udonlint modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("udonlint"):
        del sys.modules[module_name]

from udonlint.analysis.context import CompilationContext  # noqa: E402
from udonlint.config.models import AnalysisConfig, UdonLintConfig  # noqa: E402
from udonlint.engine.runner import LintResult, LintRunner  # noqa: E402
from udonlint.parsing.models import SourceFile, SyntaxTree  # noqa: E402
from udonlint.parsing.treesitter import SyntaxTreeBuilder  # noqa: E402

WriteCorpus = Callable[[dict[str, str]], Path]


@pytest.fixture
def corpus(tmp_path: Path) -> WriteCorpus:
    """Write ``{relative path: source}`` under a fresh project root.

    Sources are dedented so tests can inline indented C#.
    """

    def write(files: dict[str, str]) -> Path:
        root = tmp_path / "Assets"
        root.mkdir(exist_ok=True)
        for name, source in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return root

    return write


@pytest.fixture
def parse(tmp_path: Path) -> Callable[[str, str], SyntaxTree]:
    """Parse inline C# without touching the disk."""
    builder = SyntaxTreeBuilder()

    def run(source: str, name: str = "Script.cs") -> SyntaxTree:
        return builder.parse(SourceFile.from_text(tmp_path / name, textwrap.dedent(source).lstrip("\n")))

    return run


@pytest.fixture
def build_context(parse: Callable[[str, str], SyntaxTree]) -> Callable[..., CompilationContext]:
    """Build a compilation context from ``{file name: source}``."""

    def run(files: dict[str, str], **analysis: Any) -> CompilationContext:
        trees = {}
        for name, source in files.items():
            tree = parse(source, name)
            trees[tree.path] = tree
        return CompilationContext.build(trees, AnalysisConfig(**analysis))

    return run


@pytest.fixture
def lint(corpus: WriteCorpus) -> Callable[..., LintResult]:
    """Write a corpus and run the full linter over it."""

    def run(files: dict[str, str], **analysis: Any) -> LintResult:
        root = corpus(files)
        analysis.setdefault("max_workers", 2)
        config = UdonLintConfig(analysis=AnalysisConfig(**analysis))
        return LintRunner(config).check_directory(root)

    return run
