"""Canonical exclude patterns with tiered architecture.

Tier 0 (HARDCODED_DIRS): Never traversed, not user-configurable.
    - VCS internals

Tier 1 (DEFAULT_PRUNABLE_DIRS): Excluded by default, configurable through
    ``discovery.excluded_dirs``.
    - Unity-generated folders, build outputs, editor-only scripts

Tier 2 (TEST_SCRIPT_DIRS): Excluded only with ``--exclude-test-scripts``.

Matching is by directory name, not by path prefix: ``Assets/Foo/Editor/``
is pruned the same way as a top-level ``Editor/``.
"""

from __future__ import annotations

# =============================================================================
# Tier 0: HARDCODED - Never traverse, not user-configurable
# =============================================================================

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        ".git",
        ".svn",
        ".hg",
        ".bzr",
    )
)

# =============================================================================
# Tier 1: DEFAULT_PRUNABLE - Excluded by default
# =============================================================================

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # -------------------------------------------------------------------------
        # Unity-generated
        # -------------------------------------------------------------------------
        "Temp",
        "Library",
        "Logs",
        "UserSettings",
        # -------------------------------------------------------------------------
        # .NET build output
        # -------------------------------------------------------------------------
        "obj",
        "bin",
        # -------------------------------------------------------------------------
        # Editor-only scripts (never compiled to Udon)
        # -------------------------------------------------------------------------
        "Editor",
        "editor",
    )
)

# =============================================================================
# Tier 2: Test scripts - opt-in exclusion
# =============================================================================

TEST_SCRIPT_DIRS: frozenset[str] = frozenset(("TestScripts", "Tests", "Test"))
