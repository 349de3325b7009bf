"""Tests for core/progress.py module.

Covers:
- _is_tty() function
- status() function
- progress() generator
- pluralize() function
- suppress_console_logs() context manager
"""

from __future__ import annotations

import sys
from io import StringIO
from unittest.mock import patch

import pytest

from udonlint.core.progress import (
    _PROGRESS_THRESHOLD,
    _STYLES,
    _is_tty,
    get_console,
    is_console_suppressed,
    pluralize,
    progress,
    status,
    suppress_console_logs,
)


class TestIsTty:
    """Tests for _is_tty function."""

    def test_returns_bool(self) -> None:
        """Returns a boolean."""
        assert isinstance(_is_tty(), bool)

    def test_false_for_stringio(self) -> None:
        """Returns False for non-TTY stderr."""
        original = sys.stderr
        try:
            sys.stderr = StringIO()
            assert _is_tty() is False
        finally:
            sys.stderr = original


class TestStyles:
    """Tests for _STYLES constant."""

    def test_has_expected_styles(self) -> None:
        """Contains expected style keys."""
        assert set(_STYLES.keys()) == {"success", "error", "info", "warning", "none"}

    def test_warning_style(self) -> None:
        """Warning style has a bang."""
        assert "!" in _STYLES["warning"]


class TestStatus:
    """Tests for status function."""

    def test_prints_message(self) -> None:
        """Prints a message to console."""
        with patch("udonlint.core.progress._console") as mock_console:
            status("Scanning directory: Assets")
            mock_console.print.assert_called_once()

    def test_warning_style(self) -> None:
        """Applies warning style."""
        with patch("udonlint.core.progress._console") as mock_console:
            status("Skipping unreadable file", style="warning")
            call_args = mock_console.print.call_args[0][0]
            assert "!" in call_args
            assert "Skipping unreadable file" in call_args

    def test_with_indent(self) -> None:
        """Applies indentation."""
        with patch("udonlint.core.progress._console") as mock_console:
            status("Indented", indent=4)
            call_args = mock_console.print.call_args[0][0]
            assert "    Indented" in call_args

    def test_console_writes_to_stderr(self) -> None:
        """Status output never mixes into stdout diagnostics."""
        assert get_console().stderr is True


class TestProgress:
    """Tests for progress generator."""

    def test_yields_all_items(self) -> None:
        """Yields all items from iterable."""
        items = [1, 2, 3, 4, 5]
        assert list(progress(items)) == items

    def test_with_description_and_total(self) -> None:
        """Works with description and explicit total on a generator."""
        result = list(progress((i for i in range(3)), desc="Parsing", total=3))
        assert result == [0, 1, 2]

    def test_threshold_constant(self) -> None:
        """Bar threshold is 100 items."""
        assert _PROGRESS_THRESHOLD == 100


class TestPluralize:
    """Tests for pluralize function."""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 errors"), (1, "1 error"), (2, "2 errors")],
    )
    def test_default_plural(self, count: int, expected: str) -> None:
        assert pluralize(count, "error") == expected

    def test_custom_plural(self) -> None:
        assert pluralize(2, "entry point", "entry points") == "2 entry points"


class TestSuppressConsoleLogs:
    """Tests for suppress_console_logs context manager."""

    def test_sets_suppression_flag(self) -> None:
        """Flag is set inside the block and cleared after."""
        assert is_console_suppressed() is False
        with suppress_console_logs():
            assert is_console_suppressed() is True
        assert is_console_suppressed() is False

    def test_clears_flag_on_exception(self) -> None:
        """Flag is cleared even when the block raises."""
        with pytest.raises(RuntimeError), suppress_console_logs():
            raise RuntimeError("boom")
        assert is_console_suppressed() is False
