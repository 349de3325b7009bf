"""Source provider: candidate ``.cs`` files under a Unity project directory."""

from __future__ import annotations

import os
from pathlib import Path

from udonlint.config.models import DiscoveryConfig
from udonlint.core.errors import InputError
from udonlint.core.excludes import (
    DEFAULT_PRUNABLE_DIRS,
    HARDCODED_DIRS,
    TEST_SCRIPT_DIRS,
)
from udonlint.core.logging import get_logger

log = get_logger("discovery")


def _pruned_dirs(config: DiscoveryConfig, exclude_test_scripts: bool) -> frozenset[str]:
    prunable = (
        frozenset(config.excluded_dirs)
        if config.excluded_dirs is not None
        else DEFAULT_PRUNABLE_DIRS
    )
    pruned = HARDCODED_DIRS | prunable
    if exclude_test_scripts:
        pruned |= TEST_SCRIPT_DIRS
    return pruned


def _walk_with_pruning(root: Path, pruned: frozenset[str], extensions: set[str]) -> list[Path]:
    """Walk all files, pruning directories by name during the walk."""
    results: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in pruned]
        for filename in filenames:
            if Path(filename).suffix.lower() in extensions:
                results.append(Path(dirpath) / filename)
    return results


def discover_sources(
    root: Path,
    *,
    exclude_test_scripts: bool = False,
    config: DiscoveryConfig | None = None,
) -> list[Path]:
    """Return absolute paths of candidate source files, sorted.

    Raises:
        InputError: If ``root`` does not exist or is not a directory.
    """
    if not root.exists():
        raise InputError.directory_not_found(str(root))
    if not root.is_dir():
        raise InputError.not_a_directory(str(root))

    config = config or DiscoveryConfig()
    pruned = _pruned_dirs(config, exclude_test_scripts)
    extensions = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in config.extensions}

    files = sorted(p.resolve() for p in _walk_with_pruning(root.resolve(), pruned, extensions))
    log.debug(
        "sources_discovered",
        root=str(root),
        count=len(files),
        exclude_test_scripts=exclude_test_scripts,
    )
    return files
