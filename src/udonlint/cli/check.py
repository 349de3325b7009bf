"""udonsharp-lint / udonlint check - lint a Unity scripts directory."""

import sys
from pathlib import Path

import click
from rich.markup import escape

from udonlint.config.loader import load_config
from udonlint.core.errors import ConfigError, InputError
from udonlint.core.logging import clear_run_id, configure_logging, get_logger, set_run_id
from udonlint.core.progress import pluralize, status
from udonlint.engine.formatting import format_diagnostic, format_summary, to_json
from udonlint.engine.runner import LintRunner

log = get_logger("cli.check")


def run_check(
    directory: Path,
    *,
    exclude_test_scripts: bool = False,
    as_json: bool = False,
    config_file: Path | None = None,
    verbose: bool = False,
) -> int:
    """Lint ``directory`` and print diagnostics, returning the exit code."""
    try:
        config = load_config(directory if directory.is_dir() else None, config_file=config_file)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    if verbose:
        configure_logging(level="DEBUG")
    else:
        configure_logging(config=config.logging)
    run_id = set_run_id()
    log.debug("check_started", directory=str(directory), run_id=run_id)

    output = config.output
    if not as_json:
        status(escape(f"[{output.tool_name}] Scanning directory: {directory}"))
    try:
        result = LintRunner(config).check_directory(directory, exclude_test_scripts=exclude_test_scripts)
    except InputError as e:
        raise click.ClickException(e.message) from e
    finally:
        clear_run_id()

    base_dir = Path.cwd()
    if as_json:
        click.echo(
            to_json(
                result.diagnostics,
                base_dir=base_dir,
                errors=result.error_count,
                warnings=result.warning_count,
                prefix=output.code_prefix,
                tool_name=output.tool_name,
            )
        )
        return result.exit_code

    if not result.entry_files and not result.diagnostics:
        status(escape(f"[{output.tool_name}] No UdonSharp scripts found."))
        return 0
    found = pluralize(len(result.entry_files), "UdonSharp script")
    status(escape(f"[{output.tool_name}] Found {found} to check."))

    for diagnostic in result.diagnostics:
        click.echo(format_diagnostic(diagnostic, base_dir, output.code_prefix))
    click.echo()
    click.echo(format_summary(result.error_count, result.warning_count, output.tool_name))
    return result.exit_code


@click.command()
@click.argument("directory", type=click.Path(path_type=Path))
@click.option("--exclude-test-scripts", is_flag=True, help="Skip TestScripts/, Tests/ and Test/ directories")
@click.option("--json", "as_json", is_flag=True, help="Output diagnostics as JSON")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of <directory>/.udonlint.yaml",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def check_command(
    directory: Path,
    exclude_test_scripts: bool,
    as_json: bool,
    config_file: Path | None,
    verbose: bool,
) -> None:
    """Check UdonSharp scripts under DIRECTORY for unsupported C# features.

    Exits 1 when any error is reported, 0 otherwise (warnings never fail).
    """
    exit_code = run_check(
        directory,
        exclude_test_scripts=exclude_test_scripts,
        as_json=as_json,
        config_file=config_file,
        verbose=verbose,
    )
    if exit_code:
        sys.exit(exit_code)
