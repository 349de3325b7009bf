"""udonlint CLI - UdonSharp compliance linter."""

import click

from udonlint import __version__
from udonlint.cli.check import check_command
from udonlint.cli.rules import rules_command


@click.group()
@click.version_option(version=__version__, prog_name="udonlint")
def cli() -> None:
    """udonlint - Static checks for UdonSharp scripts."""


cli.add_command(check_command, name="check")
cli.add_command(rules_command, name="rules")


if __name__ == "__main__":
    cli()
