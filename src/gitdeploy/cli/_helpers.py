"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import logging

import click

from ..exceptions import DeployError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("gitdeploy").setLevel(logging.DEBUG)
    elif quiet:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")
        logging.getLogger("gitdeploy").setLevel(logging.WARNING)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        logging.getLogger("gitdeploy").setLevel(logging.INFO)


def _raise_click(exc: DeployError):
    """Re-raise a library error as a ClickException (exit status 1)."""
    raise click.ClickException(str(exc)) from exc


def _exclude_option(f):
    """Shared --exclude option: patterns left out of the copy."""
    return click.option(
        "--exclude", "exclude", multiple=True, metavar="PATTERN",
        help="Do not copy source paths matching PATTERN (glob, repeatable).",
    )(f)


def _protect_option(f):
    """Shared --protect option: destination patterns that are never deleted."""
    return click.option(
        "--protect", "protect", multiple=True, metavar="PATTERN",
        help="Never delete destination paths matching PATTERN (glob, repeatable). "
             ".git/** is always protected.",
    )(f)


def _dry_run_option(f):
    return click.option(
        "-n", "--dry-run", is_flag=True, default=False,
        help="Show what would change without changing anything.",
    )(f)


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and status output on stderr.")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors.")
@click.pass_context
def main(ctx, verbose, quiet):
    """gitdeploy — publish a build directory to a remote git branch.

    \b
    Quick start:
      gitdeploy deploy --src dist --url git@host:me/site.git --branch gh-pages
      gitdeploy sync dist checkout --protect CNAME
      gitdeploy ls dist --exclude '**/*.map'

    \b
    Common workflows:
      deploy    Clone, mirror, commit, tag and push in one go
      sync      Mirror one directory into another, keeping .git
      ls        Show which paths a set of patterns selects

    Options for deploy can also come from a JSON file (--config) or the
    GITDEPLOY_SRC / GITDEPLOY_URL / GITDEPLOY_BRANCH / GITDEPLOY_TMP
    environment variables.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose, quiet)
