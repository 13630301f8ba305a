"""The sync and ls commands."""

from __future__ import annotations

import click

from ..exceptions import DeployError
from ._helpers import (
    main,
    _dry_run_option,
    _exclude_option,
    _protect_option,
    _raise_click,
    _status,
)


@main.command()
@click.argument("src", type=click.Path(exists=True, file_okay=False))
@click.argument("dest", type=click.Path(file_okay=False))
@_exclude_option
@_protect_option
@_dry_run_option
@click.pass_context
def sync(ctx, src, dest, exclude, protect, dry_run):
    """Make DEST mirror SRC (like rsync --delete), keeping DEST/.git.

    Everything in DEST is removed except .git and paths matching --protect
    (plus the directories holding them); then SRC is copied in, skipping
    paths matching --exclude.
    """
    from ..deploy import with_git_protection
    from ..sync import plan_sync, synchronize

    src_ignore = with_git_protection(list(exclude))
    repo_ignore = with_git_protection(list(protect))

    try:
        if dry_run:
            plan = plan_sync(src, src_ignore, dest, repo_ignore)
        else:
            plan = synchronize(src, src_ignore, dest, repo_ignore)
    except DeployError as exc:
        _raise_click(exc)

    if dry_run:
        for path in plan.delete:
            click.echo(f"delete  {path}")
        for path in plan.copy:
            click.echo(f"copy    {path}")
        click.echo(f"{len(plan.delete)} to delete, {len(plan.copy)} to copy.")
        return
    _status(ctx, f"Synced {src} to {dest}: {len(plan.delete)} deleted, {len(plan.files())} copied")


@main.command("ls")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.argument("patterns", nargs=-1)
@_exclude_option
@click.option("--hidden", "-a", is_flag=True, default=False,
              help="Let wildcards match dotfiles.")
@click.option("--protect-ancestors", is_flag=True, default=False,
              help="Also drop the parent directories of excluded paths.")
def ls(directory, patterns, exclude, hidden, protect_ancestors):
    """List paths under DIRECTORY selected by PATTERNS minus --exclude.

    PATTERNS default to '**/*' (everything).
    """
    from ..reconcile import reconcile

    try:
        paths = reconcile(
            list(patterns) or ["**/*"], list(exclude), directory,
            include_hidden=hidden, protect_ancestors=protect_ancestors,
        )
    except DeployError as exc:
        _raise_click(exc)
    for path in sorted(paths):
        click.echo(path)
