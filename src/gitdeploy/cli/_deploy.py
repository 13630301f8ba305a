"""The deploy command."""

from __future__ import annotations

import subprocess

import click

from ..exceptions import DeployError, ExternalCommandError
from ..git import redact_url
from ..reconcile import flatten_patterns
from ._helpers import (
    main,
    _exclude_option,
    _protect_option,
    _raise_click,
    _status,
)


def _shell_hook(command: str):
    """Return a post-sync hook running *command* in the working tree."""
    def _hook(path: str) -> None:
        proc = subprocess.run(command, shell=True, cwd=path, capture_output=True, text=True)
        if proc.returncode != 0:
            raise ExternalCommandError(
                [command], proc.returncode, proc.stdout, proc.stderr, path,
            )
    return _hook


def _merge_patterns(configured, extra) -> list:
    """Append CLI patterns to configured ones without mutating either."""
    return flatten_patterns([configured, list(extra)])


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON file with deploy options (camelCase or snake_case keys).")
@click.option("--src", envvar="GITDEPLOY_SRC",
              help="Directory to publish (or set GITDEPLOY_SRC).")
@click.option("--url", envvar="GITDEPLOY_URL",
              help="Remote repository URL (or set GITDEPLOY_URL).")
@click.option("--tmp", envvar="GITDEPLOY_TMP",
              help="Scratch working tree, wiped on every run [default: tmp/deployDir].")
@click.option("--branch", "-b", envvar="GITDEPLOY_BRANCH",
              help="Target branch [default: master].")
@click.option("--message", "-m", help="Commit message [default: autocommit].")
@click.option("--tag", help="Create an annotated tag at the new commit.")
@click.option("--tag-message", help="Tag annotation message [default: autocommit].")
@_exclude_option
@_protect_option
@click.option("--post-sync", "post_sync", metavar="COMMAND",
              help="Shell command run inside the working tree after copying.")
@click.pass_context
def deploy(ctx, config_path, src, url, tmp, branch, message, tag, tag_message,
           exclude, protect, post_sync):
    """Publish a directory to a branch of a remote git repository.

    Clones the remote into the scratch directory, replaces its contents
    with those of --src (keeping .git and --protect paths), then commits,
    tags and pushes.  If the branch already exists and nothing changed,
    no commit is made.
    """
    from ..config import load_config, normalize_keys, options_from_mapping
    from ..deploy import deploy as run_deploy

    try:
        values = normalize_keys(load_config(config_path)) if config_path else {}
        overrides = {
            "src": src, "url": url, "tmp": tmp, "branch": branch,
            "message": message, "tag": tag, "tag_message": tag_message,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["src_ignore_patterns"] = _merge_patterns(
            values.get("src_ignore_patterns"), exclude)
        values["repo_ignore_patterns"] = _merge_patterns(
            values.get("repo_ignore_patterns"), protect)
        if post_sync:
            values["post_sync"] = _shell_hook(post_sync)
        elif isinstance(values.get("post_sync"), str):
            values["post_sync"] = _shell_hook(values["post_sync"])
        options = options_from_mapping(values)
        outcome = run_deploy(options)
    except DeployError as exc:
        _raise_click(exc)

    target = f"{redact_url(options.url)} ({options.branch})"
    if outcome.skip_rest:
        click.echo(f"Nothing to deploy — {target} is up to date.")
    else:
        _status(ctx, f"Deployed {options.src} to {target}")
