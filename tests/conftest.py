"""Shared fixtures for gitdeploy tests."""

import shutil
import subprocess

import pytest
from click.testing import CliRunner
from dulwich.repo import Repo as DulwichRepo


def make_tree(root, files):
    """Create *files* ({relative_path: text}) under *root*.

    A path ending in ``/`` creates an empty directory.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        if rel.endswith("/"):
            (root / rel).mkdir(parents=True, exist_ok=True)
            continue
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content)
    return root


def list_tree(root):
    """Return the set of forward-slash relative paths of files under *root*."""
    return {
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file()
    }


requires_git = pytest.mark.skipif(
    shutil.which("git") is None, reason="git executable not available",
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def src_tree(tmp_path):
    """A build output directory.

    Tree:
        index.html, app.js, .nojekyll,
        css/site.css, img/logo.svg, maps/app.js.map
    """
    return make_tree(tmp_path / "dist", {
        "index.html": "<html></html>",
        "app.js": "console.log(1)",
        ".nojekyll": "",
        "css/site.css": "body {}",
        "img/logo.svg": "<svg/>",
        "maps/app.js.map": "{}",
    })


@pytest.fixture
def remote(tmp_path):
    """An empty bare dulwich repo suitable as a push target."""
    p = str(tmp_path / "remote.git")
    DulwichRepo.init_bare(p, mkdir=True)
    return p


@pytest.fixture
def git_env(monkeypatch, tmp_path):
    """Isolate git from the user's config and give it a commit identity."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Deploy Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "deploy@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Deploy Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "deploy@example.com")


@pytest.fixture
def remote_with_branch(tmp_path, remote, git_env):
    """The bare *remote* with a ``gh-pages`` branch holding old.txt and CNAME."""
    work = make_tree(tmp_path / "seed", {"old.txt": "old", "CNAME": "example.com"})
    for args in (
        ["init", "-q"],
        ["checkout", "-q", "-b", "gh-pages"],
        ["add", "--all"],
        ["commit", "-q", "-m", "seed"],
        ["push", "-q", remote, "gh-pages"],
    ):
        subprocess.run(["git", *args], cwd=work, check=True, capture_output=True)
    return remote


def remote_files(repo_path, branch):
    """Return {path: bytes} of the tree at ``refs/heads/<branch>`` in a bare repo."""
    repo = DulwichRepo(repo_path)
    commit = repo[repo.refs[f"refs/heads/{branch}".encode()]]
    result = {}
    for entry in repo.object_store.iter_tree_contents(commit.tree):
        result[entry.path.decode()] = repo[entry.sha].data
    return result


def remote_refs(repo_path):
    """Return {ref_str: sha_str} excluding HEAD."""
    repo = DulwichRepo(repo_path)
    return {
        ref.decode(): sha.decode()
        for ref, sha in repo.get_refs().items()
        if ref != b"HEAD"
    }
