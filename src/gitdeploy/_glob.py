"""Dotfile-aware glob matching against a directory on disk."""

from __future__ import annotations

import os
from fnmatch import fnmatch as _fnmatch

from .exceptions import ConfigurationError


def glob_match(pattern: str, name: str, *, include_hidden: bool = False) -> bool:
    """Match *name* against a glob *pattern* segment.

    ``*`` and ``?`` do not match a leading ``.`` unless the pattern itself
    starts with ``.`` (Unix/rsync convention) or *include_hidden* is set.
    """
    if not include_hidden and not pattern.startswith(".") and name.startswith("."):
        return False
    return _fnmatch(name, pattern)


def _has_wild(seg: str) -> bool:
    return "*" in seg or "?" in seg or "[" in seg


def _split_pattern(pattern: str) -> list[str]:
    """Normalize *pattern* into forward-slash segments.

    Leading ``./`` and trailing ``/`` are dropped.  Absolute patterns and
    ``..`` segments raise :class:`ConfigurationError` (a ``ValueError``):
    matches must stay under the base directory.
    """
    pattern = pattern.replace(os.sep, "/").replace("\\", "/")
    if pattern.startswith("/") or os.path.splitdrive(pattern)[0]:
        raise ConfigurationError(f"Pattern must be relative: {pattern}")
    segments = [s for s in pattern.split("/") if s and s != "."]
    if ".." in segments:
        raise ConfigurationError(f"Pattern must not contain '..': {pattern}")
    return segments


def check_pattern(pattern: str) -> None:
    """Raise :class:`ConfigurationError` if *pattern* could escape its base directory."""
    _split_pattern(pattern)


def _listdir(path: str) -> list[tuple[str, bool]]:
    """Return ``[(name, descend), ...]`` for *path*, or ``[]`` if unreadable.

    *descend* is true for real directories; symlinked directories are
    listed but never descended into.
    """
    try:
        entries = os.scandir(path)
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return []
    with entries:
        return [(e.name, e.is_dir(follow_symlinks=False)) for e in entries]


def _walk(segments: list[str], base: str, prefix: str, include_hidden: bool):
    """Recursive glob generator yielding forward-slash relative paths."""
    seg = segments[0]
    rest = segments[1:]
    scan_dir = os.path.join(base, prefix) if prefix else base

    if seg == "**":
        if not rest:
            # Trailing **: the directory itself plus everything below it
            if prefix:
                if not os.path.isdir(scan_dir):
                    return
                yield prefix
            yield from _walk_all(base, prefix, include_hidden)
            return
        # Zero dirs: match the rest right here
        yield from _walk(rest, base, prefix, include_hidden)
        # One+ dirs: recurse into subdirectories, keeping **
        for name, descend in _listdir(scan_dir):
            if not descend:
                continue
            if name.startswith(".") and not include_hidden:
                continue
            full = f"{prefix}/{name}" if prefix else name
            yield from _walk(segments, base, full, include_hidden)
        return

    if _has_wild(seg):
        for name, _descend in _listdir(scan_dir):
            if not glob_match(seg, name, include_hidden=include_hidden):
                continue
            full = f"{prefix}/{name}" if prefix else name
            if rest:
                yield from _walk(rest, base, full, include_hidden)
            else:
                yield full
    else:
        full = f"{prefix}/{seg}" if prefix else seg
        abs_path = os.path.join(base, full)
        if rest:
            if os.path.isdir(abs_path) and not os.path.islink(abs_path):
                yield from _walk(rest, base, full, include_hidden)
        elif os.path.lexists(abs_path):
            yield full


def _walk_all(base: str, prefix: str, include_hidden: bool):
    """Yield every entry below *prefix*, honoring the dotfile rule."""
    scan_dir = os.path.join(base, prefix) if prefix else base
    for name, descend in _listdir(scan_dir):
        if name.startswith(".") and not include_hidden:
            continue
        full = f"{prefix}/{name}" if prefix else name
        yield full
        if descend:
            yield from _walk_all(base, full, include_hidden)


def match(pattern: str, base_dir: str | os.PathLike[str], *, include_hidden: bool = False) -> set[str]:
    """Expand a glob *pattern* against *base_dir*.

    Supports ``*``, ``?``, ``[...]`` and ``**``.  ``*`` and ``?`` do not match
    a leading ``.`` unless the pattern segment itself starts with ``.`` or
    *include_hidden* is true.  ``**`` matches zero or more directory levels
    and, in trailing position, also matches the directory it follows
    (``.git/**`` matches ``.git`` and everything under it).

    Returns the set of matching files and directories as paths relative to
    *base_dir*, always using forward slashes.  A pattern that matches
    nothing, or a missing *base_dir*, gives an empty set.
    """
    segments = _split_pattern(pattern)
    if not segments:
        return set()
    base = os.fspath(base_dir)
    if not os.path.isdir(base):
        return set()
    return set(_walk(segments, base, "", include_hidden))
