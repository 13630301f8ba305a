"""Include/exclude pattern reconciliation over a directory tree.

Given include and exclude pattern sets, compute exactly which relative
paths under a base directory survive.  Optionally, the ancestor
directories of excluded paths are excluded as well, so that excluding a
leaf (``.git/HEAD``) also protects the directories that exist to hold it.
"""

from __future__ import annotations

import logging
import os
import posixpath
from typing import Iterable, Sequence, Union

from ._glob import match
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PatternInput = Union[str, Sequence["PatternInput"], None]

_ROOT_MARKERS = frozenset({"", ".", "/", "\\"})


def flatten_patterns(patterns: PatternInput) -> list[str]:
    """Flatten a scalar or arbitrarily nested pattern sequence.

    Order is preserved (depth-first) and duplicates are dropped.  ``None``
    entries are ignored; anything else that is neither a string nor
    iterable raises :class:`ConfigurationError`.

    >>> flatten_patterns(["a", ["b", ["a", "c"]]])
    ['a', 'b', 'c']
    """
    result: list[str] = []
    seen: set[str] = set()

    def _visit(item):
        if item is None:
            return
        if isinstance(item, (str, os.PathLike)):
            p = os.fspath(item)
            if p not in seen:
                seen.add(p)
                result.append(p)
            return
        try:
            subs = iter(item)
        except TypeError:
            raise ConfigurationError(f"Invalid pattern: {item!r}") from None
        for sub in subs:
            _visit(sub)

    _visit(patterns)
    return result


def ancestors(path: str) -> list[str]:
    """Return the strict parent directories of *path*, deepest first.

    The walk stops at ``.`` or the filesystem root, so a relative path
    never yields anything outside its own traversal root.
    """
    result: list[str] = []
    parent = posixpath.dirname(path.replace("\\", "/"))
    while parent not in _ROOT_MARKERS:
        result.append(parent)
        parent = posixpath.dirname(parent)
    return result


def _match_all(patterns: Iterable[str], base_dir, include_hidden: bool) -> set[str]:
    matched: set[str] = set()
    for pattern in patterns:
        found = match(pattern, base_dir, include_hidden=include_hidden)
        logger.debug("Pattern %r matched %d path(s) in %s", pattern, len(found), base_dir)
        matched |= found
    return matched


def _collect_ancestors(paths: Iterable[str]) -> set[str]:
    """Union of the ancestor chains of *paths*.

    A chain is abandoned as soon as it reaches a directory already
    recorded: everything above it has been recorded too.
    """
    recorded: set[str] = set()
    for path in paths:
        for parent in ancestors(path):
            if parent in recorded:
                break
            recorded.add(parent)
    return recorded


def reconcile(
    include: PatternInput,
    exclude: PatternInput,
    base_dir: str | os.PathLike[str],
    *,
    include_hidden: bool = False,
    protect_ancestors: bool = False,
) -> set[str]:
    """Return the paths under *base_dir* matched by *include* but not *exclude*.

    Args:
        include: Pattern or nested pattern sequence selecting paths.
        exclude: Pattern or nested pattern sequence removing paths.  A
            pattern that matches nothing is a no-op.
        base_dir: Directory the patterns are evaluated against.
        include_hidden: Let wildcards match dotfiles (see :func:`match`).
        protect_ancestors: Also remove every parent directory of an
            excluded path from the result.

    Returns:
        ``included - excluded - (ancestors of excluded)`` as a set of
        forward-slash relative paths.
    """
    included = _match_all(flatten_patterns(include), base_dir, include_hidden)
    excluded = _match_all(flatten_patterns(exclude), base_dir, include_hidden)
    result = included - excluded
    if protect_ancestors:
        result -= _collect_ancestors(excluded)
    return result
