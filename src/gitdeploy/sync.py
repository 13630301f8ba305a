"""Mirror a source directory into a live working tree.

Make a destination tree hold exactly the source files, while paths
protected by the destination's exclude patterns (``.git`` at minimum)
survive untouched together with the directories that contain them.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .exceptions import FilesystemError
from .reconcile import PatternInput, reconcile

logger = logging.getLogger(__name__)

ALL_FILES = "**/*"


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class SyncPlan:
    """What a synchronization does (or would do).

    Attributes:
        delete: Destination paths removed before copying.
        copy: Source paths copied into the destination.
        mkdir: The subset of *copy* that are directories.
    """
    delete: list[str] = field(default_factory=list)
    copy: list[str] = field(default_factory=list)
    mkdir: list[str] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return not self.delete and not self.copy

    @property
    def total(self) -> int:
        return len(self.delete) + len(self.copy)

    def files(self) -> list[str]:
        """Copied paths that are not directories."""
        dirs = set(self.mkdir)
        return [p for p in self.copy if p not in dirs]


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

def plan_sync(
    src_dir: str | os.PathLike[str],
    src_exclude: PatternInput,
    dest_dir: str | os.PathLike[str],
    dest_exclude: PatternInput,
) -> SyncPlan:
    """Compute the delete and copy sets without touching the filesystem."""
    to_delete = reconcile(
        [ALL_FILES], dest_exclude, dest_dir,
        include_hidden=True, protect_ancestors=True,
    )
    to_copy = reconcile(
        [ALL_FILES], src_exclude, src_dir,
        include_hidden=True, protect_ancestors=False,
    )
    src = Path(src_dir)
    copy = sorted(to_copy)
    return SyncPlan(
        # Deepest first: a child never outlives a removed parent
        delete=sorted(to_delete, key=lambda p: (-p.count("/"), p)),
        copy=copy,
        mkdir=[p for p in copy if (src / p).is_dir()],
    )


# ---------------------------------------------------------------------------
# Applying
# ---------------------------------------------------------------------------

def _remove(full: Path) -> bool:
    """Remove *full* recursively.  Returns False if it was already gone."""
    if full.is_symlink() or full.is_file():
        full.unlink()
    elif full.is_dir():
        shutil.rmtree(full)
    else:
        return False
    return True


def _apply(plan: SyncPlan, src: Path, dest: Path) -> None:
    for rel in plan.delete:
        full = dest / rel
        try:
            removed = _remove(full)
        except OSError as exc:
            logger.error("Failed to delete %s: %s", full, exc)
            raise FilesystemError("delete", str(full), exc) from exc
        if removed:
            logger.debug("delete %s", rel)

    dirs = set(plan.mkdir)
    for rel in plan.copy:
        target = dest / rel
        if rel in dirs:
            try:
                if target.is_symlink():
                    target.unlink()
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("Failed to create directory %s: %s", target, exc)
                raise FilesystemError("mkdir", str(target), exc) from exc
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.is_symlink():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            shutil.copy2(src / rel, target)
        except OSError as exc:
            logger.error("Failed to copy %s to %s: %s", src / rel, target, exc)
            raise FilesystemError("copy", str(src / rel), exc) from exc
        logger.debug("copy %s", rel)


def synchronize(
    src_dir: str | os.PathLike[str],
    src_exclude: PatternInput,
    dest_dir: str | os.PathLike[str],
    dest_exclude: PatternInput,
    *,
    post_sync: Callable[[str], object] | None = None,
) -> SyncPlan:
    """Make *dest_dir* mirror *src_dir*.

    Everything under *dest_dir* is deleted except paths matched by
    *dest_exclude* and their ancestor directories; then every path under
    *src_dir* not matched by *src_exclude* is copied over, overwriting
    existing files.  Dotfiles are included on both sides.

    If *post_sync* is given it is called with the absolute destination
    path once copying is done.

    Raises:
        FilesystemError: A delete, copy or mkdir failed.  The destination is
            left as it was at the point of failure; nothing is rolled back.

    Returns:
        The :class:`SyncPlan` that was applied.
    """
    src = Path(src_dir)
    dest = Path(dest_dir)
    logger.info("Copying %s to %s", src, dest)
    plan = plan_sync(src, src_exclude, dest, dest_exclude)
    _apply(plan, src, dest)
    logger.info(
        "Deleted %d path(s), copied %d file(s) into %s",
        len(plan.delete), len(plan.files()), dest,
    )
    if post_sync is not None:
        resolved = str(dest.resolve())
        logger.info("Executing post-sync hook in %s", resolved)
        post_sync(resolved)
    return plan
