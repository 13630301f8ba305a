"""Sequential step pipeline with a sticky "skip the rest" signal.

A step is any callable taking the current ``skip`` flag and returning a
:data:`StepOutcome`.  :func:`run_pipeline` runs steps strictly one after
another: a :class:`Failure` stops the pipeline, and a
``Success(skip_rest=True)`` tells every later step that there is nothing
left to do (e.g. ``git status`` found no changes, so commit and push are
skipped) without that being an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Union

from .exceptions import DeployError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    """A step completed.  *skip_rest* makes every later step skip."""
    skip_rest: bool = False


@dataclass(frozen=True)
class Failure:
    """A step failed with *error*; the pipeline stops."""
    error: DeployError


StepOutcome = Union[Success, Failure]
Step = Callable[[bool], StepOutcome]


def step(fn: Callable[[], object], description: str) -> Step:
    """Wrap a no-argument callable as a :data:`Step`.

    The callable is not run when ``skip`` is set.  A :class:`DeployError`
    it raises becomes a :class:`Failure`.
    """
    def _step(skip: bool) -> StepOutcome:
        if skip:
            logger.info("Skipping %s", description)
            return Success(skip_rest=True)
        logger.info("Running %s", description)
        fn()
        return Success()

    _step.__name__ = f"step<{description}>"
    _step.__qualname__ = _step.__name__
    return _step


def run_pipeline(steps: Iterable[Step]) -> StepOutcome:
    """Run *steps* in order and return the overall outcome.

    Each step receives the current ``skip`` flag, initially ``False``.  Once
    a step returns ``Success(skip_rest=True)`` the flag stays ``True`` for
    the remaining steps.  The first :class:`Failure` (returned, or a
    :class:`DeployError` raised by the step) ends the run; no later step is
    invoked.  Other exceptions propagate unchanged.

    Returns:
        The first :class:`Failure`, or ``Success(skip_rest=<final flag>)``.
    """
    skip = False
    for index, current in enumerate(steps):
        try:
            outcome = current(skip)
        except DeployError as exc:
            outcome = Failure(exc)
        if isinstance(outcome, Failure):
            logger.error("Step %d failed: %s", index + 1, outcome.error)
            return outcome
        if not isinstance(outcome, Success):
            raise TypeError(
                f"Step {index + 1} returned {outcome!r}, expected Success or Failure"
            )
        skip = skip or outcome.skip_rest
    return Success(skip_rest=skip)
