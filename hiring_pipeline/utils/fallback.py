"""
Ordered fallback over a list of candidates.

Candidates are tried strictly one after another, never in parallel, so a
quota-bearing upstream is never hit twice for the same request.
"""

import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

C = TypeVar("C")
R = TypeVar("R")


class NoCandidatesError(RuntimeError):
    """Raised when the fallback is invoked with an empty candidate list."""


async def run_sequential_fallback(
    candidates: Sequence[C],
    attempt: Callable[[C], Awaitable[R]],
    should_skip: Callable[[BaseException], bool],
) -> R:
    """
    Return the first successful ``attempt(candidate)``.

    An exception for which ``should_skip`` is true moves on to the next
    candidate; any other exception is re-raised immediately. When every
    candidate was skipped, the last skipped exception is raised.
    """
    if not candidates:
        raise NoCandidatesError("No candidates configured")

    last_error: BaseException | None = None
    for index, candidate in enumerate(candidates):
        try:
            return await attempt(candidate)
        except Exception as exc:
            if not should_skip(exc):
                raise
            logger.warning(
                "Candidate %s (%d/%d) skipped: %s",
                candidate,
                index + 1,
                len(candidates),
                exc,
            )
            last_error = exc

    assert last_error is not None
    raise last_error
