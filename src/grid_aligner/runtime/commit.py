"""
Batch commits of item mutations.

Each mutation is committed as its own task and the batch is joined with
per-item result capture. Successful commits are never rolled back when a
sibling fails.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from grid_aligner.errors import CommitError
from grid_aligner.logging_utils import logger
from grid_aligner.type_defs import CommitResult, ImageItem, Mutation

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Sequence

    from grid_aligner.board import Board


async def commit_all(
    board: Board,
    mutations: Sequence[Mutation],
) -> list[CommitResult]:
    """Commit every mutation concurrently and report each outcome."""
    if not mutations:
        return []
    outcomes = await asyncio.gather(
        *(board.commit(mutation) for mutation in mutations),
        return_exceptions=True,
    )
    results: list[CommitResult] = []
    for mutation, outcome in zip(mutations, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Commit failed for %s: %s", mutation.id, outcome)
            results.append(CommitResult(mutation.id, outcome))
        else:
            results.append(CommitResult(mutation.id))
    return results


def ensure_committed(results: Iterable[CommitResult]) -> None:
    """Raise CommitError if any commit in the batch failed."""
    failures = [result for result in results if not result.ok]
    if failures:
        raise CommitError(failures)


async def commit_fields(
    board: Board,
    items: Iterable[ImageItem],
    *fields: str,
) -> list[CommitResult]:
    """Commit the named fields of each item and fail on any rejection."""
    mutations = [
        Mutation(item.id, {name: getattr(item, name) for name in fields})
        for item in items
    ]
    results = await commit_all(board, mutations)
    ensure_committed(results)
    return results
