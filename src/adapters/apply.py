"""
Apply Executor - fail-soft execution of a ChangeSet.

Changes run strictly in the order creates, updates, deletes, so a delete of
a superseded resource never races ahead of its replacement's create. Every
Change is attempted on its own: a failure is recorded and the loop moves on.

Cancellation is cooperative. Once the stop event is set or the deadline has
passed, no further Changes are issued and the remainder is counted as
skipped; the partial result is still returned.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, Optional, Tuple

from adapters.types import (
    ApplyResult,
    Change,
    ChangeKind,
    ChangeSet,
    ImportListStats,
)
from ir.types import IR

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[ChangeKind, Change], Awaitable[None]]


def _ordered(changes: ChangeSet) -> Iterator[Tuple[ChangeKind, Change]]:
    for change in changes.creates:
        yield ChangeKind.CREATE, change
    for change in changes.updates:
        yield ChangeKind.UPDATE, change
    for change in changes.deletes:
        yield ChangeKind.DELETE, change


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return deadline - time.monotonic()


async def apply_changes(
    changes: ChangeSet,
    handler: ChangeHandler,
    *,
    stop_event: Optional[asyncio.Event] = None,
    deadline: Optional[float] = None,
) -> ApplyResult:
    """
    Execute every Change through ``handler``, isolating failures.

    Args:
        changes: The ChangeSet to apply
        handler: Coroutine function performing one backend operation
        stop_event: When set, stop issuing Changes
        deadline: ``time.monotonic()`` value after which no Change starts;
            a running Change is cut off at the deadline

    Returns:
        ApplyResult where applied + failed + skipped equals the number of
        Changes in ``changes``
    """
    result = ApplyResult()
    total = changes.total_changes()
    attempted = 0

    for kind, change in _ordered(changes):
        if stop_event is not None and stop_event.is_set():
            logger.warning("Apply interrupted by shutdown")
            break
        remaining = _remaining(deadline)
        if remaining is not None and remaining <= 0:
            logger.warning("Apply deadline exceeded")
            break

        attempted += 1
        try:
            await asyncio.wait_for(handler(kind, change), timeout=remaining)
            result.applied += 1
            logger.info(f"{kind.value} {change.resource_type.value} '{change.name}'")
        except Exception as e:
            result.record_failure(change, e)
            logger.error(
                f"Failed to {kind.value} {change.resource_type.value} '{change.name}': {e}"
            )

    result.skipped = total - attempted
    if result.skipped:
        logger.warning(f"Skipped {result.skipped} change(s)")
    return result


@dataclass
class DirectApplyCallbacks:
    """
    Steps for categories that run their own lookup/create/update sequence.

    Each callback is optional; a step only runs when the IR declares the
    matching category.
    """

    apply_import_lists: Optional[Callable[[], Awaitable[ImportListStats]]] = None
    apply_media_management: Optional[Callable[[], Awaitable[None]]] = None
    apply_authentication: Optional[Callable[[], Awaitable[None]]] = None


async def apply_direct(ir: IR, callbacks: DirectApplyCallbacks) -> ApplyResult:
    """
    Run the direct-apply steps and fold their outcomes into an ApplyResult.

    Import-list stats contribute created + updated + deleted to ``applied``
    and one failure per reported error.
    Media management and authentication count as one applied or one failed
    step each.
    """
    result = ApplyResult()

    if callbacks.apply_import_lists is not None and ir.import_lists:
        try:
            stats = await callbacks.apply_import_lists()
        except Exception as e:
            logger.error(f"Failed to apply import lists: {e}")
            result.record_failure(None, e, resource="ImportList")
        else:
            result.applied += stats.created + stats.updated + stats.deleted
            for error in stats.errors:
                result.record_failure(None, error, resource="ImportList")

    if callbacks.apply_media_management is not None and ir.media_management is not None:
        try:
            await callbacks.apply_media_management()
            result.applied += 1
        except Exception as e:
            logger.error(f"Failed to apply media management: {e}")
            result.record_failure(None, e, resource="MediaManagement")

    if callbacks.apply_authentication is not None and ir.authentication is not None:
        try:
            await callbacks.apply_authentication()
            result.applied += 1
        except Exception as e:
            logger.error(f"Failed to apply authentication: {e}")
            result.record_failure(None, e, resource="Authentication")

    return result
