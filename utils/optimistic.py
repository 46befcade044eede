"""
Optimistic mutations with rollback.

apply_optimistic() applies a tentative local change, awaits the server call and
reports one of three outcomes instead of leaving callers to try/except:

- CONFIRMED: the request succeeded, the tentative state stands
- ROLLED_BACK: the request failed, the snapshot taken before the change is restored
- STALE: the request failed, but the store changed again meanwhile (a refresh, a
  push message, another mutation), so restoring the old snapshot would discard
  newer truth. Nothing is restored.

Stores take part by implementing the OptimisticStore protocol: a monotonically
increasing version bumped on every change, plus snapshot/restore.
"""

import logging
from typing import Any, Awaitable, Callable, Protocol

from pydantic import BaseModel

from enums.optimistic_outcome import OptimisticOutcome
from exceptions.base import StorefrontException

logger = logging.getLogger(__name__)


class OptimisticStore(Protocol):
    version: int

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...


class OptimisticResult(BaseModel):
    outcome: OptimisticOutcome
    error_message: str | None = None

    @property
    def confirmed(self) -> bool:
        return self.outcome == OptimisticOutcome.CONFIRMED


async def apply_optimistic(
    store: OptimisticStore,
    mutate: Callable[[], None],
    request: Callable[[], Awaitable[Any]],
    label: str = "mutation"
) -> OptimisticResult:
    """
    Args:
        store: Store whose state is changed tentatively
        mutate: Synchronous local change; must bump store.version
        request: Server call confirming the change
        label: Name used in log lines

    Returns:
        OptimisticResult describing what happened to the tentative state
    """
    before = store.snapshot()
    mutate()
    applied_version = store.version

    try:
        await request()
    except StorefrontException as e:
        if store.version != applied_version:
            logger.warning(f"[Optimistic] {label} failed after newer changes, keeping current state: {e}")
            return OptimisticResult(outcome=OptimisticOutcome.STALE, error_message=str(e))
        store.restore(before)
        logger.warning(f"[Optimistic] {label} failed, rolled back: {e}")
        return OptimisticResult(outcome=OptimisticOutcome.ROLLED_BACK, error_message=str(e))

    return OptimisticResult(outcome=OptimisticOutcome.CONFIRMED)
