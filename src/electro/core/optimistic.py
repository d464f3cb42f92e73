"""
Electro Core - Optimistic Mutations.

Apply a local change before a remote write confirms it, and undo it if the
write fails. Usable by any cache: the caller supplies how to apply the change
(returning a snapshot of what it replaced) and how to restore that snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")


class OptimisticMutation(Generic[S, R]):
    """One optimistic write.

    Example:
        mutation = OptimisticMutation(
            apply=lambda: cache.replace(key, value),
            rollback=lambda previous: cache.restore(previous),
            label=f"settings:{key}",
        )
        await mutation.run(lambda: repository.write(key, value))
    """

    def __init__(
        self,
        apply: Callable[[], S],
        rollback: Callable[[S], None],
        label: str = "mutation",
    ):
        self._apply = apply
        self._rollback = rollback
        self.label = label
        self.snapshot: S | None = None
        self.applied = False
        self.rolled_back = False

    async def run(
        self,
        remote: Callable[[], Awaitable[R]],
        on_success: Callable[[R], Awaitable[None]] | None = None,
    ) -> R:
        """Apply locally, await the remote write, roll back if it raises.

        The remote exception is re-raised after the rollback. `on_success`
        runs only after the remote write returned; its failures do not roll
        back, since the remote store already holds the new value.
        """
        self.snapshot = self._apply()
        self.applied = True
        logger.debug("Optimistic update applied for %s", self.label)

        try:
            result = await remote()
        except Exception:
            self._rollback(self.snapshot)
            self.rolled_back = True
            logger.info("Rollback applied for %s", self.label)
            raise

        if on_success is not None:
            await on_success(result)
        return result
