"""Per-key serialized execution of persistence writes."""

from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import Awaitable, Callable

from ..domain.enums import PersistenceOperation
from ..domain.models import OperationResult
from ..domain.types import OperationResultCallback
from ..ports.logger import LoggerPort
from ..ports.metrics import MetricsPort

WriteOperation = Callable[[], Awaitable[OperationResult]]


class KeySequencer:
    """Runs write operations one at a time per key, concurrently across keys.

    Each submitted operation waits for the previous operation on the same key
    to finish, so a remove that follows an update can never be undone by a
    late-completing store. Operations never raise out of their task: failures
    are logged and turned into a failed OperationResult.
    """

    def __init__(
        self,
        logger: LoggerPort,
        metrics: MetricsPort,
        on_result: OperationResultCallback | None = None,
    ) -> None:
        self._logger = logger
        self._metrics = metrics
        self._on_result = on_result
        self._tails: dict[str, asyncio.Task[OperationResult]] = {}

    def submit(
        self, key: str, kind: PersistenceOperation, operation: WriteOperation
    ) -> asyncio.Task[OperationResult]:
        """Queue an operation behind any in-flight work for the same key.

        Must be called from a running event loop.

        Args:
            key: The entity key the operation writes
            kind: Store or remove, for reporting
            operation: Zero-argument coroutine function performing the write

        Returns:
            Task resolving to the operation's result
        """
        previous = self._tails.get(key)
        task = asyncio.get_running_loop().create_task(
            self._run(key, kind, operation, previous), name=f"{kind.value}:{key}"
        )
        self._tails[key] = task
        self._metrics.gauge("persistence.pending_keys", len(self._tails))
        task.add_done_callback(functools.partial(self._release, key))
        return task

    def pending_keys(self) -> list[str]:
        """Keys with queued or running work."""
        return list(self._tails)

    async def drain(self) -> None:
        """Wait until no work is queued or running."""
        while self._tails:
            await asyncio.wait(list(self._tails.values()))

    async def _run(
        self,
        key: str,
        kind: PersistenceOperation,
        operation: WriteOperation,
        previous: asyncio.Task[OperationResult] | None,
    ) -> OperationResult:
        if previous is not None and not previous.done():
            # asyncio.wait never raises the predecessor's outcome
            await asyncio.wait([previous])

        start = time.perf_counter()
        try:
            result = await operation()
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            result = OperationResult.failed(key, kind, e, duration_ms=duration_ms)
            self._metrics.increment(f"persistence.{kind.value}.failed")
            self._logger.exception(
                f"Error on {kind.value} entity with key '{key}': {e}",
                exc_info=e,
                key=key,
                operation=kind.value,
                error_type=type(e).__name__,
            )

        self._report(result)
        return result

    def _report(self, result: OperationResult) -> None:
        if self._on_result is None:
            return
        try:
            self._on_result(result)
        except Exception as e:
            self._logger.exception(
                "Operation result callback failed", exc_info=e, key=result.key
            )

    def _release(self, key: str, task: asyncio.Task[OperationResult]) -> None:
        if self._tails.get(key) is task:
            del self._tails[key]
            self._metrics.gauge("persistence.pending_keys", len(self._tails))
