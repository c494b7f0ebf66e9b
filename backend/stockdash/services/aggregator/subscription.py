"""
Polling subscription for one dashboard view.

Fetches quote + series, computes indicators, and republishes a fresh
AggregateResult on every state transition. Refreshes every
`poll_interval_seconds` until stopped.

Usage:
    aggregator = StockDataAggregator(StockDataRequest(symbol="AAPL"))
    aggregator.add_listener(render)
    await aggregator.start()
    await aggregator.update_params(StockDataRequest(symbol="MSFT"))
    await aggregator.stop()
"""

import asyncio
import logging
import uuid
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from stockdash.core.config import settings
from stockdash.schemas.market import AggregateResult, StockDataRequest
from stockdash.services.aggregator.service import FETCH_ERROR_MESSAGE, aggregate
from stockdash.services.data_ingestion import (
    ProviderClientInterface,
    get_stock_data_provider,
)
from stockdash.services.indicators import IndicatorService, get_indicator_service

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[AggregateResult], None]


class AggregatorState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class StockDataAggregator:
    """
    Subscription object owning a single poll timer.

    Every cycle is tagged with the parameter epoch it was started under and
    a sequence number. Its result is applied only if the subscription is
    still running, the epoch is current, and no newer cycle has already
    been applied, so a slow fetch for old parameters can never overwrite
    state for new ones.
    """

    def __init__(
        self,
        params: Optional[StockDataRequest] = None,
        provider: Optional[ProviderClientInterface] = None,
        indicator_service: Optional[IndicatorService] = None,
        poll_interval: Optional[float] = None,
    ):
        self._params = params or StockDataRequest()
        self._provider = provider or get_stock_data_provider()
        self._indicators = indicator_service or get_indicator_service()
        self._poll_interval = (
            poll_interval if poll_interval is not None else settings.poll_interval_seconds
        )

        self._state = AggregatorState.IDLE
        self._snapshot = AggregateResult()
        self._running = False
        self._poll_task: Optional[asyncio.Task] = None
        self._cycles: Set[asyncio.Task] = set()

        self._epoch = 0
        self._sequence = 0
        self._applied_sequence = 0

        self._listeners: List[SnapshotListener] = []
        self._queues: Dict[str, asyncio.Queue] = {}

    @property
    def state(self) -> AggregatorState:
        return self._state

    @property
    def snapshot(self) -> AggregateResult:
        return self._snapshot

    @property
    def params(self) -> StockDataRequest:
        return self._params

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def epoch(self) -> int:
        return self._epoch

    # ============ Lifecycle ============

    async def start(self) -> None:
        """Begin polling; the first cycle starts immediately."""
        if self._running:
            logger.warning("Aggregator already running")
            return

        self._running = True
        self._epoch += 1
        self._start_timer()
        logger.info(
            f"Aggregator started for {self._params.symbol} ({self._params.timeframe}), "
            f"refresh every {self._poll_interval}s"
        )

    async def stop(self) -> None:
        """Cancel the timer and any in-flight cycles. No further updates."""
        if not self._running:
            return

        self._running = False
        await self._cancel_timer()

        cycles = list(self._cycles)
        for task in cycles:
            task.cancel()
        await asyncio.gather(*cycles, return_exceptions=True)

        self._state = AggregatorState.IDLE
        logger.info(f"Aggregator stopped for {self._params.symbol}")

    async def update_params(self, params: StockDataRequest) -> bool:
        """
        Switch to a new parameter tuple.

        Restarts the timer with an immediate cycle. In-flight cycles for the
        old parameters are left to finish and their results are discarded.
        Returns False when the parameters are unchanged.
        """
        if params == self._params:
            return False

        self._params = params
        self._epoch += 1
        logger.info(f"Parameters changed (epoch {self._epoch}): {params.model_dump()}")

        if self._running:
            await self._cancel_timer()
            self._start_timer()
        return True

    async def refresh(self) -> AggregateResult:
        """Run a cycle now, outside the timer, and return the resulting snapshot."""
        if not self._running:
            logger.warning("Refresh requested on a stopped aggregator")
            return self._snapshot

        await self._launch_cycle()
        return self._snapshot

    async def __aenter__(self) -> "StockDataAggregator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ============ Listeners ============

    def add_listener(self, callback: SnapshotListener) -> None:
        """Add a callback invoked with every new snapshot."""
        self._listeners.append(callback)

    def remove_listener(self, callback: SnapshotListener) -> None:
        """Remove a snapshot callback."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def create_queue(self, client_id: Optional[str] = None) -> tuple[str, asyncio.Queue]:
        """Create a queue receiving every new snapshot (for streaming clients)."""
        client_id = client_id or str(uuid.uuid4())
        queue: asyncio.Queue = asyncio.Queue(maxsize=100)
        self._queues[client_id] = queue
        return client_id, queue

    def remove_queue(self, client_id: str) -> None:
        """Remove a streaming client queue."""
        self._queues.pop(client_id, None)

    def _publish(self, snapshot: AggregateResult) -> None:
        self._snapshot = snapshot

        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Snapshot listener error: {e}")

        for queue in self._queues.values():
            try:
                queue.put_nowait(snapshot)
            except asyncio.QueueFull:
                # Drop the oldest snapshot; only the latest matters
                queue.get_nowait()
                queue.put_nowait(snapshot)

    # ============ Poll Loop ============

    def _start_timer(self) -> None:
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def _cancel_timer(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _poll_loop(self) -> None:
        """Start a cycle, then wait one interval, until cancelled."""
        while self._running:
            self._launch_cycle()
            await asyncio.sleep(self._poll_interval)

    def _launch_cycle(self) -> asyncio.Task:
        self._sequence += 1
        task = asyncio.create_task(
            self._run_cycle(self._params, self._epoch, self._sequence)
        )
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    def _should_apply(self, epoch: int, sequence: int) -> bool:
        return (
            self._running
            and epoch == self._epoch
            and sequence > self._applied_sequence
        )

    async def _run_cycle(
        self, params: StockDataRequest, epoch: int, sequence: int
    ) -> None:
        if self._running and epoch == self._epoch:
            self._state = AggregatorState.LOADING
            self._publish(
                self._snapshot.model_copy(update={"loading": True, "error": None})
            )

        try:
            result = await aggregate(params, self._provider, self._indicators)
        except Exception as e:
            logger.error(f"Error fetching stock data for {params.symbol}: {e}")
            if not self._should_apply(epoch, sequence):
                logger.debug(f"Discarding stale failure (epoch {epoch}, cycle {sequence})")
                return

            # Previous quote/chart data stay visible
            self._applied_sequence = sequence
            self._state = AggregatorState.FAILED
            self._publish(
                self._snapshot.model_copy(
                    update={"loading": False, "error": FETCH_ERROR_MESSAGE}
                )
            )
            return

        if not self._should_apply(epoch, sequence):
            logger.debug(
                f"Discarding stale result for {params.symbol} "
                f"(epoch {epoch}, cycle {sequence})"
            )
            return

        self._applied_sequence = sequence
        self._state = AggregatorState.READY
        self._publish(result)
