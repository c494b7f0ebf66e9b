"""
Server-Sent Events (SSE) endpoint for live dashboard updates.

Each connection owns one polling subscription; every snapshot it publishes
is pushed to the client, and the subscription stops on disconnect.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from stockdash.schemas.market import StockDataRequest
from stockdash.services.aggregator import StockDataAggregator
from stockdash.api.v1.endpoints.stock import stock_data_request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stock")
async def stream_stock(
    params: StockDataRequest = Depends(stock_data_request),
    heartbeat: int = Query(default=15, ge=1, le=300, description="Heartbeat interval in s"),
):
    """
    Stream AggregateResult snapshots via SSE.

    Usage (JavaScript):
    ```js
    const eventSource = new EventSource('/api/v1/stream/stock?symbol=AAPL&timeframe=1M');
    eventSource.onmessage = (event) => {
      const { loading, error, quote, chartData } = JSON.parse(event.data);
    };
    ```
    """

    async def event_generator():
        aggregator = StockDataAggregator(params)
        client_id, queue = aggregator.create_queue()

        try:
            await aggregator.start()

            while True:
                try:
                    snapshot = await asyncio.wait_for(queue.get(), timeout=heartbeat)
                except asyncio.TimeoutError:
                    # Keep connection alive
                    yield ": heartbeat\n\n"
                    continue

                yield f"data: {snapshot.model_dump_json(by_alias=True)}\n\n"

        except asyncio.CancelledError:
            logger.debug(f"Stream client {client_id} disconnected")
        finally:
            aggregator.remove_queue(client_id)
            await aggregator.stop()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for nginx
        },
    )
