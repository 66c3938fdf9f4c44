"""
Concurrent batch fetching of spot price history.

A batch runs as one producer thread feeding atomic queries into a bounded
work queue, a fixed pool of worker threads turning queries into price
samples, and a closer thread that ends the output stream once every other
thread is done. The first failure anywhere cancels the whole batch; the
caller gets either every sample or that first error, never a partial result.
"""

import logging
import threading
import uuid
from datetime import timedelta
from typing import Callable, List, Optional, Tuple

from ec2spot.models.price_collection import SpotPriceCollection
from ec2spot.models.spot_data import AtomicQuery, BatchRequest, PriceSample
from ec2spot.services.query_expander import DEFAULT_CHUNK_SIZE, expand
from ec2spot.services.spot_price_fetcher import SpotPriceFetcher
from ec2spot.utils.concurrency import (
    CancellationToken,
    ClosableQueue,
    WorkerGroup,
    DEFAULT_POLL_INTERVAL,
)
from ec2spot.utils.exceptions import DataValidationError, QueueClosedError
from ec2spot.utils.logging_config import get_logger_with_context, log_error_with_context


logger = logging.getLogger(__name__)

FetchFunc = Callable[[AtomicQuery, Optional[CancellationToken]], List[PriceSample]]


class BatchFetcher:
    """
    Runs batch requests through a bounded producer/worker pipeline.

    At most ``concurrency`` queries are in flight at once and at most
    ``queue_capacity`` queries wait in the work queue.
    """

    DEFAULT_CONCURRENCY = 10
    DEFAULT_QUEUE_CAPACITY = 100
    DEFAULT_OUTPUT_CAPACITY = 1000

    def __init__(
        self,
        fetcher: Optional[FetchFunc] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        output_capacity: int = DEFAULT_OUTPUT_CAPACITY,
        chunk_size: timedelta = DEFAULT_CHUNK_SIZE,
        poll_interval: float = DEFAULT_POLL_INTERVAL
    ):
        """
        Initialize the batch fetcher.

        Args:
            fetcher: Callable executing one query (SpotPriceFetcher if None)
            concurrency: Number of worker threads
            queue_capacity: Maximum number of queries queued ahead of workers
            output_capacity: Maximum number of samples buffered ahead of the consumer
            chunk_size: Maximum time span of a single query
            poll_interval: Seconds between cancellation checks while blocked

        Raises:
            DataValidationError: If concurrency or a capacity is not positive
        """
        for name, value in (
            ('concurrency', concurrency),
            ('queue_capacity', queue_capacity),
            ('output_capacity', output_capacity),
        ):
            if not isinstance(value, int) or value < 1:
                raise DataValidationError(
                    message=f"{name} must be a positive integer",
                    field_name=name,
                    field_value=value,
                    validation_rule="> 0"
                )

        self.fetcher = fetcher if fetcher is not None else SpotPriceFetcher()
        self.concurrency = concurrency
        self.queue_capacity = queue_capacity
        self.output_capacity = output_capacity
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval

    def start(
        self,
        request: BatchRequest,
        token: Optional[CancellationToken] = None
    ) -> Tuple[ClosableQueue, WorkerGroup]:
        """
        Start fetching a batch in the background.

        The returned stream yields PriceSample objects in arrival order and
        ends once every thread has finished. Drain it, then call
        ``group.wait()`` before trusting what was collected.

        Args:
            request: What to fetch
            token: Optional parent token; cancelling it stops the batch

        Returns:
            Tuple of (output stream, worker group)
        """
        batch_id = uuid.uuid4().hex[:8]
        log = get_logger_with_context(__name__, batch_id=batch_id, operation="batch_fetch")

        group = WorkerGroup(token, name=f"batch-{batch_id}")
        queries: ClosableQueue[AtomicQuery] = ClosableQueue(self.queue_capacity, self.poll_interval)
        prices: ClosableQueue[PriceSample] = ClosableQueue(self.output_capacity, self.poll_interval)

        def produce() -> None:
            try:
                batch = expand(request, self.chunk_size)
                log.info(
                    f"Queueing {len(batch)} queries for {len(request.regions)} region(s), "
                    f"{len(request.instance_types)} instance type(s) with {self.concurrency} workers"
                )
                for query in batch:
                    queries.put(query, group.token)
            finally:
                queries.close()

        def work() -> None:
            while True:
                try:
                    query = queries.get(group.token)
                except QueueClosedError:
                    return

                for sample in self.fetcher(query, group.token):
                    prices.put(sample, group.token)

        group.go(produce, name=f"batch-{batch_id}-producer")
        for i in range(self.concurrency):
            group.go(work, name=f"batch-{batch_id}-worker-{i}")

        def close_when_done() -> None:
            group.join()
            prices.close()
            error = group.exception()
            if error is not None:
                log_error_with_context(log, error, f"Batch failed: {error}")
            else:
                log.info("Batch complete")

        threading.Thread(
            target=close_when_done,
            name=f"batch-{batch_id}-closer",
            daemon=True
        ).start()

        return prices, group

    def fetch_all(
        self,
        request: BatchRequest,
        token: Optional[CancellationToken] = None
    ) -> SpotPriceCollection:
        """
        Fetch a whole batch and return the collected samples.

        Raises:
            Exception: The first error raised by any fetch in the batch
        """
        prices, group = self.start(request, token)

        collection = SpotPriceCollection()
        for sample in prices:
            collection.append(sample)

        group.wait()
        logger.info(f"Collected {len(collection)} prices")
        return collection


def batch_fetch(
    token: Optional[CancellationToken],
    concurrency: int,
    request: BatchRequest,
    fetcher: Optional[FetchFunc] = None,
    **kwargs
) -> Tuple[ClosableQueue, WorkerGroup]:
    """
    Start a batch fetch with the given concurrency.

    Convenience wrapper around ``BatchFetcher(...).start(...)``; extra
    keyword arguments are passed to BatchFetcher.
    """
    return BatchFetcher(fetcher=fetcher, concurrency=concurrency, **kwargs).start(request, token)
