"""
Thread coordination primitives for the batch fetch pipeline.

Every blocking operation here waits in short slices and re-checks a
CancellationToken between them, so a cancelled batch unblocks within
roughly ``poll_interval`` seconds no matter which queue a thread is stuck on.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Generic, Iterator, List, Optional, TypeVar

from ec2spot.utils.exceptions import OperationCancelledError, QueueClosedError


logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_POLL_INTERVAL = 0.05


class CancellationToken:
    """
    First-error-wins cancellation signal shared by a group of threads.

    Only the first ``cancel`` call records its cause; later calls are no-ops.
    A token created with a parent is also cancelled when the parent is.
    """

    def __init__(self, parent: Optional["CancellationToken"] = None):
        self._parent = parent
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._cause: Optional[BaseException] = None

    def cancel(self, cause: Optional[BaseException] = None) -> bool:
        """
        Cancel the token.

        Args:
            cause: Error that triggered the cancellation

        Returns:
            True if this call cancelled the token, False if it already was
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._cause = cause
            self._event.set()
            return True

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def cause(self) -> Optional[BaseException]:
        """The error passed to the winning ``cancel`` call, here or on the parent."""
        if self._event.is_set():
            return self._cause
        if self._parent is not None:
            return self._parent.cause
        return None

    def raise_if_cancelled(self, operation: Optional[str] = None) -> None:
        """
        Raises:
            OperationCancelledError: If the token is cancelled
        """
        if self.cancelled:
            cause = self.cause
            message = f"{operation or 'Operation'} cancelled"
            if cause is not None:
                message = f"{message}: {cause}"
            raise OperationCancelledError(
                message=message,
                operation=operation,
                original_error=cause if isinstance(cause, Exception) else None
            )


class ClosableQueue(Generic[T]):
    """
    Bounded FIFO queue that can be closed for writing.

    ``put`` blocks while the queue is full and ``get`` while it is empty,
    both giving up with OperationCancelledError when the supplied token is
    cancelled. Once closed, ``put`` fails and ``get`` drains the remaining
    items before raising QueueClosedError.
    """

    def __init__(self, maxsize: int = 0, poll_interval: float = DEFAULT_POLL_INTERVAL):
        """
        Args:
            maxsize: Maximum number of queued items, 0 for unbounded
            poll_interval: Seconds between cancellation checks while blocked
        """
        self.maxsize = maxsize
        self.poll_interval = poll_interval
        self._items: Deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, item: T, token: Optional[CancellationToken] = None) -> None:
        """
        Raises:
            OperationCancelledError: If token is cancelled before the item fits
            QueueClosedError: If the queue has been closed
        """
        with self._cond:
            while True:
                if self._closed:
                    raise QueueClosedError("put on closed queue")
                if token is not None:
                    token.raise_if_cancelled("put")
                if self.maxsize <= 0 or len(self._items) < self.maxsize:
                    break
                self._cond.wait(self.poll_interval)

            self._items.append(item)
            self._cond.notify_all()

    def get(self, token: Optional[CancellationToken] = None) -> T:
        """
        Raises:
            OperationCancelledError: If token is cancelled while waiting
            QueueClosedError: If the queue is closed and empty
        """
        with self._cond:
            while True:
                if token is not None:
                    token.raise_if_cancelled("get")
                if self._items:
                    item = self._items.popleft()
                    self._cond.notify_all()
                    return item
                if self._closed:
                    raise QueueClosedError("get on closed and drained queue")
                self._cond.wait(self.poll_interval)

    def close(self) -> None:
        """Close the queue for writing. Closing twice is harmless."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        """Yield items until the queue is closed and drained."""
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return


class WorkerGroup:
    """
    A set of threads sharing one CancellationToken, errgroup style.

    The first task to raise records its exception and cancels the token;
    ``wait`` joins every thread and re-raises that first exception.
    """

    def __init__(self, token: Optional[CancellationToken] = None, name: str = "worker-group"):
        self.token = CancellationToken(parent=token)
        self.name = name
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None

    def go(self, func: Callable[[], None], name: Optional[str] = None) -> threading.Thread:
        """Run func in a new daemon thread belonging to this group."""
        with self._lock:
            thread_name = name or f"{self.name}-{len(self._threads)}"
            thread = threading.Thread(target=self._run, args=(func,), name=thread_name, daemon=True)
            self._threads.append(thread)
        thread.start()
        return thread

    def _run(self, func: Callable[[], None]) -> None:
        try:
            func()
        except BaseException as e:
            self._record(e)

    def _record(self, error: BaseException) -> None:
        with self._lock:
            first = self._error is None
            if first:
                self._error = error
        if first:
            logger.debug(f"{self.name}: first failure in {threading.current_thread().name}: {error!r}")
            self.token.cancel(error)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every thread to finish.

        Returns:
            True if all threads finished within timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            threads = list(self._threads)

        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)

        return not any(thread.is_alive() for thread in threads)

    def exception(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """
        Join the group and return its first error, or None on success.

        Raises:
            TimeoutError: If threads are still running after timeout
        """
        if not self.join(timeout):
            raise TimeoutError(f"{self.name} did not finish within {timeout} seconds")

        with self._lock:
            return self._error

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Join the group and raise its first error, if any.

        Raises:
            TimeoutError: If threads are still running after timeout
        """
        error = self.exception(timeout)
        if error is not None:
            raise error
