"""
Event pipeline.

Producers hand events to ``EventProcessor.submit`` from any thread or task.
Events are buffered in a bounded queue and shipped to the collector in
batches, either by the periodic flush task or by an explicit ``flush()``.
Delivery is best effort: a batch that fails to post is logged and dropped.
"""

import asyncio
import json
import logging
import random
import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional

import httpx

from switchyard.config import Config
from switchyard.errors import check_response, classify_error


class EventQueue:
    """
    Bounded FIFO buffer shared by producers and the flush dispatcher.

    ``offer`` never blocks and rejects events once ``capacity`` is reached.
    ``drain`` atomically takes everything currently buffered.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._events: Deque[Any] = deque()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def offer(self, event: Any) -> bool:
        """Add an event if there is room. Returns False when full."""
        with self._lock:
            if len(self._events) >= self._capacity:
                return False
            self._events.append(event)
            return True

    def drain(self) -> List[Any]:
        """Remove and return all buffered events in FIFO order."""
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def _serialize(event: Any) -> Dict[str, Any]:
    to_dict = getattr(event, "to_dict", None)
    if to_dict is not None:
        return to_dict()
    return event


class EventProcessor:
    """
    Buffers analytics events and posts them to the collector's bulk endpoint.

    Example:
        ```python
        async with EventProcessor(Config(sdk_key="sdk-123")) as processor:
            processor.submit(FeatureRequestEvent(key="my-flag", user=user, value=True))
        ```
    """

    def __init__(
        self,
        config: Config,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the processor.

        Args:
            config: Pipeline configuration
            http_client: Client to post with. One is built from ``config``
                (timeouts, proxy) when omitted and closed on ``close()``.
            logger: Logger to report through, defaults to ``switchyard.events``
        """
        self._config = config
        self._logger = logger or logging.getLogger("switchyard.events")
        self._queue = EventQueue(config.capacity)
        self._random = random.Random()
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=config.timeout,
            proxy=config.proxy_url,
        )
        self._flush_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._closing = False

    @property
    def pending(self) -> int:
        """Number of events waiting for the next flush."""
        return len(self._queue)

    def start(self) -> None:
        """Start the periodic flush task on the running event loop."""
        if self._flush_task is not None or self._closing:
            return
        self._stop_event = asyncio.Event()
        self._flush_task = asyncio.create_task(self._flush_loop())

    def submit(self, event: Any) -> bool:
        """
        Queue an event for delivery without blocking.

        Returns False if the event was dropped because the buffer is full or
        the processor is closed. Events removed by sampling count as accepted.
        """
        if self._closing:
            self._logger.debug("Event processor is closed, dropping event")
            return False

        interval = self._config.sampling_interval
        if interval > 0 and self._random.randrange(interval) != 0:
            return True

        if not self._queue.offer(event):
            self._logger.debug(
                f"Event buffer at capacity ({self._queue.capacity}), dropping event"
            )
            return False
        return True

    async def flush(self) -> None:
        """Drain the buffer and post its contents. Never raises."""
        events = self._queue.drain()
        if not events:
            return
        await self._post_events(events)

    async def _post_events(self, events: List[Any]) -> None:
        url = self._config.bulk_events_url
        try:
            payload = json.dumps([_serialize(event) for event in events])
        except (TypeError, ValueError) as e:
            self._logger.error(f"Dropping {len(events)} event(s) that could not be serialized: {e}")
            return

        self._logger.debug(f"Posting {len(events)} event(s) to {url}")

        try:
            response = await self._http_client.post(
                url,
                content=payload,
                headers={
                    "Authorization": self._config.sdk_key,
                    "User-Agent": self._config.user_agent,
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            error = classify_error(e)
            self._logger.error(
                f"Failed to post {len(events)} event(s) to {url}: {error.message} ({error.category.value})"
            )
            return

        if check_response(response, self._logger):
            self._logger.debug(f"Successfully posted {len(events)} event(s).")
        else:
            self._logger.error(f"Dropped {len(events)} event(s) after failed delivery")

    async def close(self) -> None:
        """
        Stop the periodic flush and deliver whatever is still buffered.

        A scheduled flush already in flight is allowed to finish.
        """
        if self._closing:
            return
        self._closing = True

        if self._stop_event is not None:
            self._stop_event.set()
        if self._flush_task is not None:
            await self._flush_task
            self._flush_task = None

        await self.flush()

        if self._owns_client:
            await self._http_client.aclose()

    async def _flush_loop(self) -> None:
        """Flush every ``flush_interval`` seconds until closed."""
        interval = self._config.flush_interval
        while not self._closing:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            if self._closing:
                break
            try:
                await self.flush()
            except Exception as e:
                self._logger.warning(f"Periodic event flush error: {e}")

    async def __aenter__(self) -> "EventProcessor":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
