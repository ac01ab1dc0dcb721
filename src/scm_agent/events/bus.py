from __future__ import annotations

import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, MutableMapping, Tuple, Union

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]
Selector = Union[type, str]
SubscriptionHandle = Tuple[Selector, Handler]


class EventBus:
    """
    Async event bus contract.

    Methods:
    - publish(event): dispatch to matching subscribers
    - subscribe(event_selector, handler): register handler for an event class or name
    - unsubscribe(handle): remove a previously registered handler
    - start()/stop(): lifecycle hooks
    - start_recording()/get_recorded_events(): in-memory audit trail

    Selectors:
    - event class: matches via isinstance(event, selector)
    - string: matches the event's class name
    """

    async def publish(self, event: Any) -> None:
        raise NotImplementedError

    async def subscribe(self, event_selector: Any, handler: Any) -> Any:
        raise NotImplementedError

    async def unsubscribe(self, handle: Any) -> None:
        raise NotImplementedError

    async def start(self) -> None:
        raise NotImplementedError

    async def stop(self) -> None:
        raise NotImplementedError

    async def start_recording(self) -> None:
        raise NotImplementedError

    async def get_recorded_events(self) -> List[Dict[str, Any]]:
        raise NotImplementedError


class InMemoryEventBus(EventBus):
    """
    In-process bus for a single cooperative simulation loop.

    ``publish`` awaits each matching handler in subscription order before it
    returns, so a publisher that awaits ``publish`` knows the batch has been
    fully handled. Handler errors are logged and counted; they never stop the
    bus or reach the publisher.

    Recording schema (stable):
    { "event_type": str, "timestamp": str, "data": dict }
    """

    def __init__(self, recording_max: int = 5000) -> None:
        self._subscribers: MutableMapping[Selector, List[Handler]] = {}
        self._started: bool = False
        self._recording_enabled: bool = False
        self._recorded: List[Dict[str, Any]] = []
        self._recording_max = recording_max
        self._recording_truncated: bool = False
        self._events_published: int = 0
        self._handler_errors: int = 0

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        logger.debug("InMemoryEventBus started")

    async def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        logger.debug("InMemoryEventBus stopped")

    async def publish(self, event: Any) -> None:
        if not self._started:
            await self.start()

        event_type = type(event).__name__
        self._events_published += 1
        if self._recording_enabled:
            self._record(event, event_type)

        for handler in self._matching_handlers(event, event_type):
            try:
                await handler(event)
            except Exception:
                self._handler_errors += 1
                logger.exception("Handler %r failed for %s", handler, event_type)

    async def subscribe(self, event_selector: Any, handler: Any) -> SubscriptionHandle:
        if not callable(handler):
            raise TypeError("handler must be callable")
        if not isinstance(event_selector, (type, str)):
            raise TypeError(
                f"Unsupported event selector type: {type(event_selector)}. Use type or str."
            )
        async_handler = self._wrap_handler(handler)
        self._subscribers.setdefault(event_selector, []).append(async_handler)
        return (event_selector, async_handler)

    async def unsubscribe(self, handle: SubscriptionHandle) -> None:
        selector, handler = handle
        handlers = self._subscribers.get(selector, [])
        if handler in handlers:
            handlers.remove(handler)

    async def start_recording(self) -> None:
        self._recording_enabled = True

    async def get_recorded_events(self) -> List[Dict[str, Any]]:
        return list(self._recorded)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "started": self._started,
            "events_published": self._events_published,
            "handler_errors": self._handler_errors,
            "subscribers": sum(len(v) for v in self._subscribers.values()),
            "recording_truncated": self._recording_truncated,
        }

    # Internals ---------------------------------------------------------------

    def _matching_handlers(self, event: Any, event_type: str) -> List[Handler]:
        matched: List[Handler] = []
        for selector, handlers in self._subscribers.items():
            if isinstance(selector, type):
                hit = isinstance(event, selector)
            else:
                hit = selector == event_type
            if hit:
                matched.extend(h for h in handlers if h not in matched)
        return matched

    @staticmethod
    def _wrap_handler(handler: Callable[[Any], Any]) -> Handler:
        if inspect.iscoroutinefunction(handler):
            return handler

        async def _shim(event: Any) -> None:
            result = handler(event)
            if inspect.isawaitable(result):
                await result

        return _shim

    def _record(self, event: Any, event_type: str) -> None:
        if len(self._recorded) >= self._recording_max:
            self._recording_truncated = True
            return
        summarize = getattr(event, "to_summary_dict", None)
        data = summarize() if callable(summarize) else {"repr": repr(event)}
        self._recorded.append(
            {
                "event_type": event_type,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": data,
            }
        )


__all__ = ["EventBus", "InMemoryEventBus", "Handler", "SubscriptionHandle"]
