"""Publish/subscribe channel for store events.

Each :class:`StoreEvent` kind has its own subscriber list. Payloads are
passed positionally:

================  ==============================
Event             Handler signature
================  ==============================
``VALUE_GET``     ``handler(pair)``
``VALUE_SET``     ``handler(pair)``
``VALUE_UPDATE``  ``handler(pair)``
``VALUE_DELETE``  ``handler(key, removed_count)``
``VALUE_FETCH``   ``handler(pairs)``
``TRUNCATE``      ``handler(removed_count)``
``CONNECT``       ``handler()``
``DISCONNECT``    ``handler()``
================  ==============================
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Union

from keyvify.core.models import StoreEvent

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventBus:
    """Synchronous, per-kind event dispatcher."""

    def __init__(self) -> None:
        self._handlers: dict[StoreEvent, list[Handler]] = defaultdict(list)

    def subscribe(self, event: Union[StoreEvent, str], handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``event``.

        Args:
            event: Event kind, or its wire name such as ``"valueGet"``
            handler: Callable invoked with the event payload

        Returns:
            A callable that removes the subscription
        """
        kind = StoreEvent(event)
        self._handlers[kind].append(handler)
        return lambda: self.unsubscribe(kind, handler)

    def unsubscribe(self, event: Union[StoreEvent, str], handler: Handler) -> None:
        """Remove ``handler`` from ``event``. Unknown handlers are ignored."""
        handlers = self._handlers.get(StoreEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: StoreEvent, *payload: Any) -> None:
        """Deliver ``payload`` to every subscriber of ``event``, in order.

        Handler exceptions propagate to the caller of the store operation.
        """
        handlers = list(self._handlers.get(event, ()))
        if handlers:
            logger.debug(f"Emitting {event.value} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(*payload)

    def handler_count(self, event: Union[StoreEvent, str]) -> int:
        return len(self._handlers.get(StoreEvent(event), ()))
