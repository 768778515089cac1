"""Outbound delivery.

The controller never talks to the transport while it is mutating state.
Deliveries are queued on an Outbox during dispatch and flushed once the
mutation is complete; each send is fire-and-forget per connection.
"""

import logging
from typing import Callable, NamedTuple, Optional, Protocol

from lanmafia.events.game_events import GameEvent
from .event_collector import EventCollector

logger = logging.getLogger(__name__)

Subscriber = Callable[[GameEvent], None]


class Transport(Protocol):
    """What the engine needs from the network layer."""

    def send(self, connection_id: str, event: GameEvent) -> None:
        """Deliver an event to one connection."""
        ...

    def broadcast(self, event: GameEvent) -> None:
        """Deliver an event to every open connection."""
        ...


class Delivery(NamedTuple):
    connection_id: Optional[str]  # None for a broadcast
    player_id: Optional[str]
    event: GameEvent


class Outbox:
    """Buffers deliveries until the current dispatch has finished."""

    def __init__(self, transport: Transport, collector: Optional[EventCollector] = None):
        self.transport = transport
        self.collector = collector
        self._pending: list[Delivery] = []

    def __len__(self) -> int:
        return len(self._pending)

    def send(self, connection_id: str, event: GameEvent, player_id: Optional[str] = None) -> None:
        self._pending.append(Delivery(connection_id, player_id, event))

    def broadcast(self, event: GameEvent) -> None:
        self._pending.append(Delivery(None, None, event))

    def discard(self) -> None:
        self._pending.clear()

    def flush(self) -> int:
        """Send everything queued, in order.

        Returns:
            Number of deliveries attempted.
        """
        pending, self._pending = self._pending, []
        for delivery in pending:
            if self.collector is not None:
                self.collector.record(delivery.event, recipient=delivery.player_id)
            try:
                if delivery.connection_id is None:
                    self.transport.broadcast(delivery.event)
                else:
                    self.transport.send(delivery.connection_id, delivery.event)
            except Exception:
                # A failing client must not stop delivery to the others
                logger.exception(
                    "Failed to deliver %s to %s",
                    delivery.event.kind,
                    delivery.connection_id or "all",
                )
        return len(pending)


class LocalTransport:
    """In-memory transport.

    Each connection gets an inbox of received events and optional
    subscriber callbacks, which is all the simulation and the tests need.

    Usage:
        transport = LocalTransport()
        transport.connect("conn-1", on_event=print)
        ...
        transport.last("conn-1", "phase_changed")
    """

    def __init__(self):
        self.inboxes: dict[str, list[GameEvent]] = {}
        self._subscribers: dict[str, list[Subscriber]] = {}

    def connect(self, connection_id: str, on_event: Optional[Subscriber] = None) -> None:
        self.inboxes.setdefault(connection_id, [])
        if on_event is not None:
            self._subscribers.setdefault(connection_id, []).append(on_event)

    def disconnect(self, connection_id: str) -> None:
        self.inboxes.pop(connection_id, None)
        self._subscribers.pop(connection_id, None)

    @property
    def connections(self) -> list[str]:
        return list(self.inboxes)

    def send(self, connection_id: str, event: GameEvent) -> None:
        inbox = self.inboxes.get(connection_id)
        if inbox is None:
            logger.debug("Dropping %s for closed connection %s", event.kind, connection_id)
            return
        inbox.append(event)
        for callback in list(self._subscribers.get(connection_id, [])):
            callback(event)

    def broadcast(self, event: GameEvent) -> None:
        for connection_id in list(self.inboxes):
            self.send(connection_id, event)

    def received(self, connection_id: str, kind: Optional[str] = None) -> list[GameEvent]:
        """Events delivered to a connection, optionally of one kind."""
        events = self.inboxes.get(connection_id, [])
        if kind is None:
            return list(events)
        return [e for e in events if e.kind == kind]

    def last(self, connection_id: str, kind: Optional[str] = None) -> Optional[GameEvent]:
        events = self.received(connection_id, kind)
        return events[-1] if events else None

    def clear(self) -> None:
        for inbox in self.inboxes.values():
            inbox.clear()
