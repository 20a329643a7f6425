# File: src/smartpark/infrastructure/messaging.py
"""
In-process messaging for domain events

The parking service publishes an event after each committed mutation
(vehicle parked, vehicle exited, reservation created, reservation expired).
Handlers subscribe per event type or to every event. A failing handler is
logged and never affects other handlers or the publisher.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging
import threading

from ..domain.models import DomainEvent, EventType


# ============================================================================
# EVENT HANDLERS
# ============================================================================

class EventHandler(ABC):
    """Abstract base class for event handlers"""

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        """Handle a domain event"""
        pass

    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can handle the event"""
        return True


class LoggingEventHandler(EventHandler):
    """Writes every event to the log"""

    def __init__(self, level: int = logging.INFO):
        self.level = level
        self._logger = logging.getLogger(self.__class__.__name__)

    def handle(self, event: DomainEvent) -> None:
        self._logger.log(self.level, f"{event.event_type.value}: {event.payload()}")


class OccupancyAlertHandler(EventHandler):
    """
    Warns when facility occupancy crosses a threshold after a vehicle parks

    `occupancy_provider` returns the current occupancy rate in [0, 1].
    """

    def __init__(self, occupancy_provider, threshold: float = 0.9):
        self.occupancy_provider = occupancy_provider
        self.threshold = threshold
        self._logger = logging.getLogger(self.__class__.__name__)

    def can_handle(self, event: DomainEvent) -> bool:
        return event.event_type == EventType.VEHICLE_PARKED

    def handle(self, event: DomainEvent) -> None:
        occupancy_rate = self.occupancy_provider()
        if occupancy_rate >= self.threshold:
            self._logger.warning(f"Parking facility is {occupancy_rate:.1%} full")


# ============================================================================
# EVENT BUS (In-memory)
# ============================================================================

class EventBus:
    """
    In-memory event bus for intra-process event publishing
    Implements publish/subscribe within the same process
    """

    def __init__(self):
        self._subscribers: Dict[Optional[EventType], List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(self.__class__.__name__)

    def subscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """Subscribe to events of a specific type; None subscribes to every event"""
        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                self._logger.debug(f"Subscribed {handler.__class__.__name__} to {event_type or 'all events'}")

    def unsubscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """Unsubscribe handler from events"""
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                self._logger.debug(f"Unsubscribed {handler.__class__.__name__} from {event_type or 'all events'}")

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers"""
        self._logger.debug(f"Publishing event: {event.event_type.value} (ID: {event.event_id})")

        with self._lock:
            handlers = list(self._subscribers.get(event.event_type, []))
            handlers += self._subscribers.get(None, [])

        for handler in handlers:
            if not handler.can_handle(event):
                continue
            try:
                handler.handle(event)
            except Exception as e:
                self._logger.error(
                    f"Error handling event {event.event_type.value} with {handler.__class__.__name__}: {e}",
                    exc_info=True
                )

    def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)
