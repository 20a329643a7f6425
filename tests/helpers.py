# File: tests/helpers.py
"""
Shared fixtures for the unit and integration suites

2024-01-15 is a Monday, 2024-01-20 a Saturday and 2024-01-21 a Sunday,
so tests pick weekday or weekend pricing by choosing the start date.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from smartpark.config import EngineConfig, LayoutConfig
from smartpark.domain.models import DomainEvent
from smartpark.infrastructure.factories import ServiceFactory
from smartpark.infrastructure.messaging import EventBus, EventHandler


MONDAY = datetime(2024, 1, 15, 10, 0, 0)
SATURDAY = datetime(2024, 1, 20, 10, 0, 0)
SUNDAY = datetime(2024, 1, 21, 10, 0, 0)

# One floor: F1-A-1..3 regular cars, F1-A-4 handicapped car,
# F1-B-1..2 bikes, F1-C-1 truck
SMALL_LAYOUT = LayoutConfig(
    floors=1,
    car_spaces=4,
    handicapped_car_spaces=1,
    bike_spaces=2,
    truck_spaces=1
)


class FixedClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime = MONDAY):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingHandler(EventHandler):
    """Event handler that keeps every event it receives"""

    def __init__(self):
        self.events: List[DomainEvent] = []

    def handle(self, event: DomainEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> List[str]:
        return [event.event_type.value for event in self.events]


def create_config(
    layout: Optional[LayoutConfig] = None,
    database_url: str = "sqlite://",
    **settings
) -> EngineConfig:
    settings.setdefault("snapshot_enabled", False)
    return EngineConfig(database_url=database_url, layout=layout or SMALL_LAYOUT, **settings)


def create_service(
    clock: Optional[FixedClock] = None,
    layout: Optional[LayoutConfig] = None,
    in_memory: bool = True,
    database_url: str = "sqlite://",
    snapshots=None,
    event_bus: Optional[EventBus] = None,
    bootstrap: bool = True
):
    """Bootstrapped ParkingService over the small layout"""
    factory = ServiceFactory(create_config(layout, database_url))
    service = factory.create_parking_service(
        in_memory=in_memory,
        clock=clock or FixedClock(),
        event_bus=event_bus,
        snapshots=snapshots
    )
    if bootstrap:
        service.bootstrap()
    return service


def register(service, name: str = "Asha Rao", contact: str = "9876543210",
             email: str = "asha@example.com", handicapped: bool = False) -> int:
    result = service.register_customer(name, contact, email, handicapped=handicapped)
    assert result.success, result.message
    return result.data["customer_id"]
