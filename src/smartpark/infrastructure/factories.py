# File: src/smartpark/infrastructure/factories.py
"""
Factory Pattern Implementation for the Smart Parking engine

1. ParkingSpaceFactory - creates parking spaces with floor/zone/index ids
2. LayoutBuilder - builder for facility layouts, including the default one
3. PricingStrategyFactory - creates the pricing strategy for a policy
4. ServiceFactory - wires a ParkingService from an EngineConfig

Default layout, per floor:
- zone A: car spaces, the last ones reserved for handicapped customers
- zone B: bike spaces
- zone C: truck spaces
"""

from datetime import datetime
from typing import Callable, List, Optional, Union
import logging

from ..config import EngineConfig, LayoutConfig
from ..domain.models import EventType, ParkingSpace, VehicleClass
from ..domain.pricing import PricingPolicy, PricingStrategy, StandardPricingEngine
from .messaging import EventBus, LoggingEventHandler, OccupancyAlertHandler
from .repositories import RepositoryFactory, UnitOfWork
from .snapshots import JsonFileSnapshotSink, NullSnapshotSink, SnapshotSink


CAR_ZONE = "A"
BIKE_ZONE = "B"
TRUCK_ZONE = "C"


# ============================================================================
# DOMAIN OBJECT FACTORIES
# ============================================================================

class ParkingSpaceFactory:
    """Factory for creating ParkingSpace domain objects"""

    def create(
        self,
        floor: int,
        zone: str,
        index: int,
        vehicle_class: Union[VehicleClass, str],
        handicapped: bool = False
    ) -> ParkingSpace:
        return ParkingSpace.create(floor, zone, index, VehicleClass.parse(vehicle_class), handicapped)

    def create_many(
        self,
        floor: int,
        zone: str,
        count: int,
        vehicle_class: Union[VehicleClass, str],
        start_index: int = 1,
        handicapped: bool = False
    ) -> List[ParkingSpace]:
        return [
            self.create(floor, zone, start_index + i, vehicle_class, handicapped)
            for i in range(count)
        ]


class LayoutBuilder:
    """Builder for constructing facility layouts floor by floor"""

    def __init__(self, space_factory: Optional[ParkingSpaceFactory] = None):
        self.space_factory = space_factory or ParkingSpaceFactory()
        self.reset()

    def reset(self) -> 'LayoutBuilder':
        """Reset builder state"""
        self.spaces: List[ParkingSpace] = []
        return self

    def add_car_spaces(self, floor: int, count: int, handicapped: int = 0) -> 'LayoutBuilder':
        """Add car spaces; the last `handicapped` of them are handicapped spaces"""
        regular = count - handicapped
        self.spaces += self.space_factory.create_many(floor, CAR_ZONE, regular, VehicleClass.CAR)
        self.spaces += self.space_factory.create_many(
            floor, CAR_ZONE, handicapped, VehicleClass.CAR,
            start_index=regular + 1, handicapped=True
        )
        return self

    def add_bike_spaces(self, floor: int, count: int) -> 'LayoutBuilder':
        self.spaces += self.space_factory.create_many(floor, BIKE_ZONE, count, VehicleClass.BIKE)
        return self

    def add_truck_spaces(self, floor: int, count: int) -> 'LayoutBuilder':
        self.spaces += self.space_factory.create_many(floor, TRUCK_ZONE, count, VehicleClass.TRUCK)
        return self

    def add_floor(self, floor: int, layout: LayoutConfig) -> 'LayoutBuilder':
        return (
            self.add_car_spaces(floor, layout.car_spaces, layout.handicapped_car_spaces)
            .add_bike_spaces(floor, layout.bike_spaces)
            .add_truck_spaces(floor, layout.truck_spaces)
        )

    def build(self) -> List[ParkingSpace]:
        ids = [space.space_id for space in self.spaces]
        if len(ids) != len(set(ids)):
            raise ValueError("Layout contains duplicate space ids")
        return list(self.spaces)


def create_default_layout(layout: Optional[LayoutConfig] = None) -> List[ParkingSpace]:
    """Spaces for every floor of the configured layout (90 with the defaults)"""
    layout = layout or LayoutConfig()
    builder = LayoutBuilder()
    for floor in range(1, layout.floors + 1):
        builder.add_floor(floor, layout)
    return builder.build()


# ============================================================================
# STRATEGY FACTORY
# ============================================================================

class PricingStrategyFactory:
    """Factory for creating pricing strategies"""

    @staticmethod
    def create(policy: Optional[PricingPolicy] = None) -> PricingStrategy:
        return StandardPricingEngine(policy or PricingPolicy())


# ============================================================================
# SERVICE FACTORY
# ============================================================================

class ServiceFactory:
    """Factory for creating application services"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.logger = logging.getLogger(self.__class__.__name__)

    def create_uow(self, in_memory: bool = False) -> UnitOfWork:
        if in_memory:
            return RepositoryFactory.create_in_memory_uow()
        return RepositoryFactory.create_sqlalchemy_uow(self.config.database_url)

    def create_snapshot_sink(self) -> SnapshotSink:
        if not self.config.snapshot_enabled:
            return NullSnapshotSink()
        return JsonFileSnapshotSink(self.config.snapshot_dir)

    def create_event_bus(self) -> EventBus:
        bus = EventBus()
        bus.subscribe(None, LoggingEventHandler())
        return bus

    def create_parking_service(
        self,
        in_memory: bool = False,
        clock: Callable[[], datetime] = datetime.now,
        event_bus: Optional[EventBus] = None,
        snapshots: Optional[SnapshotSink] = None
    ) -> 'ParkingService':
        """Create ParkingService with dependencies"""
        from ..application.parking_service import ParkingService

        layout = self.config.layout
        service = ParkingService(
            uow=self.create_uow(in_memory),
            pricing=PricingStrategyFactory.create(self.config.pricing),
            snapshots=snapshots or self.create_snapshot_sink(),
            event_bus=event_bus or self.create_event_bus(),
            clock=clock,
            default_layout=lambda: create_default_layout(layout)
        )
        if event_bus is None:
            service.event_bus.subscribe(
                EventType.VEHICLE_PARKED,
                OccupancyAlertHandler(lambda: service.get_occupancy_summary().occupancy_rate)
            )
        self.logger.debug(
            f"Parking service created ({'in-memory' if in_memory else self.config.database_url})"
        )
        return service
