# File: src/smartpark/application/reporting.py
"""
Reporting and availability views

Read-only aggregation over parking spaces and paid tickets.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List
import logging

from ..domain.models import (
    ParkingSpace, PaymentMethod, SpaceStatus, TicketStatus, VehicleClass
)
from ..domain.pricing import CENTS
from ..infrastructure.repositories import UnitOfWork
from .space_registry import SpaceRegistry


ZERO = Decimal('0.00')


@dataclass(frozen=True)
class AvailabilityStats:
    """Space counts for one vehicle class"""
    total: int
    available: int
    occupied: int
    reserved: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "available": self.available,
            "occupied": self.occupied,
            "reserved": self.reserved
        }


@dataclass(frozen=True)
class RevenueReport:
    """Revenue over all paid tickets"""
    total_revenue: Decimal
    total_tickets: int
    payment_breakdown: Dict[PaymentMethod, Decimal] = field(default_factory=dict)
    average_amount: Decimal = ZERO

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_revenue": str(self.total_revenue),
            "total_tickets": self.total_tickets,
            "payment_breakdown": {
                method.value: str(amount) for method, amount in self.payment_breakdown.items()
            },
            "average_amount": str(self.average_amount)
        }


@dataclass(frozen=True)
class OccupancySummary:
    """Facility-wide space counts"""
    total: int
    available: int
    occupied: int
    reserved: int

    @property
    def occupancy_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.occupied + self.reserved) / self.total

    def to_dict(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "available": self.available,
            "occupied": self.occupied,
            "reserved": self.reserved,
            "occupancy_rate": round(self.occupancy_rate, 4)
        }


class ReportingService:
    """Availability, floor layout and revenue views"""

    def __init__(self, uow: UnitOfWork, registry: SpaceRegistry):
        self.uow = uow
        self.registry = registry
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_availability(self) -> Dict[VehicleClass, AvailabilityStats]:
        with self.registry.lock, self.uow:
            availability = {}
            for vehicle_class in VehicleClass:
                spaces = self.uow.spaces.find_by_class(vehicle_class)
                availability[vehicle_class] = AvailabilityStats(
                    total=len(spaces),
                    available=sum(1 for s in spaces if s.status == SpaceStatus.AVAILABLE),
                    occupied=sum(1 for s in spaces if s.status == SpaceStatus.OCCUPIED),
                    reserved=sum(1 for s in spaces if s.status == SpaceStatus.RESERVED)
                )
            return availability

    def get_spaces_by_floor(self) -> Dict[int, List[ParkingSpace]]:
        """Floor number to its spaces, floors ascending"""
        with self.registry.lock, self.uow:
            floors: Dict[int, List[ParkingSpace]] = {}
            for space in self.uow.spaces.get_all():
                floors.setdefault(space.floor, []).append(space)
        return {floor: floors[floor] for floor in sorted(floors)}

    def get_revenue_report(self) -> RevenueReport:
        with self.registry.lock, self.uow:
            paid = self.uow.tickets.find_by_status(TicketStatus.PAID)

        total = sum((t.amount for t in paid), ZERO)
        breakdown = {
            method: sum((t.amount for t in paid if t.payment_method == method), ZERO)
            for method in PaymentMethod
        }
        average = (total / max(1, len(paid))).quantize(CENTS, rounding=ROUND_HALF_UP)

        self.logger.debug(f"Revenue report: {total} over {len(paid)} tickets")
        return RevenueReport(
            total_revenue=total,
            total_tickets=len(paid),
            payment_breakdown=breakdown,
            average_amount=average
        )

    def get_occupancy_summary(self) -> OccupancySummary:
        with self.registry.lock, self.uow:
            spaces = self.uow.spaces.get_all()
        return OccupancySummary(
            total=len(spaces),
            available=sum(1 for s in spaces if s.status == SpaceStatus.AVAILABLE),
            occupied=sum(1 for s in spaces if s.status == SpaceStatus.OCCUPIED),
            reserved=sum(1 for s in spaces if s.status == SpaceStatus.RESERVED)
        )
