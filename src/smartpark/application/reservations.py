# File: src/smartpark/application/reservations.py
"""
Reservation Manager

Creates, validates and expires holds on parking spaces. Expiry is swept on
demand (before every park attempt and before listing active reservations);
there is no background scheduler.

Validity window is closed-open: a reservation is valid while
now < expires_at and expired from expires_at onwards.
"""

from datetime import datetime
from typing import Callable, List, Optional
import logging

from ..domain.exceptions import NotFoundError
from ..domain.models import (
    Customer, Reservation, SpaceStatus, VehicleClass, generate_reference
)
from ..infrastructure.repositories import UnitOfWork
from .space_registry import SpaceRegistry


class ReservationManager:
    """Lifecycle of reservations: create, consume, expire"""

    def __init__(
        self,
        uow: UnitOfWork,
        registry: SpaceRegistry,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.uow = uow
        self.registry = registry
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)

    def create(
        self,
        customer: Customer,
        vehicle_class: VehicleClass,
        validity_hours: int
    ) -> Optional[Reservation]:
        """
        Hold a space for the customer

        Returns None when no compatible space is available.
        Raises: ValueError if validity_hours is not a positive integer
        """
        if not isinstance(validity_hours, int) or isinstance(validity_hours, bool) or validity_hours <= 0:
            raise ValueError("Validity hours must be a positive integer")

        vehicle_class = VehicleClass.parse(vehicle_class)

        with self.registry.lock, self.uow:
            space = self.registry.allocate_and_reserve(
                vehicle_class, prefer_handicapped=customer.handicapped
            )
            if space is None:
                self.logger.warning(f"No {vehicle_class.name} space available to reserve for customer {customer.id}")
                return None

            now = self.clock()
            reservation = Reservation(
                reservation_id=generate_reference("RES", now),
                customer_id=customer.id,
                space_id=space.space_id,
                vehicle_class=vehicle_class,
                validity_hours=validity_hours,
                created_at=now
            )
            self.uow.reservations.add(reservation)

        self.logger.info(
            f"Reservation {reservation.reservation_id} holds {space.space_id} "
            f"for customer {customer.id} until {reservation.expires_at:%Y-%m-%d %H:%M}"
        )
        return reservation

    def get(self, reservation_id: str) -> Reservation:
        with self.registry.lock, self.uow:
            reservation = self.uow.reservations.get(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", reservation_id)
        return reservation

    def is_valid(self, reservation: Reservation) -> bool:
        return reservation.is_valid(self.clock())

    def is_expired(self, reservation: Reservation) -> bool:
        return reservation.is_expired(self.clock())

    def find_valid(self, reservation_id: str, vehicle_class: VehicleClass) -> Optional[Reservation]:
        """
        The reservation if it can be redeemed by a vehicle of this class
        Unknown, used, expired or mismatched reservations yield None
        """
        with self.registry.lock, self.uow:
            reservation = self.uow.reservations.get(reservation_id)

        if reservation is None:
            self.logger.warning(f"Reservation {reservation_id} not found, allocating normally")
            return None

        if not self.is_valid(reservation):
            self.logger.warning(f"Reservation {reservation_id} is no longer valid, allocating normally")
            return None

        if reservation.vehicle_class != vehicle_class:
            self.logger.warning(
                f"Reservation {reservation_id} is for {reservation.vehicle_class.name}, "
                f"not {vehicle_class.name}; allocating normally"
            )
            return None

        return reservation

    def consume(self, reservation: Reservation) -> Reservation:
        with self.registry.lock, self.uow:
            reservation.consume()
            self.uow.reservations.save(reservation)
        self.logger.info(f"Reservation {reservation.reservation_id} redeemed")
        return reservation

    def sweep_expired(self) -> List[Reservation]:
        """Release the spaces of unused expired reservations and mark them used"""
        expired = []
        with self.registry.lock, self.uow:
            now = self.clock()
            for reservation in self.uow.reservations.find_by_used_false():
                if not reservation.is_expired(now):
                    continue

                space = self.uow.spaces.get(reservation.space_id)
                if space is not None and space.status == SpaceStatus.RESERVED:
                    self.registry.release(space)

                reservation.expire()
                self.uow.reservations.save(reservation)
                expired.append(reservation)

        for reservation in expired:
            self.logger.info(
                f"Reservation {reservation.reservation_id} expired, space {reservation.space_id} released"
            )
        return expired

    def list_active(self) -> List[Reservation]:
        """Sweep, then return unused reservations that are still valid"""
        with self.registry.lock, self.uow:
            self.sweep_expired()
            now = self.clock()
            return [
                r for r in self.uow.reservations.find_by_used_false()
                if r.is_valid(now)
            ]
