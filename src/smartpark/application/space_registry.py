# File: src/smartpark/application/space_registry.py
"""
Space Registry

Owns the parking spaces and is the only component that changes their
status. Ticketing and reservations request transitions through it.

Allocation is handicapped-first with fallback: a handicapped customer gets
an available handicapped space of the right class when one exists, any
available space of the right class otherwise. Candidates are taken in
insertion order.

The registry lock is re-entrant. Search plus transition plus save run as
one critical section, so two concurrent requests never obtain the same
space.
"""

from typing import Iterable, List, Optional
import logging
import threading

from ..domain.exceptions import NotFoundError
from ..domain.models import ParkingSpace, SpaceStatus, VehicleClass
from ..infrastructure.repositories import UnitOfWork


class SpaceRegistry:
    """Status transitions and allocation search over parking spaces"""

    def __init__(self, uow: UnitOfWork, lock: Optional[threading.RLock] = None):
        self.uow = uow
        self.lock = lock or threading.RLock()
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, space_id: str) -> ParkingSpace:
        with self.lock, self.uow:
            space = self.uow.spaces.get(space_id)
        if space is None:
            raise NotFoundError("Parking space", space_id)
        return space

    def all_spaces(self) -> List[ParkingSpace]:
        with self.lock, self.uow:
            return self.uow.spaces.get_all()

    def count(self) -> int:
        with self.lock, self.uow:
            return self.uow.spaces.count()

    def find_allocatable(
        self,
        vehicle_class: VehicleClass,
        prefer_handicapped: bool = False
    ) -> Optional[ParkingSpace]:
        """First available space compatible with the class, or None"""
        with self.lock, self.uow:
            spaces = self.uow.spaces
            if prefer_handicapped:
                candidates = spaces.find_by_status_and_class_and_handicapped(
                    SpaceStatus.AVAILABLE, vehicle_class, True
                )
                if candidates:
                    return candidates[0]
                self.logger.debug(f"No handicapped {vehicle_class.name} space free, falling back")

            candidates = spaces.find_by_status_and_class(SpaceStatus.AVAILABLE, vehicle_class)
            return candidates[0] if candidates else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def occupy(self, space: ParkingSpace, license_plate: str) -> ParkingSpace:
        with self.lock, self.uow:
            space.occupy(license_plate)
            self.uow.spaces.save(space)
        self.logger.debug(f"Space {space.space_id} occupied by {license_plate}")
        return space

    def release(self, space: ParkingSpace) -> bool:
        """Free a space; no-op when it is already available"""
        with self.lock, self.uow:
            changed = space.release()
            if changed:
                self.uow.spaces.save(space)
        if changed:
            self.logger.debug(f"Space {space.space_id} released")
        return changed

    def reserve(self, space: ParkingSpace) -> ParkingSpace:
        with self.lock, self.uow:
            space.reserve()
            self.uow.spaces.save(space)
        self.logger.debug(f"Space {space.space_id} reserved")
        return space

    def allocate_and_occupy(
        self,
        vehicle_class: VehicleClass,
        license_plate: str,
        prefer_handicapped: bool = False
    ) -> Optional[ParkingSpace]:
        with self.lock, self.uow:
            space = self.find_allocatable(vehicle_class, prefer_handicapped)
            if space is None:
                return None
            return self.occupy(space, license_plate)

    def allocate_and_reserve(
        self,
        vehicle_class: VehicleClass,
        prefer_handicapped: bool = False
    ) -> Optional[ParkingSpace]:
        with self.lock, self.uow:
            space = self.find_allocatable(vehicle_class, prefer_handicapped)
            if space is None:
                return None
            return self.reserve(space)

    def seed(self, spaces: Iterable[ParkingSpace]) -> int:
        """Add spaces that do not exist yet; returns how many were added"""
        added = 0
        with self.lock, self.uow:
            for space in spaces:
                if self.uow.spaces.exists(space.space_id):
                    continue
                self.uow.spaces.add(space)
                added += 1
        if added:
            self.logger.info(f"Seeded {added} parking spaces")
        return added
