#!/usr/bin/env python3
"""
Unit tests for ReservationManager: holds, redemption lookup and expiry sweeps
"""

import unittest

from tests.helpers import FixedClock, SMALL_LAYOUT

from smartpark.application.reservations import ReservationManager
from smartpark.application.space_registry import SpaceRegistry
from smartpark.domain.exceptions import NotFoundError
from smartpark.domain.models import Customer, SpaceStatus, VehicleClass
from smartpark.infrastructure.factories import create_default_layout
from smartpark.infrastructure.repositories import InMemoryUnitOfWork


class ReservationTestBase(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock()
        self.uow = InMemoryUnitOfWork()
        self.registry = SpaceRegistry(self.uow)
        self.registry.seed(create_default_layout(SMALL_LAYOUT))
        self.manager = ReservationManager(self.uow, self.registry, self.clock)

        with self.uow:
            self.customer = self.uow.customers.add(
                Customer("Asha Rao", "9876543210", "asha@example.com")
            )


class TestCreateReservation(ReservationTestBase):

    def test_create_reserves_space(self):
        reservation = self.manager.create(self.customer, VehicleClass.CAR, 2)

        self.assertTrue(reservation.reservation_id.startswith("RES-20240115100000-"))
        self.assertEqual(reservation.customer_id, self.customer.id)
        self.assertEqual(reservation.expires_at, self.clock.advance(hours=2))
        self.assertEqual(self.registry.get(reservation.space_id).status, SpaceStatus.RESERVED)

    def test_create_without_capacity_returns_none(self):
        self.assertIsNotNone(self.manager.create(self.customer, VehicleClass.TRUCK, 1))
        self.assertIsNone(self.manager.create(self.customer, VehicleClass.TRUCK, 1))

    def test_invalid_validity(self):
        with self.assertRaises(ValueError):
            self.manager.create(self.customer, VehicleClass.CAR, 0)

    def test_handicapped_customer_gets_handicapped_space(self):
        with self.uow:
            customer = self.uow.customers.add(
                Customer("Ravi Kumar", "9000000001", "ravi@example.com", handicapped=True)
            )
        reservation = self.manager.create(customer, VehicleClass.CAR, 1)
        self.assertEqual(reservation.space_id, "F1-A-4")


class TestFindValid(ReservationTestBase):

    def setUp(self):
        super().setUp()
        self.reservation = self.manager.create(self.customer, VehicleClass.CAR, 2)

    def test_valid_within_window(self):
        self.clock.advance(hours=1)
        found = self.manager.find_valid(self.reservation.reservation_id, VehicleClass.CAR)
        self.assertEqual(found.reservation_id, self.reservation.reservation_id)

    def test_unknown_reservation_logged_and_ignored(self):
        with self.assertLogs("ReservationManager", level="WARNING"):
            self.assertIsNone(self.manager.find_valid("RES-UNKNOWN", VehicleClass.CAR))

    def test_class_mismatch_ignored(self):
        self.assertIsNone(self.manager.find_valid(self.reservation.reservation_id, VehicleClass.BIKE))

    def test_expired_at_boundary(self):
        self.clock.advance(hours=2)
        self.assertTrue(self.manager.is_expired(self.manager.get(self.reservation.reservation_id)))
        self.assertIsNone(self.manager.find_valid(self.reservation.reservation_id, VehicleClass.CAR))

    def test_get_unknown_raises(self):
        with self.assertRaises(NotFoundError):
            self.manager.get("RES-UNKNOWN")


class TestSweep(ReservationTestBase):

    def test_sweep_releases_expired_space(self):
        reservation = self.manager.create(self.customer, VehicleClass.CAR, 2)
        self.clock.advance(hours=1)
        self.assertEqual(self.manager.sweep_expired(), [])

        self.clock.advance(hours=2)
        expired = self.manager.sweep_expired()

        self.assertEqual([r.reservation_id for r in expired], [reservation.reservation_id])
        self.assertTrue(self.registry.get(reservation.space_id).is_available)
        self.assertTrue(self.manager.get(reservation.reservation_id).used)
        self.assertEqual(self.manager.sweep_expired(), [])

    def test_sweep_leaves_occupied_space_alone(self):
        reservation = self.manager.create(self.customer, VehicleClass.CAR, 1)
        space = self.registry.get(reservation.space_id)
        space.release()
        self.registry.occupy(space, "WALKIN1")

        self.clock.advance(hours=2)
        self.manager.sweep_expired()
        self.assertEqual(self.registry.get(reservation.space_id).status, SpaceStatus.OCCUPIED)

    def test_consumed_reservation_not_swept(self):
        reservation = self.manager.create(self.customer, VehicleClass.CAR, 1)
        self.manager.consume(reservation)
        self.clock.advance(hours=3)
        self.assertEqual(self.manager.sweep_expired(), [])

    def test_list_active(self):
        short = self.manager.create(self.customer, VehicleClass.CAR, 1)
        long = self.manager.create(self.customer, VehicleClass.CAR, 4)
        self.clock.advance(hours=2)

        active = self.manager.list_active()
        self.assertEqual([r.reservation_id for r in active], [long.reservation_id])
        self.assertTrue(self.registry.get(short.space_id).is_available)


if __name__ == "__main__":
    unittest.main()
