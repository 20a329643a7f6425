#!/usr/bin/env python3
"""
Unit tests for availability, floor and revenue views
"""

import unittest
from decimal import Decimal

from tests.helpers import FixedClock, SMALL_LAYOUT

from smartpark.application.reporting import ReportingService
from smartpark.application.reservations import ReservationManager
from smartpark.application.space_registry import SpaceRegistry
from smartpark.application.ticketing import TicketingEngine
from smartpark.config import LayoutConfig
from smartpark.domain.models import Customer, PaymentMethod, VehicleClass
from smartpark.domain.pricing import PricingPolicy, StandardPricingEngine
from smartpark.infrastructure.factories import create_default_layout
from smartpark.infrastructure.repositories import InMemoryUnitOfWork


class TestReportingService(unittest.TestCase):

    def setUp(self):
        self.clock = FixedClock()
        self.uow = InMemoryUnitOfWork()
        self.registry = SpaceRegistry(self.uow)
        self.registry.seed(create_default_layout(SMALL_LAYOUT))
        self.reservations = ReservationManager(self.uow, self.registry, self.clock)
        self.ticketing = TicketingEngine(
            self.uow, self.registry, self.reservations,
            StandardPricingEngine(PricingPolicy()), self.clock
        )
        self.reporting = ReportingService(self.uow, self.registry)

    def test_availability_counts(self):
        with self.uow:
            customer = self.uow.customers.add(Customer("Asha Rao", "98765", "asha@example.com"))
        self.ticketing.park("AB123", "car")
        self.reservations.create(customer, VehicleClass.CAR, 2)

        cars = self.reporting.get_availability()[VehicleClass.CAR]
        self.assertEqual((cars.total, cars.available, cars.occupied, cars.reserved), (4, 2, 1, 1))

        bikes = self.reporting.get_availability()[VehicleClass.BIKE]
        self.assertEqual(bikes.to_dict(), {"total": 2, "available": 2, "occupied": 0, "reserved": 0})

    def test_spaces_by_floor_sorted(self):
        registry = SpaceRegistry(InMemoryUnitOfWork())
        layout = LayoutConfig(floors=3, car_spaces=1, handicapped_car_spaces=0, bike_spaces=0, truck_spaces=0)
        registry.seed(reversed(create_default_layout(layout)))

        floors = ReportingService(registry.uow, registry).get_spaces_by_floor()
        self.assertEqual(list(floors), [1, 2, 3])
        self.assertEqual([s.space_id for s in floors[2]], ["F2-A-1"])

    def test_revenue_report(self):
        first = self.ticketing.park("AB123", "car").ticket
        second = self.ticketing.park("BK1", "bike").ticket
        self.ticketing.park("TR1", "truck")
        self.clock.advance(hours=2)
        self.ticketing.finalize(first.ticket_id, "cash", cash_tendered=Decimal('40'))
        self.ticketing.finalize(second.ticket_id, "upi")

        report = self.reporting.get_revenue_report()

        self.assertEqual(report.total_tickets, 2)
        self.assertEqual(report.total_revenue, Decimal('60.00'))
        self.assertEqual(report.average_amount, Decimal('30.00'))
        self.assertEqual(report.payment_breakdown[PaymentMethod.CASH], Decimal('40.00'))
        self.assertEqual(report.payment_breakdown[PaymentMethod.UPI], Decimal('20.00'))
        self.assertEqual(report.payment_breakdown[PaymentMethod.CARD], Decimal('0.00'))

    def test_average_rounded_half_up(self):
        policy = PricingPolicy(hourly_rates={"bike": "0.02", "car": "0.03", "truck": 30})
        ticketing = TicketingEngine(
            self.uow, self.registry, self.reservations, StandardPricingEngine(policy), self.clock
        )
        bike = ticketing.park("BK1", "bike").ticket
        car = ticketing.park("AB123", "car").ticket
        ticketing.finalize(bike.ticket_id, "card")
        ticketing.finalize(car.ticket_id, "card")

        report = self.reporting.get_revenue_report()

        self.assertEqual(report.total_revenue, Decimal('0.05'))
        self.assertEqual(report.average_amount, Decimal('0.03'))

    def test_empty_revenue_report(self):
        report = self.reporting.get_revenue_report()
        self.assertEqual(report.total_revenue, Decimal('0.00'))
        self.assertEqual(report.average_amount, Decimal('0.00'))
        self.assertEqual(report.to_dict()["payment_breakdown"]["card"], "0.00")

    def test_occupancy_summary(self):
        self.ticketing.park("TR1", "truck")
        summary = self.reporting.get_occupancy_summary()
        self.assertEqual(summary.total, 7)
        self.assertEqual(summary.occupied, 1)
        self.assertAlmostEqual(summary.occupancy_rate, 1 / 7)


if __name__ == "__main__":
    unittest.main()
