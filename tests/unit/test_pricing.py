#!/usr/bin/env python3
"""
Unit tests for the pricing policy and the standard pricing engine
"""

import unittest
from datetime import timedelta
from decimal import Decimal

from tests.helpers import MONDAY, SATURDAY, SUNDAY

from smartpark.domain.models import VehicleClass
from smartpark.domain.pricing import PricingPolicy, StandardPricingEngine


class TestPricingPolicy(unittest.TestCase):
    """Tests for PricingPolicy validation"""

    def test_defaults(self):
        policy = PricingPolicy()
        self.assertEqual(policy.rate_for(VehicleClass.BIKE), Decimal('10'))
        self.assertEqual(policy.rate_for(VehicleClass.CAR), Decimal('20'))
        self.assertEqual(policy.rate_for(VehicleClass.TRUCK), Decimal('30'))

    def test_rates_accept_string_keys(self):
        policy = PricingPolicy(hourly_rates={"bike": 5, "car": "12.5", "truck": 40})
        self.assertEqual(policy.rate_for(VehicleClass.CAR), Decimal('12.5'))

    def test_invalid_policies(self):
        with self.assertRaises(ValueError):
            PricingPolicy(hourly_rates={"car": 20})
        with self.assertRaises(ValueError):
            PricingPolicy(weekend_multiplier=Decimal('0.5'))
        with self.assertRaises(ValueError):
            PricingPolicy(loyalty_discount_rate=Decimal('0'))
        with self.assertRaises(ValueError):
            PricingPolicy(points_divisor=0)


class TestStandardPricingEngine(unittest.TestCase):
    """Tests for fee calculation"""

    def setUp(self):
        self.engine = StandardPricingEngine(PricingPolicy())

    def test_billable_hours(self):
        self.assertEqual(self.engine.billable_hours(MONDAY, MONDAY), 1)
        self.assertEqual(self.engine.billable_hours(MONDAY, MONDAY + timedelta(minutes=59)), 1)
        self.assertEqual(self.engine.billable_hours(MONDAY, MONDAY + timedelta(hours=1)), 1)
        self.assertEqual(self.engine.billable_hours(MONDAY, MONDAY + timedelta(minutes=61)), 2)

    def test_weekday_car(self):
        quote = self.engine.calculate(VehicleClass.CAR, MONDAY, MONDAY + timedelta(hours=1))
        self.assertEqual(quote.amount, Decimal('20.00'))
        self.assertFalse(quote.weekend)
        self.assertFalse(quote.discount_applied)

    def test_weekend_truck(self):
        quote = self.engine.calculate(VehicleClass.TRUCK, SATURDAY, SATURDAY + timedelta(hours=2))
        self.assertEqual(quote.amount, Decimal('72.00'))
        self.assertTrue(quote.weekend)
        self.assertEqual(quote.hours, 2)

    def test_saturday_partial_hour_rounded_up(self):
        entry = SATURDAY.replace(hour=9, minute=0)
        exit_time = SATURDAY.replace(hour=11, minute=10)
        self.assertEqual(
            self.engine.quote(VehicleClass.CAR, entry, exit_time, loyalty_eligible=False),
            Decimal('72')
        )
        quote = self.engine.calculate(VehicleClass.CAR, entry, exit_time)
        self.assertEqual(quote.hours, 3)
        self.assertTrue(quote.weekend)
        self.assertEqual(quote.amount, Decimal('72.00'))

    def test_sunday_truck_with_loyalty(self):
        entry = SUNDAY.replace(hour=9, minute=0)
        self.assertEqual(entry.isoweekday(), 7)
        quote = self.engine.calculate(
            VehicleClass.TRUCK, entry, SUNDAY.replace(hour=10, minute=0), loyalty_eligible=True
        )
        self.assertEqual(quote.hours, 1)
        self.assertTrue(quote.weekend)
        self.assertTrue(quote.discount_applied)
        self.assertEqual(
            self.engine.quote(VehicleClass.TRUCK, entry, SUNDAY.replace(hour=10), loyalty_eligible=True),
            Decimal('32.4')
        )
        self.assertEqual(quote.amount, Decimal('32.40'))

    def test_weekend_is_decided_by_exit_day(self):
        friday_night = MONDAY + timedelta(days=4, hours=12)
        quote = self.engine.calculate(VehicleClass.CAR, friday_night, friday_night + timedelta(hours=3))
        self.assertTrue(quote.weekend)
        self.assertEqual(quote.amount, Decimal('72.00'))

    def test_loyalty_applied_after_weekend(self):
        quote = self.engine.calculate(
            VehicleClass.BIKE, SATURDAY, SATURDAY + timedelta(hours=3), loyalty_eligible=True
        )
        self.assertEqual(quote.amount, Decimal('32.40'))
        self.assertTrue(quote.discount_applied)

    def test_weekend_pricing_can_be_disabled(self):
        engine = StandardPricingEngine(PricingPolicy(weekend_pricing=False))
        self.assertEqual(
            engine.quote(VehicleClass.CAR, SATURDAY, SATURDAY + timedelta(hours=1)),
            Decimal('20.00')
        )

    def test_amount_rounded_half_up_to_cents(self):
        engine = StandardPricingEngine(PricingPolicy(hourly_rates={"bike": "0.05", "car": 20, "truck": 30}))
        quote = engine.calculate(VehicleClass.BIKE, MONDAY, MONDAY + timedelta(hours=1), loyalty_eligible=True)
        self.assertEqual(quote.amount, Decimal('0.05'))

    def test_points_for(self):
        self.assertEqual(self.engine.points_for(Decimal('40.00')), 4)
        self.assertEqual(self.engine.points_for(Decimal('10.80')), 1)
        self.assertEqual(self.engine.points_for(Decimal('9.99')), 0)


if __name__ == "__main__":
    unittest.main()
