#!/usr/bin/env python3
"""
Unit tests for the in-process event bus and its handlers
"""

import unittest
from decimal import Decimal
from unittest.mock import Mock

from tests.helpers import MONDAY, RecordingHandler

from smartpark.domain.models import (
    EventType, PaymentMethod, ReservationExpiredEvent, VehicleClass,
    VehicleExitedEvent, VehicleParkedEvent
)
from smartpark.infrastructure.messaging import (
    EventBus, EventHandler, LoggingEventHandler, OccupancyAlertHandler
)


def parked_event() -> VehicleParkedEvent:
    return VehicleParkedEvent("TKT-1", "F1-A-1", "AB123", VehicleClass.CAR, timestamp=MONDAY)


def exited_event() -> VehicleExitedEvent:
    return VehicleExitedEvent("TKT-1", "F1-A-1", "AB123", Decimal('20.00'), PaymentMethod.CARD, timestamp=MONDAY)


class TestEventBus(unittest.TestCase):
    """Tests for subscribe/publish"""

    def setUp(self):
        self.bus = EventBus()

    def test_typed_subscription(self):
        handler = RecordingHandler()
        self.bus.subscribe(EventType.VEHICLE_PARKED, handler)

        self.bus.publish(parked_event())
        self.bus.publish(exited_event())

        self.assertEqual(handler.types, ["vehicle.parked"])

    def test_wildcard_subscription(self):
        handler = RecordingHandler()
        self.bus.subscribe(None, handler)
        self.bus.publish_all([parked_event(), exited_event(), ReservationExpiredEvent("RES-1", "F1-A-2")])
        self.assertEqual(handler.types, ["vehicle.parked", "vehicle.exited", "reservation.expired"])

    def test_subscribe_twice_delivers_once(self):
        handler = RecordingHandler()
        self.bus.subscribe(None, handler)
        self.bus.subscribe(None, handler)
        self.bus.publish(parked_event())
        self.assertEqual(len(handler.events), 1)

    def test_unsubscribe(self):
        handler = RecordingHandler()
        self.bus.subscribe(EventType.VEHICLE_EXITED, handler)
        self.bus.unsubscribe(EventType.VEHICLE_EXITED, handler)
        self.bus.publish(exited_event())
        self.assertEqual(handler.events, [])

    def test_failing_handler_does_not_stop_others(self):
        failing = Mock(spec=EventHandler)
        failing.can_handle.return_value = True
        failing.handle.side_effect = RuntimeError("handler broke")
        recording = RecordingHandler()
        self.bus.subscribe(None, failing)
        self.bus.subscribe(None, recording)

        with self.assertLogs("EventBus", level="ERROR"):
            self.bus.publish(parked_event())

        self.assertEqual(len(recording.events), 1)


class TestHandlers(unittest.TestCase):

    def test_logging_handler(self):
        with self.assertLogs("LoggingEventHandler", level="INFO") as logs:
            LoggingEventHandler().handle(parked_event())
        self.assertIn("vehicle.parked", logs.output[0])

    def test_occupancy_alert_above_threshold(self):
        handler = OccupancyAlertHandler(lambda: 0.95, threshold=0.9)
        self.assertTrue(handler.can_handle(parked_event()))
        self.assertFalse(handler.can_handle(exited_event()))
        with self.assertLogs("OccupancyAlertHandler", level="WARNING") as logs:
            handler.handle(parked_event())
        self.assertIn("95.0%", logs.output[0])

    def test_occupancy_alert_below_threshold_is_quiet(self):
        provider = Mock(return_value=0.5)
        handler = OccupancyAlertHandler(provider)
        with self.assertNoLogs("OccupancyAlertHandler", level="WARNING"):
            handler.handle(parked_event())
        provider.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
