#!/usr/bin/env python3
"""
Unit tests for configuration loading: defaults, YAML and environment
"""

import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from smartpark.config import EngineConfig, LayoutConfig
from smartpark.domain.models import VehicleClass


class TestLayoutConfig(unittest.TestCase):

    def test_default_layout_totals(self):
        layout = LayoutConfig()
        self.assertEqual(layout.spaces_per_floor, 30)
        self.assertEqual(layout.total_spaces, 90)

    def test_invalid_layouts(self):
        with self.assertRaises(ValueError):
            LayoutConfig(floors=0)
        with self.assertRaises(ValueError):
            LayoutConfig(bike_spaces=-1)
        with self.assertRaises(ValueError):
            LayoutConfig(car_spaces=1, handicapped_car_spaces=2)


class TestEngineConfig(unittest.TestCase):

    def test_defaults(self):
        config = EngineConfig()
        self.assertEqual(config.database_url, "sqlite:///smartpark.db")
        self.assertEqual(config.currency, "INR")
        self.assertTrue(config.snapshot_enabled)
        self.assertEqual(config.pricing.rate_for(VehicleClass.CAR), Decimal('20'))

    def test_log_level_validated(self):
        self.assertEqual(EngineConfig(log_level="debug").log_level, "DEBUG")
        with self.assertRaises(ValueError):
            EngineConfig(log_level="chatty")

    def test_from_dict_with_sections(self):
        config = EngineConfig.from_dict({
            "snapshot_dir": "/tmp/snapshots",
            "pricing": {"hourly_rates": {"bike": 5, "car": 15, "truck": 25}, "weekend_pricing": False},
            "layout": {"floors": 2, "truck_spaces": 1},
        })
        self.assertEqual(config.snapshot_dir, "/tmp/snapshots")
        self.assertEqual(config.pricing.rate_for(VehicleClass.TRUCK), Decimal('25'))
        self.assertFalse(config.pricing.weekend_pricing)
        self.assertEqual(config.layout.floors, 2)
        self.assertEqual(config.layout.car_spaces, 10)

    def test_unknown_keys_rejected(self):
        with self.assertRaises(ValueError):
            EngineConfig.from_dict({"databse_url": "sqlite://"})
        with self.assertRaises(ValueError):
            EngineConfig.from_dict({"layout": {"levels": 3}})

    def test_from_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "smartpark.yaml"
            path.write_text(
                "database_url: sqlite://\n"
                "log_level: warning\n"
                "pricing:\n"
                "  weekend_multiplier: 1.5\n",
                encoding="utf-8"
            )
            config = EngineConfig.from_yaml(path)

        self.assertEqual(config.database_url, "sqlite://")
        self.assertEqual(config.log_level, "WARNING")
        self.assertEqual(config.pricing.weekend_multiplier, Decimal('1.5'))

    def test_yaml_must_be_mapping(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.yaml"
            path.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                EngineConfig.from_yaml(path)

    def test_malformed_yaml_reported_as_value_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.yaml"
            path.write_text("layout: [floors: 1\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                EngineConfig.from_yaml(path)

    def test_environment_overrides(self):
        environ = {
            "SMARTPARK_DATABASE_URL": "sqlite:///other.db",
            "SMARTPARK_SNAPSHOT_ENABLED": "no",
            "SMARTPARK_LOG_LEVEL": "error",
            "SMARTPARK_LOG_FILE": "",
        }
        config = EngineConfig.from_env(environ=environ)
        self.assertEqual(config.database_url, "sqlite:///other.db")
        self.assertFalse(config.snapshot_enabled)
        self.assertEqual(config.log_level, "ERROR")
        self.assertIsNone(config.log_file)

    def test_invalid_boolean_in_environment(self):
        with self.assertRaises(ValueError):
            EngineConfig.from_env(environ={"SMARTPARK_SNAPSHOT_ENABLED": "maybe"})


if __name__ == "__main__":
    unittest.main()
