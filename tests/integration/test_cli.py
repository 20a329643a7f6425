#!/usr/bin/env python3
"""
Integration tests for the smartpark command-line interface
"""

import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from smartpark.main import build_parser, main


class TestCLI(unittest.TestCase):
    """Each call runs main() the way the console script does"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)

        self.config_path = self.tmp / "smartpark.yaml"
        self.config_path.write_text(
            f"snapshot_dir: {self.tmp / 'data'}\n"
            "log_level: warning\n"
            "layout:\n"
            "  floors: 1\n"
            "  car_spaces: 2\n"
            "  handicapped_car_spaces: 1\n"
            "  bike_spaces: 1\n"
            "  truck_spaces: 1\n",
            encoding="utf-8"
        )
        self.database_url = f"sqlite:///{self.tmp / 'cli.db'}"
        self.addCleanup(self._reset_logging)

    def _reset_logging(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    def run_cli(self, *args):
        """Run one command; returns (exit code, parsed JSON output)"""
        stdout = io.StringIO()
        argv = ["--config", str(self.config_path), "--database-url", self.database_url, "--json", *args]
        with redirect_stdout(stdout), redirect_stderr(io.StringIO()):
            code = main(argv)
        return code, json.loads(stdout.getvalue())

    def test_parking_session(self):
        code, init = self.run_cli("init")
        self.assertEqual(code, 0)
        self.assertEqual(init["data"]["source"], "default")
        self.assertEqual(init["data"]["spaces"], 4)

        code, registered = self.run_cli("register", "Asha Rao", "9876543210", "asha@example.com")
        self.assertEqual(code, 0)
        customer_id = registered["data"]["customer_id"]

        code, parked = self.run_cli("park", "ka01ab1234", "car", "--customer-id", str(customer_id))
        self.assertEqual(code, 0)
        ticket_id = parked["data"]["ticket_id"]
        self.assertEqual(parked["data"]["space_id"], "F1-A-1")

        code, tickets = self.run_cli("tickets")
        self.assertEqual([t["ticket_id"] for t in tickets["tickets"]], [ticket_id])

        code, preview = self.run_cli("preview", ticket_id)
        self.assertEqual(code, 0)
        self.assertEqual(preview["data"]["hours"], 1)

        code, paid = self.run_cli("exit", ticket_id, "card", "--details", "VISA-4242")
        self.assertEqual(code, 0)
        self.assertEqual(paid["data"]["payment_method"], "card")

        code, again = self.run_cli("exit", ticket_id, "card")
        self.assertEqual(code, 1)
        self.assertFalse(again["success"])

        code, report = self.run_cli("report")
        self.assertEqual(report["total_tickets"], 1)

        code, availability = self.run_cli("availability")
        self.assertEqual(availability["car"], {"total": 2, "available": 2, "occupied": 0, "reserved": 0})

        self.assertTrue((self.tmp / "data" / "tickets.json").exists())

    def test_reservation_commands(self):
        self.run_cli("register", "Ravi Kumar", "111", "ravi@example.com", "--handicapped")

        code, reserved = self.run_cli("reserve", "1", "car", "--hours", "3")
        self.assertEqual(code, 0)
        self.assertEqual(reserved["data"]["space_id"], "F1-A-2")

        code, listing = self.run_cli("reservations")
        self.assertEqual(len(listing["reservations"]), 1)

        code, floors = self.run_cli("floors")
        self.assertEqual([s["status"] for s in floors["1"]][:2], ["available", "reserved"])

    def test_failures_exit_with_one(self):
        code, result = self.run_cli("park", "TR1", "truck")
        self.assertEqual(code, 0)
        code, result = self.run_cli("park", "TR2", "truck")
        self.assertEqual(code, 1)
        self.assertIn("Parking lot full", result["message"])

        code, result = self.run_cli("redeem", "7", "10")
        self.assertEqual(code, 1)

    def test_invalid_arguments_rejected_by_parser(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["park", "AB123", "spaceship"])

    def test_invalid_config_exits_with_one(self):
        self.config_path.write_text("layout:\n  floors: 0\n", encoding="utf-8")
        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()) as stderr:
            code = main(["--config", str(self.config_path), "init"])
        self.assertEqual(code, 1)
        self.assertIn("Invalid configuration", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
