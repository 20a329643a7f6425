# File: src/smartpark/main.py
"""
Command-line entry point for the SmartPark engine

Every invocation loads the configuration, builds the parking service,
bootstraps the store (restore from snapshot or create the default layout
when empty) and runs one subcommand. Exit status is 0 on success and 1
when the operation failed.
"""

from dataclasses import replace
from typing import Callable, Dict, List, Optional
import argparse
import json
import logging
import os
import sys

from .application.dtos import OperationResult
from .application.parking_service import ParkingService
from .config import EngineConfig
from .domain.models import PaymentMethod, VehicleClass
from .infrastructure.factories import ServiceFactory


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Setup application logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    return logging.getLogger("smartpark")


# ============================================================================
# OUTPUT
# ============================================================================

def _emit(payload: Dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, default=str))
        return
    for key, value in payload.items():
        print(f"  {key}: {value}")


def _report_result(result: OperationResult, args: argparse.Namespace) -> int:
    if args.json:
        print(result.to_json())
    else:
        print(("OK: " if result.success else "FAILED: ") + result.message)
        for key, value in result.data.items():
            if value is not None:
                print(f"  {key}: {value}")
    return 0 if result.success else 1


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_init(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(bootstrap, args)


def cmd_register(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(
        service.register_customer(args.name, args.contact, args.email, handicapped=args.handicapped),
        args
    )


def cmd_customers(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    if args.contact:
        customer = service.find_customer_by_contact(args.contact)
        if customer is None:
            print(f"FAILED: No customer with contact {args.contact}")
            return 1
        customers = [customer]
    else:
        customers = service.list_customers()

    if args.json:
        _emit({"customers": [c.to_dict() for c in customers]}, True)
    else:
        print(f"{len(customers)} customer(s)")
        for customer in customers:
            print(f"  [{customer.id}] {customer}")
    return 0


def cmd_park(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(
        service.park(
            args.plate,
            args.vehicle_class,
            contact=args.contact,
            customer_id=args.customer_id,
            reservation_id=args.reservation_id
        ),
        args
    )


def cmd_preview(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(service.exit_preview(args.ticket_id), args)


def cmd_exit(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(
        service.exit_finalize(
            args.ticket_id,
            args.method,
            payment_details=args.details,
            cash_tendered=args.cash
        ),
        args
    )


def cmd_reserve(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(
        service.create_reservation(args.customer_id, args.vehicle_class, args.hours),
        args
    )


def cmd_reservations(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    reservations = service.list_active_reservations()
    now = service.clock()
    if args.json:
        _emit({"reservations": [r.to_dict() for r in reservations]}, True)
    else:
        print(f"{len(reservations)} active reservation(s)")
        for r in reservations:
            print(f"  {r} ({r.hours_remaining(now)}h left)")
    return 0


def cmd_tickets(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    tickets = service.list_active_tickets()
    if args.json:
        _emit({"tickets": [t.to_dict() for t in tickets]}, True)
    else:
        print(f"{len(tickets)} active ticket(s)")
        for ticket in tickets:
            print(f"  {ticket} since {ticket.entry_time:%Y-%m-%d %H:%M}")
    return 0


def cmd_availability(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    availability = service.get_availability()
    payload = {vc.value: stats.to_dict() for vc, stats in availability.items()}
    if args.json:
        _emit(payload, True)
    else:
        for vc, stats in availability.items():
            print(
                f"  {vc.display_name:<6} total {stats.total:>3}  available {stats.available:>3}  "
                f"occupied {stats.occupied:>3}  reserved {stats.reserved:>3}"
            )
    return 0


def cmd_floors(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    floors = service.get_spaces_by_floor()
    if args.json:
        _emit({str(floor): [s.to_dict() for s in spaces] for floor, spaces in floors.items()}, True)
    else:
        for floor, spaces in floors.items():
            free = sum(1 for s in spaces if s.is_available)
            print(f"Floor {floor}: {free}/{len(spaces)} available")
            for space in spaces:
                print(f"  {space}")
    return 0


def cmd_report(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    report = service.get_revenue_report()
    if args.json:
        _emit(report.to_dict(), True)
    else:
        print(f"Total revenue: {report.total_revenue}")
        print(f"Paid tickets: {report.total_tickets}")
        print(f"Average amount: {report.average_amount}")
        for method, amount in report.payment_breakdown.items():
            print(f"  {method.display_name}: {amount}")
    return 0


def cmd_redeem(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(service.redeem_points(args.customer_id, args.points), args)


def cmd_snapshot(service: ParkingService, args: argparse.Namespace, bootstrap: OperationResult) -> int:
    return _report_result(service.save_snapshot(), args)


COMMANDS: Dict[str, Callable[[ParkingService, argparse.Namespace, OperationResult], int]] = {
    "init": cmd_init,
    "register": cmd_register,
    "customers": cmd_customers,
    "park": cmd_park,
    "preview": cmd_preview,
    "exit": cmd_exit,
    "reserve": cmd_reserve,
    "reservations": cmd_reservations,
    "tickets": cmd_tickets,
    "availability": cmd_availability,
    "floors": cmd_floors,
    "report": cmd_report,
    "redeem": cmd_redeem,
    "snapshot": cmd_snapshot,
}


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartpark",
        description="Smart parking allocation, reservation and billing engine"
    )
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument('--database-url', help='SQLAlchemy database URL (overrides configuration)')
    parser.add_argument('--log-level', help='Logging level (overrides configuration)')
    parser.add_argument('--json', action='store_true', help='Print machine-readable JSON output')

    sub = parser.add_subparsers(dest='command', required=True)
    vehicle_classes = [vc.value for vc in VehicleClass]
    payment_methods = [pm.value for pm in PaymentMethod]

    sub.add_parser('init', help='Restore the last snapshot or create the default layout')

    p = sub.add_parser('register', help='Register a customer')
    p.add_argument('name')
    p.add_argument('contact')
    p.add_argument('email')
    p.add_argument('--handicapped', action='store_true')

    p = sub.add_parser('customers', help='List customers')
    p.add_argument('--contact', help='Look up a single customer by contact')

    p = sub.add_parser('park', help='Park a vehicle')
    p.add_argument('plate')
    p.add_argument('vehicle_class', type=str.lower, choices=vehicle_classes)
    p.add_argument('--contact')
    p.add_argument('--customer-id', type=int)
    p.add_argument('--reservation-id')

    p = sub.add_parser('preview', help='Show the fee due for a ticket')
    p.add_argument('ticket_id')

    p = sub.add_parser('exit', help='Pay and release a ticket')
    p.add_argument('ticket_id')
    p.add_argument('method', type=str.lower, choices=payment_methods)
    p.add_argument('--cash', help='Cash tendered (cash payments)')
    p.add_argument('--details', help='Card or UPI reference')

    p = sub.add_parser('reserve', help='Reserve a space for a customer')
    p.add_argument('customer_id', type=int)
    p.add_argument('vehicle_class', type=str.lower, choices=vehicle_classes)
    p.add_argument('--hours', type=int, default=2, help='Validity in whole hours (default: 2)')

    sub.add_parser('reservations', help='List active reservations')
    sub.add_parser('tickets', help='List active tickets')
    sub.add_parser('availability', help='Space availability per vehicle class')
    sub.add_parser('floors', help='Spaces grouped by floor')
    sub.add_parser('report', help='Revenue report')

    p = sub.add_parser('redeem', help='Redeem loyalty points')
    p.add_argument('customer_id', type=int)
    p.add_argument('points', type=int)

    sub.add_parser('snapshot', help='Write a snapshot of the current state')

    return parser


def load_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.load(args.config)
    overrides = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        config = replace(config, **overrides)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except (OSError, ValueError) as e:
        print(f"FAILED: Invalid configuration: {e}", file=sys.stderr)
        return 1

    logger = setup_logging(config.log_level, config.log_file)
    logger.debug(f"Running '{args.command}' against {config.database_url}")

    service = ServiceFactory(config).create_parking_service()
    bootstrap = service.bootstrap()
    if not bootstrap.success:
        return _report_result(bootstrap, args)

    return COMMANDS[args.command](service, args, bootstrap)


if __name__ == "__main__":
    sys.exit(main())
