# File: src/smartpark/application/parking_service.py
"""
Parking Management Application Service

The facade exposed to callers (the CLI, tests, any future HTTP layer).

Responsibilities:
1. Validate caller input with the request DTOs
2. Run every use case under the registry lock and inside one unit of work
3. Convert business errors into failed OperationResults
4. Take a snapshot after each committed mutation
5. Publish domain events after commit

InvalidStateError means a broken invariant: it is logged with the stack
trace and re-raised after the unit of work has rolled back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Union
import logging

from pydantic import ValidationError

from ..domain.exceptions import (
    CapacityExhaustedError, DuplicateCustomerError, InsufficientPaymentError,
    InvalidStateError, NotFoundError, ParkingError
)
from ..domain.models import (
    Customer, DomainEvent, ParkingSpace, ParkingTicket, Reservation,
    ReservationCreatedEvent, ReservationExpiredEvent, TicketStatus, Vehicle,
    VehicleClass, VehicleExitedEvent, VehicleParkedEvent
)
from ..domain.pricing import PricingStrategy
from ..infrastructure.messaging import EventBus
from ..infrastructure.repositories import UnitOfWork
from ..infrastructure.snapshots import NullSnapshotSink, Snapshot, SnapshotSink
from .dtos import (
    CustomerRegistrationDTO, ExitRequestDTO, OperationResult, ParkRequestDTO,
    ReservationRequestDTO, describe_validation_error
)
from .reporting import AvailabilityStats, OccupancySummary, ReportingService, RevenueReport
from .reservations import ReservationManager
from .space_registry import SpaceRegistry
from .ticketing import TicketingEngine


class ParkingService:
    """
    Main application service for parking management

    Use cases:
    1. Vehicle entry and exit
    2. Reservations
    3. Customer registration and loyalty points
    4. Availability and revenue reporting
    5. Bootstrap and snapshots
    """

    def __init__(
        self,
        uow: UnitOfWork,
        pricing: PricingStrategy,
        snapshots: Optional[SnapshotSink] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
        default_layout: Optional[Callable[[], Iterable[ParkingSpace]]] = None
    ):
        """
        Args:
            uow: unit of work over the entity store
            pricing: fee calculation strategy
            snapshots: sink receiving a full snapshot after each mutation
            event_bus: bus receiving domain events after commit
            clock: source of the current time
            default_layout: spaces created by bootstrap when nothing can be restored
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.uow = uow
        self.pricing = pricing
        self.snapshots = snapshots or NullSnapshotSink()
        self.event_bus = event_bus or EventBus()
        self.clock = clock
        self.default_layout = default_layout or (lambda: [])

        self.registry = SpaceRegistry(uow)
        self.reservations = ReservationManager(uow, self.registry, clock)
        self.ticketing = TicketingEngine(uow, self.registry, self.reservations, pricing, clock)
        self.reporting = ReportingService(uow, self.registry)

        self.logger.info("ParkingService initialized")

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def _execute(
        self,
        action: str,
        work: Callable[[List[DomainEvent]], OperationResult],
        mutating: Optional[bool] = True
    ) -> OperationResult:
        """
        Run `work` in one unit of work under the registry lock

        `work` appends the events it wants published; they go out only
        after a successful commit. A successful result is snapshotted when
        `mutating` is True, or when it is None and `work` recorded events.
        """
        events: List[DomainEvent] = []
        try:
            with self.registry.lock:
                with self.uow:
                    result = work(events)
                changed = bool(events) if mutating is None else mutating
                if changed and result.success:
                    self._take_snapshot()
        except InvalidStateError as e:
            self.logger.error(f"{action} failed on a broken invariant: {e}", exc_info=True)
            raise
        except CapacityExhaustedError as e:
            self.logger.info(f"{action} rejected: {e}")
            return OperationResult.fail(f"Parking lot full: {e}", error=type(e).__name__)
        except InsufficientPaymentError as e:
            self.logger.info(f"{action} rejected: {e}")
            return OperationResult.fail(
                str(e),
                error=type(e).__name__,
                required=str(e.required),
                tendered=str(e.tendered)
            )
        except ValidationError as e:
            message = describe_validation_error(e)
            self.logger.info(f"{action} rejected: {message}")
            return OperationResult.fail(message, error="ValidationError")
        except (ParkingError, ValueError) as e:
            self.logger.info(f"{action} rejected: {e}")
            return OperationResult.fail(str(e), error=type(e).__name__)
        except Exception as e:
            # Storage failures: the unit of work has already rolled back
            self.logger.error(f"Error during {action.lower()}: {e}", exc_info=True)
            return OperationResult.fail(f"Internal error: {e}", error=type(e).__name__)

        self.event_bus.publish_all(events)
        return result

    def _take_snapshot(self) -> bool:
        """Snapshot the committed state; failures are logged, never raised"""
        try:
            with self.uow:
                customers = self.uow.customers.get_all()
                tickets = self.uow.tickets.get_all()
                reservations = self.uow.reservations.get_all()
                spaces = self.uow.spaces.get_all()
            self.snapshots.save_snapshot(customers, tickets, reservations, spaces)
            return True
        except Exception as e:
            self.logger.warning(f"Snapshot failed: {e}", exc_info=True)
            return False

    def _expired_events(self, expired: List[Reservation]) -> List[DomainEvent]:
        now = self.clock()
        return [
            ReservationExpiredEvent(r.reservation_id, r.space_id, timestamp=now)
            for r in expired
        ]

    # ========================================================================
    # VEHICLE ENTRY AND EXIT
    # ========================================================================

    def park(
        self,
        license_plate: str,
        vehicle_class: Union[VehicleClass, str],
        contact: Optional[str] = None,
        customer_id: Optional[int] = None,
        reservation_id: Optional[str] = None
    ) -> OperationResult:
        """
        Park a vehicle

        Use Case: Vehicle Entry
        1. Sweep expired reservations
        2. Redeem the reservation if valid, otherwise allocate a space
        3. Issue a ticket
        """
        def work(events: List[DomainEvent]) -> OperationResult:
            request = ParkRequestDTO(
                license_plate=license_plate,
                vehicle_class=vehicle_class,
                contact=contact,
                customer_id=customer_id,
                reservation_id=reservation_id
            )
            events.extend(self._expired_events(self.reservations.sweep_expired()))

            outcome = self.ticketing.park(
                request.license_plate,
                request.vehicle_class,
                contact=request.contact,
                customer_id=request.customer_id,
                reservation_id=request.reservation_id
            )
            ticket = outcome.ticket
            events.append(VehicleParkedEvent(
                ticket_id=ticket.ticket_id,
                space_id=ticket.space_id,
                license_plate=ticket.license_plate,
                vehicle_class=ticket.vehicle_class,
                customer_id=ticket.customer_id,
                reservation_id=outcome.reservation_id,
                timestamp=ticket.entry_time
            ))
            return OperationResult.ok(
                f"Vehicle {ticket.license_plate} parked at {ticket.space_id}",
                ticket_id=ticket.ticket_id,
                space_id=ticket.space_id,
                floor=outcome.space.floor,
                license_plate=ticket.license_plate,
                vehicle_class=ticket.vehicle_class.value,
                customer_id=ticket.customer_id,
                reservation_id=outcome.reservation_id,
                entry_time=ticket.entry_time.isoformat()
            )

        return self._execute("Park", work)

    def exit_preview(self, ticket_id: str) -> OperationResult:
        """Fee the vehicle would pay if it left now; changes nothing"""
        def work(events: List[DomainEvent]) -> OperationResult:
            ticket = self.ticketing.get_ticket(ticket_id)
            quote = self.ticketing.preview(ticket_id)
            return OperationResult.ok(
                f"Amount due for {ticket.license_plate}: {quote.amount}",
                ticket_id=ticket.ticket_id,
                license_plate=ticket.license_plate,
                space_id=ticket.space_id,
                entry_time=ticket.entry_time.isoformat(),
                **quote.to_dict()
            )

        return self._execute("Exit preview", work, mutating=False)

    def exit_finalize(
        self,
        ticket_id: str,
        payment_method: str,
        payment_details: Optional[str] = None,
        cash_tendered: Optional[Union[Decimal, str, float]] = None
    ) -> OperationResult:
        """
        Settle a ticket and release its space

        Use Case: Vehicle Exit
        1. Price the stay
        2. Validate payment
        3. Settle, accrue loyalty points, release the space (atomically)
        """
        def work(events: List[DomainEvent]) -> OperationResult:
            request = ExitRequestDTO(
                ticket_id=ticket_id,
                payment_method=payment_method,
                payment_details=payment_details,
                cash_tendered=cash_tendered
            )
            settlement = self.ticketing.finalize(
                request.ticket_id,
                request.payment_method,
                payment_details=request.payment_details,
                cash_tendered=request.cash_tendered
            )
            ticket = settlement.ticket
            events.append(VehicleExitedEvent(
                ticket_id=ticket.ticket_id,
                space_id=ticket.space_id,
                license_plate=ticket.license_plate,
                amount=ticket.amount,
                payment_method=ticket.payment_method,
                loyalty_points_earned=settlement.points_earned,
                timestamp=ticket.exit_time
            ))
            return OperationResult.ok(
                f"Payment of {ticket.amount} received by {ticket.payment_method.display_name}",
                ticket_id=ticket.ticket_id,
                license_plate=ticket.license_plate,
                space_id=ticket.space_id,
                amount=str(ticket.amount),
                hours=settlement.quote.hours,
                weekend=settlement.quote.weekend,
                discount_applied=settlement.quote.discount_applied,
                payment_method=ticket.payment_method.value,
                change=str(settlement.change),
                points_earned=settlement.points_earned,
                loyalty_balance=settlement.loyalty_balance
            )

        return self._execute("Exit", work)

    def list_active_tickets(self) -> List[ParkingTicket]:
        return self.ticketing.list_by_status(TicketStatus.ACTIVE)

    # ========================================================================
    # RESERVATIONS
    # ========================================================================

    def create_reservation(
        self,
        customer_id: int,
        vehicle_class: Union[VehicleClass, str],
        validity_hours: int
    ) -> OperationResult:
        def work(events: List[DomainEvent]) -> OperationResult:
            request = ReservationRequestDTO(
                customer_id=customer_id,
                vehicle_class=vehicle_class,
                validity_hours=validity_hours
            )
            events.extend(self._expired_events(self.reservations.sweep_expired()))

            customer = self.uow.customers.get(request.customer_id)
            if customer is None:
                raise NotFoundError("Customer", request.customer_id)

            reservation = self.reservations.create(
                customer, request.vehicle_class, request.validity_hours
            )
            if reservation is None:
                raise CapacityExhaustedError(request.vehicle_class)

            events.append(ReservationCreatedEvent(
                reservation_id=reservation.reservation_id,
                customer_id=reservation.customer_id,
                space_id=reservation.space_id,
                expires_at=reservation.expires_at,
                timestamp=reservation.created_at
            ))
            return OperationResult.ok(
                f"Space {reservation.space_id} reserved until {reservation.expires_at:%Y-%m-%d %H:%M}",
                reservation_id=reservation.reservation_id,
                space_id=reservation.space_id,
                customer_id=reservation.customer_id,
                vehicle_class=reservation.vehicle_class.value,
                expires_at=reservation.expires_at.isoformat(),
                hours_remaining=reservation.hours_remaining(self.clock())
            )

        return self._execute("Reservation", work)

    def sweep_expired(self) -> OperationResult:
        """Release the spaces held by expired reservations"""
        def work(events: List[DomainEvent]) -> OperationResult:
            expired = self.reservations.sweep_expired()
            events.extend(self._expired_events(expired))
            return OperationResult.ok(
                f"{len(expired)} reservation(s) expired",
                expired=[r.reservation_id for r in expired]
            )

        return self._execute("Sweep", work, mutating=None)

    def list_active_reservations(self) -> List[Reservation]:
        """Sweep expired reservations, then list the ones still valid"""
        active: List[Reservation] = []

        def work(events: List[DomainEvent]) -> OperationResult:
            events.extend(self._expired_events(self.reservations.sweep_expired()))
            active.extend(self.reservations.list_active())
            return OperationResult.ok(f"{len(active)} active reservation(s)")

        self._execute("List reservations", work, mutating=None)
        return active

    # ========================================================================
    # CUSTOMERS AND LOYALTY
    # ========================================================================

    def register_customer(
        self,
        name: str,
        contact: str,
        email: str,
        handicapped: bool = False
    ) -> OperationResult:
        def work(events: List[DomainEvent]) -> OperationResult:
            request = CustomerRegistrationDTO(
                name=name, contact=contact, email=email, handicapped=handicapped
            )
            if self.uow.customers.find_by_contact(request.contact) is not None:
                raise DuplicateCustomerError(f"Contact already registered: {request.contact}")
            if self.uow.customers.find_by_email(request.email) is not None:
                raise DuplicateCustomerError(f"Email already registered: {request.email}")

            customer = Customer(
                name=request.name,
                contact=request.contact,
                email=request.email,
                handicapped=request.handicapped,
                registered_at=self.clock()
            )
            self.uow.customers.add(customer)
            self.logger.info(f"Registered customer {customer.id}: {customer.name}")
            return OperationResult.ok(
                f"Customer {customer.name} registered with id {customer.id}",
                customer_id=customer.id,
                **customer.to_dict()
            )

        return self._execute("Registration", work)

    def find_customer_by_contact(self, contact: str) -> Optional[Customer]:
        with self.registry.lock, self.uow:
            return self.uow.customers.find_by_contact(contact)

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        with self.registry.lock, self.uow:
            return self.uow.customers.get(customer_id)

    def list_customers(self) -> List[Customer]:
        with self.registry.lock, self.uow:
            return self.uow.customers.get_all()

    def redeem_points(self, customer_id: int, points: int) -> OperationResult:
        def work(events: List[DomainEvent]) -> OperationResult:
            customer = self.uow.customers.get(customer_id)
            if customer is None:
                raise NotFoundError("Customer", customer_id)

            balance = customer.redeem_points(points)
            self.uow.customers.save(customer)
            self.logger.info(f"Customer {customer_id} redeemed {points} points, balance {balance}")
            return OperationResult.ok(
                f"Redeemed {points} points; {balance} remaining",
                customer_id=customer_id,
                redeemed=points,
                loyalty_balance=balance
            )

        return self._execute("Redeem", work)

    # ========================================================================
    # REPORTING
    # ========================================================================

    def get_availability(self) -> Dict[VehicleClass, AvailabilityStats]:
        return self.reporting.get_availability()

    def get_spaces_by_floor(self) -> Dict[int, List[ParkingSpace]]:
        return self.reporting.get_spaces_by_floor()

    def get_revenue_report(self) -> RevenueReport:
        return self.reporting.get_revenue_report()

    def get_occupancy_summary(self) -> OccupancySummary:
        return self.reporting.get_occupancy_summary()

    # ========================================================================
    # BOOTSTRAP AND SNAPSHOTS
    # ========================================================================

    def save_snapshot(self) -> OperationResult:
        with self.registry.lock:
            saved = self._take_snapshot()
        if saved:
            return OperationResult.ok("Snapshot saved")
        return OperationResult.fail("Snapshot failed, see log for details")

    def bootstrap(self) -> OperationResult:
        """
        Prepare an empty store

        Restores the last snapshot when the store has no spaces; falls back
        to the default layout when the snapshot is empty or unreadable.
        A store that already holds spaces is left untouched.
        """
        with self.registry.lock, self.uow:
            existing = self.uow.spaces.count()
        if existing:
            return OperationResult.ok(
                f"Store already holds {existing} spaces", source="store", spaces=existing
            )

        def work(events: List[DomainEvent]) -> OperationResult:
            snapshot = self._load_snapshot()
            if snapshot is not None and snapshot.spaces:
                self._restore(snapshot)
                source = "snapshot"
            else:
                self.registry.seed(self.default_layout())
                source = "default"

            count = self.uow.spaces.count()
            self.logger.info(f"Bootstrapped {count} spaces from {source}")
            return OperationResult.ok(
                f"Initialized {count} spaces from {source}", source=source, spaces=count
            )

        return self._execute("Bootstrap", work)

    def _load_snapshot(self) -> Optional[Snapshot]:
        try:
            return self.snapshots.load_snapshot()
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.logger.warning(f"Snapshot unreadable, using default layout: {e}")
            return None

    def _restore(self, snapshot: Snapshot) -> None:
        self.registry.seed(snapshot.spaces)
        for customer in snapshot.customers:
            self.uow.customers.add(customer)
        for reservation in snapshot.reservations:
            self.uow.reservations.add(reservation)
        for ticket in snapshot.tickets:
            self.uow.tickets.add(ticket)
            if not self.uow.vehicles.exists(ticket.license_plate):
                self.uow.vehicles.add(Vehicle(ticket.license_plate, ticket.vehicle_class))

        self.logger.info(
            f"Restored {len(snapshot.spaces)} spaces, {len(snapshot.customers)} customers, "
            f"{len(snapshot.reservations)} reservations, {len(snapshot.tickets)} tickets"
        )
