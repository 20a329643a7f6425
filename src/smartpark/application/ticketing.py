# File: src/smartpark/application/ticketing.py
"""
Ticketing Engine

Issues tickets on entry and settles them on exit.

Use Case: Vehicle Entry
1. Sweep expired reservations
2. Redeem the reservation if one was given and is still valid
3. Otherwise allocate (handicapped-first for handicapped customers)
4. Occupy the space and issue an ACTIVE ticket

Use Case: Vehicle Exit
1. Price the stay with the current time as exit time
2. Check cash covers the fee before touching any state
3. Settle the ticket, accrue loyalty points, release the space

Every step runs inside the caller's unit of work; a failure at any point
leaves the stored state as it was.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Union
import logging

from ..domain.exceptions import (
    CapacityExhaustedError, InsufficientPaymentError, InvalidStateError,
    NotFoundError, TicketAlreadyPaidError, VehicleAlreadyParkedError
)
from ..domain.models import (
    Customer, LicensePlate, ParkingSpace, ParkingTicket, PaymentMethod,
    TicketStatus, Vehicle, VehicleClass, generate_reference
)
from ..domain.pricing import CENTS, FeeQuote, PricingStrategy
from ..infrastructure.repositories import UnitOfWork
from .reservations import ReservationManager
from .space_registry import SpaceRegistry


ZERO = Decimal('0.00')


@dataclass
class ParkingOutcome:
    """Result of a successful entry"""
    ticket: ParkingTicket
    space: ParkingSpace
    reservation_id: Optional[str] = None


@dataclass
class ExitSettlement:
    """Result of a successful exit"""
    ticket: ParkingTicket
    quote: FeeQuote
    change: Decimal
    points_earned: int
    loyalty_balance: Optional[int] = None


class TicketingEngine:
    """Entry and exit use cases"""

    def __init__(
        self,
        uow: UnitOfWork,
        registry: SpaceRegistry,
        reservations: ReservationManager,
        pricing: PricingStrategy,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.uow = uow
        self.registry = registry
        self.reservations = reservations
        self.pricing = pricing
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)

    # ========================================================================
    # ENTRY
    # ========================================================================

    def park(
        self,
        license_plate: str,
        vehicle_class: Union[VehicleClass, str],
        contact: Optional[str] = None,
        customer_id: Optional[int] = None,
        reservation_id: Optional[str] = None
    ) -> ParkingOutcome:
        """
        Park a vehicle and issue a ticket

        Raises:
            NotFoundError: unknown customer id
            VehicleAlreadyParkedError: the plate already holds an active ticket
            ValueError: the plate is known with a different vehicle class
            CapacityExhaustedError: no compatible space is free
        """
        plate = LicensePlate(license_plate).value
        vehicle_class = VehicleClass.parse(vehicle_class)

        with self.registry.lock, self.uow:
            self.reservations.sweep_expired()

            customer = None
            if customer_id is not None:
                customer = self._get_customer(customer_id)

            active = self.uow.tickets.find_active_by_plate(plate)
            if active is not None:
                raise VehicleAlreadyParkedError(plate, active.ticket_id)

            self._resolve_vehicle(plate, vehicle_class, contact)

            space = None
            redeemed = None
            if reservation_id:
                redeemed = self.reservations.find_valid(reservation_id, vehicle_class)

            if redeemed is not None:
                space = self.uow.spaces.get(redeemed.space_id)
                if space is None:
                    raise InvalidStateError(
                        f"Reservation {redeemed.reservation_id} points at unknown space {redeemed.space_id}"
                    )
                self.registry.occupy(space, plate)
                self.reservations.consume(redeemed)
                if customer is None:
                    customer = self.uow.customers.get(redeemed.customer_id)
            else:
                space = self.registry.allocate_and_occupy(
                    vehicle_class, plate,
                    prefer_handicapped=bool(customer and customer.handicapped)
                )
                if space is None:
                    raise CapacityExhaustedError(vehicle_class)

            now = self.clock()
            ticket = ParkingTicket(
                ticket_id=generate_reference("TKT", now),
                license_plate=plate,
                vehicle_class=vehicle_class,
                space_id=space.space_id,
                entry_time=now,
                customer_id=customer.id if customer else None
            )
            self.uow.tickets.add(ticket)

        self.logger.info(f"Vehicle {plate} parked in {space.space_id} with ticket {ticket.ticket_id}")
        return ParkingOutcome(
            ticket=ticket,
            space=space,
            reservation_id=redeemed.reservation_id if redeemed else None
        )

    def _resolve_vehicle(
        self,
        plate: str,
        vehicle_class: VehicleClass,
        contact: Optional[str]
    ) -> Vehicle:
        vehicle = self.uow.vehicles.get(plate)
        if vehicle is None:
            vehicle = Vehicle(plate, vehicle_class, contact)
            self.uow.vehicles.add(vehicle)
            return vehicle

        if vehicle.vehicle_class != vehicle_class:
            raise ValueError(
                f"Vehicle {plate} is registered as {vehicle.vehicle_class.name}, not {vehicle_class.name}"
            )

        if contact and contact != vehicle.owner_contact:
            vehicle.update_contact(contact)
            self.uow.vehicles.save(vehicle)
        return vehicle

    # ========================================================================
    # EXIT
    # ========================================================================

    def preview(self, ticket_id: str) -> FeeQuote:
        """Fee if the vehicle left now; changes nothing"""
        with self.registry.lock, self.uow:
            ticket = self._get_active_ticket(ticket_id)
            customer = self._ticket_customer(ticket)
            return self._quote(ticket, customer, self.clock())

    def finalize(
        self,
        ticket_id: str,
        payment_method: Union[PaymentMethod, str],
        payment_details: Optional[str] = None,
        cash_tendered: Optional[Decimal] = None
    ) -> ExitSettlement:
        """
        Settle a ticket and release its space

        Raises:
            NotFoundError: unknown ticket
            TicketAlreadyPaidError: ticket already settled
            InsufficientPaymentError: cash does not cover the fee
        """
        method = PaymentMethod.parse(payment_method)

        with self.registry.lock, self.uow:
            ticket = self._get_active_ticket(ticket_id)
            customer = self._ticket_customer(ticket)

            now = self.clock()
            quote = self._quote(ticket, customer, now)
            amount = quote.amount

            cash_received = None
            change = ZERO
            if method == PaymentMethod.CASH:
                tendered = Decimal(str(cash_tendered)) if cash_tendered is not None else ZERO
                if tendered != tendered.quantize(CENTS):
                    raise ValueError(f"Cash tendered must be in whole cents, got {tendered}")
                tendered = tendered.quantize(CENTS)
                if tendered < amount:
                    raise InsufficientPaymentError(amount, tendered)
                cash_received = tendered
                change = tendered - amount

            points = self.pricing.points_for(amount) if customer else 0

            ticket.settle(
                exit_time=now,
                amount=amount,
                payment_method=method,
                payment_details=payment_details,
                cash_received=cash_received,
                change_returned=change,
                loyalty_points_earned=points,
                loyalty_discount_applied=quote.discount_applied
            )
            self.uow.tickets.save(ticket)

            if customer is not None:
                customer.accrue_points(points)
                self.uow.customers.save(customer)

            space = self.uow.spaces.get(ticket.space_id)
            if space is None:
                raise InvalidStateError(f"Ticket {ticket.ticket_id} points at unknown space {ticket.space_id}")
            self.registry.release(space)

        self.logger.info(
            f"Ticket {ticket.ticket_id} settled: {amount} by {method.display_name}, "
            f"change {change}, {points} points"
        )
        return ExitSettlement(
            ticket=ticket,
            quote=quote,
            change=change,
            points_earned=points,
            loyalty_balance=customer.loyalty_points if customer else None
        )

    # ========================================================================
    # HELPERS
    # ========================================================================

    def get_ticket(self, ticket_id: str) -> ParkingTicket:
        with self.registry.lock, self.uow:
            ticket = self.uow.tickets.get(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket", ticket_id)
        return ticket

    def list_by_status(self, status: TicketStatus):
        with self.registry.lock, self.uow:
            return self.uow.tickets.find_by_status(status)

    def _get_active_ticket(self, ticket_id: str) -> ParkingTicket:
        ticket = self.uow.tickets.get(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket", ticket_id)
        if ticket.status == TicketStatus.PAID:
            raise TicketAlreadyPaidError(ticket_id)
        return ticket

    def _get_customer(self, customer_id: int) -> Customer:
        customer = self.uow.customers.get(customer_id)
        if customer is None:
            raise NotFoundError("Customer", customer_id)
        return customer

    def _ticket_customer(self, ticket: ParkingTicket) -> Optional[Customer]:
        if ticket.customer_id is None:
            return None
        return self.uow.customers.get(ticket.customer_id)

    def _quote(self, ticket: ParkingTicket, customer: Optional[Customer], now: datetime) -> FeeQuote:
        eligible = bool(customer and customer.has_loyalty_discount(self.pricing.policy.loyalty_threshold))
        return self.pricing.calculate(ticket.vehicle_class, ticket.entry_time, now, eligible)
