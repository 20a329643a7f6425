# File: src/smartpark/domain/models.py
"""
Domain Models for the Smart Parking engine

This module contains:
1. Enums: vehicle classes, space/ticket statuses, payment methods
2. Value Objects: immutable objects with no identity (LicensePlate)
3. Entities: objects with identity and a guarded lifecycle
4. Domain Events: events representing business occurrences

Entities have no setters. State changes only through their transition
methods (occupy/release/reserve, consume/expire, settle, accrue/redeem),
each of which validates the current status first. Cross references between
entities are plain identifiers; resolving them is the caller's job.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, Union
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
import re
import uuid

from .exceptions import InvalidStateError


LOYALTY_THRESHOLD = 100


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


# ============================================================================
# ENUMERATIONS
# ============================================================================

class VehicleClass(Enum):
    """
    Enumeration of vehicle classes
    Every parking space is compatible with exactly one class
    """
    BIKE = "bike"
    CAR = "car"
    TRUCK = "truck"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Union['VehicleClass', str]) -> 'VehicleClass':
        """Accept an enum member, its value or its name (case-insensitive)"""
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower()
        if normalized == "motorcycle":
            return cls.BIKE

        for member in cls:
            if normalized in (member.value, member.name.lower()):
                return member

        raise ValueError(f"Invalid vehicle class: {value}")

    def __str__(self) -> str:
        return self.display_name


class SpaceStatus(Enum):
    """Occupancy status of a parking space"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class TicketStatus(Enum):
    """Lifecycle status of a parking ticket"""
    ACTIVE = "active"
    PAID = "paid"


class PaymentMethod(Enum):
    """Payment methods accepted at exit"""
    CASH = "cash"
    CARD = "card"
    UPI = "upi"

    @property
    def display_name(self) -> str:
        names = {
            PaymentMethod.CASH: "Cash Payment",
            PaymentMethod.CARD: "Credit/Debit Card",
            PaymentMethod.UPI: "UPI Payment",
        }
        return names[self]

    @classmethod
    def parse(cls, value: Union['PaymentMethod', str]) -> 'PaymentMethod':
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower()
        for member in cls:
            if normalized in (member.value, member.name.lower()):
                return member

        raise ValueError(f"Invalid payment method: {value}")

    def __str__(self) -> str:
        return self.display_name


class EventType(str, Enum):
    """Domain event types"""
    VEHICLE_PARKED = "vehicle.parked"
    VEHICLE_EXITED = "vehicle.exited"
    RESERVATION_CREATED = "reservation.created"
    RESERVATION_EXPIRED = "reservation.expired"


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)  # Value objects are immutable
class LicensePlate:
    """
    Value Object: License plate number with validation
    Normalized to upper case without surrounding whitespace
    """
    value: str

    def __post_init__(self):
        if not self.value or not self.value.strip():
            raise ValueError("License plate cannot be empty")

        object.__setattr__(self, 'value', self.value.strip().upper())

        if len(self.value) < 2 or len(self.value) > 15:
            raise ValueError(f"License plate must be 2-15 characters, got: {self.value}")

        if not re.match(r'^[A-Z0-9\s\-]+$', self.value):
            raise ValueError(f"License plate can only contain letters, numbers, spaces, and hyphens: {self.value}")

    def __str__(self) -> str:
        return self.value


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Entity:
    """
    Base class for all domain entities
    Identity is either supplied at creation or assigned once by the store
    """

    def __init__(self, id: Optional[Any] = None):
        self._id = id

    @property
    def id(self) -> Any:
        return self._id

    def assign_id(self, id: Any) -> None:
        """Bind a store-generated identity; an entity never changes identity"""
        if self._id is not None and self._id != id:
            raise InvalidStateError(f"{type(self).__name__} already has id {self._id}")
        self._id = id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return self.id == other.id and type(self) == type(other)

    def __hash__(self) -> int:
        return hash((self.id, type(self).__name__))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


class Vehicle(Entity):
    """
    Entity: a vehicle identified by its license plate
    Only the owner contact may change after creation
    """

    def __init__(
        self,
        license_plate: str,
        vehicle_class: VehicleClass,
        owner_contact: Optional[str] = None
    ):
        super().__init__(LicensePlate(license_plate).value)
        self._vehicle_class = VehicleClass.parse(vehicle_class)
        self._owner_contact = owner_contact

    @property
    def license_plate(self) -> str:
        return self.id

    @property
    def vehicle_class(self) -> VehicleClass:
        return self._vehicle_class

    @property
    def owner_contact(self) -> Optional[str]:
        return self._owner_contact

    def update_contact(self, contact: Optional[str]) -> None:
        self._owner_contact = contact

    def to_dict(self) -> Dict[str, Any]:
        return {
            "license_plate": self.license_plate,
            "vehicle_class": self.vehicle_class.value,
            "owner_contact": self.owner_contact
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vehicle':
        return cls(
            license_plate=data["license_plate"],
            vehicle_class=VehicleClass.parse(data["vehicle_class"]),
            owner_contact=data.get("owner_contact")
        )

    def __str__(self) -> str:
        return f"{self.license_plate} ({self.vehicle_class})"


class Customer(Entity):
    """
    Entity: a registered customer with a loyalty point balance

    The balance only moves through accrue_points/redeem_points and never
    goes negative. Loyalty eligibility is decided here, not by pricing.
    """

    def __init__(
        self,
        name: str,
        contact: str,
        email: str,
        handicapped: bool = False,
        loyalty_points: int = 0,
        registered_at: Optional[datetime] = None,
        id: Optional[int] = None
    ):
        super().__init__(id)
        self._name = (name or "").strip()
        self._contact = (contact or "").strip()
        self._email = (email or "").strip().lower()
        self._handicapped = bool(handicapped)
        self._loyalty_points = loyalty_points
        self._registered_at = registered_at or datetime.now()
        self._validate()

    def _validate(self) -> None:
        if len(self._name) < 2:
            raise ValueError("Customer name must be at least 2 characters")

        if not self._contact:
            raise ValueError("Customer contact cannot be empty")

        if not re.match(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', self._email):
            raise ValueError(f"Invalid email address: {self._email}")

        if not isinstance(self._loyalty_points, int) or self._loyalty_points < 0:
            raise ValueError("Loyalty points must be a non-negative integer")

    @property
    def name(self) -> str:
        return self._name

    @property
    def contact(self) -> str:
        return self._contact

    @property
    def email(self) -> str:
        return self._email

    @property
    def handicapped(self) -> bool:
        return self._handicapped

    @property
    def loyalty_points(self) -> int:
        return self._loyalty_points

    @property
    def registered_at(self) -> datetime:
        return self._registered_at

    def has_loyalty_discount(self, threshold: int = LOYALTY_THRESHOLD) -> bool:
        """Customers holding at least `threshold` points get the discount"""
        return self._loyalty_points >= threshold

    def accrue_points(self, points: int) -> int:
        if points < 0:
            raise ValueError("Cannot accrue a negative number of points")
        self._loyalty_points += points
        return self._loyalty_points

    def redeem_points(self, points: int) -> int:
        if points <= 0:
            raise ValueError("Points to redeem must be positive")
        if points > self._loyalty_points:
            raise ValueError(
                f"Insufficient loyalty points: balance {self._loyalty_points}, requested {points}"
            )
        self._loyalty_points -= points
        return self._loyalty_points

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "email": self.email,
            "handicapped": self.handicapped,
            "loyalty_points": self.loyalty_points,
            "registered_at": _iso(self.registered_at)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            name=data["name"],
            contact=data["contact"],
            email=data["email"],
            handicapped=data.get("handicapped", False),
            loyalty_points=int(data.get("loyalty_points", 0)),
            registered_at=_parse_datetime(data.get("registered_at")),
            id=data.get("id")
        )

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> ({self.loyalty_points} pts)"


class ParkingSpace(Entity):
    """
    Entity: a single parking slot compatible with one vehicle class

    Invariant: a vehicle is bound if and only if the status is OCCUPIED.
    RESERVED spaces hold no vehicle yet.
    """

    def __init__(
        self,
        space_id: str,
        floor: int,
        zone: str,
        vehicle_class: VehicleClass,
        handicapped: bool = False,
        status: SpaceStatus = SpaceStatus.AVAILABLE,
        vehicle_plate: Optional[str] = None
    ):
        super().__init__(space_id)
        self._floor = floor
        self._zone = zone
        self._vehicle_class = VehicleClass.parse(vehicle_class)
        self._handicapped = bool(handicapped)
        self._status = status
        self._vehicle_plate = vehicle_plate
        self._validate()

    @classmethod
    def create(
        cls,
        floor: int,
        zone: str,
        index: int,
        vehicle_class: VehicleClass,
        handicapped: bool = False
    ) -> 'ParkingSpace':
        """Create an available space whose id encodes floor, zone and index"""
        return cls(f"F{floor}-{zone}-{index}", floor, zone, vehicle_class, handicapped)

    def _validate(self) -> None:
        if not self.id:
            raise ValueError("Space id cannot be empty")

        if self._floor < 1:
            raise ValueError("Floor must be at least 1")

        if not self._zone:
            raise ValueError("Zone cannot be empty")

        if (self._status == SpaceStatus.OCCUPIED) != (self._vehicle_plate is not None):
            raise ValueError(
                f"Space {self.id}: status {self._status.name} inconsistent with vehicle {self._vehicle_plate}"
            )

    @property
    def space_id(self) -> str:
        return self.id

    @property
    def floor(self) -> int:
        return self._floor

    @property
    def zone(self) -> str:
        return self._zone

    @property
    def vehicle_class(self) -> VehicleClass:
        return self._vehicle_class

    @property
    def handicapped(self) -> bool:
        return self._handicapped

    @property
    def status(self) -> SpaceStatus:
        return self._status

    @property
    def vehicle_plate(self) -> Optional[str]:
        return self._vehicle_plate

    @property
    def is_available(self) -> bool:
        return self._status == SpaceStatus.AVAILABLE

    def occupy(self, vehicle_plate: str) -> None:
        """
        Bind a vehicle to the space
        Raises: InvalidStateError if the space is already occupied
        """
        if self._status == SpaceStatus.OCCUPIED:
            raise InvalidStateError(
                f"Space {self.id} is already occupied by {self._vehicle_plate}"
            )
        if not vehicle_plate:
            raise ValueError("Vehicle plate is required to occupy a space")

        self._status = SpaceStatus.OCCUPIED
        self._vehicle_plate = vehicle_plate

    def release(self) -> bool:
        """Free the space; returns False when it was already available"""
        if self._status == SpaceStatus.AVAILABLE:
            return False

        self._status = SpaceStatus.AVAILABLE
        self._vehicle_plate = None
        return True

    def reserve(self) -> None:
        if self._status != SpaceStatus.AVAILABLE:
            raise InvalidStateError(
                f"Space {self.id} cannot be reserved while {self._status.name}"
            )
        self._status = SpaceStatus.RESERVED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "space_id": self.space_id,
            "floor": self.floor,
            "zone": self.zone,
            "vehicle_class": self.vehicle_class.value,
            "handicapped": self.handicapped,
            "status": self.status.value,
            "vehicle_plate": self.vehicle_plate
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParkingSpace':
        return cls(
            space_id=data["space_id"],
            floor=int(data["floor"]),
            zone=data["zone"],
            vehicle_class=VehicleClass.parse(data["vehicle_class"]),
            handicapped=data.get("handicapped", False),
            status=SpaceStatus(data.get("status", SpaceStatus.AVAILABLE.value)),
            vehicle_plate=data.get("vehicle_plate")
        )

    def __str__(self) -> str:
        marker = " [H]" if self.handicapped else ""
        return f"{self.space_id}{marker} - {self.vehicle_class} - {self.status.name}"


class Reservation(Entity):
    """
    Entity: an exclusive hold on one space for one customer

    The validity window is closed-open: valid on [created_at, expires_at),
    expired from expires_at onwards. A reservation leaves the unused state
    exactly once, either consumed by a park or expired by a sweep.
    """

    def __init__(
        self,
        reservation_id: str,
        customer_id: int,
        space_id: str,
        vehicle_class: VehicleClass,
        validity_hours: int,
        created_at: datetime,
        expires_at: Optional[datetime] = None,
        used: bool = False
    ):
        super().__init__(reservation_id)
        if not isinstance(validity_hours, int) or isinstance(validity_hours, bool) or validity_hours <= 0:
            raise ValueError("Validity hours must be a positive integer")

        self._customer_id = customer_id
        self._space_id = space_id
        self._vehicle_class = VehicleClass.parse(vehicle_class)
        self._validity_hours = validity_hours
        self._created_at = created_at
        self._expires_at = expires_at or created_at + timedelta(hours=validity_hours)
        self._used = used

    @property
    def reservation_id(self) -> str:
        return self.id

    @property
    def customer_id(self) -> int:
        return self._customer_id

    @property
    def space_id(self) -> str:
        return self._space_id

    @property
    def vehicle_class(self) -> VehicleClass:
        return self._vehicle_class

    @property
    def validity_hours(self) -> int:
        return self._validity_hours

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    @property
    def used(self) -> bool:
        return self._used

    def is_valid(self, now: datetime) -> bool:
        return not self._used and now < self._expires_at

    def is_expired(self, now: datetime) -> bool:
        # Independent of `used`: callers check used first
        return now >= self._expires_at

    def hours_remaining(self, now: datetime) -> int:
        if self.is_expired(now):
            return 0
        return int((self._expires_at - now).total_seconds() // 3600)

    def consume(self) -> None:
        if self._used:
            raise InvalidStateError(f"Reservation {self.id} was already used")
        self._used = True

    def expire(self) -> None:
        if self._used:
            raise InvalidStateError(f"Reservation {self.id} was already used")
        self._used = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reservation_id": self.reservation_id,
            "customer_id": self.customer_id,
            "space_id": self.space_id,
            "vehicle_class": self.vehicle_class.value,
            "validity_hours": self.validity_hours,
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
            "used": self.used
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Reservation':
        return cls(
            reservation_id=data["reservation_id"],
            customer_id=data["customer_id"],
            space_id=data["space_id"],
            vehicle_class=VehicleClass.parse(data["vehicle_class"]),
            validity_hours=int(data["validity_hours"]),
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data.get("expires_at")),
            used=data.get("used", False)
        )

    def __str__(self) -> str:
        return f"Reservation {self.id} - space {self.space_id} until {self.expires_at:%Y-%m-%d %H:%M}"


class ParkingTicket(Entity):
    """
    Entity: the record of one stay, from entry to paid exit
    Becomes immutable once settled
    """

    def __init__(
        self,
        ticket_id: str,
        license_plate: str,
        vehicle_class: VehicleClass,
        space_id: str,
        entry_time: datetime,
        customer_id: Optional[int] = None,
        exit_time: Optional[datetime] = None,
        amount: Decimal = Decimal('0'),
        status: TicketStatus = TicketStatus.ACTIVE,
        payment_method: Optional[PaymentMethod] = None,
        payment_details: Optional[str] = None,
        cash_received: Optional[Decimal] = None,
        change_returned: Decimal = Decimal('0'),
        loyalty_points_earned: int = 0,
        loyalty_discount_applied: bool = False
    ):
        super().__init__(ticket_id)
        self._license_plate = license_plate
        self._vehicle_class = VehicleClass.parse(vehicle_class)
        self._space_id = space_id
        self._entry_time = entry_time
        self._customer_id = customer_id
        self._exit_time = exit_time
        self._amount = amount
        self._status = status
        self._payment_method = payment_method
        self._payment_details = payment_details
        self._cash_received = cash_received
        self._change_returned = change_returned
        self._loyalty_points_earned = loyalty_points_earned
        self._loyalty_discount_applied = loyalty_discount_applied

    @property
    def ticket_id(self) -> str:
        return self.id

    @property
    def license_plate(self) -> str:
        return self._license_plate

    @property
    def vehicle_class(self) -> VehicleClass:
        return self._vehicle_class

    @property
    def space_id(self) -> str:
        return self._space_id

    @property
    def entry_time(self) -> datetime:
        return self._entry_time

    @property
    def customer_id(self) -> Optional[int]:
        return self._customer_id

    @property
    def exit_time(self) -> Optional[datetime]:
        return self._exit_time

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def status(self) -> TicketStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status == TicketStatus.ACTIVE

    @property
    def payment_method(self) -> Optional[PaymentMethod]:
        return self._payment_method

    @property
    def payment_details(self) -> Optional[str]:
        return self._payment_details

    @property
    def cash_received(self) -> Optional[Decimal]:
        return self._cash_received

    @property
    def change_returned(self) -> Decimal:
        return self._change_returned

    @property
    def loyalty_points_earned(self) -> int:
        return self._loyalty_points_earned

    @property
    def loyalty_discount_applied(self) -> bool:
        return self._loyalty_discount_applied

    def settle(
        self,
        exit_time: datetime,
        amount: Decimal,
        payment_method: PaymentMethod,
        payment_details: Optional[str] = None,
        cash_received: Optional[Decimal] = None,
        change_returned: Decimal = Decimal('0'),
        loyalty_points_earned: int = 0,
        loyalty_discount_applied: bool = False
    ) -> None:
        """
        Record the exit and payment, moving the ticket to PAID
        Raises: InvalidStateError if the ticket was already settled
        """
        if self._status == TicketStatus.PAID:
            raise InvalidStateError(f"Ticket {self.id} is already paid")

        self._exit_time = exit_time
        self._amount = amount
        self._payment_method = payment_method
        self._payment_details = payment_details
        self._cash_received = cash_received
        self._change_returned = change_returned
        self._loyalty_points_earned = loyalty_points_earned
        self._loyalty_discount_applied = loyalty_discount_applied
        self._status = TicketStatus.PAID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "license_plate": self.license_plate,
            "vehicle_class": self.vehicle_class.value,
            "space_id": self.space_id,
            "customer_id": self.customer_id,
            "entry_time": _iso(self.entry_time),
            "exit_time": _iso(self.exit_time),
            "amount": str(self.amount),
            "status": self.status.value,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "payment_details": self.payment_details,
            "cash_received": str(self.cash_received) if self.cash_received is not None else None,
            "change_returned": str(self.change_returned),
            "loyalty_points_earned": self.loyalty_points_earned,
            "loyalty_discount_applied": self.loyalty_discount_applied
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParkingTicket':
        method = data.get("payment_method")
        return cls(
            ticket_id=data["ticket_id"],
            license_plate=data["license_plate"],
            vehicle_class=VehicleClass.parse(data["vehicle_class"]),
            space_id=data["space_id"],
            entry_time=_parse_datetime(data["entry_time"]),
            customer_id=data.get("customer_id"),
            exit_time=_parse_datetime(data.get("exit_time")),
            amount=_parse_decimal(data.get("amount", "0")),
            status=TicketStatus(data.get("status", TicketStatus.ACTIVE.value)),
            payment_method=PaymentMethod.parse(method) if method else None,
            payment_details=data.get("payment_details"),
            cash_received=_parse_decimal(data.get("cash_received")),
            change_returned=_parse_decimal(data.get("change_returned", "0")),
            loyalty_points_earned=int(data.get("loyalty_points_earned", 0)),
            loyalty_discount_applied=data.get("loyalty_discount_applied", False)
        )

    def __str__(self) -> str:
        return f"Ticket {self.id} - {self.license_plate} in {self.space_id} ({self.status.name})"


def generate_reference(prefix: str, now: Optional[datetime] = None) -> str:
    """Generate a unique, human-readable identifier such as TKT-20240115103000-1A2B3C4D"""
    timestamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    unique_id = str(uuid.uuid4())[:8].upper()
    return f"{prefix}-{timestamp}-{unique_id}"


# ============================================================================
# DOMAIN EVENTS (for event-driven architecture)
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the domain
    """

    event_type: "EventType"

    def __init__(self, timestamp: Optional[datetime] = None):
        self.event_id = str(uuid.uuid4())
        self.timestamp = timestamp or datetime.now()
        self.version = "1.0"

    @abstractmethod
    def payload(self) -> Dict[str, Any]:
        """Event-specific data"""
        pass

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "data": self.payload()
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__} at {self.timestamp}"


class VehicleParkedEvent(DomainEvent):
    """Event raised when a ticket is issued"""

    event_type = EventType.VEHICLE_PARKED

    def __init__(
        self,
        ticket_id: str,
        space_id: str,
        license_plate: str,
        vehicle_class: VehicleClass,
        customer_id: Optional[int] = None,
        reservation_id: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ):
        super().__init__(timestamp)
        self.ticket_id = ticket_id
        self.space_id = space_id
        self.license_plate = license_plate
        self.vehicle_class = vehicle_class
        self.customer_id = customer_id
        self.reservation_id = reservation_id

    def payload(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "space_id": self.space_id,
            "license_plate": self.license_plate,
            "vehicle_class": self.vehicle_class.value,
            "customer_id": self.customer_id,
            "reservation_id": self.reservation_id
        }


class VehicleExitedEvent(DomainEvent):
    """Event raised when a ticket is paid and the space released"""

    event_type = EventType.VEHICLE_EXITED

    def __init__(
        self,
        ticket_id: str,
        space_id: str,
        license_plate: str,
        amount: Decimal,
        payment_method: PaymentMethod,
        loyalty_points_earned: int = 0,
        timestamp: Optional[datetime] = None
    ):
        super().__init__(timestamp)
        self.ticket_id = ticket_id
        self.space_id = space_id
        self.license_plate = license_plate
        self.amount = amount
        self.payment_method = payment_method
        self.loyalty_points_earned = loyalty_points_earned

    def payload(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "space_id": self.space_id,
            "license_plate": self.license_plate,
            "amount": str(self.amount),
            "payment_method": self.payment_method.value,
            "loyalty_points_earned": self.loyalty_points_earned
        }


class ReservationCreatedEvent(DomainEvent):
    """Event raised when a space is put on hold"""

    event_type = EventType.RESERVATION_CREATED

    def __init__(
        self,
        reservation_id: str,
        customer_id: int,
        space_id: str,
        expires_at: datetime,
        timestamp: Optional[datetime] = None
    ):
        super().__init__(timestamp)
        self.reservation_id = reservation_id
        self.customer_id = customer_id
        self.space_id = space_id
        self.expires_at = expires_at

    def payload(self) -> Dict[str, Any]:
        return {
            "reservation_id": self.reservation_id,
            "customer_id": self.customer_id,
            "space_id": self.space_id,
            "expires_at": self.expires_at.isoformat()
        }


class ReservationExpiredEvent(DomainEvent):
    """Event raised when a sweep releases an expired hold"""

    event_type = EventType.RESERVATION_EXPIRED

    def __init__(
        self,
        reservation_id: str,
        space_id: str,
        timestamp: Optional[datetime] = None
    ):
        super().__init__(timestamp)
        self.reservation_id = reservation_id
        self.space_id = space_id

    def payload(self) -> Dict[str, Any]:
        return {
            "reservation_id": self.reservation_id,
            "space_id": self.space_id
        }
