# File: src/smartpark/domain/exceptions.py
"""
Exception hierarchy for the parking engine

User-recoverable business failures (unknown ids, full lot, short payment)
are reported to callers as failed outcomes. InvalidStateError signals a
broken invariant and is never converted into a user message.
"""

from decimal import Decimal
from typing import Optional


class ParkingError(Exception):
    """Base exception for parking engine errors"""
    pass


class NotFoundError(ParkingError):
    """Raised when a ticket, reservation or customer id is unknown"""
    
    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class CapacityExhaustedError(ParkingError):
    """Raised when no allocatable space exists for a vehicle class"""
    
    def __init__(self, vehicle_class: object):
        super().__init__(f"No available space for {vehicle_class}")
        self.vehicle_class = vehicle_class


class InvalidStateError(ParkingError):
    """Raised when a transition is requested from an incompatible status"""
    pass


class InsufficientPaymentError(ParkingError):
    """Raised when cash tendered is below the fee"""
    
    def __init__(self, required: Decimal, tendered: Decimal):
        super().__init__(f"Insufficient cash. Required: {required}, received: {tendered}")
        self.required = required
        self.tendered = tendered


class TicketAlreadyPaidError(ParkingError):
    """Raised when an exit is requested for a settled ticket"""
    
    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket {ticket_id} is already paid")
        self.ticket_id = ticket_id


class VehicleAlreadyParkedError(ParkingError):
    """Raised when a plate already holds an active ticket"""
    
    def __init__(self, license_plate: str, ticket_id: Optional[str] = None):
        super().__init__(f"Vehicle {license_plate} is already parked (ticket {ticket_id})")
        self.license_plate = license_plate
        self.ticket_id = ticket_id


class DuplicateCustomerError(ParkingError):
    """Raised when a contact or email is already registered"""
    pass
