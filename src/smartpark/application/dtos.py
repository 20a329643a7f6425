# File: src/smartpark/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Smart Parking engine

1. Input DTOs - validate caller-supplied parameters before any state is read
2. Output DTOs - OperationResult, the structured outcome of mutating calls

Input DTOs are pydantic models; a pydantic ValidationError is a ValueError
and is reported by the parking service as a failed outcome.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Any
from decimal import Decimal
import json
import re

from pydantic import BaseModel, Field, ConfigDict, ValidationError, field_validator

from ..domain.models import VehicleClass, PaymentMethod, LicensePlate


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra='forbid'
    )

    def to_dict(self, exclude_none: bool = False) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        return self.model_dump(mode='json', exclude_none=exclude_none)


def describe_validation_error(error: ValidationError) -> str:
    """Condense a pydantic error into a single readable line"""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        # Strip pydantic's "Value error, " prefix from custom validators
        message = re.sub(r'^Value error, ', '', message)
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


# ============================================================================
# INPUT DTOs
# ============================================================================

class ParkRequestDTO(BaseDTO):
    """Vehicle entry request"""
    license_plate: str = Field(description="License plate number")
    vehicle_class: VehicleClass = Field(description="Vehicle class")
    contact: Optional[str] = Field(default=None, max_length=100, description="Owner contact")
    customer_id: Optional[int] = Field(default=None, ge=1, description="Registered customer")
    reservation_id: Optional[str] = Field(default=None, description="Reservation to redeem")

    @field_validator('license_plate')
    @classmethod
    def validate_license_plate(cls, v):
        return LicensePlate(v).value

    @field_validator('vehicle_class', mode='before')
    @classmethod
    def parse_vehicle_class(cls, v):
        return VehicleClass.parse(v)

    @field_validator('contact', 'reservation_id')
    @classmethod
    def blank_to_none(cls, v):
        return v or None


class ExitRequestDTO(BaseDTO):
    """Exit and payment request"""
    ticket_id: str = Field(min_length=1, description="Ticket to settle")
    payment_method: PaymentMethod = Field(description="Payment method")
    payment_details: Optional[str] = Field(default=None, max_length=255, description="Card/UPI reference")
    cash_tendered: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2, description="Cash handed over")

    @field_validator('payment_method', mode='before')
    @classmethod
    def parse_payment_method(cls, v):
        return PaymentMethod.parse(v)


class ReservationRequestDTO(BaseDTO):
    """Reservation request"""
    customer_id: int = Field(ge=1, description="Customer making the reservation")
    vehicle_class: VehicleClass = Field(description="Vehicle class")
    validity_hours: int = Field(ge=1, description="Hold duration in whole hours")

    @field_validator('vehicle_class', mode='before')
    @classmethod
    def parse_vehicle_class(cls, v):
        return VehicleClass.parse(v)

    @field_validator('validity_hours', mode='before')
    @classmethod
    def validate_whole_hours(cls, v):
        if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
            raise ValueError("Validity hours must be a positive integer")
        return v


class CustomerRegistrationDTO(BaseDTO):
    """Customer registration request"""
    name: str = Field(min_length=2, max_length=100, description="Full name")
    contact: str = Field(min_length=1, max_length=100, description="Phone number or other contact")
    email: str = Field(max_length=255, description="Email address")
    handicapped: bool = Field(default=False, description="Eligible for handicapped spaces")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Basic email validation"""
        if not re.match(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', v):
            raise ValueError("Invalid email address")
        return v.lower()


# ============================================================================
# OUTPUT DTOs
# ============================================================================

@dataclass
class OperationResult:
    """Outcome of a mutating operation"""
    success: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data: Any) -> 'OperationResult':
        return cls(True, message, data)

    @classmethod
    def fail(cls, message: str, **data: Any) -> 'OperationResult':
        return cls(False, message, data)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message, "data": self.data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)
