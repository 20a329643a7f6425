# File: src/smartpark/domain/pricing.py
"""
Pricing for parking stays

This module contains:
1. PricingPolicy - value object holding rates, multipliers and loyalty rules
2. FeeQuote - the breakdown of a computed fee
3. PricingStrategy - interface for fee calculation algorithms
4. StandardPricingEngine - hourly rate by vehicle class, weekend surcharge,
   loyalty discount

Pricing is pure: no storage access, no clock. Callers pass the entry time and
the reference time explicitly. All arithmetic is done in Decimal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
import logging
import math

from .models import VehicleClass


CENTS = Decimal('0.01')


def _default_rates() -> Dict[VehicleClass, Decimal]:
    return {
        VehicleClass.BIKE: Decimal('10'),
        VehicleClass.CAR: Decimal('20'),
        VehicleClass.TRUCK: Decimal('30'),
    }


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)
class PricingPolicy:
    """Value Object: rates and discount rules applied at exit"""
    hourly_rates: Dict[VehicleClass, Decimal] = field(default_factory=_default_rates)
    weekend_pricing: bool = True
    weekend_multiplier: Decimal = Decimal('1.2')
    loyalty_discount_rate: Decimal = Decimal('0.9')
    loyalty_threshold: int = 100
    points_divisor: Decimal = Decimal('10')

    def __post_init__(self):
        """Validate policy values"""
        rates = {
            VehicleClass.parse(vehicle_class): Decimal(str(rate))
            for vehicle_class, rate in self.hourly_rates.items()
        }
        missing = [vc.name for vc in VehicleClass if vc not in rates]
        if missing:
            raise ValueError(f"Hourly rate missing for: {', '.join(missing)}")

        if any(rate < 0 for rate in rates.values()):
            raise ValueError("Hourly rates cannot be negative")

        object.__setattr__(self, 'hourly_rates', rates)
        object.__setattr__(self, 'weekend_multiplier', Decimal(str(self.weekend_multiplier)))
        object.__setattr__(self, 'loyalty_discount_rate', Decimal(str(self.loyalty_discount_rate)))
        object.__setattr__(self, 'points_divisor', Decimal(str(self.points_divisor)))

        if self.weekend_multiplier < Decimal('1.0'):
            raise ValueError("Weekend multiplier cannot be less than 1.0")

        if not Decimal('0') < self.loyalty_discount_rate <= Decimal('1'):
            raise ValueError("Loyalty discount rate must be in (0, 1]")

        if self.loyalty_threshold < 0:
            raise ValueError("Loyalty threshold cannot be negative")

        if self.points_divisor <= 0:
            raise ValueError("Points divisor must be positive")

    def rate_for(self, vehicle_class: VehicleClass) -> Decimal:
        return self.hourly_rates[vehicle_class]


@dataclass(frozen=True)
class FeeQuote:
    """Value Object: fee breakdown for one stay"""
    amount: Decimal
    hours: int
    weekend: bool
    discount_applied: bool
    hourly_rate: Decimal

    def to_dict(self) -> Dict[str, object]:
        return {
            "amount": str(self.amount),
            "hours": self.hours,
            "weekend": self.weekend,
            "discount_applied": self.discount_applied,
            "hourly_rate": str(self.hourly_rate)
        }


# ============================================================================
# STRATEGY INTERFACE
# ============================================================================

class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for fee calculation algorithms
    """

    def __init__(self, policy: PricingPolicy):
        self.policy = policy
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate(
        self,
        vehicle_class: VehicleClass,
        entry_time: datetime,
        reference_time: datetime,
        loyalty_eligible: bool = False
    ) -> FeeQuote:
        """
        Calculate the fee for a stay ending at reference_time
        Returns: Fee breakdown
        """
        pass

    def quote(
        self,
        vehicle_class: VehicleClass,
        entry_time: datetime,
        reference_time: datetime,
        loyalty_eligible: bool = False
    ) -> Decimal:
        return self.calculate(vehicle_class, entry_time, reference_time, loyalty_eligible).amount

    def points_for(self, amount: Decimal) -> int:
        """Loyalty points earned for a paid amount"""
        return int(amount // self.policy.points_divisor)


# ============================================================================
# CONCRETE STRATEGY
# ============================================================================

class StandardPricingEngine(PricingStrategy):
    """
    Standard pricing
    - Hourly rate by vehicle class, every started hour billed, minimum one hour
    - Weekend surcharge decided by the reference (exit) day
    - Loyalty discount applied last
    """

    @staticmethod
    def billable_hours(entry_time: datetime, reference_time: datetime) -> int:
        elapsed = (reference_time - entry_time).total_seconds()
        return max(1, math.ceil(elapsed / 3600))

    @staticmethod
    def is_weekend(reference_time: datetime) -> bool:
        return reference_time.isoweekday() in (6, 7)

    def calculate(
        self,
        vehicle_class: VehicleClass,
        entry_time: datetime,
        reference_time: datetime,
        loyalty_eligible: bool = False
    ) -> FeeQuote:
        hours = self.billable_hours(entry_time, reference_time)
        rate = self.policy.rate_for(vehicle_class)

        amount = rate * hours

        weekend = self.policy.weekend_pricing and self.is_weekend(reference_time)
        if weekend:
            amount *= self.policy.weekend_multiplier

        if loyalty_eligible:
            amount *= self.policy.loyalty_discount_rate

        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)

        self.logger.debug(
            f"Fee for {vehicle_class.name}: {hours}h x {rate}"
            f"{' weekend' if weekend else ''}{' loyalty' if loyalty_eligible else ''} = {amount}"
        )

        return FeeQuote(
            amount=amount,
            hours=hours,
            weekend=weekend,
            discount_applied=loyalty_eligible,
            hourly_rate=rate
        )
