# File: src/smartpark/infrastructure/repositories.py
"""
Repository Pattern Implementation for the Smart Parking engine

Repositories provide a collection-like interface over the five entity
collections (vehicles, customers, parking spaces, reservations, tickets)
and hide the storage technology from the application layer.

Storage Implementations:
- InMemory*Repository - dict backed, for tests and ephemeral runs
- SQLAlchemy*Repository - relational storage through the SQLAlchemy ORM

Repositories are grouped in a Unit of Work. A unit of work is a re-entrant
context manager: the outermost `with` block commits on success and rolls
back on error; nested blocks join the outer transaction. A unit of work is
not thread-safe on its own; callers serialize access (the parking service
holds the space registry lock around every unit of work).
"""

from abc import ABC, abstractmethod
from typing import Type, TypeVar, Generic, Optional, List, Dict, Any, Callable
from decimal import Decimal
import copy
import logging

from sqlalchemy import (
    create_engine, Column, Integer, String, Boolean, DateTime, Numeric,
    Text, func, inspect
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.pool import StaticPool

from ..domain.models import (
    Vehicle, Customer, ParkingSpace, Reservation, ParkingTicket,
    VehicleClass, SpaceStatus, TicketStatus, PaymentMethod
)

# Type variables for generic repositories
T = TypeVar('T')  # Entity type
ID = TypeVar('ID')  # ID type


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class Repository(ABC, Generic[T, ID]):
    """Base repository interface"""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Add a new entity; store-generated ids are assigned here"""
        pass

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or update an entity"""
        pass

    @abstractmethod
    def get(self, id: ID) -> Optional[T]:
        """Get an entity by ID"""
        pass

    @abstractmethod
    def get_all(self) -> List[T]:
        """Get all entities in stable order"""
        pass

    @abstractmethod
    def exists(self, id: ID) -> bool:
        """Check if an entity exists"""
        pass

    @abstractmethod
    def count(self) -> int:
        """Count all entities"""
        pass


class VehicleRepository(Repository[Vehicle, str], ABC):
    """Vehicles keyed by normalized license plate"""


class CustomerRepository(Repository[Customer, int], ABC):

    @abstractmethod
    def find_by_contact(self, contact: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Customer]:
        pass


class ParkingSpaceRepository(Repository[ParkingSpace, str], ABC):
    """
    Parking spaces. Every query returns spaces in insertion order so that
    allocation is deterministic.
    """

    @abstractmethod
    def find_by_status(self, status: SpaceStatus) -> List[ParkingSpace]:
        pass

    @abstractmethod
    def find_by_status_and_class(
        self,
        status: SpaceStatus,
        vehicle_class: VehicleClass
    ) -> List[ParkingSpace]:
        pass

    @abstractmethod
    def find_by_status_and_class_and_handicapped(
        self,
        status: SpaceStatus,
        vehicle_class: VehicleClass,
        handicapped: bool
    ) -> List[ParkingSpace]:
        pass

    @abstractmethod
    def find_by_class(self, vehicle_class: VehicleClass) -> List[ParkingSpace]:
        pass

    @abstractmethod
    def find_by_floor(self, floor: int) -> List[ParkingSpace]:
        pass


class ReservationRepository(Repository[Reservation, str], ABC):

    @abstractmethod
    def find_by_used_false(self) -> List[Reservation]:
        """Reservations that were neither consumed nor expired"""
        pass

    @abstractmethod
    def find_by_customer(self, customer_id: int) -> List[Reservation]:
        pass


class TicketRepository(Repository[ParkingTicket, str], ABC):

    @abstractmethod
    def find_by_status(self, status: TicketStatus) -> List[ParkingTicket]:
        pass

    @abstractmethod
    def find_active_by_plate(self, license_plate: str) -> Optional[ParkingTicket]:
        pass

    @abstractmethod
    def find_by_customer(self, customer_id: int) -> List[ParkingTicket]:
        pass


# ============================================================================
# UNIT OF WORK PATTERN
# ============================================================================

class UnitOfWork(ABC):
    """
    Unit of Work pattern for transaction management

    Subclasses implement _begin/_end plus commit/rollback; nesting is
    handled here with a depth counter.
    """

    def __init__(self):
        self._depth = 0
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def active(self) -> bool:
        return self._depth > 0

    def __enter__(self):
        if self._depth == 0:
            self._begin()
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._depth -= 1
        if self._depth > 0:
            return False

        try:
            if exc_type is not None:
                self._logger.debug(f"Rolling back after {exc_type.__name__}: {exc_val}")
                self.rollback()
            else:
                self.commit()
        finally:
            self._end()
        return False

    @abstractmethod
    def _begin(self) -> None:
        """Start the outermost transaction"""
        pass

    @abstractmethod
    def _end(self) -> None:
        """Release resources held by the outermost transaction"""
        pass

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @property
    @abstractmethod
    def vehicles(self) -> VehicleRepository:
        pass

    @property
    @abstractmethod
    def customers(self) -> CustomerRepository:
        pass

    @property
    @abstractmethod
    def spaces(self) -> ParkingSpaceRepository:
        pass

    @property
    @abstractmethod
    def reservations(self) -> ReservationRepository:
        pass

    @property
    @abstractmethod
    def tickets(self) -> TicketRepository:
        pass


# ============================================================================
# IN-MEMORY REPOSITORIES (For Testing)
# ============================================================================

class InMemoryRepository(Repository[T, Any]):
    """In-memory repository; dict insertion order is the stable order"""

    def __init__(self):
        self._storage: Dict[Any, T] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def add(self, entity: T) -> T:
        if entity.id is None:
            entity.assign_id(self._next_id())

        if entity.id in self._storage:
            raise ValueError(f"Entity {entity.id} already exists")

        self._storage[entity.id] = entity
        self._logger.debug(f"Added entity {entity.id}")
        return entity

    def save(self, entity: T) -> T:
        if entity.id is None or entity.id not in self._storage:
            return self.add(entity)

        self._storage[entity.id] = entity
        self._logger.debug(f"Saved entity {entity.id}")
        return entity

    def _next_id(self) -> Any:
        raise ValueError(f"{self.__class__.__name__} cannot generate ids")

    def get(self, id: Any) -> Optional[T]:
        return self._storage.get(id)

    def get_all(self) -> List[T]:
        return list(self._storage.values())

    def exists(self, id: Any) -> bool:
        return id in self._storage

    def count(self) -> int:
        return len(self._storage)

    def _filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [entity for entity in self._storage.values() if predicate(entity)]

    def clear(self):
        """Clear all data (for testing)"""
        self._storage.clear()


class InMemoryVehicleRepository(InMemoryRepository[Vehicle], VehicleRepository):
    """In-memory repository for vehicles"""


class InMemoryCustomerRepository(InMemoryRepository[Customer], CustomerRepository):
    """In-memory repository for customers; ids are sequential integers"""

    def _next_id(self) -> int:
        return max(self._storage.keys(), default=0) + 1

    def find_by_contact(self, contact: str) -> Optional[Customer]:
        contact = contact.strip()
        matches = self._filter(lambda c: c.contact == contact)
        return matches[0] if matches else None

    def find_by_email(self, email: str) -> Optional[Customer]:
        email = email.strip().lower()
        matches = self._filter(lambda c: c.email == email)
        return matches[0] if matches else None


class InMemoryParkingSpaceRepository(InMemoryRepository[ParkingSpace], ParkingSpaceRepository):
    """In-memory repository for parking spaces"""

    def find_by_status(self, status: SpaceStatus) -> List[ParkingSpace]:
        return self._filter(lambda s: s.status == status)

    def find_by_status_and_class(
        self,
        status: SpaceStatus,
        vehicle_class: VehicleClass
    ) -> List[ParkingSpace]:
        return self._filter(lambda s: s.status == status and s.vehicle_class == vehicle_class)

    def find_by_status_and_class_and_handicapped(
        self,
        status: SpaceStatus,
        vehicle_class: VehicleClass,
        handicapped: bool
    ) -> List[ParkingSpace]:
        return self._filter(
            lambda s: s.status == status
            and s.vehicle_class == vehicle_class
            and s.handicapped == handicapped
        )

    def find_by_class(self, vehicle_class: VehicleClass) -> List[ParkingSpace]:
        return self._filter(lambda s: s.vehicle_class == vehicle_class)

    def find_by_floor(self, floor: int) -> List[ParkingSpace]:
        return self._filter(lambda s: s.floor == floor)


class InMemoryReservationRepository(InMemoryRepository[Reservation], ReservationRepository):
    """In-memory repository for reservations"""

    def find_by_used_false(self) -> List[Reservation]:
        return self._filter(lambda r: not r.used)

    def find_by_customer(self, customer_id: int) -> List[Reservation]:
        return self._filter(lambda r: r.customer_id == customer_id)


class InMemoryTicketRepository(InMemoryRepository[ParkingTicket], TicketRepository):
    """In-memory repository for tickets"""

    def find_by_status(self, status: TicketStatus) -> List[ParkingTicket]:
        return self._filter(lambda t: t.status == status)

    def find_active_by_plate(self, license_plate: str) -> Optional[ParkingTicket]:
        matches = self._filter(lambda t: t.license_plate == license_plate and t.is_active)
        return matches[0] if matches else None

    def find_by_customer(self, customer_id: int) -> List[ParkingTicket]:
        return self._filter(lambda t: t.customer_id == customer_id)


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work over in-memory repositories
    Rollback restores a deep copy of every collection taken at the outermost enter
    """

    def __init__(self):
        super().__init__()
        self._vehicles = InMemoryVehicleRepository()
        self._customers = InMemoryCustomerRepository()
        self._spaces = InMemoryParkingSpaceRepository()
        self._reservations = InMemoryReservationRepository()
        self._tickets = InMemoryTicketRepository()
        self._backup: Optional[Dict[str, Dict[Any, Any]]] = None

    def _repositories(self) -> Dict[str, InMemoryRepository]:
        return {
            "vehicles": self._vehicles,
            "customers": self._customers,
            "spaces": self._spaces,
            "reservations": self._reservations,
            "tickets": self._tickets,
        }

    def _begin(self) -> None:
        self._backup = {
            name: copy.deepcopy(repo._storage)
            for name, repo in self._repositories().items()
        }

    def _end(self) -> None:
        self._backup = None

    def commit(self):
        self._backup = None
        self._logger.debug("Transaction committed")

    def rollback(self):
        if self._backup is None:
            return
        for name, repo in self._repositories().items():
            repo._storage = self._backup[name]
        self._backup = None
        self._logger.debug("Transaction rolled back")

    @property
    def vehicles(self) -> InMemoryVehicleRepository:
        return self._vehicles

    @property
    def customers(self) -> InMemoryCustomerRepository:
        return self._customers

    @property
    def spaces(self) -> InMemoryParkingSpaceRepository:
        return self._spaces

    @property
    def reservations(self) -> InMemoryReservationRepository:
        return self._reservations

    @property
    def tickets(self) -> InMemoryTicketRepository:
        return self._tickets


# ============================================================================
# SQLALCHEMY ORM MODELS
# ============================================================================

Base = declarative_base()


class VehicleModel(Base):
    """SQLAlchemy model for Vehicle"""
    __tablename__ = 'vehicles'

    license_plate = Column(String(15), primary_key=True)
    vehicle_class = Column(String(10), nullable=False)
    owner_contact = Column(String(100))


class CustomerModel(Base):
    """SQLAlchemy model for Customer"""
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    contact = Column(String(100), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    handicapped = Column(Boolean, default=False, nullable=False)
    loyalty_points = Column(Integer, default=0, nullable=False)
    registered_at = Column(DateTime, nullable=False)


class ParkingSpaceModel(Base):
    """SQLAlchemy model for ParkingSpace"""
    __tablename__ = 'parking_spaces'

    space_id = Column(String(20), primary_key=True)
    # Insertion order, used for deterministic allocation
    sequence = Column(Integer, nullable=False, index=True)
    floor = Column(Integer, nullable=False, index=True)
    zone = Column(String(10), nullable=False)
    vehicle_class = Column(String(10), nullable=False, index=True)
    handicapped = Column(Boolean, default=False, nullable=False)
    status = Column(String(10), nullable=False, index=True)
    vehicle_plate = Column(String(15))


class ReservationModel(Base):
    """SQLAlchemy model for Reservation"""
    __tablename__ = 'reservations'

    reservation_id = Column(String(40), primary_key=True)
    customer_id = Column(Integer, nullable=False, index=True)
    space_id = Column(String(20), nullable=False)
    vehicle_class = Column(String(10), nullable=False)
    validity_hours = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False, index=True)


class ParkingTicketModel(Base):
    """SQLAlchemy model for ParkingTicket"""
    __tablename__ = 'tickets'

    ticket_id = Column(String(40), primary_key=True)
    license_plate = Column(String(15), nullable=False, index=True)
    vehicle_class = Column(String(10), nullable=False)
    space_id = Column(String(20), nullable=False)
    customer_id = Column(Integer, index=True)
    entry_time = Column(DateTime, nullable=False)
    exit_time = Column(DateTime)
    amount = Column(Numeric(12, 2), nullable=False, default=Decimal('0'))
    status = Column(String(10), nullable=False, index=True)
    payment_method = Column(String(10))
    payment_details = Column(Text)
    cash_received = Column(Numeric(12, 2))
    change_returned = Column(Numeric(12, 2), nullable=False, default=Decimal('0'))
    loyalty_points_earned = Column(Integer, nullable=False, default=0)
    loyalty_discount_applied = Column(Boolean, nullable=False, default=False)


# ============================================================================
# DOMAIN <-> ORM MAPPERS
# ============================================================================

class Mapper:
    """Maps between domain models and ORM models"""

    @staticmethod
    def vehicle_to_orm(vehicle: Vehicle) -> VehicleModel:
        return VehicleModel(
            license_plate=vehicle.license_plate,
            vehicle_class=vehicle.vehicle_class.value,
            owner_contact=vehicle.owner_contact
        )

    @staticmethod
    def vehicle_to_domain(model: VehicleModel) -> Vehicle:
        return Vehicle(
            license_plate=model.license_plate,
            vehicle_class=VehicleClass(model.vehicle_class),
            owner_contact=model.owner_contact
        )

    @staticmethod
    def customer_to_orm(customer: Customer) -> CustomerModel:
        model = CustomerModel(
            name=customer.name,
            contact=customer.contact,
            email=customer.email,
            handicapped=customer.handicapped,
            loyalty_points=customer.loyalty_points,
            registered_at=customer.registered_at
        )
        if customer.id is not None:
            model.id = customer.id
        return model

    @staticmethod
    def customer_to_domain(model: CustomerModel) -> Customer:
        return Customer(
            name=model.name,
            contact=model.contact,
            email=model.email,
            handicapped=model.handicapped,
            loyalty_points=model.loyalty_points,
            registered_at=model.registered_at,
            id=model.id
        )

    @staticmethod
    def space_to_orm(space: ParkingSpace) -> ParkingSpaceModel:
        # `sequence` is left unset so merges never overwrite it
        return ParkingSpaceModel(
            space_id=space.space_id,
            floor=space.floor,
            zone=space.zone,
            vehicle_class=space.vehicle_class.value,
            handicapped=space.handicapped,
            status=space.status.value,
            vehicle_plate=space.vehicle_plate
        )

    @staticmethod
    def space_to_domain(model: ParkingSpaceModel) -> ParkingSpace:
        return ParkingSpace(
            space_id=model.space_id,
            floor=model.floor,
            zone=model.zone,
            vehicle_class=VehicleClass(model.vehicle_class),
            handicapped=model.handicapped,
            status=SpaceStatus(model.status),
            vehicle_plate=model.vehicle_plate
        )

    @staticmethod
    def reservation_to_orm(reservation: Reservation) -> ReservationModel:
        return ReservationModel(
            reservation_id=reservation.reservation_id,
            customer_id=reservation.customer_id,
            space_id=reservation.space_id,
            vehicle_class=reservation.vehicle_class.value,
            validity_hours=reservation.validity_hours,
            created_at=reservation.created_at,
            expires_at=reservation.expires_at,
            used=reservation.used
        )

    @staticmethod
    def reservation_to_domain(model: ReservationModel) -> Reservation:
        return Reservation(
            reservation_id=model.reservation_id,
            customer_id=model.customer_id,
            space_id=model.space_id,
            vehicle_class=VehicleClass(model.vehicle_class),
            validity_hours=model.validity_hours,
            created_at=model.created_at,
            expires_at=model.expires_at,
            used=model.used
        )

    @staticmethod
    def ticket_to_orm(ticket: ParkingTicket) -> ParkingTicketModel:
        return ParkingTicketModel(
            ticket_id=ticket.ticket_id,
            license_plate=ticket.license_plate,
            vehicle_class=ticket.vehicle_class.value,
            space_id=ticket.space_id,
            customer_id=ticket.customer_id,
            entry_time=ticket.entry_time,
            exit_time=ticket.exit_time,
            amount=ticket.amount,
            status=ticket.status.value,
            payment_method=ticket.payment_method.value if ticket.payment_method else None,
            payment_details=ticket.payment_details,
            cash_received=ticket.cash_received,
            change_returned=ticket.change_returned,
            loyalty_points_earned=ticket.loyalty_points_earned,
            loyalty_discount_applied=ticket.loyalty_discount_applied
        )

    @staticmethod
    def ticket_to_domain(model: ParkingTicketModel) -> ParkingTicket:
        return ParkingTicket(
            ticket_id=model.ticket_id,
            license_plate=model.license_plate,
            vehicle_class=VehicleClass(model.vehicle_class),
            space_id=model.space_id,
            entry_time=model.entry_time,
            customer_id=model.customer_id,
            exit_time=model.exit_time,
            amount=Decimal(model.amount),
            status=TicketStatus(model.status),
            payment_method=PaymentMethod(model.payment_method) if model.payment_method else None,
            payment_details=model.payment_details,
            cash_received=Decimal(model.cash_received) if model.cash_received is not None else None,
            change_returned=Decimal(model.change_returned),
            loyalty_points_earned=model.loyalty_points_earned,
            loyalty_discount_applied=model.loyalty_discount_applied
        )


# ============================================================================
# SQLALCHEMY REPOSITORIES
# ============================================================================

class SQLAlchemyRepository(Repository[T, Any], ABC):
    """Base SQLAlchemy repository"""

    def __init__(self, session: Session):
        self.session = session
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def model_class(self) -> Type[Base]:
        """Return SQLAlchemy model class"""
        pass

    @property
    @abstractmethod
    def order_by(self) -> tuple:
        """Columns giving the stable order of get_all and finders"""
        pass

    @abstractmethod
    def to_domain(self, model: Base) -> T:
        """Convert ORM model to domain model"""
        pass

    @abstractmethod
    def to_orm(self, entity: T) -> Base:
        """Convert domain model to ORM model"""
        pass

    def _before_insert(self, model: Base) -> None:
        """Hook for columns the store fills in on insert"""

    def _primary_key(self, model: Base) -> Any:
        return inspect(model).identity[0]

    def add(self, entity: T) -> T:
        try:
            model = self.to_orm(entity)
            self._before_insert(model)
            self.session.add(model)
            self.session.flush()

            if entity.id is None:
                entity.assign_id(self._primary_key(model))

            self._logger.debug(f"Added entity: {entity.id}")
            return entity
        except IntegrityError as e:
            self._logger.error(f"Integrity error adding entity: {e}")
            raise
        except SQLAlchemyError as e:
            self._logger.error(f"Database error adding entity: {e}")
            raise

    def save(self, entity: T) -> T:
        if entity.id is None or not self.exists(entity.id):
            return self.add(entity)

        try:
            self.session.merge(self.to_orm(entity))
            self.session.flush()
            self._logger.debug(f"Saved entity: {entity.id}")
            return entity
        except SQLAlchemyError as e:
            self._logger.error(f"Database error saving entity {entity.id}: {e}")
            raise

    def get(self, id: Any) -> Optional[T]:
        try:
            model = self.session.get(self.model_class, id)
            if model:
                return self.to_domain(model)
            return None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error getting entity {id}: {e}")
            raise

    def get_all(self) -> List[T]:
        return self._find()

    def exists(self, id: Any) -> bool:
        try:
            return self.session.get(self.model_class, id) is not None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error checking existence of {id}: {e}")
            raise

    def count(self) -> int:
        try:
            return self.session.query(self.model_class).count()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error counting entities: {e}")
            raise

    def _find(self, *criteria) -> List[T]:
        try:
            query = self.session.query(self.model_class)
            if criteria:
                query = query.filter(*criteria)
            models = query.order_by(*self.order_by).all()
            return [self.to_domain(model) for model in models]
        except SQLAlchemyError as e:
            self._logger.error(f"Database error querying {self.model_class.__tablename__}: {e}")
            raise

    def _first(self, *criteria) -> Optional[T]:
        found = self._find(*criteria)
        return found[0] if found else None


class SQLAlchemyVehicleRepository(SQLAlchemyRepository[Vehicle], VehicleRepository):
    """Repository for vehicles"""

    @property
    def model_class(self) -> Type[Base]:
        return VehicleModel

    @property
    def order_by(self) -> tuple:
        return (VehicleModel.license_plate,)

    def to_domain(self, model: VehicleModel) -> Vehicle:
        return Mapper.vehicle_to_domain(model)

    def to_orm(self, entity: Vehicle) -> VehicleModel:
        return Mapper.vehicle_to_orm(entity)


class SQLAlchemyCustomerRepository(SQLAlchemyRepository[Customer], CustomerRepository):
    """Repository for customers"""

    @property
    def model_class(self) -> Type[Base]:
        return CustomerModel

    @property
    def order_by(self) -> tuple:
        return (CustomerModel.id,)

    def to_domain(self, model: CustomerModel) -> Customer:
        return Mapper.customer_to_domain(model)

    def to_orm(self, entity: Customer) -> CustomerModel:
        return Mapper.customer_to_orm(entity)

    def find_by_contact(self, contact: str) -> Optional[Customer]:
        return self._first(CustomerModel.contact == contact.strip())

    def find_by_email(self, email: str) -> Optional[Customer]:
        return self._first(CustomerModel.email == email.strip().lower())


class SQLAlchemyParkingSpaceRepository(SQLAlchemyRepository[ParkingSpace], ParkingSpaceRepository):
    """Repository for parking spaces"""

    @property
    def model_class(self) -> Type[Base]:
        return ParkingSpaceModel

    @property
    def order_by(self) -> tuple:
        return (ParkingSpaceModel.sequence,)

    def to_domain(self, model: ParkingSpaceModel) -> ParkingSpace:
        return Mapper.space_to_domain(model)

    def to_orm(self, entity: ParkingSpace) -> ParkingSpaceModel:
        return Mapper.space_to_orm(entity)

    def _before_insert(self, model: ParkingSpaceModel) -> None:
        last = self.session.query(func.max(ParkingSpaceModel.sequence)).scalar()
        model.sequence = (last or 0) + 1

    def find_by_status(self, status: SpaceStatus) -> List[ParkingSpace]:
        return self._find(ParkingSpaceModel.status == status.value)

    def find_by_status_and_class(
        self,
        status: SpaceStatus,
        vehicle_class: VehicleClass
    ) -> List[ParkingSpace]:
        return self._find(
            ParkingSpaceModel.status == status.value,
            ParkingSpaceModel.vehicle_class == vehicle_class.value
        )

    def find_by_status_and_class_and_handicapped(
        self,
        status: SpaceStatus,
        vehicle_class: VehicleClass,
        handicapped: bool
    ) -> List[ParkingSpace]:
        return self._find(
            ParkingSpaceModel.status == status.value,
            ParkingSpaceModel.vehicle_class == vehicle_class.value,
            ParkingSpaceModel.handicapped == handicapped
        )

    def find_by_class(self, vehicle_class: VehicleClass) -> List[ParkingSpace]:
        return self._find(ParkingSpaceModel.vehicle_class == vehicle_class.value)

    def find_by_floor(self, floor: int) -> List[ParkingSpace]:
        return self._find(ParkingSpaceModel.floor == floor)


class SQLAlchemyReservationRepository(SQLAlchemyRepository[Reservation], ReservationRepository):
    """Repository for reservations"""

    @property
    def model_class(self) -> Type[Base]:
        return ReservationModel

    @property
    def order_by(self) -> tuple:
        return (ReservationModel.created_at, ReservationModel.reservation_id)

    def to_domain(self, model: ReservationModel) -> Reservation:
        return Mapper.reservation_to_domain(model)

    def to_orm(self, entity: Reservation) -> ReservationModel:
        return Mapper.reservation_to_orm(entity)

    def find_by_used_false(self) -> List[Reservation]:
        return self._find(ReservationModel.used.is_(False))

    def find_by_customer(self, customer_id: int) -> List[Reservation]:
        return self._find(ReservationModel.customer_id == customer_id)


class SQLAlchemyTicketRepository(SQLAlchemyRepository[ParkingTicket], TicketRepository):
    """Repository for parking tickets"""

    @property
    def model_class(self) -> Type[Base]:
        return ParkingTicketModel

    @property
    def order_by(self) -> tuple:
        return (ParkingTicketModel.entry_time, ParkingTicketModel.ticket_id)

    def to_domain(self, model: ParkingTicketModel) -> ParkingTicket:
        return Mapper.ticket_to_domain(model)

    def to_orm(self, entity: ParkingTicket) -> ParkingTicketModel:
        return Mapper.ticket_to_orm(entity)

    def find_by_status(self, status: TicketStatus) -> List[ParkingTicket]:
        return self._find(ParkingTicketModel.status == status.value)

    def find_active_by_plate(self, license_plate: str) -> Optional[ParkingTicket]:
        return self._first(
            ParkingTicketModel.license_plate == license_plate,
            ParkingTicketModel.status == TicketStatus.ACTIVE.value
        )

    def find_by_customer(self, customer_id: int) -> List[ParkingTicket]:
        return self._find(ParkingTicketModel.customer_id == customer_id)


# ============================================================================
# SQLALCHEMY UNIT OF WORK
# ============================================================================

class SQLAlchemyUnitOfWork(UnitOfWork):
    """Unit of Work implementation with SQLAlchemy, one session per outermost block"""

    def __init__(self, session_factory: Callable[[], Session]):
        super().__init__()
        self.session_factory = session_factory
        self.session: Optional[Session] = None

    def _begin(self) -> None:
        self.session = self.session_factory()

        # Initialize repositories
        self._vehicles = SQLAlchemyVehicleRepository(self.session)
        self._customers = SQLAlchemyCustomerRepository(self.session)
        self._spaces = SQLAlchemyParkingSpaceRepository(self.session)
        self._reservations = SQLAlchemyReservationRepository(self.session)
        self._tickets = SQLAlchemyTicketRepository(self.session)

    def _end(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None

    def commit(self):
        """Commit the transaction"""
        try:
            self.session.commit()
            self._logger.debug("Transaction committed")
        except SQLAlchemyError as e:
            self._logger.error(f"Error committing transaction: {e}")
            self.session.rollback()
            raise

    def rollback(self):
        """Rollback the transaction"""
        self.session.rollback()
        self._logger.debug("Transaction rolled back")

    def _require_session(self) -> None:
        if self.session is None:
            raise RuntimeError("Unit of work is not active; use it as a context manager")

    @property
    def vehicles(self) -> SQLAlchemyVehicleRepository:
        self._require_session()
        return self._vehicles

    @property
    def customers(self) -> SQLAlchemyCustomerRepository:
        self._require_session()
        return self._customers

    @property
    def spaces(self) -> SQLAlchemyParkingSpaceRepository:
        self._require_session()
        return self._spaces

    @property
    def reservations(self) -> SQLAlchemyReservationRepository:
        self._require_session()
        return self._reservations

    @property
    def tickets(self) -> SQLAlchemyTicketRepository:
        self._require_session()
        return self._tickets


# ============================================================================
# REPOSITORY FACTORY
# ============================================================================

class RepositoryFactory:
    """Factory for creating units of work"""

    @staticmethod
    def create_in_memory_uow() -> InMemoryUnitOfWork:
        """Create in-memory Unit of Work for testing"""
        return InMemoryUnitOfWork()

    @staticmethod
    def create_sqlalchemy_uow(database_url: str, echo: bool = False) -> SQLAlchemyUnitOfWork:
        """Create SQLAlchemy Unit of Work"""
        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # A single shared connection keeps the in-memory database alive
                engine_kwargs["poolclass"] = StaticPool

        engine = create_engine(database_url, **engine_kwargs)
        SessionLocal = sessionmaker(autoflush=False, bind=engine)

        # Create tables if they don't exist
        Base.metadata.create_all(bind=engine)

        return SQLAlchemyUnitOfWork(SessionLocal)
