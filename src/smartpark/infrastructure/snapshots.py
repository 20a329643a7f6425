# File: src/smartpark/infrastructure/snapshots.py
"""
Snapshot sinks: full-state backups of the entity collections

The JSON sink writes one pretty-printed file per collection into a data
directory. Each file is written to a temporary file first and then moved
into place, so a reader never sees a half-written file.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Iterable, Union
import json
import logging
import os
import tempfile

from ..domain.models import Customer, ParkingTicket, Reservation, ParkingSpace


@dataclass
class Snapshot:
    """The four collections captured by a snapshot"""
    customers: List[Customer] = field(default_factory=list)
    tickets: List[ParkingTicket] = field(default_factory=list)
    reservations: List[Reservation] = field(default_factory=list)
    spaces: List[ParkingSpace] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.customers or self.tickets or self.reservations or self.spaces)


class SnapshotSink(ABC):
    """Consumer of full-state snapshots"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def save_snapshot(
        self,
        customers: Iterable[Customer],
        tickets: Iterable[ParkingTicket],
        reservations: Iterable[Reservation],
        spaces: Iterable[ParkingSpace]
    ) -> None:
        pass

    @abstractmethod
    def load_snapshot(self) -> Snapshot:
        pass


class NullSnapshotSink(SnapshotSink):
    """Sink used when snapshots are disabled"""

    def save_snapshot(self, customers, tickets, reservations, spaces) -> None:
        self.logger.debug("Snapshots disabled, nothing written")

    def load_snapshot(self) -> Snapshot:
        return Snapshot()


class JsonFileSnapshotSink(SnapshotSink):
    """Writes customers.json, tickets.json, reservations.json and parking_spaces.json"""

    CUSTOMERS_FILE = "customers.json"
    TICKETS_FILE = "tickets.json"
    RESERVATIONS_FILE = "reservations.json"
    SPACES_FILE = "parking_spaces.json"

    def __init__(self, directory: Union[str, Path] = "data"):
        super().__init__()
        self.directory = Path(directory)

    def save_snapshot(
        self,
        customers: Iterable[Customer],
        tickets: Iterable[ParkingTicket],
        reservations: Iterable[Reservation],
        spaces: Iterable[ParkingSpace]
    ) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

        collections = {
            self.CUSTOMERS_FILE: [c.to_dict() for c in customers],
            self.TICKETS_FILE: [t.to_dict() for t in tickets],
            self.RESERVATIONS_FILE: [r.to_dict() for r in reservations],
            self.SPACES_FILE: [s.to_dict() for s in spaces],
        }

        for filename, records in collections.items():
            self._write_atomic(self.directory / filename, records)

        self.logger.info(
            f"Snapshot saved to {self.directory}: "
            + ", ".join(f"{name} ({len(records)})" for name, records in collections.items())
        )

    def load_snapshot(self) -> Snapshot:
        """
        Read the four collections back
        Missing files load as empty collections; malformed files raise ValueError
        """
        snapshot = Snapshot(
            customers=[Customer.from_dict(d) for d in self._read(self.CUSTOMERS_FILE)],
            tickets=[ParkingTicket.from_dict(d) for d in self._read(self.TICKETS_FILE)],
            reservations=[Reservation.from_dict(d) for d in self._read(self.RESERVATIONS_FILE)],
            spaces=[ParkingSpace.from_dict(d) for d in self._read(self.SPACES_FILE)],
        )
        self.logger.debug(
            f"Snapshot loaded from {self.directory}: {len(snapshot.spaces)} spaces, "
            f"{len(snapshot.customers)} customers, {len(snapshot.tickets)} tickets"
        )
        return snapshot

    def _read(self, filename: str) -> List[Dict[str, Any]]:
        path = self.directory / filename
        if not path.exists():
            return []

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise ValueError(f"Snapshot file {path} does not contain a list")
        return data

    def _write_atomic(self, path: Path, records: List[Dict[str, Any]]) -> None:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
