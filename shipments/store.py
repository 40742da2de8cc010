"""
shipments/store.py -- SQLAlchemy-backed persistence layer for shipments.

Uses SQLAlchemy Core (not ORM) so the dataclasses in shipments/models.py
remain the authoritative domain representation. Swapping the default
in-memory SQLite for a file or PostgreSQL database is a URL change.

Pattern: Repository + Data Mapper. ShipmentStore is the repository; the
_row_to_* functions are the mappers. Route handlers never touch SQL directly.

Status model:
  status is free text and no transition is ever rejected -- a "Delivered"
  shipment can move back to "In Transit". The only structural guarantee is
  that append_status() writes exactly one shipment_events row per call, in the
  same transaction that updates the shipment's status. shipment_events rows
  are never updated or deleted, so they form the audit trail.

Tracking numbers:
  prefix + millisecond timestamp, bumped by one when two shipments are
  created within the same millisecond. Unique within one process only. A
  clash with an existing record (another process, a seeded number) is
  reported as ConflictError, never an overwrite.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ShipmentStore()
    shipment = store.create_shipment(Shipment(origin="Miami, FL", destination="Atlanta, GA"), owner_id=1)
    store.append_status(shipment.tracking_number, "In Transit", location="Orlando, FL")
    store.close()
"""

import json
import logging
import threading
import time
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.database import make_engine
from core.errors import ConflictError, NotFoundError
from shipments.models import HistoryEntry, Shipment

logger = logging.getLogger("parceltrack.shipments")

_DEFAULT_DELIVERY_DAYS = 5

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_shipments = Table(
    "shipments",
    metadata,
    Column("tracking_number", String(64), primary_key=True),
    Column("origin", String(255), nullable=False),
    Column("destination", String(255), nullable=False),
    Column("status", String(100), nullable=False),
    Column("current_location", String(255), nullable=False, server_default=""),
    Column("estimated_delivery", String(32)),
    Column("actual_delivery", String(32)),
    Column("weight", String(100)),
    Column("dimensions", String(100)),
    Column("service", String(100), nullable=False),
    Column("user_id", Integer),  # NULL for legacy records with no owner
    Column("details", Text),  # JSON object
    Column("created_at", String(32), nullable=False),
)

_events = Table(
    "shipment_events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("tracking_number", String(64), nullable=False, index=True),
    Column("timestamp", String(32), nullable=False),
    Column("location", String(255), nullable=False, server_default=""),
    Column("status", String(100), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
)

_CREATION_ORDER = (_shipments.c.created_at, _shipments.c.tracking_number)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _now_stamp() -> str:
    """History timestamps use minute precision: 'YYYY-MM-DD HH:MM' (UTC)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M")


def default_estimated_delivery(today: Optional[date] = None) -> str:
    return ((today or date.today()) + timedelta(days=_DEFAULT_DELIVERY_DAYS)).isoformat()


def default_status_description(status: str) -> str:
    return f"Status updated to {status}"


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ShipmentStore:
    def __init__(self, db_url: str = "sqlite://", tracking_prefix: str = "FF") -> None:
        self.engine: Engine = make_engine(db_url)
        self.tracking_prefix = tracking_prefix
        self._last_stamp = 0
        self._stamp_lock = threading.Lock()
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Tracking numbers
    # ------------------------------------------------------------------

    def next_tracking_number(self) -> str:
        """Return prefix + a millisecond timestamp that never repeats in this process."""
        with self._stamp_lock:
            stamp = max(int(time.time() * 1000), self._last_stamp + 1)
            self._last_stamp = stamp
        return f"{self.tracking_prefix}{stamp}"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_shipments)).scalar()
        return result or 0

    def get_by_tracking_number(self, code: str) -> Optional[Shipment]:
        """Fetch a shipment and its full history. Matching ignores case."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _shipments.select().where(func.lower(_shipments.c.tracking_number) == code.strip().lower())
            ).fetchone()
            if row is None:
                return None
            return self._load(conn, row)

    def list_shipments(self) -> list[Shipment]:
        """Return every shipment in creation order."""
        with self.engine.connect() as conn:
            rows = conn.execute(_shipments.select().order_by(*_CREATION_ORDER)).fetchall()
            return [self._load(conn, r) for r in rows]

    def list_by_owner(self, user_id: int) -> list[Shipment]:
        """Return the shipments owned by user_id in creation order."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _shipments.select().where(_shipments.c.user_id == user_id).order_by(*_CREATION_ORDER)
            ).fetchall()
            return [self._load(conn, r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_shipment(self, shipment: Shipment, owner_id: Optional[int] = None) -> Shipment:
        """Insert a shipment and return the stored record.

        owner_id, when given, overrides shipment.user_id. A tracking number is
        generated when the shipment has none. Records arriving without history
        get an initial "Order received" entry at the origin; records with
        history (seed data, imports) keep theirs unchanged.

        Raises ConflictError if the tracking number is already taken.
        """
        tracking_number = shipment.tracking_number or self.next_tracking_number()
        if self.get_by_tracking_number(tracking_number) is not None:
            raise ConflictError(f"Tracking number {tracking_number} already exists")

        user_id = owner_id if owner_id is not None else shipment.user_id
        history = shipment.history or [
            HistoryEntry(
                timestamp=_now_stamp(),
                location=shipment.origin,
                status="Order received",
                description="Shipment order created and processing",
            )
        ]
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _shipments.insert().values(
                        tracking_number=tracking_number,
                        origin=shipment.origin,
                        destination=shipment.destination,
                        status=shipment.status,
                        current_location=shipment.current_location or shipment.origin,
                        estimated_delivery=shipment.estimated_delivery,
                        actual_delivery=shipment.actual_delivery,
                        weight=shipment.weight,
                        dimensions=shipment.dimensions,
                        service=shipment.service,
                        user_id=user_id,
                        details=json.dumps(shipment.details) if shipment.details else None,
                        created_at=shipment.created_at or _now_iso(),
                    )
                )
                conn.execute(
                    _events.insert(),
                    [
                        {
                            "tracking_number": tracking_number,
                            "timestamp": h.timestamp,
                            "location": h.location,
                            "status": h.status,
                            "description": h.description,
                        }
                        for h in history
                    ],
                )
                conn.commit()
        except IntegrityError as exc:
            raise ConflictError(f"Tracking number {tracking_number} already exists") from exc

        logger.info("Shipment %s created (owner=%s)", tracking_number, user_id)
        return self.get_by_tracking_number(tracking_number)

    def append_status(
        self,
        code: str,
        status: str,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Shipment:
        """Set a new status and append exactly one history entry.

        location, when given, becomes the shipment's current location;
        otherwise the current location is carried forward into the entry.
        description defaults to "Status updated to {status}".

        Raises NotFoundError for an unknown tracking number.
        """
        with self.engine.connect() as conn:
            row = conn.execute(
                _shipments.select().where(func.lower(_shipments.c.tracking_number) == code.strip().lower())
            ).fetchone()
            if row is None:
                raise NotFoundError("Shipment not found")
            new_location = location or row.current_location
            conn.execute(
                _shipments.update()
                .where(_shipments.c.tracking_number == row.tracking_number)
                .values(status=status, current_location=new_location)
            )
            conn.execute(
                _events.insert().values(
                    tracking_number=row.tracking_number,
                    timestamp=_now_stamp(),
                    location=new_location,
                    status=status,
                    description=description or default_status_description(status),
                )
            )
            conn.commit()

        logger.info("Shipment %s status -> %r at %r", row.tracking_number, status, new_location)
        return self.get_by_tracking_number(row.tracking_number)

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self, conn, row) -> Shipment:
        events = conn.execute(
            _events.select().where(_events.c.tracking_number == row.tracking_number).order_by(_events.c.id)
        ).fetchall()
        shipment = _row_to_shipment(row)
        shipment.history = [_row_to_entry(e) for e in events]
        return shipment


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_shipment(row) -> Shipment:
    return Shipment(
        tracking_number=row.tracking_number,
        origin=row.origin,
        destination=row.destination,
        status=row.status,
        current_location=row.current_location,
        estimated_delivery=row.estimated_delivery,
        actual_delivery=row.actual_delivery,
        weight=row.weight,
        dimensions=row.dimensions,
        service=row.service,
        user_id=row.user_id,
        details=json.loads(row.details) if row.details else {},
        created_at=row.created_at,
    )


def _row_to_entry(row) -> HistoryEntry:
    return HistoryEntry(
        timestamp=row.timestamp,
        location=row.location,
        status=row.status,
        description=row.description,
    )
