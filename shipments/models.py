"""
shipments/models.py -- Domain dataclasses for tracked shipments.

These are pure data containers with zero logic. Tracking-number generation
and status updates live in shipments/store.py.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class HistoryEntry:
    """One appended record of a status/location change.

    Entries are only ever inserted. Their order is insertion order, which is
    not necessarily timestamp order for seeded or imported records.
    """

    timestamp: str  # "YYYY-MM-DD HH:MM"
    location: str
    status: str
    description: str = ""


@dataclass
class Shipment:
    """A tracked parcel or stored asset.

    status is a free-text label, not an enum: freight, parcel and vault
    storage shipments each use their own vocabulary ("In Transit",
    "Secured in Vault", ...).

    user_id is the owning account. None marks a legacy record with no owner;
    only admins may update those.

    details holds extra free-form fields some shipment types carry (asset
    type, deposit date, asset breakdown).

    tracking_number is "" before the store assigns one.
    """

    origin: str
    destination: str
    tracking_number: str = ""
    status: str = "Processing"
    current_location: str = ""
    estimated_delivery: Optional[str] = None
    actual_delivery: Optional[str] = None
    weight: Optional[str] = None
    dimensions: Optional[str] = None
    service: str = "Standard Shipping"
    user_id: Optional[int] = None
    details: dict = field(default_factory=dict)
    created_at: str = ""  # ISO 8601, set by store on insert
    history: list[HistoryEntry] = field(default_factory=list)
