"""
api/seed.py -- Demo dataset loader.

One dataset shape serves every deployment; what differs between deployments
is configuration:

  SEED_FILE=/path/data.json  -- load an operator-supplied dataset
  SEED_DEMO_DATA=true        -- load DEMO_DATA below
  neither                    -- start empty

Dataset shape (JSON or Python dict):
  {
    "users": [{"email", "password", "firstName", "lastName", "company",
               "phone", "role", "verified", "createdAt", "vaultAssets"}],
    "shipments": [{"trackingNumber", "origin", "destination", "status",
                   "currentLocation", "estimatedDelivery", "actualDelivery",
                   "weight", "dimensions", "service", "ownerEmail",
                   "details", "history": [{"timestamp", "location",
                   "status", "description"}]}]
  }

Passwords are plaintext in the dataset and hashed here, unless a record
carries a precomputed "passwordHash" (see `python main.py hash-password`).
Shipments name their owner by email rather than numeric id so a dataset does
not depend on insertion order.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from core.config import Settings
from shipments.models import HistoryEntry, Shipment
from shipments.store import ShipmentStore

logger = logging.getLogger("parceltrack.seed")

DEMO_DATA: dict[str, Any] = {
    "users": [
        {
            "email": "demo@parceltrack.example",
            "password": "demo123",
            "firstName": "Demo",
            "lastName": "Customer",
            "company": "Demo Imports Ltd",
            "phone": "+1 (800) 555-0100",
            "role": "customer",
            "verified": True,
            "createdAt": "2025-01-01T00:00:00+00:00",
            "vaultAssets": {
                "gold": {"amount": "110 kilograms", "type": "Certified 24K Gold", "purity": "99.99%"},
                "diamonds": {"amount": "60 carats", "grade": "D-Color, VVS", "quality": "Excellent-quality cut"},
                "depositDate": "2001-08-17",
                "location": "Geneva, Switzerland",
            },
        },
        {
            "email": "admin@parceltrack.example",
            "password": "admin123",
            "firstName": "Admin",
            "lastName": "User",
            "company": "ParcelTrack",
            "phone": "+1 (800) 555-0199",
            "role": "admin",
            "verified": True,
            "createdAt": "2025-01-01T00:00:00+00:00",
        },
    ],
    "shipments": [
        {
            "trackingNumber": "FF123456789",
            "status": "In Transit",
            "origin": "New York, NY",
            "destination": "Los Angeles, CA",
            "currentLocation": "Chicago, IL",
            "estimatedDelivery": "2025-01-15",
            "weight": "2.5 kg",
            "dimensions": "30x20x10 cm",
            "service": "Express Delivery",
            "ownerEmail": "demo@parceltrack.example",
            "history": [
                {
                    "timestamp": "2025-01-10 08:00",
                    "location": "New York, NY",
                    "status": "Package picked up",
                    "description": "Package collected from origin",
                },
                {
                    "timestamp": "2025-01-11 14:30",
                    "location": "Philadelphia, PA",
                    "status": "In transit",
                    "description": "Package in transit",
                },
                {
                    "timestamp": "2025-01-12 09:15",
                    "location": "Chicago, IL",
                    "status": "Package at sorting facility",
                    "description": "Package arrived at sorting facility",
                },
            ],
        },
        {
            "trackingNumber": "FF987654321",
            "status": "Delivered",
            "origin": "Miami, FL",
            "destination": "Atlanta, GA",
            "currentLocation": "Atlanta, GA",
            "estimatedDelivery": "2025-01-08",
            "actualDelivery": "2025-01-08",
            "weight": "1.2 kg",
            "dimensions": "25x15x8 cm",
            "service": "Standard Delivery",
            "history": [
                {
                    "timestamp": "2025-01-05 10:00",
                    "location": "Miami, FL",
                    "status": "Package picked up",
                    "description": "Package collected from origin",
                },
                {
                    "timestamp": "2025-01-06 16:45",
                    "location": "Orlando, FL",
                    "status": "In transit",
                    "description": "Package in transit",
                },
                {
                    "timestamp": "2025-01-08 11:30",
                    "location": "Atlanta, GA",
                    "status": "Delivered",
                    "description": "Package delivered to recipient",
                },
            ],
        },
        {
            "trackingNumber": "FS2001ASSETS",
            "status": "Secured in Vault",
            "origin": "Geneva, Switzerland",
            "destination": "Secure Vault Storage",
            "currentLocation": "Geneva Vault Facility",
            "estimatedDelivery": "Permanent Storage",
            "weight": "110kg Gold + 60ct Diamonds",
            "service": "Vault Security Storage",
            "ownerEmail": "demo@parceltrack.example",
            "details": {
                "assetType": "precious_metals_diamonds",
                "depositDate": "2001-08-17",
                "assets": {"gold": "110 kilograms certified 24K", "diamonds": "60 carats D-Color VVS"},
            },
            "history": [
                {
                    "timestamp": "2001-08-17 10:00",
                    "location": "Geneva, Switzerland",
                    "status": "Assets deposited",
                    "description": "Precious metals and diamonds secured in vault",
                },
                {
                    "timestamp": "2001-08-17 15:30",
                    "location": "Geneva Vault Facility",
                    "status": "Vault secured",
                    "description": "All assets verified and placed in maximum security vault",
                },
            ],
        },
        {
            "trackingNumber": "LZ2025003",
            "status": "Processing",
            "origin": "Dubai, UAE",
            "destination": "Cape Town, South Africa",
            "currentLocation": "Dubai, UAE",
            "estimatedDelivery": "2025-10-16",
            "weight": "78.5 kg",
            "service": "Freight Service",
            "ownerEmail": "admin@parceltrack.example",
            "history": [
                {
                    "timestamp": "2025-10-16 07:30",
                    "location": "Dubai, UAE",
                    "status": "Order received",
                    "description": "Shipment order created and processing",
                },
            ],
        },
    ],
}


def load_dataset(settings: Settings) -> dict[str, Any] | None:
    """Return the dataset selected by configuration, or None to start empty."""
    if settings.seed_file:
        path = Path(settings.seed_file)
        logger.info("Loading seed data from %s", path)
        return json.loads(path.read_text(encoding="utf-8"))
    if settings.seed_demo_data:
        return DEMO_DATA
    return None


def seed_stores(user_store: UserStore, shipment_store: ShipmentStore, data: dict[str, Any]) -> tuple[int, int]:
    """Insert a dataset into empty stores. Returns (users, shipments) created.

    Raises ConflictError if a record already exists, and ValueError if a
    shipment names an owner email that is not in the dataset.
    """
    ids_by_email: dict[str, int] = {}
    for raw in data.get("users", []):
        user = User(
            email=raw["email"],
            hashed_password=raw.get("passwordHash") or hash_password(raw["password"]),
            first_name=raw.get("firstName", ""),
            last_name=raw.get("lastName", ""),
            company=raw.get("company", ""),
            phone=raw.get("phone", ""),
            role=raw.get("role", "customer"),
            verified=bool(raw.get("verified", False)),
            created_at=raw.get("createdAt", ""),
            vault_assets=raw.get("vaultAssets") or {},
        )
        ids_by_email[user.email.lower()] = user_store.create_user(user)

    shipments = data.get("shipments", [])
    for raw in shipments:
        owner_email = raw.get("ownerEmail")
        owner_id = None
        if owner_email:
            if owner_email.lower() not in ids_by_email:
                raise ValueError(f"Seed shipment {raw.get('trackingNumber')} names unknown owner {owner_email}")
            owner_id = ids_by_email[owner_email.lower()]
        shipment = Shipment(
            tracking_number=raw.get("trackingNumber", ""),
            origin=raw["origin"],
            destination=raw["destination"],
            status=raw.get("status", "Processing"),
            current_location=raw.get("currentLocation", ""),
            estimated_delivery=raw.get("estimatedDelivery"),
            actual_delivery=raw.get("actualDelivery"),
            weight=raw.get("weight"),
            dimensions=raw.get("dimensions"),
            service=raw.get("service", "Standard Shipping"),
            details=raw.get("details") or {},
            history=[
                HistoryEntry(
                    timestamp=h["timestamp"],
                    location=h.get("location", ""),
                    status=h["status"],
                    description=h.get("description", ""),
                )
                for h in raw.get("history", [])
            ],
        )
        shipment_store.create_shipment(shipment, owner_id=owner_id)

    logger.info("Seeded %d users and %d shipments", len(ids_by_email), len(shipments))
    return len(ids_by_email), len(shipments)
