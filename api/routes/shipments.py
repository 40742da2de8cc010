"""
api/routes/shipments.py -- Shipment management and public tracking routes.

Routes:
  GET /api/track/{tracking_number}                 -- public; full view for the owner
  GET /api/shipments                               -- admin: all, customer: own
  POST /api/shipments                              -- create; caller becomes owner
  PUT /api/shipments/{tracking_number}/status      -- owner or admin; appends history

Status updates are deliberately permissive: any status string is accepted at
any time, including after "Delivered". What is guaranteed is one new history
entry per successful call (see ShipmentStore.append_status).

Order of checks on PUT: 404 for an unknown tracking number first, then the
ownership check. The history is untouched when either check fails.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.models import (
    PublicShipmentOut,
    ShipmentCreate,
    ShipmentListResponse,
    ShipmentOut,
    ShipmentResponse,
    StatusUpdate,
    TrackResponse,
)
from auth.dependencies import ensure_owner_or_admin, get_current_claims, is_owner, try_get_current_claims
from auth.models import ROLE_ADMIN, Claims
from auth.store import UserStore
from core.errors import NotFoundError
from shipments.models import Shipment
from shipments.store import ShipmentStore, default_estimated_delivery

logger = logging.getLogger("parceltrack.api")

router = APIRouter()


# ---------------------------------------------------------------------------
# GET /track/{tracking_number} -- public lookup
# ---------------------------------------------------------------------------


@router.get("/track/{tracking_number}", response_model=TrackResponse)
def track(
    request: Request,
    tracking_number: str,
    claims: Optional[Claims] = Depends(try_get_current_claims),
) -> TrackResponse:
    """Look up a shipment by tracking number (case-insensitive).

    Anonymous callers and non-owners get the reduced public view. The owner,
    identified by a valid token, gets the full record. Admins see the public
    view here; their full view is /api/admin/shipments.
    """
    shipment_store: ShipmentStore = request.app.state.shipment_store
    shipment = shipment_store.get_by_tracking_number(tracking_number)
    if shipment is None:
        raise NotFoundError("Tracking number not found. Please check your tracking number and try again.")

    if is_owner(claims, shipment.user_id):
        view = ShipmentOut.from_shipment(shipment)
    else:
        view = PublicShipmentOut.from_shipment(shipment)
    return TrackResponse(data=view.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# GET /shipments -- role-scoped list
# ---------------------------------------------------------------------------


@router.get("/shipments", response_model=ShipmentListResponse)
def list_shipments(request: Request, claims: Claims = Depends(get_current_claims)) -> ShipmentListResponse:
    shipment_store: ShipmentStore = request.app.state.shipment_store
    if claims.role == ROLE_ADMIN:
        shipments = shipment_store.list_shipments()
    else:
        shipments = shipment_store.list_by_owner(claims.id)
    return ShipmentListResponse(data=[ShipmentOut.from_shipment(s) for s in shipments], count=len(shipments))


# ---------------------------------------------------------------------------
# POST /shipments -- create
# ---------------------------------------------------------------------------


@router.post("/shipments", response_model=ShipmentResponse, status_code=201)
def create_shipment(
    request: Request,
    body: ShipmentCreate,
    claims: Claims = Depends(get_current_claims),
) -> ShipmentResponse:
    """Create a shipment in "Processing" state owned by the caller.

    Admins may pass userId to create on behalf of an existing account. The
    estimated delivery defaults to five days from today.
    """
    shipment_store: ShipmentStore = request.app.state.shipment_store
    owner_id = claims.id
    if claims.role == ROLE_ADMIN and body.user_id is not None:
        user_store: UserStore = request.app.state.user_store
        if user_store.get_by_id(body.user_id) is None:
            raise NotFoundError("User not found")
        owner_id = body.user_id

    shipment = Shipment(
        origin=body.origin,
        destination=body.destination,
        status="Processing",
        current_location=body.origin,
        estimated_delivery=body.estimated_delivery or default_estimated_delivery(),
        weight=body.weight,
        dimensions=body.dimensions,
        service=body.service,
    )
    created = shipment_store.create_shipment(shipment, owner_id=owner_id)
    return ShipmentResponse(message="Shipment created successfully", data=ShipmentOut.from_shipment(created))


# ---------------------------------------------------------------------------
# PUT /shipments/{tracking_number}/status -- append a history entry
# ---------------------------------------------------------------------------


@router.put("/shipments/{tracking_number}/status", response_model=ShipmentResponse)
def update_status(
    request: Request,
    tracking_number: str,
    body: StatusUpdate,
    claims: Claims = Depends(get_current_claims),
) -> ShipmentResponse:
    """Set a new status (and optionally location) on a shipment.

    Owner or admin only. No transition table: the new status may be any
    string regardless of the current one.
    """
    shipment_store: ShipmentStore = request.app.state.shipment_store
    shipment = shipment_store.get_by_tracking_number(tracking_number)
    if shipment is None:
        raise NotFoundError("Shipment not found")
    ensure_owner_or_admin(claims, shipment.user_id)

    updated = shipment_store.append_status(
        shipment.tracking_number,
        body.status,
        location=body.location,
        description=body.description,
    )
    logger.info("User %d updated %s to %r", claims.id, updated.tracking_number, updated.status)
    return ShipmentResponse(message="Shipment status updated", data=ShipmentOut.from_shipment(updated))
