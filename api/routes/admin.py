"""
api/routes/admin.py -- Admin-only enumeration endpoints.

Routes:
  GET /api/admin/users      -- every account, password hashes omitted
  GET /api/admin/shipments  -- every shipment, full view

The router-level dependency applies require_admin to every route registered
here, so individual handlers don't each need to repeat it.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ShipmentListResponse, ShipmentOut, UserListResponse, UserOut
from auth.dependencies import require_admin
from auth.store import UserStore
from shipments.store import ShipmentStore

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/admin/users", response_model=UserListResponse)
def list_users(request: Request) -> UserListResponse:
    user_store: UserStore = request.app.state.user_store
    users = user_store.list_users()
    return UserListResponse(data=[UserOut.from_user(u) for u in users], count=len(users))


@router.get("/admin/shipments", response_model=ShipmentListResponse)
def list_all_shipments(request: Request) -> ShipmentListResponse:
    shipment_store: ShipmentStore = request.app.state.shipment_store
    shipments = shipment_store.list_shipments()
    return ShipmentListResponse(data=[ShipmentOut.from_shipment(s) for s in shipments], count=len(shipments))
