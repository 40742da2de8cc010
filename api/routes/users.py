"""
api/routes/users.py -- Self-service endpoints for the signed-in user.

Routes:
  GET /api/user/profile    -- own account (no password hash)
  GET /api/user/shipments  -- shipments owned by the caller
  GET /api/user/vault      -- caller's vault-asset record, 404 if none
"""

from fastapi import APIRouter, Depends, Request

from api.models import ShipmentListResponse, ShipmentOut, UserOut, UserResponse, VaultResponse
from auth.dependencies import get_current_claims
from auth.models import Claims
from auth.store import UserStore
from core.errors import NotFoundError
from shipments.store import ShipmentStore

router = APIRouter()


@router.get("/user/profile", response_model=UserResponse)
def profile(request: Request, claims: Claims = Depends(get_current_claims)) -> UserResponse:
    """Return the caller's account.

    A token can outlive its account in another instance's store, so a
    missing user is a 404 rather than an assertion.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(claims.id)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse(data=UserOut.from_user(user))


@router.get("/user/shipments", response_model=ShipmentListResponse)
def my_shipments(request: Request, claims: Claims = Depends(get_current_claims)) -> ShipmentListResponse:
    shipment_store: ShipmentStore = request.app.state.shipment_store
    shipments = shipment_store.list_by_owner(claims.id)
    return ShipmentListResponse(data=[ShipmentOut.from_shipment(s) for s in shipments], count=len(shipments))


@router.get("/user/vault", response_model=VaultResponse)
def my_vault(request: Request, claims: Claims = Depends(get_current_claims)) -> VaultResponse:
    """Return the caller's vault-asset record."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(claims.id)
    if user is None or not user.vault_assets:
        raise NotFoundError("No vault assets found")
    return VaultResponse(data=user.vault_assets)
