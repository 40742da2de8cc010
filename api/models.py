"""
API request and response models for ParcelTrack REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
shipments/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format is camelCase (firstName, trackingNumber, ...). Models are
declared in snake_case and aliased with pydantic's to_camel generator;
populate_by_name lets handlers build them with Python names.

No response model has a password field, so a password hash cannot leak
through a response even if a handler passes a full User.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import MAX_PASSWORD_BYTES, Claims, User
from shipments.models import HistoryEntry, Shipment

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

API_VERSION = "2.0.0"
SERVER_NAME = "ParcelTrack API"

AVAILABLE_ENDPOINTS = [
    "POST /api/auth/login",
    "POST /api/auth/signup",
    "POST /api/auth/forgot-password",
    "GET /api/auth/verify",
    "GET /api/user/profile",
    "GET /api/user/shipments",
    "GET /api/user/vault",
    "GET /api/track/:trackingNumber",
    "GET /api/shipments",
    "POST /api/shipments",
    "PUT /api/shipments/:trackingNumber/status",
    "GET /api/admin/users",
    "GET /api/admin/shipments",
    "GET /api/health",
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

# Passwords are never whitespace-stripped: "secret " and "secret" are
# different passwords.


class LoginRequest(_CamelModel):
    """Request body for POST /api/auth/login."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    remember_me: bool = False


class SignupRequest(_CamelModel):
    """Request body for POST /api/auth/signup.

    There is no role field: every signup creates a customer.
    """

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    company: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=50)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class ForgotPasswordRequest(_CamelModel):
    email: str = Field(min_length=1, max_length=255)


class ShipmentCreate(_CamelModel):
    """Request body for POST /api/shipments.

    user_id is honoured for admins only (create on behalf of a customer);
    for everyone else the caller becomes the owner.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    origin: str = Field(min_length=1, max_length=255)
    destination: str = Field(min_length=1, max_length=255)
    weight: str = Field(min_length=1, max_length=100)
    service: str = Field(default="Standard Shipping", min_length=1, max_length=100)
    dimensions: Optional[str] = Field(default=None, max_length=100)
    estimated_delivery: Optional[str] = Field(default=None, max_length=32)
    user_id: Optional[int] = None


class StatusUpdate(_CamelModel):
    """Request body for PUT /api/shipments/{trackingNumber}/status.

    status is free text. location is also accepted as currentLocation.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(min_length=1, max_length=100)
    location: Optional[str] = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("location", "currentLocation"),
    )
    description: Optional[str] = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response models -- users and tokens
# ---------------------------------------------------------------------------


class UserOut(_CamelModel):
    """Public view of a User. Built only through from_user()."""

    id: int
    email: str
    first_name: str
    last_name: str
    company: str
    phone: str
    role: str
    verified: bool
    created_at: str
    vault_assets: Optional[dict[str, Any]] = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            company=user.company,
            phone=user.phone,
            role=user.role,
            verified=user.verified,
            created_at=user.created_at,
            vault_assets=user.vault_assets or None,
        )


class ClaimsOut(_CamelModel):
    """Decoded token payload as returned by GET /api/auth/verify."""

    id: int
    email: str
    role: str
    iat: int
    exp: int

    @classmethod
    def from_claims(cls, claims: Claims) -> "ClaimsOut":
        return cls(id=claims.id, email=claims.email, role=claims.role, iat=claims.issued_at, exp=claims.expires_at)


class AuthResponse(_CamelModel):
    """Response for login and signup."""

    success: bool = True
    message: str
    token: str
    user: UserOut


class MessageResponse(_CamelModel):
    success: bool = True
    message: str


class VerifyResponse(_CamelModel):
    success: bool = True
    message: str = "Token is valid"
    user: ClaimsOut


class UserResponse(_CamelModel):
    success: bool = True
    data: UserOut


class UserListResponse(_CamelModel):
    success: bool = True
    data: list[UserOut]
    count: int


class VaultResponse(_CamelModel):
    success: bool = True
    data: dict[str, Any]


# ---------------------------------------------------------------------------
# Response models -- shipments
# ---------------------------------------------------------------------------


class HistoryEntryOut(_CamelModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    location: str
    status: str
    description: str

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryEntryOut":
        return cls(
            timestamp=entry.timestamp,
            location=entry.location,
            status=entry.status,
            description=entry.description,
        )


class PublicShipmentOut(_CamelModel):
    """Reduced view returned by public tracking lookups.

    Leaves out the owner, weight, dimensions and free-form details.
    """

    tracking_number: str
    status: str
    origin: str
    destination: str
    current_location: str
    estimated_delivery: Optional[str]
    actual_delivery: Optional[str]
    service: str
    history: list[HistoryEntryOut]

    @classmethod
    def from_shipment(cls, shipment: Shipment) -> "PublicShipmentOut":
        return cls(
            tracking_number=shipment.tracking_number,
            status=shipment.status,
            origin=shipment.origin,
            destination=shipment.destination,
            current_location=shipment.current_location,
            estimated_delivery=shipment.estimated_delivery,
            actual_delivery=shipment.actual_delivery,
            service=shipment.service,
            history=[HistoryEntryOut.from_entry(h) for h in shipment.history],
        )


class ShipmentOut(PublicShipmentOut):
    """Full shipment record, shown to the owner and to admins."""

    weight: Optional[str]
    dimensions: Optional[str]
    user_id: Optional[int]
    details: dict[str, Any]
    created_at: str

    @classmethod
    def from_shipment(cls, shipment: Shipment) -> "ShipmentOut":
        public = PublicShipmentOut.from_shipment(shipment)
        return cls(
            **public.model_dump(),
            weight=shipment.weight,
            dimensions=shipment.dimensions,
            user_id=shipment.user_id,
            details=shipment.details,
            created_at=shipment.created_at,
        )


class ShipmentResponse(_CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: ShipmentOut


class ShipmentListResponse(_CamelModel):
    success: bool = True
    data: list[ShipmentOut]
    count: int


class TrackResponse(_CamelModel):
    """Response for GET /api/track/{trackingNumber}.

    data is either the PublicShipmentOut or the ShipmentOut shape, already
    serialized by the route; a model union here would let validation pick
    the wrong shape for a public view.
    """

    success: bool = True
    data: dict[str, Any]


# ---------------------------------------------------------------------------
# Response models -- service
# ---------------------------------------------------------------------------


class ErrorResponse(_CamelModel):
    """Uniform error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    message: str
    code: str


class RouteNotFoundResponse(_CamelModel):
    """Envelope for requests that match no route."""

    success: bool = False
    message: str = "API endpoint not found"
    available_endpoints: list[str] = Field(default_factory=lambda: list(AVAILABLE_ENDPOINTS))


class HealthResponse(_CamelModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    status: str = "OK"
    timestamp: str
    server: str = SERVER_NAME
    version: str = API_VERSION


class ApiInfoResponse(_CamelModel):
    """Response for GET /api -- a map of the endpoint groups."""

    message: str = SERVER_NAME
    version: str = API_VERSION
    status: str = "operational"
    endpoints: dict[str, str]
