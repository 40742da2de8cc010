"""
api/routes/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/auth/login            -- email/password login; returns JWT
  POST /api/auth/signup           -- create a customer account; returns JWT
  POST /api/auth/forgot-password  -- stubbed reset request (no email sent)
  GET  /api/auth/verify           -- decoded claims of the presented token

Security:
  authenticate_user() provides timing equalization -- use it, never inline.
  Login and forgot-password answer identically for known and unknown emails,
  so neither can be used to enumerate accounts.
  Cache-Control: no-store on responses that carry a token.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import (
    AuthResponse,
    ClaimsOut,
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    UserOut,
    VerifyResponse,
)
from auth.dependencies import get_current_claims
from auth.models import ROLE_CUSTOMER, Claims, User
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token, hash_password, token_lifetime

logger = logging.getLogger("parceltrack.api")

# Auth policy:
# - POST /api/auth/login:            public
# - POST /api/auth/signup:           public
# - POST /api/auth/forgot-password:  public
# - GET  /api/auth/verify:           requires a valid token (get_current_claims)
router = APIRouter()

_RESET_ACK = "If an account with that email exists, a password reset link has been sent."


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a signed token.

    rememberMe extends the session from 24 hours to 30 days. Wrong email and
    wrong password produce the same 401.
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(message="Invalid email or password", code="bad_credentials").model_dump(by_alias=True),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = create_access_token(user.id, user.email, user.role, expire_seconds=token_lifetime(body.remember_me))
    resp = JSONResponse(
        status_code=200,
        content=AuthResponse(
            message="Login successful",
            token=token,
            user=UserOut.from_user(user),
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


# Sync def: bcrypt hashing runs on the threadpool, not the event loop.
@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Create a customer account.

    The role is always "customer" and the account starts unverified. A
    duplicate email (compared case-insensitively) is rejected with 409 by the
    store.
    """
    user_store: UserStore = request.app.state.user_store
    new_user = User(
        email=body.email,
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        company=body.company,
        phone=body.phone,
        role=ROLE_CUSTOMER,
        verified=False,
    )
    user_id = user_store.create_user(new_user)
    created = user_store.get_by_id(user_id)
    logger.info("New account created (user_id=%d)", user_id)

    token = create_access_token(created.id, created.email, created.role)
    resp = JSONResponse(
        status_code=201,
        content=AuthResponse(
            message="Account created successfully",
            token=token,
            user=UserOut.from_user(created),
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/forgot-password", response_model=MessageResponse)
async def forgot_password(request: Request, body: ForgotPasswordRequest) -> MessageResponse:
    """Acknowledge a password-reset request.

    Email delivery is not implemented. The response is the same whether or
    not the address is registered.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_email(body.email)
    if user is not None:
        # TODO: issue a single-use reset token and hand it to a mail sender.
        logger.info("Password reset requested (user_id=%d)", user.id)
    return MessageResponse(message=_RESET_ACK)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/verify", response_model=VerifyResponse)
async def verify(claims: Claims = Depends(get_current_claims)) -> VerifyResponse:
    """Return the decoded claims of a valid token."""
    return VerifyResponse(user=ClaimsOut.from_claims(claims))
