"""
auth/tokens.py -- JWT issuance/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       exactly id, email, role plus iat/exp. Verification returns None on any
       failure -- the dependency layer decides between 401 and 403.

  Session length: TOKEN_EXPIRE_SECONDS (24h) by default, or
       REMEMBER_ME_EXPIRE_SECONDS (30 days) when the login asks to be
       remembered. There is no revocation list: a token stays valid until its
       exp, even if the user's role changes in the meantime.

  Passwords: bcrypt with a fixed cost factor (BCRYPT_ROUNDS, default 10).
       The _DUMMY_HASH constant enables timing equalization in
       authenticate_user() so response time does not reveal whether an
       email is registered.

  SECRET_KEY: sourced from core.config.get_settings(), read once at import and
       never rotated for the lifetime of the process.

Layer rule: no imports from api/ or shipments/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import MAX_PASSWORD_BYTES, Claims
from core.config import get_settings
from core.errors import ValidationError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("parceltrack.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt rejects passwords longer than 72 bytes (UTF-8), so they raise
    ValidationError here. SignupRequest enforces the same limit, which turns
    an over-long password into a 400 before it reaches this function.
    """
    if len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A password over the bcrypt byte limit can never have been stored, so it
    never matches.
    """
    if len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the store (e.g. a hand-edited seed file).
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("parceltrack_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    expire_seconds: int = 0,
    now: datetime | None = None,
) -> str:
    """Encode a signed JWT with user identity and expiry.

    Args:
        user_id:        Numeric user ID.
        email:          Account email (lower-cased by the store).
        role:           "customer" or "admin".
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds. Login passes
                        Settings.remember_me_expire_seconds for "remember me".
        now:            Issue instant. Defaults to the current UTC time;
                        tests pass a past instant to produce expired tokens.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    issued = int((now or datetime.now(timezone.utc)).timestamp())
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "iat": issued,
        "exp": issued + duration,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> Claims | None:
    """Decode and verify a JWT. Returns Claims or None on any failure.

    python-jose checks the signature and the exp claim; a missing identity
    claim is treated the same as a bad signature.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not all(k in payload for k in ("id", "email", "role", "exp")):
        return None
    return Claims(
        id=payload["id"],
        email=payload["email"],
        role=payload["role"],
        issued_at=payload.get("iat", 0),
        expires_at=payload["exp"],
    )


def token_lifetime(remember_me: bool) -> int:
    """Return the session length in seconds for a login request."""
    if remember_me:
        return _settings.remember_me_expire_seconds
    return _settings.token_expire_seconds


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
