"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in shipments/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"

# bcrypt only looks at the first 72 bytes of a password and current releases
# refuse anything longer.
MAX_PASSWORD_BYTES = 72


@dataclass
class User:
    """A registered account.

    email is the lookup key and is stored lower-cased so lookups are
    case-insensitive without relying on database collation.

    hashed_password never leaves the API boundary: response models in
    api/models.py have no field for it.

    vault_assets is a free-form nested record (gold, diamonds, deposit date,
    ...) present only for vault-storage customers. Empty dict = none.
    """

    email: str
    hashed_password: str
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    phone: str = ""
    role: str = ROLE_CUSTOMER  # "customer" | "admin"
    verified: bool = False
    id: int | None = None
    created_at: str = ""  # ISO 8601, set by store on insert
    vault_assets: dict = field(default_factory=dict)


@dataclass
class Claims:
    """Decoded payload of a verified session token.

    Carries identity as it was at issue time. Claims are not re-checked against
    the user store, so a role change takes effect only when the token expires.
    """

    id: int
    email: str
    role: str
    issued_at: int  # epoch seconds
    expires_at: int  # epoch seconds
