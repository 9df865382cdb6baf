"""
Authorization for the translation endpoints.

A bearer JWT is decoded into a Principal; `authorize()` decides.
"""

from autolocale.auth.access import ADMIN_ROLE, authorize, check_role, require_access
from autolocale.auth.principal import (
    Principal,
    TokenError,
    create_token,
    decode_principal,
    get_principal,
)

__all__ = [
    "ADMIN_ROLE",
    "authorize",
    "check_role",
    "require_access",
    "Principal",
    "TokenError",
    "create_token",
    "decode_principal",
    "get_principal",
]
