"""
Access guard for the translation endpoints.

`authorize` is a pure predicate. `require_access` raises AccessDeniedError,
which the endpoints turn into a 403.
"""

from __future__ import annotations

import logging
from typing import Mapping

from autolocale.auth.principal import Principal
from autolocale.core.errors import AccessDeniedError
from autolocale.core.models import CollectionOptions

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def check_role(required: str, principal: Principal | None) -> bool:
    """Whether the principal holds `required` in either `role` or `roles`."""
    if principal is None:
        return False
    return required in principal.all_roles


def authorize(
    principal: Principal | None,
    collections: Mapping[str, CollectionOptions],
    collection_name: str | None,
) -> bool:
    """
    Decide whether a principal may trigger translation.

    Checks run in order and the first failure denies:
    1. the collection is configured (skipped when `collection_name` is None)
    2. the collection has not switched translation off
    3. there is a principal
    4. the principal is an admin
    """
    if collection_name is not None:
        options = collections.get(collection_name)
        if options is None:
            logger.debug(f"Denied: collection {collection_name} is not configured")
            return False
        if options.access.translate is False:
            logger.debug(f"Denied: translation disabled for {collection_name}")
            return False

    if principal is None:
        logger.debug("Denied: no principal")
        return False

    if not check_role(ADMIN_ROLE, principal):
        logger.debug(f"Denied: {principal.id} is not an admin")
        return False

    return True


def require_access(
    principal: Principal | None,
    collections: Mapping[str, CollectionOptions],
    collection_name: str | None,
) -> Principal:
    """Return the principal, or raise AccessDeniedError when `authorize` denies."""
    if not authorize(principal, collections, collection_name):
        target = collection_name or "text generation"
        raise AccessDeniedError(f"Access denied for {target}")
    return principal
