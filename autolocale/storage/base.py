"""
Storage abstraction layer.

The translator never touches records directly; every read and write goes
through this interface. Implementations adapt it to the host CMS.

Each document id has one record per locale. Writes receive a
`WriteContext`; implementations pass it on to change hooks so a
translation write can be told apart from a user edit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from autolocale.core.models import WriteContext


class DocumentStore(ABC):
    """
    Localized document storage.

    Host implementation: the CMS local API
    Local implementation: in-memory dicts
    """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        id: str,
        locale: str,
        fallback_locale: bool = False,
    ) -> dict[str, Any] | None:
        """
        Get one locale record of a document.

        With `fallback_locale=False` a missing locale record returns None
        instead of another locale's values.
        """
        pass

    @abstractmethod
    async def update(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        locale: str,
        context: WriteContext,
    ) -> dict[str, Any]:
        """Partially update a locale record and return it."""
        pass

    @abstractmethod
    async def create(
        self,
        collection: str,
        data: dict[str, Any],
        locale: str,
        context: WriteContext,
    ) -> dict[str, Any]:
        """Create a locale record. `data["id"]` ties it to an existing document."""
        pass

    @abstractmethod
    async def find(
        self,
        collection: str,
        locale: str,
        limit: int = 10000,
    ) -> dict[str, list[dict[str, Any]]]:
        """List documents of a collection in one locale, as {"docs": [...]}."""
        pass


class DocumentStatus:
    """Standard `_status` values."""

    DRAFT = "draft"
    PUBLISHED = "published"
