"""
In-memory document store for development and tests.

Records live in `collection -> id -> locale -> fields`. After every write
the store publishes a change event on its dispatcher, the way a CMS runs
its after-change hooks.
"""

from __future__ import annotations

import copy
from typing import Any

from autolocale.core.events import ChangeEvent, HookDispatcher
from autolocale.core.models import WriteContext
from autolocale.core.utils import generate_id, utc_now
from autolocale.storage.base import DocumentStore

# Keys managed by the store, not part of the field set
_SYSTEM_KEYS = {"id", "createdAt", "updatedAt"}


class InMemoryDocumentStore(DocumentStore):
    """
    Localized in-memory storage.

    Keeps the field-name set identical across locale records of one
    document: a name written in any locale appears (as None) in all others.
    """

    def __init__(self, dispatcher: HookDispatcher | None = None, default_locale: str = "en"):
        self._data: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}
        self.dispatcher = dispatcher
        self.default_locale = default_locale

    def _records(self, collection: str, id: str) -> dict[str, dict[str, Any]] | None:
        return self._data.get(collection, {}).get(id)

    def _sync_field_names(self, records: dict[str, dict[str, Any]]) -> None:
        names: set[str] = set()
        for record in records.values():
            names.update(record.keys())
        for record in records.values():
            for name in names - record.keys():
                record[name] = None

    async def _publish(
        self,
        event_type: str,
        collection: str,
        id: str,
        locale: str,
        doc: dict[str, Any],
        previous: dict[str, Any] | None,
        context: WriteContext,
    ) -> None:
        if self.dispatcher is None:
            return
        await self.dispatcher.publish(ChangeEvent(
            event_type=event_type,
            collection=collection,
            document_id=id,
            locale=locale,
            doc=doc,
            previous_doc=previous,
            context=context,
        ))

    async def find_by_id(
        self,
        collection: str,
        id: str,
        locale: str,
        fallback_locale: bool = False,
    ) -> dict[str, Any] | None:
        records = self._records(collection, id)
        if not records:
            return None

        record = records.get(locale)
        if record is None and fallback_locale:
            record = records.get(self.default_locale) or next(iter(records.values()))
        return copy.deepcopy(record) if record is not None else None

    async def update(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        locale: str,
        context: WriteContext,
    ) -> dict[str, Any]:
        records = self._records(collection, id)
        if not records or locale not in records:
            raise KeyError(f"No {locale} record for {collection}/{id}")

        previous = copy.deepcopy(records[locale])
        records[locale].update(copy.deepcopy(data))
        records[locale]["updatedAt"] = utc_now().isoformat()
        self._sync_field_names(records)

        doc = copy.deepcopy(records[locale])
        await self._publish("document.updated", collection, id, locale, doc, previous, context)
        return doc

    async def create(
        self,
        collection: str,
        data: dict[str, Any],
        locale: str,
        context: WriteContext,
    ) -> dict[str, Any]:
        id = data.get("id") or generate_id("doc")
        records = self._data.setdefault(collection, {}).setdefault(id, {})
        if locale in records:
            raise KeyError(f"{collection}/{id} already has a {locale} record")

        now = utc_now().isoformat()
        records[locale] = {**copy.deepcopy(data), "id": id, "createdAt": now, "updatedAt": now}
        self._sync_field_names(records)

        doc = copy.deepcopy(records[locale])
        await self._publish("document.created", collection, id, locale, doc, None, context)
        return doc

    async def find(
        self,
        collection: str,
        locale: str,
        limit: int = 10000,
    ) -> dict[str, list[dict[str, Any]]]:
        docs = [
            copy.deepcopy(records[locale])
            for records in self._data.get(collection, {}).values()
            if locale in records
        ]
        return {"docs": docs[:limit]}

    def locales_of(self, collection: str, id: str) -> list[str]:
        """Locales that have a record for this document."""
        return list((self._records(collection, id) or {}).keys())

    def field_names(self, collection: str, id: str, locale: str) -> set[str]:
        record = (self._records(collection, id) or {}).get(locale) or {}
        return set(record.keys()) - _SYSTEM_KEYS
