"""
Field translation orchestrator.

Runs one translation pass: load the source-locale document, translate its
configured fields into every target locale concurrently, and write each
locale record back through the document store.

Failures are contained at the smallest unit that can fail:
- a gateway error on a field keeps that field's source value
- any error in a locale task marks only that locale as failed
Only setup problems (missing document) raise out of a pass.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Protocol

from autolocale.core.errors import (
    CountMismatchError,
    NotFoundError,
    TranslationGatewayError,
)
from autolocale.core.models import (
    BulkReport,
    CollectionOptions,
    FieldDescriptor,
    FieldKind,
    LocaleResult,
    LocaleSet,
    LocaleStatus,
    PassReport,
    TranslationSettings,
    WriteContext,
)
from autolocale.core.utils import is_blank
from autolocale.i18n.richtext import MAX_DEPTH, extract, is_rich_text, reinject, to_dot_paths
from autolocale.integrations.sentry import capture_exception
from autolocale.storage.base import DocumentStatus, DocumentStore

logger = logging.getLogger(__name__)


class TextTranslator(Protocol):
    """What the orchestrator needs from a gateway."""

    async def translate_one(
        self,
        text: str,
        target_locale: str,
        source_locale: str | None = None,
        settings: TranslationSettings | None = None,
    ) -> str: ...

    async def translate_batch(
        self,
        texts: list[str],
        target_locale: str,
        source_locale: str | None = None,
        settings: TranslationSettings | None = None,
    ) -> list[str]: ...


class TranslationOrchestrator:
    """
    Coordinates gateway, tree walker and storage for translation passes.

    Usage:
        orchestrator = TranslationOrchestrator(store, gateway, locales)

        report = await orchestrator.run_pass(
            "insights",
            options,
            doc_id="doc_123",
            source_locale="en",
        )
        print(report.succeeded, report.failed)
    """

    def __init__(
        self,
        store: DocumentStore,
        gateway: TextTranslator,
        locales: LocaleSet,
        max_depth: int = MAX_DEPTH,
    ):
        self.store = store
        self.gateway = gateway
        self.locales = locales
        self.max_depth = max_depth

    # =========================================================================
    # Passes
    # =========================================================================

    async def run_pass(
        self,
        collection: str,
        options: CollectionOptions,
        *,
        doc: dict[str, Any] | None = None,
        doc_id: str | None = None,
        source_locale: str | None = None,
        codes: list[str] | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
        only_missing: bool = False,
        context: WriteContext | None = None,
        bulk: bool = False,
    ) -> PassReport:
        """
        Translate one document into every target locale.

        Args:
            collection: Collection slug
            options: Fields and settings configured for the collection
            doc: Source-locale document, if the caller already has it
            doc_id: Document id to load when `doc` is not given
            source_locale: Locale to translate from (default: document's
                `sourceLanguage`, then the default locale)
            codes: Optional allow-list of target locales
            settings: Vendor formatting options
            only_missing: Keep target values that were edited by hand
            context: Write context of the change that triggered this pass;
                None for explicit requests, which bypass the echo guard
            bulk: Tag writes as part of a bulk run

        Returns:
            A per-locale report. Locale and field failures are reported,
            not raised.

        Raises:
            NotFoundError: the source document does not exist
        """
        if context is not None and context.suppresses_translation:
            logger.debug(
                f"Skipping translation of {collection}/{doc_id or (doc or {}).get('id')}: "
                f"write intent is {context.intent.value}"
            )
            return PassReport.skipped(collection, doc_id, f"intent:{context.intent.value}")

        if doc is None:
            doc, source = await self._load_source(collection, doc_id, source_locale)
        else:
            source = source_locale or doc.get("sourceLanguage") or self.locales.default

        document_id = doc.get("id", doc_id)

        if doc.get("noAutoTranslate"):
            logger.info(f"{collection}/{document_id} has noAutoTranslate set, skipping")
            return PassReport.skipped(collection, document_id, "noAutoTranslate")

        targets = self.locales.targets(source, codes)
        settings = TranslationSettings.coerce(settings)

        report = PassReport(collection=collection, document_id=document_id, source_locale=source)
        if not targets:
            logger.info(f"No target locales for {collection}/{document_id} (source {source})")
            return report

        logger.info(
            f"Translating {collection}/{document_id} from {source} to {targets} "
            f"(fields: {options.field_names}, only_missing={only_missing})"
        )

        write_context = WriteContext.bulk_reindex() if bulk else WriteContext.translation_echo()
        tasks = [
            self._translate_locale(
                collection, options, doc, document_id, source, locale,
                settings, only_missing, write_context,
            )
            for locale in targets
        ]
        report.results = list(await asyncio.gather(*tasks))

        logger.info(
            f"Pass {report.id} for {collection}/{document_id} done: "
            f"ok={report.succeeded} failed={report.failed}"
        )
        return report

    async def run_bulk(
        self,
        collection: str,
        options: CollectionOptions,
        *,
        source_locale: str | None = None,
        codes: list[str] | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
        only_missing: bool = True,
        limit: int = 10000,
    ) -> BulkReport:
        """
        Run a pass for every document of a collection.

        A document that fails to translate is logged and counted; the rest
        of the batch continues.
        """
        source = source_locale or self.locales.default
        found = await self.store.find(collection, source, limit=limit)
        docs = found.get("docs") or []
        logger.info(f"Bulk translating {len(docs)} document(s) in {collection}")

        bulk = BulkReport(collection=collection)
        for doc in docs:
            try:
                bulk.reports.append(await self.run_pass(
                    collection,
                    options,
                    doc=doc,
                    source_locale=source,
                    codes=codes,
                    settings=settings,
                    only_missing=only_missing,
                    bulk=True,
                ))
            except Exception as e:
                logger.error(f"Failed to translate document {doc.get('id')}: {e}")
                bulk.failed_documents.append(str(doc.get("id")))
        return bulk

    async def _load_source(
        self,
        collection: str,
        doc_id: str | None,
        source_locale: str | None,
    ) -> tuple[dict[str, Any], str]:
        """
        Load the record translations are read from, and the locale it is in.

        Without an explicit locale the default record is loaded first; if it
        names another `sourceLanguage`, that locale's record is used instead.
        """
        if doc_id is None:
            raise ValueError("Either doc or doc_id is required")

        locale = source_locale or self.locales.default
        doc = await self.store.find_by_id(collection, doc_id, locale)
        if doc is None:
            raise NotFoundError(f"Document {doc_id} not found in {collection}")

        declared = doc.get("sourceLanguage")
        if source_locale is None and declared and declared != locale:
            declared_doc = await self.store.find_by_id(collection, doc_id, declared)
            if declared_doc is not None:
                return declared_doc, declared
            logger.warning(
                f"{collection}/{doc_id} declares source {declared} but has no such "
                f"record, translating from {locale}"
            )
        return doc, locale

    # =========================================================================
    # Per locale
    # =========================================================================

    async def _translate_locale(
        self,
        collection: str,
        options: CollectionOptions,
        doc: dict[str, Any],
        document_id: str,
        source: str,
        locale: str,
        settings: TranslationSettings,
        only_missing: bool,
        write_context: WriteContext,
    ) -> LocaleResult:
        result = LocaleResult(locale=locale, status=LocaleStatus.SKIPPED)
        try:
            target_doc = await self.store.find_by_id(
                collection, document_id, locale, fallback_locale=False
            )
            data = await self._translate_fields(
                options, doc, target_doc, locale, source, settings, only_missing, result
            )

            if not data and target_doc is not None:
                logger.debug(f"Nothing to write for {collection}/{document_id} [{locale}]")
                return result

            result.status = await self._persist(collection, document_id, locale, data, write_context)
            logger.info(
                f"{result.status.value.capitalize()} {collection}/{document_id} [{locale}]: "
                f"{result.translated_fields}"
            )
        except Exception as e:
            logger.error(f"Translation failed for locale {locale}: {e}")
            capture_exception(e, collection=collection, document_id=document_id, locale=locale)
            result.status = LocaleStatus.FAILED
            result.error = str(e)
        return result

    async def _translate_fields(
        self,
        options: CollectionOptions,
        doc: dict[str, Any],
        target_doc: dict[str, Any] | None,
        locale: str,
        source: str,
        settings: TranslationSettings,
        only_missing: bool,
        result: LocaleResult,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {}

        for descriptor in options.fields:
            name = descriptor.name
            value = doc.get(name)
            if is_blank(value):
                continue

            # Hand-edited target values survive an only-missing pass
            if only_missing and target_doc is not None:
                existing = target_doc.get(name)
                if not is_blank(existing) and existing != value:
                    result.skipped_fields.append(name)
                    continue

            if not self.is_translatable(descriptor, value):
                data[name] = copy.deepcopy(value)
                continue

            try:
                data[name] = await self.translate_field(descriptor, value, locale, source, settings)
                result.translated_fields.append(name)
            except TranslationGatewayError as e:
                logger.warning(f"Translation failed for field {name} [{locale}], keeping source: {e}")
                data[name] = copy.deepcopy(value)
                result.failed_fields.append(name)

        return data

    async def _persist(
        self,
        collection: str,
        document_id: str,
        locale: str,
        data: dict[str, Any],
        context: WriteContext,
    ) -> LocaleStatus:
        """Update the locale record if it exists, otherwise create it as a draft."""
        existing = await self.store.find_by_id(
            collection, document_id, locale, fallback_locale=False
        )
        if existing is not None:
            await self.store.update(collection, document_id, data, locale, context)
            return LocaleStatus.UPDATED

        await self.store.create(
            collection,
            {**data, "id": document_id, "_status": DocumentStatus.DRAFT},
            locale,
            context,
        )
        return LocaleStatus.CREATED

    # =========================================================================
    # Per field
    # =========================================================================

    @staticmethod
    def is_translatable(descriptor: FieldDescriptor, value: Any) -> bool:
        """Whether the value has the shape its descriptor promises."""
        if descriptor.kind is FieldKind.PLAIN_TEXT:
            return isinstance(value, str)
        if descriptor.kind is FieldKind.RICH_TEXT:
            return is_rich_text(value)
        return False

    async def translate_field(
        self,
        descriptor: FieldDescriptor,
        value: Any,
        target: str,
        source: str | None,
        settings: TranslationSettings | None = None,
    ) -> Any:
        """
        Translate one field value according to its descriptor.

        Values that do not match the descriptor are returned as a copy.

        Raises:
            TranslationGatewayError: the gateway call failed
        """
        if not self.is_translatable(descriptor, value):
            return copy.deepcopy(value)

        if descriptor.kind is FieldKind.PLAIN_TEXT:
            return await self.gateway.translate_one(value, target, source, settings)

        return await self.translate_rich_text(value, target, source, settings, name=descriptor.name)

    async def translate_rich_text(
        self,
        tree: dict[str, Any],
        target: str,
        source: str | None,
        settings: TranslationSettings | None = None,
        name: str = "",
    ) -> dict[str, Any]:
        """Extract leaf texts, translate them in one batch, reinject into a copy."""
        mapping = extract(tree, self.max_depth)
        if not mapping:
            return copy.deepcopy(tree)

        logger.debug(f"Rich-text leaves for {name or 'field'}: {list(to_dot_paths(mapping, name))}")

        translated = await self.gateway.translate_batch(
            list(mapping.values()), target, source, settings
        )
        if len(translated) != len(mapping):
            raise CountMismatchError(expected=len(mapping), received=len(translated))

        return reinject(tree, dict(zip(mapping.keys(), translated)), self.max_depth)
