"""
Translator plugin.

Wires the gateway, orchestrator, access guard and change hooks into a host
CMS configuration.

Usage:
    plugin = TranslatorPlugin(options, store, locales=locales, dispatcher=dispatcher)
    cms_config = plugin.configure(cms_config)
    plugin.register_hooks()
    plugin.on_init()

After that, every user edit in a configured collection's source locale
starts a translation pass; passes can also be started explicitly through
`translate_document` / `translate_collection` (the HTTP endpoints).
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from autolocale.config import Settings, get_settings
from autolocale.core.errors import ConfigurationError, NotFoundError
from autolocale.core.events import ChangeEvent, HookDispatcher, Subscription
from autolocale.core.models import (
    BulkReport,
    CollectionOptions,
    LocaleSet,
    PassReport,
    PluginOptions,
    TranslationSettings,
)
from autolocale.i18n.gateway import GatewayConfig, TranslationGateway
from autolocale.i18n.generate import GenerateTextRequest, GenerateTextResponse, generate_text
from autolocale.i18n.orchestrator import TextTranslator, TranslationOrchestrator
from autolocale.storage.base import DocumentStore

logger = logging.getLogger(__name__)

CONFIG_GLOBAL_SLUG = "deepl-translator-config"

TRANSLATOR_UI_FIELD = {
    "name": "translator",
    "type": "ui",
    "admin": {
        "position": "sidebar",
        "components": {"Field": "autolocale/TranslatorField"},
    },
}

COLLECTION_ENDPOINTS = [
    {"path": "/translate", "method": "post"},
    {"path": "/translate-missing", "method": "post"},
]

ROOT_ENDPOINTS = [
    {"path": "/generate-text", "method": "post"},
]


class TranslatorPlugin:
    """Automatic DeepL translation for localized collections."""

    def __init__(
        self,
        options: PluginOptions,
        store: DocumentStore,
        *,
        locales: LocaleSet,
        gateway: TextTranslator | None = None,
        dispatcher: HookDispatcher | None = None,
        settings: Settings | None = None,
    ):
        self.options = options
        self.store = store
        self.locales = locales
        self.dispatcher = dispatcher
        self.settings = settings or get_settings()
        self._gateway = gateway
        self._orchestrator: TranslationOrchestrator | None = None
        self._subscriptions: list[Subscription] = []

    # =========================================================================
    # Components
    # =========================================================================

    @property
    def enabled(self) -> bool:
        return self.options.enabled

    @property
    def collections(self) -> dict[str, CollectionOptions]:
        return self.options.collections

    @property
    def gateway(self) -> TextTranslator:
        """
        The translation gateway, built on first use.

        Raises:
            ConfigurationError: no API key in options or environment
        """
        if self._gateway is None:
            config = GatewayConfig.resolve(
                api_key=self.options.deepl_api_key,
                api_url=self.options.deepl_api_url,
                settings=self.settings,
            )
            self._gateway = TranslationGateway(config)
        return self._gateway

    @property
    def orchestrator(self) -> TranslationOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = TranslationOrchestrator(self.store, self.gateway, self.locales)
        return self._orchestrator

    def get_collection(self, slug: str) -> CollectionOptions:
        options = self.collections.get(slug)
        if options is None:
            raise NotFoundError(f"Collection {slug} is not configured for translation")
        return options

    def resolve_settings(
        self,
        slug: str,
        request_settings: TranslationSettings | dict[str, Any] | None = None,
    ) -> TranslationSettings:
        """Request settings merged under the collection's; collection options win."""
        base = TranslationSettings.coerce(request_settings)
        return base.merged_with(self.get_collection(slug).settings)

    # =========================================================================
    # Host configuration
    # =========================================================================

    def configure(self, cms_config: dict[str, Any]) -> dict[str, Any]:
        """
        Return a copy of the host config with the translator added.

        - field kinds resolved from each configured collection's schema
        - a sidebar `translator` UI field and the translate endpoints on
          each configured collection
        - the `/generate-text` root endpoint
        - a hidden global holding fallback locales, when configured
        """
        if not self.enabled:
            logger.info("Translator plugin disabled, leaving config untouched")
            return cms_config

        config = copy.deepcopy(cms_config)

        for collection in config.get("collections", []):
            slug = collection.get("slug")
            if slug not in self.collections:
                continue

            fields = collection.setdefault("fields", [])
            self.options.collections[slug] = self.collections[slug].with_schema(fields)

            if not any(f.get("name") == TRANSLATOR_UI_FIELD["name"] for f in fields):
                fields.append(copy.deepcopy(TRANSLATOR_UI_FIELD))
            collection.setdefault("endpoints", []).extend(copy.deepcopy(COLLECTION_ENDPOINTS))

            logger.debug(
                f"Configured {slug}: "
                f"{[(f.name, f.kind.value) for f in self.collections[slug].fields]}"
            )

        missing = set(self.collections) - {c.get("slug") for c in config.get("collections", [])}
        for slug in sorted(missing):
            logger.warning(f"Collection {slug} is configured for translation but not defined")

        config.setdefault("endpoints", []).extend(copy.deepcopy(ROOT_ENDPOINTS))

        if self.options.fallback_locales:
            config.setdefault("globals", []).append({
                "slug": CONFIG_GLOBAL_SLUG,
                "admin": {"hidden": True},
                "fields": [{
                    "name": "fallbackLocales",
                    "type": "json",
                    "defaultValue": list(self.options.fallback_locales),
                }],
            })

        return config

    def register_hooks(self) -> list[Subscription]:
        """Subscribe an after-change handler for every configured collection."""
        if not self.enabled:
            return []
        if self.dispatcher is None:
            raise ConfigurationError("A hook dispatcher is required to register hooks")

        for slug in self.collections:
            self._subscriptions.append(self.dispatcher.subscribe(
                "document.*",
                self._after_change,
                filter={"collection": slug},
            ))
        logger.info(f"Registered translation hooks for {list(self.collections)}")
        return list(self._subscriptions)

    def unregister_hooks(self) -> None:
        if self.dispatcher is None:
            return
        for subscription in self._subscriptions:
            self.dispatcher.unsubscribe(subscription)
        self._subscriptions.clear()

    def on_init(self) -> str:
        """Log where the vendor credential comes from; returns the source."""
        if self.options.deepl_api_key:
            source = "options"
        elif self.settings.deepl_api_key:
            source = "environment"
        else:
            source = "missing"

        if source == "missing":
            logger.warning(
                "DeepL API key not found. Set DEEPL_API_KEY or pass deeplApiKey "
                "in plugin options; translation requests will fail"
            )
        else:
            logger.info(f"DeepL translator initialized (API key from {source})")
        return source

    async def _after_change(self, event: ChangeEvent) -> PassReport | None:
        options = self.collections.get(event.collection)
        if options is None:
            return None

        source = event.doc.get("sourceLanguage") or self.locales.default
        if event.locale != source:
            logger.debug(
                f"Ignoring {event.event_type} for {event.collection}/{event.document_id}: "
                f"locale {event.locale} is not the source {source}"
            )
            return None

        return await self.orchestrator.run_pass(
            event.collection,
            options,
            doc=event.doc,
            source_locale=source,
            settings=options.settings,
            context=event.context,
        )

    # =========================================================================
    # Operations
    # =========================================================================

    async def translate_document(
        self,
        slug: str,
        doc_id: str,
        locale: str,
        codes: list[str] | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
        only_missing: bool = False,
    ) -> PassReport:
        """Translate one document from `locale` on request."""
        return await self.orchestrator.run_pass(
            slug,
            self.get_collection(slug),
            doc_id=doc_id,
            source_locale=locale,
            codes=codes,
            settings=self.resolve_settings(slug, settings),
            only_missing=only_missing,
        )

    async def translate_collection(
        self,
        slug: str,
        locale: str,
        codes: list[str] | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
        only_missing: bool = True,
    ) -> BulkReport:
        """Translate every document of a collection from `locale`."""
        return await self.orchestrator.run_bulk(
            slug,
            self.get_collection(slug),
            source_locale=locale,
            codes=codes,
            settings=self.resolve_settings(slug, settings),
            only_missing=only_missing,
        )

    async def generate_text(self, request: GenerateTextRequest) -> GenerateTextResponse:
        try:
            gateway = self.gateway
        except ConfigurationError as e:
            return GenerateTextResponse(success=False, error=str(e))
        return await generate_text(request, gateway)

    async def health_check(self) -> bool:
        """Vendor reachability; False when no credential is configured."""
        try:
            gateway = self.gateway
        except ConfigurationError:
            return False
        check = getattr(gateway, "health_check", None)
        return bool(await check()) if check else True
