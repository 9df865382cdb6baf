"""
DeepL translation gateway.

Thin async wrapper over the DeepL v2 REST API. The gateway always surfaces
failures; deciding to fall back to the source text is the caller's job.

Usage:
    gateway = TranslationGateway(GatewayConfig.resolve())

    fr = await gateway.translate_one("Hello world", "fr", "en")
    de = await gateway.translate_batch(["Hello", "Goodbye"], "de", "en")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from autolocale.config import Settings, get_settings
from autolocale.core.errors import (
    ConfigurationError,
    CountMismatchError,
    EmptyResponseError,
    UpstreamError,
)
from autolocale.core.models import TranslationSettings
from autolocale.i18n.languages import get_language_name, normalize_language_code

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.deepl.com/v2/translate"


# =============================================================================
# Configuration
# =============================================================================


class GatewayConfig(BaseModel):
    """Credential and endpoint for the vendor API. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False, min_length=1)
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0

    @classmethod
    def resolve(
        cls,
        api_key: str | None = None,
        api_url: str | None = None,
        settings: Settings | None = None,
    ) -> GatewayConfig:
        """
        Build a config from explicit options, falling back to the environment.

        Raises:
            ConfigurationError: if no API key is available anywhere
        """
        settings = settings or get_settings()
        key = api_key or settings.deepl_api_key
        if not key:
            raise ConfigurationError(
                "DeepL API key is required. Set DEEPL_API_KEY environment variable "
                "or pass deeplApiKey in plugin options."
            )
        return cls(
            api_key=key,
            api_url=api_url or settings.deepl_api_url or DEFAULT_API_URL,
            timeout=settings.deepl_timeout,
        )

    @property
    def usage_url(self) -> str:
        return self.api_url.replace("/translate", "/usage")


# =============================================================================
# Gateway
# =============================================================================


class TranslationGateway:
    """
    Single and batch text translation against DeepL.

    Holds no state between calls apart from its config, so one instance
    can serve any number of concurrent passes.
    """

    def __init__(
        self,
        config: GatewayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"DeepL-Auth-Key {self.config.api_key}"}

    def build_form(
        self,
        texts: list[str],
        target_locale: str,
        source_locale: str | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the form-encoded request body. `text` is repeated per input."""
        settings = TranslationSettings.coerce(settings)

        form: dict[str, Any] = {
            "text": list(texts),
            "target_lang": normalize_language_code(target_locale),
        }
        if source_locale:
            form["source_lang"] = normalize_language_code(source_locale)
        if settings.formality:
            form["formality"] = settings.formality
        if settings.preserve_formatting is not None:
            form["preserve_formatting"] = "1" if settings.preserve_formatting else "0"
        if settings.tag_handling:
            form["tag_handling"] = settings.tag_handling
        if settings.split_sentences:
            form["split_sentences"] = settings.split_sentences
        return form

    async def _request(self, form: dict[str, Any]) -> list[str]:
        """POST a translation request and return the translated strings in order."""
        try:
            async with self._client() as client:
                response = await client.post(
                    self.config.api_url,
                    data=form,
                    headers=self._headers,
                )
        except httpx.HTTPError as e:
            logger.error(f"DeepL request failed: {e}")
            raise UpstreamError(f"DeepL request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"DeepL API error: {response.status_code} {response.reason_phrase} "
                f"- {response.text}"
            )
            raise UpstreamError(
                f"DeepL API error: {response.status_code} {response.reason_phrase} "
                f"- {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"DeepL returned a non-JSON body: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamError(
                f"DeepL returned a {type(payload).__name__} body, expected an object",
                status_code=response.status_code,
            )

        translations = payload.get("translations") or []
        if not isinstance(translations, list):
            raise UpstreamError(
                "DeepL returned malformed translations",
                status_code=response.status_code,
            )

        texts = []
        for item in translations:
            text = item.get("text") if isinstance(item, dict) else None
            if not isinstance(text, str):
                raise EmptyResponseError(f"DeepL returned a translation without text: {item!r}")
            texts.append(text)
        return texts

    async def translate_one(
        self,
        text: str,
        target_locale: str,
        source_locale: str | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
    ) -> str:
        """
        Translate a single text.

        Blank input is returned as-is without calling the vendor.

        Raises:
            UpstreamError: non-success status or transport failure
            EmptyResponseError: the vendor returned no translations
        """
        if not text or not text.strip():
            return text

        form = self.build_form([text], target_locale, source_locale, settings)
        translations = await self._request(form)

        if not translations:
            raise EmptyResponseError("No translation returned from DeepL API")

        logger.debug(
            f"Translated {len(text)} chars to {get_language_name(target_locale)}"
        )
        return translations[0]

    async def translate_batch(
        self,
        texts: list[str],
        target_locale: str,
        source_locale: str | None = None,
        settings: TranslationSettings | dict[str, Any] | None = None,
    ) -> list[str]:
        """
        Translate several texts in one request, preserving order.

        Raises:
            UpstreamError: non-success status or transport failure
            CountMismatchError: result count differs from input count
        """
        if not texts:
            return []

        form = self.build_form(texts, target_locale, source_locale, settings)
        translations = await self._request(form)

        if len(translations) != len(texts):
            raise CountMismatchError(expected=len(texts), received=len(translations))

        logger.debug(
            f"Batch translated {len(texts)} texts to {get_language_name(target_locale)}"
        )
        return translations

    async def health_check(self) -> bool:
        """Probe the vendor usage endpoint. Never raises."""
        try:
            async with self._client() as client:
                response = await client.get(self.config.usage_url, headers=self._headers)
            return response.is_success
        except Exception as e:
            logger.warning(f"DeepL health check failed: {e}")
            return False
