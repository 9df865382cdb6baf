"""
Ad hoc text translation.

Backs the `/generate-text` endpoint: one string in, one string out, no
document involved.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from autolocale.core.errors import TranslatorError
from autolocale.core.models import TranslationSettings
from autolocale.i18n.orchestrator import TextTranslator

logger = logging.getLogger(__name__)


class GenerateTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1)
    target_language: str = Field(alias="targetLanguage", min_length=1)
    source_language: str | None = Field(default=None, alias="sourceLanguage")
    settings: TranslationSettings | None = None


class GenerateTextResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    translated_text: str | None = Field(default=None, alias="translatedText")
    error: str | None = None


async def generate_text(
    request: GenerateTextRequest,
    gateway: TextTranslator,
) -> GenerateTextResponse:
    """Translate one text. Failures come back as `success=False`, never raised."""
    try:
        translated = await gateway.translate_one(
            request.text,
            request.target_language,
            request.source_language,
            request.settings,
        )
        return GenerateTextResponse(success=True, translated_text=translated)
    except TranslatorError as e:
        logger.error(f"Text generation failed: {e}")
        return GenerateTextResponse(success=False, error=str(e))
