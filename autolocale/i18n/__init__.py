"""
Translation: DeepL gateway, rich-text walker and the pass orchestrator.
"""

from autolocale.i18n.gateway import GatewayConfig, TranslationGateway
from autolocale.i18n.generate import GenerateTextRequest, GenerateTextResponse, generate_text
from autolocale.i18n.languages import get_language_name, normalize_language_code
from autolocale.i18n.orchestrator import TextTranslator, TranslationOrchestrator
from autolocale.i18n.richtext import MAX_DEPTH, extract, has_text, is_rich_text, reinject

__all__ = [
    "GatewayConfig",
    "TranslationGateway",
    "GenerateTextRequest",
    "GenerateTextResponse",
    "generate_text",
    "get_language_name",
    "normalize_language_code",
    "TextTranslator",
    "TranslationOrchestrator",
    "MAX_DEPTH",
    "extract",
    "has_text",
    "is_rich_text",
    "reinject",
]
