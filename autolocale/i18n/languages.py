"""
Locale codes and vendor code mapping.

Locales are stored under lower-case ISO codes ("en", "fr", "zh").
DeepL expects its own upper-case codes ("EN", "FR", "NB").
"""

from __future__ import annotations


# ISO 639-1 (lower-case) -> DeepL language code
DEEPL_CODES: dict[str, str] = {
    "en": "EN",
    "de": "DE",
    "fr": "FR",
    "it": "IT",
    "ja": "JA",
    "es": "ES",
    "pt": "PT",
    "ru": "RU",
    "zh": "ZH",
    "nl": "NL",
    "pl": "PL",
    "bg": "BG",
    "cs": "CS",
    "da": "DA",
    "el": "EL",
    "et": "ET",
    "fi": "FI",
    "hu": "HU",
    "id": "ID",
    "ko": "KO",
    "lt": "LT",
    "lv": "LV",
    "nb": "NB",
    "ro": "RO",
    "sk": "SK",
    "sl": "SL",
    "sv": "SV",
    "tr": "TR",
    "uk": "UK",
    "ar": "AR",
    "hi": "HI",
    "th": "TH",
    "vi": "VI",
}


# Human-readable names (for log messages)
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "de": "German",
    "fr": "French",
    "it": "Italian",
    "ja": "Japanese",
    "es": "Spanish",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
    "nl": "Dutch",
    "pl": "Polish",
    "bg": "Bulgarian",
    "cs": "Czech",
    "da": "Danish",
    "el": "Greek",
    "et": "Estonian",
    "fi": "Finnish",
    "hu": "Hungarian",
    "id": "Indonesian",
    "ko": "Korean",
    "lt": "Lithuanian",
    "lv": "Latvian",
    "nb": "Norwegian",
    "ro": "Romanian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "sv": "Swedish",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "ar": "Arabic",
    "hi": "Hindi",
    "th": "Thai",
    "vi": "Vietnamese",
}


def normalize_language_code(code: str) -> str:
    """
    Map a locale code to the vendor's code.

    Unknown codes are upper-cased verbatim; this never fails.
    """
    return DEEPL_CODES.get(code.lower(), code.upper())


def get_language_name(code: str) -> str:
    """Get human-readable language name, or the code itself."""
    return LANGUAGE_NAMES.get(code.lower(), code)
