"""
Shared fixtures: a scripted gateway, stores and locale sets.
"""

import pytest

from autolocale.config import get_settings
from autolocale.core.errors import UpstreamError
from autolocale.core.events import HookDispatcher
from autolocale.core.models import LocaleSet
from autolocale.storage import InMemoryDocumentStore


class StubGateway:
    """
    Gateway double.

    Translates with `transform(text, locale)` and records every call.
    Texts listed in `fail_on` raise UpstreamError.
    """

    def __init__(self, transform=None):
        self.transform = transform or (lambda text, locale: f"[{locale}] {text}")
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, list[str], str]] = []
        self.healthy = True

    def _check(self, texts):
        for text in texts:
            if text in self.fail_on:
                raise UpstreamError(f"DeepL API error: 500 - {text}", status_code=500)

    async def translate_one(self, text, target_locale, source_locale=None, settings=None):
        self.calls.append(("one", [text], target_locale))
        self._check([text])
        return self.transform(text, target_locale)

    async def translate_batch(self, texts, target_locale, source_locale=None, settings=None):
        self.calls.append(("batch", list(texts), target_locale))
        self._check(texts)
        return [self.transform(text, target_locale) for text in texts]

    async def health_check(self):
        return self.healthy

    def texts_sent(self, locale=None):
        return [
            text
            for _, texts, target in self.calls
            if locale is None or target == locale
            for text in texts
        ]


FRENCH = {
    "Hello world": "Bonjour le monde",
    "A short excerpt": "Un court extrait",
    "First paragraph": "Premier paragraphe",
    "bold part": "partie en gras",
}


def french(text, locale):
    if locale == "fr":
        return FRENCH.get(text, f"fr:{text}")
    return f"{locale}:{text}"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from the host environment."""
    for name in ("DEEPL_API_KEY", "DEEPL_API_URL", "SENTRY_DSN", "PLUGIN_CONFIG_PATH", "LOCALES"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_gateway():
    return StubGateway


@pytest.fixture
def gateway():
    return StubGateway(french)


@pytest.fixture
def locales():
    return LocaleSet.parse(["en", "fr", "de"], "en")


@pytest.fixture
def dispatcher():
    return HookDispatcher()


@pytest.fixture
def store():
    return InMemoryDocumentStore(default_locale="en")


@pytest.fixture
def rich_content():
    """A small Lexical tree: heading + paragraph with mixed formatting."""
    return {
        "root": {
            "type": "root",
            "children": [
                {
                    "type": "heading",
                    "tag": "h2",
                    "children": [{"type": "text", "text": "Hello world", "format": 0}],
                },
                {
                    "type": "paragraph",
                    "children": [
                        {"type": "text", "text": "First paragraph", "format": 0},
                        {"type": "text", "text": "   ", "format": 0},
                        {"type": "text", "text": "bold part", "format": 1},
                        {"type": "linebreak"},
                    ],
                },
            ],
        }
    }


@pytest.fixture
def source_doc(rich_content):
    return {
        "id": "doc1",
        "title": "Hello world",
        "excerpt": "A short excerpt",
        "content": rich_content,
        "slug": "hello-world",
    }
