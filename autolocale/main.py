"""
Autolocale - main entry point.

    python -m autolocale.main          # serve the API
    python -m autolocale.main demo     # translate a sample document
"""

from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn
from dotenv import load_dotenv

from autolocale.config import configure_logging, get_settings
from autolocale.core.events import HookDispatcher
from autolocale.core.models import CollectionOptions, LocaleSet, PluginOptions, WriteContext
from autolocale.plugin import TranslatorPlugin
from autolocale.storage import InMemoryDocumentStore

logger = logging.getLogger(__name__)


async def demo():
    """
    Create a document in the source locale and let the hook translate it.

    Needs DEEPL_API_KEY in the environment (or .env).
    """
    settings = get_settings()
    locales = LocaleSet.parse(settings.locale_codes or ["en", "fr", "de"], settings.default_locale)

    dispatcher = HookDispatcher()
    store = InMemoryDocumentStore(dispatcher=dispatcher, default_locale=locales.default)
    options = PluginOptions(collections={
        "insights": CollectionOptions(fields=["title", "excerpt", "content:rich_text"]),
    })

    plugin = TranslatorPlugin(options, store, locales=locales, dispatcher=dispatcher)
    plugin.register_hooks()
    plugin.on_init()

    await store.create(
        "insights",
        {
            "id": "demo",
            "title": "Hello world",
            "excerpt": "A short introduction.",
            "content": {"root": {"children": [
                {"type": "paragraph", "children": [{"type": "text", "text": "Welcome to the demo."}]},
            ]}},
        },
        locales.default,
        WriteContext.user_edit(),
    )

    for locale in store.locales_of("insights", "demo"):
        doc = await store.find_by_id("insights", "demo", locale)
        print(f"[{locale}] {doc['title']} | {doc['excerpt']} | {doc.get('_status', 'published')}")


def main():
    """Main entry point."""
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.log_level)

    if len(sys.argv) > 1 and sys.argv[1] == "demo":
        asyncio.run(demo())
        return

    uvicorn.run(
        "autolocale.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
