"""
FastAPI application serving the translator endpoints.

Run with:
    uvicorn autolocale.api.app:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autolocale.api.routes import router
from autolocale.config import configure_logging, get_settings
from autolocale.config_loader import PluginConfigLoader
from autolocale.core.events import get_dispatcher
from autolocale.integrations.sentry import init_sentry
from autolocale.plugin import TranslatorPlugin
from autolocale.storage import InMemoryDocumentStore

logger = logging.getLogger(__name__)


# =============================================================================
# Plugin setup
# =============================================================================


def build_plugin() -> TranslatorPlugin:
    """Wire settings, options, store and dispatcher into a plugin."""
    settings = get_settings()
    loader = PluginConfigLoader(settings)
    locales = loader.locale_set()

    dispatcher = get_dispatcher()
    store = InMemoryDocumentStore(dispatcher=dispatcher, default_locale=locales.default)

    plugin = TranslatorPlugin(
        loader.load(),
        store,
        locales=locales,
        dispatcher=dispatcher,
        settings=settings,
    )
    plugin.register_hooks()
    return plugin


# =============================================================================
# App factory
# =============================================================================


def create_app(plugin: TranslatorPlugin | None = None) -> FastAPI:
    """Create the API. Pass a prebuilt plugin to skip environment wiring."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_logging(settings.log_level)
        init_sentry(settings)

        if getattr(app.state, "plugin", None) is None:
            app.state.plugin = build_plugin()
        app.state.plugin.on_init()

        logger.info(f"Translator API starting in {settings.environment} mode")
        yield
        logger.info("Translator API shutting down")

    app = FastAPI(
        title="Autolocale API",
        description="Automatic DeepL translation for localized CMS collections",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.plugin = plugin

    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/health")
    async def health():
        """Service health, including whether DeepL answers."""
        translator = await app.state.plugin.health_check()
        return {
            "status": "healthy" if translator else "degraded",
            "translator": translator,
        }

    return app


app = create_app()
