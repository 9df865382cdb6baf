"""
Tests for plugin composition: host config, credentials and operations.
"""

import pytest

from autolocale.config import Settings
from autolocale.core.errors import ConfigurationError, NotFoundError
from autolocale.core.models import (
    CollectionOptions,
    FieldKind,
    PluginOptions,
    TranslationSettings,
    WriteContext,
)
from autolocale.i18n.gateway import TranslationGateway
from autolocale.i18n.generate import GenerateTextRequest
from autolocale.plugin import CONFIG_GLOBAL_SLUG, TranslatorPlugin


@pytest.fixture
def cms_config():
    return {
        "collections": [
            {
                "slug": "insights",
                "fields": [
                    {"name": "title", "type": "text"},
                    {"name": "excerpt", "type": "textarea"},
                    {"name": "content", "type": "richText"},
                    {"name": "hero", "type": "upload"},
                ],
            },
            {"slug": "media", "fields": [{"name": "alt", "type": "text"}]},
        ],
    }


@pytest.fixture
def options():
    return PluginOptions(
        collections={
            "insights": CollectionOptions(
                fields=["title", "excerpt", "content", "hero"],
                settings=TranslationSettings(formality="prefer_more"),
            ),
        },
        fallbackLocales=["en"],
    )


def make_plugin(options, store, locales, gateway=None, **settings):
    return TranslatorPlugin(
        options,
        store,
        locales=locales,
        gateway=gateway,
        settings=Settings(_env_file=None, **settings),
    )


# =============================================================================
# Host configuration
# =============================================================================


class TestConfigure:
    def test_kinds_resolved_from_schema(self, options, store, locales, cms_config):
        plugin = make_plugin(options, store, locales)
        plugin.configure(cms_config)

        kinds = {f.name: f.kind for f in plugin.collections["insights"].fields}
        assert kinds == {
            "title": FieldKind.PLAIN_TEXT,
            "excerpt": FieldKind.PLAIN_TEXT,
            "content": FieldKind.RICH_TEXT,
            "hero": FieldKind.OPAQUE,
        }

    def test_ui_field_and_endpoints(self, options, store, locales, cms_config):
        config = make_plugin(options, store, locales).configure(cms_config)

        insights, media = config["collections"]
        assert insights["fields"][-1]["name"] == "translator"
        assert insights["fields"][-1]["admin"]["position"] == "sidebar"
        assert [e["path"] for e in insights["endpoints"]] == ["/translate", "/translate-missing"]
        assert "endpoints" not in media
        assert config["endpoints"] == [{"path": "/generate-text", "method": "post"}]

    def test_fallback_global(self, options, store, locales, cms_config):
        config = make_plugin(options, store, locales).configure(cms_config)

        (config_global,) = config["globals"]
        assert config_global["slug"] == CONFIG_GLOBAL_SLUG
        assert config_global["admin"]["hidden"] is True
        assert config_global["fields"][0]["defaultValue"] == ["en"]

    def test_no_fallback_no_global(self, store, locales, cms_config):
        options = PluginOptions(collections={"insights": CollectionOptions(fields=["title"])})
        config = make_plugin(options, store, locales).configure(cms_config)

        assert "globals" not in config

    def test_input_not_mutated(self, options, store, locales, cms_config):
        make_plugin(options, store, locales).configure(cms_config)

        assert len(cms_config["collections"][0]["fields"]) == 4
        assert "endpoints" not in cms_config

    def test_disabled_is_noop(self, store, locales, cms_config, dispatcher):
        options = PluginOptions(enabled=False, collections={"insights": CollectionOptions()})
        plugin = TranslatorPlugin(options, store, locales=locales, dispatcher=dispatcher)

        assert plugin.configure(cms_config) is cms_config
        assert plugin.register_hooks() == []

    def test_hooks_need_dispatcher(self, options, store, locales):
        with pytest.raises(ConfigurationError):
            make_plugin(options, store, locales).register_hooks()


# =============================================================================
# Credentials
# =============================================================================


class TestCredentials:
    def test_key_from_options(self, store, locales):
        options = PluginOptions(deeplApiKey="from-options")
        plugin = make_plugin(options, store, locales, deepl_api_key="from-env")

        assert plugin.on_init() == "options"
        assert isinstance(plugin.gateway, TranslationGateway)
        assert plugin.gateway.config.api_key == "from-options"

    def test_key_from_environment(self, store, locales):
        plugin = make_plugin(PluginOptions(), store, locales, deepl_api_key="from-env")

        assert plugin.on_init() == "environment"
        assert plugin.gateway.config.api_key == "from-env"

    def test_key_missing(self, store, locales):
        plugin = make_plugin(PluginOptions(), store, locales)

        assert plugin.on_init() == "missing"
        with pytest.raises(ConfigurationError):
            plugin.gateway

    @pytest.mark.asyncio
    async def test_generate_text_without_key(self, store, locales):
        plugin = make_plugin(PluginOptions(), store, locales)

        result = await plugin.generate_text(
            GenerateTextRequest(text="Hello", targetLanguage="fr")
        )

        assert result.success is False
        assert "API key" in result.error

    @pytest.mark.asyncio
    async def test_health_without_key(self, store, locales):
        assert await make_plugin(PluginOptions(), store, locales).health_check() is False


# =============================================================================
# Operations
# =============================================================================


class TestOperations:
    def test_collection_settings_win(self, options, store, locales):
        plugin = make_plugin(options, store, locales)

        merged = plugin.resolve_settings(
            "insights", {"formality": "less", "preserveFormatting": True}
        )

        assert merged.formality == "prefer_more"
        assert merged.preserve_formatting is True

    @pytest.mark.asyncio
    async def test_translate_document(self, options, store, locales, gateway):
        plugin = make_plugin(options, store, locales, gateway=gateway)
        await store.create(
            "insights", {"id": "doc1", "title": "Hello world"}, "en", WriteContext.user_edit()
        )

        report = await plugin.translate_document("insights", "doc1", "en", codes=["fr"])

        assert report.succeeded == ["fr"]
        assert (await store.find_by_id("insights", "doc1", "fr"))["title"] == "Bonjour le monde"

    @pytest.mark.asyncio
    async def test_unknown_collection(self, options, store, locales, gateway):
        plugin = make_plugin(options, store, locales, gateway=gateway)

        with pytest.raises(NotFoundError):
            await plugin.translate_document("pages", "doc1", "en")

    @pytest.mark.asyncio
    async def test_translate_collection(self, options, store, locales, gateway):
        plugin = make_plugin(options, store, locales, gateway=gateway)
        for doc_id in ("doc1", "doc2"):
            await store.create(
                "insights", {"id": doc_id, "title": "Hello world"}, "en", WriteContext.user_edit()
            )

        bulk = await plugin.translate_collection("insights", "en")

        assert bulk.translated == 2
        assert sorted(store.locales_of("insights", "doc2")) == ["de", "en", "fr"]

    @pytest.mark.asyncio
    async def test_generate_text(self, options, store, locales, gateway):
        plugin = make_plugin(options, store, locales, gateway=gateway)

        result = await plugin.generate_text(
            GenerateTextRequest(text="Hello world", targetLanguage="fr", sourceLanguage="en")
        )

        assert result.success is True
        assert result.translated_text == "Bonjour le monde"

    @pytest.mark.asyncio
    async def test_generate_text_failure(self, options, store, locales, gateway):
        gateway.fail_on.add("Hello world")
        plugin = make_plugin(options, store, locales, gateway=gateway)

        result = await plugin.generate_text(
            GenerateTextRequest(text="Hello world", targetLanguage="fr")
        )

        assert result.success is False
        assert result.translated_text is None
