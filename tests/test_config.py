"""
Tests for settings, plugin option loading and the core models.
"""

import pytest
from pydantic import ValidationError

from autolocale.config import Settings
from autolocale.config_loader import PluginConfigLoader
from autolocale.core.models import (
    CollectionAccess,
    CollectionOptions,
    FieldDescriptor,
    FieldKind,
    LocaleSet,
    PassIntent,
    TranslationSettings,
    WriteContext,
)


PLUGIN_YAML = """
enabled: true
deeplApiUrl: https://api-free.deepl.com/v2/translate
fallbackLocales: [en]
collections:
  insights:
    fields:
      - title
      - excerpt
      - content:rich_text
    settings:
      formality: prefer_more
      preserveFormatting: true
    access:
      translate: true
  media:
    fields:
      - {name: alt, kind: plain_text}
"""


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.deepl_api_url == "https://api.deepl.com/v2/translate"
        assert settings.default_locale == "en"
        assert not settings.is_production

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("DEEPL_API_KEY", "env-key")
        monkeypatch.setenv("LOCALES", "en, fr ,de")

        settings = Settings(_env_file=None)

        assert settings.deepl_api_key == "env-key"
        assert settings.locale_codes == ["en", "fr", "de"]

    def test_cors_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


# =============================================================================
# Plugin options
# =============================================================================


class TestPluginConfigLoader:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "translator.yaml"
        path.write_text(PLUGIN_YAML)

        options = PluginConfigLoader(Settings(_env_file=None)).load(path)

        insights = options.collections["insights"]
        assert insights.field_names == ["title", "excerpt", "content"]
        assert insights.fields[2].kind == FieldKind.RICH_TEXT
        assert insights.settings.formality == "prefer_more"
        assert insights.settings.preserve_formatting is True
        assert insights.access.translate is True
        assert options.collections["media"].fields[0].name == "alt"
        assert options.fallback_locales == ["en"]
        assert options.deepl_api_url == "https://api-free.deepl.com/v2/translate"

    def test_path_from_settings(self, tmp_path):
        path = tmp_path / "translator.yaml"
        path.write_text(PLUGIN_YAML)

        loader = PluginConfigLoader(Settings(_env_file=None, plugin_config_path=str(path)))

        assert set(loader.load().collections) == {"insights", "media"}

    def test_no_path_is_empty(self):
        options = PluginConfigLoader(Settings(_env_file=None)).load()

        assert options.enabled
        assert options.collections == {}

    def test_invalid_settings_rejected(self):
        loader = PluginConfigLoader(Settings(_env_file=None))

        with pytest.raises(ValidationError):
            loader.from_dict({"collections": {"x": {"settings": {"formality": "rude"}}}})

    def test_locale_set(self):
        loader = PluginConfigLoader(
            Settings(_env_file=None, locales="fr,de", default_locale="en")
        )

        assert loader.locale_set().codes == ("en", "fr", "de")


# =============================================================================
# Models
# =============================================================================


class TestModels:
    def test_field_descriptor_forms(self):
        assert FieldDescriptor.parse("title") == FieldDescriptor(name="title")
        assert FieldDescriptor.parse("body:rich_text").kind == FieldKind.RICH_TEXT
        assert FieldDescriptor.parse({"name": "hero", "kind": "opaque"}).kind == FieldKind.OPAQUE

    def test_schema_kinds(self):
        assert FieldKind.from_schema_type("textarea") == FieldKind.PLAIN_TEXT
        assert FieldKind.from_schema_type("richText") == FieldKind.RICH_TEXT
        assert FieldKind.from_schema_type("relationship") == FieldKind.OPAQUE
        assert FieldKind.from_schema_type(None) == FieldKind.OPAQUE

    def test_with_schema_keeps_unknown(self):
        options = CollectionOptions(fields=["title", "body:rich_text"])
        resolved = options.with_schema([{"name": "title", "type": "upload"}])

        assert resolved.fields[0].kind == FieldKind.OPAQUE
        assert resolved.fields[1].kind == FieldKind.RICH_TEXT
        assert options.fields[0].kind == FieldKind.PLAIN_TEXT

    def test_with_schema_keeps_explicit_kind(self):
        options = CollectionOptions(fields=["content:rich_text", {"name": "alt", "kind": "opaque"}])
        resolved = options.with_schema([
            {"name": "content", "type": "json"},
            {"name": "alt", "type": "text"},
        ])

        assert resolved.fields[0].kind == FieldKind.RICH_TEXT
        assert resolved.fields[1].kind == FieldKind.OPAQUE

    def test_unknown_access_switch_ignored(self):
        access = CollectionAccess.model_validate({"translate": True, "generateAlt": True})

        assert access.translate is True
        assert "generateAlt" not in access.model_dump(by_alias=True)

    def test_settings_merge(self):
        request = TranslationSettings(formality="less", tag_handling="html")
        collection = TranslationSettings(formality="more")

        merged = request.merged_with(collection)

        assert merged.formality == "more"
        assert merged.tag_handling == "html"

    def test_locale_targets(self):
        locales = LocaleSet.parse("en,fr,de,es", "en")

        assert locales.targets("en") == ["fr", "de", "es"]
        assert locales.targets("fr") == ["en", "de", "es"]
        assert locales.targets("en", allow=["es", "it"]) == ["es"]

    def test_write_context_payload(self):
        echo = WriteContext.translation_echo()

        assert echo.to_payload() == {
            "intent": "translation_echo",
            "skipTranslate": True,
            "skipSlug": True,
        }
        assert WriteContext.from_payload(echo.to_payload()) == echo

    def test_foreign_skip_flag(self):
        context = WriteContext.from_payload({"skipTranslate": True})

        assert context.intent == PassIntent.TRANSLATION_ECHO
        assert context.suppresses_translation

    def test_only_user_edits_translate(self):
        assert not WriteContext.user_edit().suppresses_translation
        assert not WriteContext.from_payload(None).suppresses_translation
        assert WriteContext.bulk_reindex().suppresses_translation
