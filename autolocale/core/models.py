"""
Core data models for the translator.

Field descriptors, translation settings, pass intents and the per-locale
report returned by a translation pass. Documents themselves stay plain
dicts; they belong to the storage layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autolocale.core.utils import generate_id, utc_now


# =============================================================================
# Field shapes
# =============================================================================


class FieldKind(str, Enum):
    """How a configured field is translated."""

    PLAIN_TEXT = "plain_text"  # Single gateway call, value replaced wholesale
    RICH_TEXT = "rich_text"    # Tree walk + one batch call
    OPAQUE = "opaque"          # Relations, uploads, locale-keyed objects

    @classmethod
    def from_schema_type(cls, field_type: str | None) -> FieldKind:
        """Map a collection schema field type to a translation kind."""
        if field_type in ("text", "textarea", "email", "code"):
            return cls.PLAIN_TEXT
        if field_type in ("richText", "rich_text"):
            return cls.RICH_TEXT
        return cls.OPAQUE


class FieldDescriptor(BaseModel):
    """A translatable field, with its shape fixed at configuration time."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind = FieldKind.PLAIN_TEXT

    @classmethod
    def parse(cls, value: str | dict[str, Any] | FieldDescriptor) -> FieldDescriptor:
        """
        Accept "title", "content:rich_text", {"name": ..., "kind": ...}
        or an existing descriptor.
        """
        if isinstance(value, FieldDescriptor):
            return value
        if isinstance(value, dict):
            return cls(**value)
        name, _, kind = value.partition(":")
        return cls(name=name, kind=FieldKind(kind)) if kind else cls(name=name)


# =============================================================================
# Translation settings
# =============================================================================


class TranslationSettings(BaseModel):
    """Vendor formatting options. Accepts snake_case and camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    formality: Literal["more", "less", "prefer_more", "prefer_less"] | None = None
    preserve_formatting: bool | None = Field(default=None, alias="preserveFormatting")
    tag_handling: Literal["xml", "html"] | None = Field(default=None, alias="tagHandling")
    split_sentences: Literal["0", "1", "nonewlines"] | None = Field(
        default=None, alias="splitSentences"
    )

    def merged_with(self, override: TranslationSettings | None) -> TranslationSettings:
        """Return a copy where every option set on `override` wins."""
        if override is None:
            return self
        updates = override.model_dump(exclude_none=True)
        return self.model_copy(update=updates)

    @classmethod
    def coerce(cls, value: TranslationSettings | dict[str, Any] | None) -> TranslationSettings:
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)


# =============================================================================
# Plugin options
# =============================================================================


class CollectionAccess(BaseModel):
    """Per-collection switches for the translation endpoints. Unknown switches are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    translate: bool | None = None


class CollectionOptions(BaseModel):
    """Translation options for one collection."""

    fields: list[FieldDescriptor] = Field(default_factory=list)
    settings: TranslationSettings | None = None
    access: CollectionAccess = Field(default_factory=CollectionAccess)

    @field_validator("fields", mode="before")
    @classmethod
    def _parse_fields(cls, value: Any) -> list[FieldDescriptor]:
        return [FieldDescriptor.parse(item) for item in value or []]

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def with_schema(self, schema_fields: list[dict[str, Any]]) -> CollectionOptions:
        """
        Resolve field kinds from a collection schema.

        Fields listed by bare name take the kind of the matching schema entry.
        Fields with an explicit kind, and names missing from the schema, keep
        their configured kind.
        """
        types = {f.get("name"): f.get("type") for f in schema_fields}
        resolved = [
            FieldDescriptor(name=f.name, kind=FieldKind.from_schema_type(types[f.name]))
            if f.name in types and "kind" not in f.model_fields_set
            else f
            for f in self.fields
        ]
        return self.model_copy(update={"fields": resolved})


class PluginOptions(BaseModel):
    """Top-level plugin configuration."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = True
    collections: dict[str, CollectionOptions] = Field(default_factory=dict)
    deepl_api_key: str | None = Field(default=None, alias="deeplApiKey")
    deepl_api_url: str | None = Field(default=None, alias="deeplApiUrl")
    fallback_locales: list[str] | None = Field(default=None, alias="fallbackLocales")


# =============================================================================
# Pass intents (write context)
# =============================================================================


class PassIntent(str, Enum):
    """Why a write happened. Carried on every write, never persisted."""

    USER_EDIT = "user_edit"
    TRANSLATION_ECHO = "translation_echo"  # Written by a translation pass
    BULK_REINDEX = "bulk_reindex"


@dataclass(frozen=True)
class WriteContext:
    """The context attached to a single storage write."""

    intent: PassIntent = PassIntent.USER_EDIT
    skip_translate: bool = False
    skip_slug: bool = False

    @classmethod
    def user_edit(cls) -> WriteContext:
        return cls()

    @classmethod
    def translation_echo(cls) -> WriteContext:
        return cls(intent=PassIntent.TRANSLATION_ECHO, skip_translate=True, skip_slug=True)

    @classmethod
    def bulk_reindex(cls) -> WriteContext:
        return cls(intent=PassIntent.BULK_REINDEX, skip_translate=True, skip_slug=True)

    @property
    def suppresses_translation(self) -> bool:
        # Only user edits start a pass
        return self.intent is not PassIntent.USER_EDIT or self.skip_translate

    def to_payload(self) -> dict[str, Any]:
        """Render the context bag handed to the storage API."""
        return {
            "intent": self.intent.value,
            "skipTranslate": self.skip_translate,
            "skipSlug": self.skip_slug,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> WriteContext:
        """Read a context bag, including bare `skipTranslate` flags from foreign writers."""
        if not payload:
            return cls()
        skip_translate = bool(payload.get("skipTranslate"))
        intent = payload.get("intent")
        if intent:
            intent = PassIntent(intent)
        elif skip_translate:
            intent = PassIntent.TRANSLATION_ECHO
        else:
            intent = PassIntent.USER_EDIT
        return cls(
            intent=intent,
            skip_translate=skip_translate,
            skip_slug=bool(payload.get("skipSlug")),
        )


# =============================================================================
# Locales
# =============================================================================


@dataclass(frozen=True)
class LocaleSet:
    """Ordered locale codes with one default (source) locale."""

    codes: tuple[str, ...]
    default: str

    def __post_init__(self):
        if self.default not in self.codes:
            object.__setattr__(self, "codes", (self.default, *self.codes))

    @classmethod
    def parse(cls, codes: str | list[str], default: str) -> LocaleSet:
        if isinstance(codes, str):
            codes = [c.strip() for c in codes.split(",") if c.strip()]
        return cls(codes=tuple(codes), default=default)

    def targets(self, source: str, allow: list[str] | None = None) -> list[str]:
        """Every configured locale except the source, intersected with `allow`."""
        return [
            code for code in self.codes
            if code != source and (allow is None or code in allow)
        ]


# =============================================================================
# Pass report
# =============================================================================


class LocaleStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class LocaleResult:
    """Outcome of one locale's task within a pass."""

    locale: str
    status: LocaleStatus
    translated_fields: list[str] = field(default_factory=list)
    failed_fields: list[str] = field(default_factory=list)
    skipped_fields: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "locale": self.locale,
            "status": self.status.value,
            "translatedFields": self.translated_fields,
            "failedFields": self.failed_fields,
            "skippedFields": self.skipped_fields,
            "error": self.error,
        }


@dataclass
class PassReport:
    """
    Per-locale summary of one translation pass.

    A pass never fails as a whole because of one locale; callers read
    `failed` to see which locales did not make it.
    """

    collection: str
    document_id: str | None
    source_locale: str | None
    results: list[LocaleResult] = field(default_factory=list)
    skipped_reason: str | None = None
    id: str = field(default_factory=lambda: generate_id("pass"))
    started_at: datetime = field(default_factory=utc_now)

    @classmethod
    def skipped(cls, collection: str, document_id: str | None, reason: str) -> PassReport:
        return cls(
            collection=collection,
            document_id=document_id,
            source_locale=None,
            skipped_reason=reason,
        )

    @property
    def was_skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def target_locales(self) -> list[str]:
        return [r.locale for r in self.results]

    @property
    def succeeded(self) -> list[str]:
        return [
            r.locale for r in self.results
            if r.status in (LocaleStatus.CREATED, LocaleStatus.UPDATED)
        ]

    @property
    def failed(self) -> list[str]:
        return [r.locale for r in self.results if r.status is LocaleStatus.FAILED]

    def get(self, locale: str) -> LocaleResult | None:
        for result in self.results:
            if result.locale == locale:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "collection": self.collection,
            "documentId": self.document_id,
            "sourceLocale": self.source_locale,
            "skippedReason": self.skipped_reason,
            "locales": [r.to_dict() for r in self.results],
        }


@dataclass
class BulkReport:
    """Outcome of translating a whole collection."""

    collection: str
    reports: list[PassReport] = field(default_factory=list)
    failed_documents: list[str] = field(default_factory=list)

    @property
    def translated(self) -> int:
        return sum(1 for r in self.reports if not r.was_skipped and not r.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "collection": self.collection,
            "total": len(self.reports) + len(self.failed_documents),
            "translated": self.translated,
            "failedDocuments": self.failed_documents,
            "reports": [r.to_dict() for r in self.reports],
        }
