"""
Core types for the translator: models, errors and the change-hook dispatcher.
"""

from autolocale.core.errors import (
    TranslatorError,
    ConfigurationError,
    TranslationGatewayError,
    UpstreamError,
    EmptyResponseError,
    CountMismatchError,
    NotFoundError,
    AccessDeniedError,
    StructuralLimitError,
)
from autolocale.core.models import (
    FieldKind,
    FieldDescriptor,
    TranslationSettings,
    CollectionAccess,
    CollectionOptions,
    PluginOptions,
    PassIntent,
    WriteContext,
    LocaleSet,
    LocaleStatus,
    LocaleResult,
    PassReport,
    BulkReport,
)
from autolocale.core.events import (
    ChangeEvent,
    HookDispatcher,
    get_dispatcher,
    reset_dispatcher,
)

__all__ = [
    # Errors
    "TranslatorError",
    "ConfigurationError",
    "TranslationGatewayError",
    "UpstreamError",
    "EmptyResponseError",
    "CountMismatchError",
    "NotFoundError",
    "AccessDeniedError",
    "StructuralLimitError",
    # Models
    "FieldKind",
    "FieldDescriptor",
    "TranslationSettings",
    "CollectionAccess",
    "CollectionOptions",
    "PluginOptions",
    "PassIntent",
    "WriteContext",
    "LocaleSet",
    "LocaleStatus",
    "LocaleResult",
    "PassReport",
    "BulkReport",
    # Hooks
    "ChangeEvent",
    "HookDispatcher",
    "get_dispatcher",
    "reset_dispatcher",
]
