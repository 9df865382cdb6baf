"""
Error taxonomy for the translator.

Gateway errors are recoverable per call site (the field keeps its source
value). Setup errors surface to the HTTP caller.
"""

from __future__ import annotations


class TranslatorError(Exception):
    """Base class for all translator errors."""
    pass


class ConfigurationError(TranslatorError):
    """Raised when the gateway cannot find a credential."""
    pass


# =============================================================================
# Gateway errors
# =============================================================================


class TranslationGatewayError(TranslatorError):
    """Base class for vendor call failures."""
    pass


class UpstreamError(TranslationGatewayError):
    """The vendor answered with a non-success status or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(TranslationGatewayError):
    """The vendor returned zero translations."""
    pass


class CountMismatchError(TranslationGatewayError):
    """The vendor returned a different number of translations than requested."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"Expected {expected} translations, got {received}")
        self.expected = expected
        self.received = received


# =============================================================================
# Request errors
# =============================================================================


class NotFoundError(TranslatorError):
    """The requested document does not exist."""
    pass


class AccessDeniedError(TranslatorError):
    """The access guard rejected the principal."""
    pass


class StructuralLimitError(TranslatorError):
    """A rich-text subtree is deeper than the walker allows."""

    def __init__(self, depth: int, max_depth: int):
        super().__init__(f"Depth {depth} exceeds ceiling {max_depth}")
        self.depth = depth
        self.max_depth = max_depth
