"""
Storage abstractions.

Integration point:
- DocumentStore -> the host CMS local API (find/update/create per locale)
"""

from autolocale.storage.base import DocumentStore, DocumentStatus
from autolocale.storage.local import InMemoryDocumentStore

__all__ = [
    "DocumentStore",
    "DocumentStatus",
    "InMemoryDocumentStore",
]
