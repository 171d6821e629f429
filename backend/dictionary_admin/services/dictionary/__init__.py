from .errors import (
    DictionaryError,
    KeyConflictError,
    NotFoundError,
    PartialFailureError,
    StoreError,
    ValidationError,
)
from .models import (
    DictionaryItem,
    DictionaryItemId,
    ItemCorrelationKey,
    Language,
    TranslationMap,
    TreeEntry,
    new_correlation_key,
)
from .service import DictionaryTreeService
from .store import DictionaryStore

__all__ = [
    "DictionaryError",
    "DictionaryItem",
    "DictionaryItemId",
    "DictionaryStore",
    "DictionaryTreeService",
    "ItemCorrelationKey",
    "KeyConflictError",
    "Language",
    "NotFoundError",
    "PartialFailureError",
    "StoreError",
    "TranslationMap",
    "TreeEntry",
    "ValidationError",
    "new_correlation_key",
]
