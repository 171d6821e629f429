from __future__ import annotations

from typing import List, Mapping, Optional, Protocol

from .models import (
    DictionaryItem,
    DictionaryItemId,
    ItemCorrelationKey,
    Language,
    TranslationMap,
)


class DictionaryStore(Protocol):
    """Durable storage consumed by the tree service.

    Every call is its own transaction. Implementations must reject a second
    item with an existing key by raising ``KeyConflictError`` and wrap other
    persistence failures in ``StoreError``. ``update`` writes the key only
    when one is given, upserts the given translations and never touches the
    parent link.
    """

    def get_by_id(self, item_id: DictionaryItemId) -> Optional[DictionaryItem]: ...

    def get_by_key(self, key: str) -> Optional[DictionaryItem]: ...

    def children_of(self, parent_key: ItemCorrelationKey) -> List[DictionaryItem]: ...

    def descendants_of(self, parent_key: ItemCorrelationKey) -> List[DictionaryItem]: ...

    def list_all(self) -> List[DictionaryItem]: ...

    def create(
        self,
        *,
        key: str,
        parent_key: Optional[ItemCorrelationKey],
        translations: TranslationMap,
    ) -> DictionaryItem: ...

    def update(
        self,
        item_id: DictionaryItemId,
        *,
        key: Optional[str] = None,
        translations: Optional[Mapping[str, str]] = None,
    ) -> DictionaryItem: ...

    def delete(self, item: DictionaryItem, actor_id: Optional[str] = None) -> None: ...

    def get_language(self, code: str) -> Optional[Language]: ...

    def get_default_language(self) -> Optional[Language]: ...

    def list_languages(self) -> List[Language]: ...

    def create_language(self, *, code: str, is_default: bool = False) -> Language: ...
