from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, NewType, Optional, Tuple

# Primary identifier used for CRUD addressing, assigned by the store.
DictionaryItemId = NewType("DictionaryItemId", int)
# Stable token used only for parent/child linkage across environments.
ItemCorrelationKey = NewType("ItemCorrelationKey", uuid.UUID)


def new_correlation_key() -> ItemCorrelationKey:
    return ItemCorrelationKey(uuid.uuid4())


class TranslationMap(Mapping):
    """Language code -> translated text for a single dictionary item.

    Immutable: ``upsert`` and ``merged`` return new maps. A language appears
    at most once, so re-adding it overwrites the previous text.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, str] | Iterable[Tuple[str, str]]] = None) -> None:
        self._entries: Dict[str, str] = dict(entries or {})

    def __getitem__(self, language: str) -> str:
        return self._entries[language]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TranslationMap({self._entries!r})"

    def upsert(self, language: str, text: str) -> TranslationMap:
        return self.merged([(language, text)])

    def merged(self, pairs: Iterable[Tuple[str, str]]) -> TranslationMap:
        entries = dict(self._entries)
        for language, text in pairs:
            entries[language] = text
        return TranslationMap(entries)


@dataclass(frozen=True, slots=True)
class DictionaryItem:
    id: DictionaryItemId
    correlation_key: ItemCorrelationKey
    key: str
    parent_key: Optional[ItemCorrelationKey] = None
    translations: TranslationMap = field(default_factory=TranslationMap)

    @property
    def is_root(self) -> bool:
        return self.parent_key is None


@dataclass(frozen=True, slots=True)
class Language:
    id: int
    code: str
    is_default: bool = False


@dataclass(frozen=True, slots=True)
class TreeEntry:
    item: DictionaryItem
    depth: int
