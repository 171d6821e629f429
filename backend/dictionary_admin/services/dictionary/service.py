from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple

from .errors import (
    KeyConflictError,
    NotFoundError,
    PartialFailureError,
    StoreError,
    ValidationError,
)
from .locks import KeyedLocks, SubtreeGate
from .models import (
    DictionaryItem,
    DictionaryItemId,
    ItemCorrelationKey,
    Language,
    TranslationMap,
    TreeEntry,
)
from .store import DictionaryStore
from .tree import collect_descendants, walk_preorder

TranslationPair = Tuple[str, str]


class DictionaryTreeService:
    """Validation and orchestration on top of a ``DictionaryStore``.

    Holds no tree state between calls; every operation reads the store
    afresh. Key uniqueness is enforced by the store and, within this process,
    by a per-key critical section around each check-then-write. Cascading
    deletes hold the subtree gate exclusively so creates cannot attach new
    children to a subtree being removed.
    """

    def __init__(
        self,
        store: DictionaryStore,
        *,
        key_locks: Optional[KeyedLocks] = None,
        gate: Optional[SubtreeGate] = None,
    ) -> None:
        self._store = store
        self._key_locks = key_locks or KeyedLocks()
        self._gate = gate or SubtreeGate()

    def get(self, item_id: DictionaryItemId) -> DictionaryItem:
        return self._require_item(item_id)

    def create(
        self,
        key: str,
        parent_id: Optional[int] = None,
        initial_translation: Optional[str] = None,
    ) -> DictionaryItem:
        key = _require_key(key)
        with self._gate.shared(), self._key_locks.hold(key):
            self._ensure_key_available(key)
            parent_key: Optional[ItemCorrelationKey] = None
            if parent_id is not None and parent_id > 0:
                parent_key = self._require_item(DictionaryItemId(parent_id)).correlation_key
            translations = TranslationMap()
            if initial_translation is not None:
                default_language = self._store.get_default_language()
                if default_language is not None:
                    translations = translations.upsert(default_language.code, initial_translation)
            return self._store.create(
                key=key,
                parent_key=parent_key,
                translations=translations,
            )

    def rename(self, item_id: DictionaryItemId, new_key: str) -> DictionaryItem:
        return self.save(item_id, new_key=new_key)

    def upsert_translation(
        self,
        item_id: DictionaryItemId,
        language_id: str,
        text: str,
    ) -> DictionaryItem:
        return self.save(item_id, translations=[(language_id, text)])

    def upsert_translations(
        self,
        item_id: DictionaryItemId,
        pairs: Iterable[TranslationPair],
    ) -> DictionaryItem:
        return self.save(item_id, translations=pairs)

    def save(
        self,
        item_id: DictionaryItemId,
        *,
        new_key: Optional[str] = None,
        translations: Iterable[TranslationPair] = (),
    ) -> DictionaryItem:
        """Rename and/or upsert translations, persisting the item once.

        Every language is resolved and the new key validated before anything
        is written, so a failure leaves the stored item untouched. Only the
        given translations are written, and the key only when it changes.
        """
        pairs = list(translations)
        with self._gate.shared():
            item = self._require_item(item_id)
            self._require_languages(language for language, _ in pairs)
            renaming = new_key is not None and new_key != item.key
            if not renaming and not pairs:
                return item
            changes = TranslationMap().merged(pairs)
            if not renaming:
                return self._store.update(item.id, translations=changes)
            key = _require_key(new_key)
            with self._key_locks.hold(key):
                self._ensure_key_available(key, owner_id=item.id)
                return self._store.update(item.id, key=key, translations=changes)

    def delete(self, item_id: DictionaryItemId, actor_id: Optional[str] = None) -> None:
        """Delete an item and its whole subtree, children before parents.

        A failing store delete does not stop the walk; items whose removal
        would orphan a survivor are kept, and the survivors are reported
        through ``PartialFailureError``. When nothing could be removed the
        first ``StoreError`` is raised as is.
        """
        with self._gate.exclusive():
            root = self._require_item(item_id)
            doomed = collect_descendants(root, self._store.children_of)

            errors: Dict[int, StoreError] = {}
            deleted = 0
            surviving: List[int] = []
            pinned: Set[ItemCorrelationKey] = set()
            for item in doomed:
                if item.correlation_key not in pinned:
                    try:
                        self._store.delete(item, actor_id=actor_id)
                        deleted += 1
                        continue
                    except StoreError as exc:
                        errors[item.id] = exc
                surviving.append(item.id)
                if item.parent_key is not None:
                    pinned.add(item.parent_key)

            if not deleted:
                raise next(iter(errors.values()))
            if not surviving:
                leftovers = self._store.descendants_of(root.correlation_key)
                surviving = [item.id for item in leftovers]
            if surviving:
                raise PartialFailureError(root.id, surviving, errors)

    def list_tree(self) -> List[TreeEntry]:
        return walk_preorder(self._store.list_all())

    def list_languages(self) -> List[Language]:
        return self._store.list_languages()

    def add_language(self, code: str, is_default: bool = False) -> Language:
        if not code or not code.strip():
            raise ValidationError(
                "Language code can not be empty.",
                message_key="language/emptyCodeError",
            )
        if self._store.get_language(code) is not None:
            raise ValidationError(
                f"Language {code!r} already exists",
                message_key="language/alreadyExists",
                params={"0": code},
            )
        return self._store.create_language(code=code, is_default=is_default)

    def _require_item(self, item_id: DictionaryItemId) -> DictionaryItem:
        item = self._store.get_by_id(item_id)
        if item is None:
            raise NotFoundError("dictionary item", item_id)
        return item

    def _require_languages(self, codes: Iterable[str]) -> None:
        for code in dict.fromkeys(codes):
            if self._store.get_language(code) is None:
                raise NotFoundError("language", code)

    def _ensure_key_available(
        self,
        key: str,
        owner_id: Optional[DictionaryItemId] = None,
    ) -> None:
        existing = self._store.get_by_key(key)
        if existing is not None and existing.id != owner_id:
            raise KeyConflictError(key)


def _require_key(key: Optional[str]) -> str:
    if not key or not key.strip():
        raise ValidationError(
            "Key can not be empty.",
            message_key="dictionaryItem/emptyKeyError",
        )
    return key
