from __future__ import annotations

import pytest

from dictionary_admin.infrastructure.database.dictionary_store import SqlDictionaryStore
from dictionary_admin.services.dictionary import (
    KeyConflictError,
    NotFoundError,
    TranslationMap,
    ValidationError,
    new_correlation_key,
)


def test_unique_index_rejects_duplicate_key(store: SqlDictionaryStore) -> None:
    store.create(key="Greeting", parent_key=None, translations=TranslationMap())

    with pytest.raises(KeyConflictError) as exc_info:
        store.create(key="Greeting", parent_key=None, translations=TranslationMap())

    assert exc_info.value.key == "Greeting"
    assert len(store.list_all()) == 1


def test_update_onto_taken_key_conflicts(store: SqlDictionaryStore) -> None:
    first = store.create(key="First", parent_key=None, translations=TranslationMap())
    store.create(key="Second", parent_key=None, translations=TranslationMap())

    with pytest.raises(KeyConflictError):
        store.update(first.id, key="Second")

    assert store.get_by_id(first.id).key == "First"


def test_create_under_unknown_parent_is_not_found(store: SqlDictionaryStore) -> None:
    with pytest.raises(NotFoundError):
        store.create(key="Child", parent_key=new_correlation_key(), translations=TranslationMap())

    assert store.list_all() == []


def test_update_upserts_only_given_translations(store: SqlDictionaryStore) -> None:
    item = store.create(
        key="Key",
        parent_key=None,
        translations=TranslationMap({"en": "Hello", "ru": "Привет"}),
    )

    updated = store.update(item.id, translations={"en": "Hi"})

    assert updated.key == "Key"
    assert dict(updated.translations) == {"en": "Hi", "ru": "Привет"}
    assert store.get_by_id(item.id) == updated


def test_update_leaves_parent_link_alone(store: SqlDictionaryStore) -> None:
    root = store.create(key="root", parent_key=None, translations=TranslationMap())
    child = store.create(key="child", parent_key=root.correlation_key, translations=TranslationMap())

    renamed = store.update(child.id, key="child.renamed")

    assert renamed.parent_key == root.correlation_key


def test_update_missing_item(store: SqlDictionaryStore) -> None:
    with pytest.raises(NotFoundError):
        store.update(404, key="Anything")
    with pytest.raises(NotFoundError):
        store.update(404, translations={"en": "x"})


def test_lookup_by_key_and_children(store: SqlDictionaryStore) -> None:
    root = store.create(key="root", parent_key=None, translations=TranslationMap())
    store.create(key="b", parent_key=root.correlation_key, translations=TranslationMap())
    store.create(key="a", parent_key=root.correlation_key, translations=TranslationMap())

    assert store.get_by_key("root") == root
    assert store.get_by_key("missing") is None
    assert [item.key for item in store.children_of(root.correlation_key)] == ["a", "b"]


def test_descendants_of_walks_all_levels(store: SqlDictionaryStore) -> None:
    root = store.create(key="root", parent_key=None, translations=TranslationMap())
    child = store.create(key="child", parent_key=root.correlation_key, translations=TranslationMap())
    leaf = store.create(
        key="leaf",
        parent_key=child.correlation_key,
        translations=TranslationMap({"en": "x"}),
    )
    store.create(key="other", parent_key=None, translations=TranslationMap())

    descendants = store.descendants_of(root.correlation_key)

    assert {item.id for item in descendants} == {child.id, leaf.id}
    assert store.descendants_of(leaf.correlation_key) == []


def test_list_all_includes_translations(store: SqlDictionaryStore) -> None:
    store.create(key="a", parent_key=None, translations=TranslationMap({"en": "A", "ru": "А"}))
    store.create(key="b", parent_key=None, translations=TranslationMap())

    items = {item.key: item for item in store.list_all()}

    assert dict(items["a"].translations) == {"en": "A", "ru": "А"}
    assert len(items["b"].translations) == 0


def test_delete_removes_item_and_translations(store: SqlDictionaryStore) -> None:
    item = store.create(key="gone", parent_key=None, translations=TranslationMap({"en": "x"}))

    store.delete(item, actor_id="admin")

    assert store.get_by_id(item.id) is None
    assert store.list_all() == []


def test_languages_registry(store: SqlDictionaryStore) -> None:
    assert [language.code for language in store.list_languages()] == ["en", "ru"]
    assert store.get_default_language().code == "en"
    assert store.get_language("de") is None

    store.create_language(code="de", is_default=True)

    assert store.get_default_language().code == "de"
    assert not store.get_language("en").is_default


def test_duplicate_language_is_rejected(store: SqlDictionaryStore) -> None:
    with pytest.raises(ValidationError) as exc_info:
        store.create_language(code="en")

    assert exc_info.value.message_key == "language/alreadyExists"


def test_set_default_language(store: SqlDictionaryStore) -> None:
    store.set_default_language("ru")

    assert store.get_default_language().code == "ru"
    with pytest.raises(NotFoundError):
        store.set_default_language("xx")
