from __future__ import annotations

from dictionary_admin.infrastructure.database.dictionary_store import SqlDictionaryStore
from dictionary_admin.services.i18n.bootstrap import ensure_languages


def test_ensure_languages_creates_missing_and_default(session_factory) -> None:
    store = SqlDictionaryStore(session_factory)

    ensure_languages(store, ["en", " ru ", "", "en"], default_code="de")

    codes = {language.code: language.is_default for language in store.list_languages()}
    assert codes == {"de": True, "en": False, "ru": False}


def test_ensure_languages_moves_default(store: SqlDictionaryStore) -> None:
    ensure_languages(store, ["en", "ru"], default_code="ru")

    assert store.get_default_language().code == "ru"
    assert len(store.list_languages()) == 2


def test_ensure_languages_without_codes_is_noop(session_factory) -> None:
    store = SqlDictionaryStore(session_factory)

    ensure_languages(store, [], default_code=None)

    assert store.list_languages() == []
