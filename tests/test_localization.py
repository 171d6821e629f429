from __future__ import annotations

from dictionary_admin.services.i18n.localization import (
    get_text,
    parse_accept_language,
    resolve_culture,
)


def test_get_text_replaces_placeholders() -> None:
    text = get_text("dictionaryItem/changeKeyError", "en", {"0": "greeting"})

    assert text == "The key 'greeting' already exists."


def test_get_text_falls_back_to_default_culture() -> None:
    assert get_text("dictionaryItem/createError", "de") == "Error creating dictionary item."
    assert get_text("speechBubbles/dictionaryItemSaved", "ru-RU") == "Элемент словаря сохранён"


def test_get_text_returns_key_when_unknown() -> None:
    assert get_text("missing/key", "en") == "missing/key"


def test_parse_accept_language_orders_by_quality() -> None:
    header = "en;q=0.5, ru-RU, de;q=0.8, *;q=0.1"

    assert parse_accept_language(header) == ["ru-ru", "de", "en"]
    assert parse_accept_language(None) == []


def test_resolve_culture_uses_primary_subtag_and_default() -> None:
    assert resolve_culture("ru-RU") == "ru"
    assert resolve_culture("fr", "DE") == "de"
    assert resolve_culture("fr", supported=["en"], default="en") == "en"
    assert resolve_culture(None, "") == "en"
