from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

DEFAULT_CULTURE = "en"

# Placeholders use the %name% form, e.g. %0% for the first parameter.
TEXTS_EN: Dict[str, str] = {
    "dictionaryItem/changeKeyError": "The key '%0%' already exists.",
    "dictionaryItem/emptyKeyError": "Key can not be empty.",
    "dictionaryItem/notFound": "Dictionary item does not exist.",
    "dictionaryItem/loadError": "Something went wrong loading dictionary.",
    "dictionaryItem/createError": "Error creating dictionary item.",
    "dictionaryItem/saveError": "Something went wrong saving dictionary.",
    "dictionaryItem/deleteError": "Something went wrong deleting dictionary.",
    "dictionaryItem/partialDelete": "Dictionary item %0% was only partially deleted.",
    "speechBubbles/dictionaryItemSaved": "Dictionary item saved",
    "language/notFound": "Language '%0%' does not exist.",
    "language/emptyCodeError": "Language code can not be empty.",
    "language/alreadyExists": "Language '%0%' already exists.",
}

TEXTS_RU: Dict[str, str] = {
    "dictionaryItem/changeKeyError": "Ключ '%0%' уже существует.",
    "dictionaryItem/emptyKeyError": "Ключ не может быть пустым.",
    "dictionaryItem/notFound": "Элемент словаря не найден.",
    "dictionaryItem/loadError": "Не удалось загрузить словарь.",
    "dictionaryItem/createError": "Ошибка при создании элемента словаря.",
    "dictionaryItem/saveError": "Не удалось сохранить элемент словаря.",
    "dictionaryItem/deleteError": "Не удалось удалить элемент словаря.",
    "dictionaryItem/partialDelete": "Элемент словаря %0% удалён не полностью.",
    "speechBubbles/dictionaryItemSaved": "Элемент словаря сохранён",
    "language/notFound": "Язык '%0%' не найден.",
    "language/emptyCodeError": "Код языка не может быть пустым.",
    "language/alreadyExists": "Язык '%0%' уже существует.",
}

TEXTS_DE: Dict[str, str] = {
    "dictionaryItem/changeKeyError": "Der Schlüssel '%0%' existiert bereits.",
    "dictionaryItem/emptyKeyError": "Der Schlüssel darf nicht leer sein.",
    "dictionaryItem/notFound": "Wörterbucheintrag existiert nicht.",
    "speechBubbles/dictionaryItemSaved": "Wörterbucheintrag gespeichert",
    "language/notFound": "Sprache '%0%' existiert nicht.",
}

TEXTS: Dict[str, Dict[str, str]] = {
    "en": TEXTS_EN,
    "ru": TEXTS_RU,
    "de": TEXTS_DE,
}


def parse_accept_language(header: Optional[str]) -> List[str]:
    """Return culture candidates from an Accept-Language header, best first."""
    if not header:
        return []
    weighted: List[tuple[float, int, str]] = []
    for position, part in enumerate(header.split(",")):
        tag, _, params = part.strip().partition(";")
        tag = tag.strip().lower()
        if not tag or tag == "*":
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        weighted.append((-quality, position, tag))
    weighted.sort()
    return [tag for _, _, tag in weighted]


def resolve_culture(
    *candidates: Optional[str],
    supported: Iterable[str] = TEXTS.keys(),
    default: str = DEFAULT_CULTURE,
) -> str:
    allowed = {code.lower() for code in supported}
    for candidate in candidates:
        if not candidate:
            continue
        normalized = candidate.lower()
        if normalized in allowed:
            return normalized
        primary = normalized.split("-", 1)[0]
        if primary in allowed:
            return primary
    return default


def get_text(key: str, culture: Optional[str], params: Optional[Dict[str, Any]] = None) -> str:
    language = (culture or DEFAULT_CULTURE).lower()
    text = (
        TEXTS.get(language, {}).get(key)
        or TEXTS.get(language.split("-", 1)[0], {}).get(key)
        or TEXTS[DEFAULT_CULTURE].get(key)
        or key
    )
    for name, value in (params or {}).items():
        text = text.replace(f"%{name}%", str(value))
    return text
