from __future__ import annotations

from typing import Iterable, Optional

from dictionary_admin.infrastructure.database.dictionary_store import SqlDictionaryStore


def ensure_languages(
    store: SqlDictionaryStore,
    codes: Iterable[str],
    default_code: Optional[str] = None,
) -> None:
    """Register configured languages and make sure one of them is the default.

    Codes are used verbatim as translation keys, so only blanks and
    duplicates are dropped here.
    """
    target_codes: list[str] = []
    for code in codes:
        normalized = (code or "").strip()
        if normalized and normalized not in target_codes:
            target_codes.append(normalized)

    default_code = (default_code or "").strip() or None
    if default_code and default_code not in target_codes:
        target_codes.append(default_code)
    if not target_codes:
        return

    existing = store.list_languages()
    existing_codes = {language.code for language in existing}
    existing_default = next(
        (language.code for language in existing if language.is_default), None
    )

    for code in target_codes:
        if code in existing_codes:
            continue
        is_default = code == default_code and existing_default is None
        store.create_language(code=code, is_default=is_default)
        existing_codes.add(code)
        if is_default:
            existing_default = code

    if default_code and existing_default != default_code:
        store.set_default_language(default_code)
