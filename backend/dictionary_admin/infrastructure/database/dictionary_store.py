import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dictionary_admin.database import get_session
from dictionary_admin.infrastructure.database.enums import (
    WRITE_ACTIONS,
    DictionaryStoreAction,
)
from dictionary_admin.infrastructure.database.tables import (
    dictionary_items_table,
    dictionary_translations_table,
    languages_table,
)
from dictionary_admin.services.dictionary import (
    DictionaryError,
    DictionaryItem,
    DictionaryItemId,
    ItemCorrelationKey,
    KeyConflictError,
    Language,
    NotFoundError,
    StoreError,
    TranslationMap,
    ValidationError,
    new_correlation_key,
)

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = (
    dictionary_items_table.c.id,
    dictionary_items_table.c.correlation_key,
    dictionary_items_table.c.key,
    dictionary_items_table.c.parent_key,
)
_LANGUAGE_COLUMNS = (
    languages_table.c.id,
    languages_table.c.code,
    languages_table.c.is_default,
)

ErrorFactory = Callable[[], DictionaryError]


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate key" in text


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    return "foreign key" in str(exc.orig).lower()


def _item_from_row(
    row: Mapping[str, Any],
    translations: Optional[Mapping[str, str]] = None,
) -> DictionaryItem:
    parent_key = row["parent_key"]
    return DictionaryItem(
        id=DictionaryItemId(row["id"]),
        correlation_key=ItemCorrelationKey(row["correlation_key"]),
        key=row["key"],
        parent_key=ItemCorrelationKey(parent_key) if parent_key is not None else None,
        translations=TranslationMap(translations),
    )


def _language_from_row(row: Mapping[str, Any]) -> Language:
    return Language(id=row["id"], code=row["code"], is_default=bool(row["is_default"]))


class SqlDictionaryStore:
    """Dictionary tree storage on SQLAlchemy Core.

    Each public method runs in its own session/transaction. The unique
    constraint on ``dictionary_items.key`` is the final arbiter of key
    uniqueness; violations surface as ``KeyConflictError``.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None) -> None:
        self._session_factory = session_factory

    def get_by_id(self, item_id: DictionaryItemId) -> Optional[DictionaryItem]:
        with self._transaction() as session:
            row = session.execute(
                select(*_ITEM_COLUMNS).where(dictionary_items_table.c.id == item_id)
            ).mappings().one_or_none()
            items = self._hydrate(session, [row] if row else [])
        item = items[0] if items else None
        self._log(DictionaryStoreAction.GET_BY_ID, item_id=item_id, exists=item is not None)
        return item

    def get_by_key(self, key: str) -> Optional[DictionaryItem]:
        with self._transaction() as session:
            row = session.execute(
                select(*_ITEM_COLUMNS).where(dictionary_items_table.c.key == key)
            ).mappings().one_or_none()
            items = self._hydrate(session, [row] if row else [])
        item = items[0] if items else None
        self._log(DictionaryStoreAction.GET_BY_KEY, key=key, exists=item is not None)
        return item

    def children_of(self, parent_key: ItemCorrelationKey) -> List[DictionaryItem]:
        with self._transaction() as session:
            rows = session.execute(
                select(*_ITEM_COLUMNS)
                .where(dictionary_items_table.c.parent_key == parent_key)
                .order_by(dictionary_items_table.c.key)
            ).mappings().all()
            items = self._hydrate(session, rows)
        self._log(DictionaryStoreAction.CHILDREN_OF, parent_key=parent_key, count=len(items))
        return items

    def descendants_of(self, parent_key: ItemCorrelationKey) -> List[DictionaryItem]:
        descendants = (
            select(
                dictionary_items_table.c.id,
                dictionary_items_table.c.correlation_key,
            )
            .where(dictionary_items_table.c.parent_key == parent_key)
            .cte("descendants", recursive=True)
        )
        found = descendants.alias()
        child = dictionary_items_table.alias("child")
        # UNION (not UNION ALL) so a corrupt parent cycle still terminates.
        descendants = descendants.union(
            select(child.c.id, child.c.correlation_key).where(
                child.c.parent_key == found.c.correlation_key
            )
        )
        with self._transaction() as session:
            rows = session.execute(
                select(*_ITEM_COLUMNS)
                .where(dictionary_items_table.c.id.in_(select(descendants.c.id)))
                .order_by(dictionary_items_table.c.key)
            ).mappings().all()
            items = self._hydrate(session, rows)
        self._log(DictionaryStoreAction.DESCENDANTS_OF, parent_key=parent_key, count=len(items))
        return items

    def list_all(self) -> List[DictionaryItem]:
        # One statement, so items and translations come from the same snapshot.
        stmt = (
            select(
                *_ITEM_COLUMNS,
                dictionary_translations_table.c.language_code,
                dictionary_translations_table.c.value,
            )
            .select_from(
                dictionary_items_table.outerjoin(
                    dictionary_translations_table,
                    dictionary_translations_table.c.item_id == dictionary_items_table.c.id,
                )
            )
            .order_by(dictionary_items_table.c.id, dictionary_translations_table.c.id)
        )
        with self._transaction() as session:
            rows = session.execute(stmt).mappings().all()

        item_rows: Dict[int, Mapping[str, Any]] = {}
        translations: Dict[int, Dict[str, str]] = {}
        for row in rows:
            item_rows.setdefault(row["id"], row)
            entries = translations.setdefault(row["id"], {})
            if row["language_code"] is not None:
                entries[row["language_code"]] = row["value"]
        items = [_item_from_row(row, translations[item_id]) for item_id, row in item_rows.items()]
        self._log(DictionaryStoreAction.LIST_ALL, count=len(items))
        return items

    def create(
        self,
        *,
        key: str,
        parent_key: Optional[ItemCorrelationKey],
        translations: TranslationMap,
    ) -> DictionaryItem:
        correlation_key = new_correlation_key()
        with self._transaction(
            on_unique=lambda: KeyConflictError(key),
            on_foreign_key=lambda: NotFoundError("dictionary item", parent_key),
        ) as session:
            item_id = session.execute(
                insert(dictionary_items_table)
                .values(correlation_key=correlation_key, key=key, parent_key=parent_key)
                .returning(dictionary_items_table.c.id)
            ).scalar_one()
            for language, text in translations.items():
                session.execute(
                    insert(dictionary_translations_table).values(
                        item_id=item_id,
                        language_code=language,
                        value=text,
                    )
                )
        self._log(
            DictionaryStoreAction.CREATE,
            item_id=item_id,
            key=key,
            parent_key=parent_key,
        )
        return DictionaryItem(
            id=DictionaryItemId(item_id),
            correlation_key=correlation_key,
            key=key,
            parent_key=parent_key,
            translations=translations,
        )

    def update(
        self,
        item_id: DictionaryItemId,
        *,
        key: Optional[str] = None,
        translations: Optional[Mapping[str, str]] = None,
    ) -> DictionaryItem:
        with self._transaction(
            on_unique=(lambda: KeyConflictError(key)) if key is not None else None,
            on_foreign_key=lambda: NotFoundError("dictionary item", item_id),
        ) as session:
            if key is not None:
                result = session.execute(
                    update(dictionary_items_table)
                    .where(dictionary_items_table.c.id == item_id)
                    .values(key=key)
                )
                if result.rowcount == 0:
                    raise NotFoundError("dictionary item", item_id)
            existing: Dict[str, int] = {
                row.language_code: row.id
                for row in session.execute(
                    select(
                        dictionary_translations_table.c.language_code,
                        dictionary_translations_table.c.id,
                    ).where(dictionary_translations_table.c.item_id == item_id)
                )
            }
            for language, text in (translations or {}).items():
                translation_id = existing.get(language)
                if translation_id is None:
                    session.execute(
                        insert(dictionary_translations_table).values(
                            item_id=item_id,
                            language_code=language,
                            value=text,
                        )
                    )
                else:
                    session.execute(
                        update(dictionary_translations_table)
                        .where(dictionary_translations_table.c.id == translation_id)
                        .values(value=text)
                    )
            row = session.execute(
                select(*_ITEM_COLUMNS).where(dictionary_items_table.c.id == item_id)
            ).mappings().one_or_none()
            if row is None:
                raise NotFoundError("dictionary item", item_id)
            item = self._hydrate(session, [row])[0]
        self._log(
            DictionaryStoreAction.UPDATE,
            item_id=item_id,
            key=key,
            languages=sorted(translations or {}),
        )
        return item

    def delete(self, item: DictionaryItem, actor_id: Optional[str] = None) -> None:
        with self._transaction() as session:
            session.execute(
                delete(dictionary_translations_table).where(
                    dictionary_translations_table.c.item_id == item.id
                )
            )
            session.execute(
                delete(dictionary_items_table).where(dictionary_items_table.c.id == item.id)
            )
        self._log(
            DictionaryStoreAction.DELETE,
            item_id=item.id,
            key=item.key,
            actor_id=actor_id,
        )

    def get_language(self, code: str) -> Optional[Language]:
        with self._transaction() as session:
            row = session.execute(
                select(*_LANGUAGE_COLUMNS).where(languages_table.c.code == code)
            ).mappings().one_or_none()
        self._log(DictionaryStoreAction.GET_LANGUAGE, code=code, exists=row is not None)
        return _language_from_row(row) if row else None

    def get_default_language(self) -> Optional[Language]:
        with self._transaction() as session:
            row = session.execute(
                select(*_LANGUAGE_COLUMNS)
                .where(languages_table.c.is_default.is_(True))
                .order_by(languages_table.c.id)
                .limit(1)
            ).mappings().one_or_none()
        self._log(DictionaryStoreAction.GET_DEFAULT_LANGUAGE, exists=row is not None)
        return _language_from_row(row) if row else None

    def list_languages(self) -> List[Language]:
        with self._transaction() as session:
            rows = session.execute(
                select(*_LANGUAGE_COLUMNS).order_by(languages_table.c.code)
            ).mappings().all()
        self._log(DictionaryStoreAction.LIST_LANGUAGES, count=len(rows))
        return [_language_from_row(row) for row in rows]

    def create_language(self, *, code: str, is_default: bool = False) -> Language:
        with self._transaction(
            on_unique=lambda: ValidationError(
                f"Language {code!r} already exists",
                message_key="language/alreadyExists",
                params={"0": code},
            )
        ) as session:
            if is_default:
                session.execute(
                    update(languages_table)
                    .where(languages_table.c.is_default.is_(True))
                    .values(is_default=False)
                )
            row = session.execute(
                insert(languages_table)
                .values(code=code, is_default=is_default)
                .returning(*_LANGUAGE_COLUMNS)
            ).mappings().one()
        self._log(DictionaryStoreAction.CREATE_LANGUAGE, code=code, is_default=is_default)
        return _language_from_row(row)

    def set_default_language(self, code: str) -> None:
        with self._transaction() as session:
            session.execute(
                update(languages_table)
                .where(and_(languages_table.c.is_default.is_(True), languages_table.c.code != code))
                .values(is_default=False)
            )
            result = session.execute(
                update(languages_table)
                .where(languages_table.c.code == code)
                .values(is_default=True)
            )
            if result.rowcount == 0:
                raise NotFoundError("language", code)
        self._log(DictionaryStoreAction.SET_DEFAULT_LANGUAGE, code=code)

    @contextmanager
    def _transaction(
        self,
        *,
        on_unique: Optional[ErrorFactory] = None,
        on_foreign_key: Optional[ErrorFactory] = None,
    ) -> Iterator[Session]:
        try:
            with get_session(self._session_factory) as session:
                yield session
        except IntegrityError as exc:
            if on_unique is not None and _is_unique_violation(exc):
                raise on_unique() from exc
            if on_foreign_key is not None and _is_foreign_key_violation(exc):
                raise on_foreign_key() from exc
            raise StoreError(f"Integrity violation: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def _hydrate(
        self,
        session: Session,
        rows: Sequence[Mapping[str, Any]],
    ) -> List[DictionaryItem]:
        if not rows:
            return []
        translation_rows = session.execute(
            select(
                dictionary_translations_table.c.item_id,
                dictionary_translations_table.c.language_code,
                dictionary_translations_table.c.value,
            )
            .where(dictionary_translations_table.c.item_id.in_([row["id"] for row in rows]))
            .order_by(dictionary_translations_table.c.id)
        ).mappings().all()
        by_item: Dict[int, Dict[str, str]] = {}
        for row in translation_rows:
            by_item.setdefault(row["item_id"], {})[row["language_code"]] = row["value"]
        return [_item_from_row(row, by_item.get(row["id"])) for row in rows]

    def _log(self, action: DictionaryStoreAction, **context: Any) -> None:
        level = logging.INFO if action in WRITE_ACTIONS else logging.DEBUG
        if not logger.isEnabledFor(level):
            return
        details = " ".join(f"{name}={value!r}" for name, value in context.items())
        logger.log(level, "dictionary_store.%s %s", action.value, details)
