from contextlib import contextmanager
from typing import Iterator, List, Optional
from uuid import UUID
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from dictionary_admin.config import settings
from dictionary_admin.database import SessionLocal, engine
from dictionary_admin.infrastructure.database.dictionary_store import SqlDictionaryStore
from dictionary_admin.infrastructure.database.tables import bootstrap_database
from dictionary_admin.services.dictionary import (
    DictionaryItem,
    DictionaryItemId,
    DictionaryTreeService,
    Language,
    NotFoundError,
    PartialFailureError,
    ValidationError,
)
from dictionary_admin.services.i18n.bootstrap import ensure_languages
from dictionary_admin.services.i18n.localization import (
    get_text,
    parse_accept_language,
    resolve_culture,
)


class DictionaryTranslationOut(BaseModel):
    language: str
    translation: str


class NotificationOut(BaseModel):
    header: str
    message: str = ""
    style: str = "success"


class DictionaryDisplay(BaseModel):
    id: int
    key: str
    correlation_key: UUID
    parent_key: Optional[UUID] = None
    translations: List[DictionaryTranslationOut]
    notifications: List[NotificationOut] = Field(default_factory=list)


class DictionaryOverviewTranslation(BaseModel):
    language: str
    has_translation: bool


class DictionaryOverviewOut(BaseModel):
    id: int
    key: str
    level: int
    translations: List[DictionaryOverviewTranslation]


class DictionaryTranslationIn(BaseModel):
    language: str = Field(..., min_length=1, description="Language code")
    translation: str = Field("", description="Translated phrase")


class DictionarySave(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str = Field(..., description="Dictionary item key")
    name_is_dirty: bool = Field(False, alias="nameIsDirty")
    translations: List[DictionaryTranslationIn] = Field(default_factory=list)


class LanguageOut(BaseModel):
    id: int
    code: str
    is_default: bool


class LanguageCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    is_default: bool = False


app = FastAPI(title="Dictionary Admin API")
logger = logging.getLogger(__name__)
_store = SqlDictionaryStore(SessionLocal)
_service = DictionaryTreeService(_store)


@app.on_event("startup")
def on_startup() -> None:
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    bootstrap_database(engine)
    ensure_languages(
        _store,
        settings.default_languages,
        default_code=settings.default_language,
    )
    logger.info(
        "Dictionary admin started: languages=%s default=%s",
        settings.default_languages,
        settings.default_language,
    )


cors_origins = list(settings.cors_origins or [])
allow_all_origins = "*" in cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else cors_origins,
    allow_credentials=not allow_all_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def dictionary_service_dependency() -> DictionaryTreeService:
    return _service


def culture_dependency(
    accept_language: Optional[str] = Header(None),
) -> str:
    return resolve_culture(
        *parse_accept_language(accept_language),
        supported=settings.supported_cultures,
        default=settings.default_culture,
    )


def actor_dependency(
    x_actor_id: Optional[str] = Header(None),
) -> Optional[str]:
    actor = (x_actor_id or "").strip()
    return actor or None


@contextmanager
def _dictionary_errors(culture: str, failure_key: str) -> Iterator[None]:
    try:
        yield
    except NotFoundError as exc:
        if exc.kind == "language":
            detail = get_text("language/notFound", culture, {"0": exc.ident})
        else:
            detail = get_text("dictionaryItem/notFound", culture)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail) from None
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=get_text(exc.message_key, culture, exc.params),
        ) from None
    except PartialFailureError as exc:
        logger.error(
            "Partial delete of dictionary item %s, surviving=%s",
            exc.item_id,
            exc.surviving_ids,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": get_text("dictionaryItem/partialDelete", culture, {"0": exc.item_id}),
                "surviving_ids": exc.surviving_ids,
            },
        ) from None
    except Exception:
        logger.exception("Dictionary operation failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=get_text(failure_key, culture),
        ) from None


def _to_display(item: DictionaryItem, languages: List[Language]) -> DictionaryDisplay:
    return DictionaryDisplay(
        id=item.id,
        key=item.key,
        correlation_key=item.correlation_key,
        parent_key=item.parent_key,
        translations=[
            DictionaryTranslationOut(
                language=language.code,
                translation=item.translations.get(language.code, ""),
            )
            for language in languages
        ],
    )


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/admin/dictionary", response_model=List[DictionaryOverviewOut])
def list_dictionary(
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
) -> List[DictionaryOverviewOut]:
    with _dictionary_errors(culture, "dictionaryItem/loadError"):
        entries = service.list_tree()
        languages = service.list_languages()
    return [
        DictionaryOverviewOut(
            id=entry.item.id,
            key=entry.item.key,
            level=entry.depth,
            translations=[
                DictionaryOverviewTranslation(
                    language=language.code,
                    has_translation=bool(entry.item.translations.get(language.code)),
                )
                for language in languages
            ],
        )
        for entry in entries
    ]


@app.get("/admin/dictionary/{item_id}", response_model=DictionaryDisplay)
def get_dictionary_item(
    item_id: int,
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
) -> DictionaryDisplay:
    with _dictionary_errors(culture, "dictionaryItem/loadError"):
        item = service.get(DictionaryItemId(item_id))
        languages = service.list_languages()
    return _to_display(item, languages)


@app.post(
    "/admin/dictionary",
    response_model=int,
    status_code=status.HTTP_201_CREATED,
)
def create_dictionary_item(
    key: str = Query(..., description="Dictionary item key"),
    parent_id: int = Query(0, description="Parent item id, 0 for a root item"),
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
) -> int:
    with _dictionary_errors(culture, "dictionaryItem/createError"):
        item = service.create(key, parent_id, initial_translation="")
    logger.info("Created dictionary item %s (%s) under %s", item.id, key, parent_id)
    return item.id


@app.post("/admin/dictionary/save", response_model=DictionaryDisplay)
def save_dictionary_item(
    payload: DictionarySave,
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
) -> DictionaryDisplay:
    with _dictionary_errors(culture, "dictionaryItem/saveError"):
        item = service.save(
            DictionaryItemId(payload.id),
            new_key=payload.name if payload.name_is_dirty else None,
            translations=[
                (translation.language, translation.translation)
                for translation in payload.translations
            ],
        )
        languages = service.list_languages()
    model = _to_display(item, languages)
    model.notifications.append(
        NotificationOut(header=get_text("speechBubbles/dictionaryItemSaved", culture))
    )
    return model


@app.delete(
    "/admin/dictionary/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_dictionary_item(
    item_id: int,
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
    actor_id: Optional[str] = Depends(actor_dependency),
) -> None:
    with _dictionary_errors(culture, "dictionaryItem/deleteError"):
        service.delete(DictionaryItemId(item_id), actor_id=actor_id)


@app.get("/admin/languages", response_model=List[LanguageOut])
def list_languages(
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
) -> List[LanguageOut]:
    with _dictionary_errors(culture, "dictionaryItem/loadError"):
        languages = service.list_languages()
    return [LanguageOut(id=language.id, code=language.code, is_default=language.is_default) for language in languages]


@app.post(
    "/admin/languages",
    response_model=LanguageOut,
    status_code=status.HTTP_201_CREATED,
)
def create_language(
    payload: LanguageCreate,
    service: DictionaryTreeService = Depends(dictionary_service_dependency),
    culture: str = Depends(culture_dependency),
) -> LanguageOut:
    with _dictionary_errors(culture, "dictionaryItem/saveError"):
        language = service.add_language(payload.code, is_default=payload.is_default)
    return LanguageOut(id=language.id, code=language.code, is_default=language.is_default)
