from enum import Enum


class DictionaryStoreAction(str, Enum):
    GET_BY_ID = "get_by_id"
    GET_BY_KEY = "get_by_key"
    CHILDREN_OF = "children_of"
    DESCENDANTS_OF = "descendants_of"
    LIST_ALL = "list_all"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GET_LANGUAGE = "get_language"
    GET_DEFAULT_LANGUAGE = "get_default_language"
    LIST_LANGUAGES = "list_languages"
    CREATE_LANGUAGE = "create_language"
    SET_DEFAULT_LANGUAGE = "set_default_language"


# Writes are logged at INFO; reads stay at DEBUG.
WRITE_ACTIONS = frozenset(
    {
        DictionaryStoreAction.CREATE,
        DictionaryStoreAction.UPDATE,
        DictionaryStoreAction.DELETE,
        DictionaryStoreAction.CREATE_LANGUAGE,
        DictionaryStoreAction.SET_DEFAULT_LANGUAGE,
    }
)
