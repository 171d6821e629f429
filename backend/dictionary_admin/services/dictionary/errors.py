from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


class DictionaryError(Exception):
    """Base class for dictionary tree failures."""


class NotFoundError(DictionaryError):
    def __init__(self, kind: str, ident: Any) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident!r} not found")


class ValidationError(DictionaryError):
    """Rejected input; ``message_key`` names a localizable message."""

    def __init__(
        self,
        message: str,
        *,
        message_key: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message_key = message_key
        self.params: Dict[str, Any] = dict(params or {})
        super().__init__(message)


class KeyConflictError(ValidationError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"Dictionary item with key {key!r} already exists",
            message_key="dictionaryItem/changeKeyError",
            params={"0": key},
        )


class PartialFailureError(DictionaryError):
    """Cascading delete stopped short; ``surviving_ids`` are still stored."""

    def __init__(
        self,
        item_id: int,
        surviving_ids: Sequence[int],
        errors: Optional[Mapping[int, BaseException]] = None,
    ) -> None:
        self.item_id = item_id
        self.surviving_ids = list(surviving_ids)
        self.errors: Dict[int, BaseException] = dict(errors or {})
        super().__init__(
            f"Delete of dictionary item {item_id} was partial; "
            f"surviving items: {self.surviving_ids}"
        )


class StoreError(DictionaryError):
    """The persistence layer failed for reasons opaque to the tree service."""
