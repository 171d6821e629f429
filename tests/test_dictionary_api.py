from __future__ import annotations

from typing import Iterable, Optional

from fastapi.testclient import TestClient

from dictionary_admin.main import app, dictionary_service_dependency
from dictionary_admin.services.dictionary import (
    DictionaryItem,
    DictionaryTreeService,
    StoreError,
)


class BrokenDeleteStore:
    def __init__(self, store, failing_keys: Iterable[str]) -> None:
        self._store = store
        self._failing_keys = set(failing_keys)

    def __getattr__(self, name):
        return getattr(self._store, name)

    def delete(self, item: DictionaryItem, actor_id: Optional[str] = None) -> None:
        if item.key in self._failing_keys:
            raise StoreError("disk full")
        self._store.delete(item, actor_id=actor_id)


class BrokenListingStore(BrokenDeleteStore):
    def __init__(self, store) -> None:
        super().__init__(store, failing_keys=())

    def list_all(self):
        raise StoreError("connection lost")


def _create(client: TestClient, key: str, parent_id: int = 0) -> int:
    response = client.post("/admin/dictionary", params={"key": key, "parent_id": parent_id})
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_get_item(client: TestClient) -> None:
    item_id = _create(client, "Greeting")

    response = client.get(f"/admin/dictionary/{item_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == item_id
    assert body["key"] == "Greeting"
    assert body["parent_key"] is None
    assert body["translations"] == [
        {"language": "en", "translation": ""},
        {"language": "ru", "translation": ""},
    ]


def test_create_duplicate_returns_localized_conflict(client: TestClient) -> None:
    _create(client, "greeting")

    response = client.post(
        "/admin/dictionary",
        params={"key": "greeting"},
        headers={"Accept-Language": "ru-RU,ru;q=0.9"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Ключ 'greeting' уже существует."


def test_create_under_missing_parent(client: TestClient) -> None:
    response = client.post("/admin/dictionary", params={"key": "child", "parent_id": 999999})

    assert response.status_code == 404
    assert response.json()["detail"] == "Dictionary item does not exist."


def test_get_missing_item(client: TestClient) -> None:
    assert client.get("/admin/dictionary/404").status_code == 404


def test_overview_lists_tree_in_order(client: TestClient) -> None:
    zebra = _create(client, "zebra")
    apple = _create(client, "apple")
    _create(client, "child2", zebra)
    _create(client, "child1", apple)
    client.post(
        "/admin/dictionary/save",
        json={
            "id": apple,
            "name": "apple",
            "translations": [{"language": "ru", "translation": "яблоко"}],
        },
    )

    response = client.get("/admin/dictionary")

    assert response.status_code == 200
    overview = response.json()
    assert [(row["key"], row["level"]) for row in overview] == [
        ("apple", 0),
        ("child1", 1),
        ("zebra", 0),
        ("child2", 1),
    ]
    assert overview[0]["translations"] == [
        {"language": "en", "has_translation": False},
        {"language": "ru", "has_translation": True},
    ]


def test_save_renames_and_translates(client: TestClient) -> None:
    item_id = _create(client, "Draft")

    response = client.post(
        "/admin/dictionary/save",
        json={
            "id": item_id,
            "name": "Final",
            "nameIsDirty": True,
            "translations": [
                {"language": "en", "translation": "Final"},
                {"language": "ru", "translation": "Итог"},
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["key"] == "Final"
    assert {row["language"]: row["translation"] for row in body["translations"]} == {
        "en": "Final",
        "ru": "Итог",
    }
    assert body["notifications"][0]["header"] == "Dictionary item saved"


def test_save_ignores_name_unless_dirty(client: TestClient) -> None:
    item_id = _create(client, "Stable")

    response = client.post(
        "/admin/dictionary/save",
        json={"id": item_id, "name": "Ignored", "name_is_dirty": False},
    )

    assert response.status_code == 200
    assert response.json()["key"] == "Stable"


def test_save_conflict_names_attempted_key(client: TestClient) -> None:
    item_id = _create(client, "First")
    _create(client, "Second")

    response = client.post(
        "/admin/dictionary/save",
        json={"id": item_id, "name": "Second", "name_is_dirty": True},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "The key 'Second' already exists."


def test_save_unknown_language(client: TestClient) -> None:
    item_id = _create(client, "Key")

    response = client.post(
        "/admin/dictionary/save",
        json={
            "id": item_id,
            "name": "Key",
            "translations": [{"language": "xx", "translation": "?"}],
        },
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Language 'xx' does not exist."


def test_delete_item_and_subtree(client: TestClient) -> None:
    root = _create(client, "root")
    child = _create(client, "root.child", root)

    response = client.delete(f"/admin/dictionary/{root}", headers={"X-Actor-Id": "editor"})

    assert response.status_code == 204
    assert client.get(f"/admin/dictionary/{child}").status_code == 404
    assert client.get("/admin/dictionary").json() == []


def test_delete_missing_item(client: TestClient) -> None:
    assert client.delete("/admin/dictionary/77").status_code == 404


def test_partial_delete_reports_survivors(client: TestClient, store) -> None:
    root = _create(client, "root")
    leaf = _create(client, "root.leaf", root)
    _create(client, "root.other", root)
    app.dependency_overrides[dictionary_service_dependency] = lambda: DictionaryTreeService(
        BrokenDeleteStore(store, failing_keys={"root.leaf"})
    )

    response = client.delete(f"/admin/dictionary/{root}")

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["surviving_ids"] == [leaf, root]
    assert str(root) in detail["message"]


def test_store_failure_is_generic_error(client: TestClient, store) -> None:
    root = _create(client, "root")
    app.dependency_overrides[dictionary_service_dependency] = lambda: DictionaryTreeService(
        BrokenListingStore(store)
    )

    response = client.get("/admin/dictionary")

    assert response.status_code == 500
    assert response.json()["detail"] == "Something went wrong loading dictionary."
    assert "connection lost" not in response.text
    assert client.get(f"/admin/dictionary/{root}").status_code == 200


def test_languages_endpoints(client: TestClient) -> None:
    response = client.get("/admin/languages")
    assert [row["code"] for row in response.json()] == ["en", "ru"]

    created = client.post("/admin/languages", json={"code": "de"})
    assert created.status_code == 201
    assert created.json()["code"] == "de"

    duplicate = client.post("/admin/languages", json={"code": "de"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Language 'de' already exists."


def test_delete_store_failure_without_removals_is_generic_error(client: TestClient, store) -> None:
    lonely = _create(client, "lonely")
    app.dependency_overrides[dictionary_service_dependency] = lambda: DictionaryTreeService(
        BrokenDeleteStore(store, failing_keys={"lonely"})
    )

    response = client.delete(f"/admin/dictionary/{lonely}")

    assert response.status_code == 500
    assert response.json()["detail"] == "Something went wrong deleting dictionary."
