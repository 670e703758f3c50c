"""
Тесты клиента хранилища категорий
"""
import json

import httpx
import pytest

from app.admin_client import (
    HAS_CHILDREN_MESSAGE,
    AdminClient,
    BusinessRejection,
    FetchError,
    TreeIntegrityError,
    ValidationError,
)
from app.category_models import CategoryFields, CategoryStatus, FormMode

from conftest import BASE_URL, FakeCategoryStore

FIELDS = CategoryFields(
    name="Спорт", description="Новости спорта", icon_url="http://cdn.test/s.png", sort_order=2
)


def client_for(handler) -> AdminClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return AdminClient(base_url=BASE_URL, timeout=1.0, http_client=http)


# === Загрузка дерева ===

def test_load_tree_builds_snapshot(client, store):
    a = store.add("A")
    store.add("B", parent_id=a, level=2)

    tree = client.load_tree()

    assert len(tree) == 2
    assert client.tree is tree
    assert tree.get(a).children[0].name == "B"
    assert store.calls("GET")[-1].url.path == "/api/categories"


def test_load_tree_nested_response():
    store = FakeCategoryStore(nested=True)
    a = store.add("A")
    b = store.add("B", parent_id=a, level=2)
    store.add("C", parent_id=b, level=3)
    client = client_for(store.handler)

    tree = client.load_tree()

    assert [r.id for r in tree.roots] == [a]
    assert tree.max_level == 3
    assert tree.check_levels() == []


def test_keyword_is_sent_and_remembered(client, store):
    store.add("Спорт")
    store.add("Кино")

    tree = client.load_tree("  Спорт ")

    request = store.calls("GET")[-1]
    assert request.url.params["keyword"] == "Спорт"
    assert [n.name for n in tree] == ["Спорт"]
    assert client.keyword == "Спорт"

    client.refresh_tree()
    assert store.calls("GET")[-1].url.params["keyword"] == "Спорт"


def test_empty_keyword_not_sent(client, store):
    client.load_tree("   ")
    assert "keyword" not in store.calls("GET")[-1].url.params
    assert client.keyword is None


def test_each_load_replaces_snapshot(client, store):
    store.add("A")
    first = client.load_tree()
    store.add("B")
    second = client.load_tree()

    assert first is not second
    assert len(first) == 1
    assert len(second) == 2


def test_server_error_raises_fetch_error(client, store):
    store.fail_status = 500
    with pytest.raises(FetchError) as exc:
        client.load_tree()
    assert exc.value.status_code == 500


def test_timeout_raises_fetch_error(client, store):
    store.raise_error = httpx.ReadTimeout("slow")
    with pytest.raises(FetchError) as exc:
        client.load_tree()
    assert "не ответил" in str(exc.value)


def test_connect_error_raises_fetch_error(client, store):
    store.raise_error = httpx.ConnectError("refused")
    with pytest.raises(FetchError):
        client.load_tree()


def test_malformed_body_raises_fetch_error():
    client = client_for(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(FetchError):
        client.load_tree()


def test_missing_data_gives_empty_tree():
    client = client_for(lambda request: httpx.Response(200, json={"data": None}))
    assert len(client.load_tree()) == 0


def test_cyclic_response_rejected_and_snapshot_kept(client, store):
    store.add("A")
    good = client.load_tree()
    store.rows[1]["parent_id"] = 1

    with pytest.raises(TreeIntegrityError):
        client.load_tree()
    assert client.tree is good


def test_no_retries_on_failure(client, store):
    store.fail_status = 502
    with pytest.raises(FetchError):
        client.load_tree()
    assert len(store.requests) == 1


# === Запросы на создание/изменение ===

def test_build_create_request_root(client):
    request = client.build_create_request(FormMode.CREATE_ROOT, 99, FIELDS)
    assert request.parent_id == 0
    assert request.level == 1
    assert request.category_name == "Спорт"


def test_build_create_request_child_reads_current_level(client, store):
    a = store.add("A")
    b = store.add("B", parent_id=a, level=2)
    client.load_tree()

    request = client.build_create_request(FormMode.CREATE_CHILD, b, FIELDS)
    assert request.parent_id == b
    assert request.level == 3


def test_build_create_request_unknown_parent(client):
    with pytest.raises(ValidationError) as exc:
        client.build_create_request(FormMode.CREATE_CHILD, 42, FIELDS)
    assert "parent_id" in exc.value.errors


def test_build_create_request_rejects_edit_mode(client):
    with pytest.raises(ValueError):
        client.build_create_request(FormMode.EDIT, None, FIELDS)


def test_update_request_has_only_content_fields(client):
    request = client.build_update_request(1, FIELDS)
    payload = request.model_dump(mode="json")
    assert set(payload) == {"category_name", "description", "icon_url", "sort_order", "status"}
    assert payload["status"] == "active"


def test_submit_create_posts_and_refreshes(client, store):
    client.load_tree()
    request = client.build_create_request(FormMode.CREATE_ROOT, None, FIELDS)

    tree = client.submit_create(request)

    body = json.loads(store.calls("POST")[-1].content)
    assert body == {
        "parent_id": 0,
        "level": 1,
        "category_name": "Спорт",
        "description": "Новости спорта",
        "icon_url": "http://cdn.test/s.png",
        "sort_order": 2,
        "status": "active",
    }
    assert len(tree) == 1
    assert client.tree is tree


def test_submit_update_puts_to_node_url(client, store):
    a = store.add("A")
    client.load_tree()

    client.submit_update(a, client.build_update_request(a, FIELDS.replace(status=CategoryStatus.INACTIVE)))

    put = store.calls("PUT")[-1]
    assert put.url.path == f"/api/categories/{a}"
    assert client.tree.get(a).status == CategoryStatus.INACTIVE


def test_business_rejection_message_verbatim(client, store):
    store.reject_message = "name duplicated"
    request = client.build_create_request(FormMode.CREATE_ROOT, None, FIELDS)
    with pytest.raises(BusinessRejection) as exc:
        client.submit_create(request)
    assert exc.value.message == "name duplicated"
    assert store.calls("GET") == []


def test_client_error_with_rejection_body(client, store):
    with pytest.raises(BusinessRejection) as exc:
        client.submit_delete(404)
    assert exc.value.message == "not found"


def test_refresh_failure_after_mutation_keeps_success(store):
    state = {"posted": False}

    def handler(request):
        if request.method == "POST":
            state["posted"] = True
            return httpx.Response(200, json={"success": True})
        if state["posted"]:
            return httpx.Response(500)
        return store.handler(request)

    client = client_for(handler)
    before = client.load_tree()
    tree = client.submit_create(client.build_create_request(FormMode.CREATE_ROOT, None, FIELDS))
    assert tree is before


# === Удаление ===

def test_delete_blocked_when_node_has_children(client, store):
    a = store.add("A")
    store.add("B", parent_id=a, level=2)
    client.load_tree()

    with pytest.raises(BusinessRejection) as exc:
        client.delete_node(a)

    assert exc.value.message == HAS_CHILDREN_MESSAGE
    assert store.calls("DELETE") == []
    assert a in store.rows


def test_delete_blocked_even_if_filter_hides_children(client, store):
    a = store.add("Спорт")
    store.add("Футбол", parent_id=a, level=2)
    tree = client.load_tree("Спорт")
    assert not tree.has_children(a)

    with pytest.raises(BusinessRejection):
        client.delete_node(a)
    assert store.calls("DELETE") == []


def test_delete_leaf_removes_and_refreshes(client, store):
    a = store.add("A")
    b = store.add("B", parent_id=a, level=2)
    client.load_tree()

    tree = client.delete_node(b)

    assert store.calls("DELETE")[-1].url.path == f"/api/categories/{b}"
    assert b not in tree
    assert not tree.has_children(a)
    assert tree.check_levels() == []


def test_delete_unknown_node(client, store):
    with pytest.raises(BusinessRejection):
        client.delete_node(77)
    assert store.calls("DELETE") == []


# === Иконки ===

def test_upload_icon_returns_url(client, store, tmp_path):
    icon = tmp_path / "icon.png"
    icon.write_bytes(b"\x89PNG\r\n\x1a\n" + b"0" * 100)

    url = client.upload_icon(icon)

    assert url == "http://cdn.test/uploaded.png"
    upload = store.calls("POST", "/oss/upload")[-1]
    assert b'name="avatar"' in upload.content
    assert b'filename="icon.png"' in upload.content


def test_upload_icon_rejects_wrong_type(client, store, tmp_path):
    doc = tmp_path / "doc.gif"
    doc.write_bytes(b"GIF89a")
    with pytest.raises(ValidationError) as exc:
        client.upload_icon(doc)
    assert "icon_url" in exc.value.errors
    assert store.requests == []


def test_upload_icon_rejects_large_file(client, store, tmp_path):
    big = tmp_path / "big.jpg"
    big.write_bytes(b"0" * (2 * 1024 * 1024))
    with pytest.raises(ValidationError):
        client.upload_icon(big)
    assert store.requests == []


def test_is_available(client, store):
    assert client.is_available() is True
    store.fail_status = 500
    assert client.is_available() is False


def test_one_bad_row_does_not_blank_the_tree(client, store):
    a = store.add("A")
    store.add("B")
    store.rows[a]["status"] = None
    store.rows[a]["category_name"] = None

    tree = client.load_tree()

    assert len(tree) == 2
    assert tree.get(a).status == CategoryStatus.ACTIVE


def test_fetch_icon_returns_bytes():
    client = client_for(lambda request: httpx.Response(200, content=b"\x89PNG-data"))
    assert client.fetch_icon("http://cdn.test/a.png") == b"\x89PNG-data"


def test_fetch_icon_missing_raises_fetch_error():
    client = client_for(lambda request: httpx.Response(404, text="missing"))
    with pytest.raises(FetchError) as exc:
        client.fetch_icon("http://cdn.test/a.png")
    assert exc.value.status_code == 404


def test_fetch_icon_invalid_url_raises_fetch_error():
    client = client_for(lambda request: httpx.Response(200, content=b""))
    with pytest.raises(FetchError):
        client.fetch_icon("http://cdn.test/\x00bad.png")
