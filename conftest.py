"""Общие фикстуры тестов: хранилище категорий в памяти поверх httpx.MockTransport"""
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from app.admin_client import AdminClient

BASE_URL = "http://store.test/api"


class FakeCategoryStore:
    """Хранилище категорий в памяти, отвечающее как REST API"""

    def __init__(self, nested: bool = False):
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.nested = nested
        self.next_id = 1
        self.fail_status: Optional[int] = None
        self.reject_message: Optional[str] = None
        self.raise_error: Optional[Exception] = None

    def add(self, name: str, parent_id: int = 0, level: int = 1, **extra) -> int:
        row_id = self.next_id
        self.next_id += 1
        self.rows[row_id] = {
            "category_id": row_id,
            "parent_id": parent_id,
            "level": level,
            "category_name": name,
            "description": extra.get("description", f"{name} desc"),
            "icon_url": extra.get("icon_url", f"http://cdn.test/{row_id}.png"),
            "sort_order": extra.get("sort_order", 0),
            "status": extra.get("status", "active"),
            "updated_at": "2024-05-01 10:00:00",
        }
        return row_id

    # === Ответы ===

    def _list(self, keyword: str) -> Dict[str, Any]:
        rows = [dict(r) for r in self.rows.values() if keyword in (r["category_name"] or "")]
        if self.nested and not keyword:
            by_parent: Dict[int, list] = {}
            for r in rows:
                by_parent.setdefault(r["parent_id"], []).append(r)
            for r in rows:
                kids = by_parent.get(r["category_id"])
                if kids:
                    r["children"] = kids
            rows = by_parent.get(0, [])
        return {"data": {"list": rows}}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"error": "boom"})

        path = request.url.path
        method = request.method

        if path == "/oss/upload" and method == "POST":
            return httpx.Response(200, json={"data": {"url": "http://cdn.test/uploaded.png"}})

        if path == "/api/categories" and method == "GET":
            return httpx.Response(200, json=self._list(request.url.params.get("keyword", "")))

        if path == "/api/categories" and method == "POST":
            body = json.loads(request.content)
            if self.reject_message:
                return httpx.Response(200, json={"success": False, "message": self.reject_message})
            row_id = self.add(
                body["category_name"],
                parent_id=body["parent_id"],
                level=body["level"],
                description=body["description"],
                icon_url=body["icon_url"],
                sort_order=body["sort_order"],
                status=body["status"],
            )
            return httpx.Response(200, json={"success": True, "data": {"category_id": row_id}})

        if path.startswith("/api/categories/"):
            row_id = int(path.rsplit("/", 1)[1])
            if row_id not in self.rows:
                return httpx.Response(404, json={"success": False, "message": "not found"})
            if method == "PUT":
                self.rows[row_id].update(json.loads(request.content))
                return httpx.Response(200, json={"success": True})
            if method == "DELETE":
                del self.rows[row_id]
                return httpx.Response(200, json={"success": True})

        return httpx.Response(404, json={"message": "no route"})

    # === Помощники для проверок ===

    def calls(self, method: str, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and (path is None or r.url.path == path)
        ]

    def mutations(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method in ("POST", "PUT", "DELETE")]


@pytest.fixture
def store() -> FakeCategoryStore:
    return FakeCategoryStore()


@pytest.fixture
def client(store) -> AdminClient:
    http = httpx.Client(transport=httpx.MockTransport(store.handler))
    yield AdminClient(base_url=BASE_URL, timeout=5.0, http_client=http)
    http.close()
