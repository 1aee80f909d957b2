"""Shared fixtures for tests."""

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from dbview.schema.loader import parse_snapshot
from dbview.transport.client import DbViewerClient

BASE_URL = "http://testserver"
FIXED_CLOCK = 1700000000000


class FakeBackend:
    """In-memory stand-in for the viewer backend, served via MockTransport."""

    def __init__(self):
        self.columns: dict[str, list[dict[str, str]]] = {}
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.relationships: list[dict[str, str]] = []
        self.query_result: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self._failures: dict[str, tuple[int, str | None]] = {}
        self._hooks: dict[str, Callable[[httpx.Request], None]] = {}

    # -- setup ---------------------------------------------------------------

    def add_table(self, name: str, columns: list[tuple[str, str]], rows=()) -> None:
        self.columns[name] = [{"name": c, "type": t} for c, t in columns]
        self.rows[name] = [dict(r) for r in rows]

    def drop_table(self, name: str) -> None:
        self.columns.pop(name, None)
        self.rows.pop(name, None)

    def relate(self, source: str, target: str, column: str) -> None:
        self.relationships.append(
            {"source_table": source, "target_table": target, "source_column": column}
        )

    def fail_on(self, path: str, status: int = 500, message: str | None = "boom") -> None:
        """Make every request to ``path`` (or below it) fail."""
        self._failures[path] = (status, message)

    def recover(self, path: str) -> None:
        self._failures.pop(path, None)

    def on_request(self, path: str, hook: Callable[[httpx.Request], None]) -> None:
        """Run ``hook`` when a request to ``path`` arrives, before answering."""
        self._hooks[path] = hook

    # -- inspection ----------------------------------------------------------

    def calls(self, path: str | None = None) -> list[tuple[str, str]]:
        return [
            (r.method, r.url.path)
            for r in self.requests
            if path is None or r.url.path == path or r.url.path.startswith(path + "/")
        ]

    def bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    # -- handler -------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for prefix, hook in self._hooks.items():
            if path == prefix or path.startswith(prefix + "/"):
                hook(request)

        for prefix, (status, message) in self._failures.items():
            if path == prefix or path.startswith(prefix + "/"):
                body = {"error": message} if message is not None else {}
                return httpx.Response(status, json=body)

        if request.method == "GET" and path == "/db-info":
            return httpx.Response(200, json=self.db_info())

        if request.method == "GET" and path.startswith("/table-data/"):
            table = path.removeprefix("/table-data/")
            if table not in self.rows:
                return httpx.Response(500, json={"error": f"no such table: {table}"})
            return httpx.Response(200, json=[dict(r) for r in self.rows[table]])

        if request.method == "POST":
            return self._post(path, request)

        return httpx.Response(404, json={"error": "not found"})

    def db_info(self) -> dict:
        return {
            "tables": [
                {"name": name, "columns": cols, "rows": self.rows[name]}
                for name, cols in self.columns.items()
            ],
            "relationships": list(self.relationships),
        }

    def _post(self, path: str, request: httpx.Request) -> httpx.Response:
        if path == "/upload":
            match = re.search(rb'filename="([^"]+)"', request.content)
            if match is None:
                return httpx.Response(400, json={"error": "No file uploaded"})
            name = Path(match.group(1).decode()).stem.replace(" ", "_")
            self.add_table(name, [("id", "INT")])
            return httpx.Response(200, json={"message": "Table created successfully", "tableName": name})

        body = json.loads(request.content)

        if path == "/query":
            return httpx.Response(200, json={"data": self.query_result})

        table = body.get("table_name")
        if table not in self.rows:
            return httpx.Response(500, json={"error": f"no such table: {table}"})
        rows = self.rows[table]

        if path == "/alter-table":
            self.columns[table].append(
                {"name": body["column_name"], "type": body["column_type"]}
            )
            for row in rows:
                row[body["column_name"]] = None
        elif path == "/update-cell":
            for row in rows:
                if str(row.get("id")) == body["record_id"]:
                    row[body["column_name"]] = body["new_value"]
        elif path == "/insert-row":
            next_id = max((int(r["id"]) for r in rows), default=0) + 1
            row = {col["name"]: None for col in self.columns[table]}
            row["id"] = next_id
            rows.append(row)
        elif path == "/delete-row":
            self.rows[table] = [r for r in rows if str(r.get("id")) != body["record_id"]]
        else:
            return httpx.Response(404, json={"error": "not found"})

        return httpx.Response(200, json={"message": "ok"})


@pytest.fixture
def backend() -> FakeBackend:
    """A backend with a users table and an orders table referencing it."""
    fake = FakeBackend()
    fake.add_table(
        "users",
        [("id", "INT"), ("name", "VARCHAR"), ("email", "VARCHAR")],
        [
            {"id": 3, "name": "Ann", "email": "ann@example.com"},
            {"id": 7, "name": "Bob", "email": "bob@example.com"},
        ],
    )
    fake.add_table(
        "orders",
        [("id", "INT"), ("user_id", "INT"), ("total", "DECIMAL")],
        [{"id": 1, "user_id": 3, "total": "9.50"}],
    )
    fake.relate("orders", "users", "user_id")
    return fake


@pytest.fixture
def client(backend):
    """A client wired to the fake backend."""
    c = DbViewerClient(
        BASE_URL,
        transport=httpx.MockTransport(backend.handler),
        clock=lambda: FIXED_CLOCK,
    )
    yield c
    asyncio.run(c.aclose())


@pytest.fixture
def examples_dir() -> Path:
    """Return the path to the examples directory."""
    return Path(__file__).parent.parent / "examples"


@pytest.fixture
def snapshot_data() -> dict:
    """A /db-info payload with four tables and two relationships."""
    return {
        "tables": [
            {"name": "users", "columns": [{"name": "id", "type": "INT"}, {"name": "email", "type": "VARCHAR"}]},
            {"name": "orders", "columns": [{"name": "id", "type": "INT"}, {"name": "user_id", "type": "INT"}]},
            {"name": "products", "columns": [{"name": "id", "type": "INT"}]},
            {"name": "reviews", "columns": [{"name": "id", "type": "INT"}, {"name": "user_id", "type": "INT"}]},
        ],
        "relationships": [
            {"source_table": "orders", "target_table": "users", "source_column": "user_id"},
            {"source_table": "reviews", "target_table": "users", "source_column": "user_id"},
        ],
    }


@pytest.fixture
def snapshot(snapshot_data):
    """Return a parsed snapshot."""
    return parse_snapshot(snapshot_data)
