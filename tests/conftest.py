"""Common fixtures: an in-memory Supabase double and a TestClient wired to it."""

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from easyconnect.main import app
from easyconnect.database.supabase_client import SupabaseClient, get_supabase
from easyconnect.core.dependencies import get_current_user_id
from easyconnect.modules.auth.service import clear_auth_cache

# (table, embedded table) -> (local column, remote column)
FOREIGN_KEYS = {
    ("group_members", "groups"): ("group_id", "id"),
    ("group_members", "profiles"): ("user_id", "id"),
}

AUTO_ID_TABLES = {"groups", "activities"}


def split_columns(columns: str) -> List[str]:
    """Split a select list on top-level commas"""
    parts, current, depth = [], "", 0
    for ch in columns:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


def like_pattern(pattern: str) -> "re.Pattern":
    """SQL LIKE pattern as a regex: % is any run, _ is one character"""
    parts = [".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern]
    return re.compile("".join(parts), re.IGNORECASE)


def condition(column: str, operator: str, value: str):
    if operator == "ilike":
        regex = like_pattern(value)
        return lambda row: row.get(column) is not None and regex.fullmatch(row.get(column)) is not None
    if operator == "eq":
        return lambda row: str(row.get(column)) == value
    raise NotImplementedError(operator)


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Enough of the postgrest query builder for the services"""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = None
        self.payload = None
        self.columns = "*"
        self.count = None
        self.head = False
        self.filters = []
        self.ordering = None
        self.row_limit = None

    def select(self, columns: str = "*", count: Optional[str] = None, head: bool = False):
        self.operation = "select"
        self.columns = columns
        self.count = count
        self.head = head
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def or_(self, filters: str):
        """`col.op.value` conditions joined by commas; values may be double-quoted"""
        conditions = [
            condition(column, operator, value.strip('"'))
            for column, operator, value in re.findall(r'(\w+)\.(\w+)\.("[^"]*"|[^,]*)', filters)
        ]
        self.filters.append(lambda row: any(c(row) for c in conditions))
        return self

    def order(self, column, desc: bool = False):
        self.ordering = (column, desc)
        return self

    def limit(self, size: int):
        self.row_limit = size
        return self

    def _matches(self, row) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, table: str, row: Dict[str, Any], columns: str) -> Optional[Dict[str, Any]]:
        if columns.strip() == "*":
            return dict(row)
        projected = {}
        for item in split_columns(columns):
            if "(" not in item:
                projected[item] = row.get(item)
                continue
            resource, inner = item.split("(", 1)
            name, _, hint = resource.partition("!")
            local_key, remote_key = FOREIGN_KEYS[(table, name)]
            target = next(
                (r for r in self.db.tables.get(name, []) if r.get(remote_key) == row.get(local_key)),
                None
            )
            if target is None:
                if hint == "inner":
                    return None
                projected[name] = None
            else:
                projected[name] = self._project(name, target, inner.rstrip(")"))
        return projected

    def execute(self) -> FakeResponse:
        key = (self.table_name, self.operation)
        self.db.calls.append(key)
        if key in self.db.failures:
            raise self.db.failures[key]

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in items:
                row = dict(item)
                if self.table_name in AUTO_ID_TABLES and "id" not in row:
                    row["id"] = str(uuid.uuid4())
                rows.append(row)
                inserted.append(dict(row))
            return FakeResponse(inserted)

        if self.operation == "update":
            matched = [r for r in rows if self._matches(r)]
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(r) for r in matched])

        if self.operation == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResponse([dict(r) for r in removed])

        matched = [r for r in rows if self._matches(r)]
        if self.ordering:
            column, desc = self.ordering
            matched.sort(key=lambda r: (r.get(column) is not None, r.get(column) or ""), reverse=desc)
        projected = [p for p in (self._project(self.table_name, r, self.columns) for r in matched) if p is not None]
        if self.row_limit is not None:
            projected = projected[:self.row_limit]
        count = len(projected) if self.count else None
        if self.head:
            return FakeResponse([], count=count)
        return FakeResponse(projected, count=count)


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.calls = []
        self.failures = {}
        self.auth = MagicMock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, table: str, **filters) -> List[Dict[str, Any]]:
        return [
            r for r in self.tables.get(table, [])
            if all(r.get(k) == v for k, v in filters.items())
        ]

    def fail(self, table: str, operation: str, error: Optional[Exception] = None) -> None:
        self.failures[(table, operation)] = error or RuntimeError(f"{table} {operation} failed")


def seed_tables() -> Dict[str, List[Dict[str, Any]]]:
    last_week = (datetime.now(timezone.utc) - timedelta(days=7)).isoformat()
    return {
        "profiles": [
            {"id": "u1", "email": "alice@example.com", "username": "alice"},
            {"id": "u2", "email": "bob@example.com", "username": None},
            {"id": "u3", "email": "carol@example.com", "username": "carol"},
            {"id": "u4", "email": "dave@example.com", "username": "dave"},
        ],
        "group_types": [
            {
                "id": 1,
                "group_type": "Sports",
                "sub_types": [
                    {"id": 10, "name": "Hiking", "description": "Trail walks"},
                    {"id": None, "name": "Running", "description": "Road and track"},
                ],
            },
            {"id": 2, "group_type": "Hobbies", "sub_types": None},
        ],
        "groups": [
            {"id": "g1", "name": "Hikers", "description": "Weekend trails", "visibility": "public",
             "join_method": "direct", "group_type_id": 1, "created_by": "u1",
             "created_at": "2024-01-01T10:00:00+00:00"},
            {"id": "g2", "name": "Book Club", "description": None, "visibility": "private",
             "join_method": "invitation", "group_type_id": 2, "created_by": "u2",
             "created_at": "2024-02-01T10:00:00.123456+00:00"},
            {"id": "g3", "name": "Runners", "description": None, "visibility": "public",
             "join_method": "invitation", "group_type_id": 1, "created_by": "u3",
             "created_at": "2024-03-01T10:00:00+00:00"},
            {"id": "g4", "name": "Chess", "description": "Blitz nights", "visibility": "public",
             "join_method": "direct", "group_type_id": 2, "created_by": "u4",
             "created_at": "2024-04-01T10:00:00+00:00"},
        ],
        "group_members": [
            {"group_id": "g1", "user_id": "u1", "role": "admin", "status": "joined"},
            {"group_id": "g1", "user_id": "u2", "role": "member", "status": "joined"},
            {"group_id": "g1", "user_id": "u3", "role": "member", "status": "invited"},
            {"group_id": "g2", "user_id": "u2", "role": "admin", "status": "joined"},
            {"group_id": "g2", "user_id": "u1", "role": "member", "status": "invited"},
            {"group_id": "g3", "user_id": "u3", "role": "admin", "status": "joined"},
            {"group_id": "g3", "user_id": "u4", "role": "member", "status": "joined"},
            {"group_id": "g4", "user_id": "u4", "role": "admin", "status": "joined"},
        ],
        "activities": [
            {"id": "a1", "group_id": "g1", "created_at": "2023-05-01T09:00:00+00:00"},
            {"id": "a2", "group_id": "g1", "created_at": "2023-06-01T09:00:00+00:00"},
            {"id": "a3", "group_id": "g3", "created_at": last_week},
        ],
    }


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase(seed_tables())


@pytest.fixture
def login_as():
    """Switch the authenticated user for subsequent requests"""
    def _login(user_id: str) -> None:
        app.dependency_overrides[get_current_user_id] = lambda: user_id
    return _login


@pytest.fixture
def auth_client(monkeypatch) -> MagicMock:
    """Stands in for the throwaway client used to sign in, up and out"""
    session_client = MagicMock()
    monkeypatch.setattr(SupabaseClient, "new_session_client", staticmethod(lambda: session_client))
    return session_client


@pytest.fixture
def client(fake_db, login_as, auth_client):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    login_as("u1")
    clear_auth_cache()
    app.state.limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    clear_auth_cache()
