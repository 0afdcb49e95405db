import copy
import itertools
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

import data_integrator
from utils.settings import PRODUCTS_TABLE


class FakeQuery:
    """Chainable stand-in for a PostgREST request builder."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = None
        self.payload = None
        self.filters = []
        self._limit = None
        self._order = None

    def select(self, columns="*"):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def execute(self):
        self.db.record(self)

        rows = self.db.tables.setdefault(self.table, [])
        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]

        if self.op == "select":
            data = [copy.deepcopy(r) for r in matched]
            if self._order:
                column, desc = self._order
                data.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
            if self._limit is not None:
                data = data[:self._limit]
            return SimpleNamespace(data=data)

        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for payload in payloads:
                row = copy.deepcopy(payload)
                row.setdefault("id", f"{self.table}-{next(self.db.ids)}")
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return SimpleNamespace(data=inserted)

        if self.op == "update":
            for r in matched:
                r.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=[copy.deepcopy(r) for r in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=[copy.deepcopy(r) for r in matched])

        raise AssertionError(f"no operation on {self.table}")


class FakeSupabase:
    """
    In-memory Supabase client: schema(...).table(...) queries over dict rows.

    `fail_on[(op, table)] = n` makes the n-th such call raise (0 = every call).
    """

    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []
        self.fail_on = {}
        self.ids = itertools.count(1)
        self._counts = {}

    def schema(self, name):
        return self

    def table(self, name):
        return FakeQuery(self, name)

    def record(self, query):
        key = (query.op, query.table)
        self._counts[key] = self._counts.get(key, 0) + 1
        self.calls.append((query.op, query.table, copy.deepcopy(query.payload), tuple(query.filters)))

        nth = self.fail_on.get(key)
        if nth is not None and (nth == 0 or nth == self._counts[key]):
            raise RuntimeError(f"{query.op} on {query.table} failed")

    def calls_for(self, op, table):
        return [c for c in self.calls if c[0] == op and c[1] == table]

    def row(self, table, row_id):
        return next(r for r in self.tables.get(table, []) if r["id"] == row_id)


def product_row(product_id, name="Robe", price=25000, qty=None, created_at="2026-10-01T10:00:00+00:00"):
    return {
        "id": product_id,
        "title": name,
        "price": price,
        "zopos_qty": dict(qty or {}),
        "is_active": True,
        "created_at": created_at,
    }


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeSupabase()
    monkeypatch.setattr(data_integrator, "_client", db)
    return db


@pytest.fixture
def catalog(fake_db):
    fake_db.tables[PRODUCTS_TABLE] = [
        product_row("p1", "Robe Wax", 25000, {"S": 0, "M": 5}),
        product_row("p2", "Chemise Lin", 18500, {"L": 3, "XL": 1}),
    ]
    return fake_db
