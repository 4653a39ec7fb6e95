"""Tests for attendance_insights.filter_sets: saved filter set stores."""

from types import SimpleNamespace

import pytest

from attendance_insights.config import Config
from attendance_insights.database import get_supabase_client
from attendance_insights.filter_sets import (
    FilterSetStore,
    InMemoryFilterSetStore,
    SupabaseFilterSetStore,
)
from attendance_insights.filtering import FilterPredicate


PREDICATES = [
    FilterPredicate("cleaned_class", "contains", "barre"),
    FilterPredicate("total_revenue", "greater", "1000"),
]


class FakeQuery:
    """Minimal stand-in for the Supabase query builder."""

    def __init__(self, table: "FakeTable") -> None:
        self.table = table
        self.action = "select"
        self.filters = {}
        self.payload = None

    def select(self, columns):
        self.action = "select"
        return self

    def upsert(self, records, on_conflict=None):
        self.action = "upsert"
        self.payload = records
        self.table.conflicts.append(on_conflict)
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters.items())

    def execute(self):
        if self.action == "upsert":
            for record in self.payload:
                self.table.rows = [r for r in self.table.rows if r["name"] != record["name"]]
                self.table.rows.append(dict(record))
            return SimpleNamespace(data=self.payload)
        if self.action == "delete":
            self.table.rows = [row for row in self.table.rows if not self._matches(row)]
            return SimpleNamespace(data=[])
        return SimpleNamespace(data=[dict(row) for row in self.table.rows if self._matches(row)])


class FakeTable:
    def __init__(self) -> None:
        self.rows = []
        self.conflicts = []


class FakeClient:
    def __init__(self) -> None:
        self.tables = {}

    def table(self, name):
        table = self.tables.setdefault(name, FakeTable())
        return FakeQuery(table)


class TestFilterSetStore:

    def test_incomplete_store_cannot_be_created(self) -> None:
        class LoadOnlyStore(FilterSetStore):
            def load(self, name):
                return None

        with pytest.raises(TypeError):
            LoadOnlyStore()

    def test_interface_cannot_be_created(self) -> None:
        with pytest.raises(TypeError):
            FilterSetStore()


class TestInMemoryFilterSetStore:

    def test_save_and_load(self) -> None:
        store = InMemoryFilterSetStore()
        store.save("Barre revenue", PREDICATES)

        assert store.load("Barre revenue") == PREDICATES
        assert store.names() == ["Barre revenue"]

    def test_missing_name(self) -> None:
        assert InMemoryFilterSetStore().load("nothing") is None

    def test_ignores_empty_sets(self) -> None:
        store = InMemoryFilterSetStore()
        store.save("", PREDICATES)
        store.save("Empty", [])

        assert store.names() == []

    def test_delete(self) -> None:
        store = InMemoryFilterSetStore()
        store.save("Barre revenue", PREDICATES)
        store.delete("Barre revenue")

        assert store.load("Barre revenue") is None


class TestSupabaseFilterSetStore:

    def test_save_and_load(self) -> None:
        client = FakeClient()
        store = SupabaseFilterSetStore(client, table_name="filters")
        store.save("Barre revenue", PREDICATES)

        assert store.load("Barre revenue") == PREDICATES
        assert client.tables["filters"].conflicts == ["name"]

    def test_save_replaces_existing(self) -> None:
        client = FakeClient()
        store = SupabaseFilterSetStore(client, table_name="filters")
        store.save("Mine", PREDICATES)
        store.save("Mine", PREDICATES[:1])

        assert store.load("Mine") == PREDICATES[:1]
        assert store.names() == ["Mine"]

    def test_default_table(self) -> None:
        store = SupabaseFilterSetStore(FakeClient())
        assert store.table_name == Config.SAVED_FILTERS_TABLE

    def test_missing_and_delete(self) -> None:
        client = FakeClient()
        store = SupabaseFilterSetStore(client, table_name="filters")
        store.save("Mine", PREDICATES)
        store.delete("Mine")

        assert store.load("Mine") is None
        assert store.names() == []


class TestSupabaseClient:

    def test_missing_credentials(self, monkeypatch) -> None:
        monkeypatch.setattr(Config, "SUPABASE_URL", "")
        monkeypatch.setattr(Config, "SUPABASE_SERVICE_ROLE_KEY", "")

        with pytest.raises(ValueError, match="SUPABASE_URL"):
            get_supabase_client()
