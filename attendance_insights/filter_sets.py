"""
Named filter sets.

The engine only serializes and deserializes predicate lists; storage is
a key-value store injected by the caller.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from supabase import Client

from attendance_insights.config import Config
from attendance_insights.database import (
    delete_rows,
    query_table_to_dataframe,
    select_rows,
    upsert_records,
)
from attendance_insights.filtering import (
    FilterPredicate,
    deserialize_predicates,
    serialize_predicates,
)

logger = logging.getLogger(__name__)


class FilterSetStore(ABC):
    """Key-value store of predicate lists keyed by a user-chosen name."""

    @abstractmethod
    def save(self, name: str, predicates: Sequence[FilterPredicate]) -> None:
        raise NotImplementedError

    @abstractmethod
    def load(self, name: str) -> Optional[List[FilterPredicate]]:
        raise NotImplementedError

    @abstractmethod
    def names(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, name: str) -> None:
        raise NotImplementedError


class InMemoryFilterSetStore(FilterSetStore):
    """Store holding serialized filter sets in a dictionary."""

    def __init__(self) -> None:
        self._payloads: Dict[str, str] = {}

    def save(self, name: str, predicates: Sequence[FilterPredicate]) -> None:
        if not name or not predicates:
            logger.debug("Ignoring filter set without a name or predicates")
            return
        self._payloads[name] = serialize_predicates(predicates)

    def load(self, name: str) -> Optional[List[FilterPredicate]]:
        payload = self._payloads.get(name)
        if payload is None:
            return None
        return deserialize_predicates(payload)

    def names(self) -> List[str]:
        return list(self._payloads)

    def delete(self, name: str) -> None:
        self._payloads.pop(name, None)


class SupabaseFilterSetStore(FilterSetStore):
    """
    Store backed by a Supabase table with ``name`` and ``filters`` columns.

    ``filters`` holds the JSON produced by ``serialize_predicates``;
    ``name`` carries a unique constraint so saving replaces a set.
    """

    def __init__(self, client: Client, table_name: Optional[str] = None) -> None:
        self.client = client
        self.table_name = table_name or Config.SAVED_FILTERS_TABLE

    def save(self, name: str, predicates: Sequence[FilterPredicate]) -> None:
        if not name or not predicates:
            logger.debug("Ignoring filter set without a name or predicates")
            return
        record = {"name": name, "filters": serialize_predicates(predicates)}
        upsert_records(self.client, self.table_name, [record], on_conflict="name")

    def load(self, name: str) -> Optional[List[FilterPredicate]]:
        rows = select_rows(self.client, self.table_name, "name", name)
        if not rows:
            logger.warning(f"No saved filter set named '{name}'")
            return None
        return deserialize_predicates(rows[0]["filters"])

    def names(self) -> List[str]:
        df = query_table_to_dataframe(self.client, self.table_name, columns="name")
        if df.empty:
            return []
        return df["name"].astype(str).tolist()

    def delete(self, name: str) -> None:
        delete_rows(self.client, self.table_name, "name", name)
