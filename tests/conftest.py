from itertools import count
from typing import Any
from unittest.mock import MagicMock

import pytest
from pymongo.errors import OperationFailure

from mongo_bootstrap.lib.database import ConnectionManager
from mongo_bootstrap.lib.reconcile.languages import SeedCategory, SeedValue


class FakeModel:
    """In-memory model implementing the catalog and index protocols"""

    def __init__(
        self,
        name: str = "TestModel",
        collection_name: str = "test_models",
        collections: list[str] | None = None,
        indexes: list[dict[str, Any]] | None = None,
    ) -> None:
        self.name = name
        self.collection_name = collection_name
        self.collections = list(collections or [])
        self._indexes = {index["name"]: dict(index) for index in indexes or []}
        self.calls: list[tuple[Any, ...]] = []

    def called(self, method: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == method]

    def list_collection_names(self) -> list[str]:
        self.calls.append(("list_collection_names",))
        return list(self.collections)

    def create_collection(self) -> None:
        self.calls.append(("create_collection",))
        self.collections.append(self.collection_name)

    def create_indexes(self) -> None:
        self.calls.append(("create_indexes",))

    def indexes(self) -> list[dict[str, Any]]:
        return [dict(index) for index in self._indexes.values()]

    def drop_index(self, index_name: str) -> None:
        self.calls.append(("drop_index", index_name))
        if index_name not in self._indexes:
            raise OperationFailure(
                f"index not found with name [{index_name}]", code=27
            )
        del self._indexes[index_name]

    def create_index(self, keys: list[tuple[str, Any]], **options: Any) -> str:
        self.calls.append(("create_index", keys, dict(options)))
        name = options.pop("name", None) or "_".join(
            f"{field}_{direction}" for field, direction in keys
        )
        self._indexes[name] = {"name": name, "key": dict(keys), **options}
        return name


class FakeSeedStore:
    """In-memory values and categories counting bulk deletes"""

    def __init__(self) -> None:
        self.values: dict[str, SeedValue] = {}
        self.category_values: dict[str, list[str]] = {}
        self.bulk_deletes = 0
        self._ids = count()

    def add(self, language: str, value: str) -> str:
        value_id = f"VAL_{next(self._ids)}"
        self.values[value_id] = SeedValue(value_id, language, value)
        return value_id

    def add_category(self, value_ids: list[str]) -> str:
        category_id = f"CAT_{len(self.category_values)}"
        self.category_values[category_id] = list(value_ids)
        return category_id

    def delete_values_not_in(self, languages: list[str]) -> int:
        self.bulk_deletes += 1
        doomed = [
            value_id
            for value_id, value in self.values.items()
            if value.language not in languages
        ]
        for value_id in doomed:
            del self.values[value_id]
        return len(doomed)

    def categories(self) -> list[SeedCategory]:
        return [
            SeedCategory(category_id, list(values))
            for category_id, values in self.category_values.items()
        ]

    def values_of(self, category: SeedCategory) -> list[SeedValue]:
        return [
            self.values[value_id]
            for value_id in category.values
            if value_id in self.values
        ]

    def add_value(
        self, category: SeedCategory, language: str, value: str
    ) -> str:
        value_id = self.add(language, value)
        self.category_values[category.id].append(value_id)
        return value_id


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def seed_store() -> FakeSeedStore:
    return FakeSeedStore()


@pytest.fixture
def connected_db() -> MagicMock:
    db = MagicMock(spec=ConnectionManager)
    db.is_connected = True
    return db


@pytest.fixture
def disconnected_db() -> MagicMock:
    db = MagicMock(spec=ConnectionManager)
    db.is_connected = False
    return db
