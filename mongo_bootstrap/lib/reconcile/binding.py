"""Narrow views of the driver used by the reconcilers.

The reconcilers only depend on these protocols. ``DocumentBinding`` adapts a
mongoengine document class to all of them; tests provide their own fakes.
"""

from typing import Any, Protocol

from mongoengine import Document
from pymongo.collection import Collection


class CollectionCatalog(Protocol):
    """Lists and creates the collection backing a model"""

    name: str
    collection_name: str

    def list_collection_names(self) -> list[str]: ...

    def create_collection(self) -> None: ...

    def create_indexes(self) -> None: ...


class IndexLister(Protocol):
    """Reads the indexes currently defined on a model's collection"""

    name: str
    collection_name: str

    def indexes(self) -> list[dict[str, Any]]: ...


class IndexMutator(Protocol):
    """Creates and drops indexes on a model's collection"""

    def drop_index(self, index_name: str) -> None: ...

    def create_index(
        self, keys: list[tuple[str, Any]], **options: Any
    ) -> str: ...


class IndexedModel(IndexLister, IndexMutator, Protocol):
    """A model whose indexes can be both inspected and changed"""


class DocumentBinding:
    """Adapter from a mongoengine document class to the capability protocols"""

    def __init__(self, document: type[Document]) -> None:
        self.document = document

    def __repr__(self) -> str:
        return f"DocumentBinding({self.name})"

    @property
    def name(self) -> str:
        return self.document.__name__

    @property
    def collection_name(self) -> str:
        return self.document._get_collection_name()

    def _collection(self) -> Collection:
        # Document._get_collection() may build indexes on first access,
        # index creation stays under the reconcilers' control
        return self.document._get_db()[self.collection_name]

    def list_collection_names(self) -> list[str]:
        return self.document._get_db().list_collection_names()

    def create_collection(self) -> None:
        self.document._get_db().create_collection(self.collection_name)

    def create_indexes(self) -> None:
        self.document.ensure_indexes()

    def indexes(self) -> list[dict[str, Any]]:
        return [dict(index) for index in self._collection().list_indexes()]

    def drop_index(self, index_name: str) -> None:
        self._collection().drop_index(index_name)

    def create_index(self, keys: list[tuple[str, Any]], **options: Any) -> str:
        return self._collection().create_index(keys, **options)


def bind(model: Any) -> Any:
    """Wrap mongoengine document classes, pass anything else through"""
    if isinstance(model, type) and issubclass(model, Document):
        return DocumentBinding(model)
    return model
