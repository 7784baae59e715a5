from unittest.mock import patch

import pytest
from pymongo.errors import CollectionInvalid, ServerSelectionTimeoutError

from mongo_bootstrap.lib.reconcile.collections import ensure_collection
from tests.conftest import FakeModel


def test_creates_missing_collection_and_indexes():
    model = FakeModel(collections=["other"])

    ensure_collection(model)

    assert model.called("create_collection") == [("create_collection",)]
    assert model.called("create_indexes") == [("create_indexes",)]
    assert "test_models" in model.collections


def test_existing_collection_still_gets_indexes():
    model = FakeModel(collections=["test_models"])

    ensure_collection(model)

    assert model.called("create_collection") == []
    assert model.called("create_indexes") == [("create_indexes",)]


def test_existing_collection_without_indexes_does_nothing():
    model = FakeModel(collections=["test_models"])

    ensure_collection(model, create_indexes=False)

    assert model.called("create_collection") == []
    assert model.called("create_indexes") == []


def test_missing_collection_without_indexes():
    model = FakeModel()

    ensure_collection(model, create_indexes=False)

    assert model.called("create_collection") == [("create_collection",)]
    assert model.called("create_indexes") == []


def test_concurrent_creation_is_tolerated():
    model = FakeModel()

    with patch.object(
        model, "create_collection", side_effect=CollectionInvalid("exists")
    ):
        ensure_collection(model)

    assert model.called("create_indexes") == [("create_indexes",)]


def test_driver_error_is_logged_and_raised():
    model = FakeModel()
    error = ServerSelectionTimeoutError("no servers")

    with (
        patch.object(model, "list_collection_names", side_effect=error),
        patch(
            "mongo_bootstrap.lib.reconcile.collections.logger"
        ) as mock_logger,
        pytest.raises(ServerSelectionTimeoutError) as exc_info,
    ):
        ensure_collection(model)

    assert exc_info.value is error
    message = mock_logger.error.call_args.args[0]
    assert "Failed to create collection 'test_models'" in message
