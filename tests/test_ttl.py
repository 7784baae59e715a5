from unittest.mock import patch

import pytest
from pymongo import ASCENDING
from pymongo.errors import AutoReconnect, OperationFailure

from mongo_bootstrap.lib.reconcile.ttl import (
    check_and_update_ttl,
    create_ttl_index,
    is_index_not_found,
)
from mongo_bootstrap.types import Outcome
from tests.conftest import FakeModel


def ttl_model(expire_after_seconds=3600):
    return FakeModel(
        indexes=[
            {
                "name": "ttlIndex",
                "key": {"expire_at": 1},
                "expireAfterSeconds": expire_after_seconds,
            }
        ]
    )


def test_create_ttl_index():
    model = FakeModel()

    create_ttl_index(model, "expire_at", "expire_at_1", 60)

    _, keys, options = model.called("create_index")[0]
    assert keys == [("expire_at", ASCENDING)]
    assert options["name"] == "expire_at_1"
    assert options["expireAfterSeconds"] == 60


def test_up_to_date_index_is_left_alone():
    model = ttl_model(3600)

    result = check_and_update_ttl(model, "ttlIndex", 3600)

    assert result.outcome is Outcome.ok
    assert model.called("drop_index") == []
    assert model.called("create_index") == []


def test_missing_index_is_created():
    model = FakeModel()

    result = check_and_update_ttl(model, "expire_at_1", 60)

    assert result.outcome is Outcome.ok
    _, keys, options = model.called("create_index")[0]
    assert keys == [("expire_at", ASCENDING)]
    assert options["expireAfterSeconds"] == 60
    assert model.called("drop_index") == []


def test_missing_index_uses_given_field():
    model = FakeModel()

    check_and_update_ttl(model, "ttlIndex", 60, field="created_at")

    assert model.called("create_index")[0][1] == [
        ("created_at", ASCENDING)
    ]


def test_drifted_index_is_dropped_then_recreated():
    model = ttl_model(3600)

    result = check_and_update_ttl(model, "ttlIndex", 7200)

    assert result.outcome is Outcome.ok
    assert [call[0] for call in model.calls] == ["drop_index", "create_index"]
    _, keys, options = model.called("create_index")[0]
    assert keys == [("expire_at", ASCENDING)]
    assert options["expireAfterSeconds"] == 7200


def test_index_already_gone_is_recreated():
    model = ttl_model(3600)
    error = OperationFailure("index not found with name [ttlIndex]", code=27)

    with patch.object(model, "drop_index", side_effect=error):
        result = check_and_update_ttl(model, "ttlIndex", 7200)

    assert result.outcome is Outcome.ok
    assert model.called("create_index")[0][2]["expireAfterSeconds"] == 7200


def test_drop_failure_is_raised_without_recreating():
    model = ttl_model(3600)
    error = Exception("Drop failed")

    with (
        patch.object(model, "drop_index", side_effect=error),
        patch(
            "mongo_bootstrap.lib.reconcile.ttl.create_ttl_index"
        ) as mock_create,
        patch("mongo_bootstrap.lib.reconcile.ttl.logger") as mock_logger,
        pytest.raises(Exception) as exc_info,
    ):
        check_and_update_ttl(model, "ttlIndex", 7200)

    assert exc_info.value is error
    mock_create.assert_not_called()
    mock_logger.error.assert_called_once_with(
        'Failed to drop TTL index "TestModel.ttlIndex": Drop failed'
    )


def test_other_operation_failure_is_raised():
    model = ttl_model(3600)
    error = OperationFailure("not authorized", code=13)

    with (
        patch.object(model, "drop_index", side_effect=error),
        pytest.raises(OperationFailure) as exc_info,
    ):
        check_and_update_ttl(model, "ttlIndex", 7200)

    assert exc_info.value is error
    assert model.called("create_index") == []


def test_transient_drop_error_is_retried():
    model = ttl_model(3600)
    real_drop = model.drop_index
    attempts = []

    def flaky_drop(index_name):
        attempts.append(index_name)
        if len(attempts) == 1:
            raise AutoReconnect("primary stepped down")
        real_drop(index_name)

    with (
        patch.object(model, "drop_index", side_effect=flaky_drop),
        patch("mongo_bootstrap.lib.reconcile.ttl.sleep") as mock_sleep,
    ):
        result = check_and_update_ttl(model, "ttlIndex", 7200)

    assert result.outcome is Outcome.ok
    assert len(attempts) == 2
    mock_sleep.assert_called_once()
    assert model.called("create_index")[0][2]["expireAfterSeconds"] == 7200


def test_persistent_transient_error_is_raised():
    model = ttl_model(3600)
    error = AutoReconnect("connection refused")

    with (
        patch.object(model, "drop_index", side_effect=error) as mock_drop,
        patch("mongo_bootstrap.lib.reconcile.ttl.sleep") as mock_sleep,
        patch("mongo_bootstrap.lib.reconcile.ttl.config") as mock_config,
        pytest.raises(AutoReconnect),
    ):
        mock_config.ttl_drop_retries = 2
        mock_config.ttl_drop_retry_delay_seconds = 0.5
        check_and_update_ttl(model, "ttlIndex", 7200)

    assert mock_drop.call_count == 3
    assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]
    assert model.called("create_index") == []


def test_is_index_not_found():
    assert is_index_not_found(OperationFailure("gone", code=27))
    assert is_index_not_found(
        OperationFailure("gone", details={"codeName": "IndexNotFound"})
    )
    assert not is_index_not_found(OperationFailure("denied", code=13))
    assert not is_index_not_found(Exception("Drop failed"))
