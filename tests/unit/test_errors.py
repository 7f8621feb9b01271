import pytest

from shortener.storage.errors import (
    BackendUnavailableError,
    ConflictError,
    DeletedError,
    NotFoundError,
    OperationCancelledError,
    PartialBatchError,
    StoreError,
)


@pytest.mark.parametrize(
    "exc",
    [
        NotFoundError("1"),
        DeletedError("1"),
        ConflictError("1"),
        PartialBatchError(3, 2),
        BackendUnavailableError("down"),
        OperationCancelledError(),
    ],
)
def test_every_error_is_a_store_error(exc):
    assert isinstance(exc, StoreError)


def test_error_payloads():
    assert ConflictError("7").id == "7"
    assert NotFoundError("x").id == "x"
    partial = PartialBatchError(expected=3, actual=2)
    assert (partial.expected, partial.actual) == (3, 2)
    assert "expected 3, got 2" in str(partial)
    assert OperationCancelledError("slow", 0.5).timeout == 0.5
