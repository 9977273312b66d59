from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.domain.models import (
    ById,
    ByKey,
    ByVersionId,
    MultiStatusResult,
    QueryParameters,
    RawResponse,
    StatusEntry,
    locate,
    version_of,
)
from core.exceptions import MultiStatusError, PreconditionViolation, ServerStatusError


def test_locate_normalizes_ids_and_keys() -> None:
    assert locate(5) == ById(id=5)
    assert locate("abc") == ByKey(key="abc")
    assert locate(ByKey(key="k")) == ByKey(key="k")
    assert locate(None) is None


@pytest.mark.parametrize("value", [True, "", 1.5, ["x"]])
def test_locate_rejects_other_values(value: object) -> None:
    with pytest.raises(PreconditionViolation):
        locate(value)  # type: ignore[arg-type]


def test_version_of() -> None:
    assert version_of(3) == ByVersionId(version_id=3)
    assert version_of(None) is None
    with pytest.raises(PreconditionViolation):
        version_of("3")  # type: ignore[arg-type]


def test_locators_are_immutable() -> None:
    locator = ById(id=1)
    with pytest.raises(ValidationError):
        locator.id = 2  # type: ignore[misc]


def test_query_parameters_from_pairs_and_mapping() -> None:
    from_pairs = QueryParameters([("a", "1"), ("b", "2"), ("a", "3")])
    from_mapping = QueryParameters({"a": ["1"], "b": "2"}).add("a", "3")

    assert from_pairs == from_mapping
    assert from_pairs.get_all("a") == ["1", "3"]
    assert from_pairs.keys() == ["a", "b"]
    assert len(from_pairs) == 3


def test_query_parameters_coerce() -> None:
    query = QueryParameters({"x": "1"})

    assert QueryParameters.coerce(query) is query
    assert QueryParameters.coerce(None) is None
    assert QueryParameters.coerce({"x": "1"}) == query
    assert not QueryParameters()


def test_query_parameters_scalar_values() -> None:
    query = QueryParameters({"page": 2, "tag": ("a", "b"), "raw": b"x"})

    assert query.items() == [("page", "2"), ("tag", "a"), ("tag", "b"), ("raw", "x")]


def test_query_parameters_reject_none_values() -> None:
    with pytest.raises(PreconditionViolation, match="'page'"):
        QueryParameters({"page": None})


def test_raw_response_success_range() -> None:
    assert RawResponse(status_code=201).is_success
    assert RawResponse(status_code=204).is_success
    assert not RawResponse(status_code=302).is_success
    assert not RawResponse(status_code=404).is_success


def test_multi_status_result_from_errors() -> None:
    result = MultiStatusResult.from_errors(
        {
            1: ServerStatusError(404, "missing"),
            2: ServerStatusError(409, "conflict"),
        }
    )

    assert result.results == [
        StatusEntry(id=1, status_code=404, message="missing"),
        StatusEntry(id=2, status_code=409, message="conflict"),
    ]
    error = MultiStatusError("2 deletes failed", result)
    assert error.result is result


def test_server_status_error_message() -> None:
    exc = ServerStatusError(404, "no such entry", url="/v1/entries/9")

    assert exc.is_not_found
    assert str(exc) == "HTTP 404 (/v1/entries/9): no such entry"
