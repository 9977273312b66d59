from __future__ import annotations

import pytest

from core.domain.media_type import MediaType
from core.domain.models import (
    ById,
    ByKey,
    ByVersionId,
    QueryParameters,
    RequestBody,
    ResponseShape,
)
from core.exceptions import PreconditionViolation
from core.services.request_builder import RequestBuilder, split_path
from support import Entry


@pytest.fixture
def builder() -> RequestBuilder:
    return RequestBuilder("/v1/entries")


def test_collection_request_has_only_base(builder: RequestBuilder) -> None:
    request = builder.build("get", target=Entry)

    assert request.method == "GET"
    assert request.path == ("v1", "entries")
    assert request.url == "/v1/entries"
    assert request.headers == {"Accept": "application/json"}
    assert request.cookies == {}


def test_path_order_is_base_id_versions_version_suffix(builder: RequestBuilder) -> None:
    request = builder.build(
        "GET",
        locator=ById(id=7),
        version=ByVersionId(version_id=3),
        suffix="available",
        shape=ResponseShape.GENERIC,
        target=bool,
    )

    assert request.path_string == "/v1/entries/7/versions/3/available"


def test_key_is_used_verbatim(builder: RequestBuilder) -> None:
    request = builder.build("GET", locator=ByKey(key="abc-123"), target=Entry)

    assert request.path_string == "/v1/entries/abc-123"


def test_versions_listing_without_version_id(builder: RequestBuilder) -> None:
    request = builder.build("GET", locator=ById(id=1), versions=True, target=list[Entry])

    assert request.path_string == "/v1/entries/1/versions"


def test_versioned_path_without_locator_is_rejected(builder: RequestBuilder) -> None:
    with pytest.raises(PreconditionViolation):
        builder.build("GET", version=ByVersionId(version_id=2), target=Entry)


def test_extension_attaches_to_last_addressing_segment(builder: RequestBuilder) -> None:
    plain = builder.build("GET", locator=ById(id=1), extension=".pdf", shape=ResponseShape.STREAM)
    versioned = builder.build(
        "GET",
        locator=ById(id=1),
        version=ByVersionId(version_id=4),
        extension=".xml",
        shape=ResponseShape.TEXT,
    )

    assert plain.path_string == "/v1/entries/1.pdf"
    assert versioned.path_string == "/v1/entries/1/versions/4.xml"


def test_extension_needs_an_element(builder: RequestBuilder) -> None:
    with pytest.raises(PreconditionViolation):
        builder.build("GET", extension=".json", shape=ResponseShape.TEXT)


def test_free_form_suffix_is_split_into_segments(builder: RequestBuilder) -> None:
    request = builder.build("GET", locator=ById(id=1), suffix="notes/recent", target=Entry)

    assert request.path == ("v1", "entries", "1", "notes", "recent")


def test_query_parameters_keep_repeated_keys_in_order(builder: RequestBuilder) -> None:
    query = QueryParameters({"tag": ["a", "b"], "limit": "10"}).add("tag", "c")

    request = builder.build("GET", query=query, target=list[Entry], shape=ResponseShape.GENERIC)

    assert request.query == (("tag", "a"), ("tag", "b"), ("limit", "10"), ("tag", "c"))
    assert request.url == "/v1/entries?tag=a&tag=b&limit=10&tag=c"


def test_absent_query_adds_no_query_string(builder: RequestBuilder) -> None:
    assert builder.build("GET", query=None, target=Entry).url == "/v1/entries"
    assert builder.build("GET", query=QueryParameters(), target=Entry).url == "/v1/entries"


def test_session_is_a_cookie_only(builder: RequestBuilder) -> None:
    request = builder.build("GET", locator=ById(id=1), session=42, target=Entry)

    assert request.cookies == {"X-SessionId": "42"}
    assert "42" not in request.url
    assert "Cookie" not in request.headers


def test_structured_body_sets_content_type(builder: RequestBuilder) -> None:
    request = builder.build("POST", body=RequestBody.entity(Entry(entry="foo")), target=Entry)

    assert request.headers["Content-Type"] == "application/json"
    assert request.body.content == Entry(entry="foo")
    assert request.body.raw is False


def test_raw_body_keeps_explicit_media_type(builder: RequestBuilder) -> None:
    body = RequestBody.raw_string("<entry>foo</entry>", MediaType.XML)

    request = builder.build("PUT", locator=ById(id=1), body=body, target=Entry)

    assert request.headers["Content-Type"] == "application/xml"
    assert request.body.raw is True


def test_decoded_shapes_require_a_target(builder: RequestBuilder) -> None:
    with pytest.raises(PreconditionViolation):
        builder.build("GET", shape=ResponseShape.ELEMENT)
    assert builder.build("DELETE", shape=ResponseShape.NO_CONTENT).target is None


@pytest.mark.parametrize("method", ["", "FETCH"])
def test_bad_methods_fail_fast(builder: RequestBuilder, method: str) -> None:
    with pytest.raises(PreconditionViolation):
        builder.build(method, target=Entry)


def test_none_base_path_is_a_precondition_violation() -> None:
    with pytest.raises(PreconditionViolation):
        RequestBuilder(None)  # type: ignore[arg-type]


def test_path_composition_is_associative() -> None:
    nested = RequestBuilder(RequestBuilder("/v1").path_for(suffix="entries/1"))
    flat = RequestBuilder("/v1/entries")

    assert nested.path_for(suffix="notes") == flat.path_for(locator=ById(id=1), suffix="notes")
    assert split_path("a/b") + split_path("c") == split_path(("a", "b/c"))


@pytest.mark.parametrize(
    ("media_type", "extension"),
    [
        (MediaType.JSON, ""),
        ("application/json; charset=utf-8", ""),
        (MediaType.XML, ".xml"),
        ("text/csv", ".json"),
        (MediaType.TEXT, ".json"),
    ],
)
def test_extension_for_media_type(media_type: str, extension: str) -> None:
    assert MediaType.extension_for(media_type) == extension


def test_empty_body_is_zero_length_json(builder: RequestBuilder) -> None:
    request = builder.build("PUT", locator=ById(id=1), body=RequestBody.empty(), shape=ResponseShape.NO_CONTENT)

    assert request.headers["Content-Type"] == "application/json"
    assert request.body.raw is True
    assert request.body.content == ""


def test_descriptor_headers_and_cookies_are_read_only(builder: RequestBuilder) -> None:
    request = builder.build("GET", locator=ById(id=1), session=42, target=Entry)

    with pytest.raises(TypeError):
        request.headers["Accept"] = "text/plain"  # type: ignore[index]
    with pytest.raises(TypeError):
        request.cookies["X-SessionId"] = "43"  # type: ignore[index]
    assert request.cookies == {"X-SessionId": "42"}
