"""Tests for the MsgPack and MsgPackRaw body pipelines."""

import msgpack
import pytest
from conftest import Input, MockRequest, Person, body_bytes, make_request

from robyn_msgpack.core.body import MsgPack, MsgPackRaw
from robyn_msgpack.core.codec import encode
from robyn_msgpack.core.extract import RequestParts
from robyn_msgpack.core.rejection import (
    BodyAlreadyExtracted,
    HeadersAlreadyExtracted,
    InvalidMsgPackBody,
    MissingMsgPackContentType,
    render_rejection,
)
from robyn_msgpack.models.core import EncodingMode

# -----------------------------------------------------------------------------
# Inbound Tests
# -----------------------------------------------------------------------------


class TestFromRequest:
    """Tests for decoding request bodies."""

    def test_named_foo_bar(self, foo_bar_parts: RequestParts) -> None:
        """Verify a named body decodes into the target model."""
        assert MsgPack.from_request(foo_bar_parts, Input) == MsgPack(Input(foo="bar"))

    def test_named_into_dict(self, foo_bar_request: MockRequest) -> None:
        """Verify dict targets keep the decoded mapping."""
        assert MsgPack.extract(foo_bar_request, dict).value == {"foo": "bar"}

    def test_suffix_content_type_accepted(self) -> None:
        """Verify vendor types with a +msgpack suffix are accepted."""
        request = make_request(msgpack.packb({"foo": "bar"}), content_type="application/vnd.example+msgpack")
        assert MsgPack.extract(request, Input).value == Input(foo="bar")

    def test_x_msgpack_with_params_accepted(self) -> None:
        """Verify the x- synonym with parameters is accepted."""
        request = make_request(msgpack.packb({"foo": "bar"}), content_type="Application/X-MsgPack; charset=binary")
        assert MsgPack.extract(request, Input).value == Input(foo="bar")

    def test_raw_positional_body(self, person: Person) -> None:
        """Verify the raw pipeline reads positional arrays."""
        request = make_request(encode(person, EncodingMode.RAW))
        assert MsgPackRaw.extract(request, Person).value == person

    @pytest.mark.parametrize("body_cls", [MsgPack, MsgPackRaw])
    def test_missing_content_type(self, body_cls) -> None:
        """Verify both pipelines refuse requests without a content type."""
        request = make_request(msgpack.packb({"foo": "bar"}), content_type=None)
        with pytest.raises(MissingMsgPackContentType) as exc_info:
            body_cls.extract(request, Input)

        response = render_rejection(exc_info.value)
        assert response.status_code == 400
        assert b"Expected request with `Content-Type: application/msgpack`" in body_bytes(response)

    @pytest.mark.parametrize("content_type", ["application/json", "text/plain", "application/msgpack+json"])
    def test_wrong_content_type(self, content_type: str) -> None:
        """Verify other content types are refused before the body is touched."""
        parts = RequestParts(make_request(msgpack.packb({"foo": "bar"}), content_type=content_type))
        with pytest.raises(MissingMsgPackContentType):
            MsgPack.from_request(parts, Input)
        assert not parts.body_taken

    def test_invalid_body(self) -> None:
        """Verify garbage is reported as an invalid body."""
        with pytest.raises(InvalidMsgPackBody):
            MsgPack.extract(make_request(b"\xc1"), Input)

    def test_named_body_to_raw_pipeline(self) -> None:
        """Verify a map body does not satisfy the positional pipeline."""
        with pytest.raises(InvalidMsgPackBody):
            MsgPackRaw.extract(make_request(msgpack.packb({"foo": "bar"})), Input)

    def test_second_extraction_fails(self, foo_bar_parts: RequestParts) -> None:
        """Verify two extractors sharing one request cannot both take the body."""
        MsgPack.from_request(foo_bar_parts, Input)
        with pytest.raises(BodyAlreadyExtracted):
            MsgPackRaw.from_request(foo_bar_parts, Input)

    def test_second_extraction_fails_after_invalid_body(self) -> None:
        """Verify a failed decode still consumes the body."""
        parts = RequestParts(make_request(b"\xc1"))
        with pytest.raises(InvalidMsgPackBody):
            MsgPack.from_request(parts, Input)
        with pytest.raises(BodyAlreadyExtracted):
            MsgPack.from_request(parts, Input)

    def test_headers_taken(self, foo_bar_parts: RequestParts) -> None:
        """Verify extraction fails when the headers are gone."""
        foo_bar_parts.take_headers()
        with pytest.raises(HeadersAlreadyExtracted):
            MsgPack.from_request(foo_bar_parts, Input)


# -----------------------------------------------------------------------------
# Outbound Tests
# -----------------------------------------------------------------------------


class TestIntoResponse:
    """Tests for encoding response bodies."""

    def test_named_response(self) -> None:
        """Verify a named response carries map-shaped bytes and the msgpack content type."""
        response = MsgPack(Input(foo="bar")).into_response()
        assert response.status_code == 200
        assert response.headers.get("content-type") == "application/msgpack"
        assert msgpack.unpackb(body_bytes(response)) == {"foo": "bar"}

    def test_raw_response(self) -> None:
        """Verify a raw response carries array-shaped bytes and the same content type."""
        response = MsgPackRaw(Input(foo="bar")).into_response()
        assert response.headers.get("content-type") == "application/msgpack"
        assert msgpack.unpackb(body_bytes(response)) == ["bar"]

    def test_status_and_headers_from_handler(self) -> None:
        """Verify the handler's status and extra headers are kept."""
        response = MsgPack({"id": 7}).into_response(status_code=201, headers={"location": "/items/7"})
        assert response.status_code == 201
        assert response.headers.get("location") == "/items/7"
        assert response.headers.get("content-type") == "application/msgpack"

    def test_content_type_cannot_be_overridden(self) -> None:
        """Verify a handler header does not replace the msgpack content type."""
        response = MsgPack({"id": 7}).into_response(headers={"content-type": "application/json"})
        assert response.headers.get("content-type") == "application/msgpack"

    @pytest.mark.parametrize("body_cls", [MsgPack, MsgPackRaw])
    def test_unrepresentable_value(self, body_cls) -> None:
        """Verify an encode failure becomes a plain-text 500 carrying the error text."""
        value = {"key": object()}
        with pytest.raises(TypeError) as exc_info:
            msgpack.packb(value)

        response = body_cls(value).into_response(status_code=201)

        assert response.status_code == 500
        assert response.headers.get("content-type").startswith("text/plain")
        assert str(exc_info.value).encode() in body_bytes(response)

    @pytest.mark.parametrize("body_cls", [MsgPack, MsgPackRaw])
    def test_round_trip_through_request(self, body_cls, person: Person) -> None:
        """Verify a response body is accepted by the matching pipeline."""
        response = body_cls(person).into_response()
        request = make_request(body_bytes(response), content_type=response.headers.get("content-type"))
        assert body_cls.extract(request, Person) == body_cls(person)


# -----------------------------------------------------------------------------
# Wrapper Tests
# -----------------------------------------------------------------------------


class TestWrapper:
    """Tests for the wrapper value semantics."""

    def test_pattern_matching(self) -> None:
        """Verify the wrapped value can be destructured."""
        match MsgPack(Input(foo="bar")):
            case MsgPack(Input(foo=foo)):
                assert foo == "bar"
            case _:
                pytest.fail("MsgPack did not match")

    def test_variants_are_distinct(self) -> None:
        """Verify named and raw wrappers of the same value are not equal."""
        assert MsgPack(1) != MsgPackRaw(1)
        assert MsgPack(1) == MsgPack(1)

    def test_repr(self) -> None:
        """Verify repr names the variant."""
        assert repr(MsgPackRaw([1])) == "MsgPackRaw([1])"

    def test_modes(self) -> None:
        """Verify each variant has a fixed mode."""
        assert MsgPack.mode is EncodingMode.NAMED
        assert MsgPackRaw.mode is EncodingMode.RAW
