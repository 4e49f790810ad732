"""Test fixtures for robyn-msgpack unit tests."""

from dataclasses import dataclass, field

import msgpack
import pytest
from pydantic import BaseModel

from robyn_msgpack.core.extract import RequestParts


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request. Keys are case-insensitive like Robyn's."""

    _data: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._data = {key.lower(): value for key, value in self._data.items()}

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key.lower()] = value


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    body: bytes | str = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    method: str = "POST"
    path: str = "/"


# -----------------------------------------------------------------------------
# Shared models
# -----------------------------------------------------------------------------


class Input(BaseModel):
    """Single-field payload."""

    foo: str


class Address(BaseModel):
    street: str
    number: int


class Person(BaseModel):
    """Nested payload exercising positional restructuring."""

    name: str
    age: int
    tags: list[str]
    address: Address
    previous: list[Address] = []
    nickname: str | None = None
    avatar: bytes = b""


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def body_bytes(response) -> bytes:
    """Robyn keeps the description as given; normalize to bytes."""
    description = response.description
    return description.encode() if isinstance(description, str) else bytes(description)


def make_request(body: bytes | str = b"", content_type: str | None = "application/msgpack", **headers) -> MockRequest:
    data = dict(headers)
    if content_type is not None:
        data["content-type"] = content_type
    return MockRequest(body=body, headers=MockHeaders(data))


@pytest.fixture
def person() -> Person:
    return Person(
        name="Ada",
        age=36,
        tags=["math", "engines"],
        address=Address(street="St James's Square", number=12),
        previous=[Address(street="Marylebone", number=1)],
        avatar=b"\x00\x01\x02",
    )


@pytest.fixture
def foo_bar_request() -> MockRequest:
    return make_request(msgpack.packb({"foo": "bar"}))


@pytest.fixture
def foo_bar_parts(foo_bar_request: MockRequest) -> RequestParts:
    return RequestParts(foo_bar_request)
