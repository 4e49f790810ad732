"""Per-request, single-use access to a request's headers and body."""

from enum import Enum
from typing import Any, Final, Literal, Protocol

from robyn_msgpack.core.rejection import BodyAlreadyExtracted, HeadersAlreadyExtracted


class _Taken(Enum):
    TAKEN = "taken"

    def __repr__(self) -> str:
        return "TAKEN"


TAKEN: Final = _Taken.TAKEN


class HeaderView(Protocol):
    def get(self, key: str) -> str | None: ...


class RequestParts:
    """Owns the headers and body of one request until an extractor claims them.

    Create one per request and share it between every extractor of that
    request. Each part can be taken once; afterwards the slot holds ``TAKEN``
    and any further access raises the matching rejection, so an empty body is
    never confused with a consumed one.
    """

    __slots__ = ("_body", "_headers", "request")

    def __init__(self, request: Any) -> None:
        self.request = request
        self._headers: HeaderView | Literal[_Taken.TAKEN] = request.headers
        self._body: str | bytes | None | Literal[_Taken.TAKEN] = getattr(request, "body", None)

    def __repr__(self) -> str:
        return f"RequestParts(headers={self._headers!r}, body={'TAKEN' if self.body_taken else 'present'})"

    @property
    def body_taken(self) -> bool:
        return self._body is TAKEN

    @property
    def headers_taken(self) -> bool:
        return self._headers is TAKEN

    def headers(self) -> HeaderView:
        """Borrow the headers without taking them."""
        if self._headers is TAKEN:
            raise HeadersAlreadyExtracted()
        return self._headers

    def take_headers(self) -> HeaderView:
        headers = self.headers()
        self._headers = TAKEN
        return headers

    def take_body(self) -> bytes:
        """Move the body out of the request.

        Robyn hands over bodies that happen to be valid UTF-8 as ``str``; those
        are re-encoded to the same bytes. A missing body is ``b""``.
        """
        if self._body is TAKEN:
            raise BodyAlreadyExtracted()
        body, self._body = self._body, TAKEN

        match body:
            case None:
                return b""
            case str():
                return body.encode("utf-8")
            case _:
                return bytes(body)
