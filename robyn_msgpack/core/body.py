"""Typed MessagePack request/response bodies for Robyn handlers.

``MsgPack[T]`` reads and writes structured values as field-name-keyed maps.
``MsgPackRaw[T]`` reads and writes them as positional arrays; see
``robyn_msgpack.core.codec`` for the field-order caveat that comes with it.
Both send ``content-type: application/msgpack``, so the receiver must know
which layout to expect.
"""

from typing import Any, ClassVar, Self

from robyn import Request, Response, status_codes

from robyn_msgpack.core.codec import MsgPackEncodeError, decode, encode
from robyn_msgpack.core.content_type import is_msgpack_payload
from robyn_msgpack.core.extract import RequestParts
from robyn_msgpack.core.logger import LogIcon, logger
from robyn_msgpack.core.rejection import PLAIN_TEXT, MissingMsgPackContentType
from robyn_msgpack.models.core import MSGPACK_CONTENT_TYPE, EncodingMode


class MsgPackBody[T]:
    """Single-value wrapper shared by the named and positional body types."""

    __slots__ = ("value",)
    __match_args__ = ("value",)

    mode: ClassVar[EncodingMode]

    def __init__(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def from_request(cls, parts: RequestParts, target: type[T]) -> Self:
        """Classify, take the body and decode it into ``target``.

        Raises MissingMsgPackContentType, HeadersAlreadyExtracted,
        BodyAlreadyExtracted or InvalidMsgPackBody.
        """
        if not is_msgpack_payload(parts):
            raise MissingMsgPackContentType()
        body = parts.take_body()
        return cls(decode(body, target, cls.mode))

    @classmethod
    def extract(cls, request: Request | Any, target: type[T]) -> Self:
        """Extract from a request nobody else reads from."""
        return cls.from_request(RequestParts(request), target)

    def into_response(
        self,
        status_code: int = status_codes.HTTP_200_OK,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Encode the value. An unrepresentable value yields a plain-text 500 instead."""
        try:
            payload = encode(self.value, self.mode)
        except MsgPackEncodeError as ex:
            logger.error(
                "MsgPack response encoding failed",
                icon=LogIcon.ERROR,
                body_type=self.__class__.__name__,
                error=str(ex),
            )
            return Response(
                status_code=status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
                headers={"content-type": PLAIN_TEXT},
                description=str(ex),
            )

        return Response(
            status_code=status_code,
            headers={**(headers or {}), "content-type": MSGPACK_CONTENT_TYPE},
            description=payload,
        )


class MsgPack[T](MsgPackBody[T]):
    """MessagePack body with named fields."""

    __slots__ = ()
    mode = EncodingMode.NAMED


class MsgPackRaw[T](MsgPackBody[T]):
    """MessagePack body with positional fields and no names."""

    __slots__ = ()
    mode = EncodingMode.RAW
