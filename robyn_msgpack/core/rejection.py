"""Rejections raised while extracting a MessagePack body, and their HTTP rendering."""

from typing import ClassVar, assert_never

from robyn import Response, status_codes

from robyn_msgpack.models.core import MSGPACK_CONTENT_TYPE

PLAIN_TEXT = "text/plain; charset=utf-8"


class MsgPackRejection(Exception):
    """Base class for every reason an inbound MessagePack body is refused."""

    status_code: ClassVar[int]
    message: ClassVar[str]

    def __str__(self) -> str:
        return self.message

    @property
    def body(self) -> str:
        """Plain-text response body."""
        return self.message


class InvalidMsgPackBody(MsgPackRejection):
    """The body could not be decoded into the target type."""

    status_code = status_codes.HTTP_400_BAD_REQUEST
    message = "Failed to parse the request body as MsgPack"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(cause)
        self.cause = cause

    @property
    def body(self) -> str:
        return f"{self.message}: {self.cause}"


class MissingMsgPackContentType(MsgPackRejection):
    """The request does not declare a MessagePack content type."""

    status_code = status_codes.HTTP_400_BAD_REQUEST
    message = f"Expected request with `Content-Type: {MSGPACK_CONTENT_TYPE}`"


class BodyAlreadyExtracted(MsgPackRejection):
    """Another extractor already took the request body."""

    status_code = status_codes.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Cannot have two request body extractors for a single handler"


class HeadersAlreadyExtracted(MsgPackRejection):
    """Another extractor already took the request headers."""

    status_code = status_codes.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Headers taken by other extractor"


type Rejection = InvalidMsgPackBody | MissingMsgPackContentType | BodyAlreadyExtracted | HeadersAlreadyExtracted


def render_rejection(rejection: Rejection) -> Response:
    """Render a rejection as a plain-text Robyn response."""
    match rejection:
        case InvalidMsgPackBody() | MissingMsgPackContentType() | BodyAlreadyExtracted() | HeadersAlreadyExtracted():
            return Response(
                status_code=rejection.status_code,
                headers={"content-type": PLAIN_TEXT},
                description=rejection.body,
            )
        case _:
            assert_never(rejection)
