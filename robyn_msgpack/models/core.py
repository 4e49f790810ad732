"""Core models for request/response handling."""

from enum import StrEnum

MSGPACK_CONTENT_TYPE = "application/msgpack"


class BodyType(StrEnum):
    """Body content type classification for request parsing."""

    PYDANTIC = "pydantic"
    JSONABLE = "jsonable"


class EncodingMode(StrEnum):
    """MessagePack wire layout for structured values.

    NAMED writes models as maps keyed by field name. RAW writes them as arrays
    in declared field order, which is smaller but only readable by a consumer
    declaring the same field order.
    """

    NAMED = "named"
    RAW = "raw"
