"""Content-type classification for MessagePack request bodies."""

import re
from dataclasses import dataclass, field
from typing import Self

from robyn_msgpack.core.extract import RequestParts

MSGPACK_SUFFIX = "msgpack"
MSGPACK_SUBTYPES = frozenset({"msgpack", "x-msgpack"})

# RFC 7230 token
_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


@dataclass(frozen=True, slots=True)
class ContentType:
    """Parsed view of a MIME header value. Type, subtype and suffix are lowercased."""

    type: str
    subtype: str
    suffix: str | None = None
    params: dict[str, str] = field(default_factory=dict, compare=False)

    @classmethod
    def parse(cls, value: str | None) -> Self | None:
        """Parse ``type/subtype[+suffix][; k=v]...``. Returns None when not a structured MIME value."""
        if not value:
            return None

        essence, *raw_params = value.split(";")
        main, sep, sub = essence.strip().partition("/")
        if not sep or not _TOKEN.match(main) or not _TOKEN.match(sub):
            return None

        params: dict[str, str] = {}
        for raw in raw_params:
            key, eq, val = raw.strip().partition("=")
            if eq and key:
                params[key.strip().lower()] = val.strip().strip('"')

        subtype = sub.lower()
        base, plus, suffix = subtype.rpartition("+")
        return cls(type=main.lower(), subtype=subtype, suffix=suffix if base and plus and suffix else None, params=params)

    @property
    def essence(self) -> str:
        return f"{self.type}/{self.subtype}"

    def is_msgpack(self) -> bool:
        """Match ``application/msgpack``, ``application/x-msgpack`` or any ``application/*+msgpack``."""
        if self.type != "application":
            return False
        return self.subtype in MSGPACK_SUBTYPES or self.suffix == MSGPACK_SUFFIX


def is_msgpack_content_type(value: str | None) -> bool:
    """Classify a raw content-type header value."""
    content_type = ContentType.parse(value)
    return content_type is not None and content_type.is_msgpack()


def is_msgpack_payload(parts: RequestParts) -> bool:
    """Decide from the request headers alone whether the body is MessagePack.

    A missing or unparseable header is a plain ``False``. Raises
    ``HeadersAlreadyExtracted`` when another extractor took the headers.
    """
    return is_msgpack_content_type(parts.headers().get("content-type"))
