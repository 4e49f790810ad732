"""MessagePack encode/decode in named or positional layout.

Named mode writes pydantic models and dataclasses as maps keyed by field name.
Raw mode writes them as arrays in declared field order and recovers the field
names from the target type on the way back in.

.. warning::
    Raw mode carries no field names. If producer and consumer declare fields
    in a different order, a body whose values are type-compatible with the
    swapped positions decodes successfully with the values transposed. Both
    sides must share the field order out of band.
"""

import dataclasses
import types
from collections.abc import Sequence
from functools import cache
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

import msgpack
from pydantic import BaseModel, TypeAdapter
from pydantic_core import to_jsonable_python

from robyn_msgpack.core.rejection import InvalidMsgPackBody
from robyn_msgpack.models.core import EncodingMode

_SEQUENCE_ORIGINS = (list, set, frozenset, Sequence)
_UNION_ORIGINS = (Union, types.UnionType)


class MsgPackEncodeError(Exception):
    """A value could not be represented as MessagePack."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause


class PositionalShapeError(ValueError):
    """A raw-mode array does not match the target type's field layout."""


# -----------------------------------------------------------------------------
# Field layout
# -----------------------------------------------------------------------------


def field_names(tp: Any) -> tuple[str, ...] | None:
    """Declared field order of a pydantic model or dataclass, None for anything else."""
    if get_origin(tp) is not None or not isinstance(tp, type):
        return None
    if issubclass(tp, BaseModel):
        return tuple(tp.model_fields)
    if dataclasses.is_dataclass(tp):
        return tuple(f.name for f in dataclasses.fields(tp))
    return None


@cache
def _field_types(tp: type) -> dict[str, Any]:
    if issubclass(tp, BaseModel):
        return {name: info.annotation for name, info in tp.model_fields.items()}
    return get_type_hints(tp, include_extras=True)


@cache
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


# -----------------------------------------------------------------------------
# Python values <-> msgpack-ready data
# -----------------------------------------------------------------------------


def unstructure(value: Any, mode: EncodingMode) -> Any:
    """Turn models and dataclasses into maps (NAMED) or arrays (RAW), recursively.

    Sets become arrays. Other values msgpack has no type for are left for the
    packer's ``default`` hook.
    """
    names = field_names(type(value))
    if names is not None:
        fields = [(name, unstructure(getattr(value, name), mode)) for name in names]
        if mode is EncodingMode.RAW:
            return [item for _, item in fields]
        return dict(fields)

    match value:
        case dict():
            return {key: unstructure(item, mode) for key, item in value.items()}
        case list() | tuple() | set() | frozenset():
            return [unstructure(item, mode) for item in value]
        case _:
            return value


def restructure(tp: Any, data: Any) -> Any:
    """Rebuild field-name maps from raw-mode arrays, guided by the target annotation."""
    if get_origin(tp) is Annotated:
        return restructure(get_args(tp)[0], data)

    names = field_names(tp)
    if names is not None:
        if not isinstance(data, list):
            raise PositionalShapeError(f"{tp.__name__} expects an array of {len(names)} fields, got {type(data).__name__}")
        if len(data) != len(names):
            raise PositionalShapeError(f"{tp.__name__} expects {len(names)} fields, got {len(data)}")
        hints = _field_types(tp)
        return {name: restructure(hints[name], item) for name, item in zip(names, data, strict=True)}

    origin, args = get_origin(tp), get_args(tp)
    match data:
        case list() if origin in _SEQUENCE_ORIGINS and args:
            return [restructure(args[0], item) for item in data]
        case list() if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return [restructure(args[0], item) for item in data]
        case list() if origin is tuple and len(args) == len(data):
            return [restructure(arg, item) for arg, item in zip(args, data, strict=True)]
        case dict() if origin is dict and len(args) == 2:
            return {key: restructure(args[1], item) for key, item in data.items()}
        case list() if origin in _UNION_ORIGINS:
            for arg in args:
                if field_names(arg) is not None or get_origin(arg) is not None:
                    return restructure(arg, data)
            return data
        case _:
            return data


# -----------------------------------------------------------------------------
# Encoder / Decoder
# -----------------------------------------------------------------------------


def encode(value: Any, mode: EncodingMode = EncodingMode.NAMED) -> bytes:
    """Serialize ``value``. Raises MsgPackEncodeError when it holds unrepresentable data.

    Datetimes, UUIDs, enums and decimals go out in their JSON form, which
    pydantic validates back into the typed field.
    """
    try:
        return msgpack.packb(unstructure(value, mode), use_bin_type=True, default=to_jsonable_python)
    except (TypeError, ValueError, OverflowError) as ex:
        raise MsgPackEncodeError(ex) from ex


def decode[T](data: bytes, target: type[T], mode: EncodingMode = EncodingMode.NAMED) -> T:
    """Deserialize one complete msgpack value from ``data`` into ``target``.

    Raises InvalidMsgPackBody wrapping the msgpack, shape or validation error.
    """
    try:
        plain = msgpack.unpackb(data, raw=False, strict_map_key=False)
        if mode is EncodingMode.RAW:
            plain = restructure(target, plain)
        return _adapter(target).validate_python(plain)
    except (msgpack.UnpackException, ValueError, TypeError) as ex:
        raise InvalidMsgPackBody(ex) from ex
