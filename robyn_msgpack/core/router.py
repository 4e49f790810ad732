"""Router with automatic body parsing, validation and response handling."""

import inspect
from collections.abc import Callable, Iterable
from functools import wraps
from typing import Any, get_args, get_origin

import orjson
from pydantic import BaseModel, ValidationError
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod
from robyn.types import Body

from robyn_msgpack.core.body import MsgPackBody
from robyn_msgpack.core.extract import RequestParts
from robyn_msgpack.core.logger import LogIcon, logger
from robyn_msgpack.core.rejection import MsgPackRejection, render_rejection
from robyn_msgpack.models.core import BodyType

MSGPACK_ENDPOINTS: set[str] = set()

MsgPackParams = dict[str, tuple[type[MsgPackBody], Any]]


def _msgpack_annotation(annotation: Any) -> tuple[type[MsgPackBody], Any] | None:
    """Return (body class, target type) for ``MsgPack[T]``/``MsgPackRaw[T]`` annotations."""
    origin = get_origin(annotation)
    if isinstance(origin, type) and issubclass(origin, MsgPackBody):
        args = get_args(annotation)
        return origin, args[0] if args else Any
    if origin is None and isinstance(annotation, type) and issubclass(annotation, MsgPackBody):
        return annotation, Any
    return None


def parse_endpoint_signature(
    sig: inspect.Signature,
) -> tuple[dict[str, tuple[BodyType, type | None]], MsgPackParams]:
    """Parse function signature for JSON body and MessagePack body parameters."""
    parsed: dict[str, tuple[BodyType, type | None]] = {}
    msgpack_params: MsgPackParams = {}

    for name, param in sig.parameters.items():
        annotation = param.annotation

        if msgpack := _msgpack_annotation(annotation):
            msgpack_params[name] = msgpack
            continue

        match annotation:
            case type() if issubclass(annotation, BaseModel):
                parsed[name] = (BodyType.PYDANTIC, type(annotation.__name__, (annotation, Body), {}))
            case type() if issubclass(annotation, Body):
                parsed[name] = (BodyType.JSONABLE, annotation)
            case type() if annotation is dict:
                parsed[name] = (BodyType.JSONABLE, None)
            case _ if name == "body":
                parsed[name] = (BodyType.JSONABLE, None)

    return parsed, msgpack_params


def parse_request_body(
    body_config: dict[str, tuple[BodyType, type | None]],
    kwargs: dict[str, Any],
) -> Response | None:
    """Parse JSON/Pydantic body parameters."""
    for param_name, (body_type, model_cls) in body_config.items():
        if param_name not in kwargs:
            continue
        raw = kwargs[param_name]
        if not isinstance(raw, (str, bytes)):
            continue

        match body_type:
            case BodyType.PYDANTIC if model_cls:
                try:
                    kwargs[param_name] = model_cls.model_validate_json(raw)  # type: ignore[union-attr]
                except ValidationError as ex:
                    return Response(status_code=422, headers={}, description=ex.json())
            case BodyType.JSONABLE:
                try:
                    kwargs[param_name] = orjson.loads(raw)
                except orjson.JSONDecodeError as ex:
                    return Response(status_code=422, headers={}, description=str(ex))
    return None


def parse_request_msgpack(
    msgpack_params: MsgPackParams,
    request: Request,
    kwargs: dict[str, Any],
    json_params: Iterable[str] = (),
) -> Response | None:
    """Decode MessagePack body parameters.

    They share one RequestParts with any JSON body parameters of the same
    handler, so only the first claimant gets the body and the rest render
    BodyAlreadyExtracted.
    """
    if not msgpack_params:
        return None

    parts = RequestParts(request)
    try:
        for param_name, (body_cls, target) in msgpack_params.items():
            kwargs[param_name] = body_cls.from_request(parts, target)
        for param_name in json_params:
            parts.take_body()
    except MsgPackRejection as rejection:
        logger.warning(
            "MsgPack request rejected",
            icon=LogIcon.FORBIDDEN,
            param=param_name,
            reason=str(rejection),
            status=rejection.status_code,
        )
        return render_rejection(rejection)  # type: ignore[arg-type]

    return None


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case MsgPackBody():
            return result.into_response()
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(indent=4),
            )
        case dict():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.HEAD,
    HttpMethod.OPTIONS,
    HttpMethod.TRACE,
    HttpMethod.CONNECT,
)


def _create_method_wrapper(original_method: Callable, router_prefix: str = "") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        endpoint = args[0] if args else kwargs.get("endpoint", "")
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            body_config, msgpack_params = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            if msgpack_params:
                full_path = f"{router_prefix}{endpoint}".replace("//", "/")
                MSGPACK_ENDPOINTS.add(full_path)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                json_params = [name for name in body_config if name in h_kwargs]
                if error := parse_request_msgpack(msgpack_params, request, h_kwargs, json_params):
                    return error

                if error := parse_request_body(body_config, h_kwargs):
                    return error

                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                result = await handler(**h_kwargs)
                return parse_response(result)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            for name, param in sig.parameters.items():
                if name == "request" or name in msgpack_params:
                    continue
                if name in body_config:
                    new_params.append(param.replace(annotation=body_config[name][1]))
                else:
                    new_params.append(param)

            # Robyn's OpenAPI generator only understands plain classes as return types
            return_annotation = sig.return_annotation
            if _msgpack_annotation(return_annotation):
                return_annotation = inspect.Signature.empty

            wrapped_handler.__signature__ = sig.replace(  # type: ignore[attr-defined]
                parameters=new_params, return_annotation=return_annotation
            )
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """Enhanced SubRouter with automatic JSON/MessagePack body parsing and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._prefix = kwargs.get("prefix", "")
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with parsing logic."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                wrapped_method = _create_method_wrapper(original_method, self._prefix)
                setattr(self, method_name, wrapped_method)
