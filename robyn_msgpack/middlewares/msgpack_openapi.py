"""OpenAPI patching for endpoints that take MessagePack request bodies."""

import orjson
from robyn import Response

from robyn_msgpack.core.logger import LogIcon, logger
from robyn_msgpack.core.router import MSGPACK_ENDPOINTS
from robyn_msgpack.middlewares.base import BaseMiddleware
from robyn_msgpack.models.core import MSGPACK_CONTENT_TYPE

MSGPACK_REQUEST_BODY = {
    "content": {
        MSGPACK_CONTENT_TYPE: {
            "schema": {
                "type": "string",
                "format": "binary",
                "description": "MessagePack encoded body",
            }
        }
    },
    "required": True,
}


class MsgPackOpenAPIMiddleware(BaseMiddleware):
    """Declares ``application/msgpack`` request bodies in the generated OpenAPI document."""

    endpoints = frozenset(["/openapi.json"])

    def after(self, response: Response) -> Response:
        if not MSGPACK_ENDPOINTS:
            return response

        try:
            spec = orjson.loads(response.description)
        except orjson.JSONDecodeError as ex:
            logger.warning("OpenAPI document is not JSON, left unpatched", icon=LogIcon.WARNING, error=str(ex))
            return response

        paths = spec.get("paths", {})
        for endpoint in MSGPACK_ENDPOINTS & paths.keys():
            for operation in paths[endpoint].values():
                operation["requestBody"] = MSGPACK_REQUEST_BODY

        response.description = orjson.dumps(spec).decode()
        return response
