"""robyn-msgpack - MessagePack request/response bodies for Robyn."""

from robyn import Robyn

from robyn_msgpack.api.health import router as health_router
from robyn_msgpack.api.users import router as users_router
from robyn_msgpack.core.logger import LogIcon, logger
from robyn_msgpack.core.settings import settings as st
from robyn_msgpack.middlewares.base import MiddlewareHandler
from robyn_msgpack.middlewares.msgpack_openapi import MsgPackOpenAPIMiddleware

app = Robyn(__file__)

# Routers
app.include_router(health_router)
app.include_router(users_router)

# Middlewares
middlewares = MiddlewareHandler(app)
middlewares.register(MsgPackOpenAPIMiddleware)


def main() -> None:
    logger.info("Starting %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.API_PORT, icon=LogIcon.START)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
