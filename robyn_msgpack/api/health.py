"""Health check endpoint."""

from pydantic import BaseModel

from robyn_msgpack.core.content_type import MSGPACK_SUBTYPES, MSGPACK_SUFFIX
from robyn_msgpack.core.logger import LogIcon, logger
from robyn_msgpack.core.router import Router
from robyn_msgpack.core.settings import settings as st

router = Router(__file__, prefix="/")


class HealthResponse(BaseModel):
    """Health check response model, advertising the accepted MessagePack content types."""

    status: str
    service: str
    version: str
    accepts: list[str]


def accepted_content_types() -> list[str]:
    return [f"application/{subtype}" for subtype in sorted(MSGPACK_SUBTYPES)] + [f"application/*+{MSGPACK_SUFFIX}"]


@router.get("/health")
async def health_check() -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return HealthResponse(
        status="healthy",
        service=st.API_NAME,
        version=st.API_VERSION,
        accepts=accepted_content_types(),
    )
