"""Example endpoints exchanging a user record as MessagePack."""

from html import escape

from pydantic import BaseModel
from robyn import Response, status_codes

from robyn_msgpack.core.body import MsgPack, MsgPackRaw
from robyn_msgpack.core.logger import LogIcon, logger
from robyn_msgpack.core.router import Router

router = Router(__file__, prefix="/users")


class User(BaseModel):
    """User record. ``data`` travels as a msgpack bin value."""

    name: str
    data: bytes


def sample_user() -> User:
    return User(name="user name", data=bytes(15))


def greeting(user: User) -> Response:
    return Response(
        status_code=status_codes.HTTP_200_OK,
        headers={"content-type": "text/html; charset=utf-8"},
        description=f"<h1>{escape(user.name)}</h1>",
    )


@router.get("/")
async def get_user():
    """Return the sample user with named fields."""
    return MsgPack(sample_user())


@router.post("/")
async def post_user(body: MsgPack[User]):
    """Greet a user sent with named fields."""
    logger.info("User received", icon=LogIcon.DECODE, name=body.value.name, size=len(body.value.data))
    return greeting(body.value)


@router.get("/raw")
async def get_user_raw():
    """Return the sample user as a positional array."""
    return MsgPackRaw(sample_user())


@router.post("/raw")
async def post_user_raw(body: MsgPackRaw[User]):
    """Greet a user sent as a positional array."""
    logger.info("Raw user received", icon=LogIcon.DECODE, name=body.value.name, size=len(body.value.data))
    return greeting(body.value)
