# pylint: disable=E1101,I1101

import typing
from http.client import UNSUPPORTED_MEDIA_TYPE

import blacksheep
import orjson
from blacksheep import exceptions as http_exceptions

from cnft_minter import exceptions


class BadRequest(Exception):
    def __init__(
        self,
        message: str | None = None,
        details: dict[str, typing.Any] | None = None,
        status: int | None = None,
    ):
        super().__init__(message)
        self.status = status or 400
        self.details = details or {"details": ""}


class UnsupportedMediaType(http_exceptions.HTTPException):  # pylint: disable=R0903
    def __init__(self, message: str = "Unsupported Media Type"):
        super().__init__(UNSUPPORTED_MEDIA_TYPE, message)


def _json_response(status: int, body: dict[str, typing.Any]) -> blacksheep.Response:
    content = blacksheep.Content(
        data=orjson.dumps(body),
        content_type=b"application/json",
    )

    return blacksheep.Response(status, content=content)


async def error_400_handler(
    _self: typing.Any, _request: blacksheep.Request, exc: BadRequest
) -> blacksheep.Response:
    assert isinstance(exc, BadRequest)

    return _json_response(exc.status, exc.details | {"status": exc.status})


async def mint_error_handler(
    _self: typing.Any, _request: blacksheep.Request, exc: exceptions.MintError
) -> blacksheep.Response:
    assert isinstance(exc, exceptions.MintError)

    return _json_response(
        exc.status,
        {
            "details": str(exc),
            "error": type(exc).__name__,
            "status": exc.status,
        },
    )
