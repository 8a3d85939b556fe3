# pylint: disable=E1101
"""
cnft_minter.main
~~~~~~~~~~~~~~~~

This module contains the server startup logic.
"""
import asyncio
import platform

import blacksheep
import orjson
import uvloop

from cnft_minter import (
    bindings,
    errors,
    events,
    exceptions,
    middlewares,
    models,
    services,
)

if platform.system() == "Linux":
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())

app = blacksheep.Application()

app.middlewares.append(middlewares.MediaTypeValidator())

# Exception handlers
app.exceptions_handlers[errors.BadRequest] = errors.error_400_handler  # type: ignore
for mint_error in (exceptions.MintError, *exceptions.MintError.__subclasses__()):
    app.exceptions_handlers[mint_error] = errors.mint_error_handler  # type: ignore

# Dependencies
app.on_start += events.create_minter
app.on_stop += events.dispose_minter


@app.router.get("/")
async def index() -> dict[str, str]:
    return {"message": "ok"}


@app.router.post("/cnfts")
async def mint_cnft(
    data: bindings.FromMintRequest[models.MintRequest],
    minter: services.CompressedNftMinter,
) -> blacksheep.Response:
    result = await minter.mint(data.value)

    return blacksheep.Response(
        status=201,
        content=blacksheep.Content(b"application/json", orjson.dumps(result.to_dict())),
    )
