"""The aiohttp transport against an in-process server."""

from __future__ import annotations

import socket

import pytest
from aiohttp import test_utils, web

from cnft_minter import exceptions, services


@pytest.fixture
async def mint_server():
    received: list[dict] = []

    async def handle_mint(request: web.Request) -> web.Response:
        received.append(
            {
                "api_key": request.headers.get("x-api-key"),
                "content_type": request.headers.get("Content-Type"),
                "body": await request.read(),
            }
        )
        return web.json_response({"success": False, "message": "rejected"}, status=400)

    app = web.Application()
    app.router.add_post("/sol/v1/nft/compressed/mint", handle_mint)

    server = test_utils.TestServer(app)
    await server.start_server()
    yield server, received
    await server.close()


async def test_post_returns_status_and_body(mint_server):
    server, received = mint_server
    url = str(server.make_url("/sol/v1/nft/compressed/mint"))

    status, body = await services.AiohttpTransport().post(
        url, b'{"network": "devnet"}', {"x-api-key": "k", "Content-Type": "application/json"}
    )

    assert status == 400
    assert b"rejected" in body
    assert received == [
        {
            "api_key": "k",
            "content_type": "application/json",
            "body": b'{"network": "devnet"}',
        }
    ]


async def test_unreachable_host_raises_transport_error():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    with pytest.raises(exceptions.TransportError):
        await services.AiohttpTransport().post(
            f"http://127.0.0.1:{port}/mint", b"{}", {}
        )
