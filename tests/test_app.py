"""The HTTP surface of the minter."""

from __future__ import annotations

import blacksheep
import orjson
import pytest
from blacksheep.testing import TestClient

from cnft_minter import bindings, errors, events, exceptions, main, settings

from tests import factories


def make_settings(signer_keypair, **overrides) -> settings.AppSettings:
    values = dict(
        shyft_api_key="test-api-key",
        cnft_mint_account=factories.keypair_secret(signer_keypair),
    )
    values.update(overrides)
    return settings.AppSettings(**values)


@pytest.fixture
async def client(monkeypatch, signer_keypair) -> TestClient:
    monkeypatch.setattr(settings, "app_settings", make_settings(signer_keypair))
    await main.app.start()
    return TestClient(main.app)


async def test_startup_requires_api_key(monkeypatch, signer_keypair):
    monkeypatch.setattr(
        settings, "app_settings", make_settings(signer_keypair, shyft_api_key="")
    )

    with pytest.raises(exceptions.ConfigError, match="SHYFT_API_KEY"):
        await events.create_minter(blacksheep.Application())


async def test_startup_requires_signing_secret(monkeypatch, signer_keypair):
    monkeypatch.setattr(
        settings, "app_settings", make_settings(signer_keypair, cnft_mint_account=" ")
    )

    with pytest.raises(exceptions.ConfigError, match="CNFT_MINT_ACCOUNT"):
        await events.create_minter(blacksheep.Application())


async def test_index(client):
    response = await client.get("/")

    assert response.status == 200
    assert await response.json() == {"message": "ok"}


async def test_invalid_body_is_rejected(client):
    response = await client.post(
        "/cnfts", content=blacksheep.JSONContent({"network": "devnet"})
    )

    assert response.status == 422
    body = await response.json()
    assert body["status"] == 422
    assert any("creator_wallet" in detail["loc"] for detail in body["details"])


async def test_non_json_body_is_rejected(client):
    response = await client.post("/cnfts", content=blacksheep.TextContent("mint it"))

    assert response.status == 415


async def test_mint_handler_returns_created(minter, mint_request, signer_keypair, unsigned_txn):
    response = await main.mint_cnft(bindings.FromMintRequest(mint_request), minter)

    assert response.status == 201
    assert orjson.loads(response.content.body) == {
        "signature": str(signer_keypair.sign_message(bytes(unsigned_txn.message))),
        "mint": factories.MINT_ADDRESS,
    }


@pytest.mark.parametrize(
    "error, status",
    [
        (exceptions.ConfigError("signing secret is not set"), 500),
        (exceptions.ApiError("Tree is full", status_code=400), 502),
        (exceptions.SubmissionError("Blockhash not found"), 502),
    ],
)
async def test_mint_errors_are_reported(error, status):
    response = await errors.mint_error_handler(None, None, error)

    assert response.status == status
    assert orjson.loads(response.content.body) == {
        "details": str(error),
        "error": type(error).__name__,
        "status": status,
    }
