"""Mint request payloads and response parsing."""

from __future__ import annotations

import pydantic
import pytest

from cnft_minter import models


def test_payload_omits_unset_optional_fields(mint_request):
    assert mint_request.to_payload() == {
        "network": "mainnet-beta",
        "creator_wallet": "C1",
        "metadata_uri": "ipfs://x",
        "merkle_tree": "M1",
    }


def test_payload_includes_optional_fields():
    request = models.MintRequest(
        network="devnet",
        creator_wallet="C1",
        metadata_uri="ipfs://x",
        merkle_tree="M1",
        collection_address="COLL",
        receiver="R1",
        priority_fee=0,
    )

    payload = request.to_payload()

    assert payload["collection_address"] == "COLL"
    assert payload["receiver"] == "R1"
    assert payload["priority_fee"] == 0
    assert payload["network"] == "devnet"


def test_network_defaults_to_mainnet_beta():
    request = models.MintRequest(
        creator_wallet="C1", metadata_uri="ipfs://x", merkle_tree="M1"
    )
    assert request.network == models.MAINNET_BETA


def test_negative_priority_fee_rejected():
    with pytest.raises(pydantic.ValidationError):
        models.MintRequest(
            creator_wallet="C1",
            metadata_uri="ipfs://x",
            merkle_tree="M1",
            priority_fee=-1,
        )


def test_request_is_immutable(mint_request):
    with pytest.raises(pydantic.ValidationError):
        mint_request.merkle_tree = "M2"


def test_response_without_signers():
    response = models.MintApiResponse.model_validate(
        {
            "success": True,
            "message": "ok",
            "result": {"encoded_transaction": "AA==", "mint": "MINT"},
        }
    )
    assert response.result is not None
    assert response.result.signers == []


def test_failed_response_may_omit_result():
    response = models.MintApiResponse.model_validate(
        {"success": False, "message": "Invalid merkle tree"}
    )
    assert response.result is None
