"""Shared fixtures for cnft_minter tests."""

from __future__ import annotations

import pytest
from solders import keypair

from cnft_minter import models, services

from tests import factories
from tests.mocks import MockLogger, MockSecretProvider, MockSubmitter, MockTransport


@pytest.fixture
def signer_keypair() -> keypair.Keypair:
    return keypair.Keypair()


@pytest.fixture
def secret_provider(signer_keypair) -> MockSecretProvider:
    return MockSecretProvider(factories.keypair_secret(signer_keypair))


@pytest.fixture
def unsigned_txn(signer_keypair):
    return factories.make_transaction(signer_keypair.pubkey())


@pytest.fixture
def transport(unsigned_txn) -> MockTransport:
    return MockTransport(body=factories.make_api_body(factories.encode(unsigned_txn)))


@pytest.fixture
def submitter() -> MockSubmitter:
    return MockSubmitter()


@pytest.fixture
def mock_logger() -> MockLogger:
    return MockLogger()


@pytest.fixture
def mint_request() -> models.MintRequest:
    return models.MintRequest(
        network="mainnet-beta",
        creator_wallet="C1",
        metadata_uri="ipfs://x",
        merkle_tree="M1",
    )


@pytest.fixture
def minter(transport, secret_provider, submitter, mock_logger):
    return services.CompressedNftMinter(
        api_client=services.MintApiClient("test-api-key", transport=transport),
        signer=services.TransactionSigner(secret_provider),
        submitter=submitter,
        logger=mock_logger,
    )
