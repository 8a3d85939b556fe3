"""
cnft_minter.models
~~~~~~~~~~~~~~~~~~

This module contains pydantic schemas for the minting API and the service.
"""
import typing

import pydantic

from cnft_minter import types

MAINNET_BETA = "mainnet-beta"


class MintRequest(pydantic.BaseModel):
    """A compressed NFT mint request, in the minting API's field names."""

    model_config = pydantic.ConfigDict(frozen=True)

    network: str = MAINNET_BETA
    creator_wallet: str
    metadata_uri: str
    merkle_tree: str
    collection_address: str | None = None
    receiver: str | None = None
    priority_fee: pydantic.NonNegativeInt | None = None

    def to_payload(self) -> types.JsonDict:
        # Unset optional fields are left out of the body entirely.
        return self.model_dump(exclude_none=True)


class MintApiResult(pydantic.BaseModel):
    encoded_transaction: str
    mint: str
    signers: list[str] = []


class MintApiResponse(pydantic.BaseModel):
    success: bool
    message: str = ""
    result: MintApiResult | None = None


class MintResult(pydantic.BaseModel):
    signature: str
    mint: str

    def to_dict(self) -> dict[str, typing.Any]:
        return self.model_dump()
