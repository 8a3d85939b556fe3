"""
cnft_minter.exceptions
~~~~~~~~~~~~~~~~~~~~~~

This module contains the errors raised by the minting flow.
"""
from http import client

BAD_GATEWAY = client.BAD_GATEWAY
INTERNAL_SERVER_ERROR = client.INTERNAL_SERVER_ERROR


class MintError(Exception):
    """Base class for every failure of the minting flow."""

    status: int = BAD_GATEWAY


class TransportError(MintError):
    """The minting API could not be reached."""


class EncodingError(MintError):
    """A request or response body could not be (de)serialized."""


class ApiError(MintError):
    """The minting API answered with a non-success response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(MintError):
    """The encoded transaction is not valid base64."""


class DeserializeError(MintError):
    """The decoded bytes are not a valid transaction."""


class ConfigError(MintError):
    """The signing secret or the network settings are missing or malformed."""

    status = INTERNAL_SERVER_ERROR


class SubmissionError(MintError):
    """The RPC node refused or failed to receive the transaction."""
