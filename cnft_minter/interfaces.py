"""
cnft_minter.interfaces
~~~~~~~~~~~~~~~~~~~~~~

This module contains the capabilities the minting flow depends on. Each one
can be swapped for another implementation, e.g. in tests.
"""
import typing

from solders import transaction

from cnft_minter import types


class HttpTransport(typing.Protocol):
    async def post(
        self, url: str, data: bytes, headers: types.Headers
    ) -> types.HttpResponse:
        """Send a POST request and return the status code and raw body.

        Raises:
            cnft_minter.exceptions.TransportError: If the request could not be
                sent or the response could not be read.
        """
        ...


class SecretProvider(typing.Protocol):
    def get_secret(self) -> types.Secret | None:
        """Return the signing secret, or None if it is not configured."""
        ...


class TransactionSubmitter(typing.Protocol):
    async def submit(self, txn: transaction.Transaction) -> str:
        """Broadcast a fully-signed transaction and return its signature.

        Raises:
            cnft_minter.exceptions.SubmissionError: If the transaction was not
                accepted by the node.
        """
        ...
