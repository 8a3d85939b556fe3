# pylint: disable=R0913,E1101
"""
cnft_minter.services
~~~~~~~~~~~~~~~~~~~~

This module contains services for the application: the minting API client,
the transaction signer, the RPC submitter and the flow that ties them together.
"""
import asyncio
import base64
import binascii
import datetime
import functools
import logging
import typing
import uuid

import aiohttp
import orjson
import pydantic
import pytz
from solana.rpc import api
from solana.rpc import types as rpc_types
from solders import transaction

from cnft_minter import credentials, exceptions, interfaces, models, types
from cnft_minter.utils import crypto

log = logging.getLogger(__name__)

SHYFT_CNFT_ENDPOINT = "https://api.shyft.to/sol/v1/nft/compressed/mint"
CLUSTER_ENDPOINTS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}
LOGS = "/logs"


def cluster_endpoint(network: str) -> str:
    """Return the public RPC endpoint of a Solana cluster.

    Raises:
        exceptions.ConfigError: If the network has no known public endpoint.
    """
    try:
        return CLUSTER_ENDPOINTS[network]
    except KeyError as key_err:
        raise exceptions.ConfigError(
            f"No RPC endpoint configured for network {network!r}"
        ) from key_err


class LoggerService:
    """Client implementation for a remote log aggregation service."""

    endpoint_url: str
    timezone: str
    client: aiohttp.ClientSession

    def __init__(self, endpoint_url: str, timezone: str) -> None:
        self.endpoint_url = endpoint_url
        self.timezone = timezone
        self.client = aiohttp.ClientSession(
            base_url=self.endpoint_url,
            json_serialize=lambda json_: orjson.dumps(json_).decode(),
        )
        self._pending: set[asyncio.Task[None]] = set()

    async def _send(self, entry: types.JsonDict) -> None:
        try:
            async with self.client.post(LOGS, json=entry) as resp:
                if resp.status >= 400:
                    log.warning(
                        "Log service rejected entry %s with status %s",
                        entry["id"],
                        resp.status,
                    )
        except aiohttp.ClientError as client_err:
            log.warning("Failed to ship log entry %s: %s", entry["id"], client_err)

    async def add_log_entry(
        self,
        id: str,  # pylint: disable=W0622
        message: str,
        raw: str,
        level: str,
        source: str = "cnft-minter",
        created_at: str | None = None,
    ) -> None:
        """Log a message to the logger service.

        Args:
            id (str): The id of the log entry which should be a UUIDv4 string.
            message (str): A short message, like a title.
            raw (str): Details pertaining to the log entry.
            level (str): The level of the log entry. One of: "info", "warn", "error".
            source (str, optional): The name of the service where the log entry
                originated. Defaults to "cnft-minter".
            created_at (str | None): The timestamp of the log entry.
        """
        task = asyncio.create_task(
            self._send(
                {
                    "id": id,
                    "created_at": created_at
                    or str(datetime.datetime.now(pytz.timezone(self.timezone))),
                    "message": message,
                    "raw": raw,
                    "level": level,
                    "source": source,
                }
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending)
        await self.client.close()


class AiohttpTransport:  # pylint: disable=R0903
    """HTTP transport that opens a fresh session for every request."""

    async def post(
        self, url: str, data: bytes, headers: types.Headers
    ) -> types.HttpResponse:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(url, data=data, headers=headers) as resp:
                    return resp.status, await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as client_err:
            raise exceptions.TransportError(
                f"Failed to reach {url}: {client_err!r}"
            ) from client_err


class MintApiClient:
    """Client for the compressed NFT minting API."""

    api_key: str
    endpoint: str
    transport: interfaces.HttpTransport

    def __init__(
        self,
        api_key: str,
        endpoint: str = SHYFT_CNFT_ENDPOINT,
        transport: interfaces.HttpTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.transport = transport or AiohttpTransport()

    @property
    def headers(self) -> types.Headers:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    async def request_mint(self, request: models.MintRequest) -> models.MintApiResponse:
        """Ask the minting API for a partially-signed mint transaction.

        A single attempt is made; nothing is retried.

        Args:
            request (models.MintRequest): The mint to request.

        Raises:
            exceptions.TransportError: If the API could not be reached.
            exceptions.EncodingError: If the request or response body could not be
                (de)serialized.
            exceptions.ApiError: If the API reported a failure.

        Returns:
            models.MintApiResponse: The parsed response. Its result is never None.
        """
        try:
            body = orjson.dumps(request.to_payload())
        except orjson.JSONEncodeError as enc_err:
            raise exceptions.EncodingError(
                f"Failed to encode mint request: {enc_err}"
            ) from enc_err

        log.info("Minting cNFT with body: %s", body.decode())

        status, resp_body = await self.transport.post(self.endpoint, body, self.headers)

        log.debug("Minting API responded with %s: %r", status, resp_body)

        try:
            decoded = orjson.loads(resp_body)

            # A failed envelope is reported as such whatever its result holds.
            if isinstance(decoded, dict) and decoded.get("success") is False:
                raise exceptions.ApiError(
                    str(decoded.get("message") or "Minting API request failed"),
                    status_code=status,
                )

            response = models.MintApiResponse.model_validate(decoded)
        except (orjson.JSONDecodeError, pydantic.ValidationError) as dec_err:
            if status >= 400:
                raise exceptions.ApiError(
                    f"Minting API returned status {status}", status_code=status
                ) from dec_err

            raise exceptions.EncodingError(
                f"Minting API returned a malformed response: {dec_err}"
            ) from dec_err

        if not response.success:
            raise exceptions.ApiError(
                response.message or "Minting API request failed", status_code=status
            )

        if response.result is None:
            raise exceptions.EncodingError("Minting API response has no result")

        return response


class TransactionSigner:
    """Signs the first signature slot of a transaction with the local account."""

    def __init__(self, secret_provider: interfaces.SecretProvider) -> None:
        self.secret_provider = secret_provider

    @staticmethod
    def decode(encoded_transaction: str) -> transaction.Transaction:
        """Decode a base64 wire-format transaction.

        Raises:
            exceptions.DecodeError: If the payload is not valid base64.
            exceptions.DeserializeError: If the bytes are not a transaction with at
                least one signature slot.
        """
        try:
            raw = base64.b64decode(encoded_transaction, validate=True)
        except (binascii.Error, ValueError) as b64_err:
            raise exceptions.DecodeError(
                f"Encoded transaction is not valid base64: {b64_err}"
            ) from b64_err

        try:
            txn = transaction.Transaction.from_bytes(raw)
        except BaseException as serde_err:  # pylint: disable=W0703
            raise exceptions.DeserializeError(
                f"Failed to deserialize transaction: {serde_err}"
            ) from serde_err

        num_required = txn.message.header.num_required_signatures

        if not txn.signatures or num_required == 0:
            raise exceptions.DeserializeError("Transaction has no signature slots")

        if len(txn.signatures) != num_required:
            raise exceptions.DeserializeError(
                f"Transaction has {len(txn.signatures)} signature slots, "
                f"but its message requires {num_required}"
            )

        if len(txn.message.account_keys) < num_required:
            raise exceptions.DeserializeError(
                f"Transaction message lists {len(txn.message.account_keys)} "
                f"account keys, but requires {num_required} signers"
            )

        return txn

    @staticmethod
    def _flag_signers(
        txn: transaction.Transaction, local_signer: str, signers: typing.Sequence[str]
    ) -> None:
        # Only slot 0 is ever signed here. Anything else the transaction still
        # needs is left to the network to reject.
        required = crypto.required_signers(txn)

        if required[0] != local_signer:
            log.warning(
                "Signing slot 0 as %s, but the transaction expects %s",
                local_signer,
                required[0],
            )

        unsigned = [
            address
            for slot, address in enumerate(required)
            if slot > 0 and not crypto.is_signed(txn, slot)
        ]
        if unsigned:
            log.warning(
                "Transaction still requires co-signers %s (API listed %s)",
                unsigned,
                list(signers),
            )

    def sign(
        self, encoded_transaction: str, signers: typing.Sequence[str] = ()
    ) -> transaction.Transaction:
        """Decode a transaction and sign its first signature slot.

        Args:
            encoded_transaction (str): The base64 transaction from the minting API.
            signers (typing.Sequence[str], optional): The signers listed by the
                minting API. Only used to report co-signers that are not handled.

        Raises:
            exceptions.DecodeError: If the payload is not valid base64.
            exceptions.DeserializeError: If the payload is not a transaction.
            exceptions.ConfigError: If the signing secret is absent or malformed.

        Returns:
            transaction.Transaction: The transaction with slot 0 signed.
        """
        txn = self.decode(encoded_transaction)
        keypair = credentials.load_keypair(self.secret_provider)

        self._flag_signers(txn, str(keypair.pubkey()), signers)

        message_bytes = bytes(txn.message)
        signatures = list(txn.signatures)
        signatures[0] = keypair.sign_message(message_bytes)

        return transaction.Transaction.populate(txn.message, signatures)


class RpcTransactionSubmitter:  # pylint: disable=R0903
    """Broadcasts transactions through a Solana RPC node."""

    def __init__(
        self, rpc_endpoint: str, opts: rpc_types.TxOpts | None = None
    ) -> None:
        self.rpc_endpoint = rpc_endpoint
        self.opts = opts or rpc_types.TxOpts(skip_preflight=False)

    async def submit(self, txn: transaction.Transaction) -> str:
        """Send a signed transaction once, without waiting for confirmation.

        Raises:
            exceptions.SubmissionError: If slot 0 is unsigned or the node did not
                accept the transaction.

        Returns:
            str: The transaction signature.
        """
        if not crypto.is_signed(txn):
            raise exceptions.SubmissionError("Transaction signature slot 0 is empty")

        loop = asyncio.get_running_loop()
        client = api.Client(self.rpc_endpoint)

        try:
            resp = await loop.run_in_executor(
                None,
                functools.partial(client.send_raw_transaction, bytes(txn), self.opts),
            )
        except Exception as err:  # pylint: disable=W0703
            log.error("Failed to send transaction to %s: %s", self.rpc_endpoint, err)
            raise exceptions.SubmissionError(
                f"Failed to send transaction: {err}"
            ) from err

        return str(resp.value)


class CompressedNftMinter:
    """Implementation of the request, sign and submit minting flow."""

    def __init__(
        self,
        api_client: MintApiClient,
        signer: TransactionSigner,
        submitter: interfaces.TransactionSubmitter,
        logger: LoggerService | None = None,
    ) -> None:
        self.api_client = api_client
        self.signer = signer
        self.submitter = submitter
        self.logger = logger

    async def _record(self, message: str, raw: types.JsonDict, level: str) -> None:
        if self.logger is None:
            return

        await self.logger.add_log_entry(
            str(uuid.uuid4()), message, orjson.dumps(raw).decode(), level
        )

    async def mint(self, request: models.MintRequest) -> models.MintResult:
        """Mint a compressed NFT.

        1. Request a partially-signed transaction from the minting API.

        2. Decode it and sign its first signature slot with the local account.

        3. Broadcast it through the RPC node.

        Any failure aborts the remaining steps and is raised unchanged.

        Args:
            request (models.MintRequest): The mint to perform.

        Returns:
            models.MintResult: The transaction signature and the mint address.
        """
        try:
            response = await self.api_client.request_mint(request)
            # request_mint never returns a response without a result.
            result = typing.cast(models.MintApiResult, response.result)

            txn = self.signer.sign(result.encoded_transaction, result.signers)
            signature = await self.submitter.submit(txn)
        except exceptions.MintError as mint_err:
            log.error("Failed to mint cNFT: %s: %s", type(mint_err).__name__, mint_err)
            await self._record(
                "Failed to mint cNFT.",
                {
                    "error": type(mint_err).__name__,
                    "details": str(mint_err),
                    "merkle_tree": request.merkle_tree,
                },
                "error",
            )
            raise

        mint_result = models.MintResult(signature=signature, mint=result.mint)

        log.info("Minted cNFT: sig: %s, mint: %s", mint_result.signature, mint_result.mint)
        await self._record("Minted cNFT.", mint_result.to_dict(), "info")

        return mint_result


async def mint_cnft(
    api_key: str,
    creator_wallet: str,
    metadata_uri: str,
    merkle_tree: str,
    *,
    secret_provider: interfaces.SecretProvider,
    collection_address: str | None = None,
    receiver: str | None = None,
    priority_fee: int | None = None,
    network: str = models.MAINNET_BETA,
    endpoint: str = SHYFT_CNFT_ENDPOINT,
    rpc_endpoint: str | None = None,
    transport: interfaces.HttpTransport | None = None,
    submitter: interfaces.TransactionSubmitter | None = None,
    logger: LoggerService | None = None,
) -> models.MintResult:
    """Request, sign and broadcast a compressed NFT mint in one call.

    When neither `rpc_endpoint` nor `submitter` is given, the public endpoint of
    `network` is used.

    Raises:
        exceptions.MintError: Any failure of the flow; see CompressedNftMinter.mint.
    """
    try:
        request = models.MintRequest(
            network=network,
            creator_wallet=creator_wallet,
            metadata_uri=metadata_uri,
            merkle_tree=merkle_tree,
            collection_address=collection_address,
            receiver=receiver,
            priority_fee=priority_fee,
        )
    except pydantic.ValidationError as validation_err:
        raise exceptions.EncodingError(
            f"Invalid mint request: {validation_err}"
        ) from validation_err

    if submitter is None:
        submitter = RpcTransactionSubmitter(rpc_endpoint or cluster_endpoint(network))

    minter = CompressedNftMinter(
        api_client=MintApiClient(api_key, endpoint=endpoint, transport=transport),
        signer=TransactionSigner(secret_provider),
        submitter=submitter,
        logger=logger,
    )

    return await minter.mint(request)
