# pylint: disable=E1101
"""
cnft_minter.credentials
~~~~~~~~~~~~~~~~~~~~~~~

This module contains the secret providers and the keypair loader. Secrets are
always handed over explicitly; nothing here reads the process environment.
"""
import typing

import orjson
import solders.keypair as solders_keypair  # type: ignore # pylint: disable=E0401

from cnft_minter import exceptions, interfaces, types

KEYPAIR_LENGTH = 64
SEED_LENGTH = 32


class StaticSecretProvider:  # pylint: disable=R0903
    """Holds a secret passed in by the caller."""

    def __init__(self, secret: types.Secret | None) -> None:
        self._secret = secret

    def get_secret(self) -> types.Secret | None:
        return self._secret

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<redacted>)"


class MappingSecretProvider:  # pylint: disable=R0903
    """Reads a secret from an explicitly given mapping, e.g. loaded settings."""

    def __init__(self, mapping: typing.Mapping[str, typing.Any], key: str) -> None:
        self._mapping = mapping
        self.key = key

    def get_secret(self) -> types.Secret | None:
        return self._mapping.get(self.key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


def _secret_bytes(secret: types.Secret) -> bytes:
    if isinstance(secret, bytes):
        return secret

    if isinstance(secret, str):
        try:
            decoded = orjson.loads(secret)
        except orjson.JSONDecodeError as json_err:
            raise exceptions.ConfigError(
                "signing secret must be a JSON byte array"
            ) from json_err
    else:
        decoded = secret

    if not isinstance(decoded, list):
        raise exceptions.ConfigError("signing secret must be a JSON byte array")

    try:
        return bytes(decoded)
    except (TypeError, ValueError) as byte_err:
        raise exceptions.ConfigError(
            "signing secret must only contain integers from 0 to 255"
        ) from byte_err


def load_keypair(provider: interfaces.SecretProvider) -> solders_keypair.Keypair:
    """Load the signing keypair from a secret provider.

    The secret may be a JSON byte array (the Solana CLI keypair file format),
    a base58 string (the wallet export format), raw bytes or a list of ints.
    Byte sequences may hold either the full 64-byte keypair or a 32-byte seed.

    Args:
        provider (interfaces.SecretProvider): Where to read the secret from.

    Raises:
        exceptions.ConfigError: If the secret is absent or malformed.

    Returns:
        solders.keypair.Keypair: The signing keypair.
    """
    secret = provider.get_secret()

    if isinstance(secret, str):
        secret = secret.strip()

    if secret is None or len(secret) == 0:
        raise exceptions.ConfigError("signing secret is not set")

    if isinstance(secret, str) and not secret.startswith("["):
        try:
            return solders_keypair.Keypair.from_base58_string(secret)
        except BaseException as base_err:  # pylint: disable=W0703
            # solders surfaces bad input as a Rust panic, not a ValueError.
            raise exceptions.ConfigError(
                "signing secret is not a valid base58 keypair"
            ) from base_err

    raw = _secret_bytes(secret)

    try:
        if len(raw) == KEYPAIR_LENGTH:
            return solders_keypair.Keypair.from_bytes(raw)
        if len(raw) == SEED_LENGTH:
            return solders_keypair.Keypair.from_seed(raw)
    except BaseException as key_err:  # pylint: disable=W0703
        raise exceptions.ConfigError("signing secret is not a valid keypair") from key_err

    raise exceptions.ConfigError(
        f"signing secret must be {SEED_LENGTH} or {KEYPAIR_LENGTH} bytes long, "
        f"got {len(raw)}"
    )
