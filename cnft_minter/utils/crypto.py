import base58
from nacl import exceptions, signing
from solders import pubkey, signature, transaction


def required_signers(txn: transaction.Transaction) -> list[str]:
    """Return the addresses that must sign the transaction, in slot order."""
    message = txn.message
    num_required = message.header.num_required_signatures

    return [str(key) for key in message.account_keys[:num_required]]


def is_signed(txn: transaction.Transaction, slot: int = 0) -> bool:
    """Check whether a signature slot holds anything other than the default
    all-zero placeholder.
    """
    if slot >= len(txn.signatures):
        return False

    return txn.signatures[slot] != signature.Signature.default()


def verify_signature(public_key: str, message: bytes, signature_: str) -> bytes:
    """Verify that a base58 signature was produced over a message.

    Args:
        public_key (str): Solana public key of the signer.
        message (bytes): The message that was signed.
        signature_ (str): Base58-encoded signature.

    Raises:
        ValueError: If the signature is invalid.

    Returns:
        bytes: The verified message.
    """
    verify_key = signing.VerifyKey(bytes(pubkey.Pubkey.from_string(public_key)))

    try:
        return verify_key.verify(message, base58.b58decode(signature_))
    except exceptions.BadSignatureError as bad_sig:
        raise ValueError(f"Invalid signature: {str(bad_sig)}") from bad_sig
