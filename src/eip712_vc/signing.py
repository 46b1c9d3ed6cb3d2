"""
Default signing and recovery capabilities.

Issuers and verifiers take the sign/recover step as a plain callable so that
wallets, HSMs or remote signers can be plugged in. The defaults here sign
locally with eth-account (``eth_signTypedData_v4`` compatible).
"""

from __future__ import annotations

from typing import Awaitable, Callable

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import keccak, to_hex

from eip712_vc.typed_data import TypedData

PrivateKey = str | bytes

# envelope -> signature
Sign = Callable[[TypedData], Awaitable[str]]
# envelope, signature -> recovered address
Recover = Callable[[TypedData, str], Awaitable[str]]


def encode_envelope(typed_data: TypedData) -> SignableMessage:
    """Encode a typed-data envelope as an EIP-191 version 0x01 message."""
    return encode_typed_data(full_message=typed_data)


def typed_data_hash(typed_data: TypedData) -> str:
    """Return the digest a signer signs for this envelope."""
    message = encode_envelope(typed_data)
    return to_hex(keccak(b"\x19" + message.version + message.header + message.body))


def sign_typed_data(private_key: PrivateKey, typed_data: TypedData) -> str:
    """Sign an envelope with a raw private key.

    Returns:
        The 65 byte signature as 0x-prefixed hex.
    """
    signed = Account.sign_message(encode_envelope(typed_data), private_key)
    return to_hex(signed.signature)


def recover_typed_data_signer(typed_data: TypedData, signature: str) -> str:
    """Recover the checksummed address that signed an envelope."""
    return Account.recover_message(encode_envelope(typed_data), signature=signature)


def local_signer(private_key: PrivateKey) -> Sign:
    """Wrap a raw key as an asynchronous signing capability."""

    async def sign(typed_data: TypedData) -> str:
        return sign_typed_data(private_key, typed_data)

    return sign


async def recover_signer(typed_data: TypedData, signature: str) -> str:
    """Asynchronous form of :func:`recover_typed_data_signer`."""
    return recover_typed_data_signer(typed_data, signature)
