"""
EthereumEip712Signature2021 proofs.

Attaches a signature over a typed-data envelope to the credential it was
built from.
https://w3c-ccg.github.io/ethereum-eip712-signature-2021-spec/
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from eip712_vc import signing
from eip712_vc.domain import SigningDomain
from eip712_vc.schema import CredentialEncoding, TypeField, validate_message, validate_type_map
from eip712_vc.typed_data import TypedData, build_typed_data

log = logging.getLogger(__name__)

PROOF_TYPE = "EthereumEip712Signature2021"
PROOF_PURPOSE = "assertionMethod"


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. ``2025-01-15T10:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def merge_proof(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Shallow-merge proof fields; values in ``overrides`` win."""
    merged = dict(defaults)
    for key, value in (overrides or {}).items():
        merged[key] = value
    return merged


def _issuer_fields(issuer: Any) -> tuple[str | None, str | None]:
    if isinstance(issuer, Mapping):
        return issuer.get("id"), issuer.get("ethereumAddress")
    if isinstance(issuer, str):
        return issuer, None
    return None, None


def build_proof(
    typed_data: TypedData,
    signature: str,
    created: str | None = None,
) -> dict[str, Any]:
    """Build the proof for a signed envelope.

    Computed fields are defaults: a ``proof`` object already present on the
    message overrides them. ``proofValue`` and ``eip712`` are always taken
    from this signing.

    Args:
        typed_data: The envelope that was signed.
        signature: Signature over ``typed_data``.
        created: Proof timestamp. Defaults to now.

    Returns:
        The proof object.
    """
    message = typed_data["message"]
    issuer_id, ethereum_address = _issuer_fields(message.get("issuer"))

    defaults: dict[str, Any] = {
        "verificationMethod": f"{issuer_id}#ethereumAddress",
    }
    if ethereum_address is not None:
        defaults["ethereumAddress"] = ethereum_address
    defaults["created"] = created or utc_now_iso()
    defaults["proofPurpose"] = PROOF_PURPOSE
    defaults["type"] = PROOF_TYPE

    proof = merge_proof(defaults, message.get("proof"))
    proof["proofValue"] = signature
    # Informational copy only, verifiers rebuild the envelope themselves.
    proof["eip712"] = {
        "domain": copy.deepcopy(typed_data["domain"]),
        "types": copy.deepcopy(typed_data["types"]),
        "primaryType": typed_data["primaryType"],
    }
    return proof


def attach_proof(
    typed_data: TypedData,
    signature: str,
    created: str | None = None,
) -> dict[str, Any]:
    """Return the envelope's message with a proof for ``signature`` attached."""
    credential = copy.deepcopy(typed_data["message"])
    credential["proof"] = build_proof(typed_data, signature, created)
    return credential


class ProofAttacher:
    """Signs typed-data envelopes and produces verifiable credentials.

    Supports:
    - Direct-key signing with a raw private key
    - Delegated signing through an asynchronous ``Sign`` capability
    """

    def __init__(
        self,
        sign_typed_data: Callable[[signing.PrivateKey, TypedData], str] = signing.sign_typed_data,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        """Initialize the attacher.

        Args:
            sign_typed_data: Primitive used in direct-key mode.
            clock: Source of the proof ``created`` timestamp.
        """
        self.sign_typed_data = sign_typed_data
        self.clock = clock

    def issue(self, private_key: signing.PrivateKey, typed_data: TypedData) -> dict[str, Any]:
        """Sign an envelope with a raw key and attach the proof.

        Raises:
            TypeMapError: If the envelope's type map is not closed.
        """
        validate_type_map(typed_data["types"], typed_data["primaryType"])
        validate_message(typed_data["types"], typed_data["message"], typed_data["primaryType"])
        signature = self.sign_typed_data(private_key, typed_data)
        credential = attach_proof(typed_data, signature, self.clock())
        log.info("Issued credential %s", credential.get("id"))
        return credential

    async def issue_with_signer(
        self,
        domain: SigningDomain,
        credential: Mapping[str, Any],
        subject_types: Mapping[str, list[TypeField]],
        sign: signing.Sign,
        encoding: CredentialEncoding = CredentialEncoding.W3C,
        issuer_type: list[TypeField] | None = None,
    ) -> dict[str, Any]:
        """Build the envelope, have ``sign`` sign it and attach the proof.

        Errors raised by ``sign`` propagate unchanged.
        """
        typed_data = build_typed_data(domain, credential, subject_types, encoding, issuer_type)
        signature = await sign(typed_data)
        issued = attach_proof(typed_data, signature, self.clock())
        log.info("Issued credential %s with delegated signer", issued.get("id"))
        return issued
