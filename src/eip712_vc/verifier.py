"""
EIP-712 Verifiable Credentials verifier.

Checks that a claimed issuer address signed a credential's typed-data
envelope.

Supported:
- Proof type: EthereumEip712Signature2021
- Encodings: W3C and EIP712 field naming
- Recovery: local (eth-account) or any asynchronous ``Recover`` capability
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from eth_utils import is_address, to_checksum_address

from eip712_vc import signing
from eip712_vc.domain import SigningDomain
from eip712_vc.schema import CredentialEncoding, TypeField
from eip712_vc.typed_data import TypedData, build_typed_data

log = logging.getLogger(__name__)


def addresses_match(expected: str, actual: str) -> bool:
    """Compare two addresses ignoring checksum case.

    An invalid address never matches.
    """
    if not (isinstance(expected, str) and isinstance(actual, str)):
        return False
    if not (is_address(expected.lower()) and is_address(actual.lower())):
        return False
    return to_checksum_address(expected.lower()) == to_checksum_address(actual.lower())


class CredentialVerifier:
    """Verifies EIP-712 credential proofs against one signing domain."""

    def __init__(
        self,
        domain: SigningDomain,
        recover_typed_data: Callable[[TypedData, str], str] = signing.recover_typed_data_signer,
    ) -> None:
        """Initialize the verifier.

        Args:
            domain: The signing domain credentials must have been issued under.
            recover_typed_data: Primitive used in direct-recovery mode.
        """
        self.domain = domain
        self.recover_typed_data = recover_typed_data

    def verify(self, issuer: str, typed_data: TypedData, proof_value: str) -> bool:
        """Verify a signature over a caller-supplied envelope.

        The envelope is trusted as given, apart from its domain, which must be
        this verifier's domain. The contract address may differ in checksum case. Prefer :meth:`verify_credential` when the
        envelope comes from the credential holder.

        Args:
            issuer: Claimed issuer address.
            typed_data: The envelope that was signed.
            proof_value: The signature.

        Returns:
            True if ``issuer`` signed ``typed_data``.
        """
        if not self._domain_matches(typed_data.get("domain")):
            log.warning("Typed data domain does not match %s", self.domain.name)
            return False

        recovered = self.recover_typed_data(typed_data, proof_value)
        return self._check_signer(issuer, recovered)

    def _domain_matches(self, domain: Any) -> bool:
        if not isinstance(domain, Mapping):
            return False
        expected = self.domain.domain_record()
        if set(domain) != set(expected):
            return False
        for key in ("name", "version", "chainId"):
            if domain[key] != expected[key]:
                return False
        return addresses_match(expected["verifyingContract"], domain["verifyingContract"])

    async def verify_credential(
        self,
        issuer: str,
        credential: Mapping[str, Any],
        subject_types: Mapping[str, list[TypeField]],
        recover: signing.Recover | None = None,
        encoding: CredentialEncoding = CredentialEncoding.W3C,
        issuer_type: list[TypeField] | None = None,
    ) -> bool:
        """Verify a verifiable credential by rebuilding its envelope.

        The ``eip712`` block inside the proof is ignored; the envelope is
        rebuilt from the credential, this verifier's domain and
        ``subject_types``.

        Args:
            issuer: Claimed issuer address.
            credential: The verifiable credential, including ``proof``.
            subject_types: ``CredentialSubject`` and nested struct types.
            recover: Recovery capability. Defaults to local recovery.
            encoding: Credential encoding.
            issuer_type: ``Issuer`` fields, if not part of ``subject_types``.

        Returns:
            True if ``issuer`` signed the credential.

        Raises:
            TypeMapError: If the merged type map is not closed.
        """
        proof = credential.get("proof")
        proof_value = proof.get("proofValue") if isinstance(proof, Mapping) else None
        if not proof_value:
            log.warning("Credential %s has no proofValue", credential.get("id"))
            return False

        # Remove proof from credential for verification
        unsigned_credential = {k: v for k, v in credential.items() if k != "proof"}
        typed_data = build_typed_data(
            self.domain, unsigned_credential, subject_types, encoding, issuer_type
        )

        recovered = await (recover or signing.recover_signer)(typed_data, proof_value)
        return self._check_signer(issuer, recovered)

    def _check_signer(self, issuer: str, recovered: str) -> bool:
        if addresses_match(issuer, recovered):
            log.info("Signature verified for issuer %s", issuer)
            return True
        log.info("Signer %s does not match claimed issuer %s", recovered, issuer)
        return False
