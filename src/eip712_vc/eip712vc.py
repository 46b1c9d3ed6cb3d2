"""
EIP-712 verifiable credential issuance and verification for one domain.
"""

from __future__ import annotations

from typing import Any, Mapping

from eip712_vc import signing
from eip712_vc.domain import SigningDomain
from eip712_vc.proof import ProofAttacher
from eip712_vc.schema import CredentialEncoding, TypeField
from eip712_vc.typed_data import TypedData, build_typed_data
from eip712_vc.verifier import CredentialVerifier


class EIP712VC:
    """Issues and verifies credentials under one signing domain.

    The domain is fixed at construction and shared read-only by every
    operation. Each call builds its own type map.
    """

    def __init__(
        self,
        domain: SigningDomain | Mapping[str, Any],
        attacher: ProofAttacher | None = None,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        """Initialize for a signing domain.

        Args:
            domain: A SigningDomain or a mapping accepted by
                :meth:`SigningDomain.from_mapping`.
            attacher: Custom proof attacher. Created if not provided.
            verifier: Custom verifier. Created if not provided.
        """
        if not isinstance(domain, SigningDomain):
            domain = SigningDomain.from_mapping(domain)
        self.domain = domain
        self.attacher = attacher or ProofAttacher()
        self.verifier = verifier or CredentialVerifier(domain)

    def get_domain_separator(self) -> str:
        return self.domain.domain_separator()

    def get_domain_typed_data(self) -> dict[str, Any]:
        return self.domain.domain_record()

    def get_typed_data(
        self,
        credential: Mapping[str, Any],
        subject_types: Mapping[str, list[TypeField]],
        encoding: CredentialEncoding = CredentialEncoding.W3C,
        issuer_type: list[TypeField] | None = None,
    ) -> TypedData:
        """Build the typed-data envelope for a credential."""
        return build_typed_data(self.domain, credential, subject_types, encoding, issuer_type)

    def get_w3c_typed_data(
        self,
        credential: Mapping[str, Any],
        issuer_type: list[TypeField] | None,
        subject_types: Mapping[str, list[TypeField]],
    ) -> TypedData:
        return self.get_typed_data(credential, subject_types, CredentialEncoding.W3C, issuer_type)

    def get_eip712_typed_data(
        self,
        credential: Mapping[str, Any],
        issuer_type: list[TypeField] | None,
        subject_types: Mapping[str, list[TypeField]],
    ) -> TypedData:
        return self.get_typed_data(credential, subject_types, CredentialEncoding.EIP712, issuer_type)

    def create_verifiable_credential(
        self,
        private_key: signing.PrivateKey,
        typed_data: TypedData,
    ) -> dict[str, Any]:
        """Sign ``typed_data`` with a raw key and attach the proof."""
        return self.attacher.issue(private_key, typed_data)

    async def create_verifiable_credential_with_signer(
        self,
        credential: Mapping[str, Any],
        subject_types: Mapping[str, list[TypeField]],
        sign: signing.Sign,
        encoding: CredentialEncoding = CredentialEncoding.W3C,
        issuer_type: list[TypeField] | None = None,
    ) -> dict[str, Any]:
        """Issue a credential through an external signer."""
        return await self.attacher.issue_with_signer(
            self.domain, credential, subject_types, sign, encoding, issuer_type
        )

    def verify_credential_typed_data(
        self,
        issuer: str,
        typed_data: TypedData,
        proof_value: str,
    ) -> bool:
        """Check ``proof_value`` over a caller-supplied envelope."""
        return self.verifier.verify(issuer, typed_data, proof_value)

    async def verify_verifiable_credential(
        self,
        issuer: str,
        credential: Mapping[str, Any],
        subject_types: Mapping[str, list[TypeField]],
        recover: signing.Recover | None = None,
        encoding: CredentialEncoding = CredentialEncoding.W3C,
        issuer_type: list[TypeField] | None = None,
    ) -> bool:
        """Check a verifiable credential's proof by rebuilding its envelope."""
        return await self.verifier.verify_credential(
            issuer, credential, subject_types, recover, encoding, issuer_type
        )


async def verify_credential(
    domain: SigningDomain | Mapping[str, Any],
    issuer: str,
    credential: Mapping[str, Any],
    subject_types: Mapping[str, list[TypeField]],
    encoding: CredentialEncoding = CredentialEncoding.W3C,
) -> bool:
    """Convenience function to verify a credential with local recovery.

    Args:
        domain: Signing domain the credential was issued under.
        issuer: Claimed issuer address.
        credential: The verifiable credential.
        subject_types: ``CredentialSubject`` and nested struct types.
        encoding: Credential encoding.

    Returns:
        True if ``issuer`` signed the credential.
    """
    return await EIP712VC(domain).verify_verifiable_credential(
        issuer, credential, subject_types, encoding=encoding
    )
