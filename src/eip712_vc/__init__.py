"""
EIP-712 VC - Verifiable Credentials signed as EIP-712 typed data.

Supports:
- EthereumEip712Signature2021 proofs
- W3C (JSON-LD shaped) and EIP712 (``_context``/``_type``) credential encodings
- Local eth-account signing or delegated asynchronous signers
- Issuer verification by signature recovery
"""

from eip712_vc.domain import (
    DOMAIN_ENCODING,
    DOMAIN_TYPE,
    DomainConfigError,
    SigningDomain,
)
from eip712_vc.eip712vc import EIP712VC, verify_credential
from eip712_vc.proof import (
    PROOF_PURPOSE,
    PROOF_TYPE,
    ProofAttacher,
    attach_proof,
    build_proof,
    merge_proof,
)
from eip712_vc.schema import (
    DEFAULT_CONTEXT,
    DEFAULT_VC_TYPE,
    EIP712_CONTEXT,
    CredentialEncoding,
    TypeMapError,
    base_types,
    identity_attestation_types,
    merge_types,
    validate_message,
    validate_type_map,
)
from eip712_vc.signing import (
    local_signer,
    recover_signer,
    recover_typed_data_signer,
    sign_typed_data,
    typed_data_hash,
)
from eip712_vc.typed_data import build_typed_data, to_eip712_credential
from eip712_vc.verifier import CredentialVerifier, addresses_match

__version__ = "0.1.0"

__all__ = [
    "DOMAIN_ENCODING",
    "DOMAIN_TYPE",
    "DomainConfigError",
    "SigningDomain",
    "EIP712VC",
    "verify_credential",
    "PROOF_PURPOSE",
    "PROOF_TYPE",
    "ProofAttacher",
    "attach_proof",
    "build_proof",
    "merge_proof",
    "DEFAULT_CONTEXT",
    "DEFAULT_VC_TYPE",
    "EIP712_CONTEXT",
    "CredentialEncoding",
    "TypeMapError",
    "base_types",
    "identity_attestation_types",
    "merge_types",
    "validate_message",
    "validate_type_map",
    "local_signer",
    "recover_signer",
    "recover_typed_data_signer",
    "sign_typed_data",
    "typed_data_hash",
    "build_typed_data",
    "to_eip712_credential",
    "CredentialVerifier",
    "addresses_match",
]
