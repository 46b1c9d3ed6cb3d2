"""Shared fixtures for eip712-vc tests."""

import pytest
from eth_account import Account

from eip712_vc import (
    DEFAULT_CONTEXT,
    DEFAULT_VC_TYPE,
    EIP712_CONTEXT,
    EIP712VC,
    SigningDomain,
)

ISSUANCE_DATE = "2025-01-15T10:00:00.000Z"
EXPIRATION_DATE = "2028-01-15T10:00:00.000Z"
NBF = 1736935200
EXP = NBF + 3 * 365 * 24 * 60 * 60


@pytest.fixture
def domain():
    """Signing domain used across tests."""
    return SigningDomain(
        name="Krebit",
        version="0.1",
        chain_id=4,
        verifying_contract="0xa533e32144b5be3f76446f47696bbe0764d5339b",
    )


@pytest.fixture
def eip712vc(domain):
    return EIP712VC(domain)


@pytest.fixture
def account():
    """A freshly generated issuer key."""
    return Account.create()


@pytest.fixture
def other_account():
    return Account.create()


@pytest.fixture
def attestation_credential(account):
    """Identity attestation in the EIP712 encoding."""
    return {
        "_context": ",".join([DEFAULT_CONTEXT, EIP712_CONTEXT]),
        "_type": DEFAULT_VC_TYPE,
        "id": "https://example.org/person/1234",
        "issuer": {
            "id": "did:issuer",
            "ethereumAddress": account.address,
        },
        "credentialSubject": {
            "id": "did:user",
            "ethereumAddress": account.address,
            "_type": "fullName",
            "value": "encrypted",
            "encrypted": "0x0c94bf56745f8d3d9d49b77b345c780a0c11ea997229f925f39a1946d51856fb",
            "trust": 50,
            "stake": 6,
            "nbf": NBF,
            "exp": EXP,
        },
        "credentialSchema": {
            "id": "https://example.com/schemas/v1",
            "_type": "Eip712SchemaValidator2021",
        },
        "issuanceDate": ISSUANCE_DATE,
        "expirationDate": EXPIRATION_DATE,
    }


@pytest.fixture
def w3c_issuer_type():
    return [{"name": "id", "type": "string"}]


@pytest.fixture
def w3c_subject_types():
    """Subject with a nested Person struct."""
    return {
        "CredentialSubject": [
            {"name": "type", "type": "string"},
            {"name": "id", "type": "string"},
            {"name": "name", "type": "string"},
            {"name": "child", "type": "Person"},
        ],
        "Person": [
            {"name": "type", "type": "string"},
            {"name": "name", "type": "string"},
        ],
    }


@pytest.fixture
def w3c_credential():
    """W3C credential with a nested subject and caller-supplied proof fields."""
    return {
        "@context": [DEFAULT_CONTEXT, EIP712_CONTEXT],
        "type": [DEFAULT_VC_TYPE],
        "id": "https://example.org/person/1234",
        "issuer": {
            "id": "did:issuer",
        },
        "credentialSubject": {
            "type": "Person",
            "id": "did:example:bbbbaaaa",
            "name": "Vitalik",
            "child": {
                "type": "Person",
                "name": "Ethereum",
            },
        },
        "credentialSchema": {
            "id": "https://example.com/schemas/v1",
            "type": "Eip712SchemaValidator2021",
        },
        "issuanceDate": ISSUANCE_DATE,
        "expirationDate": EXPIRATION_DATE,
        "proof": {
            "verificationMethod": "did:issuer#key-1",
            "ethereumAddress": "acc1",
            "created": ISSUANCE_DATE,
            "proofPurpose": "assertionMethod",
            "type": "EthereumEip712Signature2021",
        },
    }
