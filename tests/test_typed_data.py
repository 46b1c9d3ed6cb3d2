"""Tests for typed-data envelope construction."""

import pytest

from eip712_vc import (
    DEFAULT_CONTEXT,
    DEFAULT_VC_TYPE,
    EIP712_CONTEXT,
    CredentialEncoding,
    TypeMapError,
    build_typed_data,
    identity_attestation_types,
    to_eip712_credential,
    typed_data_hash,
)


class TestBuildTypedData:
    """Tests for build_typed_data."""

    def test_envelope_shape(self, domain, w3c_credential, w3c_subject_types, w3c_issuer_type):
        typed_data = build_typed_data(
            domain, w3c_credential, w3c_subject_types, issuer_type=w3c_issuer_type
        )

        assert set(typed_data) == {"domain", "primaryType", "message", "types"}
        assert typed_data["primaryType"] == "VerifiableCredential"
        assert typed_data["domain"] == domain.domain_record()
        assert typed_data["message"] == w3c_credential

    def test_nested_subject_types(self, domain, w3c_credential, w3c_subject_types, w3c_issuer_type):
        """Test that both caller types end up in the type map."""
        typed_data = build_typed_data(
            domain, w3c_credential, w3c_subject_types, issuer_type=w3c_issuer_type
        )

        assert typed_data["types"]["CredentialSubject"] == w3c_subject_types["CredentialSubject"]
        assert typed_data["types"]["Person"] == w3c_subject_types["Person"]
        assert set(typed_data["types"]) == {
            "EIP712Domain",
            "VerifiableCredential",
            "CredentialSchema",
            "CredentialSubject",
            "Person",
            "Issuer",
        }

    def test_deterministic(self, domain, attestation_credential):
        """Test that identical inputs give identical envelopes."""
        first = build_typed_data(
            domain, attestation_credential, identity_attestation_types(), CredentialEncoding.EIP712
        )
        second = build_typed_data(
            domain, attestation_credential, identity_attestation_types(), CredentialEncoding.EIP712
        )

        assert first == second
        assert typed_data_hash(first) == typed_data_hash(second)

    def test_message_is_not_renamed(self, domain, w3c_credential, w3c_subject_types, w3c_issuer_type):
        """Test that the builder keeps the caller's field names."""
        typed_data = build_typed_data(
            domain,
            w3c_credential,
            w3c_subject_types,
            CredentialEncoding.EIP712,
            w3c_issuer_type,
        )

        assert "@context" in typed_data["message"]
        assert "_context" not in typed_data["message"]

    def test_message_is_copied(self, domain, w3c_credential, w3c_subject_types, w3c_issuer_type):
        """Test that later changes to the input do not leak into the envelope."""
        typed_data = build_typed_data(
            domain, w3c_credential, w3c_subject_types, issuer_type=w3c_issuer_type
        )
        w3c_credential["credentialSubject"]["name"] = "Changed"

        assert typed_data["message"]["credentialSubject"]["name"] == "Vitalik"

    def test_unclosed_type_map(self, domain, w3c_credential, w3c_subject_types):
        with pytest.raises(TypeMapError):
            build_typed_data(domain, w3c_credential, w3c_subject_types)

    def test_invalid_address_value(self, domain, attestation_credential):
        """Test that a placeholder address fails before any signing."""
        attestation_credential["credentialSubject"]["ethereumAddress"] = "acc1"

        with pytest.raises(TypeMapError, match="credentialSubject.ethereumAddress"):
            build_typed_data(
                domain, attestation_credential, identity_attestation_types(), CredentialEncoding.EIP712
            )


class TestTypedDataHash:
    """Tests for the signing digest."""

    def test_digest_format(self, domain, attestation_credential):
        typed_data = build_typed_data(
            domain, attestation_credential, identity_attestation_types(), CredentialEncoding.EIP712
        )
        digest = typed_data_hash(typed_data)

        assert digest.startswith("0x")
        assert len(digest) == 66

    def test_digest_depends_on_message(self, domain, attestation_credential):
        typed_data = build_typed_data(
            domain, attestation_credential, identity_attestation_types(), CredentialEncoding.EIP712
        )
        attestation_credential["credentialSubject"]["trust"] = 51
        changed = build_typed_data(
            domain, attestation_credential, identity_attestation_types(), CredentialEncoding.EIP712
        )

        assert typed_data_hash(typed_data) != typed_data_hash(changed)


class TestToEIP712Credential:
    """Tests for converting W3C credentials to the EIP712 encoding."""

    def test_flattens_context_and_type(self, w3c_credential):
        converted = to_eip712_credential(w3c_credential)

        assert converted["_context"] == f"{DEFAULT_CONTEXT},{EIP712_CONTEXT}"
        assert converted["_type"] == DEFAULT_VC_TYPE
        assert "@context" not in converted
        assert "type" not in converted

    def test_renames_schema_type(self, w3c_credential):
        converted = to_eip712_credential(w3c_credential)

        assert converted["credentialSchema"] == {
            "id": "https://example.com/schemas/v1",
            "_type": "Eip712SchemaValidator2021",
        }

    def test_keeps_subject(self, w3c_credential):
        """Test that subject fields are left to the caller's types."""
        converted = to_eip712_credential(w3c_credential)

        assert converted["credentialSubject"] == w3c_credential["credentialSubject"]
        assert converted["credentialSubject"]["type"] == "Person"

    def test_does_not_mutate_input(self, w3c_credential):
        to_eip712_credential(w3c_credential)

        assert w3c_credential["type"] == [DEFAULT_VC_TYPE]
        assert w3c_credential["credentialSchema"]["type"] == "Eip712SchemaValidator2021"
