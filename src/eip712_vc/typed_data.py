"""
Typed-data envelopes for credential signing.

Builds the ``{domain, primaryType, message, types}`` structure that an
EIP-712 signer hashes. Building is pure: the same inputs always produce the
same envelope.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping

from eip712_vc.domain import SigningDomain
from eip712_vc.schema import (
    VERIFIABLE_CREDENTIAL_PRIMARY_TYPE,
    CredentialEncoding,
    TypeField,
    merge_types,
    validate_message,
)

log = logging.getLogger(__name__)

TypedData = dict[str, Any]


def build_typed_data(
    domain: SigningDomain,
    credential: Mapping[str, Any],
    subject_types: Mapping[str, list[TypeField]],
    encoding: CredentialEncoding = CredentialEncoding.W3C,
    issuer_type: list[TypeField] | None = None,
) -> TypedData:
    """Build the typed-data envelope for a credential.

    The credential is used as the message as-is. It must already follow the
    field naming of ``encoding`` (see :func:`to_eip712_credential`).

    Args:
        domain: Signing domain.
        credential: Unsigned credential.
        subject_types: ``CredentialSubject`` and nested struct types.
        encoding: Selects the fixed credential type table.
        issuer_type: ``Issuer`` fields, if not part of ``subject_types``.

    Returns:
        The typed-data envelope.

    Raises:
        TypeMapError: If the merged type map is not closed, or an
            ``address`` or ``uint`` value in the credential cannot be encoded.
    """
    types = merge_types(encoding, subject_types, issuer_type)
    validate_message(types, credential)
    log.debug(
        "Built %s typed data for credential %s",
        CredentialEncoding(encoding).value,
        credential.get("id"),
    )
    return {
        "domain": domain.domain_record(),
        "primaryType": VERIFIABLE_CREDENTIAL_PRIMARY_TYPE,
        "message": copy.deepcopy(dict(credential)),
        "types": types,
    }


def _join(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return ",".join(value)
    return value


def to_eip712_credential(credential: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a W3C credential to the EIP712 field naming.

    ``@context`` and ``type`` become the comma-joined ``_context`` and
    ``_type``; ``credentialSchema.type`` becomes ``_type``. The credential
    subject is left alone, its types are defined by the caller.
    """
    converted: dict[str, Any] = {}
    for key, value in credential.items():
        if key == "@context":
            converted["_context"] = _join(value)
        elif key == "type":
            converted["_type"] = _join(value)
        elif key == "credentialSchema" and isinstance(value, Mapping):
            converted[key] = {
                ("_type" if k == "type" else k): v for k, v in value.items()
            }
        else:
            converted[key] = copy.deepcopy(value)
    return converted
