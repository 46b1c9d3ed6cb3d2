"""
Type tables for EIP-712 verifiable credentials.

Two encodings are supported:

- W3C: JSON-LD shaped credentials with array-valued ``@context`` and ``type``.
- EIP712: the same content with ``_context``/``_type`` scalar strings, for
  signers that cannot hash a ``type`` field holding a string.

Callers merge their own ``CredentialSubject`` (and ``Issuer`` and any nested
struct types) into the fixed tables for every build.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from eth_utils import is_address

from eip712_vc.domain import DOMAIN_TYPE

log = logging.getLogger(__name__)

TypeField = dict[str, str]
TypeMap = dict[str, list[TypeField]]

DEFAULT_CONTEXT = "https://www.w3.org/2018/credentials/v1"
EIP712_CONTEXT = (
    "https://raw.githubusercontent.com/w3c-ccg/"
    "ethereum-eip712-signature-2021-spec/main/contexts/v1/index.json"
)
DEFAULT_VC_TYPE = "VerifiableCredential"

DOMAIN_PRIMARY_TYPE = "EIP712Domain"
VERIFIABLE_CREDENTIAL_PRIMARY_TYPE = "VerifiableCredential"
CREDENTIAL_SCHEMA_TYPE = "CredentialSchema"

RESERVED_TYPE_NAMES = frozenset(
    {DOMAIN_PRIMARY_TYPE, VERIFIABLE_CREDENTIAL_PRIMARY_TYPE, CREDENTIAL_SCHEMA_TYPE}
)

PRIMITIVE_TYPES = frozenset(
    {"bool", "address", "string", "bytes", "bytes32"}
    | {f"uint{bits}" for bits in range(8, 257, 8)}
)

_ARRAY_SUFFIX = re.compile(r"(\[\d*\])+$")
_LAST_ARRAY_SUFFIX = re.compile(r"\[\d*\]$")


def _to_fields(pairs: tuple[tuple[str, str], ...]) -> list[TypeField]:
    return [{"name": name, "type": type_} for name, type_ in pairs]


class TypeMapError(ValueError):
    """Raised when a type map cannot produce a verifiable hash."""


class CredentialEncoding(Enum):
    """Field naming convention of a credential."""

    W3C = "w3c"
    EIP712 = "eip712"


@dataclass(frozen=True)
class TypeTable:
    """Fixed struct definitions for one credential encoding."""

    verifiable_credential: tuple[tuple[str, str], ...]
    credential_schema: tuple[tuple[str, str], ...]
    proof: tuple[tuple[str, str], ...]

    def credential_fields(self) -> list[TypeField]:
        return _to_fields(self.verifiable_credential)

    def schema_fields(self) -> list[TypeField]:
        return _to_fields(self.credential_schema)

    def proof_fields(self) -> list[TypeField]:
        return _to_fields(self.proof)


W3C_TYPE_TABLE = TypeTable(
    verifiable_credential=(
        ("@context", "string[]"),
        ("type", "string[]"),
        ("id", "string"),
        ("issuer", "Issuer"),
        ("credentialSubject", "CredentialSubject"),
        ("credentialSchema", "CredentialSchema"),
        ("issuanceDate", "string"),
        ("expirationDate", "string"),
    ),
    credential_schema=(
        ("id", "string"),
        ("type", "string"),
    ),
    proof=(
        ("verificationMethod", "string"),
        ("ethereumAddress", "address"),
        ("created", "string"),
        ("proofPurpose", "string"),
        ("type", "string"),
    ),
)

EIP712_TYPE_TABLE = TypeTable(
    verifiable_credential=(
        ("_context", "string"),
        ("_type", "string"),
        ("id", "string"),
        ("issuer", "Issuer"),
        ("credentialSubject", "CredentialSubject"),
        ("credentialSchema", "CredentialSchema"),
        ("issuanceDate", "string"),
        ("expirationDate", "string"),
    ),
    credential_schema=(
        ("id", "string"),
        ("_type", "string"),
    ),
    proof=(
        ("verificationMethod", "string"),
        ("ethereumAddress", "address"),
        ("created", "string"),
        ("proofPurpose", "string"),
        ("_type", "string"),
    ),
)

TYPE_TABLES: dict[CredentialEncoding, TypeTable] = {
    CredentialEncoding.W3C: W3C_TYPE_TABLE,
    CredentialEncoding.EIP712: EIP712_TYPE_TABLE,
}

# Identity attestation subject, EIP712 encoding
IDENTITY_ATTESTATION_ISSUER_TYPE: tuple[tuple[str, str], ...] = (
    ("id", "string"),
    ("ethereumAddress", "address"),
)

IDENTITY_ATTESTATION_SUBJECT_TYPE: tuple[tuple[str, str], ...] = (
    ("id", "string"),
    ("ethereumAddress", "address"),
    ("_type", "string"),
    ("value", "string"),
    ("encrypted", "string"),
    ("trust", "uint8"),
    ("stake", "uint256"),
    ("nbf", "uint256"),
    ("exp", "uint256"),
)


def get_type_table(encoding: CredentialEncoding) -> TypeTable:
    """Get the fixed type table for an encoding."""
    return TYPE_TABLES[CredentialEncoding(encoding)]


def base_types(encoding: CredentialEncoding = CredentialEncoding.W3C) -> TypeMap:
    """Return fresh copies of the reserved entries of a type map."""
    table = get_type_table(encoding)
    return {
        DOMAIN_PRIMARY_TYPE: copy.deepcopy(DOMAIN_TYPE),
        VERIFIABLE_CREDENTIAL_PRIMARY_TYPE: table.credential_fields(),
        CREDENTIAL_SCHEMA_TYPE: table.schema_fields(),
    }


def identity_attestation_types() -> TypeMap:
    """Issuer and CredentialSubject types of an identity attestation.

    The subject carries an encrypted claim value with trust, stake and a
    validity window (``nbf``/``exp`` as unix seconds).
    """
    return {
        "Issuer": _to_fields(IDENTITY_ATTESTATION_ISSUER_TYPE),
        "CredentialSubject": _to_fields(IDENTITY_ATTESTATION_SUBJECT_TYPE),
    }


def merge_types(
    encoding: CredentialEncoding,
    subject_types: Mapping[str, list[TypeField]],
    issuer_type: list[TypeField] | None = None,
) -> TypeMap:
    """Merge caller struct types into the fixed table of an encoding.

    Args:
        encoding: Credential encoding selecting the fixed table.
        subject_types: ``CredentialSubject`` plus any nested struct types.
        issuer_type: ``Issuer`` fields. Overrides an ``Issuer`` entry in
            ``subject_types``.

    Returns:
        A complete, validated type map.

    Raises:
        TypeMapError: If a reserved type is redefined or a reference does
            not resolve.
    """
    redefined = RESERVED_TYPE_NAMES.intersection(subject_types)
    if redefined:
        raise TypeMapError(
            f"Cannot redefine reserved types: {', '.join(sorted(redefined))}"
        )

    types = base_types(encoding)
    for name, fields in subject_types.items():
        types[name] = copy.deepcopy(list(fields))
    if issuer_type is not None:
        types["Issuer"] = copy.deepcopy(list(issuer_type))

    validate_type_map(types)
    return types


def _base_type(type_: str) -> str:
    """Strip array suffixes, ``Person[]`` -> ``Person``."""
    return _ARRAY_SUFFIX.sub("", type_)


def validate_type_map(
    types: Mapping[str, Any],
    primary_type: str = VERIFIABLE_CREDENTIAL_PRIMARY_TYPE,
) -> None:
    """Check that a type map is closed and hashable.

    Raises:
        TypeMapError: On the first inconsistency found.
    """
    for required in (DOMAIN_PRIMARY_TYPE, primary_type):
        if required not in types:
            raise TypeMapError(f"Type map is missing {required}")

    for struct_name, fields in types.items():
        if not isinstance(fields, list):
            raise TypeMapError(f"Type {struct_name} must be a list of fields")
        seen: set[str] = set()
        for field in fields:
            if not isinstance(field, Mapping) or "name" not in field or "type" not in field:
                raise TypeMapError(f"Malformed field in {struct_name}: {field!r}")
            if field["name"] in seen:
                raise TypeMapError(
                    f"Field {field['name']} declared twice in {struct_name}"
                )
            seen.add(field["name"])

            referenced = _base_type(field["type"])
            if referenced not in PRIMITIVE_TYPES and referenced not in types:
                raise TypeMapError(
                    f"{struct_name}.{field['name']} references undefined type "
                    f"{field['type']}"
                )

    # Everything except the domain must hang off the primary type, otherwise
    # the primary type cannot be derived from the map.
    reachable = {primary_type}
    pending = [primary_type]
    while pending:
        for field in types[pending.pop()]:
            referenced = _base_type(field["type"])
            if referenced in types and referenced not in reachable:
                reachable.add(referenced)
                pending.append(referenced)

    unreachable = set(types) - reachable - {DOMAIN_PRIMARY_TYPE}
    if unreachable:
        raise TypeMapError(
            f"Types not referenced from {primary_type}: {', '.join(sorted(unreachable))}"
        )

    log.debug("Type map validated: %s", ", ".join(types))


def _check_value(types: Mapping[str, Any], type_: str, value: Any, path: str) -> None:
    if value is None:
        return

    if _ARRAY_SUFFIX.search(type_):
        if not isinstance(value, (list, tuple)):
            raise TypeMapError(f"{path} must be an array for type {type_}")
        element_type = _LAST_ARRAY_SUFFIX.sub("", type_)
        for index, item in enumerate(value):
            _check_value(types, element_type, item, f"{path}[{index}]")
        return

    if type_ in types:
        if not isinstance(value, Mapping):
            raise TypeMapError(f"{path} must be an object for type {type_}")
        for field in types[type_]:
            _check_value(
                types, field["type"], value.get(field["name"]), f"{path}.{field['name']}"
            )
        return

    if type_ == "address":
        if not isinstance(value, str) or not is_address(value):
            raise TypeMapError(f"{path} is not a valid address: {value!r}")
    elif type_.startswith("uint") and isinstance(value, int) and not isinstance(value, bool):
        bits = int(type_[4:])
        if not 0 <= value < 2**bits:
            raise TypeMapError(f"{path} does not fit in {type_}: {value}")


def validate_message(
    types: Mapping[str, Any],
    message: Mapping[str, Any],
    primary_type: str = VERIFIABLE_CREDENTIAL_PRIMARY_TYPE,
) -> None:
    """Check message values that the type map cannot encode.

    Catches ``address`` fields that are not addresses and ``uint`` values
    out of range. Absent values are left to the encoder.

    Raises:
        TypeMapError: Naming the first offending field.
    """
    _check_value(types, primary_type, message, primary_type)
