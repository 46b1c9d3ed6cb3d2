"""
EIP-712 signing domain.

Holds the domain parameters shared by every credential issued under one
configuration and derives the domain separator.
https://eips.ethereum.org/EIPS/eip-712#definition-of-domainseparator
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from eth_abi import encode
from eth_utils import is_address, keccak, to_hex

DOMAIN_ENCODING = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)

DOMAIN_TYPE: list[dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


class DomainConfigError(ValueError):
    """Raised when signing domain parameters are invalid."""


@dataclass(frozen=True)
class SigningDomain:
    """EIP-712 domain parameters."""

    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def __post_init__(self) -> None:
        if not isinstance(self.chain_id, int) or isinstance(self.chain_id, bool):
            raise DomainConfigError(f"chainId must be an integer, got {self.chain_id!r}")
        if self.chain_id < 0:
            raise DomainConfigError(f"chainId must be non-negative, got {self.chain_id}")
        if not is_address(self.verifying_contract):
            raise DomainConfigError(
                f"verifyingContract is not a valid address: {self.verifying_contract!r}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SigningDomain:
        """Create a SigningDomain from a config mapping.

        Accepts either the EIP-712 wire names (``chainId``,
        ``verifyingContract``) or the attribute names.

        Raises:
            DomainConfigError: If a parameter is missing or invalid.
        """
        try:
            return cls(
                name=data["name"],
                version=data["version"],
                chain_id=data["chainId"] if "chainId" in data else data["chain_id"],
                verifying_contract=(
                    data["verifyingContract"]
                    if "verifyingContract" in data
                    else data["verifying_contract"]
                ),
            )
        except KeyError as e:
            raise DomainConfigError(f"Missing domain parameter: {e.args[0]}") from e

    def domain_record(self) -> dict[str, Any]:
        """Return the ``domain`` member of a typed-data envelope."""
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }

    def domain_separator(self) -> str:
        """Compute the domain separator as a 0x-prefixed hex string."""
        encoded = encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                keccak(text=DOMAIN_ENCODING),
                keccak(text=self.name),
                keccak(text=self.version),
                self.chain_id,
                self.verifying_contract,
            ],
        )
        return to_hex(keccak(encoded))
