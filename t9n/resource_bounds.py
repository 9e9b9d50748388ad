#!/usr/bin/env python3
"""
Resource Bounds Module - SNIP-8 fee and data-availability encoding
=================================================================

Version 3 transactions replace ``max_fee`` with per-resource bounds and
add data-availability modes. SNIP-8 packs each of them into a single
field element before hashing.

Resource bound word (32 bytes, big-endian):
┌────────┬──────────────────┬─────────────┬──────────────────────┐
│ 0x0000 │ name (6 bytes)   │ max_amount  │ max_price_per_unit   │
│        │ "L1_GAS"         │ 8 bytes     │ 16 bytes             │
└────────┴──────────────────┴─────────────┴──────────────────────┘

DA modes word: ``nonce_mode << 32 | fee_mode`` with L1 = 0, L2 = 1.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

from .config import (
    DATA_AVAILABILITY_MODE_BITS,
    MAX_AMOUNT_BITS,
    MAX_PRICE_PER_UNIT_BITS,
    RESOURCE_NAME_BYTES,
)
from .exceptions import (
    IntegerParseError,
    MissingFieldError,
    ResourceNameError,
    TransactionFormatError,
)
from .felt import Felt
from .hashes import poseidon_hash_array

_UINT_HEX_RE = re.compile(r"^(0[xX])?[0-9a-fA-F]+$")


class Resource(Enum):
    """Resources a v3 transaction bounds; the value is the wire name"""
    L1_GAS = "L1_GAS"
    L2_GAS = "L2_GAS"


class DataAvailabilityMode(Enum):
    L1 = 0
    L2 = 1

    @classmethod
    def from_dict(cls, value: Any) -> "DataAvailabilityMode":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or value not in cls.__members__:
            raise TransactionFormatError(f"invalid data availability mode: {value!r}")
        return cls[value]


def parse_uint(value: Union[str, int], bits: int, name: str = "value") -> int:
    """
    Parse an unsigned integer of at most ``bits`` bits

    JSON-RPC encodes amounts as hex strings ("0x2710"); a leading ``0x`` is
    optional. Malformed or oversized values raise IntegerParseError.
    """
    if isinstance(value, bool):
        raise IntegerParseError(f"{name}: invalid unsigned integer {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _UINT_HEX_RE.match(value):
        digits = value[2:] if value[:2] in ("0x", "0X") else value
        number = int(digits, 16)
    else:
        raise IntegerParseError(f"{name}: invalid hex integer {value!r}")
    if not 0 <= number < 2 ** bits:
        raise IntegerParseError(f"{name}: {number:#x} does not fit in {bits} bits")
    return number


@dataclass(frozen=True)
class ResourceBounds:
    """Gas budget for one resource"""
    max_amount: int           # u64
    max_price_per_unit: int   # u128

    def __post_init__(self):
        # frozen: store the normalised ints so "0x10" and 16 build the same bounds
        object.__setattr__(self, "max_amount", parse_uint(self.max_amount, MAX_AMOUNT_BITS, "max_amount"))
        object.__setattr__(self, "max_price_per_unit", parse_uint(
            self.max_price_per_unit, MAX_PRICE_PER_UNIT_BITS, "max_price_per_unit"
        ))

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> "ResourceBounds":
        if not isinstance(value, dict):
            raise TransactionFormatError(f"resource bounds must be an object, got {value!r}")
        for key in ("max_amount", "max_price_per_unit"):
            if key not in value:
                raise MissingFieldError(key)
        return cls(max_amount=value["max_amount"], max_price_per_unit=value["max_price_per_unit"])

    def to_dict(self) -> Dict[str, str]:
        return {
            "max_amount": hex(self.max_amount),
            "max_price_per_unit": hex(self.max_price_per_unit),
        }


@dataclass(frozen=True)
class ResourceBoundsMapping:
    l1_gas: ResourceBounds
    l2_gas: ResourceBounds

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> "ResourceBoundsMapping":
        if not isinstance(value, dict):
            raise TransactionFormatError(f"resource_bounds must be an object, got {value!r}")
        for key in ("l1_gas", "l2_gas"):
            if key not in value:
                raise MissingFieldError(f"resource_bounds.{key}")
        return cls(
            l1_gas=ResourceBounds.from_dict(value["l1_gas"]),
            l2_gas=ResourceBounds.from_dict(value["l2_gas"]),
        )

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {"l1_gas": self.l1_gas.to_dict(), "l2_gas": self.l2_gas.to_dict()}


def encode_resource_bounds(resource: Union[Resource, str], bounds: ResourceBounds) -> Felt:
    """Pack (resource name, max_amount, max_price_per_unit) into one field element"""
    name = resource.value if isinstance(resource, Resource) else resource
    if not isinstance(name, str):
        raise ResourceNameError()
    try:
        name_bytes = name.encode("ascii")
    except UnicodeEncodeError:
        raise ResourceNameError(f"Resource name is not ASCII: {name!r}") from None
    if len(name_bytes) > RESOURCE_NAME_BYTES:
        raise ResourceNameError(f"Resource name is longer than {RESOURCE_NAME_BYTES} bytes: {name!r}")

    data = (
        name_bytes.rjust(RESOURCE_NAME_BYTES, b"\x00")
        + bounds.max_amount.to_bytes(MAX_AMOUNT_BITS // 8, "big")
        + bounds.max_price_per_unit.to_bytes(MAX_PRICE_PER_UNIT_BITS // 8, "big")
    )
    return Felt.from_bytes_be(data)


def resource_bounds_hash(tip: int, resource_bounds: ResourceBoundsMapping) -> Felt:
    """h(tip, resource_bounds_for_fee) from SNIP-8"""
    return poseidon_hash_array([
        tip,
        encode_resource_bounds(Resource.L1_GAS, resource_bounds.l1_gas),
        encode_resource_bounds(Resource.L2_GAS, resource_bounds.l2_gas),
    ])


def encode_da_modes(nonce_mode: DataAvailabilityMode, fee_mode: DataAvailabilityMode) -> Felt:
    return Felt((nonce_mode.value << DATA_AVAILABILITY_MODE_BITS) | fee_mode.value)
