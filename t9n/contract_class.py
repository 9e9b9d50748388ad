#!/usr/bin/env python3
"""
Contract Class Module - Sierra class hash
=========================================

DECLARE v2 and v3 records may carry the full Sierra ``contract_class``
instead of its ``class_hash``. This module parses that object and derives
the class hash:

    class_hash = poseidon(
        "CONTRACT_CLASS_V0.1.0",
        h(EXTERNAL entry points),
        h(L1_HANDLER entry points),
        h(CONSTRUCTOR entry points),
        starknet_keccak(abi),
        poseidon(sierra_program),
    ) mod ADDR_BOUND

where h(entry points) is poseidon(selector_0, function_idx_0, selector_1, ...).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .config import ADDR_BOUND, PREFIX_CONTRACT_CLASS_V0_1_0
from .exceptions import MissingFieldError, TransactionFormatError
from .felt import Felt, parse_felt_list
from .hashes import poseidon_hash_array, starknet_keccak

ENTRY_POINT_TYPES = ("EXTERNAL", "L1_HANDLER", "CONSTRUCTOR")


@dataclass(frozen=True)
class SierraEntryPoint:
    selector: Felt
    function_idx: int

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> "SierraEntryPoint":
        if not isinstance(value, dict):
            raise TransactionFormatError(f"entry point must be an object, got {value!r}")
        for key in ("selector", "function_idx"):
            if key not in value:
                raise MissingFieldError(key)
        function_idx = value["function_idx"]
        if isinstance(function_idx, bool) or not isinstance(function_idx, int) or function_idx < 0:
            raise TransactionFormatError(f"invalid function_idx: {function_idx!r}")
        return cls(selector=Felt.parse(value["selector"]), function_idx=function_idx)

    def to_dict(self) -> Dict[str, Any]:
        return {"selector": self.selector.to_hex(), "function_idx": self.function_idx}


@dataclass(frozen=True)
class SierraContractClass:
    """
    Sierra Contract Class - The declarable form of a Cairo 1 contract

    Fields:
    - sierra_program: Program as a list of field elements
    - contract_class_version: Sierra version string, e.g. "0.1.0"
    - entry_points_by_type: Entry points keyed by EXTERNAL, L1_HANDLER, CONSTRUCTOR
    - abi: ABI as the exact JSON string that was declared
    """
    sierra_program: Tuple[Felt, ...]
    contract_class_version: str
    entry_points_by_type: Dict[str, Tuple[SierraEntryPoint, ...]]
    abi: str

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> "SierraContractClass":
        if not isinstance(value, dict):
            raise TransactionFormatError(f"contract_class must be an object, got {value!r}")
        for key in ("sierra_program", "entry_points_by_type", "abi"):
            if key not in value:
                raise MissingFieldError(key)
        if not isinstance(value["abi"], str):
            raise TransactionFormatError("abi must be a JSON string")

        raw_entry_points = value["entry_points_by_type"]
        if not isinstance(raw_entry_points, dict):
            raise TransactionFormatError("entry_points_by_type must be an object")
        entry_points = {}
        for entry_type in ENTRY_POINT_TYPES:
            if entry_type not in raw_entry_points:
                raise MissingFieldError(f"entry_points_by_type.{entry_type}")
            items = raw_entry_points[entry_type]
            if not isinstance(items, list):
                raise TransactionFormatError(f"{entry_type} entry points must be a list")
            entry_points[entry_type] = tuple(SierraEntryPoint.from_dict(item) for item in items)

        return cls(
            sierra_program=parse_felt_list(value["sierra_program"]),
            contract_class_version=str(value.get("contract_class_version", "0.1.0")),
            entry_points_by_type=entry_points,
            abi=value["abi"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sierra_program": [felt.to_hex() for felt in self.sierra_program],
            "contract_class_version": self.contract_class_version,
            "entry_points_by_type": {
                entry_type: [entry_point.to_dict() for entry_point in entry_points]
                for entry_type, entry_points in self.entry_points_by_type.items()
            },
            "abi": self.abi,
        }

    def class_hash(self) -> Felt:
        return compute_sierra_class_hash(self)


def hash_entry_points(entry_points: Tuple[SierraEntryPoint, ...]) -> Felt:
    elements: List[int] = []
    for entry_point in entry_points:
        elements.extend((entry_point.selector, entry_point.function_idx))
    return poseidon_hash_array(elements)


def compute_sierra_class_hash(contract_class: SierraContractClass) -> Felt:
    """
    Calculate the class hash of a Sierra contract class

    Returns:
    - Class hash reduced below ADDR_BOUND
    """
    entry_points = contract_class.entry_points_by_type
    class_hash = poseidon_hash_array([
        PREFIX_CONTRACT_CLASS_V0_1_0,
        hash_entry_points(entry_points["EXTERNAL"]),
        hash_entry_points(entry_points["L1_HANDLER"]),
        hash_entry_points(entry_points["CONSTRUCTOR"]),
        starknet_keccak(contract_class.abi.encode("utf-8")),
        poseidon_hash_array(contract_class.sierra_program),
    ])
    return Felt(int(class_hash) % ADDR_BOUND)
