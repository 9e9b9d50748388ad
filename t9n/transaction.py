#!/usr/bin/env python3
"""
Transaction Module - Typed transaction records and their hashes
===============================================================

This module contains one frozen dataclass per supported (type, version)
pair of the Starknet JSON-RPC wire format, and the calculator producing the
canonical hash of each:

- InvokeTxnV0, InvokeTxnV1, InvokeTxnV3
- DeclareTxnV0, DeclareTxnV1, DeclareTxnV2, DeclareTxnV3
- DeployAccountTxnV1, DeployAccountTxnV3

Hash Families:
1. Pedersen (versions 0, 1, 2): compute_hash_on_elements over
   [prefix, version, address, selector, h(calldata), max_fee, chain_id, ...]

2. Poseidon (version 3): poseidon over
   [prefix, version, address, h(tip, bounds), h(paymaster_data), chain_id,
    nonce, da_modes, ...kind specific suffix]

Query Versions:
Transactions sent only to estimate fees are signed over ``2^128 + version``
so that the signature can never be replayed on-chain. Whether a record is
query-only is an explicit flag on every calculator.

TransactionRecord is the closed union of all shapes; parse_transaction is
the only place that dispatches on the wire ``type``/``version`` fields.
"""

from dataclasses import MISSING, dataclass, field, fields, replace
from typing import Any, ClassVar, Dict, Optional, Tuple, Type, Union

from .address import calculate_contract_address
from .config import (
    MAX_AMOUNT_BITS,
    PREFIX_DECLARE,
    PREFIX_DEPLOY_ACCOUNT,
    PREFIX_INVOKE,
    QUERY_VERSION_BASE,
)
from .contract_class import SierraContractClass
from .exceptions import (
    MissingFieldError,
    TransactionFormatError,
    UnsupportedTypeOrVersionError,
)
from .felt import Felt, felts_to_hex, parse_felt_list
from .hashes import compute_hash_on_elements, poseidon_hash_array
from .resource_bounds import (
    DataAvailabilityMode,
    ResourceBoundsMapping,
    encode_da_modes,
    parse_uint,
    resource_bounds_hash,
)


def _parse_tip(value) -> int:
    return parse_uint(value, MAX_AMOUNT_BITS, "tip")


def _felt(**kwargs):
    return field(metadata={"parse": Felt.parse, "dump": Felt.to_hex}, **kwargs)


def _felt_list(**kwargs):
    return field(metadata={"parse": parse_felt_list, "dump": felts_to_hex}, **kwargs)


def _signature():
    return _felt_list(default=())


def _da_mode():
    return field(metadata={"parse": DataAvailabilityMode.from_dict, "dump": lambda mode: mode.name})


def _resource_bounds():
    return field(metadata={"parse": ResourceBoundsMapping.from_dict, "dump": ResourceBoundsMapping.to_dict})


def _tip():
    return field(metadata={"parse": _parse_tip, "dump": hex})


class _TransactionRecord:
    """
    Mixin for transaction dataclasses

    Subclasses set TYPE and VERSION and declare their wire fields with
    ``parse``/``dump`` metadata; parsing and serialization are generic.
    """

    TYPE: ClassVar[str]
    VERSION: ClassVar[int]

    @classmethod
    def from_dict(cls, value: Dict[str, Any]):
        if not isinstance(value, dict):
            raise TransactionFormatError(f"transaction must be a JSON object, got {type(value).__name__}")
        kwargs = {}
        for record_field in fields(cls):
            if record_field.name not in value:
                if record_field.default is MISSING and record_field.default_factory is MISSING:
                    raise MissingFieldError(record_field.name)
                continue
            raw = value[record_field.name]
            if raw is None and record_field.default is None:
                continue
            kwargs[record_field.name] = record_field.metadata["parse"](raw)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = {"type": self.TYPE, "version": hex(self.VERSION)}
        for record_field in fields(self):
            attr = getattr(self, record_field.name)
            if attr is None:
                continue
            result[record_field.name] = record_field.metadata["dump"](attr)
        return result

    def with_signature(self, signature):
        return replace(self, signature=tuple(Felt.parse(part) for part in signature))

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        raise NotImplementedError


def transaction_version(version: int, query_only: bool = False) -> Felt:
    """Version field that goes into the hash: ``version`` or ``2^128 + version``"""
    return Felt(QUERY_VERSION_BASE + version if query_only else version)


# Invoke
# ======

@dataclass(frozen=True)
class InvokeTxnV0(_TransactionRecord):
    TYPE: ClassVar[str] = "INVOKE"
    VERSION: ClassVar[int] = 0

    contract_address: Felt = _felt()
    entry_point_selector: Felt = _felt()
    calldata: Tuple[Felt, ...] = _felt_list()
    max_fee: Felt = _felt()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_invoke_v0_hash(self, chain_id, query_only)


@dataclass(frozen=True)
class InvokeTxnV1(_TransactionRecord):
    TYPE: ClassVar[str] = "INVOKE"
    VERSION: ClassVar[int] = 1

    sender_address: Felt = _felt()
    calldata: Tuple[Felt, ...] = _felt_list()
    max_fee: Felt = _felt()
    nonce: Felt = _felt()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_invoke_v1_hash(self, chain_id, query_only)


@dataclass(frozen=True)
class InvokeTxnV3(_TransactionRecord):
    TYPE: ClassVar[str] = "INVOKE"
    VERSION: ClassVar[int] = 3

    sender_address: Felt = _felt()
    calldata: Tuple[Felt, ...] = _felt_list()
    nonce: Felt = _felt()
    resource_bounds: ResourceBoundsMapping = _resource_bounds()
    tip: int = _tip()
    paymaster_data: Tuple[Felt, ...] = _felt_list()
    account_deployment_data: Tuple[Felt, ...] = _felt_list()
    nonce_data_availability_mode: DataAvailabilityMode = _da_mode()
    fee_data_availability_mode: DataAvailabilityMode = _da_mode()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_invoke_v3_hash(self, chain_id, query_only)


# Declare
# =======

@dataclass(frozen=True)
class DeclareTxnV0(_TransactionRecord):
    TYPE: ClassVar[str] = "DECLARE"
    VERSION: ClassVar[int] = 0

    sender_address: Felt = _felt()
    class_hash: Felt = _felt()
    max_fee: Felt = _felt()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_declare_v0_hash(self, chain_id, query_only)


@dataclass(frozen=True)
class DeclareTxnV1(_TransactionRecord):
    TYPE: ClassVar[str] = "DECLARE"
    VERSION: ClassVar[int] = 1

    sender_address: Felt = _felt()
    class_hash: Felt = _felt()
    max_fee: Felt = _felt()
    nonce: Felt = _felt()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_declare_v1_hash(self, chain_id, query_only)


def _contract_class_field():
    return field(default=None, metadata={
        "parse": SierraContractClass.from_dict,
        "dump": SierraContractClass.to_dict,
    })


class _SierraDeclare:
    """Declare records whose class is either hashed already or sent in full"""

    def __post_init__(self):
        if self.class_hash is None and self.contract_class is None:
            raise MissingFieldError("class_hash")
        if self.class_hash is not None and self.contract_class is not None:
            computed = self.contract_class.class_hash()
            if computed != self.class_hash:
                raise TransactionFormatError(
                    f"class_hash {self.class_hash.to_hex()} does not match contract_class hash {computed.to_hex()}"
                )

    def get_class_hash(self) -> Felt:
        if self.class_hash is not None:
            return self.class_hash
        return self.contract_class.class_hash()


@dataclass(frozen=True)
class DeclareTxnV2(_SierraDeclare, _TransactionRecord):
    TYPE: ClassVar[str] = "DECLARE"
    VERSION: ClassVar[int] = 2

    sender_address: Felt = _felt()
    compiled_class_hash: Felt = _felt()
    max_fee: Felt = _felt()
    nonce: Felt = _felt()
    signature: Tuple[Felt, ...] = _signature()
    class_hash: Optional[Felt] = _felt(default=None)
    contract_class: Optional[SierraContractClass] = _contract_class_field()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_declare_v2_hash(self, chain_id, query_only)


@dataclass(frozen=True)
class DeclareTxnV3(_SierraDeclare, _TransactionRecord):
    TYPE: ClassVar[str] = "DECLARE"
    VERSION: ClassVar[int] = 3

    sender_address: Felt = _felt()
    compiled_class_hash: Felt = _felt()
    nonce: Felt = _felt()
    resource_bounds: ResourceBoundsMapping = _resource_bounds()
    tip: int = _tip()
    paymaster_data: Tuple[Felt, ...] = _felt_list()
    account_deployment_data: Tuple[Felt, ...] = _felt_list()
    nonce_data_availability_mode: DataAvailabilityMode = _da_mode()
    fee_data_availability_mode: DataAvailabilityMode = _da_mode()
    signature: Tuple[Felt, ...] = _signature()
    class_hash: Optional[Felt] = _felt(default=None)
    contract_class: Optional[SierraContractClass] = _contract_class_field()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_declare_v3_hash(self, chain_id, query_only)


# Deploy Account
# ==============

class _DeployAccount:
    def contract_address(self) -> Felt:
        """Address the account will be deployed at (deployer 0)"""
        return calculate_contract_address(
            self.contract_address_salt,
            self.class_hash,
            compute_hash_on_elements(self.constructor_calldata),
            0,
        )


@dataclass(frozen=True)
class DeployAccountTxnV1(_DeployAccount, _TransactionRecord):
    TYPE: ClassVar[str] = "DEPLOY_ACCOUNT"
    VERSION: ClassVar[int] = 1

    class_hash: Felt = _felt()
    contract_address_salt: Felt = _felt()
    constructor_calldata: Tuple[Felt, ...] = _felt_list()
    max_fee: Felt = _felt()
    nonce: Felt = _felt()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_deploy_account_v1_hash(self, chain_id, query_only)


@dataclass(frozen=True)
class DeployAccountTxnV3(_DeployAccount, _TransactionRecord):
    TYPE: ClassVar[str] = "DEPLOY_ACCOUNT"
    VERSION: ClassVar[int] = 3

    class_hash: Felt = _felt()
    contract_address_salt: Felt = _felt()
    constructor_calldata: Tuple[Felt, ...] = _felt_list()
    nonce: Felt = _felt()
    resource_bounds: ResourceBoundsMapping = _resource_bounds()
    tip: int = _tip()
    paymaster_data: Tuple[Felt, ...] = _felt_list()
    nonce_data_availability_mode: DataAvailabilityMode = _da_mode()
    fee_data_availability_mode: DataAvailabilityMode = _da_mode()
    signature: Tuple[Felt, ...] = _signature()

    def calculate_hash(self, chain_id: int, query_only: bool = False) -> Felt:
        return calculate_deploy_account_v3_hash(self, chain_id, query_only)


TransactionRecord = Union[
    InvokeTxnV0, InvokeTxnV1, InvokeTxnV3,
    DeclareTxnV0, DeclareTxnV1, DeclareTxnV2, DeclareTxnV3,
    DeployAccountTxnV1, DeployAccountTxnV3,
]

TRANSACTION_TYPES: Dict[Tuple[str, int], Type[_TransactionRecord]] = {
    (cls.TYPE, cls.VERSION): cls
    for cls in (
        InvokeTxnV0, InvokeTxnV1, InvokeTxnV3,
        DeclareTxnV0, DeclareTxnV1, DeclareTxnV2, DeclareTxnV3,
        DeployAccountTxnV1, DeployAccountTxnV3,
    )
}


# Pedersen family calculators
# ===========================

def calculate_invoke_v0_hash(txn: InvokeTxnV0, chain_id: int, query_only: bool = False) -> Felt:
    return compute_hash_on_elements([
        PREFIX_INVOKE,
        transaction_version(0, query_only),
        txn.contract_address,
        txn.entry_point_selector,
        compute_hash_on_elements(txn.calldata),
        txn.max_fee,
        chain_id,
    ])


def calculate_invoke_v1_hash(txn: InvokeTxnV1, chain_id: int, query_only: bool = False) -> Felt:
    return compute_hash_on_elements([
        PREFIX_INVOKE,
        transaction_version(1, query_only),
        txn.sender_address,
        0,  # entry_point_selector
        compute_hash_on_elements(txn.calldata),
        txn.max_fee,
        chain_id,
        txn.nonce,
    ])


def calculate_declare_v0_hash(txn: DeclareTxnV0, chain_id: int, query_only: bool = False) -> Felt:
    return compute_hash_on_elements([
        PREFIX_DECLARE,
        transaction_version(0, query_only),
        txn.sender_address,
        0,  # entry_point_selector
        compute_hash_on_elements([]),
        txn.max_fee,
        chain_id,
        txn.class_hash,
    ])


def calculate_declare_v1_hash(txn: DeclareTxnV1, chain_id: int, query_only: bool = False) -> Felt:
    return compute_hash_on_elements([
        PREFIX_DECLARE,
        transaction_version(1, query_only),
        txn.sender_address,
        0,  # entry_point_selector
        compute_hash_on_elements([txn.class_hash]),
        txn.max_fee,
        chain_id,
        txn.nonce,
    ])


def calculate_declare_v2_hash(txn: DeclareTxnV2, chain_id: int, query_only: bool = False) -> Felt:
    return compute_hash_on_elements([
        PREFIX_DECLARE,
        transaction_version(2, query_only),
        txn.sender_address,
        0,  # entry_point_selector
        compute_hash_on_elements([txn.get_class_hash()]),
        txn.max_fee,
        chain_id,
        txn.nonce,
        txn.compiled_class_hash,
    ])


def calculate_deploy_account_v1_hash(
    txn: DeployAccountTxnV1, chain_id: int, query_only: bool = False
) -> Felt:
    return compute_hash_on_elements([
        PREFIX_DEPLOY_ACCOUNT,
        transaction_version(1, query_only),
        txn.contract_address(),
        0,  # entry_point_selector
        compute_hash_on_elements([txn.class_hash, txn.contract_address_salt, *txn.constructor_calldata]),
        txn.max_fee,
        chain_id,
        txn.nonce,
    ])


# Poseidon family calculators
# ===========================

def _v3_common_elements(prefix: int, txn, address: int, chain_id: int, query_only: bool) -> list:
    return [
        prefix,
        transaction_version(3, query_only),
        address,
        resource_bounds_hash(txn.tip, txn.resource_bounds),
        poseidon_hash_array(txn.paymaster_data),
        chain_id,
        txn.nonce,
        encode_da_modes(txn.nonce_data_availability_mode, txn.fee_data_availability_mode),
    ]


def calculate_invoke_v3_hash(txn: InvokeTxnV3, chain_id: int, query_only: bool = False) -> Felt:
    elements = _v3_common_elements(PREFIX_INVOKE, txn, txn.sender_address, chain_id, query_only)
    elements += [
        poseidon_hash_array(txn.account_deployment_data),
        poseidon_hash_array(txn.calldata),
    ]
    return poseidon_hash_array(elements)


def calculate_declare_v3_hash(txn: DeclareTxnV3, chain_id: int, query_only: bool = False) -> Felt:
    elements = _v3_common_elements(PREFIX_DECLARE, txn, txn.sender_address, chain_id, query_only)
    elements += [
        poseidon_hash_array(txn.account_deployment_data),
        txn.get_class_hash(),
        txn.compiled_class_hash,
    ]
    return poseidon_hash_array(elements)


def calculate_deploy_account_v3_hash(
    txn: DeployAccountTxnV3, chain_id: int, query_only: bool = False
) -> Felt:
    elements = _v3_common_elements(
        PREFIX_DEPLOY_ACCOUNT, txn, txn.contract_address(), chain_id, query_only
    )
    elements += [
        poseidon_hash_array(txn.constructor_calldata),
        txn.class_hash,
        txn.contract_address_salt,
    ]
    return poseidon_hash_array(elements)


def calculate_transaction_hash(txn: TransactionRecord, chain_id: int, query_only: bool = False) -> Felt:
    return txn.calculate_hash(chain_id, query_only)


# Parsing
# =======

def _required_str(value: Dict[str, Any], key: str) -> str:
    if key not in value:
        raise MissingFieldError(key)
    if not isinstance(value[key], str):
        raise TransactionFormatError(f"Invalid {key} format: {value[key]!r}")
    return value[key]


def parse_version(version: str) -> Tuple[int, bool]:
    """
    Parse the wire ``version`` into (version, query_only)

    "0x1" -> (1, False); "0x100000000000000000000000000000001" -> (1, True)
    """
    try:
        number = int(version, 16)
    except ValueError:
        raise TransactionFormatError(f"Invalid version format: {version!r}") from None
    if number < 0:
        raise TransactionFormatError(f"Invalid version format: {version!r}")
    if number >= QUERY_VERSION_BASE:
        return number - QUERY_VERSION_BASE, True
    return number, False


def parse_transaction(value: Dict[str, Any]) -> Tuple[TransactionRecord, bool]:
    """
    Turn a JSON-RPC transaction object into a typed record

    Args:
    - value: Decoded JSON object

    Returns:
    - Tuple of (record, query_only) where query_only reports whether the
      wire version carried the 2^128 query offset

    Raises:
    - MissingFieldError: ``type``, ``version`` or a required field is absent
    - TransactionFormatError: A field has the wrong shape
    - UnsupportedTypeOrVersionError: No record matches (type, version)
    """
    if not isinstance(value, dict):
        raise TransactionFormatError(f"transaction must be a JSON object, got {type(value).__name__}")
    txn_type = _required_str(value, "type")
    raw_version = _required_str(value, "version")
    version, query_only = parse_version(raw_version)

    record_class = TRANSACTION_TYPES.get((txn_type, version))
    if record_class is None:
        raise UnsupportedTypeOrVersionError(txn_type, raw_version)
    return record_class.from_dict(value), query_only
