#!/usr/bin/env python3
"""
Validation Module - Transaction signature validation pipeline
=============================================================

This module ties parsing, hashing and ECDSA together. A transaction moves
through four states:

    Unparsed -> Typed -> Hashed -> Verified | Rejected

1. Unparsed -> Typed: the ``type``/``version`` discriminators select a
   transaction record (parse_transaction)
2. Typed -> Hashed: the record's calculator hashes it for the chain
3. Hashed -> Verified: the (r, s) signature is checked against the supplied
   public key, or against the key recovered from the signature

Rejected is any raised T9nError; Verified carries a ValidationResult whose
``is_valid`` may still be False when the signature does not match.

Recovery Mode:
Without an expected public key the signer is recovered from the signature
itself. Verification against a recovered key only proves the signature is
well-formed, not who signed it; callers that need authentication must pass
the expected public key.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from starknet_py.net.models.chains import StarknetChainId

from .crypto import recover, verify
from .exceptions import (
    FeltRangeError,
    InvalidFeltError,
    InvalidPublicKeyError,
    SignatureShapeError,
    TransactionFileError,
    TransactionFormatError,
)
from .felt import Felt
from .transaction import parse_transaction

logger = logging.getLogger(__name__)

RECOVERY_HINT = 1

_DEC_RE = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class ValidationResult:
    """
    Verdict of a validation run

    Fields:
    - is_valid: Whether the signature matches the public key
    - message_hash: Transaction hash that was checked
    - public_key: Key the signature was checked against
    - recovered: True if public_key was recovered rather than supplied
    """
    is_valid: bool
    message_hash: Felt
    public_key: Felt
    recovered: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "message_hash": self.message_hash.to_hex(),
            "public_key": self.public_key.to_hex(),
            "recovered": self.recovered,
        }

    def __str__(self) -> str:
        verdict = "Signature is valid" if self.is_valid else "Signature is invalid"
        source = "recovered" if self.recovered else "supplied"
        return f"{verdict} (hash {self.message_hash.to_hex()}, {source} public key {self.public_key.to_hex()})"


def resolve_chain_id(value: Union[int, str]) -> Felt:
    """
    Turn a chain id argument into a field element

    Accepts:
    - ints and ``0x`` hex strings: "0x534e5f5345504f4c4941"
    - decimal strings: "393402133025997798000961"
    - network names: "SEPOLIA", "MAINNET"
    - Cairo short strings: "SN_SEPOLIA"
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return Felt(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidFeltError(f"invalid chain id: {value!r}")

    value = value.strip()
    if value[:2] in ("0x", "0X"):
        return Felt.from_hex(value)
    if _DEC_RE.match(value):
        return Felt.from_dec_str(value)
    if value.upper() in StarknetChainId.__members__:
        return Felt(int(StarknetChainId[value.upper()]))
    return Felt.from_short_string(value)


def validate_txn(
    value: Dict[str, Any],
    chain_id: Union[int, str],
    public_key: Optional[Union[int, str]] = None,
    query_only: Optional[bool] = None,
) -> ValidationResult:
    """
    Validate the signature of a JSON-RPC transaction object

    Args:
    - value: Decoded transaction JSON
    - chain_id: Chain the transaction was signed for (see resolve_chain_id)
    - public_key: Expected signer; recovered from the signature when omitted
    - query_only: Force the query (fee estimation) hash on or off; by default
      the wire version decides

    Returns:
    - ValidationResult

    Raises:
    - TransactionParseError subclasses for malformed input
    - CryptoRangeError subclasses for out-of-range hashes, signatures or keys
    """
    chain = resolve_chain_id(chain_id)

    txn, wire_query_only = parse_transaction(value)
    if query_only is None:
        query_only = wire_query_only
    logger.debug(f"Typed {txn.TYPE} v{txn.VERSION} transaction (query_only={query_only})")

    message_hash = txn.calculate_hash(chain, query_only)
    logger.debug(f"Hashed transaction: {message_hash.to_hex()}")

    if len(txn.signature) != 2:
        raise SignatureShapeError(f"expected signature with 2 elements (r, s), got {len(txn.signature)}")
    r, s = txn.signature

    if public_key is None:
        key = recover(message_hash, r, s, RECOVERY_HINT)
        recovered = True
        logger.debug(f"Recovered public key {key.to_hex()}")
    else:
        try:
            key = Felt.parse(public_key)
        except FeltRangeError as e:
            raise InvalidPublicKeyError(f"The public key is not a field element: {e}") from e
        recovered = False

    is_valid = verify(key, message_hash, r, s)
    result = ValidationResult(is_valid, message_hash, key, recovered)
    logger.info(f"{txn.TYPE} v{txn.VERSION}: {result}")
    return result


def validate_txn_json(
    file_path: str,
    chain_id: Union[int, str],
    public_key: Optional[Union[int, str]] = None,
    query_only: Optional[bool] = None,
) -> ValidationResult:
    """
    Validate the transaction stored in a JSON file

    Raises:
    - TransactionFileError: If the file cannot be read
    - TransactionFormatError: If the file is not valid JSON
    - Everything validate_txn raises
    """
    try:
        with open(file_path, "r") as f:
            value = json.load(f)
    except OSError as e:
        raise TransactionFileError(f"cannot read {file_path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TransactionFormatError(f"{file_path} is not valid JSON: {e}") from e

    logger.debug(f"Loaded transaction from {file_path}")
    return validate_txn(value, chain_id, public_key, query_only)
