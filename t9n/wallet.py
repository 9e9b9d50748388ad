#!/usr/bin/env python3
"""
Wallet Module - STARK key pairs
===============================

This module provides key management for signing transactions:
- Private key generation over the STARK curve order
- Public key derivation (x coordinate of private_key * G)
- Signing of raw hashes and of transaction records
- Key persistence to/from JSON files

Key cryptographic concepts:
- A Starknet account is controlled by one STARK private key
- The public key is what account contracts store and check signatures against
- Transaction signatures are (r, s) over the transaction hash for one chain

Security note: key files contain private keys in plain hex and should be
protected with appropriate file permissions.
"""

import json
import os
from typing import Optional

from ecdsa.util import randrange

from .config import EC_ORDER
from .crypto import ExtendedSignature, get_public_key, sign
from .exceptions import InvalidFeltError, InvalidPrivateKeyError
from .felt import Felt
from .transaction import TransactionRecord


class KeyPair:
    """
    STARK Key Pair - Private key with its derived public key

    The key pair can:
    - Generate a cryptographically secure private key
    - Sign message hashes deterministically
    - Sign a transaction record for a given chain
    - Save/load itself to/from a JSON file
    """

    def __init__(self, private_key: Optional[int] = None):
        """
        Initialize key pair

        Args:
        - private_key: Existing key in [1, EC_ORDER); a random key is
          generated when omitted
        """
        if private_key is None:
            private_key = randrange(EC_ORDER)
        if not 0 < int(private_key) < EC_ORDER:
            raise InvalidPrivateKeyError(f"private key must be in [1, EC_ORDER), got {int(private_key):#x}")
        self.private_key = int(private_key)
        self.public_key = get_public_key(self.private_key)

    @classmethod
    def from_hex(cls, private_key: str) -> "KeyPair":
        return cls(Felt.from_hex(private_key))

    def sign_hash(self, message_hash: int) -> ExtendedSignature:
        return sign(self.private_key, message_hash)

    def sign_transaction(self, txn: TransactionRecord, chain_id: int, query_only: bool = False) -> TransactionRecord:
        """
        Sign a transaction record

        Computes the record's hash for ``chain_id`` and returns a copy of the
        record carrying the (r, s) signature.

        Args:
        - txn: Unsigned (or differently signed) transaction record
        - chain_id: Chain the signature is valid for
        - query_only: Sign the fee-estimation variant of the hash

        Returns:
        - New record with ``signature`` set
        """
        signature = self.sign_hash(txn.calculate_hash(chain_id, query_only))
        return txn.with_signature([signature.r, signature.s])

    def save_to_file(self, filename: Optional[str] = None) -> str:
        """
        Save key pair to a JSON file

        File format:
        {
            "private_key": "0x...",
            "public_key": "0x..."
        }

        Args:
        - filename: Optional custom filename, defaults to key_PUBLICKEY.json

        Returns:
        - Name of the written file
        """
        if not filename:
            filename = f"key_{self.public_key.to_hex()}.json"
        key_data = {
            "private_key": hex(self.private_key),
            "public_key": self.public_key.to_hex(),
        }
        with open(filename, "w") as f:
            json.dump(key_data, f, indent=2)
        return filename

    @classmethod
    def load_from_file(cls, filename: str) -> Optional["KeyPair"]:
        """
        Load key pair from a JSON file

        Returns:
        - KeyPair if the file exists and holds a valid key, None otherwise
        """
        if not os.path.exists(filename):
            return None
        try:
            with open(filename, "r") as f:
                key_data = json.load(f)
            return cls.from_hex(key_data["private_key"])
        except (json.JSONDecodeError, KeyError, ValueError, TypeError, InvalidFeltError, InvalidPrivateKeyError):
            return None
