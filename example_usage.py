#!/usr/bin/env python3
"""
Example usage of the Starknet transaction validator
Shows hashing, signing and validation of a transaction
"""

import json
import os
import shutil
import tempfile

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


def example_basic_usage():
    """Example of hashing, signing and validating one transaction"""
    print("=== BASIC VALIDATION EXAMPLE ===\n")

    from t9n.config import CHAIN_ID_SEPOLIA
    from t9n.transaction import parse_transaction
    from t9n.validate import validate_txn
    from t9n.wallet import KeyPair

    print("1. Creating a key pair...")
    key_pair = KeyPair()
    print(f"   Public key: {key_pair.public_key.to_hex()}")

    print("\n2. Parsing an INVOKE v3 transaction...")
    with open(os.path.join(FIXTURES, "invoke_v3.json"), "r") as f:
        txn, query_only = parse_transaction(json.load(f))
    print(f"   Type: {txn.TYPE} v{txn.VERSION} (query only: {query_only})")
    print(f"   Sender: {txn.sender_address.to_hex()}")

    print("\n3. Hashing for Sepolia...")
    message_hash = txn.calculate_hash(CHAIN_ID_SEPOLIA)
    print(f"   Transaction hash: {message_hash.to_hex()}")

    print("\n4. Signing...")
    signed = key_pair.sign_transaction(txn, CHAIN_ID_SEPOLIA)
    print(f"   Signature: {[part.to_hex() for part in signed.signature]}")

    print("\n5. Validating against the expected signer...")
    result = validate_txn(signed.to_dict(), "SN_SEPOLIA", key_pair.public_key)
    print(f"   {result}")

    print("\n6. Validating without a public key (recovery mode)...")
    result = validate_txn(signed.to_dict(), "SN_SEPOLIA")
    print(f"   {result}")

    print("\n=== EXAMPLE COMPLETED ===")


def example_cli_usage():
    """Example of the command line workflow"""
    print("\n=== CLI USAGE EXAMPLE ===\n")

    from t9n.__main__ import main
    from t9n.config import CHAIN_ID_SEPOLIA
    from t9n.transaction import parse_transaction
    from t9n.wallet import KeyPair

    temp_dir = tempfile.mkdtemp()
    try:
        key_pair = KeyPair()
        key_file = key_pair.save_to_file(os.path.join(temp_dir, "key.json"))
        print(f"1. Saved key pair to {key_file}")

        with open(os.path.join(FIXTURES, "deploy_account_v3.json"), "r") as f:
            txn, _ = parse_transaction(json.load(f))
        print(f"   Account will deploy at {txn.contract_address().to_hex()}")

        txn_file = os.path.join(temp_dir, "deploy_account.json")
        with open(txn_file, "w") as f:
            json.dump(key_pair.sign_transaction(txn, CHAIN_ID_SEPOLIA).to_dict(), f, indent=2)
        print(f"2. Wrote signed transaction to {txn_file}")

        print("\n3. Running: t9n --file-path deploy_account.json --chain-id SN_SEPOLIA --public-key ...")
        code = main(["--file-path", txn_file, "--chain-id", "SN_SEPOLIA",
                     "--public-key", key_pair.public_key.to_hex()])
        print(f"   Exit code: {code}")

        print("\nAvailable options:")
        print("  -f, --file-path   JSON-RPC transaction file")
        print("  -c, --chain-id    SN_MAIN, SN_SEPOLIA, MAINNET, SEPOLIA or a hex/decimal id")
        print("  -p, --public-key  Expected signer (recovered when omitted)")
        print("  --query           Hash as a query-only transaction")
        print("  --log-level       DEBUG, INFO, WARNING or ERROR")

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


if __name__ == "__main__":
    example_basic_usage()
    example_cli_usage()
