#!/usr/bin/env python3
"""
Transaction Validator CLI
Validate the signature of a Starknet transaction stored as JSON

Usage:
    t9n --file-path txn.json --chain-id SN_SEPOLIA [--public-key 0x...] [--query]

Exit codes: 0 signature valid, 1 signature invalid, 2 error
"""

import argparse
import logging
import sys

from .exceptions import T9nError
from .validate import validate_txn_json

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="t9n",
        description="Compute a Starknet transaction hash and verify its signature",
    )
    parser.add_argument("-f", "--file-path", required=True,
                        help="Path to the JSON-RPC transaction file")
    parser.add_argument("-c", "--chain-id", required=True,
                        help="Chain id: 0x hex, decimal, MAINNET/SEPOLIA or a short string like SN_SEPOLIA")
    parser.add_argument("-p", "--public-key", default=None,
                        help="Expected signer public key (hex); recovered from the signature if omitted")
    parser.add_argument("--query", action="store_const", const=True, default=None,
                        help="Hash as a query-only (fee estimation) transaction")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: WARNING)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    try:
        result = validate_txn_json(args.file_path, args.chain_id, args.public_key, args.query)
    except T9nError as e:
        print(f"Validation error: {e}")
        return EXIT_ERROR

    if not result.is_valid:
        print(f"Validation error: {result}")
        return EXIT_INVALID

    print(f"Validation successful: {result}")
    return EXIT_VALID


if __name__ == "__main__":
    sys.exit(main())
