#!/usr/bin/env python3
"""
Configuration Module - Protocol constants
=========================================

This module contains every Starknet protocol constant used by the hash
calculators and the ECDSA engine. Each constant is defined exactly once
here and shared by every transaction kind and version, so a bit pattern
never has to be repeated per calculator.

Constants defined here:
- STARK field prime and curve parameters
- Transaction hash prefixes (Cairo short strings)
- Query-only version offsets used for fee simulation
- Contract address bound
- SNIP-8 encoding widths
- Well-known chain identifiers
"""

# Field and Curve Configuration
# =============================
FIELD_PRIME = 0x800000000000011000000000000000000000000000000000000000000000001  # 2^251 + 17 * 2^192 + 1
EC_ORDER = 0x800000000000010FFFFFFFFFFFFFFFFB781126DCAE7B2321E66A241ADC64D2F
ALPHA = 1
BETA = 0x6F21413EFBE40DE150E596D72F7A8C5609AD26C15C915C1F4CDFCB99CEE9E89
GENERATOR_X = 0x1EF15C18599971B7BECED415A40F0C7DEACFD9B0D1819E03D723D8BC943CFCA
GENERATOR_Y = 0x5668060AA49730B7BE4801DF46EC62DE53ECD11ABE43A32873000C36E8DC1F
ELEMENT_UPPER_BOUND = 2 ** 251   # message hashes and signature components must stay below this

# Transaction Hash Prefixes
# =========================
PREFIX_INVOKE = 0x696E766F6B65                         # "invoke"
PREFIX_DECLARE = 0x6465636C617265                      # "declare"
PREFIX_DEPLOY_ACCOUNT = 0x6465706C6F795F6163636F756E74  # "deploy_account"
PREFIX_CONTRACT_ADDRESS = 0x535441524B4E45545F434F4E54524143545F41444452455353  # "STARKNET_CONTRACT_ADDRESS"
PREFIX_CONTRACT_CLASS_V0_1_0 = 0x434F4E54524143545F434C4153535F56302E312E30     # "CONTRACT_CLASS_V0.1.0"

# Transaction Versions
# ====================
QUERY_VERSION_BASE = 2 ** 128    # added to the version of transactions that are only simulated
QUERY_VERSION_ZERO = QUERY_VERSION_BASE
QUERY_VERSION_ONE = QUERY_VERSION_BASE + 1
QUERY_VERSION_TWO = QUERY_VERSION_BASE + 2
QUERY_VERSION_THREE = QUERY_VERSION_BASE + 3

# Addresses
# =========
ADDR_BOUND = 2 ** 251 - 256      # contract addresses are reduced modulo this bound

# SNIP-8 Encoding
# ===============
DATA_AVAILABILITY_MODE_BITS = 32
MAX_AMOUNT_BITS = 64
MAX_PRICE_PER_UNIT_BITS = 128
RESOURCE_NAME_BYTES = 8          # resource name occupies the top 8 bytes of the 32-byte word
MAX_SHORT_STRING_LENGTH = 31

# Signing
# =======
MAX_SIGN_ATTEMPTS = 100_000      # nonce retries before signing gives up

# Chain Identifiers
# =================
CHAIN_ID_MAINNET = 0x534E5F4D41494E         # "SN_MAIN"
CHAIN_ID_SEPOLIA = 0x534E5F5345504F4C4941   # "SN_SEPOLIA"
