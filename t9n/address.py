#!/usr/bin/env python3
"""
Address Module - Contract address derivation
============================================

A deployed contract's address is a deterministic function of who deploys
it, with which salt, which class and which constructor arguments:

    address = h(PREFIX, deployer, salt, class_hash, h(calldata)) mod ADDR_BOUND

where h is the Pedersen array hash. DEPLOY_ACCOUNT transactions use a
deployer of 0.
"""

from typing import Sequence

from .config import ADDR_BOUND, PREFIX_CONTRACT_ADDRESS
from .felt import Felt
from .hashes import compute_hash_on_elements


def calculate_contract_address(
    salt: int,
    class_hash: int,
    constructor_calldata_hash: int,
    deployer_address: int = 0,
) -> Felt:
    """
    Calculate a contract address from an already hashed constructor calldata

    Args:
    - salt: Contract address salt
    - class_hash: Class hash of the deployed contract
    - constructor_calldata_hash: compute_hash_on_elements(constructor_calldata)
    - deployer_address: Address of the deployer, 0 for DEPLOY_ACCOUNT

    Returns:
    - Address below ADDR_BOUND
    """
    raw = compute_hash_on_elements([
        PREFIX_CONTRACT_ADDRESS,
        deployer_address,
        salt,
        class_hash,
        constructor_calldata_hash,
    ])
    return Felt(int(raw) % ADDR_BOUND)


def calculate_contract_address_from_calldata(
    salt: int,
    class_hash: int,
    constructor_calldata: Sequence[int],
    deployer_address: int = 0,
) -> Felt:
    return calculate_contract_address(
        salt,
        class_hash,
        compute_hash_on_elements(constructor_calldata),
        deployer_address,
    )
