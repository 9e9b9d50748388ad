#!/usr/bin/env python3
"""
Hash Module - Pedersen, Poseidon and Keccak primitives
======================================================

This module provides the hash functions every transaction hash is built
from:
- pedersen: two-input Pedersen hash over field elements
- poseidon_hash_array: Poseidon sponge over any number of elements
- HashChain: "hash an array" accumulator built from Pedersen
- compute_hash_on_elements: the array hash used by pre-v3 transactions
- starknet_keccak: Keccak-256 truncated to 250 bits (entry point selectors)

All functions are deterministic and side-effect free.
"""

from typing import Iterable, Sequence

from poseidon_py.poseidon_hash import poseidon_hash_many
from starknet_py.hash.selector import get_selector_from_name as selector_from_name
from starknet_py.hash.utils import keccak256, pedersen_hash

from .exceptions import HashChainFinalizedError
from .felt import Felt

MASK_250 = 2 ** 250 - 1


def pedersen(a: int, b: int) -> Felt:
    """Pedersen hash of two field elements"""
    return Felt(pedersen_hash(int(a), int(b)))


def poseidon_hash_array(elements: Iterable[int]) -> Felt:
    """Poseidon hash of a variable-length sequence (single result)"""
    return Felt(poseidon_hash_many([int(element) for element in elements]))


class HashChain:
    """
    Pedersen Hash Chain - Hashes an array element by element

    Starting from 0, each update folds ``pedersen(running_hash, value)``;
    finalize hashes in the element count:

        h(a, b, c) = pedersen(pedersen(pedersen(pedersen(0, a), b), c), 3)

    A chain is consumed by finalize() and cannot be reused.
    """

    def __init__(self):
        self.hash = Felt.ZERO
        self.count = 0
        self._finalized = False

    def update(self, value: int) -> "HashChain":
        if self._finalized:
            raise HashChainFinalizedError("cannot update a finalized hash chain")
        self.hash = pedersen(self.hash, value)
        self.count += 1
        return self

    def extend(self, values: Iterable[int]) -> "HashChain":
        for value in values:
            self.update(value)
        return self

    def finalize(self) -> Felt:
        if self._finalized:
            raise HashChainFinalizedError("hash chain already finalized")
        self._finalized = True
        return pedersen(self.hash, self.count)

    @classmethod
    def single(cls, value: int) -> Felt:
        return cls().update(value).finalize()


def compute_hash_on_elements(elements: Sequence[int]) -> Felt:
    """
    Array hash used by Pedersen-based (pre-v3) transaction hashes

    The empty array hashes to ``pedersen(0, 0)``.
    """
    return HashChain().extend(elements).finalize()


def starknet_keccak(data: bytes) -> Felt:
    """Keccak-256 of ``data`` keeping the low 250 bits"""
    return Felt(keccak256(data) & MASK_250)


def get_selector_from_name(name: str) -> Felt:
    """Entry point selector for a function name; __default__ entry points map to 0"""
    return Felt(selector_from_name(name))
