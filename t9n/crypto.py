#!/usr/bin/env python3
"""
Cryptographic Module - ECDSA over the STARK curve
=================================================

This module provides the signature engine used to authorize transactions:
- get_public_key: Derive the public key (x coordinate) of a private key
- sign / sign_with_k: Produce (r, s, v) signatures over a message hash
- verify: Check a signature against a public key
- recover: Derive the signer's public key from a signature

Curve:
    y^2 = x^3 + ALPHA * x + BETA  over FIELD_PRIME, order EC_ORDER

Key cryptographic concepts:
- A public key is only the x coordinate of ``private_key * G``. Either y
  may belong to it, so verification accepts ``w * (z*G + r*Q)`` and
  ``w * (z*G - r*Q)``.
- Message hashes and signature components live below 2^251 so that they
  fit in a single field element.
- Nonces are deterministic (RFC 6979 with HMAC-SHA256); an optional seed is
  fed in as extra entropy when a nonce turns out to be unusable.

Error model:
- Malformed inputs raise a CryptoRangeError subclass
- A well-formed signature that does not match returns False from verify
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from ecdsa import numbertheory, rfc6979
from ecdsa.ellipticcurve import INFINITY, CurveFp, PointJacobi

from .config import (
    ALPHA,
    BETA,
    EC_ORDER,
    ELEMENT_UPPER_BOUND,
    FIELD_PRIME,
    GENERATOR_X,
    GENERATOR_Y,
    MAX_SIGN_ATTEMPTS,
)
from .exceptions import (
    InvalidKError,
    InvalidMessageHashError,
    InvalidPrivateKeyError,
    InvalidPublicKeyError,
    InvalidRError,
    InvalidSError,
    InvalidVError,
    MessageHashOutOfRangeError,
    SigningError,
)
from .felt import Felt

logger = logging.getLogger(__name__)

CURVE = CurveFp(FIELD_PRIME, ALPHA, BETA)
GENERATOR = PointJacobi(CURVE, GENERATOR_X, GENERATOR_Y, 1, EC_ORDER, generator=True)


@dataclass(frozen=True)
class Signature:
    """ECDSA signature (r, s)"""
    r: Felt
    s: Felt

    def to_list(self):
        return [self.r.to_hex(), self.s.to_hex()]


@dataclass(frozen=True)
class ExtendedSignature(Signature):
    """
    Signature with recovery hint

    ``v`` is the parity of the y coordinate of the nonce point R; it picks
    which of the two curve points with x == r was used.
    """
    v: int

    def to_signature(self) -> Signature:
        return Signature(self.r, self.s)


def _y_squared(x: int) -> int:
    return (pow(x, 3, FIELD_PRIME) + ALPHA * x + BETA) % FIELD_PRIME


def _lift_x(x: int) -> Optional[int]:
    """
    Return a y with (x, y) on the curve, or None if there is none

    The returned root is either of the two; callers pick parity.
    """
    if not 0 <= x < FIELD_PRIME:
        return None
    rhs = _y_squared(x)
    if rhs == 0:
        return 0
    if numbertheory.jacobi(rhs, FIELD_PRIME) != 1:
        return None
    return numbertheory.square_root_mod_prime(rhs, FIELD_PRIME)


def _point(x: int, y: int) -> PointJacobi:
    return PointJacobi(CURVE, x, y, 1, EC_ORDER)


def _add(first, second):
    if first == INFINITY:
        return second
    if second == INFINITY:
        return first
    return first + second


def _x_of(point) -> Optional[int]:
    if point == INFINITY:
        return None
    return point.to_affine().x()


def get_public_key(private_key: int) -> Felt:
    """
    Derive the public key of a private key

    Args:
    - private_key: Scalar in [1, EC_ORDER)

    Returns:
    - x coordinate of private_key * G

    Raises:
    - InvalidPrivateKeyError: If the key is out of range
    """
    private_key = int(private_key)
    if not 0 < private_key < EC_ORDER:
        raise InvalidPrivateKeyError(f"private key must be in [1, EC_ORDER), got {private_key:#x}")
    return Felt(_x_of(GENERATOR * private_key))


def generate_k(message_hash: int, private_key: int, seed: Optional[int] = None) -> int:
    """
    Deterministic nonce for a (message hash, private key) pair

    RFC 6979 with HMAC-SHA256. Hashes that are one nibble short of 63 hex
    digits are shifted left by 4 bits first, so the nonces agree with the
    common JavaScript and Rust signers.
    """
    message_hash, private_key = int(message_hash), int(private_key)
    if 1 <= message_hash.bit_length() % 8 <= 4 and message_hash.bit_length() >= 248:
        message_hash *= 16

    data = message_hash.to_bytes(max(1, (message_hash.bit_length() + 7) // 8), "big")
    if seed is None:
        extra_entropy = b""
    else:
        extra_entropy = seed.to_bytes((seed.bit_length() + 7) // 8, "big")

    return rfc6979.generate_k(EC_ORDER, private_key, hashlib.sha256, data, extra_entropy=extra_entropy)


def sign_with_k(private_key: int, message_hash: int, k: int) -> ExtendedSignature:
    """
    Sign a message hash with an explicit nonce

    Args:
    - private_key: Signer's private key
    - message_hash: Hash to sign, below 2^251
    - k: Nonce

    Returns:
    - ExtendedSignature (r, s, v)

    Raises:
    - MessageHashOutOfRangeError: If message_hash >= 2^251
    - InvalidKError: If k yields an r or s outside [1, 2^251)
    """
    private_key, message_hash, k = int(private_key), int(message_hash), int(k)
    if not 0 <= message_hash < ELEMENT_UPPER_BOUND:
        raise MessageHashOutOfRangeError()
    if k % EC_ORDER == 0:
        raise InvalidKError("k is zero modulo the curve order")

    nonce_point = (GENERATOR * (k % EC_ORDER)).to_affine()
    r = nonce_point.x()
    if not 0 < r < ELEMENT_UPPER_BOUND:
        raise InvalidKError("r is out of range for this k")

    s = (r * private_key + message_hash) * numbertheory.inverse_mod(k, EC_ORDER) % EC_ORDER
    if not 0 < s < ELEMENT_UPPER_BOUND:
        raise InvalidKError("s is out of range for this k")
    w = numbertheory.inverse_mod(s, EC_ORDER)
    if not 0 < w < ELEMENT_UPPER_BOUND:
        raise InvalidKError("inverse of s is out of range for this k")

    return ExtendedSignature(Felt(r), Felt(s), nonce_point.y() & 1)


def sign(private_key: int, message_hash: int) -> ExtendedSignature:
    """
    Sign a message hash with a deterministic nonce

    The first attempt uses no seed; each unusable nonce bumps the seed
    (1, 2, 3, ...) until a signature is produced or MAX_SIGN_ATTEMPTS is hit.

    Raises:
    - MessageHashOutOfRangeError: If message_hash >= 2^251
    - InvalidPrivateKeyError: If the key is out of range
    - SigningError: If no usable nonce was found
    """
    private_key, message_hash = int(private_key), int(message_hash)
    if not 0 <= message_hash < ELEMENT_UPPER_BOUND:
        raise MessageHashOutOfRangeError()
    if not 0 < private_key < EC_ORDER:
        raise InvalidPrivateKeyError(f"private key must be in [1, EC_ORDER), got {private_key:#x}")

    seed = None
    for attempt in range(MAX_SIGN_ATTEMPTS):
        k = generate_k(message_hash, private_key, seed)
        try:
            return sign_with_k(private_key, message_hash, k)
        except InvalidKError:
            logger.debug(f"Nonce attempt {attempt} rejected, retrying with seed {attempt + 1}")
            seed = attempt + 1

    raise SigningError(f"no usable nonce after {MAX_SIGN_ATTEMPTS} attempts")


def _check_signature_ranges(message_hash: int, r: int, s: int):
    if not 0 <= message_hash < ELEMENT_UPPER_BOUND:
        raise InvalidMessageHashError()
    if not 0 < r < ELEMENT_UPPER_BOUND:
        raise InvalidRError()
    if not 0 < s < ELEMENT_UPPER_BOUND:
        raise InvalidSError()


def verify(public_key: int, message_hash: int, r: int, s: int) -> bool:
    """
    Verify a signature against a public key

    Args:
    - public_key: x coordinate of the signer's public point
    - message_hash: Signed hash
    - r, s: Signature components

    Returns:
    - True if the signature matches, False otherwise

    Raises:
    - InvalidMessageHashError, InvalidRError, InvalidSError: Range violations
    - InvalidPublicKeyError: If public_key is not the x of a curve point
    """
    public_key, message_hash, r, s = int(public_key), int(message_hash), int(r), int(s)
    _check_signature_ranges(message_hash, r, s)

    y = _lift_x(public_key)
    if y is None:
        raise InvalidPublicKeyError()

    w = numbertheory.inverse_mod(s, EC_ORDER)
    if not 0 < w < ELEMENT_UPPER_BOUND:
        raise InvalidSError("The inverse of 's' is not in the valid range [1, 2^251).")

    zw_g = GENERATOR * (message_hash * w % EC_ORDER)
    rw = r * w % EC_ORDER
    candidates = [_point(public_key, y)]
    if y != 0:
        candidates.append(_point(public_key, FIELD_PRIME - y))

    for public_point in candidates:
        if _x_of(_add(zw_g, public_point * rw)) == r:
            return True
    return False


def recover(message_hash: int, r: int, s: int, v: int) -> Felt:
    """
    Recover the public key that produced a signature

    Args:
    - message_hash: Signed hash
    - r, s: Signature components
    - v: Parity of the nonce point's y coordinate (0 or 1)

    Returns:
    - x coordinate of r^-1 * (s*R - z*G)

    Raises:
    - InvalidMessageHashError, InvalidSError, InvalidVError: Range violations
    - InvalidRError: If r is out of range or not the x of a curve point
    """
    message_hash, r, s = int(message_hash), int(r), int(s)
    if not 0 <= message_hash < ELEMENT_UPPER_BOUND:
        raise InvalidMessageHashError()
    if not 0 < r < ELEMENT_UPPER_BOUND:
        raise InvalidRError()
    if not 0 < s < EC_ORDER:
        raise InvalidSError("The 's' value is not in the valid range [1, EC_ORDER).")
    if v not in (0, 1):
        raise InvalidVError()

    y = _lift_x(r)
    if y is None:
        raise InvalidRError("The 'r' value is not the x coordinate of a point on the STARK curve.")
    if y & 1 != v:
        y = (FIELD_PRIME - y) % FIELD_PRIME

    combined = _add(_point(r, y) * s, GENERATOR * ((EC_ORDER - message_hash) % EC_ORDER))
    if combined == INFINITY:
        raise InvalidRError("The signature does not determine a public key.")
    public_point = combined * numbertheory.inverse_mod(r, EC_ORDER)
    return Felt(_x_of(public_point))

