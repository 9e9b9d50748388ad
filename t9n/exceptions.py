#!/usr/bin/env python3
"""
Exception Module - Custom validation exceptions
===============================================

This module defines all custom exceptions raised while parsing, hashing,
signing and verifying Starknet transactions. Every failure is reported to
the immediate caller as one of these types; a signature that simply does
not verify is NOT an exception (``verify`` returns ``False``).

Exception hierarchy:
- T9nError: Base exception for all validation operations
  - TransactionParseError: The input cannot be turned into a transaction
    - MissingFieldError, TransactionFormatError, TransactionFileError
    - UnsupportedTypeOrVersionError, SignatureShapeError
    - ResourceNameError, IntegerParseError
    - InvalidFeltError (FeltRangeError), ShortStringError
  - CryptoRangeError: A value is outside the field or curve range
    - InvalidMessageHashError (MessageHashOutOfRangeError)
    - InvalidRError, InvalidSError, InvalidVError
    - InvalidPublicKeyError, InvalidPrivateKeyError
  - SigningError: No signature could be produced
    - InvalidKError
  - HashChainFinalizedError: A finalized hash chain was reused
"""


class T9nError(Exception):
    """
    Base exception for transaction validation

    Parent class for every error raised by this package. Catch this to
    handle any failure of the validation pipeline in one place.
    """
    pass


class TransactionParseError(T9nError):
    """
    Raised when the input cannot be turned into a typed transaction

    These are always recoverable by fixing the input and are never
    retried automatically.
    """
    pass


class MissingFieldError(TransactionParseError):
    """
    Raised when a required JSON field is absent

    Example:
    - An INVOKE v1 record without ``nonce``
    - A record without the ``type`` discriminator
    """

    def __init__(self, field_name: str):
        super().__init__(f"missing field `{field_name}`")
        self.field_name = field_name


class TransactionFormatError(TransactionParseError):
    """
    Raised when a field is present but has the wrong shape

    Example:
    - ``version`` is a number instead of a hex string
    - ``calldata`` is not a list
    - The transaction file does not contain valid JSON
    """
    pass


class TransactionFileError(TransactionParseError):
    """Raised when the transaction file cannot be read"""
    pass


class UnsupportedTypeOrVersionError(TransactionParseError):
    """
    Raised when no transaction shape matches the (type, version) pair

    Example:
    - ``{"type": "INVOKE", "version": "0x9"}``
    - ``{"type": "L1_HANDLER", "version": "0x0"}``
    """

    def __init__(self, txn_type, version):
        super().__init__(f"unsupported transaction type or version: {txn_type} {version}")
        self.txn_type = txn_type
        self.version = version


class SignatureShapeError(TransactionParseError):
    """Raised when a signature does not have exactly two components (r, s)"""
    pass


class ResourceNameError(TransactionParseError):
    """Raised when a resource kind does not serialize to a short ASCII name"""

    def __init__(self, message: str = "Resource name is not a string"):
        super().__init__(message)


class IntegerParseError(TransactionParseError):
    """
    Raised when a hex integer field does not parse

    Example:
    - ``max_amount`` is ``"0xZZ"``
    - ``max_amount`` does not fit in 64 bits
    """
    pass


class InvalidFeltError(TransactionParseError):
    """Raised when a value is not a well-formed field element"""
    pass


class FeltRangeError(InvalidFeltError):
    """Raised when a value is negative or not below the field prime"""
    pass


class ShortStringError(TransactionParseError):
    """Raised when text cannot be encoded as a Cairo short string"""
    pass


class CryptoRangeError(T9nError):
    """
    Raised when a cryptographic input is out of range

    Distinct from a signature that does not verify: these errors mean the
    input is malformed, not that the signer was wrong.
    """
    pass


class InvalidMessageHashError(CryptoRangeError):
    """The message hash is not in the valid range [0, 2^251)."""

    def __init__(self, message: str = "The message hash is not in the valid range [0, 2^251)."):
        super().__init__(message)


# Signing reports the same condition under its own name
MessageHashOutOfRangeError = InvalidMessageHashError


class InvalidRError(CryptoRangeError):
    """The 'r' value is not in the valid range or not an x coordinate on the curve."""

    def __init__(self, message: str = "The 'r' value is not in the valid range [0, 2^251)."):
        super().__init__(message)


class InvalidSError(CryptoRangeError):
    """The 's' value is not in the valid range."""

    def __init__(self, message: str = "The 's' value is not in the valid range [0, 2^251)."):
        super().__init__(message)


class InvalidVError(CryptoRangeError):
    """The 'v' recovery hint is neither 0 nor 1."""

    def __init__(self, message: str = "The 'v' value is neither '0' nor '1'."):
        super().__init__(message)


class InvalidPublicKeyError(CryptoRangeError):
    """The public key is not a valid point on the STARK curve."""

    def __init__(self, message: str = "The public key is not a valid point on the STARK curve."):
        super().__init__(message)


class InvalidPrivateKeyError(CryptoRangeError):
    """The private key is not in the range [1, EC_ORDER)."""
    pass


class SigningError(T9nError):
    """Raised when no valid signature could be produced"""
    pass


class InvalidKError(SigningError):
    """
    Raised when a nonce ``k`` cannot be used for signing

    Happens with negligible probability; ``sign`` catches it and retries
    with the next seed.
    """
    pass


class HashChainFinalizedError(T9nError):
    """Raised when a HashChain is updated or finalized after finalize()"""
    pass
