#!/usr/bin/env python3
"""
Field Element Module - Integers modulo the STARK prime
=====================================================

Every hash, address, amount and signature component handled by this
package is a field element: an unsigned integer below FIELD_PRIME.

Felt is an ``int`` subclass, so it can be passed directly to the hash
libraries and compared with plain integers. Arithmetic operators reduce
modulo the prime; equality is plain integer equality, so ``Felt(5) == 5``
regardless of how either value was written.
"""

import re
from typing import Iterable, List, Tuple, Union

from .config import FIELD_PRIME, MAX_SHORT_STRING_LENGTH
from .exceptions import FeltRangeError, InvalidFeltError, ShortStringError

_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")
_DEC_RE = re.compile(r"^[0-9]+$")

FeltLike = Union[int, str]


class Felt(int):
    """
    Field Element - Value type for the STARK field

    Construction checks ``0 <= value < FIELD_PRIME``; use the ``from_*``
    constructors to parse external representations.
    """

    def __new__(cls, value: int = 0):
        value = int(value)
        if not 0 <= value < FIELD_PRIME:
            raise FeltRangeError(f"value {value:#x} is not a field element")
        return super().__new__(cls, value)

    @classmethod
    def from_hex(cls, value: str) -> "Felt":
        """Parse a ``0x``-prefixed hex string"""
        if not isinstance(value, str) or not _HEX_RE.match(value):
            raise InvalidFeltError(f"invalid hex field element: {value!r}")
        return cls(int(value, 16))

    @classmethod
    def from_dec_str(cls, value: str) -> "Felt":
        if not isinstance(value, str) or not _DEC_RE.match(value):
            raise InvalidFeltError(f"invalid decimal field element: {value!r}")
        return cls(int(value, 10))

    @classmethod
    def from_bytes_be(cls, data: bytes) -> "Felt":
        """Interpret up to 32 big-endian bytes; the value must be below the prime"""
        if len(data) > 32:
            raise InvalidFeltError(f"expected at most 32 bytes, got {len(data)}")
        return cls(int.from_bytes(data, "big"))

    @classmethod
    def from_bytes_be_slice(cls, data: bytes) -> "Felt":
        """Interpret big-endian bytes of any length, reducing modulo the prime"""
        return cls(int.from_bytes(data, "big") % FIELD_PRIME)

    @classmethod
    def from_short_string(cls, text: str) -> "Felt":
        """
        Encode a Cairo short string

        The ASCII bytes of ``text`` are read as one big-endian integer, so
        "invoke" becomes 0x696e766f6b65. At most 31 characters fit.
        """
        if not isinstance(text, str):
            raise ShortStringError("short string must be a str")
        if len(text) > MAX_SHORT_STRING_LENGTH:
            raise ShortStringError(
                f"short string exceeds maximum length of {MAX_SHORT_STRING_LENGTH} characters"
            )
        try:
            data = text.encode("ascii")
        except UnicodeEncodeError:
            raise ShortStringError("Cairo string can only contain ASCII characters") from None
        return cls(int.from_bytes(data, "big"))

    @classmethod
    def parse(cls, value: FeltLike) -> "Felt":
        """
        Parse a JSON-RPC value into a field element

        Accepts ints, ``0x`` hex strings and decimal strings. Anything else
        raises InvalidFeltError.
        """
        if isinstance(value, Felt):
            return value
        if isinstance(value, bool):
            raise InvalidFeltError(f"invalid field element: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            if value[:2] in ("0x", "0X"):
                return cls.from_hex(value)
            return cls.from_dec_str(value)
        raise InvalidFeltError(f"invalid field element: {value!r}")

    def to_bytes_be(self) -> bytes:
        return int(self).to_bytes(32, "big")

    def to_hex(self) -> str:
        return hex(int(self))

    def to_fixed_hex(self) -> str:
        """64-digit zero-padded hex, as printed by most Starknet tooling"""
        return f"0x{int(self):064x}"

    def to_short_string(self) -> str:
        data = int(self).to_bytes((int(self).bit_length() + 7) // 8, "big")
        try:
            return data.decode("ascii")
        except UnicodeDecodeError:
            raise ShortStringError(f"{self.to_hex()} is not an ASCII short string") from None

    def inverse(self) -> "Felt":
        if int(self) == 0:
            raise ZeroDivisionError("zero has no inverse in the field")
        return Felt(pow(int(self), -1, FIELD_PRIME))

    def __add__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(self) + int(other)) % FIELD_PRIME)

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(self) - int(other)) % FIELD_PRIME)

    def __rsub__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(other) - int(self)) % FIELD_PRIME)

    def __mul__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(self) * int(other)) % FIELD_PRIME)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self * Felt(int(other) % FIELD_PRIME).inverse()

    def __neg__(self):
        return Felt((-int(self)) % FIELD_PRIME)

    def __repr__(self) -> str:
        return f"Felt({self.to_hex()})"

    def __str__(self) -> str:
        return self.to_hex()


Felt.ZERO = Felt(0)
Felt.ONE = Felt(1)
Felt.TWO = Felt(2)
Felt.THREE = Felt(3)


def parse_felt_list(values: Iterable[FeltLike]) -> Tuple[Felt, ...]:
    """Parse a JSON array of field elements"""
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise InvalidFeltError(f"expected a list of field elements, got {values!r}")
    return tuple(Felt.parse(value) for value in values)


def felts_to_hex(values: Iterable[int]) -> List[str]:
    return [hex(int(value)) for value in values]
