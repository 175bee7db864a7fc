# Copyright (C) 2024-2025 The bitcoin-txlib developers
#
# This file is part of bitcoin-txlib
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of bitcoin-txlib, including this file, may be copied, modified,
# propagated, or distributed except according to the terms contained in the
# LICENSE file.


from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decimal import Decimal
    from typing import Tuple

import struct
from ecdsa import ellipticcurve  # type: ignore
from sympy.ntheory import sqrt_mod  # type: ignore

from bitcointxlib.constants import SATOSHIS_PER_BITCOIN


class Secp256k1Params:
    # ECDSA curve using secp256k1 is defined by: y**2 = x**3 + 7
    # This is done modulo p which (secp256k1) is:
    # p is the finite field prime number and is equal to:
    # 2^256 - 2^32 - 2^9 - 2^8 - 2^7 - 2^6 - 2^4 - 1
    _p = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
    # Curve's a and b are (y**2 = x**3 + a*x + b)
    _a = 0x0000000000000000000000000000000000000000000000000000000000000000
    _b = 0x0000000000000000000000000000000000000000000000000000000000000007
    # Curve's generator point is:
    _Gx = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
    _Gy = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
    # prime number of points in the group (the order)
    _order = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

    _curve = ellipticcurve.CurveFp(_p, _a, _b)
    _G = ellipticcurve.Point(_curve, _Gx, _Gy, _order)


def lift_x(x: int, odd: bool = False) -> int:
    """Returns the y coordinate of the curve point with x coordinate x.

    There are two candidates (y and p - y); the even one is returned unless
    odd is set. Raises ValueError if x is not on the curve.
    """
    p = Secp256k1Params._p
    if not 0 <= x < p:
        raise ValueError("x coordinate out of field range")
    # y = modulo_square_root( (x**3 + 7) mod p ) -- there will be 2 y values
    y_values = sqrt_mod((pow(x, 3, p) + 7) % p, p, True)
    if not y_values:
        raise ValueError("x coordinate is not on the secp256k1 curve")
    y = int(y_values[0])
    if (y % 2 == 1) != odd:
        y = p - y
    return y


def to_satoshis(num: int | float | Decimal) -> int:
    """
    Converts from any number type (int/float/Decimal) to satoshis (int)
    """
    # we need to round because of how floats are stored internally:
    # e.g. 0.29 * 100000000 = 28999999.999999996
    return int(round(num * SATOSHIS_PER_BITCOIN))


def encode_varint(i: int) -> bytes:
    """
    Encodes an integer as a Bitcoin CompactSize (varint). Multi-byte values
    are little-endian.

    https://bitcoin.org/en/developer-reference#compactsize-unsigned-integers
    """
    if i < 0:
        raise ValueError("CompactSize cannot encode negative value: %d" % i)
    if i < 253:
        return bytes([i])
    elif i < 0x10000:
        return b"\xfd" + i.to_bytes(2, "little")
    elif i < 0x100000000:
        return b"\xfe" + i.to_bytes(4, "little")
    elif i < 0x10000000000000000:
        return b"\xff" + i.to_bytes(8, "little")
    else:
        raise ValueError("Integer is too large: %d" % i)


def prepend_compact_size(data: bytes) -> bytes:
    """
    Returns data with its length prepended as CompactSize.
    """
    return encode_varint(len(data)) + data


def parse_compact_size(data: bytes) -> Tuple[int, int]:
    """
    Parses a CompactSize from the start of data. Returns (value, size) where
    size is the number of bytes the CompactSize occupied.
    """
    if not data:
        raise ValueError("Cannot parse CompactSize from empty data")
    first_byte = data[0]
    if first_byte < 0xFD:
        return first_byte, 1
    width = {0xFD: 2, 0xFE: 4, 0xFF: 8}[first_byte]
    if len(data) < 1 + width:
        raise ValueError("Truncated CompactSize")
    return int.from_bytes(data[1 : 1 + width], "little"), 1 + width


def push_data(data: bytes) -> bytes:
    """Returns the script opcodes that push data onto the stack.

    Direct pushes are used up to 75 bytes, then OP_PUSHDATA1/2/4. Empty data
    is pushed with OP_0.
    """
    length = len(data)
    if length == 0:
        return b"\x00"
    elif length < 0x4C:
        return bytes([length]) + data
    elif length <= 0xFF:
        return b"\x4c" + bytes([length]) + data
    elif length <= 0xFFFF:
        return b"\x4d" + struct.pack("<H", length) + data
    elif length <= 0xFFFFFFFF:
        return b"\x4e" + struct.pack("<I", length) + data
    else:
        raise ValueError("Data too large. Cannot push into script")


def encode_script_num(num: int) -> bytes:
    """Encodes an integer as a script number: little-endian magnitude with
    the sign in the most significant bit, no superfluous bytes (BIP62)."""
    if num == 0:
        return b""
    negative = num < 0
    magnitude = abs(num)
    result = bytearray()
    while magnitude:
        result.append(magnitude & 0xFF)
        magnitude >>= 8
    # an extra byte is needed if the top bit is already used by the magnitude
    if result[-1] & 0x80:
        result.append(0x80 if negative else 0x00)
    elif negative:
        result[-1] |= 0x80
    return bytes(result)


def script_num(num: int) -> bytes:
    """Returns the minimal script opcodes that push num onto the stack.

    0 is OP_0, -1 is OP_1NEGATE and 1 to 16 are OP_1 to OP_16; everything
    else is pushed as a script number.
    """
    if num == 0:
        return b"\x00"
    if num == -1:
        return b"\x4f"
    if 1 <= num <= 16:
        return bytes([0x50 + num])
    return push_data(encode_script_num(num))


#
# Hex string helpers
#
def pad_zero_hex(hex_str: str, n: int) -> str:
    """Left-pads a hex string with zeros up to n hex characters"""
    if len(hex_str) > n:
        raise ValueError(
            "Hex string '{}' longer than {} characters".format(hex_str, n)
        )
    return hex_str.rjust(n, "0")


def reverse_hex(hex_str: str) -> str:
    """Reverses the byte order of a hex string (e.g. for txids)"""
    return h_to_b(hex_str)[::-1].hex()


def is_hex(hex_str: str) -> bool:
    """Returns true if hex_str is an even-length hexadecimal string"""
    if len(hex_str) % 2 != 0:
        return False
    try:
        bytes.fromhex(hex_str)
    except ValueError:
        return False
    return True


#
# Basic conversions between bytes (b), hexadecimal (h) and integer (i)
#
def b_to_h(b: bytes) -> str:
    """Converts bytes to hexadecimal string"""
    return b.hex()


def h_to_b(h: str) -> bytes:
    """Converts hexadecimal string to bytes"""
    return bytes.fromhex(h)


def h_to_i(hex_str: str) -> int:
    """Converts a string hexadecimal to a number"""
    return int(hex_str, base=16)


# to convert hashes to ints we need byteorder BIG...
def b_to_i(b: bytes) -> int:
    """Converts a bytes to a number"""
    return int.from_bytes(b, byteorder="big")


def i_to_b32(i: int) -> bytes:
    """Converts a integer to 32 big-endian bytes"""
    return i.to_bytes(32, byteorder="big")
