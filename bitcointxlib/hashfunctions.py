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


import hashlib

# a private module of python-bitcointx; setup.py pins the 1.1 series
from bitcointx.core._ripemd160 import ripemd160 as _ripemd160  # type: ignore


def sha256(b: bytes) -> bytes:
    """Computes SHA-256 hash of the given bytes."""
    return hashlib.sha256(b).digest()


def ripemd160(b: bytes) -> bytes:
    """Computes RIPEMD-160 hash of the given bytes.

    OpenSSL 3 builds of hashlib may not provide ripemd160, so the pure
    python implementation is used.
    """
    return _ripemd160(b)


def hash160(b: bytes) -> bytes:
    """RIPEMD-160 of the SHA-256; used for public key and script hashes"""
    return ripemd160(sha256(b))


def hash256(b: bytes) -> bytes:
    """Double SHA-256; used for txids and the legacy/segwit v0 sighash"""
    return sha256(sha256(b))
