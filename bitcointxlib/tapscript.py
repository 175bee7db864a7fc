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


"""Taproot hashing and key tweaking (BIP340/BIP341/BIP342)."""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any, Tuple, Union

from ecdsa import ellipticcurve  # type: ignore

from bitcointxlib.constants import LEAF_VERSION_TAPSCRIPT
from bitcointxlib.errors import PreconditionViolation
from bitcointxlib.hashfunctions import sha256
from bitcointxlib.utils import (
    Secp256k1Params,
    b_to_h,
    b_to_i,
    h_to_b,
    i_to_b32,
    lift_x,
    prepend_compact_size,
)


def _as_bytes(value: Union[str, bytes], what: str, length: int | None = None) -> bytes:
    if isinstance(value, str):
        try:
            value = h_to_b(value)
        except ValueError:
            raise PreconditionViolation("{} must be hex or bytes".format(what))
    if length is not None and len(value) != length:
        raise PreconditionViolation(
            "{} must be {} bytes, got {}".format(what, length, len(value))
        )
    return value


def _script_bytes(script: Any) -> bytes:
    # accepts Script objects as well as raw bytes/hex
    if hasattr(script, "to_bytes"):
        return script.to_bytes()
    return _as_bytes(script, "script")


def tap_tag(tag: Union[str, bytes]) -> bytes:
    """SHA256(tag) || SHA256(tag); the 64-byte prefix of a tagged hash"""
    if isinstance(tag, str):
        tag = tag.encode()
    tag_digest = sha256(tag)
    return tag_digest + tag_digest


def tagged_hash(data: bytes, tag: Union[str, bytes]) -> bytes:
    """
    Tagged hashes ensure that hashes used in one context can not be used in another.
    It is used extensively in Taproot

    A tagged hash is: SHA256( SHA256("TapTweak") ||
                              SHA256("TapTweak") ||
                              data
                            )
    """
    return sha256(tap_tag(tag) + data)


def tap_leaf_hash(script: Any, leaf_version: int = LEAF_VERSION_TAPSCRIPT) -> bytes:
    """Calculates the tagged hash for a tapleaf"""
    script_part = bytes([leaf_version & 0xFE]) + prepend_compact_size(
        _script_bytes(script)
    )
    return tagged_hash(script_part, "TapLeaf")


def tap_branch_hash(left: Union[str, bytes], right: Union[str, bytes]) -> bytes:
    """Calculates the tagged hash for a tapbranch

    The two children are hashed in ascending byte order, so the result does not
    depend on the order they are given in.
    """
    left = _as_bytes(left, "tap branch child", 32)
    right = _as_bytes(right, "tap branch child", 32)
    # order - smaller left side
    if right < left:
        left, right = right, left
    return tagged_hash(left + right, "TapBranch")


def tap_tweak(
    xonly_pubkey: Union[str, bytes], merkle_root: Union[str, bytes, None] = None
) -> bytes:
    """Calculates the TapTweak of an internal key.

    Without a merkle root (key-path only outputs) nothing is appended to the
    key; an empty root is treated the same way.
    """
    key = _as_bytes(xonly_pubkey, "x-only public key", 32)
    if not merkle_root:
        return tagged_hash(key, "TapTweak")
    root = _as_bytes(merkle_root, "merkle root", 32)
    return tagged_hash(key + root, "TapTweak")


def _tweak_int(tweak: Union[str, bytes, int]) -> int:
    if isinstance(tweak, int):
        tweak_int = tweak
    else:
        tweak_int = b_to_i(_as_bytes(tweak, "tweak", 32))
    if not 0 <= tweak_int < Secp256k1Params._order:
        raise PreconditionViolation("tweak must be smaller than the curve order")
    return tweak_int


def tweaked_pubkey(
    xonly_pubkey: Union[str, bytes], tweak: Union[str, bytes, int]
) -> Tuple[bytes, int]:
    """
    Tweaks the internal x-only public key: Q = P + tweak*G, where P is the
    point with even y for the given x.

    Returns Q's x coordinate (32 bytes) and the parity of Q's y: 0 when even
    (02 prefix), 1 when odd (03 prefix). The parity is needed for the control
    block of script path spends.
    """
    key = _as_bytes(xonly_pubkey, "x-only public key", 32)
    x = b_to_i(key)
    try:
        y = lift_x(x)
    except ValueError as e:
        raise PreconditionViolation(str(e))
    P = ellipticcurve.Point(Secp256k1Params._curve, x, y, Secp256k1Params._order)

    Q = P + Secp256k1Params._G * _tweak_int(tweak)
    if Q == ellipticcurve.INFINITY:
        raise PreconditionViolation("tweak results in the point at infinity")

    return i_to_b32(Q.x()), Q.y() % 2


def tweaked_privkey(privkey: Union[str, bytes], tweak: Union[str, bytes, int]) -> bytes:
    """
    Tweaks the private key before signing with it. If the public key's y is
    odd the private key is negated first, since the x-only internal key
    always stands for the even-y point.
    """
    d = b_to_i(_as_bytes(privkey, "private key", 32))
    if not 0 < d < Secp256k1Params._order:
        raise PreconditionViolation("private key out of range")

    P = Secp256k1Params._G * d
    if P.y() % 2 != 0:
        d = Secp256k1Params._order - d

    tweaked = (d + _tweak_int(tweak)) % Secp256k1Params._order
    if tweaked == 0:
        raise PreconditionViolation("tweak results in an invalid private key")
    return i_to_b32(tweaked)


def tap_sighash(preimage: bytes) -> bytes:
    """Tagged hash of a BIP341 signature message"""
    return tagged_hash(preimage, "TapSighash")


def control_block(
    xonly_internal_pubkey: Union[str, bytes],
    parity: int,
    merkle_path: Union[str, bytes] = b"",
    leaf_version: int = LEAF_VERSION_TAPSCRIPT,
) -> bytes:
    """(leaf version | parity) || internal key || merkle path"""
    key = _as_bytes(xonly_internal_pubkey, "x-only public key", 32)
    path = _as_bytes(merkle_path, "merkle path")
    if parity not in (0, 1):
        raise PreconditionViolation("parity must be 0 or 1")
    if len(path) % 32 != 0 or len(path) > 32 * 128:
        raise PreconditionViolation(
            "merkle path must be at most 128 nodes of 32 bytes"
        )
    return bytes([(leaf_version & 0xFE) | parity]) + key + path


#
# Script trees. A tree is a Script (a leaf) or a list of one or two subtrees,
# e.g. [[A, B], C].
#
def get_tag_hashed_merkle_root(scripts: Any) -> bytes:
    """Tag hashed merkle root of all scripts - tag hashes tapleafs and branches
    as needed. Returns empty bytes for an empty tree.
    """
    if scripts is None:
        return b""
    if not isinstance(scripts, list):
        return tap_leaf_hash(scripts)
    if len(scripts) == 0:
        return b""
    if len(scripts) == 1:
        return get_tag_hashed_merkle_root(scripts[0])
    if len(scripts) == 2:
        left = get_tag_hashed_merkle_root(scripts[0])
        right = get_tag_hashed_merkle_root(scripts[1])
        return tap_branch_hash(left, right)
    raise PreconditionViolation(
        "Invalid Merkle branch: List cannot have more than 2 branches."
    )


def generate_merkle_path(scripts: Any, leaf_index: int) -> bytes:
    """Returns the hashes needed to prove the leaf_index-th leaf (leaves
    counted depth first, left to right) against the tree's merkle root.
    """
    traversed = 0

    def traverse(level: Any) -> Tuple[bytes, bool]:
        # returns (hash or path, whether the target leaf is below)
        nonlocal traversed
        if isinstance(level, list):
            if len(level) == 1:
                return traverse(level[0])
            if len(level) != 2:
                raise PreconditionViolation(
                    "Invalid Merkle branch: List cannot have more than 2 branches."
                )
            a, a_has_leaf = traverse(level[0])
            b, b_has_leaf = traverse(level[1])
            if a_has_leaf:
                return a + b, True
            if b_has_leaf:
                return b + a, True
            return tap_branch_hash(a, b), False

        found = traversed == leaf_index
        traversed += 1
        if found:
            return b"", True
        return tap_leaf_hash(level), False

    path, found = traverse(scripts)
    if not found:
        raise PreconditionViolation("leaf index {} not in script tree".format(leaf_index))
    return path


class ControlBlock:
    """Represents a control block for spending a taproot script path

    Attributes
    ----------
    pubkey : str
        the internal x-only public key (hex)
    scripts : list
        the script tree committed to in the output
    index : int
        the leaf being spent
    is_odd : bool
        parity of the tweaked output key

    Methods
    -------
    to_bytes()
        returns the control block as bytes
    to_hex()
        returns the control block as a hexadecimal string
    """

    def __init__(
        self,
        pubkey: Union[str, bytes],
        scripts: Any,
        index: int,
        is_odd: bool = False,
        leaf_version: int = LEAF_VERSION_TAPSCRIPT,
    ) -> None:
        self.pubkey = _as_bytes(pubkey, "x-only public key", 32)
        self.scripts = scripts
        self.index = index
        self.is_odd = is_odd
        self.leaf_version = leaf_version
        self.merkle_path = generate_merkle_path(scripts, index)

    def to_bytes(self) -> bytes:
        return control_block(
            self.pubkey, 1 if self.is_odd else 0, self.merkle_path, self.leaf_version
        )

    def to_hex(self) -> str:
        """Converts object to hexadecimal string"""
        return b_to_h(self.to_bytes())
