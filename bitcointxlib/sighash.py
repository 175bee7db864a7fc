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
    from typing import Any, Optional, Sequence

import logging
import struct
from enum import Enum

from bitcointxlib.constants import (
    CODESEPARATOR_NONE,
    EMPTY_TX_SEQUENCE,
    LEAF_VERSION_TAPSCRIPT,
    SIGHASH_ALL,
    SIGHASH_ANYONECANPAY,
    SIGHASH_NONE,
    SIGHASH_SINGLE,
    TAPROOT_KEY_VERSION,
    TAPROOT_SIGHASH_ALL,
)
from bitcointxlib.errors import PreconditionViolation, StateViolation
from bitcointxlib.hashfunctions import hash256, sha256
from bitcointxlib.tapscript import tap_leaf_hash, tap_sighash
from bitcointxlib.utils import encode_varint, prepend_compact_size

logger = logging.getLogger(__name__)

# legacy "outputs" before the signed one under SIGHASH_SINGLE: value -1 and
# an empty script
_NULL_OUTPUT = b"\xff" * 8 + b"\x00"


class SighashVariant(Enum):
    """The signature hashing rules an input is spent under"""

    LEGACY = "legacy"
    SEGWIT_V0 = "segwit"
    TAPROOT_KEY_PATH = "taproot"
    TAPROOT_SCRIPT_PATH = "tapscript"

    @classmethod
    def parse(cls, variant: SighashVariant | str) -> SighashVariant:
        """Accepts a member or its value, e.g. "segwit" """
        if isinstance(variant, cls):
            return variant
        try:
            return cls(variant)
        except ValueError:
            raise PreconditionViolation(
                "Unknown variant '{}'; expected one of: {}".format(
                    variant, ", ".join(v.value for v in cls)
                )
            )

    @property
    def is_taproot(self) -> bool:
        return self in (SighashVariant.TAPROOT_KEY_PATH, SighashVariant.TAPROOT_SCRIPT_PATH)

    @property
    def is_witness(self) -> bool:
        return self is not SighashVariant.LEGACY

    def default_sighash(self) -> int:
        return TAPROOT_SIGHASH_ALL if self.is_taproot else SIGHASH_ALL


def validate_sighash(sighash: int, variant: SighashVariant) -> None:
    """Checks sighash is ALL, NONE or SINGLE, optionally with ANYONECANPAY.

    The taproot default (0x00) is only valid for taproot.
    """
    if not isinstance(sighash, int) or not 0 <= sighash <= 0xFF:
        raise PreconditionViolation("sighash must be a single byte integer")
    if variant.is_taproot and sighash == TAPROOT_SIGHASH_ALL:
        return
    if sighash & ~SIGHASH_ANYONECANPAY not in (SIGHASH_ALL, SIGHASH_NONE, SIGHASH_SINGLE):
        raise PreconditionViolation(
            "Invalid sighash type 0x{:02x} for {}".format(sighash, variant.value)
        )


class Bip143Cache:
    """The transaction-wide hashes of the BIP143 signature message.

    msg_prefix (version || hashPrevouts || hashSequence) and msg_suffix
    (hashOutputs || locktime) are shared by every input signed with
    SIGHASH_ALL.
    """

    def __init__(
        self, version: bytes, locktime: bytes, inputs: Sequence[Any], outputs: Sequence[Any]
    ) -> None:
        self.version = version
        self.locktime = locktime
        self.hash_prevouts = hash256(b"".join(txin.outpoint() for txin in inputs))
        self.hash_sequence = hash256(b"".join(txin.sequence for txin in inputs))
        self.hash_outputs = hash256(b"".join(txout.to_bytes() for txout in outputs))

    @property
    def msg_prefix(self) -> bytes:
        return self.version + self.hash_prevouts + self.hash_sequence

    @property
    def msg_suffix(self) -> bytes:
        return self.hash_outputs + self.locktime


class Bip341Cache:
    """The transaction-wide single SHA256 hashes of the BIP341 signature
    message. Every input needs its spent scriptPubKey and amount.
    """

    def __init__(
        self, version: bytes, locktime: bytes, inputs: Sequence[Any], outputs: Sequence[Any]
    ) -> None:
        for index, txin in enumerate(inputs):
            if txin.script_pubkey is None:
                raise PreconditionViolation(
                    "Taproot signing requires the spent script of every input; "
                    "input {} has none".format(index)
                )
        self.version = version
        self.locktime = locktime
        self.sha_prevouts = sha256(b"".join(txin.outpoint() for txin in inputs))
        self.sha_amounts = sha256(
            b"".join(struct.pack("<Q", txin.amount) for txin in inputs)
        )
        self.sha_script_pubkeys = sha256(
            b"".join(prepend_compact_size(txin.script_pubkey) for txin in inputs)
        )
        self.sha_sequences = sha256(b"".join(txin.sequence for txin in inputs))
        self.sha_outputs = sha256(b"".join(txout.to_bytes() for txout in outputs))

    @property
    def msg_prefix(self) -> bytes:
        return (
            self.version
            + self.locktime
            + self.sha_prevouts
            + self.sha_amounts
            + self.sha_script_pubkeys
            + self.sha_sequences
            + self.sha_outputs
        )


class SighashEngine:
    """Computes the message hash an input's signature commits to.

    The engine works on the finalized input and output records of a
    transaction. It never reads scriptSigs or witnesses, so inputs can be
    signed in any order. The BIP143 and BIP341 caches are computed on first
    use by prepare().

    Attributes
    ----------
    version : bytes
        the 4-byte little-endian transaction version
    locktime : bytes
        the 4-byte little-endian locktime
    inputs : list (TxInput)
    outputs : list (TxOutput)

    Methods
    -------
    prepare(variant)
        computes the cache the variant needs, if not done yet
    digest(variant, txin_index, script_code, sighash, key_version)
        returns the 32-byte message hash
    """

    def __init__(
        self, version: bytes, locktime: bytes, inputs: Sequence[Any], outputs: Sequence[Any]
    ) -> None:
        self.version = version
        self.locktime = locktime
        self.inputs = inputs
        self.outputs = outputs
        self.bip143: Optional[Bip143Cache] = None
        self.bip341: Optional[Bip341Cache] = None

    def prepare(self, variant: SighashVariant) -> None:
        if variant is SighashVariant.SEGWIT_V0 and self.bip143 is None:
            self.bip143 = Bip143Cache(self.version, self.locktime, self.inputs, self.outputs)
            logger.debug("computed BIP143 prefix for %d inputs", len(self.inputs))
        elif variant.is_taproot and self.bip341 is None:
            self.bip341 = Bip341Cache(self.version, self.locktime, self.inputs, self.outputs)
            logger.debug("computed BIP341 prefix for %d inputs", len(self.inputs))

    def digest(
        self,
        variant: SighashVariant,
        txin_index: int,
        script_code: bytes = b"",
        sighash: Optional[int] = None,
        key_version: int = TAPROOT_KEY_VERSION,
    ) -> bytes:
        """Returns the message hash for input txin_index.

        script_code is the script substituted for the scriptSig (legacy), the
        BIP143 scriptCode (segwit) or the leaf script (tapscript); it is
        ignored for taproot key path spends.
        """
        if not 0 <= txin_index < len(self.inputs):
            raise StateViolation(
                "Out of range, tx contains only {} inputs".format(len(self.inputs))
            )
        if sighash is None:
            sighash = variant.default_sighash()
        validate_sighash(sighash, variant)
        self.prepare(variant)

        if variant is SighashVariant.LEGACY:
            return self._legacy_digest(txin_index, script_code, sighash)
        elif variant is SighashVariant.SEGWIT_V0:
            return self._segwit_digest(txin_index, script_code, sighash)
        elif variant is SighashVariant.TAPROOT_KEY_PATH:
            return self._taproot_digest(txin_index, sighash, None, key_version)
        elif variant is SighashVariant.TAPROOT_SCRIPT_PATH:
            return self._taproot_digest(txin_index, sighash, script_code, key_version)
        raise PreconditionViolation("Unhandled variant {}".format(variant))

    def _legacy_digest(self, txin_index: int, script_code: bytes, sighash: int) -> bytes:
        """Returns the transaction's digest for signing.
        https://en.bitcoin.it/wiki/OP_CHECKSIG

        |  SIGHASH types (see constants.py):
        |      SIGHASH_ALL - signs all inputs and outputs (default)
        |      SIGHASH_NONE - signs all of the inputs
        |      SIGHASH_SINGLE - signs all inputs but only txin_index output
        |      SIGHASH_ANYONECANPAY (only combined with one of the above)
        |      - with ALL - signs all outputs but only txin_index input
        |      - with NONE - signs only the txin_index input
        |      - with SINGLE - signs txin_index input and output
        """
        base_type = sighash & 0x1F
        anyone_can_pay = sighash & SIGHASH_ANYONECANPAY

        if base_type == SIGHASH_SINGLE and txin_index >= len(self.outputs):
            raise PreconditionViolation(
                "SIGHASH_SINGLE requires an output at index {}".format(txin_index)
            )

        # every scriptSig is empty except the one being signed, which carries
        # the script code
        serialized_inputs = []
        for i, txin in enumerate(self.inputs):
            if anyone_can_pay and i != txin_index:
                continue
            script_sig = script_code if i == txin_index else b""
            sequence = txin.sequence
            if i != txin_index and base_type in (SIGHASH_NONE, SIGHASH_SINGLE):
                # other inputs' sequences are not signed and can be replaced
                sequence = EMPTY_TX_SEQUENCE
            serialized_inputs.append(
                txin.outpoint() + prepend_compact_size(script_sig) + sequence
            )

        if base_type == SIGHASH_NONE:
            serialized_outputs = []
        elif base_type == SIGHASH_SINGLE:
            serialized_outputs = [_NULL_OUTPUT] * txin_index + [
                self.outputs[txin_index].to_bytes()
            ]
        else:
            serialized_outputs = [txout.to_bytes() for txout in self.outputs]

        tx_for_signing = (
            self.version
            + encode_varint(len(serialized_inputs))
            + b"".join(serialized_inputs)
            + encode_varint(len(serialized_outputs))
            + b"".join(serialized_outputs)
            + self.locktime
        )
        # although sighash is one byte it is hashed as a 4 byte value
        tx_for_signing += struct.pack("<I", sighash)
        return hash256(tx_for_signing)

    def _segwit_digest(self, txin_index: int, script_code: bytes, sighash: int) -> bytes:
        """Returns the segwit v0 transaction's digest for signing.
        https://github.com/bitcoin/bips/blob/master/bip-0143.mediawiki
        """
        cache = self.bip143
        assert cache is not None
        txin = self.inputs[txin_index]

        base_type = sighash & 0x1F
        anyone_can_pay = sighash & SIGHASH_ANYONECANPAY
        sign_all = base_type not in (SIGHASH_SINGLE, SIGHASH_NONE)

        # defaults for BIP143
        hash_prevouts = b"\x00" * 32
        hash_sequence = b"\x00" * 32
        hash_outputs = b"\x00" * 32

        if not anyone_can_pay:
            hash_prevouts = cache.hash_prevouts
            if sign_all:
                hash_sequence = cache.hash_sequence

        if sign_all:
            hash_outputs = cache.hash_outputs
        elif base_type == SIGHASH_SINGLE and txin_index < len(self.outputs):
            hash_outputs = hash256(self.outputs[txin_index].to_bytes())

        tx_for_signing = (
            cache.version
            + hash_prevouts
            + hash_sequence
            + txin.outpoint()
            + prepend_compact_size(script_code)
            + struct.pack("<Q", txin.amount)
            + txin.sequence
            + hash_outputs
            + cache.locktime
            + struct.pack("<I", sighash)
        )
        return hash256(tx_for_signing)

    def _taproot_digest(
        self,
        txin_index: int,
        sighash: int,
        leaf_script: Optional[bytes],
        key_version: int,
    ) -> bytes:
        """Returns the segwit v1 (taproot) transaction's digest for signing.
        https://github.com/bitcoin/bips/blob/master/bip-0341.mediawiki

        A leaf_script makes this a script path spend (BIP342 extension).
        """
        cache = self.bip341
        assert cache is not None
        txin = self.inputs[txin_index]

        base_type = sighash & 0x03
        anyone_can_pay = sighash & SIGHASH_ANYONECANPAY

        if base_type == SIGHASH_SINGLE and txin_index >= len(self.outputs):
            raise PreconditionViolation(
                "SIGHASH_SINGLE requires an output at index {}".format(txin_index)
            )

        # epoch and hash type
        tx_for_signing = bytes([0, sighash])
        tx_for_signing += cache.version + cache.locktime

        if not anyone_can_pay:
            tx_for_signing += (
                cache.sha_prevouts
                + cache.sha_amounts
                + cache.sha_script_pubkeys
                + cache.sha_sequences
            )
        if base_type not in (SIGHASH_NONE, SIGHASH_SINGLE):
            tx_for_signing += cache.sha_outputs

        # no annex; ext_flag 1 for script path
        spend_type = 2 if leaf_script is not None else 0
        tx_for_signing += bytes([spend_type])

        if anyone_can_pay:
            tx_for_signing += (
                txin.outpoint()
                + struct.pack("<Q", txin.amount)
                + prepend_compact_size(txin.script_pubkey)
                + txin.sequence
            )
        else:
            tx_for_signing += struct.pack("<I", txin_index)

        if base_type == SIGHASH_SINGLE:
            tx_for_signing += sha256(self.outputs[txin_index].to_bytes())

        if leaf_script is not None:
            tx_for_signing += (
                tap_leaf_hash(leaf_script, LEAF_VERSION_TAPSCRIPT)
                + bytes([key_version])
                + CODESEPARATOR_NONE
            )

        return tap_sighash(tx_for_signing)
