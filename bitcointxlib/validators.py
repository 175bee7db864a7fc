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


"""Precondition checks shared by the script builder and the transaction.

Each validator raises before anything is mutated and returns nothing on
success.
"""

from __future__ import annotations
from typing import Optional

from bitcointxlib.constants import (
    LOCKTIME_THRESHOLD,
    MAX_DATA_SIZE,
    MAX_OUTPUT_SCRIPT_SIZE,
    MAX_RELATIVE_LOCK_BLOCKS,
    MAX_RELATIVE_LOCK_SECONDS,
    MAX_REDEEM_SCRIPT_SIZE,
    MAX_SCRIPT_SIG_SIZE,
    MAX_SECRET_SIZE,
    MAX_SEGWIT_SCRIPT_SIZE,
    MAX_UINT32,
    MAX_UINT64,
    MAX_WITNESS_ITEM_SIZE,
    MAX_WITNESS_SCRIPT_SIZE,
    MAX_WITNESS_SIZE,
    SEQUENCE_LOCKTIME_GRANULARITY,
)
from bitcointxlib.errors import PreconditionViolation, SizeLimitViolation
from bitcointxlib.utils import is_hex


def _check_size(what: str, data: bytes, limit: int) -> None:
    if len(data) > limit:
        raise SizeLimitViolation(what, len(data), limit)


def validate_hex(value: str, what: str, length: int | None = None) -> None:
    """Checks value is a hex string, optionally of exactly length bytes"""
    if not isinstance(value, str) or not is_hex(value):
        raise PreconditionViolation("{} must be a hex string".format(what))
    if length is not None and len(value) != length * 2:
        raise PreconditionViolation(
            "{} must be {} bytes, got {}".format(what, length, len(value) // 2)
        )


def validate_uint32(value: int, what: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise PreconditionViolation("{} must be an integer".format(what))
    if value < 0 or value > MAX_UINT32:
        raise PreconditionViolation("{} out of uint32 range: {}".format(what, value))


def validate_satoshis(value: int, what: str = "value") -> None:
    """Amounts are integer satoshis that fit in 8 bytes"""
    if not isinstance(value, int) or isinstance(value, bool):
        raise PreconditionViolation(
            "{} needs to be in satoshis as an integer".format(what)
        )
    if value < 0 or value > MAX_UINT64:
        raise PreconditionViolation("{} out of range: {}".format(what, value))


def _check_lock_value(value: int, what: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise PreconditionViolation("{} must be an integer".format(what))
    if value < 0:
        raise PreconditionViolation("{} cannot be negative".format(what))


def validate_time_lock(
    block: Optional[int], utc: Optional[int], is_absolute: bool = True
) -> None:
    """Checks a timelock value against the range its opcode accepts.

    Absolute locks (CLTV, BIP65) take a block height below 500,000,000 or a
    UNIX time at or above it. Relative locks (CSV, BIP112) take up to 65535
    blocks or a multiple of 512 seconds up to 33554430.
    """
    if (block is None) == (utc is None):
        raise PreconditionViolation(
            "Exactly one of block or utc must be given for a timelock"
        )
    if block is not None:
        _check_lock_value(block, "block")
        if is_absolute and block >= LOCKTIME_THRESHOLD:
            raise PreconditionViolation(
                "Block height must be below {}".format(LOCKTIME_THRESHOLD)
            )
        if not is_absolute and block > MAX_RELATIVE_LOCK_BLOCKS:
            raise PreconditionViolation(
                "Relative block lock must be at most {}".format(MAX_RELATIVE_LOCK_BLOCKS)
            )
        return

    assert utc is not None
    _check_lock_value(utc, "utc")
    if is_absolute and utc < LOCKTIME_THRESHOLD:
        raise PreconditionViolation("UTC must be at least {}".format(LOCKTIME_THRESHOLD))
    if is_absolute and utc > MAX_UINT32:
        raise PreconditionViolation("UTC must fit in the 4-byte locktime")
    if not is_absolute:
        if utc > MAX_RELATIVE_LOCK_SECONDS:
            raise PreconditionViolation(
                "Relative UTC lock must be at most {}".format(MAX_RELATIVE_LOCK_SECONDS)
            )
        if utc % SEQUENCE_LOCKTIME_GRANULARITY != 0:
            raise PreconditionViolation(
                "Relative UTC lock must be a multiple of {}".format(
                    SEQUENCE_LOCKTIME_GRANULARITY
                )
            )


def validate_script_sig(script_sig: bytes) -> None:
    _check_size("scriptSig", script_sig, MAX_SCRIPT_SIG_SIZE)


def validate_secret(secret: bytes) -> None:
    _check_size("hashlock secret", secret, MAX_SECRET_SIZE)


def validate_data(data: bytes) -> None:
    _check_size("OP_RETURN data", data, MAX_DATA_SIZE)


def validate_redeem_script(script: bytes) -> None:
    """Legacy P2SH redeem scripts are pushed whole; 520 is the push limit"""
    _check_size("redeem script", script, MAX_REDEEM_SCRIPT_SIZE)


def validate_segwit_script(script: bytes) -> None:
    _check_size("segwit script", script, MAX_SEGWIT_SCRIPT_SIZE)


def validate_witness_script(script: bytes) -> None:
    _check_size("witness script", script, MAX_WITNESS_SCRIPT_SIZE)


def validate_witness_item(item: bytes) -> None:
    _check_size("witness item", item, MAX_WITNESS_ITEM_SIZE)


def validate_witness(witness: bytes) -> None:
    _check_size("witness", witness, MAX_WITNESS_SIZE)


def validate_output_script(script: bytes) -> None:
    _check_size("output script", script, MAX_OUTPUT_SCRIPT_SIZE)
