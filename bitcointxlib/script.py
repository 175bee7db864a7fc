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

import copy
from typing import Any, Optional, Union

from bitcointxlib.constants import (
    MAX_LEGACY_MULTISIG_KEYS,
    MAX_SEGWIT_MULTISIG_KEYS,
    MAX_TAPROOT_MULTISIG_KEYS,
    SEQUENCE_LOCKTIME_GRANULARITY,
    SEQUENCE_LOCKTIME_TYPE_FLAG,
)
from bitcointxlib.errors import PreconditionViolation
from bitcointxlib.hashfunctions import hash160, hash256, sha256
from bitcointxlib.sighash import SighashVariant
from bitcointxlib.utils import b_to_h, h_to_b, push_data, script_num
from bitcointxlib.validators import (
    validate_data,
    validate_hex,
    validate_redeem_script,
    validate_secret,
    validate_segwit_script,
    validate_time_lock,
)


# Bitcoin's op codes. Complete list at: https://en.bitcoin.it/wiki/Script
OP_CODES = {
    # constants
    "OP_0": b"\x00",
    "OP_PUSHDATA1": b"\x4c",
    "OP_PUSHDATA2": b"\x4d",
    "OP_PUSHDATA4": b"\x4e",
    "OP_1NEGATE": b"\x4f",
    # OP_1 .. OP_16 are added below
    # flow control
    "OP_NOP": b"\x61",
    "OP_IF": b"\x63",
    "OP_NOTIF": b"\x64",
    "OP_ELSE": b"\x67",
    "OP_ENDIF": b"\x68",
    "OP_VERIFY": b"\x69",
    "OP_RETURN": b"\x6a",
    # stack
    "OP_TOALTSTACK": b"\x6b",
    "OP_FROMALTSTACK": b"\x6c",
    "OP_2DROP": b"\x6d",
    "OP_2DUP": b"\x6e",
    "OP_3DUP": b"\x6f",
    "OP_2OVER": b"\x70",
    "OP_2ROT": b"\x71",
    "OP_2SWAP": b"\x72",
    "OP_IFDUP": b"\x73",
    "OP_DEPTH": b"\x74",
    "OP_DROP": b"\x75",
    "OP_DUP": b"\x76",
    "OP_NIP": b"\x77",
    "OP_OVER": b"\x78",
    "OP_PICK": b"\x79",
    "OP_ROLL": b"\x7a",
    "OP_ROT": b"\x7b",
    "OP_SWAP": b"\x7c",
    "OP_TUCK": b"\x7d",
    "OP_SIZE": b"\x82",
    # bitwise logic
    "OP_EQUAL": b"\x87",
    "OP_EQUALVERIFY": b"\x88",
    # arithmetic
    "OP_1ADD": b"\x8b",
    "OP_1SUB": b"\x8c",
    "OP_NEGATE": b"\x8f",
    "OP_ABS": b"\x90",
    "OP_NOT": b"\x91",
    "OP_0NOTEQUAL": b"\x92",
    "OP_ADD": b"\x93",
    "OP_SUB": b"\x94",
    "OP_BOOLAND": b"\x9a",
    "OP_BOOLOR": b"\x9b",
    "OP_NUMEQUAL": b"\x9c",
    "OP_NUMEQUALVERIFY": b"\x9d",
    "OP_NUMNOTEQUAL": b"\x9e",
    "OP_LESSTHAN": b"\x9f",
    "OP_GREATERTHAN": b"\xa0",
    "OP_LESSTHANOREQUAL": b"\xa1",
    "OP_GREATERTHANOREQUAL": b"\xa2",
    "OP_MIN": b"\xa3",
    "OP_MAX": b"\xa4",
    "OP_WITHIN": b"\xa5",
    # crypto
    "OP_RIPEMD160": b"\xa6",
    "OP_SHA1": b"\xa7",
    "OP_SHA256": b"\xa8",
    "OP_HASH160": b"\xa9",
    "OP_HASH256": b"\xaa",
    "OP_CODESEPARATOR": b"\xab",
    "OP_CHECKSIG": b"\xac",
    "OP_CHECKSIGVERIFY": b"\xad",
    "OP_CHECKMULTISIG": b"\xae",
    "OP_CHECKMULTISIGVERIFY": b"\xaf",
    # locktime (formerly OP_NOP2 and OP_NOP3)
    "OP_CHECKLOCKTIMEVERIFY": b"\xb1",
    "OP_CHECKSEQUENCEVERIFY": b"\xb2",
    # tapscript (BIP342)
    "OP_CHECKSIGADD": b"\xba",
}
for _n in range(1, 17):
    OP_CODES["OP_" + str(_n)] = bytes([0x50 + _n])

# canonical names only; aliases would shadow them in the reverse table
CODE_OPS = {code: name for name, code in OP_CODES.items()}

OP_CODES.update(
    {
        "OP_FALSE": b"\x00",
        "OP_TRUE": b"\x51",
        "OP_NOP2": b"\xb1",
        "OP_NOP3": b"\xb2",
    }
)


class Script:
    """Represents any script in Bitcoin

    A Script contains just a list of OP_CODES and data and knows how to
    serialize into bytes. Tokens are interpreted as:

    - a known opcode name, e.g. "OP_CHECKSIG"
    - an int, pushed as a minimal script number (0-16 become OP_0..OP_16)
    - a hex string or bytes, pushed as data

    Attributes
    ----------
    script : list
        the list with all the script OP_CODES and data

    Methods
    -------
    to_bytes()
        returns a serialized byte version of the script
    to_hex()
        returns a serialized version of the script in hex
    get_script()
        returns the list of tokens that makes up this script
    copy()
        creates a copy of the object (classmethod)
    from_raw()
        parses a serialized script into tokens (classmethod)
    to_p2sh_script_pub_key()
        converts script to p2sh scriptPubKey (locking script)
    to_p2wsh_script_pub_key()
        converts script to p2wsh scriptPubKey (locking script)

    Raises
    ------
    ValueError
        If string data is not valid hex or too large
    """

    def __init__(self, script: list[Any]) -> None:
        """See Script description"""
        self.script: list[Any] = script

    @classmethod
    def copy(cls, script: "Script") -> "Script":
        """Deep copy of Script"""
        return cls(copy.deepcopy(script.script))

    def get_script(self) -> list[Any]:
        return self.script

    def _token_to_bytes(self, token: Any) -> bytes:
        if isinstance(token, str) and token in OP_CODES:
            return OP_CODES[token]
        if isinstance(token, int) and not isinstance(token, bool):
            return script_num(token)
        if isinstance(token, (bytes, bytearray)):
            return push_data(bytes(token))
        if isinstance(token, str):
            return push_data(h_to_b(token))
        raise TypeError("Unsupported script token: {!r}".format(token))

    def to_bytes(self) -> bytes:
        """Converts the script to bytes"""
        return b"".join(self._token_to_bytes(token) for token in self.script)

    def to_hex(self) -> str:
        """Converts the script to hexadecimal"""
        return b_to_h(self.to_bytes())

    def __add__(self, other: "Script") -> "Script":
        """Concatenates two scripts, e.g. a timelock fragment and a P2PKH"""
        return Script(self.script + other.script)

    def __len__(self) -> int:
        return len(self.to_bytes())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Script):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __str__(self) -> str:
        return str(self.script)

    def __repr__(self) -> str:
        return self.__str__()

    @classmethod
    def from_raw(cls, scriptraw: Union[str, bytes]) -> "Script":
        """Imports a Script commands list from raw hexadecimal or bytes

        Data pushes become hex string tokens; everything else becomes an
        opcode name.
        """
        if isinstance(scriptraw, str):
            scriptraw = h_to_b(scriptraw)
        elif not isinstance(scriptraw, bytes):
            raise TypeError("Input must be a hexadecimal string or bytes")

        commands: list[Any] = []
        index = 0
        while index < len(scriptraw):
            byte = scriptraw[index]
            index += 1
            if 0x01 <= byte <= 0x4B:
                size = byte
            elif byte in (0x4C, 0x4D, 0x4E):
                width = {0x4C: 1, 0x4D: 2, 0x4E: 4}[byte]
                size = int.from_bytes(scriptraw[index : index + width], "little")
                index += width
            else:
                code = bytes([byte])
                if code not in CODE_OPS:
                    raise ValueError("Unknown opcode 0x{:02x}".format(byte))
                commands.append(CODE_OPS[code])
                continue

            if index + size > len(scriptraw):
                raise ValueError("Script push exceeds script length")
            commands.append(scriptraw[index : index + size].hex())
            index += size

        return cls(commands)

    def to_p2sh_script_pub_key(self) -> "Script":
        """Converts script to p2sh scriptPubKey (locking script)

        Calculates the hash160 of the script and uses it to construct a P2SH
        script.
        """
        script_hash_hex = b_to_h(script_hash(self, SighashVariant.LEGACY))
        return Script(["OP_HASH160", script_hash_hex, "OP_EQUAL"])

    def to_p2wsh_script_pub_key(self) -> "Script":
        """Converts script to p2wsh scriptPubKey (locking script)

        Calculates the sha256 of the script and uses it to construct a P2WSH
        script.
        """
        script_hash_hex = b_to_h(script_hash(self, SighashVariant.SEGWIT_V0))
        return Script(["OP_0", script_hash_hex])


def _script_bytes(script: Union[Script, str, bytes]) -> bytes:
    if isinstance(script, Script):
        return script.to_bytes()
    if isinstance(script, str):
        return h_to_b(script)
    return script


#
# Script builders
#
def p2pkh_script(pubkey_hash: str) -> Script:
    """OP_DUP OP_HASH160 <20-byte hash> OP_EQUALVERIFY OP_CHECKSIG"""
    validate_hex(pubkey_hash, "public key hash", 20)
    return Script(["OP_DUP", "OP_HASH160", pubkey_hash, "OP_EQUALVERIFY", "OP_CHECKSIG"])


def single_sig_script(pubkey: str, variant: SighashVariant | str = "segwit") -> Script:
    """Returns the script that a single signature of pubkey satisfies.

    For ECDSA (legacy/segwit) that is the P2PKH template over the 33-byte
    compressed key, which is also the scriptCode of a P2WPKH spend. For
    taproot it is ``<32-byte x-only key> OP_CHECKSIG``.
    """
    variant = SighashVariant.parse(variant)
    if variant.is_taproot:
        validate_hex(pubkey, "x-only public key", 32)
        return Script([pubkey, "OP_CHECKSIG"])

    validate_hex(pubkey, "compressed public key", 33)
    return p2pkh_script(b_to_h(hash160(h_to_b(pubkey))))


def multi_sig_script(
    m: int, pubkeys: list[str], variant: SighashVariant | str = "segwit"
) -> Script:
    """Returns an m-of-n multisig script.

    Legacy and segwit use ``OP_m <keys> OP_n OP_CHECKMULTISIG``; taproot has
    no CHECKMULTISIG and chains ``OP_CHECKSIG``/``OP_CHECKSIGADD`` instead,
    ending with ``<m> OP_NUMEQUAL``.
    """
    variant = SighashVariant.parse(variant)
    n = len(pubkeys)
    if not isinstance(m, int) or m < 1:
        raise PreconditionViolation("m must be a positive integer")
    if m > n:
        raise PreconditionViolation(
            "m ({}) cannot exceed the number of public keys ({})".format(m, n)
        )

    if variant.is_taproot:
        if n > MAX_TAPROOT_MULTISIG_KEYS:
            raise PreconditionViolation(
                "taproot multisig supports at most {} keys".format(
                    MAX_TAPROOT_MULTISIG_KEYS
                )
            )
        tokens: list[Any] = []
        for i, pubkey in enumerate(pubkeys):
            validate_hex(pubkey, "x-only public key", 32)
            tokens += [pubkey, "OP_CHECKSIG" if i == 0 else "OP_CHECKSIGADD"]
        return Script(tokens + [m, "OP_NUMEQUAL"])

    limit = (
        MAX_LEGACY_MULTISIG_KEYS
        if variant is SighashVariant.LEGACY
        else MAX_SEGWIT_MULTISIG_KEYS
    )
    if n > limit:
        raise PreconditionViolation(
            "{} multisig supports at most {} keys".format(variant.value, limit)
        )
    for pubkey in pubkeys:
        validate_hex(pubkey, "compressed public key", 33)
    return Script([m] + list(pubkeys) + [n, "OP_CHECKMULTISIG"])


def relative_lock_value(block: Optional[int] = None, utc: Optional[int] = None) -> int:
    """The BIP68 encoding of a relative lock: blocks as is, seconds in units
    of 512 with the type flag set. Used by both the script and the input
    sequence."""
    validate_time_lock(block, utc, is_absolute=False)
    if block is not None:
        return block
    assert utc is not None
    return SEQUENCE_LOCKTIME_TYPE_FLAG | (utc // SEQUENCE_LOCKTIME_GRANULARITY)


def time_lock_script(
    block: Optional[int] = None, utc: Optional[int] = None, is_absolute: bool = True
) -> Script:
    """<lock> OP_CHECKLOCKTIMEVERIFY OP_DROP (absolute) or
    <lock> OP_CHECKSEQUENCEVERIFY OP_DROP (relative)

    Exactly one of block (a block height, or a number of blocks) and utc (a
    UNIX time, or a number of seconds) is given. A transaction spending an
    absolute lock needs a locktime at least as large; a relative lock needs
    version 2 and the input sequence from relative_lock_sequence().
    """
    if not is_absolute:
        lock = relative_lock_value(block, utc)
        return Script([lock, "OP_CHECKSEQUENCEVERIFY", "OP_DROP"])
    validate_time_lock(block, utc)
    lock = block if block is not None else utc
    return Script([lock, "OP_CHECKLOCKTIMEVERIFY", "OP_DROP"])


def pad_secret(secret_hex: str) -> str:
    """Right-pads an odd-length secret with a zero nibble"""
    if len(secret_hex) % 2 != 0:
        secret_hex += "0"
    return secret_hex


def hash_lock_script(secret_hex: str) -> Script:
    """OP_HASH256 <HASH256(secret)> OP_EQUALVERIFY"""
    secret_hex = pad_secret(secret_hex)
    validate_hex(secret_hex, "secret")
    secret = h_to_b(secret_hex)
    validate_secret(secret)
    return Script(["OP_HASH256", b_to_h(hash256(secret)), "OP_EQUALVERIFY"])


def data_script(data: str, encode_as: str = "utf-8") -> Script:
    """OP_RETURN <data>; data is utf-8 text or hex depending on encode_as"""
    if encode_as == "hex":
        validate_hex(data, "data")
        payload = h_to_b(data)
    elif encode_as == "utf-8":
        payload = data.encode("utf-8")
    else:
        raise PreconditionViolation(
            "encode_as must be 'utf-8' or 'hex', got '{}'".format(encode_as)
        )
    validate_data(payload)
    return Script(["OP_RETURN", payload])


def script_hash(
    script: Union[Script, str, bytes], variant: SighashVariant | str = "segwit"
) -> bytes:
    """HASH160 of the script for legacy (P2SH), SHA256 for segwit (P2WSH)"""
    variant = SighashVariant.parse(variant)
    script_bytes = _script_bytes(script)
    if variant is SighashVariant.LEGACY:
        validate_redeem_script(script_bytes)
        return hash160(script_bytes)
    if variant is SighashVariant.SEGWIT_V0:
        validate_segwit_script(script_bytes)
        return sha256(script_bytes)
    raise PreconditionViolation(
        "script hashes exist only for legacy and segwit, not {}".format(variant.value)
    )
