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
    from typing import Any, Iterator, Optional, Union

import logging
import struct
from contextlib import contextmanager
from enum import Enum

from bitcointxlib.address import address_to_script_pub_key
from bitcointxlib.constants import (
    DEFAULT_TX_LOCKTIME,
    DEFAULT_TX_SEQUENCE,
    DEFAULT_TX_VERSION,
    FINAL_TX_SEQUENCE,
    NO_RBF_TX_SEQUENCE,
    SEGWIT_MARKER_FLAG,
    TAPROOT_KEY_VERSION,
)
from bitcointxlib.errors import PreconditionViolation, StateViolation
from bitcointxlib.hashfunctions import hash256
from bitcointxlib.keys import PrivateKey
from bitcointxlib.script import (
    Script,
    hash_lock_script,
    multi_sig_script,
    pad_secret,
    relative_lock_value,
    single_sig_script,
)
from bitcointxlib.sighash import SighashEngine, SighashVariant
from bitcointxlib.utils import (
    b_to_h,
    encode_varint,
    h_to_b,
    prepend_compact_size,
    push_data,
)
from bitcointxlib.validators import (
    validate_hex,
    validate_output_script,
    validate_redeem_script,
    validate_satoshis,
    validate_script_sig,
    validate_secret,
    validate_segwit_script,
    validate_uint32,
    validate_witness,
    validate_witness_item,
    validate_witness_script,
)

logger = logging.getLogger(__name__)


class TxState(Enum):
    OPEN = "open"
    FINALIZED = "finalized"


def _to_bytes_field(value: Union[str, bytes], what: str, length: int) -> bytes:
    if isinstance(value, bytes):
        if len(value) != length:
            raise PreconditionViolation(
                "{} must be {} bytes, got {}".format(what, length, len(value))
            )
        return value
    validate_hex(value, what, length)
    return h_to_b(value)


def _script_to_bytes(script: Union[Script, str, bytes, None], what: str) -> bytes:
    if script is None:
        return b""
    if isinstance(script, Script):
        return script.to_bytes()
    if isinstance(script, bytes):
        return script
    validate_hex(script, what)
    return h_to_b(script)


def _to_private_key(privkey: Union[PrivateKey, str]) -> PrivateKey:
    if isinstance(privkey, PrivateKey):
        return privkey
    validate_hex(privkey, "private key", 32)
    return PrivateKey.from_hex(privkey)


def relative_lock_sequence(block: Optional[int] = None, utc: Optional[int] = None) -> bytes:
    """The input sequence that satisfies time_lock_script(block, utc,
    is_absolute=False); pass it as the spending Utxo's sequence. The
    transaction must be version 2 or later."""
    return struct.pack("<I", relative_lock_value(block, utc))


class Utxo:
    """An unspent output to be spent by the transaction

    Attributes
    ----------
    tx_hash : str
        the id of the transaction that created the output, as displayed
        (big-endian hex)
    index : int
        the output's index in that transaction
    value : int
        the output's amount in satoshis; segwit and taproot sign it
    script : str, optional
        the output's scriptPubKey as hex; required for taproot signing
    sequence : str, optional
        4-byte sequence as serialized (little-endian hex); defaults to the
        transaction's default sequence
    """

    def __init__(
        self,
        tx_hash: str,
        index: int,
        value: int,
        script: Optional[str] = None,
        sequence: Union[str, bytes, None] = None,
    ) -> None:
        validate_hex(tx_hash, "tx_hash", 32)
        validate_uint32(index, "index")
        validate_satoshis(value)
        if script is not None:
            validate_hex(script, "utxo script")
            validate_output_script(h_to_b(script))
        self.tx_hash = tx_hash.lower()
        self.index = index
        self.value = value
        self.script = script
        self.sequence = (
            _to_bytes_field(sequence, "sequence", 4) if sequence is not None else None
        )

    def __repr__(self) -> str:
        return "Utxo({}:{}, {})".format(self.tx_hash, self.index, self.value)


class Target:
    """A payment the transaction makes: value satoshis to either an address
    or a raw scriptPubKey (hex), never both.
    """

    def __init__(
        self, value: int, address: Optional[str] = None, script: Optional[str] = None
    ) -> None:
        validate_satoshis(value)
        if (address is None) == (script is None):
            raise PreconditionViolation(
                "Exactly one of address or script must be given for output"
            )
        if address is not None:
            try:
                script_pubkey = address_to_script_pub_key(address).to_bytes()
            except ValueError as e:
                raise PreconditionViolation(str(e))
        else:
            validate_hex(script, "output script")  # type: ignore
            script_pubkey = h_to_b(script)  # type: ignore
        validate_output_script(script_pubkey)

        self.value = value
        self.address = address
        self.script = script
        self.script_pubkey = script_pubkey

    def __repr__(self) -> str:
        return "Target({}, {})".format(self.address or self.script, self.value)


class TxInput:
    """Represents a transaction input record.

    A transaction input requires a transaction id of a UTXO and the index of
    that UTXO.

    Attributes
    ----------
    txid : str
        the transaction id as a hex string (as displayed by tools)
    txout_index : int
        the index of the UTXO that we want to spend
    script_sig : bytes
        the serialized unlocking script; empty until signed
    sequence : bytes
        the input sequence (for timelocks, RBF, etc.)
    amount : int
        the amount of the UTXO in satoshis
    script_pubkey : bytes, optional
        the locking script of the UTXO

    Methods
    -------
    outpoint()
        returns txid (little-endian) and index as serialized
    to_bytes()
        serializes TxInput to bytes
    """

    def __init__(
        self,
        txid: str,
        txout_index: int,
        script_sig: bytes = b"",
        sequence: bytes = DEFAULT_TX_SEQUENCE,
        amount: int = 0,
        script_pubkey: Optional[bytes] = None,
    ) -> None:
        self.txid = txid
        self.txout_index = txout_index
        self.script_sig = script_sig
        self.sequence = sequence
        self.amount = amount
        self.script_pubkey = script_pubkey

    def outpoint(self) -> bytes:
        # note that we reverse the byte order for the tx hash since the string
        # was displayed in little-endian!
        return h_to_b(self.txid)[::-1] + struct.pack("<L", self.txout_index)

    def to_bytes(self) -> bytes:
        """Serializes to bytes"""
        return self.outpoint() + prepend_compact_size(self.script_sig) + self.sequence

    def __str__(self) -> str:
        return str(
            {
                "txid": self.txid,
                "txout_index": self.txout_index,
                "script_sig": b_to_h(self.script_sig),
                "sequence": b_to_h(self.sequence),
            }
        )

    def __repr__(self) -> str:
        return self.__str__()


class TxOutput:
    """Represents a transaction output record

    Attributes
    ----------
    amount : int
        the value we want to send to this output in satoshis
    script_pubkey : bytes
        the script that will lock this amount
    """

    def __init__(self, amount: int, script_pubkey: Union[Script, bytes]) -> None:
        validate_satoshis(amount, "amount")
        if isinstance(script_pubkey, Script):
            script_pubkey = script_pubkey.to_bytes()
        self.amount = amount
        self.script_pubkey = script_pubkey

    def to_bytes(self) -> bytes:
        """Serializes to bytes"""
        # internally all little-endian except hashes
        return struct.pack("<Q", self.amount) + prepend_compact_size(self.script_pubkey)

    def __str__(self) -> str:
        return str({"amount": self.amount, "script_pubkey": b_to_h(self.script_pubkey)})

    def __repr__(self) -> str:
        return self.__str__()


class TxWitnessInput:
    """A list of the witness items required to satisfy the locking conditions
       of a segwit input (aka witness stack).

    Attributes
    ----------
    stack : list
        the witness items (bytes) list

    Methods
    -------
    to_bytes()
        returns the item count followed by the length-prefixed items
    """

    def __init__(self, stack: list[bytes]) -> None:
        self.stack = stack

    def to_bytes(self) -> bytes:
        """Converts to bytes"""
        stack_bytes = encode_varint(len(self.stack))
        for item in self.stack:
            stack_bytes += prepend_compact_size(item)
        return stack_bytes

    def __str__(self) -> str:
        return str({"witness_items": [b_to_h(item) for item in self.stack]})

    def __repr__(self) -> str:
        return self.__str__()


class Transaction:
    """Builds and signs a Bitcoin transaction

    A transaction starts OPEN: inputs (Utxo) and outputs (Target) can be
    added and version, locktime and the default sequence changed. The first
    finalize() (or signing call) freezes it into input and output records
    and caches the sighash prefixes; from then on only signatures are
    written, one slot per input, in any order.

    Attributes
    ----------
    inputs : list (TxInput)
        the input records; empty until finalized
    outputs : list (TxOutput)
        the output records; empty until finalized
    version : int
        the transaction version
    locktime : int
        the transaction's locktime parameter
    state : TxState
        OPEN or FINALIZED

    Methods
    -------
    add_input(utxo) / add_output(target)
        add a UTXO to spend / a payment
    set_version(version) / set_locktime(block)
        change the version / locktime
    disable_rbf() / disable_locktime()
        change the default input sequence
    finalize(variant)
        freezes the transaction and computes the variant's sighash prefix
    sign_input(privkey, index, variant, time_lock_script, secret_hex, sighash)
        signs one input with a single key
    multi_sign_input(pubkeys, privkeys, index, variant, ...)
        signs one multisig input
    sign_all(privkey, variant, ...)
        signs every input with one key
    unlock_hash_input(secret_hex, index, variant, time_lock_script)
        spends a hashlock without a signature
    get_input_hash_to_sign(redeem_script, index, variant, sighash, key_version)
        returns an input's sighash for custom scripts
    sign_input_by_script_sig(sig_stack, index, variant)
        writes a caller-built scriptSig or witness stack
    get_signed_hex() / get_id() / get_wtxid()
        the serialized transaction / its txid / its wtxid
    get_size() / get_vsize()
        the size in bytes / virtual bytes
    is_segwit() / is_signed(index)
        whether any witness exists / whether an input has been signed
    """

    def __init__(
        self, version: int = DEFAULT_TX_VERSION, locktime: int = DEFAULT_TX_LOCKTIME
    ) -> None:
        validate_uint32(version, "version")
        validate_uint32(locktime, "locktime")
        self.version = version
        self.locktime = locktime
        self.default_sequence = DEFAULT_TX_SEQUENCE

        self._utxos: list[Utxo] = []
        self._targets: list[Target] = []
        # one slot per input; None until a witness is written
        self._witnesses: list[Optional[TxWitnessInput]] = []

        self.inputs: list[TxInput] = []
        self.outputs: list[TxOutput] = []
        self._engine: Optional[SighashEngine] = None
        self._state = TxState.OPEN

    @property
    def state(self) -> TxState:
        return self._state

    def _check_open(self, task: str) -> None:
        if self._state is not TxState.OPEN:
            raise StateViolation(
                "Cannot {} after the transaction is finalized".format(task)
            )

    def _check_finalized(self, task: str) -> None:
        if self._state is not TxState.FINALIZED:
            raise StateViolation(
                "Cannot {} before the transaction is finalized".format(task)
            )

    def _check_index(self, index: int) -> None:
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < len(self._utxos)
        ):
            raise StateViolation(
                "Out of range, tx contains only {} inputs".format(len(self._utxos))
            )

    #
    # building
    #
    def add_input(self, utxo: Utxo) -> None:
        self._check_open("add input")
        if not isinstance(utxo, Utxo):
            raise PreconditionViolation("add_input expects a Utxo")
        self._utxos.append(utxo)
        self._witnesses.append(None)

    def add_output(self, target: Target) -> None:
        self._check_open("add output")
        if not isinstance(target, Target):
            raise PreconditionViolation("add_output expects a Target")
        self._targets.append(target)

    def set_version(self, version: int) -> None:
        self._check_open("set version")
        validate_uint32(version, "version")
        self.version = version

    def set_locktime(self, block: int) -> None:
        """Must be set >= any of the timelock block heights of the inputs"""
        self._check_open("set locktime")
        validate_uint32(block, "locktime")
        self.locktime = block

    def disable_rbf(self) -> None:
        """Inputs without their own sequence opt out of replace-by-fee"""
        self._check_open("disable rbf")
        self.default_sequence = NO_RBF_TX_SEQUENCE

    def disable_locktime(self) -> None:
        """Inputs without their own sequence become final; nLockTime is then
        not enforced"""
        self._check_open("disable locktime")
        self.default_sequence = FINAL_TX_SEQUENCE

    def finalize(self, variant: Union[SighashVariant, str] = "legacy") -> None:
        """Freezes the transaction into input/output records.

        Idempotent. Each call also makes sure the sighash prefix the variant
        needs is cached; taproot requires the script of every UTXO.
        """
        variant = SighashVariant.parse(variant)

        if self._state is TxState.FINALIZED:
            assert self._engine is not None
            self._engine.prepare(variant)
            return

        inputs = [
            TxInput(
                utxo.tx_hash,
                utxo.index,
                sequence=utxo.sequence or self.default_sequence,
                amount=utxo.value,
                script_pubkey=h_to_b(utxo.script) if utxo.script is not None else None,
            )
            for utxo in self._utxos
        ]
        outputs = [TxOutput(target.value, target.script_pubkey) for target in self._targets]
        engine = SighashEngine(
            struct.pack("<I", self.version), struct.pack("<I", self.locktime), inputs, outputs
        )
        # raises for taproot with missing scripts, before anything changes
        engine.prepare(variant)

        self.inputs = inputs
        self.outputs = outputs
        self._engine = engine
        self._state = TxState.FINALIZED
        logger.debug(
            "finalized tx (%s): %d inputs, %d outputs",
            variant.value,
            len(inputs),
            len(outputs),
        )

    #
    # signing
    #
    def _reopen(self) -> None:
        self.inputs = []
        self.outputs = []
        self._engine = None
        self._state = TxState.OPEN
        logger.debug("signing failed, tx reopened")

    @contextmanager
    def _signing(self, variant: SighashVariant) -> Iterator[None]:
        """Finalizes for a signing call. If the call raises, a transaction
        that was OPEN before it is OPEN again."""
        was_open = self._state is TxState.OPEN
        self.finalize(variant)
        try:
            yield
        except Exception:
            if was_open:
                self._reopen()
            raise

    def _digest(
        self,
        variant: SighashVariant,
        index: int,
        script_code: bytes,
        sighash: Optional[int],
        key_version: int = TAPROOT_KEY_VERSION,
    ) -> bytes:
        assert self._engine is not None
        return self._engine.digest(variant, index, script_code, sighash, key_version)

    def _lock_fragments(
        self,
        variant: SighashVariant,
        time_lock_script: Union[Script, str, bytes, None],
        secret_hex: str,
    ) -> tuple[bytes, Optional[bytes]]:
        """Returns the timelock + hashlock script prefix and the (padded)
        secret, if any"""
        prefix = _script_to_bytes(time_lock_script, "time lock script")
        secret = None
        if secret_hex:
            prefix += hash_lock_script(secret_hex).to_bytes()
            secret = h_to_b(pad_secret(secret_hex))
            validate_secret(secret)
        if prefix and variant.is_taproot:
            raise PreconditionViolation(
                "timelock/hashlock spends are not supported for {}".format(variant.value)
            )
        return prefix, secret

    def _single_sig_stack(
        self,
        privkey: PrivateKey,
        index: int,
        variant: SighashVariant,
        time_lock_script: Union[Script, str, bytes, None],
        secret_hex: str,
        sighash: Optional[int],
    ) -> tuple[list[bytes], bool]:
        """Returns the unlocking stack and whether its last item is a script"""
        if variant is SighashVariant.TAPROOT_SCRIPT_PATH:
            raise PreconditionViolation(
                "tapscript spends need get_input_hash_to_sign and "
                "sign_input_by_script_sig"
            )
        prefix, secret = self._lock_fragments(variant, time_lock_script, secret_hex)

        if variant is SighashVariant.TAPROOT_KEY_PATH:
            digest = self._digest(variant, index, b"", sighash)
            if sighash is None:
                sighash = variant.default_sighash()
            return [privkey.sign_schnorr_digest(digest, sighash)], False

        pubkey = privkey.get_public_key().to_hex()
        script_code = prefix + single_sig_script(pubkey, variant).to_bytes()
        self._validate_redeem(variant, script_code, bool(prefix))

        digest = self._digest(variant, index, script_code, sighash)
        if sighash is None:
            sighash = variant.default_sighash()
        stack = [privkey.sign_digest(digest, sighash), h_to_b(pubkey)]
        if secret is not None:
            stack.append(secret)
        # the redeem (or witness) script is revealed only for P2SH/P2WSH
        if prefix:
            stack.append(script_code)
        return stack, bool(prefix)

    def _validate_redeem(
        self, variant: SighashVariant, script: bytes, is_script_hash: bool
    ) -> None:
        if not is_script_hash:
            return
        if variant is SighashVariant.LEGACY:
            validate_redeem_script(script)
        else:
            validate_witness_script(script)

    def _build_slot(
        self,
        variant: SighashVariant,
        stack: list[bytes],
        ends_with_script: bool,
        check_items: bool = True,
    ) -> Union[bytes, TxWitnessInput]:
        """Validates the unlocking data fully; returns the scriptSig (legacy)
        or the witness"""
        if variant is SighashVariant.LEGACY:
            script_sig = b"".join(push_data(item) for item in stack)
            validate_script_sig(script_sig)
            return script_sig

        if check_items:
            items = stack[:-1] if ends_with_script else stack
            for item in items:
                validate_witness_item(item)
        witness = TxWitnessInput(list(stack))
        validate_witness(witness.to_bytes())
        return witness

    def _store_slot(self, index: int, slot: Union[bytes, TxWitnessInput]) -> None:
        if isinstance(slot, TxWitnessInput):
            self._witnesses[index] = slot
            logger.debug("wrote witness of input %d (%d items)", index, len(slot.stack))
        else:
            self.inputs[index].script_sig = slot
            logger.debug("wrote scriptSig of input %d (%d bytes)", index, len(slot))

    def _prevalidate(self, index: Optional[int], variant: SighashVariant) -> None:
        if index is not None:
            self._check_index(index)
        if variant.is_taproot:
            for i, utxo in enumerate(self._utxos):
                if utxo.script is None:
                    raise PreconditionViolation(
                        "Taproot signing requires the spent script of every "
                        "input; input {} has none".format(i)
                    )

    def sign_input(
        self,
        privkey: Union[PrivateKey, str],
        index: int,
        variant: Union[SighashVariant, str] = "segwit",
        time_lock_script: Union[Script, str, bytes, None] = None,
        secret_hex: str = "",
        sighash: Optional[int] = None,
    ) -> None:
        """Signs input index with a single key.

        |  Unlocking stack:
        |      legacy/segwit: <sig> <pubkey> [<secret>] [<redeem script>]
        |      taproot:       <schnorr sig>
        |
        |  The redeem script (P2SH for legacy, P2WSH for segwit) is
        |  <time_lock_script> <hash lock of secret> <P2PKH of pubkey> and is
        |  present only when a timelock or a secret is given. It is written
        |  to the scriptSig (legacy) or the witness (segwit/taproot).

        For taproot the key is used as given; pass the tweaked key (see
        PrivateKey.get_tweaked_key()).
        """
        variant = SighashVariant.parse(variant)
        key = _to_private_key(privkey)
        self._prevalidate(index, variant)

        with self._signing(variant):
            stack, ends_with_script = self._single_sig_stack(
                key, index, variant, time_lock_script, secret_hex, sighash
            )
            slot = self._build_slot(variant, stack, ends_with_script)
        self._store_slot(index, slot)

    def sign_all(
        self,
        privkey: Union[PrivateKey, str],
        variant: Union[SighashVariant, str] = "segwit",
        time_lock_script: Union[Script, str, bytes, None] = None,
        secret_hex: str = "",
        sighash: Optional[int] = None,
    ) -> None:
        """Signs every input like sign_input does. Nothing is written unless
        every input could be signed."""
        variant = SighashVariant.parse(variant)
        key = _to_private_key(privkey)
        self._prevalidate(None, variant)

        slots = []
        with self._signing(variant):
            for index in range(len(self._utxos)):
                stack, ends_with_script = self._single_sig_stack(
                    key, index, variant, time_lock_script, secret_hex, sighash
                )
                slots.append(self._build_slot(variant, stack, ends_with_script))
        for index, slot in enumerate(slots):
            self._store_slot(index, slot)

    def multi_sign_input(
        self,
        pubkeys: list[str],
        privkeys: list[Union[PrivateKey, str]],
        index: int,
        variant: Union[SighashVariant, str] = "segwit",
        time_lock_script: Union[Script, str, bytes, None] = None,
        secret_hex: str = "",
        sighash: Optional[int] = None,
    ) -> None:
        """Signs a P2SH/P2WSH multisig input with len(privkeys)-of-len(pubkeys).

        |  Unlocking stack:
        |      OP_0 <sig_1> ... <sig_m> [<secret>] <redeem script>
        |
        |  OP_0 is consumed by OP_CHECKMULTISIG's extra pop. Signatures must
        |  be in the order of their public keys in the script.
        """
        variant = SighashVariant.parse(variant)
        if variant.is_taproot:
            raise PreconditionViolation(
                "multisig signing supports legacy and segwit only; taproot "
                "multisig is a tapscript spend"
            )
        keys = [_to_private_key(privkey) for privkey in privkeys]
        self._check_index(index)

        prefix, secret = self._lock_fragments(variant, time_lock_script, secret_hex)
        redeem = prefix + multi_sig_script(len(keys), pubkeys, variant).to_bytes()
        self._validate_redeem(variant, redeem, True)

        with self._signing(variant):
            digest = self._digest(variant, index, redeem, sighash)
            if sighash is None:
                sighash = variant.default_sighash()
            stack = [b""] + [key.sign_digest(digest, sighash) for key in keys]
            if secret is not None:
                stack.append(secret)
            stack.append(redeem)
            slot = self._build_slot(variant, stack, True)
        self._store_slot(index, slot)

    def unlock_hash_input(
        self,
        secret_hex: str,
        index: int,
        variant: Union[SighashVariant, str] = "segwit",
        time_lock_script: Union[Script, str, bytes, None] = None,
    ) -> None:
        """Spends a hashlock (optionally timelocked) by revealing the secret.

        |  Unlocking stack:
        |      0x51 <secret> <time_lock_script + hash lock of secret>
        |
        |  OP_EQUALVERIFY leaves nothing behind, so a truthy 0x51 item is
        |  pushed first to leave a clean, true stack.
        """
        variant = SighashVariant.parse(variant)
        if variant.is_taproot:
            raise PreconditionViolation("hash unlocking supports legacy and segwit only")
        if not secret_hex:
            raise PreconditionViolation("secret_hex is required")
        self._check_index(index)

        prefix, secret = self._lock_fragments(variant, time_lock_script, secret_hex)
        assert secret is not None
        self._validate_redeem(variant, prefix, True)

        with self._signing(variant):
            slot = self._build_slot(variant, [b"\x51", secret, prefix], True)
        self._store_slot(index, slot)

    def get_input_hash_to_sign(
        self,
        redeem_script: Union[Script, str, bytes, None],
        index: int,
        variant: Union[SighashVariant, str] = "segwit",
        sighash: Optional[int] = None,
        key_version: int = TAPROOT_KEY_VERSION,
    ) -> bytes:
        """Returns the 32-byte sighash of input index for a custom script.

        redeem_script is the script code: the redeem script (legacy), the
        witness script (segwit) or the leaf script (tapscript). It is ignored
        for taproot key path spends.
        """
        variant = SighashVariant.parse(variant)
        self._prevalidate(index, variant)
        script_code = _script_to_bytes(redeem_script, "redeem script")
        if variant is SighashVariant.LEGACY:
            validate_redeem_script(script_code)
        elif variant is SighashVariant.SEGWIT_V0:
            validate_witness_script(script_code)
        elif variant is SighashVariant.TAPROOT_SCRIPT_PATH:
            validate_segwit_script(script_code)
        with self._signing(variant):
            digest = self._digest(variant, index, script_code, sighash, key_version)
        return digest

    def sign_input_by_script_sig(
        self,
        sig_stack: list[Union[str, bytes]],
        index: int,
        variant: Union[SighashVariant, str] = "segwit",
    ) -> None:
        """Writes a caller-built unlocking stack (hex items) to input index:
        pushed into the scriptSig for legacy, as witness items otherwise."""
        variant = SighashVariant.parse(variant)
        self._check_index(index)
        stack = [
            item if isinstance(item, bytes) else _script_to_bytes(item, "stack item")
            for item in sig_stack
        ]
        with self._signing(variant):
            # custom witness stacks may end in scripts and control blocks; only
            # the total size is checked
            slot = self._build_slot(variant, stack, False, check_items=False)
        self._store_slot(index, slot)

    #
    # reading
    #
    def is_segwit(self) -> bool:
        return any(witness is not None for witness in self._witnesses)

    def is_signed(self, index: int) -> bool:
        """True if input index holds a scriptSig or a witness"""
        self._check_index(index)
        if self._state is TxState.OPEN:
            return False
        return bool(self.inputs[index].script_sig) or self._witnesses[index] is not None

    def _to_bytes(self, include_witness: bool = True) -> bytes:
        """Serializes the transaction; witness data (with marker and flag)
        only if include_witness and any input has a witness"""
        has_witness = include_witness and self.is_segwit()

        data = struct.pack("<I", self.version)
        if has_witness:
            data += SEGWIT_MARKER_FLAG
        data += encode_varint(len(self.inputs))
        data += b"".join(txin.to_bytes() for txin in self.inputs)
        data += encode_varint(len(self.outputs))
        data += b"".join(txout.to_bytes() for txout in self.outputs)
        if has_witness:
            # inputs without a witness serialize an empty one
            data += b"".join(
                witness.to_bytes() if witness is not None else b"\x00"
                for witness in self._witnesses
            )
        data += struct.pack("<I", self.locktime)
        return data

    def get_signed_hex(self) -> str:
        """Returns the serialized transaction as signed so far"""
        self._check_finalized("serialize")
        return b_to_h(self._to_bytes())

    def get_id(self) -> str:
        """Calculates the transaction id (txid) and returns it

        The serialization for the txid does not include segwit data.
        """
        self._check_finalized("compute the id")
        return b_to_h(hash256(self._to_bytes(include_witness=False))[::-1])

    def get_wtxid(self) -> str:
        """Calculates the witness transaction id; equal to the txid for
        transactions without witnesses"""
        self._check_finalized("compute the wtxid")
        return b_to_h(hash256(self._to_bytes())[::-1])

    def get_size(self) -> int:
        """Calculates the transaction size in bytes (including witness data)"""
        self._check_finalized("compute the size")
        return len(self._to_bytes())

    def get_vsize(self) -> int:
        """Calculates the virtual transaction size (for fee calculations)

        vsize = ceil(weight / 4) where
        weight = 3 * non_witness_size + full_size
        """
        self._check_finalized("compute the vsize")
        non_witness_size = len(self._to_bytes(include_witness=False))
        full_size = len(self._to_bytes())
        weight = 3 * non_witness_size + full_size
        return (weight + 3) // 4

    def __str__(self) -> str:
        return str(
            {
                "state": self._state.value,
                "inputs": self.inputs if self.inputs else self._utxos,
                "outputs": self.outputs if self.outputs else self._targets,
                "version": self.version,
                "locktime": self.locktime,
            }
        )

    def __repr__(self) -> str:
        return self.__str__()
