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


import logging

__version__ = "0.1.0"

from bitcointxlib.setup import setup, get_network

from bitcointxlib.errors import (
    TransactionError,
    PreconditionViolation,
    StateViolation,
    SizeLimitViolation,
)

from bitcointxlib.keys import (
    PrivateKey,
    PublicKey,
    KeyPair,
    generate_key_pair,
    get_public_key,
    sign,
    verify,
)

from bitcointxlib.address import (
    Address,
    P2pkhAddress,
    P2shAddress,
    SegwitAddress,
    P2wpkhAddress,
    P2wshAddress,
    P2trAddress,
    address_to_script_pub_key,
    script_pub_key_to_address,
)

from bitcointxlib.script import (
    Script,
    single_sig_script,
    multi_sig_script,
    time_lock_script,
    relative_lock_value,
    hash_lock_script,
    data_script,
    script_hash,
)

from bitcointxlib.tapscript import (
    ControlBlock,
    tap_tag,
    tap_leaf_hash,
    tap_branch_hash,
    tap_tweak,
    tweaked_pubkey,
    tweaked_privkey,
    tap_sighash,
    control_block,
    get_tag_hashed_merkle_root,
)

from bitcointxlib.sighash import SighashVariant

from bitcointxlib.transactions import (
    Transaction,
    TxState,
    Utxo,
    Target,
    TxInput,
    TxOutput,
    TxWitnessInput,
    relative_lock_sequence,
)

# silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'setup',
    'get_network',
    'TransactionError',
    'PreconditionViolation',
    'StateViolation',
    'SizeLimitViolation',
    'PrivateKey',
    'PublicKey',
    'KeyPair',
    'generate_key_pair',
    'get_public_key',
    'sign',
    'verify',
    'Address',
    'P2pkhAddress',
    'P2shAddress',
    'SegwitAddress',
    'P2wpkhAddress',
    'P2wshAddress',
    'P2trAddress',
    'address_to_script_pub_key',
    'script_pub_key_to_address',
    'Script',
    'single_sig_script',
    'multi_sig_script',
    'time_lock_script',
    'relative_lock_value',
    'hash_lock_script',
    'data_script',
    'script_hash',
    'ControlBlock',
    'tap_tag',
    'tap_leaf_hash',
    'tap_branch_hash',
    'tap_tweak',
    'tweaked_pubkey',
    'tweaked_privkey',
    'tap_sighash',
    'control_block',
    'get_tag_hashed_merkle_root',
    'SighashVariant',
    'Transaction',
    'TxState',
    'Utxo',
    'Target',
    'TxInput',
    'TxOutput',
    'TxWitnessInput',
    'relative_lock_sequence',
]
