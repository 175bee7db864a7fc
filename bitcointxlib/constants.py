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

NETWORK_WIF_PREFIXES = {
    "mainnet": b"\x80",
    "signet": b"\xef",
    "testnet": b"\xef",
    "regtest": b"\xef",
}

NETWORK_P2PKH_PREFIXES = {
    "mainnet": b"\x00",
    "signet": b"\x6f",
    "testnet": b"\x6f",
    "regtest": b"\x6f",
}

NETWORK_P2SH_PREFIXES = {
    "mainnet": b"\x05",
    "signet": b"\xc4",
    "testnet": b"\xc4",
    "regtest": b"\xc4",
}

NETWORK_SEGWIT_PREFIXES = {
    "mainnet": "bc",
    "signet": "tb",
    "testnet": "tb",
    "regtest": "bcrt",
}


# Constants for address types
P2PKH_ADDRESS = "p2pkh"
P2SH_ADDRESS = "p2sh"
P2WPKH_ADDRESS_V0 = "p2wpkhv0"
P2WSH_ADDRESS_V0 = "p2wshv0"
P2TR_ADDRESS_V1 = "p2trv1"


# Constants related to transaction signature types
TAPROOT_SIGHASH_ALL = 0x00
SIGHASH_ALL = 0x01
SIGHASH_NONE = 0x02
SIGHASH_SINGLE = 0x03
SIGHASH_ANYONECANPAY = 0x80


# Transaction defaults -- all little-endian as serialized
DEFAULT_TX_VERSION = 1
DEFAULT_TX_LOCKTIME = 0

EMPTY_TX_SEQUENCE = b"\x00\x00\x00\x00"
# signals RBF (BIP125) while still enabling nLockTime
DEFAULT_TX_SEQUENCE = b"\xfd\xff\xff\xff"
# disables RBF but keeps nLockTime enforced
NO_RBF_TX_SEQUENCE = b"\xfe\xff\xff\xff"
# final sequence, disables nLockTime
FINAL_TX_SEQUENCE = b"\xff\xff\xff\xff"

SEGWIT_MARKER_FLAG = b"\x00\x01"


# Taproot
LEAF_VERSION_TAPSCRIPT = 0xC0
TAPROOT_KEY_VERSION = 0x00
CODESEPARATOR_NONE = b"\xff\xff\xff\xff"


# Timelocks - values at or above are interpreted as UNIX timestamps (BIP65)
LOCKTIME_THRESHOLD = 500000000

# Relative timelocks (BIP68, BIP112): 16-bit value, in blocks or in units of
# 512 seconds when the type flag is set
MAX_RELATIVE_LOCK_BLOCKS = 0xFFFF
MAX_RELATIVE_LOCK_SECONDS = 33554430
SEQUENCE_LOCKTIME_GRANULARITY = 512
SEQUENCE_LOCKTIME_TYPE_FLAG = 1 << 22


# Size limits (bytes unless stated otherwise)
MAX_SCRIPT_SIG_SIZE = 1650
MAX_WITNESS_SCRIPT_SIZE = 3600
MAX_WITNESS_ITEM_SIZE = 520
MAX_WITNESS_SIZE = 10000
MAX_REDEEM_SCRIPT_SIZE = 520
MAX_SEGWIT_SCRIPT_SIZE = 10000
MAX_OUTPUT_SCRIPT_SIZE = 10000
MAX_DATA_SIZE = 80
MAX_SECRET_SIZE = 1650

# key count limits of multisig scripts
MAX_LEGACY_MULTISIG_KEYS = 15
MAX_SEGWIT_MULTISIG_KEYS = 20
MAX_TAPROOT_MULTISIG_KEYS = 999


# Monetary constants
SATOSHIS_PER_BITCOIN = 100000000
MAX_UINT32 = 0xFFFFFFFF
MAX_UINT64 = 0xFFFFFFFFFFFFFFFF
