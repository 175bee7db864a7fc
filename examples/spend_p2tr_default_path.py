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



from bitcointxlib.setup import setup
from bitcointxlib.utils import to_satoshis
from bitcointxlib.transactions import Transaction, Utxo, Target
from bitcointxlib.keys import PrivateKey


def main():
    # always remember to setup the network
    setup("testnet")

    priv = PrivateKey("cV3R88re3AZSBnWhBBNdiCKTfwpMKkYYjdiR13HQzsU7zoRNX7JL")
    pub = priv.get_public_key()
    from_address = pub.get_taproot_address()
    print("From address:", from_address.to_string())

    # taproot signs the amounts and scriptPubKeys of all the inputs so every
    # Utxo needs its script
    utxo = Utxo(
        "7b6412a0eed56338731e83c606f13ebb7a3756b3e4e1dbbe43a7db8d09106e56",
        1,
        to_satoshis(0.00005),
        script=from_address.to_script_pub_key().to_hex(),
    )

    tx = Transaction(version=2)
    tx.disable_locktime()
    tx.add_input(utxo)
    tx.add_output(Target(to_satoshis(0.00004), address="mtVHHCqCECGwiMbMoZe8ayhJHuTdDbYWdJ"))

    # key path spends sign with the tweaked private key of the output key
    tx.sign_input(priv.get_tweaked_key(), 0, "taproot")

    print("\nRaw signed transaction:\n" + tx.get_signed_hex())
    print("\nTxId:", tx.get_id())
    print("\nTxwId:", tx.get_wtxid())
    print("\nSize:", tx.get_size())
    print("\nvSize:", tx.get_vsize())


if __name__ == "__main__":
    main()
