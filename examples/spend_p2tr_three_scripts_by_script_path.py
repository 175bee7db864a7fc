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
from bitcointxlib.script import Script
from bitcointxlib.tapscript import ControlBlock


def main():
    # always remember to setup the network
    setup("testnet")

    # the internal key of the taproot output
    priv = PrivateKey("cT33CWKwcV8afBs5NYzeSzeSoGETtAB8izjDjMEuGqyqPoF7fbQR")
    pub = priv.get_public_key()

    # three leaves, each a single key; the tree is ((A, B), C)
    leaf_keys = [
        PrivateKey("cSW2kQbqC9zkqagw8oTYKFTozKuZ214zd6CMTDs4V32cMfH3dgKa"),
        PrivateKey("cSv48xapaqy7fPs8VvoSnxNBNA2jpjcuURRqUENu3WVq6Eh4U3JU"),
        PrivateKey("cRkZPNnn3jdr64o3PDxNHG68eowDfuCdcyL6nVL4n3czvunuvryC"),
    ]
    leaves = [
        Script([key.get_public_key().to_x_only_hex(), "OP_CHECKSIG"])
        for key in leaf_keys
    ]
    scripts = [[leaves[0], leaves[1]], leaves[2]]

    from_address = pub.get_taproot_address(scripts)
    print("From address:", from_address.to_string())

    utxo = Utxo(
        "9b8a01d0f333b2440d4d305d26641e14e0e1932ebc3c4f04387c0820fada87d3",
        0,
        to_satoshis(0.000035),
        script=from_address.to_script_pub_key().to_hex(),
    )
    tx = Transaction(version=2)
    tx.disable_locktime()
    tx.add_input(utxo)
    to_address = (
        PrivateKey("cNxX8M7XU8VNa5ofd8yk1eiZxaxNrQQyb7xNpwAmsrzEhcVwtCjs")
        .get_public_key()
        .get_taproot_address()
    )
    tx.add_output(Target(to_satoshis(0.00003), address=to_address.to_string()))

    # spend leaf B (index 1): the signature commits to the leaf script
    leaf_index = 1
    digest = tx.get_input_hash_to_sign(leaves[leaf_index], 0, "tapscript")
    sig = leaf_keys[leaf_index].sign_schnorr_digest(digest)

    # the control block proves the leaf is part of the committed tree
    control_block = ControlBlock(
        pub.to_x_only_hex(), scripts, leaf_index, is_odd=from_address.is_odd()
    )
    tx.sign_input_by_script_sig(
        [sig, leaves[leaf_index].to_hex(), control_block.to_hex()], 0, "tapscript"
    )

    print("\nRaw signed transaction:\n" + tx.get_signed_hex())
    print("\nTxId:", tx.get_id())
    print("\nTxwId:", tx.get_wtxid())
    print("\nvSize:", tx.get_vsize())


if __name__ == "__main__":
    main()
