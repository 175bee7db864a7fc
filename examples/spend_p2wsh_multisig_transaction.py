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
from bitcointxlib.address import P2wshAddress
from bitcointxlib.script import multi_sig_script


def main():
    # always remember to setup the network
    setup("testnet")

    sk1 = PrivateKey("cTALNpTpRbbxTCJ2A5Vq88UxT44w1PE2cYqiB3n4hRvzyCev1Wwo")
    sk2 = PrivateKey("cRvyLwCPLU88jsyj94L7iJjQX5C2f8koG4G2gevN4BeSGcEvfKe9")
    pubkeys = [sk1.get_public_key().to_hex(), sk2.get_public_key().to_hex()]

    # 2-of-2 multisig witness script and its P2WSH address
    witness_script = multi_sig_script(2, pubkeys, "segwit")
    p2wsh_addr = P2wshAddress.from_script(witness_script)
    print("\nP2WSH address:\n" + p2wsh_addr.to_string())

    # the amount is part of the segwit signature message
    utxo = Utxo(
        "6233aca9f2d6165da2d7b4e35d73b039a22b53f58ce5af87dddee7682be937ea",
        0,
        to_satoshis(0.0097),
    )
    tx = Transaction()
    tx.add_input(utxo)
    tx.add_output(Target(to_satoshis(0.0096), address="n4bkvTyU1dVdzsrhWBqBw8fEMbHjJvtmJR"))

    # the signatures must follow the order of the public keys in the script
    tx.multi_sign_input(pubkeys, [sk1, sk2], 0, "segwit")

    print("\nRaw signed transaction:\n" + tx.get_signed_hex())
    print("\nTxId:", tx.get_id())
    print("\nWTxId:", tx.get_wtxid())
    print("\nvSize:", tx.get_vsize())


if __name__ == "__main__":
    main()
