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

    # the UTXO we spend (contained 0.4 tBTC); legacy inputs do not need the
    # amount for signing but every Utxo carries it
    utxo = Utxo(
        "fb48f4e23bf6ddf606714141ac78c3e921c8c0bebeb7c8abb2c799e9ff96ce6c",
        0,
        to_satoshis(0.4),
    )

    tx = Transaction()
    tx.add_input(utxo)
    tx.add_output(Target(to_satoshis(0.1), address="n4bkvTyU1dVdzsrhWBqBw8fEMbHjJvtmJR"))
    # change - remaining 0.01 is tx fees
    tx.add_output(Target(to_satoshis(0.29), address="mmYNBho9BWQB2dSniP1NJvnPoj5EVWw89w"))

    # the key of the address that holds the UTXO; signing finalizes the
    # transaction so no inputs or outputs can be added after this point
    sk = PrivateKey("cRvyLwCPLU88jsyj94L7iJjQX5C2f8koG4G2gevN4BeSGcEvfKe9")
    tx.sign_input(sk, 0, "legacy")

    # print raw signed transaction ready to be broadcasted
    print("\nRaw signed transaction:\n" + tx.get_signed_hex())
    print("\nTxId:", tx.get_id())

    # print the size of the final transaction
    print("\nSigned transaction size (in bytes):\n" + str(tx.get_size()))


if __name__ == "__main__":
    main()
