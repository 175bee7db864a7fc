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
from bitcointxlib.script import hash_lock_script, single_sig_script, time_lock_script


def main():
    # always remember to setup the network
    setup("testnet")

    sk = PrivateKey("cTALNpTpRbbxTCJ2A5Vq88UxT44w1PE2cYqiB3n4hRvzyCev1Wwo")
    pubkey = sk.get_public_key().to_hex()

    # funds locked until block 2000000 and to whoever knows the secret;
    # the P2WSH witness script is <timelock> <hashlock> <P2PKH>
    secret = "b5ec1e7"
    lock_height = 2000000
    tls = time_lock_script(lock_height)
    witness_script = (
        tls + hash_lock_script(secret) + single_sig_script(pubkey, "segwit")
    )
    print("\nHTLC address:\n" + P2wshAddress.from_script(witness_script).to_string())

    utxo = Utxo(
        "a8f2d5e1b1f3a1c4e2d0b9c8a7f6e5d4c3b2a1908f7e6d5c4b3a291807f6e5d4",
        0,
        to_satoshis(0.002),
    )
    tx = Transaction(version=2)
    tx.add_input(utxo)
    tx.add_output(Target(to_satoshis(0.0019), address="n4bkvTyU1dVdzsrhWBqBw8fEMbHjJvtmJR"))
    # CHECKLOCKTIMEVERIFY needs nLockTime >= the script's lock height
    tx.set_locktime(lock_height)

    # the odd length secret is padded to "b5ec1e70" both in the hash lock
    # and in the witness
    tx.sign_input(sk, 0, "segwit", time_lock_script=tls, secret_hex=secret)

    print("\nRaw signed transaction:\n" + tx.get_signed_hex())
    print("\nTxId:", tx.get_id())


if __name__ == "__main__":
    main()
