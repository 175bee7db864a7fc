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


import unittest

from bitcointxlib.setup import setup
from bitcointxlib.constants import SIGHASH_ALL, SIGHASH_SINGLE
from bitcointxlib.errors import PreconditionViolation
from bitcointxlib.address import P2trAddress
from bitcointxlib.hashfunctions import sha256
from bitcointxlib.keys import (
    PrivateKey,
    PublicKey,
    generate_key_pair,
    get_public_key,
    sign,
    verify,
)
from bitcointxlib.tapscript import tap_tweak, tweaked_privkey, tweaked_pubkey
from bitcointxlib.utils import Secp256k1Params, b_to_h, b_to_i, h_to_b


class TestPrivateKeys(unittest.TestCase):
    def setUp(self):
        setup("mainnet")
        self.key_wifc = "KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWn"
        self.key_wif = "5HpHagT65TZzG1PH3CSu63k8DbpvD8s5ip4nEB3kEsreAnchuDf"
        self.key_bytes = (
            b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
            b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x01"
        )
        self.public_key_bytes = (
            b"y\xbef~\xf9\xdc\xbb\xacU\xa0b\x95\xce\x87\x0b\x07\x02\x9b\xfc\xdb-\xce("
            b"\xd9Y\xf2\x81[\x16\xf8\x17\x98H:\xdaw&\xa3\xc4e]\xa4\xfb\xfc\x0e\x11"
            b"\x08\xa8\xfd\x17\xb4H\xa6\x85T\x19\x9cG\xd0\x8f\xfb\x10\xd4\xb8"
        )

    def test_wif_creation(self):
        p = PrivateKey(self.key_wifc)
        self.assertEqual(p.to_bytes(), self.key_bytes)
        self.assertEqual(p.to_wif(compressed=False), self.key_wif)

    def test_uncompressed_wif_creation(self):
        p = PrivateKey.from_wif(self.key_wif)
        self.assertEqual(p.to_bytes(), self.key_bytes)

    def test_exponent_creation(self):
        p = PrivateKey(secret_exponent=1)
        self.assertEqual(p.to_bytes(), self.key_bytes)
        self.assertEqual(p.to_wif(compressed=False), self.key_wif)
        self.assertEqual(p.to_wif(), self.key_wifc)

    def test_hex_creation(self):
        p = PrivateKey.from_hex("00" * 31 + "01")
        self.assertEqual(p.to_hex(), "00" * 31 + "01")
        self.assertEqual(PrivateKey.from_bytes(self.key_bytes).to_wif(), self.key_wifc)

    def test_public_key(self):
        p = PrivateKey(secret_exponent=1)
        self.assertEqual(p.get_public_key().to_bytes(), self.public_key_bytes)

    def test_wrong_network(self):
        with self.assertRaises(ValueError):
            PrivateKey("cTALNpTpRbbxTCJ2A5Vq88UxT44w1PE2cYqiB3n4hRvzyCev1Wwo")

    def test_wrong_checksum(self):
        with self.assertRaises(ValueError):
            PrivateKey(self.key_wifc[:-1] + "o")

    def test_out_of_range(self):
        with self.assertRaises(PreconditionViolation):
            PrivateKey.from_hex("00" * 32)
        with self.assertRaises(PreconditionViolation):
            PrivateKey.from_hex("%064x" % Secp256k1Params._order)
        with self.assertRaises(PreconditionViolation):
            PrivateKey.from_bytes(b"\x01" * 31)
        with self.assertRaises(PreconditionViolation):
            PrivateKey.from_hex("zz" * 32)


class TestPublicKeys(unittest.TestCase):
    def setUp(self):
        setup("mainnet")
        self.public_key_hexc = (
            "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
        )
        self.public_key_hex = (
            "0479be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
            "483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8"
        )
        self.address = "1EHNa6Q4Jz2uvNExL497mE43ikXhwF6kZm"
        self.addressc = "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"

    def test_pubkey_creation(self):
        pub1 = PublicKey(self.public_key_hex)
        pub2 = PublicKey(self.public_key_hexc)
        pub3 = PublicKey(self.public_key_hexc[2:])
        self.assertEqual(pub1.to_bytes(), pub2.to_bytes())
        self.assertEqual(pub1.to_bytes(), pub3.to_bytes())

    def test_odd_pubkey_creation(self):
        # 03 prefixed keys are lifted to the odd y coordinate
        odd = PublicKey(
            "03a957ff7ead882e4c95be2afa684ab0e84447149883aba60c067adc054472785b"
        )
        self.assertFalse(odd.is_y_even())
        self.assertEqual(
            odd.to_hex(),
            "03a957ff7ead882e4c95be2afa684ab0e84447149883aba60c067adc054472785b",
        )
        self.assertTrue(PublicKey(self.public_key_hexc).is_y_even())

    def test_pubkey_uncompressed(self):
        pub = PublicKey.from_hex(self.public_key_hex)
        self.assertEqual(pub.to_hex(compressed=False), self.public_key_hex)
        self.assertEqual(pub.to_hex(), self.public_key_hexc)

    def test_get_addresses(self):
        pub = PublicKey(self.public_key_hex)
        self.assertEqual(pub.get_address(compressed=False).to_string(), self.address)
        self.assertEqual(pub.get_address().to_string(), self.addressc)

    def test_pubkey_to_hash160(self):
        pub = PublicKey(self.public_key_hex)
        self.assertEqual(pub.get_address().to_hash160(), pub.to_hash160())
        self.assertEqual(pub.to_hash160(), "751e76e8199196d454941c45d1b3a323f1433bd6")

    def test_pubkey_x_only(self):
        pub = PublicKey(self.public_key_hex)
        self.assertEqual(pub.to_x_only_hex(), self.public_key_hex[2:66])

    def test_invalid_pubkeys(self):
        with self.assertRaises(PreconditionViolation):
            PublicKey("02" + "11" * 30)
        with self.assertRaises(PreconditionViolation):
            PublicKey("not hex")
        with self.assertRaises(PreconditionViolation):
            PublicKey("05" + self.public_key_hexc[2:])


class TestTaprootKeys(unittest.TestCase):
    def setUp(self):
        setup("testnet")
        self.priv_even = PrivateKey.from_wif(
            "cTLeemg1bCXXuRctid7PygEn7Svxj4zehjTcoayrbEYPsHQo248w"
        )
        self.correct_even_pk = (
            "0271fe85f75e97d22e74c2dd6425e843def8b662b928f24f724ae6a2fd0c4e0419"
        )
        self.correct_even_tr_addr = (
            "tb1pk426x6qvmncj5vzhtp5f2pzhdu4qxsshszswga8ea6sycj9nulmsu7syz0"
        )
        self.correct_even_tweaked_pk = (
            "b555a3680cdcf12a305758689504576f2a03421780a0e474f9eea04c48b3e7f7"
        )

        self.priv_odd = PrivateKey.from_wif(
            "cRPxBiKrJsH94FLugmiL4xnezMyoFqGcf4kdgNXGuypNERhMK6AT"
        )
        self.correct_odd_pk = (
            "03a957ff7ead882e4c95be2afa684ab0e84447149883aba60c067adc054472785b"
        )
        self.correct_odd_tr_addr = (
            "tb1pdr8q4tuqqeglxxhkxl3trxt0dy5jrnaqvg0ddwu7plraxvntp8dqv8kvyq"
        )
        self.correct_odd_tweaked_pk = (
            "68ce0aaf800651f31af637e2b1996f692921cfa0621ed6bb9e0fc7d3326b09da"
        )

    def test_even_taproot_address(self):
        pubkey = self.priv_even.get_public_key()
        self.assertEqual(pubkey.to_hex(), self.correct_even_pk)
        addr = pubkey.get_taproot_address()
        self.assertEqual(addr.to_witness_program(), self.correct_even_tweaked_pk)
        self.assertEqual(addr.to_string(), self.correct_even_tr_addr)

    def test_odd_taproot_address(self):
        pubkey = self.priv_odd.get_public_key()
        self.assertEqual(pubkey.to_hex(), self.correct_odd_pk)
        addr = pubkey.get_taproot_address()
        self.assertEqual(addr.to_witness_program(), self.correct_odd_tweaked_pk)
        self.assertEqual(addr.to_string(), self.correct_odd_tr_addr)

    def test_tweaked_key_matches_address(self):
        for priv in (self.priv_even, self.priv_odd):
            tweaked = priv.get_tweaked_key()
            addr = priv.get_public_key().get_taproot_address()
            self.assertEqual(
                tweaked.get_public_key().to_x_only_hex(), addr.to_witness_program()
            )


class TestSignAndVerify(unittest.TestCase):
    def setUp(self):
        setup("testnet")
        self.priv = PrivateKey("cTALNpTpRbbxTCJ2A5Vq88UxT44w1PE2cYqiB3n4hRvzyCev1Wwo")
        self.pub = self.priv.get_public_key()
        self.digest = sha256(b"The test!")
        self.other_digest = sha256(b"Another test!")

    def test_ecdsa_low_r_low_s(self):
        sig = self.priv.sign_digest(self.digest)
        self.assertEqual(sig[-1], SIGHASH_ALL)
        length_r = sig[3]
        self.assertLessEqual(length_r, 32)
        s = sig[6 + length_r : -1]
        self.assertLessEqual(b_to_i(s), Secp256k1Params._order // 2)

    def test_ecdsa_is_deterministic(self):
        self.assertEqual(
            self.priv.sign_digest(self.digest), self.priv.sign_digest(self.digest)
        )

    def test_ecdsa_sign_and_verify(self):
        sig = self.priv.sign_digest(self.digest, SIGHASH_SINGLE)
        self.assertEqual(sig[-1], SIGHASH_SINGLE)
        self.assertTrue(self.pub.verify(sig, self.digest))
        self.assertTrue(self.pub.verify(sig[:-1], self.digest))
        self.assertFalse(self.pub.verify(sig, self.other_digest))
        self.assertFalse(self.pub.verify(b"\x30\x00", self.digest))

    def test_schnorr_bip340_vector(self):
        # first test vector of BIP340
        priv = PrivateKey(secret_exponent=3)
        self.assertEqual(
            priv.get_public_key().to_x_only_hex(),
            "f9308a019258c31049344f85f89d5229b531c845836f99b08601f113bce036f9",
        )
        sig = priv.sign_schnorr_digest(bytes(32))
        self.assertEqual(
            b_to_h(sig),
            "e907831f80848d1069a5371b402410364bdf1c5f8307b0084c55f1ce2dca8215"
            "25f66a4a85ea8b71e482a74f382d2ce5ebeee8fdb2172f477df4900d310536c0",
        )

    def test_schnorr_sign_and_verify(self):
        sig = self.priv.sign_schnorr_digest(self.digest)
        self.assertEqual(len(sig), 64)
        self.assertTrue(self.pub.verify_schnorr(sig, self.digest))
        self.assertFalse(self.pub.verify_schnorr(sig, self.other_digest))

        sig_single = self.priv.sign_schnorr_digest(self.digest, SIGHASH_SINGLE)
        self.assertEqual(len(sig_single), 65)
        self.assertEqual(sig_single[-1], SIGHASH_SINGLE)
        self.assertTrue(self.pub.verify_schnorr(sig_single, self.digest))

    def test_module_sign_and_verify(self):
        privkey_hex = self.priv.to_hex()
        pubkey_hex = get_public_key(privkey_hex)
        self.assertEqual(pubkey_hex, self.pub.to_hex())
        for scheme in ("ecdsa", "schnorr"):
            sig = sign(b_to_h(self.digest), privkey_hex, scheme)
            self.assertTrue(verify(sig, self.digest, pubkey_hex, scheme))
            self.assertFalse(verify(sig, self.other_digest, pubkey_hex, scheme))
        with self.assertRaises(PreconditionViolation):
            sign(self.digest, privkey_hex, "rsa")
        with self.assertRaises(PreconditionViolation):
            sign(self.digest[:31], privkey_hex)

    def test_generate_key_pair(self):
        pair = generate_key_pair()
        self.assertEqual(len(h_to_b(pair.public_key)), 33)
        self.assertEqual(len(h_to_b(pair.private_key)), 32)
        self.assertEqual(get_public_key(pair.private_key), pair.public_key)
        self.assertNotEqual(generate_key_pair().private_key, pair.private_key)

    def test_taproot_key_path_tweaked_vs_untweaked(self):
        xonly = self.pub.to_x_only_hex()
        tweak = tap_tweak(xonly)
        output_key, _ = tweaked_pubkey(xonly, tweak)
        address = P2trAddress(witness_program=b_to_h(output_key))

        tweaked_priv = b_to_h(tweaked_privkey(self.priv.to_bytes(), tweak))
        sig = sign(self.digest, tweaked_priv, "schnorr")
        self.assertTrue(
            verify(sig, self.digest, address.to_witness_program(), "schnorr")
        )

        untweaked_sig = sign(self.digest, self.priv.to_hex(), "schnorr")
        self.assertFalse(
            verify(untweaked_sig, self.digest, address.to_witness_program(), "schnorr")
        )


if __name__ == "__main__":
    unittest.main()
