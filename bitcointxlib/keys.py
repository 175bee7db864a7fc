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
    from typing import Any, Optional, Tuple, Union

import hashlib
import struct
from collections import namedtuple

import coincurve  # type: ignore
from base58check import b58encode, b58decode  # type: ignore
from ecdsa import (  # type: ignore
    BadDigestError,
    BadSignatureError,
    SECP256k1,
    SigningKey,
    VerifyingKey,
)
from ecdsa.der import UnexpectedDER  # type: ignore
from ecdsa.util import sigencode_der_canonize, sigdecode_der  # type: ignore

from bitcointxlib.address import P2pkhAddress, P2trAddress, P2wpkhAddress
from bitcointxlib.constants import (
    NETWORK_WIF_PREFIXES,
    SIGHASH_ALL,
    TAPROOT_SIGHASH_ALL,
)
from bitcointxlib.errors import PreconditionViolation
from bitcointxlib.hashfunctions import hash160, hash256
from bitcointxlib.setup import get_network
from bitcointxlib.tapscript import (
    get_tag_hashed_merkle_root,
    tap_tweak,
    tweaked_privkey,
    tweaked_pubkey,
)
from bitcointxlib.utils import (
    Secp256k1Params,
    b_to_h,
    b_to_i,
    h_to_b,
    i_to_b32,
    lift_x,
)


class PrivateKey:
    """Represents a secp256k1 private key, used for ECDSA and Schnorr.

    Attributes
    ----------
    key : SigningKey
        the ecdsa signing key of 32 bytes

    Methods
    -------
    from_wif(wif)
        creates an object from a WIF of WIFC format (string)
    from_bytes(b)
        creates an object from raw 32 bytes
    from_hex(hex_str)
        creates an object from a 64 character hex string
    to_wif(compressed=True)
        returns as WIFC (compressed) or WIF format (string)
    to_bytes()
        returns the key's raw bytes
    to_hex()
        returns the key's raw bytes as hex
    sign_digest(digest, sighash=SIGHASH_ALL)
        returns a low-R low-S DER signature followed by the sighash byte
    sign_schnorr_digest(digest, sighash=TAPROOT_SIGHASH_ALL)
        returns a BIP340 signature, plus the sighash byte unless default
    get_tweaked_key(scripts=None)
        returns the key tweaked for a taproot output committing to scripts
    get_public_key()
        returns the corresponding PublicKey object
    """

    def __init__(
        self,
        wif: Optional[str] = None,
        secret_exponent: Optional[int] = None,
        b: Optional[bytes] = None,
    ) -> None:
        """With no parameters a random key is created

        Parameters
        ----------
        wif : str, optional
            the key in WIF of WIFC format (default None)
        secret_exponent : int, optional
            used to create a specific key deterministically (default None)
        b : bytes, optional
            used to create a key from raw bytes
        """

        if not secret_exponent and not wif and not b:
            self.key = SigningKey.generate(curve=SECP256k1)
        elif wif:
            self._from_wif(wif)
        elif b:
            self._from_bytes(b)
        else:
            if not 0 < secret_exponent < Secp256k1Params._order:  # type: ignore
                raise PreconditionViolation("private key out of range")
            self.key = SigningKey.from_secret_exponent(secret_exponent, curve=SECP256k1)

    @classmethod
    def from_wif(cls, wif: str) -> PrivateKey:
        """Creates key from WIFC or WIF format key"""
        return cls(wif=wif)

    @classmethod
    def from_bytes(cls, b: bytes) -> PrivateKey:
        """Creates a key directly from 32 raw bytes"""
        return cls(b=b)

    @classmethod
    def from_hex(cls, hex_str: str) -> PrivateKey:
        """Creates a key from its 32 bytes as hex"""
        try:
            b = h_to_b(hex_str)
        except ValueError:
            raise PreconditionViolation("private key must be a hex string")
        return cls(b=b)

    def _from_bytes(self, b: bytes) -> None:
        if len(b) != 32:
            raise PreconditionViolation("Invalid key length: must be exactly 32 bytes.")
        if not 0 < b_to_i(b) < Secp256k1Params._order:
            raise PreconditionViolation("private key out of range")
        self.key = SigningKey.from_string(b, curve=SECP256k1)

    def _from_wif(self, wif: str) -> None:
        """Creates key from WIFC or WIF format key

        Check to_wif for the detailed process. From WIF is the reverse.

        Raises
        ------
        ValueError
            if the checksum is wrong or if the WIF/WIFC is not from the
            configured network.
        """

        # decode base58check get key bytes plus checksum
        data_bytes = b58decode(wif.encode("utf-8"))
        key_bytes = data_bytes[:-4]
        checksum = data_bytes[-4:]

        # verify key with checksum
        if checksum != hash256(key_bytes)[0:4]:
            raise ValueError("Checksum is wrong. Possible mistype?")

        # get network prefix and check with current setup
        network_prefix = key_bytes[:1]
        if NETWORK_WIF_PREFIXES[get_network()] != network_prefix:
            raise ValueError("Using the wrong network!")

        # remove network prefix; a trailing 0x01 marks a compressed key
        key_bytes = key_bytes[1:]
        if len(key_bytes) > 32:
            key_bytes = key_bytes[:-1]
        self._from_bytes(key_bytes)

    def to_wif(self, compressed: bool = True) -> str:
        """Returns key in WIFC or WIF string

        |  Pseudocode:
        |      network_prefix = (1 byte version number)
        |      data = network_prefix + (32 bytes number/key) [ + 0x01 if compressed ]
        |      data_hash = SHA-256( SHA-256( data ) )
        |      checksum = (first 4 bytes of data_hash)
        |      wif = Base58CheckEncode( data + checksum )
        """

        data = NETWORK_WIF_PREFIXES[get_network()] + self.to_bytes()
        if compressed is True:
            data += b"\x01"

        checksum = hash256(data)[0:4]
        wif = b58encode(data + checksum)
        return wif.decode("utf-8")

    def to_bytes(self) -> bytes:
        """Returns key's bytes"""
        return self.key.to_string()

    def to_hex(self) -> str:
        return b_to_h(self.to_bytes())

    def sign_digest(self, digest: bytes, sighash: Optional[int] = SIGHASH_ALL) -> bytes:
        """Signs a 32-byte digest (e.g. a transaction input's sighash)

        Bitcoin uses the normal DER format for transactions. The sighash byte
        is appended unless sighash is None.
        """

        # Both R and S cannot start with 0x00 (be signed as negative) unless
        # they are higher than 2^128 or start with 0x80.
        #
        # From Bitcoin core v0.17 a Low R value is required. This way
        # signatures are always 71 bytes. Because R is not mutable in the same
        # way that S is, a low R value can only be found by trying different
        # nonces (RFC6979 - deterministic nonce generation).
        #
        # For this reason we test if we get a Low R value (should be <0x80 and
        # thus not have the 0x00 prefix that specifies a negative signed
        # number) and if not we change the entropy by using extra_entropy and
        # re-sign until we get a Low R value.
        if len(digest) != 32:
            raise PreconditionViolation("digest must be 32 bytes")

        # sign - note that deterministic signing is used; the canonizing
        # encoder returns low S (BIP62), S and (order - S) being both valid
        signature = self.key.sign_digest_deterministic(
            digest, sigencode=sigencode_der_canonize, hashfunc=hashlib.sha256
        )

        # if high R then its size will be 33 bytes to include the sign
        attempt = 1
        length_r = signature[3]
        while length_r == 33:
            signature = self.key.sign_digest_deterministic(
                digest,
                extra_entropy=i_to_b32(attempt),
                sigencode=sigencode_der_canonize,
                hashfunc=hashlib.sha256,
            )
            attempt += 1
            length_r = signature[3]

        # add sighash in the signature -- as one byte!
        if sighash is not None:
            signature += struct.pack("B", sighash)
        return signature

    def sign_schnorr_digest(
        self, digest: bytes, sighash: int = TAPROOT_SIGHASH_ALL
    ) -> bytes:
        """Signs a 32-byte digest with BIP340 Schnorr

        The format is just R and S so only 64 bytes. If TAPROOT_SIGHASH_ALL
        then nothing is appended, otherwise the sighash byte (65 bytes).
        """
        if len(digest) != 32:
            raise PreconditionViolation("digest must be 32 bytes")

        # Bitcoin Core passes 32 zero bytes as auxiliary randomness
        rand_aux = bytes(32)
        sig = coincurve.PrivateKey(self.to_bytes()).sign_schnorr(digest, rand_aux)

        if sighash != TAPROOT_SIGHASH_ALL:
            sig += bytes([sighash])
        return sig

    def get_tweaked_key(self, scripts: Any = None) -> PrivateKey:
        """Returns the private key of the taproot output key that commits to
        scripts (a Script or nested list of Scripts; None for key path only)
        """
        xonly = h_to_b(self.get_public_key().to_x_only_hex())
        tweak = tap_tweak(xonly, get_tag_hashed_merkle_root(scripts))
        return PrivateKey(b=tweaked_privkey(self.to_bytes(), tweak))

    def get_public_key(self) -> PublicKey:
        """Returns the corresponding PublicKey"""
        verifying_key = b_to_h(self.key.get_verifying_key().to_string())
        return PublicKey("04" + verifying_key)


class PublicKey:
    """Represents a secp256k1 public key.

    Attributes
    ----------
    key : VerifyingKey
        the ecdsa verifying key (x, y coordinates of the curve point)

    Methods
    -------
    from_hex(hex_str)
        creates an object from a hex string in SEC or x-only format
    to_hex(compressed=True)
        returns the key as hex string (in SEC format - compressed by default)
    to_x_only_hex()
        returns the x coordinate only as hex string (needed for taproot)
    to_taproot_hex(scripts)
        returns the tweaked x coordinate and its y parity
    is_y_even()
        returns true if y coordinate is even
    to_bytes()
        returns the key's raw 64 bytes
    to_hash160()
        returns the hash160 hex string of the public key
    verify(signature, digest)
        returns true if the ECDSA signature of digest is valid for this key
    verify_schnorr(signature, digest)
        returns true if the BIP340 signature of digest is valid for this key
    get_address(compressed=True)
        returns the corresponding P2pkhAddress object
    get_segwit_address()
        returns the corresponding P2wpkhAddress object
    get_taproot_address(scripts=None)
        returns the corresponding P2trAddress object
    """

    def __init__(self, hex_str: str) -> None:
        """
        Parameters
        ----------
        hex_str : str
            the public key in hex: 65 bytes uncompressed (04), 33 bytes
            compressed (02/03) or 32 bytes x-only (taproot, even y)

        Raises
        ------
        ValueError
            If the key is malformed or not on the curve
        """
        hex_str = hex_str.strip()
        try:
            hex_bytes = h_to_b(hex_str)
        except ValueError:
            raise PreconditionViolation("public key must be a hex string")

        if len(hex_bytes) == 65 and hex_bytes[0] == 4:
            # uncompressed - SEC format: 0x04 + x + y coordinates
            self.key = VerifyingKey.from_string(hex_bytes[1:], curve=SECP256k1)
            return

        if len(hex_bytes) == 33 and hex_bytes[0] in (2, 3):
            # compressed - SEC FORMAT: 0x02|0x03 + x coordinate (if 02 then y
            # is even else y is odd)
            x_coord = b_to_i(hex_bytes[1:])
            odd = hex_bytes[0] == 3
        elif len(hex_bytes) == 32:
            # taproot x-only keys always have even y
            x_coord = b_to_i(hex_bytes)
            odd = False
        else:
            raise PreconditionViolation(
                "Invalid public key: expected 65, 33 or 32 bytes in SEC/x-only format"
            )

        try:
            y_coord = lift_x(x_coord, odd)
        except ValueError as e:
            raise PreconditionViolation(str(e))
        self.key = VerifyingKey.from_string(
            i_to_b32(x_coord) + i_to_b32(y_coord), curve=SECP256k1
        )

    @classmethod
    def from_hex(cls, hex_str: str) -> PublicKey:
        """Creates a public key from a hex string (SEC or x-only format)"""
        return cls(hex_str)

    def to_bytes(self) -> bytes:
        """Returns key's bytes"""
        return self.key.to_string()

    def to_hex(self, compressed: bool = True) -> str:
        """Returns public key as a hex string (SEC format - compressed by
        default)"""

        key_hex = b_to_h(self.key.to_string())

        if compressed:
            # check if y is even or odd (02 even, 03 odd)
            prefix = "02" if self.is_y_even() else "03"
            return prefix + key_hex[:64]

        # uncompressed starts with 04
        return "04" + key_hex

    def to_x_only_hex(self) -> str:
        """Returns the x coordinate of the public key as hex string."""
        return b_to_h(self.key.to_string())[:64]

    def to_taproot_hex(self, scripts: Any = None) -> Tuple[str, bool]:
        """Returns the tweaked x coordinate of the public key as a hex string
        and whether the tweaked key's y is odd.

        Parameters
        ==========
        scripts : Script or nested list of Scripts
            the script tree to commit to; None for key path only outputs
        """
        xonly = h_to_b(self.to_x_only_hex())
        tweak = tap_tweak(xonly, get_tag_hashed_merkle_root(scripts))
        pubkey, parity = tweaked_pubkey(xonly, tweak)
        return b_to_h(pubkey), parity == 1

    def is_y_even(self) -> bool:
        """Returns True if the y coordinate of the public key is even and
        False otherwise."""
        return self.key.to_string()[-1] % 2 == 0

    def to_hash160(self, compressed: bool = True) -> str:
        """Returns the RIPEMD( SHA256( ) ) of the public key in hex"""
        return b_to_h(hash160(h_to_b(self.to_hex(compressed))))

    def verify(self, signature: Union[str, bytes], digest: bytes) -> bool:
        """Verifies a DER signature (with or without the sighash byte) of a
        32-byte digest."""
        sig = h_to_b(signature) if isinstance(signature, str) else signature
        if len(sig) < 8 or sig[0] != 0x30:
            return False
        # the DER object's own length tells where a trailing sighash starts
        sig = sig[: sig[1] + 2]
        try:
            return self.key.verify_digest(sig, digest, sigdecode=sigdecode_der)
        except (BadSignatureError, BadDigestError, UnexpectedDER):
            return False

    def verify_schnorr(self, signature: Union[str, bytes], digest: bytes) -> bool:
        """Verifies a BIP340 signature (with or without the sighash byte) of a
        32-byte digest against this key's x coordinate."""
        sig = h_to_b(signature) if isinstance(signature, str) else signature
        if len(sig) not in (64, 65):
            return False
        xonly = coincurve.PublicKeyXOnly(h_to_b(self.to_x_only_hex()))
        return xonly.verify(sig[:64], digest)

    def get_address(self, compressed: bool = True) -> P2pkhAddress:
        """Returns the corresponding P2PKH Address (default compressed)"""
        return P2pkhAddress(hash160=self.to_hash160(compressed))

    def get_segwit_address(self) -> P2wpkhAddress:
        """Returns the corresponding P2WPKH address

        Only compressed is allowed. It is otherwise identical to normal P2PKH
        address.
        """
        return P2wpkhAddress(witness_program=self.to_hash160(True))

    def get_taproot_address(self, scripts: Any = None) -> P2trAddress:
        """Returns the corresponding P2TR address

        Taproot uses the x-only public key with even y, tweaked by the merkle
        root of scripts (a Script or a nested list of Scripts).
        """
        pubkey, is_odd = self.to_taproot_hex(scripts)
        return P2trAddress(witness_program=pubkey, is_odd=is_odd)


KeyPair = namedtuple("KeyPair", ["public_key", "private_key"])


def generate_key_pair() -> KeyPair:
    """Returns a fresh KeyPair of hex strings: the 33-byte compressed public
    key and the 32-byte private key"""
    privkey = PrivateKey()
    return KeyPair(privkey.get_public_key().to_hex(), privkey.to_hex())


def get_public_key(privkey_hex: str) -> str:
    """Returns the compressed public key (hex) of a hex private key"""
    return PrivateKey.from_hex(privkey_hex).get_public_key().to_hex()


def _digest_bytes(msg_hash: Union[str, bytes]) -> bytes:
    digest = h_to_b(msg_hash) if isinstance(msg_hash, str) else msg_hash
    if len(digest) != 32:
        raise PreconditionViolation("message hash must be 32 bytes")
    return digest


def sign(
    msg_hash: Union[str, bytes],
    privkey_hex: str,
    scheme: str = "ecdsa",
    sighash: Optional[int] = None,
) -> str:
    """Signs a 32-byte message hash and returns the signature as hex

    scheme is "ecdsa" (DER) or "schnorr" (BIP340). The sighash byte is
    appended when given (for Schnorr, only when it is not the default).
    """
    digest = _digest_bytes(msg_hash)
    privkey = PrivateKey.from_hex(privkey_hex)
    if scheme == "ecdsa":
        return b_to_h(privkey.sign_digest(digest, sighash))
    elif scheme == "schnorr":
        if sighash is None:
            sighash = TAPROOT_SIGHASH_ALL
        return b_to_h(privkey.sign_schnorr_digest(digest, sighash))
    raise PreconditionViolation("scheme must be 'ecdsa' or 'schnorr'")


def verify(
    signature_hex: str,
    msg_hash: Union[str, bytes],
    pubkey_hex: str,
    scheme: str = "ecdsa",
) -> bool:
    """Returns True if signature_hex is a valid signature of msg_hash by
    pubkey_hex. A trailing sighash byte is ignored.
    """
    digest = _digest_bytes(msg_hash)
    pubkey = PublicKey.from_hex(pubkey_hex)
    if scheme == "ecdsa":
        return pubkey.verify(signature_hex, digest)
    elif scheme == "schnorr":
        return pubkey.verify_schnorr(signature_hex, digest)
    raise PreconditionViolation("scheme must be 'ecdsa' or 'schnorr'")
