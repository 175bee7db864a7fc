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
    from typing import Optional, Union

import re
from abc import ABC, abstractmethod

from base58check import b58encode, b58decode  # type: ignore
from bitcointx.segwit_addr import encode as bech32_encode  # type: ignore
from bitcointx.segwit_addr import decode as bech32_decode  # type: ignore

from bitcointxlib.constants import (
    NETWORK_P2PKH_PREFIXES,
    NETWORK_P2SH_PREFIXES,
    NETWORK_SEGWIT_PREFIXES,
    P2PKH_ADDRESS,
    P2SH_ADDRESS,
    P2TR_ADDRESS_V1,
    P2WPKH_ADDRESS_V0,
    P2WSH_ADDRESS_V0,
)
from bitcointxlib.hashfunctions import hash256
from bitcointxlib.script import Script, script_hash
from bitcointxlib.setup import get_network, networks
from bitcointxlib.utils import b_to_h, h_to_b, is_hex


def _base58check_encode(data: bytes) -> str:
    """data || first 4 bytes of HASH256(data), base58 encoded"""
    checksum = hash256(data)[0:4]
    return b58encode(data + checksum).decode("utf-8")


def _base58check_decode(address: str) -> bytes:
    """Returns version byte plus payload; raises ValueError on a bad checksum"""
    digits_58_pattern = r"[^123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz]"
    if re.search(digits_58_pattern, address):
        raise ValueError("Invalid base58 character in address '{}'".format(address))

    data_checksum = b58decode(address.encode("utf-8"))
    data = data_checksum[:-4]
    checksum = data_checksum[-4:]
    if len(data) == 0 or hash256(data)[0:4] != checksum:
        raise ValueError("Checksum is wrong. Possible mistype?")
    return data


def _segwit_decode(address: str) -> tuple[int, bytes]:
    """Tries the bech32 hrp of every network; returns (version, program)"""
    for hrp in set(NETWORK_SEGWIT_PREFIXES.values()):
        if not address.lower().startswith(hrp + "1"):
            continue
        witness_version, witness_program = bech32_decode(hrp, address)
        if witness_version is not None:
            return witness_version, bytes(witness_program)
    raise ValueError("Invalid segwit address '{}'".format(address))


class Address(ABC):
    """Represents a Base58Check encoded Bitcoin address

    Attributes
    ----------
    hash160 : str
        the hash160 string representation of the address; hash160 represents
        two consequtive hashes of the public key or the redeem script, first
        a SHA-256 and then an RIPEMD-160

    Methods
    -------
    from_address(address)
        instantiates an object from address string encoding
    from_hash160(hash160_str)
        instantiates an object from a hash160 hex string
    from_script(redeem_script)
        instantiates an object from a redeem_script
    to_string()
        returns the address's string encoding for the configured network
    to_hash160()
        returns the address's hash160 hex string representation
    to_script_pub_key()
        returns the locking script of the address

    Raises
    ------
    TypeError
        No parameters passed
    ValueError
        If an invalid address or hash160 is provided.
    """

    @abstractmethod
    def __init__(
        self,
        address: Optional[str] = None,
        hash160: Optional[str] = None,
        script: Optional[Script] = None,
    ) -> None:
        if hash160:
            if not is_hex(hash160) or len(hash160) != 40:
                raise ValueError("Invalid value for parameter hash160.")
            self.hash160 = hash160.lower()
        elif address:
            self.hash160 = self._address_to_hash160(address)
        elif script is not None:
            if not isinstance(script, Script):
                raise TypeError("A Script class is required.")
            self.hash160 = b_to_h(script_hash(script, "legacy"))
        else:
            raise TypeError("A valid address or hash160 is required.")

    @classmethod
    def from_address(cls, address: str) -> Address:
        """Creates an address object from an address string"""
        return cls(address=address)

    @classmethod
    def from_hash160(cls, hash160: str) -> Address:
        """Creates an address object from a hash160 string"""
        return cls(hash160=hash160)

    @classmethod
    def from_script(cls, script: Script) -> Address:
        """Creates an address object from a Script object"""
        return cls(script=script)

    def _address_to_hash160(self, address: str) -> str:
        """Base58Check decodes the address and checks its version byte against
        the prefixes of all networks for this address type.
        """
        data = _base58check_decode(address)
        if len(data) != 21 or data[:1] not in self._prefixes().values():
            raise ValueError("Invalid value for parameter address.")
        return b_to_h(data[1:])

    @abstractmethod
    def _prefixes(self) -> dict[str, bytes]:
        pass

    @abstractmethod
    def get_type(self) -> str:
        pass

    def to_hash160(self) -> str:
        """Returns as hash160 hex string"""
        return self.hash160

    def to_string(self, network: Optional[str] = None) -> str:
        """Returns as address string for network (default the configured one)

        |  Pseudocode:
        |      network_prefix = (1 byte version number)
        |      data = network_prefix + hash160_bytes
        |      data_hash = SHA-256( SHA-256( data ) )
        |      checksum = (first 4 bytes of data_hash)
        |      address_bytes = Base58CheckEncode( data + checksum )
        """
        data = self._prefixes()[network or get_network()] + h_to_b(self.hash160)
        return _base58check_encode(data)

    @abstractmethod
    def to_script_pub_key(self) -> Script:
        pass

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.get_type() == other.get_type() and self.hash160 == other.hash160

    def __str__(self) -> str:
        return self.to_string()


class P2pkhAddress(Address):
    """Encapsulates a P2PKH address.

    Check Address class for details
    """

    def __init__(
        self, address: Optional[str] = None, hash160: Optional[str] = None
    ) -> None:
        super().__init__(address=address, hash160=hash160)

    def _prefixes(self) -> dict[str, bytes]:
        return NETWORK_P2PKH_PREFIXES

    def to_script_pub_key(self) -> Script:
        """Returns the scriptPubKey (P2PKH) that corresponds to this address"""
        return Script(
            ["OP_DUP", "OP_HASH160", self.to_hash160(), "OP_EQUALVERIFY", "OP_CHECKSIG"]
        )

    def get_type(self) -> str:
        return P2PKH_ADDRESS


class P2shAddress(Address):
    """Encapsulates a P2SH address.

    Check Address class for details
    """

    def __init__(
        self,
        address: Optional[str] = None,
        hash160: Optional[str] = None,
        script: Optional[Script] = None,
    ) -> None:
        super().__init__(address=address, hash160=hash160, script=script)

    def _prefixes(self) -> dict[str, bytes]:
        return NETWORK_P2SH_PREFIXES

    def to_script_pub_key(self) -> Script:
        """Returns the scriptPubKey (P2SH) that corresponds to this address"""
        return Script(["OP_HASH160", self.to_hash160(), "OP_EQUAL"])

    def get_type(self) -> str:
        return P2SH_ADDRESS


class SegwitAddress(ABC):
    """Represents a Bitcoin segwit address (Bech32 for v0, Bech32m for v1)

    Attributes
    ----------
    witness_program : str
        for segwit v0 this is the hash of either the public key (P2WPKH) or
        the witness script (P2WSH)

        for segwit v1 (aka taproot) this is the tweaked x-only public key

    Methods
    -------
    from_address(address)
        instantiates an object from address string encoding
    from_witness_program(hash_str)
        instantiates an object from a witness program hex string
    to_string()
        returns the address's string encoding for the configured network
    to_witness_program()
        returns the address's witness program hex string

    Raises
    ------
    TypeError
        No parameters passed
    ValueError
        If an invalid address or witness program is provided.
    """

    segwit_num_version = 0
    program_length = 20

    @abstractmethod
    def __init__(
        self,
        address: Optional[str] = None,
        witness_program: Optional[str] = None,
    ) -> None:
        if witness_program:
            if not is_hex(witness_program):
                raise ValueError("Invalid value for parameter witness_program.")
            program = h_to_b(witness_program)
        elif address:
            version, program = _segwit_decode(address)
            if version != self.segwit_num_version:
                raise TypeError("Invalid segwit version.")
        else:
            raise TypeError("A valid address or witness program is required.")

        if len(program) != self.program_length:
            raise ValueError(
                "Witness program must be {} bytes, got {}".format(
                    self.program_length, len(program)
                )
            )
        self.witness_program = b_to_h(program)

    @classmethod
    def from_address(cls, address: str) -> SegwitAddress:
        """Creates an address object from an address string"""
        return cls(address=address)

    @classmethod
    def from_witness_program(cls, witness_program: str) -> SegwitAddress:
        """Creates an address object from a witness program hex string"""
        return cls(witness_program=witness_program)

    def to_witness_program(self) -> str:
        """Returns witness program as hex string"""
        return self.witness_program

    def to_string(self, network: Optional[str] = None) -> str:
        """Returns as address string for network (default the configured one)"""
        address = bech32_encode(
            NETWORK_SEGWIT_PREFIXES[network or get_network()],
            self.segwit_num_version,
            h_to_b(self.witness_program),
        )
        if address is None:
            raise ValueError("Could not encode witness program")
        return address

    @abstractmethod
    def get_type(self) -> str:
        pass

    def to_script_pub_key(self) -> Script:
        """Returns the scriptPubKey: OP_<version> <witness program>"""
        return Script([self.segwit_num_version, self.to_witness_program()])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SegwitAddress):
            return NotImplemented
        return (
            self.get_type() == other.get_type()
            and self.witness_program == other.witness_program
        )

    def __str__(self) -> str:
        return self.to_string()


class P2wpkhAddress(SegwitAddress):
    """Encapsulates a P2WPKH address.

    Check SegwitAddress class for details
    """

    def __init__(
        self, address: Optional[str] = None, witness_program: Optional[str] = None
    ) -> None:
        super().__init__(address=address, witness_program=witness_program)

    def get_type(self) -> str:
        return P2WPKH_ADDRESS_V0


class P2wshAddress(SegwitAddress):
    """Encapsulates a P2WSH address.

    Check SegwitAddress class for details

    Methods
    -------
    from_script(witness_script)
        instantiates an object from a witness_script
    """

    program_length = 32

    def __init__(
        self,
        address: Optional[str] = None,
        witness_program: Optional[str] = None,
        script: Optional[Script] = None,
    ) -> None:
        if script is not None:
            if not isinstance(script, Script):
                raise TypeError("A Script class is required.")
            witness_program = b_to_h(script_hash(script, "segwit"))
        super().__init__(address=address, witness_program=witness_program)

    @classmethod
    def from_script(cls, script: Script) -> P2wshAddress:
        """Creates an address object from a witness script"""
        return cls(script=script)

    def get_type(self) -> str:
        return P2WSH_ADDRESS_V0


class P2trAddress(SegwitAddress):
    """Encapsulates a P2TR (Taproot) address.

    Check SegwitAddress class for details. is_odd records the parity of the
    tweaked key's y coordinate, which script path spends need for the control
    block; it cannot be recovered from the address string.
    """

    segwit_num_version = 1
    program_length = 32

    def __init__(
        self,
        address: Optional[str] = None,
        witness_program: Optional[str] = None,
        is_odd: bool = False,
    ) -> None:
        self.odd = is_odd
        super().__init__(address=address, witness_program=witness_program)

    def get_type(self) -> str:
        return P2TR_ADDRESS_V1

    def is_odd(self) -> bool:
        """Returns True if the y coordinate of the tweaked key is odd"""
        return self.odd


def address_to_script_pub_key(address: str) -> Script:
    """Returns the locking script an address stands for.

    Recognizes P2PKH and P2SH (Base58Check) and P2WPKH, P2WSH and P2TR
    (Bech32/Bech32m) addresses of any network.

    Raises
    ------
    ValueError
        if the address is not one of the above
    """
    if not isinstance(address, str) or not address:
        raise ValueError("Address must be a non-empty string")

    for hrp in set(NETWORK_SEGWIT_PREFIXES.values()):
        if address.lower().startswith(hrp + "1"):
            version, program = _segwit_decode(address)
            if version == 0 and len(program) == 20:
                return P2wpkhAddress(witness_program=b_to_h(program)).to_script_pub_key()
            if version == 0 and len(program) == 32:
                return P2wshAddress(witness_program=b_to_h(program)).to_script_pub_key()
            if version == 1 and len(program) == 32:
                return P2trAddress(witness_program=b_to_h(program)).to_script_pub_key()
            raise ValueError(
                "Unsupported witness version {} / program length {}".format(
                    version, len(program)
                )
            )

    data = _base58check_decode(address)
    if len(data) == 21:
        if data[:1] in NETWORK_P2PKH_PREFIXES.values():
            return P2pkhAddress(hash160=b_to_h(data[1:])).to_script_pub_key()
        if data[:1] in NETWORK_P2SH_PREFIXES.values():
            return P2shAddress(hash160=b_to_h(data[1:])).to_script_pub_key()
    raise ValueError("Unknown address format '{}'".format(address))


def script_pub_key_to_address(
    script: Union[Script, str, bytes], network: Optional[str] = None
) -> str:
    """Returns the address of a standard locking script.

    The address is encoded for network, or for the configured network when
    not given.

    Raises
    ------
    ValueError
        if the script is not P2PKH, P2SH, P2WPKH, P2WSH or P2TR
    """
    if isinstance(script, Script):
        raw = script.to_bytes()
    elif isinstance(script, str):
        raw = h_to_b(script)
    else:
        raw = script

    if (
        len(raw) == 25
        and raw[:3] == b"\x76\xa9\x14"
        and raw[23:] == b"\x88\xac"
    ):
        address: Union[Address, SegwitAddress] = P2pkhAddress(hash160=b_to_h(raw[3:23]))
    elif len(raw) == 23 and raw[:2] == b"\xa9\x14" and raw[22:] == b"\x87":
        address = P2shAddress(hash160=b_to_h(raw[2:22]))
    elif len(raw) == 22 and raw[:2] == b"\x00\x14":
        address = P2wpkhAddress(witness_program=b_to_h(raw[2:]))
    elif len(raw) == 34 and raw[:2] == b"\x00\x20":
        address = P2wshAddress(witness_program=b_to_h(raw[2:]))
    elif len(raw) == 34 and raw[:2] == b"\x51\x20":
        address = P2trAddress(witness_program=b_to_h(raw[2:]))
    else:
        raise ValueError("Not a standard address script: {}".format(b_to_h(raw)))

    if network is not None and network not in networks:
        raise ValueError("Unknown network '{}'".format(network))
    return address.to_string(network)
