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


NETWORK = "testnet"
networks = {"mainnet", "testnet", "regtest", "signet"}


def setup(network: str = "testnet") -> str:
    """Selects the network used when encoding addresses and WIF keys.

    Parameters
    ----------
    network : str
        one of mainnet, testnet, regtest or signet

    Raises
    ------
    ValueError
        if the network is not known
    """
    global NETWORK
    if network not in networks:
        raise ValueError(
            "Unknown network '{}'; expected one of: {}".format(
                network, ", ".join(sorted(networks))
            )
        )
    NETWORK = network
    return NETWORK


def get_network() -> str:
    global NETWORK
    return NETWORK


def is_mainnet() -> bool:
    global NETWORK
    return NETWORK == "mainnet"


def is_testnet() -> bool:
    global NETWORK
    return NETWORK == "testnet"


def is_regtest() -> bool:
    global NETWORK
    return NETWORK == "regtest"


def is_signet() -> bool:
    global NETWORK
    return NETWORK == "signet"
