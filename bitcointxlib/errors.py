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


class TransactionError(Exception):
    """Base class of all errors raised while building or signing a transaction"""


class PreconditionViolation(TransactionError, ValueError):
    """An argument is malformed, out of range or missing.

    Raised before any state is touched; the caller has to correct the input.
    """


class StateViolation(TransactionError, RuntimeError):
    """The transaction is not in a state that allows the requested operation.

    E.g. adding an input after the transaction was finalized, or signing an
    input index that does not exist.
    """


class SizeLimitViolation(TransactionError, ValueError):
    """A script, witness or data payload exceeds its consensus size limit"""

    def __init__(self, what: str, size: int, limit: int) -> None:
        self.what = what
        self.size = size
        self.limit = limit
        super().__init__(
            "{} must be at most {} bytes, got {}".format(what, limit, size)
        )
