"""
Anti-rogue aggregate public key.

A plain sum of public keys is open to rogue-key attacks: the last party
to publish can choose  pk_evil = g^x − Σ pk_honest  and sign alone for
the whole group.  Instead each key is weighted by a coefficient that
depends on the *complete, ordered* key set:

    a_i = H_agg(i ‖ pk_i ‖ [pk_0 … pk_{n-1}])
    apk = Σ a_i · pk_i

The attacker cannot fix its key before the set is known, and cannot
predict the coefficients before fixing its key.

Coefficients are positional.  All participants must agree on the exact
byte-level order of the key list, otherwise every derived artifact
(membership keys, bitmasks, the aggregate itself) is unverifiable.

References
----------
- Boneh, Drijvers, Neven (2018). "Compact Multi-Signatures for Smaller
  Blockchains."  ASIACRYPT 2018.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .backend import GroupBackend, get_backend
from .errors import InputMismatch, InvalidCount
from .hash import hash_anti_rogue

logger = logging.getLogger(__name__)


def compute_coefficients(
    pubkeys: Sequence,
    backend: Optional[GroupBackend] = None,
) -> List[int]:
    """
    One anti-rogue coefficient per key, in input order.

    Pure function of the ordered key set: recomputing on the same list
    always reproduces the same coefficients.
    """
    backend = get_backend(backend)
    encoded = [backend.marshal(backend.as_public_key(pk)) for pk in pubkeys]
    return [
        hash_anti_rogue(i, key_bytes, encoded)
        for i, key_bytes in enumerate(encoded)
    ]


def aggregate_public_key(
    pubkeys: Sequence,
    coefficients: Sequence[int],
    backend: Optional[GroupBackend] = None,
):
    """Weighted aggregate  Σ a_i · pk_i."""
    if len(pubkeys) != len(coefficients):
        raise InputMismatch(
            f"public keys and coefficients must match! "
            f"{len(pubkeys)} != {len(coefficients)}"
        )
    if not pubkeys:
        raise InvalidCount("at least one public key is required")

    backend = get_backend(backend)
    apk = backend.zero_public_key()
    for pk, a in zip(pubkeys, coefficients):
        weighted = backend.scale_public_key(backend.as_public_key(pk), a)
        apk = backend.aggregate(apk, weighted)
    return apk


def generate_aggregate_public_key(
    pubkeys: Sequence,
    backend: Optional[GroupBackend] = None,
) -> Tuple[object, List[int]]:
    """Decode *pubkeys*, compute coefficients and the aggregate key."""
    backend = get_backend(backend)
    keys = [backend.as_public_key(pk) for pk in pubkeys]
    coefficients = compute_coefficients(keys, backend)
    apk = aggregate_public_key(keys, coefficients, backend)
    logger.debug("aggregated %d public keys", len(keys))
    return apk, coefficients
