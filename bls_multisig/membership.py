"""
Membership keys: the setup round that certifies each signer's index.

After the aggregate key  apk  is fixed, every signer *i* computes one
part per participant index *j* and sends part *j* to signer *j*
out-of-band:

    μ_{i→j} = (a_i · sk_i) · H₂(apk, j)

Signer *j* sums the column it receives from all *n* signers (itself
included) into its membership key:

    mk_j = Σ_i μ_{i→j} = (Σ_i a_i · sk_i) · H₂(apk, j)

The key is only valid if the column contains exactly one part from each
of the *n* signers; the order of summation does not matter.

The matrix layout is  rows = contributors, columns = target index.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .backend import GroupBackend, get_backend
from .errors import InvalidCount, InvalidIndex, RaggedMatrix
from .hash import MAX_INDEX

logger = logging.getLogger(__name__)


# ── generation ──────────────────────────────────────────────────────────

def generate_part(
    priv,
    target_index: int,
    agg_pub,
    coefficient: int,
    backend: Optional[GroupBackend] = None,
):
    """This signer's contribution to the membership key of *target_index*."""
    if not 0 <= target_index <= MAX_INDEX:
        raise InvalidIndex(f"target index {target_index} out of range")
    backend = get_backend(backend)
    return backend.generate_membership_key_part(
        backend.as_private_key(priv),
        target_index,
        backend.as_public_key(agg_pub),
        coefficient,
    )


def generate_all_parts(
    priv,
    agg_pub,
    coefficient: int,
    total_signers: int,
    backend: Optional[GroupBackend] = None,
) -> List:
    """Parts for indexes ``0 … total_signers-1``; entry *j* goes to signer *j*."""
    if total_signers <= 0:
        raise InvalidCount(f"total signers must be positive, got {total_signers}")
    backend = get_backend(backend)
    priv = backend.as_private_key(priv)
    agg_pub = backend.as_public_key(agg_pub)
    return [
        generate_part(priv, j, agg_pub, coefficient, backend)
        for j in range(total_signers)
    ]


# ── aggregation ─────────────────────────────────────────────────────────

def aggregate_column(
    parts: Sequence,
    backend: Optional[GroupBackend] = None,
):
    """Sum one column of parts into a membership key."""
    backend = get_backend(backend)
    mk = backend.zero_signature()
    for part in parts:
        mk = backend.aggregate(mk, backend.as_signature(part))
    return mk


def aggregate_matrix(
    matrix: Sequence[Sequence],
    total: Optional[int] = None,
    backend: Optional[GroupBackend] = None,
) -> List:
    """
    Reduce an N×N matrix of parts to N membership keys, one per column.

    ``matrix[i][j]`` is the part signer *i* produced for index *j*.  Cells
    may be elements, marshaled bytes or hex strings.  The shape is checked
    before anything is decoded.
    """
    n = len(matrix)
    if n == 0:
        raise InvalidCount("membership key matrix is empty")
    if total is not None and total != n:
        raise RaggedMatrix(f"expected {total} rows, got {n}")
    for i, row in enumerate(matrix):
        if len(row) != n:
            raise RaggedMatrix(
                f"row {i} has {len(row)} entries, expected {n}"
            )

    backend = get_backend(backend)
    decoded = [[backend.as_signature(cell) for cell in row] for row in matrix]
    keys = [
        aggregate_column([decoded[i][j] for i in range(n)], backend)
        for j in range(n)
    ]
    logger.debug("aggregated %dx%d membership key matrix", n, n)
    return keys
