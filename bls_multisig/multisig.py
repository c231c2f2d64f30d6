"""
Subset aggregation and verification.

The collector holds member signatures and plain public keys for all
participants, in the agreed order, and a bitmask naming the subset that
signed.  It folds the selected entries into one public key and one
signature:

    PK = Σ_{j∈T} pk_j        S = Σ_{j∈T} s_j

Any relying party then checks  S  against the *full* aggregate key, the
subset key and the same bitmask; the bitmask tells the verifier which
membership points  H₂(apk, j)  to expect inside  S.

Truncation
----------
Only indexes  0 … len-1  are examined.  Bits set above the list length
are ignored (a warning is logged), and entries whose bit is absent are
not selected.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple, Union

from .backend import GroupBackend, get_backend
from .bitmask import as_bitmask, is_selected
from .errors import LengthMismatch

logger = logging.getLogger(__name__)


def aggregate_signatures(
    signatures: Sequence,
    pubkeys: Sequence,
    bitmask: Union[int, str],
    backend: Optional[GroupBackend] = None,
) -> Tuple[object, object]:
    """
    Fold the bitmask-selected signatures and public keys.

    Returns ``(subset_public_key, subset_signature)``.  Every entry is
    decoded, selected or not, so a malformed entry anywhere is reported.
    """
    if len(signatures) != len(pubkeys):
        raise LengthMismatch(
            f"signatures and public keys must match! "
            f"{len(signatures)} != {len(pubkeys)}"
        )
    mask = as_bitmask(bitmask)
    if mask.bit_length() > len(signatures):
        logger.warning(
            "bitmask has %d bits but only %d signatures; high bits ignored",
            mask.bit_length(), len(signatures),
        )

    backend = get_backend(backend)
    pub = backend.zero_public_key()
    sig = backend.zero_signature()
    for i, (s, p) in enumerate(zip(signatures, pubkeys)):
        s = backend.as_signature(s)
        p = backend.as_public_key(p)
        if is_selected(mask, i):
            sig = backend.aggregate(sig, s)
            pub = backend.aggregate(pub, p)
    logger.debug("aggregated subset %s of %d", bin(mask), len(signatures))
    return pub, sig


def verify_multisig(
    subset_signature,
    full_agg_pub,
    subset_agg_pub,
    message: bytes,
    bitmask: Union[int, str],
    backend: Optional[GroupBackend] = None,
) -> bool:
    """
    Check a subset signature.

    Returns ``False`` when the pairing check fails or the subset is empty;
    raises ``DecodeError`` only for malformed encodings.
    """
    backend = get_backend(backend)
    sig = backend.as_signature(subset_signature)
    apk = backend.as_public_key(full_agg_pub)
    spk = backend.as_public_key(subset_agg_pub)
    return backend.multisign_verify(sig, apk, spk, message, as_bitmask(bitmask))
