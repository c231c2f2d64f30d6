"""
High-level multisignature protocol orchestration.

Provides a single ``MultisigProtocol`` class that runs every signer
locally and ties together aggregation, the membership round, signing,
subset aggregation and verification.  In a deployment each step runs on
a different machine and values move as hex strings (see ``cli``); this
class is the in-process equivalent, used for testing and as the library
entry point.

Usage
-----
::

    from bls_multisig.protocol import MultisigProtocol

    # Setup: 4 signers, aggregate key, membership keys
    proto = MultisigProtocol.setup(4)

    # Sign with signers 0, 1 and 3
    bundle = proto.sign(b"hello world", signer_ids=[0, 1, 3])

    # Verify
    assert proto.verify(b"hello world", bundle)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .antirogue import aggregate_public_key, compute_coefficients
from .backend import GroupBackend, get_backend
from .bitmask import from_indices, to_bit_string
from .errors import InvalidCount, InvalidIndex
from .membership import aggregate_matrix, generate_all_parts
from .multisig import aggregate_signatures, verify_multisig
from .signing import multisign

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MultisigBundle:
    """A subset signature with the values needed to verify it."""

    signature: object
    subset_public_key: object
    bitmask: int

    @property
    def bit_string(self) -> str:
        return to_bit_string(self.bitmask)


class MultisigProtocol:
    """
    End-to-end multisignature protocol for *n* local signers.

    Encapsulates the full lifecycle:
    1. Setup — anti-rogue coefficients and aggregate public key.
    2. Membership — n×n parts, aggregated per column.
    3. Sign — member signatures from a subset, folded by bitmask.
    4. Verify — subset check against the full aggregate key.
    """

    def __init__(
        self,
        private_keys: Sequence,
        backend: Optional[GroupBackend] = None,
    ) -> None:
        if not private_keys:
            raise InvalidCount("at least one signer is required")
        self._backend = get_backend(backend)
        b = self._backend

        self._private_keys = [b.as_private_key(k) for k in private_keys]
        self._public_keys = [b.derive_public_key(k) for k in self._private_keys]
        n = len(self._private_keys)

        self._coefficients = compute_coefficients(self._public_keys, b)
        self._apk = aggregate_public_key(
            self._public_keys, self._coefficients, b,
        )

        # Membership round: row i is what signer i hands out
        matrix = [
            generate_all_parts(sk, self._apk, a, n, b)
            for sk, a in zip(self._private_keys, self._coefficients)
        ]
        self._membership_keys = aggregate_matrix(matrix, n, b)
        logger.info("multisig setup complete for %d signers", n)

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def setup(
        cls,
        n: int,
        backend: Optional[GroupBackend] = None,
    ) -> MultisigProtocol:
        """Generate *n* fresh key pairs and run the setup rounds."""
        if n <= 0:
            raise InvalidCount(f"signer count must be positive, got {n}")
        b = get_backend(backend)
        keys = [b.generate_key_pair()[0] for _ in range(n)]
        return cls(keys, b)

    # ── signing ────────────────────────────────────────────────────────

    def sign(
        self,
        message: bytes,
        signer_ids: Optional[List[int]] = None,
    ) -> MultisigBundle:
        """
        Collect member signatures from *signer_ids* and fold them.

        If None, all signers participate.
        """
        n = self.num_participants
        if signer_ids is None:
            signer_ids = list(range(n))
        signer_ids = sorted(set(signer_ids))
        if not signer_ids:
            raise InvalidCount("signer set is empty")
        for j in signer_ids:
            if not 0 <= j < n:
                raise InvalidIndex(f"unknown signer {j}")

        b = self._backend
        selected = set(signer_ids)
        member_sigs = [
            multisign(
                self._private_keys[j], message, self._apk,
                self._membership_keys[j], b,
            )
            if j in selected
            else b.zero_signature()
            for j in range(n)
        ]
        mask = from_indices(signer_ids)
        pub, sig = aggregate_signatures(member_sigs, self._public_keys, mask, b)
        return MultisigBundle(signature=sig, subset_public_key=pub, bitmask=mask)

    # ── verification ───────────────────────────────────────────────────

    def verify(self, message: bytes, bundle: MultisigBundle) -> bool:
        return verify_multisig(
            bundle.signature,
            self._apk,
            bundle.subset_public_key,
            message,
            bundle.bitmask,
            self._backend,
        )

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def backend(self) -> GroupBackend:
        return self._backend

    @property
    def aggregate_public_key(self):
        return self._apk

    @property
    def public_keys(self) -> List:
        return list(self._public_keys)

    @property
    def coefficients(self) -> List[int]:
        return list(self._coefficients)

    @property
    def membership_keys(self) -> List:
        return list(self._membership_keys)

    @property
    def num_participants(self) -> int:
        return len(self._private_keys)

    def __repr__(self) -> str:
        return (
            f"MultisigProtocol(n={self.num_participants}, "
            f"backend={self._backend.name})"
        )
