"""
bls-multisig: BLS12-381 accountable-subgroup multisignatures.

Participants jointly build a rogue-key-resistant aggregate public key,
certify each index with a membership key, and sign independently; a
collector folds any bitmask-selected subset of member signatures into a
single signature that verifies against the full aggregate key.

- **Anti-rogue aggregation**  apk = Σ H(i, pk_i, PK) · pk_i
  [Boneh-Drijvers-Neven, ASIACRYPT 2018]
- **Membership keys**  mk_j = Σ_i a_i · sk_i · H₂(apk, j)
- **Subset verification**  e(S, g₁) = e(H₀(apk ‖ m), PK_T) · e(Σ H₂(apk, j), apk)

Quick start
-----------
::

    from bls_multisig import MultisigProtocol

    proto = MultisigProtocol.setup(3)
    bundle = proto.sign(b"transfer 1 BTC to Alice", signer_ids=[0, 2])
    assert proto.verify(b"transfer 1 BTC to Alice", bundle)
    print(bundle.bit_string)   # "101"
"""

__version__ = "0.1.0"

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    MultisigError,
    DecodeError,
    InputMismatch,
    LengthMismatch,
    RaggedMatrix,
    InvalidCount,
    InvalidIndex,
    KeyNotFound,
)

# ── primitives ──────────────────────────────────────────────────────────
from .curve import PrivateKey, PublicKey, Signature, ORDER
from .backend import GroupBackend, BLS12381Backend, get_backend

# ── protocol ────────────────────────────────────────────────────────────
from .bitmask import decode as decode_bitmask, to_bit_string
from .antirogue import (
    compute_coefficients,
    aggregate_public_key,
    generate_aggregate_public_key,
)
from .membership import (
    generate_part,
    generate_all_parts,
    aggregate_column,
    aggregate_matrix,
)
from .signing import sign, verify, multisign
from .multisig import aggregate_signatures, verify_multisig
from .protocol import MultisigProtocol, MultisigBundle

# ── key storage ─────────────────────────────────────────────────────────
from .keystore import find_private_key, save_key_pair

__all__ = [
    # version
    "__version__",
    # errors
    "MultisigError", "DecodeError", "InputMismatch", "LengthMismatch",
    "RaggedMatrix", "InvalidCount", "InvalidIndex", "KeyNotFound",
    # primitives
    "PrivateKey", "PublicKey", "Signature", "ORDER",
    "GroupBackend", "BLS12381Backend", "get_backend",
    # bitmask
    "decode_bitmask", "to_bit_string",
    # aggregation
    "compute_coefficients", "aggregate_public_key",
    "generate_aggregate_public_key",
    # membership
    "generate_part", "generate_all_parts", "aggregate_column",
    "aggregate_matrix",
    # signing
    "sign", "verify", "multisign",
    "aggregate_signatures", "verify_multisig",
    # protocol
    "MultisigProtocol", "MultisigBundle",
    # key storage
    "find_private_key", "save_key_pair",
]
