"""
Command-line interface: ``bls-multisig <command> …``.

Every value crosses the boundary as text: keys, signatures and
membership keys as lowercase hex, coefficients as hex integers, bitmasks
as bit-strings (``"1101"``).  Each subcommand parses its arguments into a
frozen config object that is handed to its handler; nothing is kept in
module state.

Typical session for three signers::

    bls-multisig gen-key-pair --save-to ~/.bls
    bls-multisig aggregate-pubkeys $PK0 $PK1 $PK2
    bls-multisig gen-membership-key --total-keys 3 --agg-pubkey $APK $COEF
    bls-multisig aggregate-membership-keys $ROW0 $ROW1 $ROW2
    bls-multisig multisign --agg-pubkey $APK --membership-key $MK "msg"
    bls-multisig aggregate-signatures --pubkeys $PK0,$PK1,$PK2 --bitmask 101 $S0 $S1 $S2
    bls-multisig verify-multisig --sub-sig $S --sub-pubkey $PK --agg-pubkey $APK --bitmask 101 "msg"
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, TextIO, Tuple

from . import __version__
from .antirogue import generate_aggregate_public_key
from .backend import GroupBackend, get_backend
from .bitmask import decode as decode_bitmask
from .config import configure_logging
from .encoding import (
    decode_coefficient,
    decode_message,
    encode_coefficient,
    encode_hex,
)
from .errors import MultisigError
from .keystore import find_private_key, save_key_pair
from .membership import aggregate_matrix, generate_all_parts
from .multisig import aggregate_signatures, verify_multisig
from .signing import multisign, sign, verify

logger = logging.getLogger(__name__)


# ── runtime context ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Context:
    backend: GroupBackend
    environ: Mapping[str, str]
    out: TextIO

    def emit(self, text: str) -> None:
        print(text, file=self.out)

    def hex(self, element) -> str:
        return encode_hex(self.backend.marshal(element))


@dataclass(frozen=True)
class MessageInput:
    """Positional UTF-8 text, or ``--hex`` / ``--base64`` data."""

    text: Optional[str] = None
    data_hex: Optional[str] = None
    data_base64: Optional[str] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> MessageInput:
        return cls(args.message, args.hex, args.base64)

    def to_bytes(self) -> bytes:
        return decode_message(self.text, self.data_hex, self.data_base64)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",")]


# ── commands ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GenKeyPairConfig:
    save_to: Optional[str] = None

    @classmethod
    def from_args(cls, args):
        return cls(save_to=args.save_to)


def run_gen_key_pair(config: GenKeyPairConfig, ctx: Context) -> int:
    priv, pub = ctx.backend.generate_key_pair()
    if config.save_to is None:
        ctx.emit(f"private: {ctx.hex(priv)}")
        ctx.emit(f"public: {ctx.hex(pub)}")
    else:
        save_key_pair(config.save_to, priv, pub, backend=ctx.backend)
    return 0


@dataclass(frozen=True)
class SignConfig:
    message: MessageInput

    @classmethod
    def from_args(cls, args):
        return cls(message=MessageInput.from_args(args))


def run_sign(config: SignConfig, ctx: Context) -> int:
    message = config.message.to_bytes()
    priv = find_private_key(environ=ctx.environ, backend=ctx.backend)
    ctx.emit(f"signature: {ctx.hex(sign(priv, message, ctx.backend))}")
    return 0


@dataclass(frozen=True)
class VerifyConfig:
    pubkey: str
    signature: str
    message: MessageInput

    @classmethod
    def from_args(cls, args):
        return cls(args.pubkey, args.sig, MessageInput.from_args(args))


def run_verify(config: VerifyConfig, ctx: Context) -> int:
    message = config.message.to_bytes()
    if not verify(config.pubkey, message, config.signature, ctx.backend):
        ctx.emit("Message not verified!")
        return 1
    ctx.emit("Ok")
    return 0


@dataclass(frozen=True)
class AggregatePubkeysConfig:
    pubkeys: Tuple[str, ...]

    @classmethod
    def from_args(cls, args):
        return cls(tuple(args.pubkeys))


def run_aggregate_pubkeys(config: AggregatePubkeysConfig, ctx: Context) -> int:
    apk, coefficients = generate_aggregate_public_key(
        list(config.pubkeys), ctx.backend,
    )
    ctx.emit(f"public: {ctx.hex(apk)}")
    ctx.emit(
        "anti-coefficients: "
        + " ".join(encode_coefficient(a) for a in coefficients)
    )
    return 0


@dataclass(frozen=True)
class GenMembershipKeyConfig:
    total_keys: int
    agg_pubkey: str
    coefficient: str

    @classmethod
    def from_args(cls, args):
        return cls(args.total_keys, args.agg_pubkey, args.coefficient)


def run_gen_membership_key(config: GenMembershipKeyConfig, ctx: Context) -> int:
    coefficient = decode_coefficient(config.coefficient)
    priv = find_private_key(environ=ctx.environ, backend=ctx.backend)
    parts = generate_all_parts(
        priv, config.agg_pubkey, coefficient, config.total_keys, ctx.backend,
    )
    ctx.emit(" ".join(ctx.hex(p) for p in parts))
    return 0


@dataclass(frozen=True)
class AggregateMembershipKeysConfig:
    rows: Tuple[Tuple[str, ...], ...]

    @classmethod
    def from_args(cls, args):
        return cls(tuple(tuple(_split_csv(row)) for row in args.rows))


def run_aggregate_membership_keys(
    config: AggregateMembershipKeysConfig, ctx: Context,
) -> int:
    keys = aggregate_matrix(config.rows, backend=ctx.backend)
    ctx.emit(" ".join(ctx.hex(k) for k in keys))
    return 0


@dataclass(frozen=True)
class MultisignConfig:
    agg_pubkey: str
    membership_key: str
    message: MessageInput

    @classmethod
    def from_args(cls, args):
        return cls(
            args.agg_pubkey, args.membership_key, MessageInput.from_args(args),
        )


def run_multisign(config: MultisignConfig, ctx: Context) -> int:
    message = config.message.to_bytes()
    priv = find_private_key(environ=ctx.environ, backend=ctx.backend)
    sig = multisign(
        priv, message, config.agg_pubkey, config.membership_key, ctx.backend,
    )
    ctx.emit(ctx.hex(sig))
    return 0


@dataclass(frozen=True)
class AggregateSignaturesConfig:
    pubkeys: Tuple[str, ...]
    bitmask: str
    signatures: Tuple[str, ...]

    @classmethod
    def from_args(cls, args):
        return cls(
            tuple(_split_csv(args.pubkeys)), args.bitmask, tuple(args.signatures),
        )


def run_aggregate_signatures(
    config: AggregateSignaturesConfig, ctx: Context,
) -> int:
    pub, sig = aggregate_signatures(
        list(config.signatures),
        list(config.pubkeys),
        decode_bitmask(config.bitmask),
        ctx.backend,
    )
    ctx.emit(f"public: {ctx.hex(pub)}")
    ctx.emit(f"signature: {ctx.hex(sig)}")
    return 0


@dataclass(frozen=True)
class BitmaskConfig:
    bits: str

    @classmethod
    def from_args(cls, args):
        return cls(args.bits)


def run_bitmask(config: BitmaskConfig, ctx: Context) -> int:
    ctx.emit(str(decode_bitmask(config.bits)))
    return 0


@dataclass(frozen=True)
class VerifyMultisigConfig:
    sub_sig: str
    sub_pubkey: str
    agg_pubkey: str
    bitmask: str
    message: MessageInput

    @classmethod
    def from_args(cls, args):
        return cls(
            args.sub_sig, args.sub_pubkey, args.agg_pubkey, args.bitmask,
            MessageInput.from_args(args),
        )


def run_verify_multisig(config: VerifyMultisigConfig, ctx: Context) -> int:
    message = config.message.to_bytes()
    ok = verify_multisig(
        config.sub_sig,
        config.agg_pubkey,
        config.sub_pubkey,
        message,
        decode_bitmask(config.bitmask),
        ctx.backend,
    )
    if not ok:
        ctx.emit("Could not verify signature.")
        return 1
    ctx.emit("ok")
    return 0


# ── parser ──────────────────────────────────────────────────────────────

class _Parser(argparse.ArgumentParser):
    """Usage errors exit with status 1 like every other failure."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_message_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("message", nargs="?", help="Message as UTF-8 text.")
    parser.add_argument("--hex", help="Message data as hex.")
    parser.add_argument("--base64", help="Message data as base64.")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="bls-multisig",
        description="BLS12-381 accountable-subgroup multisignatures.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="More logging (repeat for debug).",
    )
    subparsers = parser.add_subparsers(
        dest="command", metavar="command", parser_class=_Parser,
    )

    p = subparsers.add_parser("gen-key-pair", help="Generate a key pair.")
    p.add_argument(
        "--save-to", metavar="DIR",
        help="Write privkey/pubkey files into this existing folder.",
    )
    p.set_defaults(config_cls=GenKeyPairConfig, func=run_gen_key_pair)

    p = subparsers.add_parser("sign", help="Sign a message with your key.")
    _add_message_args(p)
    p.set_defaults(config_cls=SignConfig, func=run_sign)

    p = subparsers.add_parser("verify", help="Verify a plain signature.")
    p.add_argument("--pubkey", required=True, help="Signer public key.")
    p.add_argument("--sig", required=True, help="Signature.")
    _add_message_args(p)
    p.set_defaults(config_cls=VerifyConfig, func=run_verify)

    p = subparsers.add_parser(
        "aggregate-pubkeys",
        help="Combine public keys; prints aggregate key and anti-coefficients.",
    )
    p.add_argument("pubkeys", nargs="+", metavar="PUBKEY")
    p.set_defaults(config_cls=AggregatePubkeysConfig, func=run_aggregate_pubkeys)

    p = subparsers.add_parser(
        "gen-membership-key",
        help="Generate your membership key parts, one per signer.",
    )
    p.add_argument("--total-keys", type=int, required=True,
                   help="Number of signers.")
    p.add_argument("--agg-pubkey", required=True, help="Aggregate public key.")
    p.add_argument("coefficient",
                   help="Your anti-coefficient from aggregate-pubkeys.")
    p.set_defaults(config_cls=GenMembershipKeyConfig, func=run_gen_membership_key)

    p = subparsers.add_parser(
        "aggregate-membership-keys",
        help="Sum membership key parts column-wise.",
    )
    p.add_argument(
        "rows", nargs="+", metavar="ROW",
        help="One comma-separated row of parts per signer.",
    )
    p.set_defaults(
        config_cls=AggregateMembershipKeysConfig,
        func=run_aggregate_membership_keys,
    )

    p = subparsers.add_parser("multisign", help="Produce a member signature.")
    p.add_argument("--agg-pubkey", required=True, help="Aggregate public key.")
    p.add_argument("--membership-key", required=True,
                   help="Your aggregated membership key.")
    _add_message_args(p)
    p.set_defaults(config_cls=MultisignConfig, func=run_multisign)

    p = subparsers.add_parser(
        "aggregate-signatures",
        help="Aggregate the signatures selected by a bitmask.",
    )
    p.add_argument("--pubkeys", required=True,
                   help="Comma separated public keys, in signer order.")
    p.add_argument("--bitmask", required=True, help="Bit string, e.g. 11101.")
    p.add_argument("signatures", nargs="+", metavar="SIG")
    p.set_defaults(
        config_cls=AggregateSignaturesConfig, func=run_aggregate_signatures,
    )

    p = subparsers.add_parser("bitmask", help="Convert a bit string to an integer.")
    p.add_argument("bits", help="Bit string, e.g. 1101.")
    p.set_defaults(config_cls=BitmaskConfig, func=run_bitmask)

    p = subparsers.add_parser(
        "verify-multisig", help="Verify a subset signature.",
    )
    p.add_argument("--sub-sig", required=True, help="Subset signature.")
    p.add_argument("--sub-pubkey", required=True, help="Subset public key.")
    p.add_argument("--agg-pubkey", required=True, help="Aggregate public key.")
    p.add_argument("--bitmask", required=True, help="Bit string of the subset.")
    _add_message_args(p)
    p.set_defaults(config_cls=VerifyMultisigConfig, func=run_verify_multisig)

    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    backend: Optional[GroupBackend] = None,
    environ: Optional[Mapping[str, str]] = None,
    out: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help(out or sys.stdout)
        return 1

    configure_logging(args.verbose)
    ctx = Context(
        backend=get_backend(backend),
        environ=os.environ if environ is None else environ,
        out=sys.stdout if out is None else out,
    )
    config = args.config_cls.from_args(args)
    logger.debug("running %s", args.command)
    try:
        return args.func(config, ctx)
    except (MultisigError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
