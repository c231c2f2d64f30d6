import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr

from bls_multisig.cli import main

from .toy_backend import ToyBackend

MESSAGE = "pay the invoice"


class CliTests(unittest.TestCase):
    def setUp(self):
        self.backend = ToyBackend()

    def run_cli(self, *argv, environ=None):
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stderr(err):
            code = main(list(argv), backend=self.backend,
                        environ=environ or {}, out=out)
        return code, out.getvalue(), err.getvalue()

    def fields(self, text):
        result = {}
        for line in text.strip().splitlines():
            key, _, value = line.partition(": ")
            result[key] = value
        return result

    def test_bitmask(self):
        code, out, _ = self.run_cli("bitmask", "1101")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "13")

    def test_gen_key_pair(self):
        code, out, _ = self.run_cli("gen-key-pair")
        self.assertEqual(code, 0)
        keys = self.fields(out)
        self.assertEqual(set(keys), {"private", "public"})
        priv = self.backend.unmarshal_private_key(bytes.fromhex(keys["private"]))
        pub = self.backend.unmarshal_public_key(bytes.fromhex(keys["public"]))
        self.assertEqual(self.backend.derive_public_key(priv), pub)

    def test_gen_key_pair_save_to(self):
        with tempfile.TemporaryDirectory() as tmp:
            code, out, _ = self.run_cli("gen-key-pair", "--save-to", tmp)
            self.assertEqual(code, 0)
            self.assertEqual(out, "")
            self.assertTrue(os.path.isfile(os.path.join(tmp, "privkey")))
            self.assertTrue(os.path.isfile(os.path.join(tmp, "pubkey")))

            code, _, err = self.run_cli("gen-key-pair", "--save-to", tmp)
            self.assertEqual(code, 1)
            self.assertIn("already exists", err)

    def test_sign_and_verify(self):
        _, out, _ = self.run_cli("gen-key-pair")
        keys = self.fields(out)
        env = {"BLS_PRIVKEY": keys["private"]}

        code, out, _ = self.run_cli("sign", MESSAGE, environ=env)
        self.assertEqual(code, 0)
        sig = self.fields(out)["signature"]

        code, out, _ = self.run_cli(
            "verify", "--pubkey", keys["public"], "--sig", sig, MESSAGE,
        )
        self.assertEqual((code, out.strip()), (0, "Ok"))

        code, out, _ = self.run_cli(
            "verify", "--pubkey", keys["public"], "--sig", sig, "tampered",
        )
        self.assertEqual((code, out.strip()), (1, "Message not verified!"))

        hex_message = MESSAGE.encode().hex()
        code, out, _ = self.run_cli("sign", "--hex", hex_message, environ=env)
        self.assertEqual(self.fields(out)["signature"], sig)

    def test_non_utf8_message_argument(self):
        _, out, _ = self.run_cli("gen-key-pair")
        keys = self.fields(out)
        env = {"BLS_PRIVKEY": keys["private"]}

        # b"caf\xe9" as decoded from argv on POSIX
        code, out, _ = self.run_cli("sign", "caf\udce9", environ=env)
        self.assertEqual(code, 0)
        sig = self.fields(out)["signature"]
        _, out, _ = self.run_cli("sign", "--hex", "636166e9", environ=env)
        self.assertEqual(self.fields(out)["signature"], sig)

        code, out, _ = self.run_cli(
            "verify", "--pubkey", keys["public"], "--sig", sig, "caf\udce9",
        )
        self.assertEqual((code, out.strip()), (0, "Ok"))

    def test_sign_without_key(self):
        code, _, err = self.run_cli("sign", MESSAGE)
        self.assertEqual(code, 1)
        self.assertIn("private key", err)

    def test_malformed_input(self):
        code, _, err = self.run_cli("verify", "--pubkey", "zz", "--sig", "zz", "m")
        self.assertEqual(code, 1)
        self.assertIn("invalid hex", err)

        code, _, err = self.run_cli("aggregate-membership-keys", "aa,bb", "cc")
        self.assertEqual(code, 1)
        self.assertIn("row 1", err)

    def test_usage_error_exits_1(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                main(["verify-multisig", "--sub-sig", "aa"], backend=self.backend)
        self.assertEqual(cm.exception.code, 1)

    def test_full_session(self):
        # three signers generate keys
        keys = []
        for _ in range(3):
            _, out, _ = self.run_cli("gen-key-pair")
            keys.append(self.fields(out))
        pubs = [k["public"] for k in keys]
        envs = [{"BLS_PRIVKEY": k["private"]} for k in keys]

        # anyone aggregates the ordered public keys
        code, out, _ = self.run_cli("aggregate-pubkeys", *pubs)
        self.assertEqual(code, 0)
        agg = self.fields(out)
        apk = agg["public"]
        coefs = agg["anti-coefficients"].split(" ")
        self.assertEqual(len(coefs), 3)

        # each signer emits one part per index
        rows = []
        for env, coef in zip(envs, coefs):
            code, out, _ = self.run_cli(
                "gen-membership-key", "--total-keys", "3", "--agg-pubkey", apk,
                coef, environ=env,
            )
            self.assertEqual(code, 0)
            parts = out.split()
            self.assertEqual(len(parts), 3)
            rows.append(",".join(parts))

        code, out, _ = self.run_cli("aggregate-membership-keys", *rows)
        self.assertEqual(code, 0)
        mks = out.split()
        self.assertEqual(len(mks), 3)

        # each signer produces a member signature
        sigs = []
        for env, mk in zip(envs, mks):
            code, out, _ = self.run_cli(
                "multisign", "--agg-pubkey", apk, "--membership-key", mk,
                MESSAGE, environ=env,
            )
            self.assertEqual(code, 0)
            sigs.append(out.strip())

        # collector folds signers 0 and 2
        code, out, _ = self.run_cli(
            "aggregate-signatures", "--pubkeys", ",".join(pubs),
            "--bitmask", "101", *sigs,
        )
        self.assertEqual(code, 0)
        subset = self.fields(out)

        verify_args = [
            "verify-multisig", "--sub-sig", subset["signature"],
            "--sub-pubkey", subset["public"], "--agg-pubkey", apk,
        ]
        code, out, _ = self.run_cli(*verify_args, "--bitmask", "101", MESSAGE)
        self.assertEqual((code, out.strip()), (0, "ok"))

        code, out, _ = self.run_cli(*verify_args, "--bitmask", "111", MESSAGE)
        self.assertEqual(code, 1)
        self.assertEqual(out.strip(), "Could not verify signature.")

        b64 = "cGF5IHRoZSBpbnZvaWNl"  # base64 of MESSAGE
        code, _, _ = self.run_cli(*verify_args, "--bitmask", "101", "--base64", b64)
        self.assertEqual(code, 0)

    def test_aggregate_signatures_length_mismatch(self):
        code, _, err = self.run_cli(
            "aggregate-signatures", "--pubkeys", "aa,bb", "--bitmask", "11",
            "cc", "dd", "ee",
        )
        self.assertEqual(code, 1)
        self.assertIn("3 != 2", err)


if __name__ == "__main__":
    unittest.main()
