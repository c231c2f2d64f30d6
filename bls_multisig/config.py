"""
Configuration for the I/O layer.

Key lookup order:

1. ``$BLS_PRIVKEY`` — hex private key (overrides everything)
2. ``$HOME/.bls/privkey`` — hex private key file

Key files are written with mode 0600 and are never overwritten.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

ENVKEY_PRIVKEY_HEX = "BLS_PRIVKEY"
ENVKEY_HOME = "HOME"
HOME_DIR = ".bls"
PRIVKEY_DEFAULT = "privkey"
PUBKEY_DEFAULT = "pubkey"
KEY_FILE_MODE = 0o600

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class KeyStoreConfig:
    """Where to look for, and where to write, key material."""

    env_var: str = ENVKEY_PRIVKEY_HEX
    home_env: str = ENVKEY_HOME
    home_dir: str = HOME_DIR
    private_key_name: str = PRIVKEY_DEFAULT
    public_key_name: str = PUBKEY_DEFAULT

    def env_private_key(self, environ: Mapping[str, str]) -> Optional[str]:
        return environ.get(self.env_var)

    def home_private_key_path(self, environ: Mapping[str, str]) -> Optional[str]:
        home = environ.get(self.home_env)
        if home is None:
            return None
        return os.path.join(home, self.home_dir, self.private_key_name)


def configure_logging(verbosity: int = 0) -> None:
    """stderr logging for the CLI: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("bls_multisig").setLevel(level)
