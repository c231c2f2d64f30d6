"""
Private-key lookup and key-pair persistence.

The key store is the trust boundary of the tool: private keys are read
from the environment or from a file under the user's home directory and
never leave the signer's machine.  Files are created exclusively so that
generating a new pair can never clobber existing credentials.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Tuple

from .backend import GroupBackend, get_backend
from .config import KEY_FILE_MODE, KeyStoreConfig
from .encoding import decode_hex, encode_hex
from .errors import DecodeError, KeyNotFound

logger = logging.getLogger(__name__)


def private_key_from_hex(value: str, backend: Optional[GroupBackend] = None):
    backend = get_backend(backend)
    return backend.unmarshal_private_key(decode_hex(value, "private key"))


def find_private_key(
    config: Optional[KeyStoreConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
    backend: Optional[GroupBackend] = None,
):
    """
    Look in all the standard places for a private key.

    The environment override wins even when malformed (``DecodeError``);
    otherwise the home key file is read.  Raises ``KeyNotFound`` when
    neither source exists.
    """
    environ = os.environ if environ is None else environ
    config = KeyStoreConfig() if config is None else config

    privhex = config.env_private_key(environ)
    if privhex is not None:
        logger.debug("using private key from $%s", config.env_var)
        return private_key_from_hex(privhex, backend)

    path = config.home_private_key_path(environ)
    if path is not None and os.path.isfile(path):
        logger.debug("using private key from %s", path)
        try:
            with open(path, "r", encoding="ascii") as fh:
                privhex = fh.read()
        except UnicodeDecodeError as exc:
            raise DecodeError(f"private key: {path} is not hex text") from exc
        return private_key_from_hex(privhex, backend)

    raise KeyNotFound("couldn't find private key anywhere expected")


def _write_exclusive(path: str, content: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, KEY_FILE_MODE)
    with os.fdopen(fd, "w", encoding="ascii") as fh:
        fh.write(content)


def save_key_pair(
    directory: str,
    priv,
    pub,
    config: Optional[KeyStoreConfig] = None,
    backend: Optional[GroupBackend] = None,
) -> Tuple[str, str]:
    """
    Write ``privkey`` and ``pubkey`` hex files into an existing directory.

    Refuses (``FileExistsError``) if either file is already present;
    nothing is written in that case.  Returns the two paths.
    """
    config = KeyStoreConfig() if config is None else config
    backend = get_backend(backend)

    if not os.path.exists(directory):
        raise FileNotFoundError(f"{directory} does not exist")
    if not os.path.isdir(directory):
        raise NotADirectoryError(
            f"{directory} is not a directory; provide a folder that already exists"
        )

    priv_path = os.path.join(directory, config.private_key_name)
    pub_path = os.path.join(directory, config.public_key_name)
    for path in (priv_path, pub_path):
        if os.path.exists(path):
            raise FileExistsError(f"{path} already exists")

    _write_exclusive(priv_path, encode_hex(backend.marshal(priv)))
    _write_exclusive(pub_path, encode_hex(backend.marshal(pub)))
    logger.info("wrote key pair to %s", directory)
    return priv_path, pub_path
