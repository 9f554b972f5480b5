# gsn/certs/keys.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    load_pem_private_key,
)

from ..common import ConstructionError, GenerationError

log = logging.getLogger(__name__)

CURVE = ec.SECP256R1


@dataclass(frozen=True)
class KeyPair:
    private_key: ec.EllipticCurvePrivateKey
    private_key_pem: str


def generate_key_pair() -> KeyPair:
    """P-256 key pair, exported as an unencrypted PKCS#8 ``PRIVATE KEY`` PEM."""
    try:
        private_key = ec.generate_private_key(CURVE())
    except Exception as exc:
        raise GenerationError("failed to generate key", exc) from exc

    try:
        pem = private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    except Exception as exc:
        raise GenerationError("failed to marshal private key", exc) from exc

    log.debug("generated EC key on %s", private_key.curve.name)
    return KeyPair(private_key=private_key, private_key_pem=pem.decode("ascii"))


def load_private_key(pem: str | bytes) -> ec.EllipticCurvePrivateKey:
    data = pem.encode("ascii") if isinstance(pem, str) else pem
    try:
        key = load_pem_private_key(data, password=None)
    except (TypeError, ValueError, UnsupportedAlgorithm) as exc:
        raise ConstructionError("failed to parse private key", exc) from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ConstructionError("unexpected key type", key.__class__.__name__)
    if not isinstance(key.curve, CURVE):
        raise ConstructionError("unexpected curve", key.curve.name)
    return key
