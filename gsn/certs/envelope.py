# gsn/certs/envelope.py
"""
Self-signed certificate from a CSR, carried in a certificate-only PKCS#7
SignedData envelope.

The envelope is assembled by hand and is intentionally not a complete PKCS#7
implementation: digestAlgorithms and signerInfos are empty SETs, so the
result carries a certificate but is not a verifiable signed message::

    ContentInfo ::= SEQUENCE {
        contentType  signedData,
        content [0] EXPLICIT SignedData }

    SignedData ::= SEQUENCE {
        version           1,
        digestAlgorithms  SET {},
        contentInfo       SEQUENCE { contentType data },
        certificates [0]  IMPLICIT SET { Certificate },
        signerInfos       SET {} }
"""
from __future__ import annotations

import base64
import datetime as dt
import logging
import secrets
from typing import Iterable, List
from urllib.parse import urlsplit

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import namedtype, tag, univ
from pyasn1_modules import rfc2315, rfc5280

from ..common import ConstructionError, EncodingError, GenerationError
from .request import csr_dns_names, load_csr

log = logging.getLogger(__name__)

SERIAL_BOUND = 1 << 128

OID_DATA = univ.ObjectIdentifier("1.2.840.113549.1.7.1")
OID_SIGNED_DATA = univ.ObjectIdentifier("1.2.840.113549.1.7.2")


class CertificateSet(univ.SetOf):
    componentType = univ.Any()
    tagSet = univ.SetOf.tagSet.tagImplicitly(
        tag.Tag(tag.tagClassContext, tag.tagFormatConstructed, 0)
    )


class DigestAlgorithms(univ.SetOf):
    componentType = rfc5280.AlgorithmIdentifier()


class SignerInfos(univ.SetOf):
    componentType = univ.Any()


class SignedData(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("version", univ.Integer()),
        namedtype.NamedType("digestAlgorithms", DigestAlgorithms()),
        namedtype.NamedType("contentInfo", rfc2315.ContentInfo()),
        namedtype.OptionalNamedType("certificates", CertificateSet()),
        namedtype.NamedType("signerInfos", SignerInfos()),
    )


def random_serial() -> int:
    # x509 serials must be positive; zero is redrawn
    serial = 0
    while not serial:
        serial = secrets.randbelow(SERIAL_BOUND)
    return serial


def uri_names(names: Iterable[str]) -> List[str]:
    out: List[str] = []
    for name in names:
        try:
            parts = urlsplit(name)
        except ValueError:
            continue
        if parts.scheme:
            out.append(name)
    return out


def _key_usage() -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=True,
        content_commitment=True,
        key_encipherment=False,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=False,
        crl_sign=False,
        encipher_only=False,
        decipher_only=False,
    )


def self_sign(
    csr: x509.CertificateSigningRequest,
    signing_key: ec.EllipticCurvePrivateKey,
    validity_days: int,
) -> x509.Certificate:
    if validity_days <= 0:
        raise ConstructionError("invalid validity period", f"{validity_days} days")

    try:
        serial = random_serial()
    except Exception as exc:
        raise GenerationError("failed to generate serial number", exc) from exc

    not_before = dt.datetime.now(dt.timezone.utc).replace(microsecond=0)
    not_after = not_before + dt.timedelta(days=validity_days)

    dns = csr_dns_names(csr)
    general_names: List[x509.GeneralName] = [x509.DNSName(n) for n in dns]
    general_names.extend(x509.UniformResourceIdentifier(u) for u in uri_names(dns))

    try:
        builder = (
            x509.CertificateBuilder()
            .subject_name(csr.subject)
            .issuer_name(csr.subject)
            .public_key(csr.public_key())
            .serial_number(serial)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(_key_usage(), critical=True)
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        )
        if general_names:
            builder = builder.add_extension(x509.SubjectAlternativeName(general_names), critical=False)
        signed = builder.sign(signing_key, hashes.SHA256())
    except (TypeError, ValueError) as exc:
        raise ConstructionError("failed to create certificate", exc) from exc

    try:
        der = signed.public_bytes(Encoding.DER)
    except ValueError as exc:
        raise EncodingError("failed to marshal certificate", exc) from exc

    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise ConstructionError("failed to parse certificate", exc) from exc


def wrap_certificate(cert_der: bytes) -> bytes:
    """DER ContentInfo(signedData) carrying ``cert_der`` and nothing else."""
    try:
        signed_data = SignedData()
        signed_data["version"] = 1
        signed_data["digestAlgorithms"].clear()
        signed_data["contentInfo"]["contentType"] = OID_DATA
        signed_data["certificates"].append(univ.Any(cert_der))
        signed_data["signerInfos"].clear()

        content_info = rfc2315.ContentInfo()
        content_info["contentType"] = OID_SIGNED_DATA
        content_info["content"] = der_encoder.encode(signed_data)
        return der_encoder.encode(content_info)
    except PyAsn1Error as exc:
        raise EncodingError("failed to marshal PKCS#7", exc) from exc


def sign_csr_to_pkcs7(
    csr_pem: str,
    signing_key: ec.EllipticCurvePrivateKey,
    validity_days: int,
) -> str:
    """Self-sign the request in ``csr_pem``; return the base64 PKCS#7 envelope."""
    csr = load_csr(csr_pem)
    cert = self_sign(csr, signing_key, validity_days)
    log.debug("self-signed certificate serial=%x valid for %d days", cert.serial_number, validity_days)
    envelope = wrap_certificate(cert.public_bytes(Encoding.DER))
    return base64.b64encode(envelope).decode("ascii")
