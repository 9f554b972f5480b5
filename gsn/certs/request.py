# gsn/certs/request.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, cast

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from ..common import ConstructionError, EncodingError, unique_in_order
from .keys import KeyPair

log = logging.getLogger(__name__)

DOMAIN_COMPONENT_OID = x509.ObjectIdentifier("0.9.2342.19200300.100.1.25")

_CSR_LABELS = (
    (b"-----BEGIN CERTIFICATE REQUEST-----", b"-----END CERTIFICATE REQUEST-----"),
    (b"-----BEGIN NEW CERTIFICATE REQUEST-----", b"-----END NEW CERTIFICATE REQUEST-----"),
)


@dataclass(frozen=True)
class CsrResult:
    csr: x509.CertificateSigningRequest
    csr_pem: str


def build_subject(
    common_name: str,
    country: str,
    state: str,
    locality: str,
    organization: str,
    organizational_unit: Optional[str] = None,
    domain_component: Optional[str] = None,
) -> x509.Name:
    attrs = [
        (NameOID.COUNTRY_NAME, country),
        (NameOID.STATE_OR_PROVINCE_NAME, state),
        (NameOID.LOCALITY_NAME, locality),
        (NameOID.ORGANIZATION_NAME, organization),
    ]
    if organizational_unit is not None:
        attrs.append((NameOID.ORGANIZATIONAL_UNIT_NAME, organizational_unit))
    attrs.append((NameOID.COMMON_NAME, common_name))
    if domain_component is not None:
        attrs.append((DOMAIN_COMPONENT_OID, domain_component))

    try:
        return x509.Name([x509.NameAttribute(oid, value) for oid, value in attrs])
    except (TypeError, ValueError) as exc:
        raise ConstructionError("invalid subject", exc) from exc


def dns_names(common_name: str, alt_names: Optional[Sequence[str]] = None) -> List[str]:
    """Common name first, then alt names; duplicates dropped, first occurrence wins."""
    return unique_in_order([common_name, *(alt_names or ())])


def create_csr(
    key_pair: KeyPair,
    common_name: str,
    domain_component: Optional[str],
    alt_names: Optional[Sequence[str]],
    country: str,
    state: str,
    locality: str,
    organization: str,
    organizational_unit: Optional[str] = None,
) -> CsrResult:
    subject = build_subject(
        common_name,
        country,
        state,
        locality,
        organization,
        organizational_unit=organizational_unit,
        domain_component=domain_component,
    )
    names = dns_names(common_name, alt_names)

    try:
        builder = (
            x509.CertificateSigningRequestBuilder()
            .subject_name(subject)
            .add_extension(
                x509.SubjectAlternativeName([x509.DNSName(n) for n in names]),
                critical=False,
            )
        )
        signed = builder.sign(key_pair.private_key, hashes.SHA256())
    except (TypeError, ValueError) as exc:
        raise ConstructionError("failed to create CSR", exc) from exc

    try:
        der = signed.public_bytes(Encoding.DER)
    except ValueError as exc:
        raise EncodingError("failed to marshal CSR", exc) from exc

    try:
        csr = x509.load_der_x509_csr(der)
    except ValueError as exc:
        raise ConstructionError("failed to parse CSR", exc) from exc

    log.debug("built CSR for %s with %d DNS name(s)", common_name, len(names))
    return CsrResult(csr=csr, csr_pem=csr.public_bytes(Encoding.PEM).decode("ascii"))


def _find_block(data: bytes) -> Optional[bytes]:
    for begin, end in _CSR_LABELS:
        s = data.find(begin)
        if s == -1:
            continue
        e = data.find(end, s)
        if e == -1:
            continue
        return data[s:e + len(end)]
    return None


def load_csr(pem: str | bytes) -> x509.CertificateSigningRequest:
    data = pem.encode("ascii", "ignore") if isinstance(pem, str) else pem
    block = _find_block(data)
    if block is None:
        raise ConstructionError("failed to decode CSR PEM")
    try:
        return x509.load_pem_x509_csr(block)
    except ValueError as exc:
        raise ConstructionError("failed to parse CSR", exc) from exc


def csr_dns_names(csr: x509.CertificateSigningRequest) -> List[str]:
    try:
        ext = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return cast(x509.SubjectAlternativeName, ext.value).get_values_for_type(x509.DNSName)
