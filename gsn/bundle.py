import logging
from dataclasses import dataclass

from .certs.envelope import sign_csr_to_pkcs7
from .certs.keys import generate_key_pair
from .certs.request import create_csr
from .mcp_contracts import CsrProfile

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CertificateBundle:
    private_key_pem: str
    csr_pem: str
    pkcs7_b64: str


def generate_bundle(profile: CsrProfile) -> CertificateBundle:
    """
    Key pair -> CSR -> self-signed certificate in a PKCS#7 envelope.

    Each stage consumes the previous one's output; the first ``GsnError``
    aborts the run and nothing is returned.
    """
    key_pair = generate_key_pair()
    log.info("Generated ECDSA key pair with P-256 curve")

    csr_result = create_csr(
        key_pair,
        profile.common_name,
        profile.domain_component,
        profile.alt_names,
        profile.country,
        profile.state,
        profile.locality,
        profile.organization,
        profile.organizational_unit,
    )
    log.info("Created CSR for %s", profile.common_name)

    pkcs7_b64 = sign_csr_to_pkcs7(csr_result.csr_pem, key_pair.private_key, profile.validity_days)
    log.info("Signed certificate valid for %d days", profile.validity_days)

    return CertificateBundle(
        private_key_pem=key_pair.private_key_pem,
        csr_pem=csr_result.csr_pem,
        pkcs7_b64=pkcs7_b64,
    )
