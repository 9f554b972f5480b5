
import base64
import binascii
import datetime as dt
import warnings
from typing import Any, Dict, List, Optional, cast

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization.pkcs7 import load_der_pkcs7_certificates
from cryptography.x509.oid import NameOID
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.error import PyAsn1Error
from pyasn1_modules import rfc2315

from .common import ConstructionError, iso_utc, sha256_hex

def _name_to_cn(name: x509.Name) -> Optional[str]:
    attrs = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    return cast(str, attrs[0].value) if attrs else None

def _rfc4514(name: x509.Name) -> str:
    return name.rfc4514_string()

def _public_key_info(pk: Any) -> Dict[str, Any]:
    if isinstance(pk, ec.EllipticCurvePublicKey):
        return {"type": "EC", "curve": getattr(pk.curve, "name", "EC")}
    return {"type": pk.__class__.__name__}

def _sig_hash(obj: Any) -> Optional[str]:
    try:
        algo = obj.signature_hash_algorithm
    except Exception:
        return None
    return algo.name if isinstance(algo, hashes.HashAlgorithm) else None

def _san_list(extensions: x509.Extensions) -> List[str]:
    try:
        san = extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return []
    out: List[str] = []
    for g in san:
        if isinstance(g, (x509.DNSName, x509.UniformResourceIdentifier, x509.RFC822Name)):
            out.append(g.value)
        elif isinstance(g, x509.IPAddress):
            out.append(str(g.value))
    return out

def _uri_list(extensions: x509.Extensions) -> List[str]:
    try:
        san = extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return []
    return san.get_values_for_type(x509.UniformResourceIdentifier)

def _key_usage(extensions: x509.Extensions) -> List[str]:
    try:
        ku = extensions.get_extension_for_class(x509.KeyUsage).value
    except x509.ExtensionNotFound:
        return []
    names: List[str] = []
    if ku.digital_signature: names.append("digitalSignature")
    if ku.content_commitment: names.append("contentCommitment")
    if ku.key_encipherment: names.append("keyEncipherment")
    if ku.data_encipherment: names.append("dataEncipherment")
    if ku.key_agreement:
        names.append("keyAgreement")
        if ku.encipher_only: names.append("encipherOnly")
        if ku.decipher_only: names.append("decipherOnly")
    if ku.key_cert_sign: names.append("keyCertSign")
    if ku.crl_sign: names.append("cRLSign")
    return names

def _basic_constraints(extensions: x509.Extensions) -> Optional[Dict[str, Any]]:
    try:
        bc = extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return None
    return {"ca": bool(bc.ca), "path_len": bc.path_length}

def csr_to_meta(csr: x509.CertificateSigningRequest) -> Dict[str, Any]:
    return {
        "subject_dn": _rfc4514(csr.subject),
        "subject_cn": _name_to_cn(csr.subject),
        "public_key": _public_key_info(csr.public_key()),
        "signature_hash": _sig_hash(csr),
        "san": _san_list(csr.extensions),
    }

def cert_to_meta(cert: x509.Certificate) -> Dict[str, Any]:
    nb = getattr(cert, "not_valid_before_utc", None) or cert.not_valid_before.replace(tzinfo=dt.timezone.utc)
    na = getattr(cert, "not_valid_after_utc", None) or cert.not_valid_after.replace(tzinfo=dt.timezone.utc)
    return {
        "subject_dn": _rfc4514(cert.subject),
        "issuer_dn": _rfc4514(cert.issuer),
        "subject_cn": _name_to_cn(cert.subject),
        "issuer_cn": _name_to_cn(cert.issuer),
        "self_signed": cert.subject == cert.issuer,
        "not_before": iso_utc(nb),
        "not_after": iso_utc(na),
        "validity_days": (na - nb).days,
        "public_key": _public_key_info(cert.public_key()),
        "signature_hash": _sig_hash(cert),
        "fingerprint_sha256": cert.fingerprint(hashes.SHA256()).hex(),
        "san": _san_list(cert.extensions),
        "uris": _uri_list(cert.extensions),
        "key_usage": _key_usage(cert.extensions),
        "basic_constraints": _basic_constraints(cert.extensions),
        "serial_number": str(cert.serial_number),
    }

def _load_certs(der: bytes) -> List[x509.Certificate]:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            category=UserWarning,
            message=r"PKCS#7 certificates could not be parsed as DER, falling back to parsing as BER\.",
        )
        try:
            return load_der_pkcs7_certificates(der)
        except ValueError as exc:
            raise ConstructionError("failed to parse PKCS#7 certificates", exc) from exc

def pkcs7_to_meta(pkcs7_b64: str) -> Dict[str, Any]:
    """Describe a base64 certificate-only PKCS#7 envelope by parsing it back."""
    try:
        der = base64.b64decode(pkcs7_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConstructionError("failed to decode base64 envelope", exc) from exc

    try:
        content_info, rest = der_decoder.decode(der, asn1Spec=rfc2315.ContentInfo())
        if rest:
            raise PyAsn1Error(f"{len(rest)} trailing byte(s)")
        signed_data, _ = der_decoder.decode(bytes(content_info["content"]), asn1Spec=rfc2315.SignedData())
    except PyAsn1Error as exc:
        raise ConstructionError("failed to decode PKCS#7 envelope", exc) from exc

    certs = _load_certs(der)
    return {
        "format": "PKCS7",
        "size": len(der),
        "digest_sha256": sha256_hex(der),
        "content_type": str(content_info["contentType"]),
        "version": int(signed_data["version"]),
        "digest_algorithms": len(signed_data["digestAlgorithms"]),
        "inner_content_type": str(signed_data["contentInfo"]["contentType"]),
        "signer_infos": len(signed_data["signerInfos"]),
        "x509_chain": [cert_to_meta(c) for c in certs],
    }
