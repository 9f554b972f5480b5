import pytest
from _util import example_csr
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID, SignatureAlgorithmOID

from gsn.certs.keys import generate_key_pair
from gsn.certs.request import (
    DOMAIN_COMPONENT_OID,
    build_subject,
    csr_dns_names,
    dns_names,
    load_csr,
)
from gsn.common import ConstructionError


def test_dns_names_dedupe_keeps_first_occurrence():
    assert dns_names("example.com", ["example.com", "www.example.com"]) == ["example.com", "www.example.com"]
    assert dns_names("a", ["b", "a", "c", "b"]) == ["a", "b", "c"]
    assert dns_names("only.example") == ["only.example"]


def test_example_scenario_csr():
    _, res = example_csr()
    csr = res.csr
    assert csr_dns_names(csr) == ["example.com", "www.example.com"]
    assert csr.signature_algorithm_oid == SignatureAlgorithmOID.ECDSA_WITH_SHA256
    assert isinstance(csr.signature_hash_algorithm, hashes.SHA256)
    assert csr.is_signature_valid
    assert csr.subject.get_attributes_for_oid(NameOID.COUNTRY_NAME)[0].value == "US"
    assert res.csr_pem.startswith("-----BEGIN CERTIFICATE REQUEST-----")


def test_subject_order_and_optional_attributes():
    name = build_subject(
        "host.example", "US", "California", "San Diego", "AMZ",
        organizational_unit="Ops", domain_component="CSO",
    )
    oids = [attr.oid for attr in name]
    assert oids == [
        NameOID.COUNTRY_NAME,
        NameOID.STATE_OR_PROVINCE_NAME,
        NameOID.LOCALITY_NAME,
        NameOID.ORGANIZATION_NAME,
        NameOID.ORGANIZATIONAL_UNIT_NAME,
        NameOID.COMMON_NAME,
        DOMAIN_COMPONENT_OID,
    ]
    assert DOMAIN_COMPONENT_OID.dotted_string == "0.9.2342.19200300.100.1.25"

    bare = build_subject("host.example", "US", "California", "San Diego", "AMZ")
    assert not bare.get_attributes_for_oid(NameOID.ORGANIZATIONAL_UNIT_NAME)
    assert not bare.get_attributes_for_oid(DOMAIN_COMPONENT_OID)


def test_domain_component_survives_round_trip():
    _, res = example_csr(domain_component="CSO", organizational_unit="Dev")
    parsed = load_csr(res.csr_pem)
    assert parsed.subject.get_attributes_for_oid(DOMAIN_COMPONENT_OID)[0].value == "CSO"
    assert parsed.subject.get_attributes_for_oid(NameOID.ORGANIZATIONAL_UNIT_NAME)[0].value == "Dev"


def test_pem_round_trip_preserves_subject_and_names():
    _, res = example_csr(alt_names=["www.example.com", "https://example.com/device"])
    parsed = load_csr(res.csr_pem)
    assert parsed.subject == res.csr.subject
    assert csr_dns_names(parsed) == csr_dns_names(res.csr)
    assert csr_dns_names(parsed) == ["example.com", "www.example.com", "https://example.com/device"]


def test_load_csr_accepts_new_certificate_request_label():
    _, res = example_csr()
    pem = res.csr_pem.replace("CERTIFICATE REQUEST", "NEW CERTIFICATE REQUEST")
    assert load_csr(pem).subject == res.csr.subject


@pytest.mark.parametrize("pem", ["", "hello", "-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n"])
def test_load_csr_without_block_fails_to_decode(pem):
    with pytest.raises(ConstructionError) as ei:
        load_csr(pem)
    assert ei.value.stage == "failed to decode CSR PEM"


def test_load_csr_with_corrupt_body_fails_to_parse():
    pem = "-----BEGIN CERTIFICATE REQUEST-----\nAAAA\n-----END CERTIFICATE REQUEST-----\n"
    with pytest.raises(ConstructionError) as ei:
        load_csr(pem)
    assert ei.value.stage == "failed to parse CSR"


def test_invalid_country_is_a_construction_error():
    with pytest.raises(ConstructionError, match="invalid subject"):
        example_csr(country="USA")


def test_csr_without_san_has_no_dns_names():
    _, res = example_csr()
    bare = (
        x509.CertificateSigningRequestBuilder()
        .subject_name(res.csr.subject)
        .sign(generate_key_pair().private_key, hashes.SHA256())
    )
    assert csr_dns_names(bare) == []
