from typing import Annotated, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field, ValidationError

from .bundle import generate_bundle
from .certs.request import csr_dns_names, load_csr
from .common import GsnError
from .mcp_contracts import BundleSummary, CsrProfile
from .x509meta import pkcs7_to_meta

mcp = FastMCP(
    name="gsn",
    instructions=(
        "Purpose: generate a P-256 key, a certificate signing request and a self-signed certificate "
        "wrapped in a certificate-only PKCS#7 envelope (base64). No network access, no file writes.\n\n"
        "Use me when: you need a throwaway CSR and certificate for development or tests.\n"
        "Do NOT use me for: issuing trusted certificates, revocation, renewal or chain validation.\n\n"
        "How to call:\n"
        "- `generate_certificate_bundle(common_name=..., alt_names=[...], country=..., ...)`.\n"
        "  Signing is always ECDSA-with-SHA-256. The private key PEM is only returned when "
        "`include_private_key` is true.\n"
        "- `inspect_pkcs7_envelope(pkcs7_b64=...)` parses an envelope back and lists its certificates.\n\n"
        "Safety: nothing is persisted; keys exist only for the duration of the call."
    ),
)


@mcp.tool(
    description="Health check. Returns 'pong'.",
    tags={"gsn", "health"},
    annotations={"title": "Ping", "readOnlyHint": True, "idempotentHint": True, "openWorldHint": False},
)
def ping() -> str:
    return "pong"


@mcp.tool(
    description=(
        "Generate an EC P-256 key, a CSR for the given subject and alternate names, and a self-signed "
        "certificate in a base64 PKCS#7 envelope."
    ),
    tags={"gsn", "x509", "csr", "pkcs7"},
    annotations={
        "title": "Generate CSR and self-signed certificate",
        "readOnlyHint": True,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
def generate_certificate_bundle(
    common_name: Annotated[str, Field(description="Subject common name; always the first DNS name.")],
    country: Annotated[str, Field(description="Two-letter country code, e.g. 'US'.")],
    state: Annotated[str, Field(description="State or province.")],
    locality: Annotated[str, Field(description="Locality / city.")],
    organization: Annotated[str, Field(description="Organization name.")],
    alt_names: Annotated[
        Optional[List[str]],
        Field(description="Additional DNS names; entries that parse as URIs are also added as URI SANs."),
    ] = None,
    organizational_unit: Annotated[Optional[str], Field(description="Optional organizational unit.")] = None,
    domain_component: Annotated[
        Optional[str], Field(description="Optional domain component (OID 0.9.2342.19200300.100.1.25).")
    ] = None,
    validity_days: Annotated[int, Field(description="Certificate validity in days.", gt=0)] = 365,
    include_private_key: Annotated[
        bool, Field(description="Return the generated private key PEM. Off by default.")
    ] = False,
) -> dict:
    """
    Examples:

    - Minimal:
      { "common_name": "example.com", "country": "US", "state": "California",
        "locality": "San Diego", "organization": "Example" }

    - With alternate names:
      { ..., "alt_names": ["www.example.com", "https://example.com/device"] }
    """
    try:
        profile = CsrProfile(
            common_name=common_name,
            domain_component=domain_component,
            alt_names=alt_names or [],
            country=country,
            state=state,
            locality=locality,
            organization=organization,
            organizational_unit=organizational_unit,
            validity_days=validity_days,
        )
    except ValidationError as exc:
        raise ToolError(f"invalid request: {exc}") from exc

    try:
        bundle = generate_bundle(profile)
        envelope = pkcs7_to_meta(bundle.pkcs7_b64)
        names = csr_dns_names(load_csr(bundle.csr_pem))
    except GsnError as exc:
        raise ToolError(str(exc)) from exc

    summary = BundleSummary(
        csr_pem=bundle.csr_pem,
        pkcs7_b64=bundle.pkcs7_b64,
        dns_names=names,
        certificate=envelope["x509_chain"][0],
        private_key_pem=bundle.private_key_pem if include_private_key else None,
    )
    return summary.model_dump(exclude_none=True)


@mcp.tool(
    description="Parse a base64 PKCS#7 envelope back and describe its structure and certificates.",
    tags={"gsn", "x509", "pkcs7", "analysis"},
    annotations={
        "title": "Inspect PKCS#7 envelope",
        "readOnlyHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
def inspect_pkcs7_envelope(
    pkcs7_b64: Annotated[str, Field(description="RFC 4648 base64 of the DER PKCS#7 envelope, no line breaks.")],
) -> dict:
    try:
        return pkcs7_to_meta(pkcs7_b64)
    except GsnError as exc:
        raise ToolError(str(exc)) from exc


@mcp.prompt(
    name="explain_bundle_json",
    description="Turn a generate_certificate_bundle result into a short human-readable explanation.",
    tags={"gsn", "prompt", "explain"},
)
def explain_bundle_json(
    bundle_json: Annotated[str, Field(description="A JSON string as returned by generate_certificate_bundle.")],
) -> str:
    return (
        "Given this certificate bundle JSON, explain it to a non-expert:\n"
        f"{bundle_json}\n"
        "Explain: subject and DNS names; that the certificate is self-signed; its validity window; "
        "key and signature algorithms; key usages; and that the PKCS#7 envelope only carries the "
        "certificate (it has no signer). Keep it under 120 words."
    )


if __name__ == "__main__":
    mcp.run()
