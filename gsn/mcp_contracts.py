# gsn/mcp_contracts.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class CsrProfile(BaseModel):
    common_name: str = Field(
        "USAMZS00000000000000000000001372070201E", min_length=1, max_length=64
    )
    domain_component: Optional[str] = Field("CSO", examples=["CSO", "example"])
    alt_names: List[str] = Field(
        default_factory=lambda: ["https://www.powerflex.com"],
        examples=[["www.example.com", "https://example.com/device"]],
    )
    country: str = Field("US", min_length=2, max_length=2)
    state: str = "California"
    locality: str = "San Diego"
    organization: str = "AMZ"
    organizational_unit: Optional[str] = None
    validity_days: int = Field(365, gt=0)


class BundleSummary(BaseModel):
    csr_pem: str
    pkcs7_b64: str
    dns_names: List[str] = []
    certificate: Dict[str, Any]
    private_key_pem: Optional[str] = None
