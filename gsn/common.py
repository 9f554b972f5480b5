
import datetime as dt
import hashlib
from typing import Iterable, List

def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def iso_utc(d: dt.datetime) -> str:
    if d.tzinfo is None:
        d = d.replace(tzinfo=dt.timezone.utc)
    return d.astimezone(dt.timezone.utc).isoformat().replace("+00:00", "Z")

def unique_in_order(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


class GsnError(Exception):
    """Base error: ``stage`` names the pipeline step that failed."""

    def __init__(self, stage: str, cause: object | None = None) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}" if cause is not None else stage)


class GenerationError(GsnError):
    """Randomness or key generation failed."""


class ConstructionError(GsnError):
    """Malformed input, PEM decoding or parsing failed."""


class EncodingError(GsnError):
    """Binary (DER) marshalling failed."""
