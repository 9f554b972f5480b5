import os
from dataclasses import dataclass, field

@dataclass(frozen=True)
class Settings:
    LOG_LEVEL: str = field(default="INFO")
    VALIDITY_DAYS: int = field(default=365)

    @staticmethod
    def from_env() -> "Settings":
        log_level = os.getenv("GSN_LOG_LEVEL", "INFO").upper()
        try:
            days = int(os.getenv("GSN_VALIDITY_DAYS", "365"))
            if days <= 0:
                raise ValueError
        except ValueError:
            days = 365
        return Settings(LOG_LEVEL=log_level, VALIDITY_DAYS=days)
