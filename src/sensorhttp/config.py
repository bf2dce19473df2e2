import logging
import os
from dataclasses import dataclass
from typing import Optional

from .parser import HTTPLimits

DIAGNOSTICS_LOGGER = "sensorhttp.diagnostics"
_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Config:
    """Parser Configuration"""
    diagnostics: bool = False
    max_headers: int = HTTPLimits.MAX_HEADERS

    def __post_init__(self):
        if self.max_headers < 1:
            raise ValueError(f"max_headers must be positive, got {self.max_headers}")

    @classmethod
    def from_env(cls):
        """Load Config from environment variables"""
        raw_max = os.getenv("SENSORHTTP_MAX_HEADERS", str(HTTPLimits.MAX_HEADERS))
        try:
            max_headers = int(raw_max)
        except ValueError:
            raise ValueError(f"Invalid SENSORHTTP_MAX_HEADERS: {raw_max!r}") from None
        return cls(
            diagnostics = os.getenv("SENSORHTTP_DIAGNOSTICS", "").strip().lower() in _TRUTHY,
            max_headers = max_headers
        )

    def diagnostics_logger(self) -> Optional[logging.Logger]:
        """Logger for parser trace lines, None when diagnostics are off"""
        if not self.diagnostics:
            return None
        return logging.getLogger(DIAGNOSTICS_LOGGER)
