"""Engine configuration and environment helpers."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_BASE_CURRENCY = "EUR"
DEFAULT_SHARE_EPSILON = 1e-9


class OversellPolicy(str, Enum):
    REJECT = "REJECT"
    CLAMP = "CLAMP"
    ALLOW = "ALLOW"


class EngineSettings(BaseSettings):
    """Configuration options for the replay engine."""

    app_name: str = Field(default="WAC Replay Engine")
    base_currency: str = Field(default=DEFAULT_BASE_CURRENCY, min_length=3, max_length=3)

    oversell_policy: OversellPolicy = Field(
        default=OversellPolicy.REJECT,
        description="How a disposal larger than the held position is handled.",
    )
    share_epsilon: float = Field(
        default=DEFAULT_SHARE_EPSILON,
        ge=0.0,
        description="Share counts within this distance of zero are treated as a closed position.",
    )

    log_level: str = Field(default="INFO")

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="wac-engine")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_prefix = "WAC_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a plain dict suitable for structured logging."""

        return {k: (v.value if isinstance(v, Enum) else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> EngineSettings:
    """Return cached engine settings with optional overrides."""

    if overrides:
        return EngineSettings(**overrides)
    return EngineSettings()


__all__ = [
    "EngineSettings",
    "OversellPolicy",
    "DEFAULT_BASE_CURRENCY",
    "DEFAULT_SHARE_EPSILON",
    "get_settings",
]
