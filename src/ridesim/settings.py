from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ridesim.core.exceptions import ConfigurationError


class SimulationSettings(BaseSettings):
    """Timing and behaviour of the dispatch simulation (durations in seconds)."""

    search_duration: float = Field(
        default=5.0,
        ge=0.0,
        le=60.0,
        description="Artificial latency of a single driver search attempt",
    )
    approach_duration: float = Field(
        default=30.0,
        gt=0.0,
        le=3600.0,
        description="Wall-clock length of the driver->pickup animation",
    )
    trip_duration: float = Field(
        default=30.0,
        gt=0.0,
        le=3600.0,
        description="Wall-clock length of the pickup->dropoff animation",
    )
    speed_multiplier: float = Field(
        default=16.0,
        ge=1.0,
        le=1024.0,
        description="How much faster than real time the legs are animated (display only)",
    )

    # Driver search retry policy
    max_search_attempts: int = Field(default=3, ge=1, le=10)
    retry_delay: float = Field(default=1.0, ge=0.0, le=30.0)
    no_driver_display_delay: float = Field(
        default=3.0,
        ge=0.0,
        le=30.0,
        description="How long the no-drivers message stays up before returning to idle",
    )
    search_success_probability: float = Field(default=0.9, ge=0.0, le=1.0)

    driver_search_radius_miles: float = Field(default=2.0, gt=0.0, le=50.0)
    average_speed_mph: float = Field(default=30.0, gt=0.0, le=120.0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"

    model_config = SettingsConfigDict(env_prefix="SIM_", frozen=True)


class RoutingSettings(BaseSettings):
    base_url: str = "https://api.openrouteservice.org/v2/directions/driving-car"
    api_key: str = ""
    timeout: float = Field(default=5.0, gt=0.0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="ROUTING_", frozen=True)

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Routing base URL must start with http:// or https://")
        return v.rstrip("/")


class Settings(BaseSettings):
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        ConfigurationError: if any variable is missing or out of range.
    """
    try:
        return Settings()
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            f"Invalid settings: {', '.join(fields)}",
            details={"fields": fields},
        ) from e
