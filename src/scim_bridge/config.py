from typing import Any, Mapping, Optional
from urllib.parse import urlsplit
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from scim_bridge.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Application Configuration
    app_name: str = Field("SCIM Bridge", description="Application name")
    environment: str = Field("development", description="Environment (development, staging, production)")
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Logging level")

    @field_validator("environment")
    def validate_environment(cls, v: str) -> str:
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v


class ProviderConfig(BaseSettings):
    """Connection settings for one remote SCIM directory.

    The field names match the keys the identity-provider host stores for the
    provider component (``scimurl``, ``loginusername``, ``loginpassword``).
    When read from the environment they are prefixed with ``SCIM_BRIDGE_``.
    """
    model_config = SettingsConfigDict(
        env_prefix="SCIM_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    scimurl: str = Field(..., description="Base URL of the SCIM server, e.g. https://scim.example.com/v2")
    loginusername: str = Field(..., description="HTTP Basic auth username")
    loginpassword: SecretStr = Field(..., description="HTTP Basic auth password")
    request_timeout: Optional[float] = Field(30.0, description="Per-request timeout in seconds, None to wait forever")
    verify_tls: bool = Field(True, description="Verify the server TLS certificate")

    @field_validator("scimurl")
    def validate_scimurl(cls, v: str) -> str:
        v = v.strip()
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("scimurl must be an absolute http(s) URL")
        return v.rstrip("/")

    @field_validator("loginusername")
    def validate_loginusername(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("loginusername cannot be empty")
        return v

    @field_validator("loginpassword")
    def validate_loginpassword(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("loginpassword cannot be empty")
        return v

    @classmethod
    def from_component_config(cls, config: Mapping[str, Any]) -> "ProviderConfig":
        """Build from the host's component configuration.

        Host configuration is multi-valued, so list values contribute their
        first element. Only the given mapping is read; environment variables
        and ``.env`` never fill in a missing key.
        """
        values = {}
        for key, value in config.items():
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            if value is not None:
                values[key] = value

        try:
            return ComponentProviderConfig(**values)
        except ValidationError as e:
            raise ConfigurationError(_summarize(e)) from e


class ComponentProviderConfig(ProviderConfig):
    """ProviderConfig read from host-supplied values alone."""

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings):
        return (init_settings,)


def load_provider_config() -> ProviderConfig:
    """Read the connection settings from the environment and ``.env``."""
    try:
        return ProviderConfig()
    except ValidationError as e:
        raise ConfigurationError(_summarize(e)) from e


def _summarize(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "config"
        problems.append(f"{field}: {err['msg']}")
    return "Invalid SCIM provider configuration - " + "; ".join(problems)


# Create a singleton instance
settings = Settings()
