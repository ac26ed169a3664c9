"""Collector configuration with startup validation.

Settings are loaded by the runner via pydantic-settings (env prefix LLU_,
optional .env file) and passed to the collector at construction time.
The collector itself never reads the environment.
"""

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "LLU_", "env_file": ".env"}

    # Credentials
    email: str = ""
    password: SecretStr = SecretStr("")

    # Backend selection
    region: str = "EU"
    patient_id: str = ""
    api_url: str = ""  # overrides the regional origin when set

    # Client identification sent with every request
    version: str = "4.2.2"
    product: str = "llu.ios"

    # HTTP timeouts (seconds)
    response_header_timeout: float = 10.0
    request_timeout: float = 15.0

    # Runner
    poll_interval_seconds: int = 60
    metrics_port: int = 0
    log_json: bool = True

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        """Fail fast if a timeout would leave a call unbounded."""
        bad = [
            name
            for name in ("response_header_timeout", "request_timeout")
            if getattr(self, name) <= 0
        ]
        if bad:
            raise ValueError(f"Timeouts must be positive. Invalid: {', '.join(bad)}")
        return self
