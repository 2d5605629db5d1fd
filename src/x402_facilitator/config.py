"""
Facilitator Configuration

Loads settlement keys, RPC endpoints and engine tuning from environment
variables (a local ``.env`` file is honoured). The resulting configuration is
an immutable input to the engines: it is read once at startup.

Environment Variables:
    - TRON_PRIVATE_KEY: Hex private key of the TRON settlement wallet (optional)
    - TRON_FULL_HOST: TronGrid base URL (default: Shasta testnet)
    - TRON_API_KEY: TronGrid API key sent as ``TRON-PRO-API-KEY`` (optional)
    - EVM_PRIVATE_KEY: Hex private key of the EVM settlement wallet (optional)
    - EVM_RPC_URL: JSON-RPC endpoint for the EVM family (default: Cronos testnet)
    - FACILITATOR_POLL_INTERVAL: Seconds between confirmation polls (default: 2)
    - FACILITATOR_POLL_ATTEMPTS: Confirmation polls before timing out (default: 30)
    - FACILITATOR_REQUEST_TIMEOUT: HTTP timeout for node requests in seconds (default: 30)
    - LOG_LEVEL / LOG_FORMAT: Logging level and renderer (``text`` or ``json``)
"""

import os
from typing import Optional, Literal

import dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

dotenv.load_dotenv()

DEFAULT_TRON_FULL_HOST = "https://api.shasta.trongrid.io"
DEFAULT_EVM_RPC_URL = "https://evm-t3.cronos.org"


class FacilitatorConfig(BaseModel):
    """Process-wide facilitator configuration."""

    model_config = ConfigDict(frozen=True)

    tron_private_key: Optional[SecretStr] = Field(None, description="TRON settlement key")
    tron_full_host: str = Field(DEFAULT_TRON_FULL_HOST, description="TronGrid base URL")
    tron_api_key: Optional[SecretStr] = Field(None, description="TronGrid API key")
    evm_private_key: Optional[SecretStr] = Field(None, description="EVM settlement key")
    evm_rpc_url: str = Field(DEFAULT_EVM_RPC_URL, description="EVM JSON-RPC endpoint")

    poll_interval: float = Field(2.0, gt=0, description="Seconds between confirmation polls")
    poll_attempts: int = Field(30, ge=1, description="Confirmation polls before timeout")
    request_timeout: float = Field(30.0, gt=0, description="Node request timeout in seconds")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"

    @classmethod
    def from_env(cls) -> "FacilitatorConfig":
        """
        Build the configuration from environment variables.

        Unset or empty variables fall back to the field defaults.

        Returns:
            FacilitatorConfig: Validated configuration.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        env = {
            "tron_private_key": os.getenv("TRON_PRIVATE_KEY"),
            "tron_full_host": os.getenv("TRON_FULL_HOST"),
            "tron_api_key": os.getenv("TRON_API_KEY"),
            "evm_private_key": os.getenv("EVM_PRIVATE_KEY"),
            "evm_rpc_url": os.getenv("EVM_RPC_URL"),
            "poll_interval": os.getenv("FACILITATOR_POLL_INTERVAL"),
            "poll_attempts": os.getenv("FACILITATOR_POLL_ATTEMPTS"),
            "request_timeout": os.getenv("FACILITATOR_REQUEST_TIMEOUT"),
            "log_level": (os.getenv("LOG_LEVEL") or "").upper() or None,
            "log_format": (os.getenv("LOG_FORMAT") or "").lower() or None,
        }
        return cls.model_validate({key: value for key, value in env.items() if value})
