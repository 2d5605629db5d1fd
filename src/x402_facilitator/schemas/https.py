"""
HTTP Request/Response Schema Models for the x402 Facilitator

This module defines the Pydantic models used at the HTTP boundary: request
bodies for the verify and settle endpoints, the shared response envelope,
and the payloads returned by the informational endpoints.

The facilitator flow consists of:
1. Resource server receives a payment header from its client
2. Resource server POSTs header + requirements to /verify
3. Resource server POSTs the same pair to /settle to execute the transfer
4. /supported, /health and /version describe the facilitator itself

The boundary checks that required top-level fields are present before the
engine is invoked; everything else is validated by the engine.
"""

from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Requests
# ============================================================================

class FacilitatorRequest(BaseModel):
    """Body shared by verify and settle requests.

    Both fields are optional at this layer so that a missing field is reported
    with its own error code rather than as a generic validation failure.

    Attributes:
        payment_header: Base64 encoded payment token.
        payment_requirements: Raw requirements object, validated separately.
    """
    model_config = ConfigDict(populate_by_name=True)

    payment_header: Optional[str] = Field(default=None, alias="paymentHeader")
    payment_requirements: Optional[Dict[str, Any]] = Field(
        default=None, alias="paymentRequirements"
    )


# ============================================================================
# Response envelope
# ============================================================================

class ApiResponse(BaseModel):
    """Envelope returned by every facilitator endpoint.

    Attributes:
        status: ``success`` or ``error``.
        code: Machine readable outcome code (e.g. ``PAYMENT_VALID``).
        message: Human readable summary.
        data: Endpoint specific payload.
        details: Extra diagnostic information on errors.
    """
    status: Literal["success", "error"]
    code: str
    message: str
    data: Optional[Any] = None
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, code: str, message: str, data: Any = None) -> "ApiResponse":
        return cls(status="success", code=code, message=message, data=data)

    @classmethod
    def error(
        cls,
        code: str,
        message: str,
        data: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ApiResponse":
        return cls(status="error", code=code, message=message, data=data, details=details)


# ============================================================================
# Informational endpoints
# ============================================================================

class SupportedScheme(BaseModel):
    """One scheme/network/token combination the facilitator accepts."""
    model_config = ConfigDict(populate_by_name=True)

    scheme: str
    network: str
    chain_id: int = Field(..., alias="chainId")
    token: str
    token_address: Optional[str] = Field(None, alias="tokenAddress")
    description: str


class NetworkInfo(BaseModel):
    """Public description of a supported network."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    family: str
    chain_id: int = Field(..., alias="chainId")
    rpc_url: str = Field(..., alias="rpcUrl")
    explorer_url: str = Field(..., alias="explorerUrl")


class TokenInfo(BaseModel):
    """Public description of a supported token (``address`` None for native assets)."""
    symbol: str
    name: str
    address: Optional[str] = None
    decimals: int
    network: str


class SupportedData(BaseModel):
    """Payload of ``GET /supported``."""
    schemes: List[SupportedScheme] = Field(default_factory=list)
    networks: List[NetworkInfo] = Field(default_factory=list)
    tokens: List[TokenInfo] = Field(default_factory=list)


class HealthData(BaseModel):
    """Payload of ``GET /health``.

    Attributes:
        version: Package version.
        uptime: Seconds since the server object was created.
        timestamp: ISO-8601 UTC timestamp of the response.
        settlement: Settlement availability per network family.
    """
    version: str
    uptime: float = Field(..., ge=0)
    timestamp: str
    settlement: Dict[str, bool] = Field(default_factory=dict)


class VersionData(BaseModel):
    """Payload of ``GET /version``."""
    model_config = ConfigDict(populate_by_name=True)

    version: str
    x402_protocol: str = Field(..., alias="x402Protocol")
    api_version: str = Field(..., alias="apiVersion")
    name: str
