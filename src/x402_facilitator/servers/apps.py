"""
x402 Facilitator Server - FastAPI wrapper around the verify/settle engine.

Routes:
    POST /verify, POST /settle            any supported network
    GET|POST /tron/verify, /tron/settle   TRON networks only (GET returns the request schema)
    GET /supported, /health, /version     facilitator metadata

Every response uses the ApiResponse envelope. The server only checks that the
required top-level fields are present and well formed; payment validation is
left to the engine, whose results are mapped to status codes here.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..catalog import TRON_FAMILY, supported_data, networks_for_family
from ..config import FacilitatorConfig
from ..engine.exceptions import UnsupportedNetworkError
from ..engine.facilitator import Facilitator, FacilitatorHub
from ..logs import configure_logging
from ..schemas.bases import PaymentRequirements, SettlementStatus
from ..schemas.https import FacilitatorRequest, ApiResponse, HealthData, VersionData
from ..schemas.versions import __version__, API_VERSION, SupportedVersions

logger = structlog.get_logger(__name__)

ParsedRequest = Tuple[Facilitator, str, PaymentRequirements]


def _respond(status_code: int, response: ApiResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", exclude_none=True),
    )


@asynccontextmanager
async def _lifespan(app: "FacilitatorServer"):
    yield
    await app.hub.aclose()


class FacilitatorServer(FastAPI):
    """FastAPI server exposing the x402 facilitator endpoints."""

    def __init__(self, hub: FacilitatorHub, **fastapi_kwargs):
        """Initialize the facilitator server.

        Args:
            hub: Facilitators keyed by network family
            **fastapi_kwargs: FastAPI arguments (title, version, etc.)
        """
        self.hub = hub
        self.started_at = time.monotonic()

        fastapi_kwargs.setdefault("title", "x402 Facilitator")
        fastapi_kwargs.setdefault("version", __version__)
        fastapi_kwargs.setdefault("lifespan", _lifespan)
        super().__init__(**fastapi_kwargs)

        self._setup_facilitator_endpoints()
        self._setup_family_endpoints(TRON_FAMILY, prefix="/tron", code_prefix="TRON_")
        self._setup_info_endpoints()

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _parse_request(
        self,
        request: Request,
        family: Optional[str],
        code_prefix: str,
    ) -> Union[ParsedRequest, JSONResponse]:
        """Validate the request body and resolve the facilitator for its network."""
        try:
            body = FacilitatorRequest.model_validate(await request.json())
        except (ValueError, ValidationError):
            return _respond(400, ApiResponse.error(
                f"{code_prefix}INVALID_REQUEST", "Request body must be a JSON object"
            ))

        if not body.payment_header:
            return _respond(400, ApiResponse.error(
                f"{code_prefix}MISSING_PAYMENT_HEADER", "paymentHeader is required"
            ))
        if body.payment_requirements is None:
            return _respond(400, ApiResponse.error(
                f"{code_prefix}MISSING_REQUIREMENTS", "paymentRequirements is required"
            ))

        try:
            requirements = PaymentRequirements.model_validate(body.payment_requirements)
        except ValidationError as e:
            errors = [
                {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            return _respond(400, ApiResponse.error(
                f"{code_prefix}INVALID_REQUIREMENTS",
                "paymentRequirements is invalid",
                details={"errors": errors},
            ))

        if family is not None and not requirements.network.startswith(f"{family}-"):
            return _respond(400, ApiResponse.error(
                f"{code_prefix}INVALID_NETWORK",
                f"network must be a {family} network, got {requirements.network}",
            ))

        try:
            facilitator = self.hub.for_network(requirements.network)
        except UnsupportedNetworkError as e:
            return _respond(400, ApiResponse.error(f"{code_prefix}UNSUPPORTED_NETWORK", str(e)))

        return facilitator, body.payment_header, requirements

    async def _handle_verify(self, request: Request, family: Optional[str] = None, code_prefix: str = ""):
        parsed = await self._parse_request(request, family, code_prefix)
        if isinstance(parsed, JSONResponse):
            return parsed
        facilitator, payment_header, requirements = parsed

        try:
            result = facilitator.verify(payment_header, requirements)
        except Exception as e:
            logger.exception("verify_error", network=requirements.network)
            return _respond(500, ApiResponse.error(
                f"{code_prefix}VERIFY_ERROR", "Verification error", details={"error": str(e)}
            ))

        if result.is_valid:
            return _respond(200, ApiResponse.ok(
                f"{code_prefix}PAYMENT_VALID", "Payment is valid", data=result.to_dict()
            ))
        return _respond(400, ApiResponse.error(
            f"{code_prefix}PAYMENT_INVALID", result.invalid_reason, data=result.to_dict()
        ))

    async def _handle_settle(self, request: Request, family: Optional[str] = None, code_prefix: str = ""):
        parsed = await self._parse_request(request, family, code_prefix)
        if isinstance(parsed, JSONResponse):
            return parsed
        facilitator, payment_header, requirements = parsed

        if not facilitator.is_settlement_available():
            return _respond(503, ApiResponse.error(
                f"{code_prefix}SETTLEMENT_UNAVAILABLE",
                f"Settlement is not configured for {facilitator.family} networks",
            ))

        try:
            result = await facilitator.settle(payment_header, requirements)
        except Exception as e:
            logger.exception("settle_error", network=requirements.network)
            return _respond(500, ApiResponse.error(
                f"{code_prefix}SETTLEMENT_ERROR", "Settlement error", details={"error": str(e)}
            ))

        if result.success:
            return _respond(200, ApiResponse.ok(
                f"{code_prefix}SETTLEMENT_EXECUTED", "Settlement executed", data=result.to_dict()
            ))
        if result.status == SettlementStatus.UNAVAILABLE:
            return _respond(503, ApiResponse.error(
                f"{code_prefix}SETTLEMENT_UNAVAILABLE", result.error, data=result.to_dict()
            ))
        return _respond(400, ApiResponse.error(
            f"{code_prefix}SETTLEMENT_FAILED", result.error, data=result.to_dict()
        ))

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def _setup_facilitator_endpoints(self) -> None:
        """Setup network-routed verify and settle endpoints."""

        @self.post("/verify")
        async def verify(request: Request):
            """Verify a payment header against payment requirements."""
            return await self._handle_verify(request)

        @self.post("/settle")
        async def settle(request: Request):
            """Verify and settle a payment on-chain."""
            return await self._handle_settle(request)

    def _setup_family_endpoints(self, family: str, prefix: str, code_prefix: str) -> None:
        """Setup verify and settle endpoints restricted to one network family.

        Args:
            family: Network family served by the routes
            prefix: Route prefix (e.g. /tron)
            code_prefix: Prefix added to every response code
        """
        networks = [config.network for config in networks_for_family(family)]
        schema = {
            "method": "POST",
            "body": {
                "paymentHeader": {"type": "string", "description": "Base64 encoded payment token"},
                "paymentRequirements": PaymentRequirements.model_json_schema(by_alias=True),
            },
            "networks": networks,
        }

        @self.get(f"{prefix}/verify")
        async def family_verify_schema():
            return _respond(200, ApiResponse.ok(
                f"{code_prefix}VERIFY_SCHEMA", f"POST {prefix}/verify request schema", data=schema
            ))

        @self.post(f"{prefix}/verify")
        async def family_verify(request: Request):
            return await self._handle_verify(request, family=family, code_prefix=code_prefix)

        @self.get(f"{prefix}/settle")
        async def family_settle_schema():
            return _respond(200, ApiResponse.ok(
                f"{code_prefix}SETTLE_SCHEMA", f"POST {prefix}/settle request schema", data=schema
            ))

        @self.post(f"{prefix}/settle")
        async def family_settle(request: Request):
            return await self._handle_settle(request, family=family, code_prefix=code_prefix)

    def _setup_info_endpoints(self) -> None:
        """Setup supported, health and version endpoints."""

        @self.get("/supported")
        async def supported():
            data = supported_data().model_dump(mode="json", by_alias=True)
            return _respond(200, ApiResponse.ok("SUPPORTED", "Supported payment kinds", data=data))

        @self.get("/health")
        async def health():
            data = HealthData(
                version=__version__,
                uptime=round(time.monotonic() - self.started_at, 3),
                timestamp=datetime.now(timezone.utc).isoformat(),
                settlement=self.hub.availability(),
            )
            return _respond(200, ApiResponse.ok("HEALTHY", "Facilitator is healthy", data=data.model_dump()))

        @self.get("/version")
        async def version():
            data = VersionData(
                version=__version__,
                x402_protocol=SupportedVersions.latest().value,
                api_version=API_VERSION,
                name="x402-facilitator",
            )
            return _respond(200, ApiResponse.ok("VERSION", "Facilitator version", data=data.model_dump(by_alias=True)))


def create_app(config: Optional[FacilitatorConfig] = None, **fastapi_kwargs) -> FacilitatorServer:
    """
    Build a facilitator server from configuration.

    Args:
        config: Facilitator configuration (default: read from the environment)
        **fastapi_kwargs: FastAPI arguments

    Returns:
        FacilitatorServer: Ready to serve with uvicorn
    """
    config = config or FacilitatorConfig.from_env()
    configure_logging(config.log_level, config.log_format)
    return FacilitatorServer(FacilitatorHub.from_config(config), **fastapi_kwargs)
