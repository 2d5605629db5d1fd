from .bases import (
    CanonicalModel,
    PaymentRequirements,
    TransferPayload,
    TransferSignature,
    AuthorizationSignature,
    SignatureTypes,
    PaymentToken,
    DecodeFailure,
    VerificationResult,
    SettlementStatus,
    SettlementResult,
    TransactionInfo,
)
from .https import (
    FacilitatorRequest,
    ApiResponse,
    SupportedScheme,
    NetworkInfo,
    TokenInfo,
    SupportedData,
    HealthData,
    VersionData,
)
from .versions import ProtocolVersion, SupportedVersions, __version__

__all__ = [
    "CanonicalModel",
    "PaymentRequirements",
    "TransferPayload",
    "TransferSignature",
    "AuthorizationSignature",
    "SignatureTypes",
    "PaymentToken",
    "DecodeFailure",
    "VerificationResult",
    "SettlementStatus",
    "SettlementResult",
    "TransactionInfo",
    "FacilitatorRequest",
    "ApiResponse",
    "SupportedScheme",
    "NetworkInfo",
    "TokenInfo",
    "SupportedData",
    "HealthData",
    "VersionData",
    "ProtocolVersion",
    "SupportedVersions",
    "__version__",
]
