"""
x402 payment facilitator.

Verifies x402 payment headers against payment requirements and settles them
on TRON and EVM networks.
"""

from .schemas import (
    PaymentRequirements,
    PaymentToken,
    TransferPayload,
    TransferSignature,
    AuthorizationSignature,
    VerificationResult,
    SettlementResult,
    SettlementStatus,
    __version__,
)
from .engine import (
    Facilitator,
    FacilitatorHub,
    SettlementPolicy,
    WalletProvider,
    SchemeKind,
    PaymentScheme,
    SchemeRegistry,
    DEFAULT_SCHEMES,
    decode_payment_header,
    encode_payment_header,
)
from .adapters import ChainClient, Wallet, ChainClientHub, TronClient, EVMClient
from .config import FacilitatorConfig
from .servers import FacilitatorServer

__all__ = [
    "PaymentRequirements",
    "PaymentToken",
    "TransferPayload",
    "TransferSignature",
    "AuthorizationSignature",
    "VerificationResult",
    "SettlementResult",
    "SettlementStatus",
    "__version__",
    "Facilitator",
    "FacilitatorHub",
    "SettlementPolicy",
    "WalletProvider",
    "SchemeKind",
    "PaymentScheme",
    "SchemeRegistry",
    "DEFAULT_SCHEMES",
    "decode_payment_header",
    "encode_payment_header",
    "ChainClient",
    "Wallet",
    "ChainClientHub",
    "TronClient",
    "EVMClient",
    "FacilitatorConfig",
    "FacilitatorServer",
]
