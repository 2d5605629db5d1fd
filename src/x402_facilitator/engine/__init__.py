from .facilitator import Facilitator, FacilitatorHub
from .verifier import PaymentVerifier, build_signing_message
from .settlement import SettlementEngine, SettlementPolicy
from .wallet import WalletProvider
from .schemes import SchemeKind, PaymentScheme, SchemeRegistry, DEFAULT_SCHEMES
from .codec import decode_payment_header, encode_payment_header
from .polling import poll_until, PollOutcome

__all__ = [
    "Facilitator",
    "FacilitatorHub",
    "PaymentVerifier",
    "build_signing_message",
    "SettlementEngine",
    "SettlementPolicy",
    "WalletProvider",
    "SchemeKind",
    "PaymentScheme",
    "SchemeRegistry",
    "DEFAULT_SCHEMES",
    "decode_payment_header",
    "encode_payment_header",
    "poll_until",
    "PollOutcome",
]
