from .bases import ChainClient, Wallet, strip_hex_prefix
from .adapters_hub import ChainClientHub
from .tron import TronClient
from .evm import EVMClient

__all__ = [
    "ChainClient",
    "Wallet",
    "strip_hex_prefix",
    "ChainClientHub",
    "TronClient",
    "EVMClient",
]
