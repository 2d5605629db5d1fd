from .client import TronClient, encode_transfer_parameters
from .addresses import to_hex_address, to_base58_address, is_valid_address, from_account_hash

__all__ = [
    "TronClient",
    "encode_transfer_parameters",
    "to_hex_address",
    "to_base58_address",
    "is_valid_address",
    "from_account_hash",
]
