from .client import EVMClient
from .ERC20_ABI import get_transfer_abi

__all__ = [
    "EVMClient",
    "get_transfer_abi",
]
