
"""
ERC20 Smart Contract ABI Module

Minimal ABI definitions for the ERC20 calls the facilitator performs.

Usage:
    from .ERC20_ABI import get_transfer_abi

    contract = web3.eth.contract(address=token_address, abi=get_transfer_abi())
    tx = await contract.functions.transfer(to, value).build_transaction({...})
"""

from typing import Dict, Any, List


def get_transfer_abi() -> List[Dict[str, Any]]:
    """ABI fragment for ERC20 `transfer(to, value)`, enough to build the call."""
    return [
        {
            "name": "transfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "value", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        }
    ]
