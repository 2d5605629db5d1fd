"""
Supported Networks, Tokens and Schemes

Static catalog of what this facilitator accepts. The catalog is pure data:
it resolves a network tag to its family and endpoints and lists the tokens and
scheme/network combinations advertised by ``GET /supported``.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .engine.exceptions import UnsupportedNetworkError
from .schemas.https import SupportedScheme, NetworkInfo, TokenInfo, SupportedData


TRON_FAMILY = "tron"
EVM_FAMILY = "evm"


class TokenConfig(BaseModel):
    """Token asset configuration (``address`` None for the native asset)."""
    symbol: str
    name: str
    decimals: int = Field(..., ge=0)
    address: Optional[str] = Field(None, description="Token contract address")


class NetworkConfig(BaseModel):
    """Network configuration."""
    network: str
    name: str
    family: str = Field(..., description="Chain client family (tron/evm)")
    chain_id: int
    rpc_url: str = Field(..., description="Public node endpoint")
    explorer_url: str = Field(..., description="Block explorer URL")
    native: TokenConfig
    tokens: Dict[str, TokenConfig] = Field(default_factory=dict)
    schemes: List[str] = Field(default_factory=list, description="Schemes accepted on this network")


_NETWORKS_DATA: Dict = {
    "tron-mainnet": {
        "name": "TRON Mainnet",
        "family": TRON_FAMILY,
        "chain_id": 728126428,
        "rpc_url": "https://api.trongrid.io",
        "explorer_url": "https://tronscan.org",
        "native": {"symbol": "TRX", "name": "TRON", "decimals": 6},
        "tokens": {
            "USDT": {
                "symbol": "USDT",
                "name": "Tether USD",
                "decimals": 6,
                "address": "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t",
            },
        },
        "schemes": ["tron-transfer"],
    },
    "tron-shasta": {
        "name": "TRON Shasta Testnet",
        "family": TRON_FAMILY,
        "chain_id": 2494104990,
        "rpc_url": "https://api.shasta.trongrid.io",
        "explorer_url": "https://shasta.tronscan.org",
        "native": {"symbol": "TRX", "name": "TRON", "decimals": 6},
        "tokens": {
            "USDT": {
                "symbol": "USDT",
                "name": "Tether USD",
                "decimals": 6,
                "address": "TG3XXyExBkPp9nzdajDZsozEu4BkaSJozs",
            },
        },
        "schemes": ["tron-transfer"],
    },
    "tron-nile": {
        "name": "TRON Nile Testnet",
        "family": TRON_FAMILY,
        "chain_id": 3448148188,
        "rpc_url": "https://nile.trongrid.io",
        "explorer_url": "https://nile.tronscan.org",
        "native": {"symbol": "TRX", "name": "TRON", "decimals": 6},
        "tokens": {},
        "schemes": ["tron-transfer"],
    },
    "cronos-testnet": {
        "name": "Cronos Testnet",
        "family": EVM_FAMILY,
        "chain_id": 338,
        "rpc_url": "https://evm-t3.cronos.org",
        "explorer_url": "https://explorer.cronos.org/testnet",
        "native": {"symbol": "TCRO", "name": "Test Cronos", "decimals": 18},
        "tokens": {
            "USDC": {
                "symbol": "USDC",
                "name": "USD Coin",
                "decimals": 6,
                "address": "0x5425890298aed601595a70AB815c96711a31Bc65",
            },
        },
        "schemes": ["exact", "eip-3009"],
    },
    "cronos-mainnet": {
        "name": "Cronos Mainnet",
        "family": EVM_FAMILY,
        "chain_id": 25,
        "rpc_url": "https://evm.cronos.org",
        "explorer_url": "https://explorer.cronos.org",
        "native": {"symbol": "CRO", "name": "Cronos", "decimals": 18},
        "tokens": {},
        "schemes": ["exact"],
    },
}

NETWORKS: Dict[str, NetworkConfig] = {
    network: NetworkConfig(network=network, **data) for network, data in _NETWORKS_DATA.items()
}


def get_network(network: str) -> NetworkConfig:
    """
    Look up a network by tag.

    Raises:
        UnsupportedNetworkError: If the tag is not in the catalog.
    """
    try:
        return NETWORKS[network]
    except KeyError:
        raise UnsupportedNetworkError(f"unsupported network: {network}")


def network_family(network: str) -> str:
    """Return the chain client family (``tron``/``evm``) serving ``network``."""
    return get_network(network).family


def networks_for_family(family: str) -> List[NetworkConfig]:
    return [config for config in NETWORKS.values() if config.family == family]


def supported_data(family: Optional[str] = None) -> SupportedData:
    """
    Build the ``GET /supported`` payload.

    Args:
        family: Restrict the listing to one network family.

    Returns:
        SupportedData: Scheme kinds, networks and tokens.
    """
    data = SupportedData()
    for config in NETWORKS.values():
        if family is not None and config.family != family:
            continue

        data.networks.append(NetworkInfo(
            name=config.network,
            family=config.family,
            chain_id=config.chain_id,
            rpc_url=config.rpc_url,
            explorer_url=config.explorer_url,
        ))

        assets = [config.native] + list(config.tokens.values())
        for asset in assets:
            data.tokens.append(TokenInfo(
                symbol=asset.symbol,
                name=asset.name,
                address=asset.address,
                decimals=asset.decimals,
                network=config.network,
            ))

        for scheme in config.schemes:
            # eip-3009 authorizes token contracts only
            scheme_assets = list(config.tokens.values()) if scheme == "eip-3009" else assets
            for asset in scheme_assets:
                data.schemes.append(SupportedScheme(
                    scheme=scheme,
                    network=config.network,
                    chain_id=config.chain_id,
                    token=asset.symbol,
                    token_address=asset.address,
                    description=f"{scheme} payment of {asset.symbol} on {config.name}",
                ))
    return data

