"""
Chain Client Hub - Network Family Routing

Holds one ChainClient per network family and resolves network tags to the
client that serves them. Clients are process-lifetime singletons: the hub
creates them once from configuration and closes them on shutdown.

Architecture:
    ChainClientHub (you are here)
        ├── TronClient (tron-mainnet, tron-shasta, tron-nile)
        └── EVMClient (cronos-testnet, cronos-mainnet)
"""

from typing import Dict, List

from ..catalog import TRON_FAMILY, EVM_FAMILY, network_family
from ..config import FacilitatorConfig
from ..engine.exceptions import ConfigurationError
from .bases import ChainClient
from .evm.client import EVMClient
from .tron.client import TronClient


class ChainClientHub:
    """
    Registry of chain clients keyed by network family.

    Example:
        hub = ChainClientHub.from_config(FacilitatorConfig.from_env())
        client = hub.for_network("tron-shasta")
    """

    def __init__(self, clients: Dict[str, ChainClient] = None):
        self._clients: Dict[str, ChainClient] = {}
        for client in (clients or {}).values():
            self.register(client)

    @classmethod
    def from_config(cls, config: FacilitatorConfig) -> "ChainClientHub":
        """
        Build the TRON and EVM clients described by ``config``.

        Args:
            config: Facilitator configuration

        Returns:
            ChainClientHub: Hub with one client per supported family
        """
        api_key = config.tron_api_key.get_secret_value() if config.tron_api_key else None
        return cls({
            TRON_FAMILY: TronClient(
                full_host=config.tron_full_host,
                api_key=api_key,
                request_timeout=config.request_timeout,
            ),
            EVM_FAMILY: EVMClient(
                rpc_url=config.evm_rpc_url,
                request_timeout=config.request_timeout,
            ),
        })

    def register(self, client: ChainClient) -> None:
        if not client.family:
            raise ConfigurationError(f"{type(client).__name__} does not declare a network family")
        self._clients[client.family] = client

    def get(self, family: str) -> ChainClient:
        """
        Return the client serving ``family``.

        Raises:
            ConfigurationError: If no client is registered for the family
        """
        try:
            return self._clients[family]
        except KeyError:
            raise ConfigurationError(f"no chain client registered for family: {family}")

    def for_network(self, network: str) -> ChainClient:
        """Return the client serving ``network`` (resolved through the catalog)."""
        return self.get(network_family(network))

    def families(self) -> List[str]:
        return list(self._clients)

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()
