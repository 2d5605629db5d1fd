"""
Facilitator - verify/settle entry points

``Facilitator`` wires the verification and settlement engines for one network
family around an injected ChainClient and WalletProvider. ``FacilitatorHub``
holds one facilitator per family and routes a network tag to the right one.

Example:
    config = FacilitatorConfig.from_env()
    hub = FacilitatorHub.from_config(config)
    result = await hub.for_network("tron-shasta").settle(header, requirements)
"""

import asyncio
import time
from typing import Awaitable, Callable, Dict, List

from ..adapters.adapters_hub import ChainClientHub
from ..adapters.bases import ChainClient
from ..catalog import network_family
from ..config import FacilitatorConfig
from ..schemas.bases import PaymentRequirements, VerificationResult, SettlementResult
from .exceptions import UnsupportedNetworkError
from .schemes import SchemeRegistry, DEFAULT_SCHEMES
from .settlement import SettlementEngine, SettlementPolicy
from .verifier import PaymentVerifier
from .wallet import WalletProvider


class Facilitator:
    """
    Verify and settle payments for one network family.

    Args:
        client: Chain client for the family
        wallets: Settlement wallet provider for the family
        schemes: Registered payment schemes
        clock: Current unix time in seconds
        policy: Settlement polling budget and fee ceiling
        sleep: Awaitable sleep used while polling
    """

    def __init__(
        self,
        client: ChainClient,
        wallets: WalletProvider,
        schemes: SchemeRegistry = DEFAULT_SCHEMES,
        clock: Callable[[], float] = time.time,
        policy: SettlementPolicy = SettlementPolicy(),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.wallets = wallets
        self.verifier = PaymentVerifier(client, schemes=schemes, clock=clock)
        self.settlement = SettlementEngine(
            client, wallets, self.verifier, policy=policy, sleep=sleep
        )

    @property
    def family(self) -> str:
        return self.client.family

    def verify(self, payment_header: str, requirements: PaymentRequirements) -> VerificationResult:
        return self.verifier.verify(payment_header, requirements)

    async def settle(self, payment_header: str, requirements: PaymentRequirements) -> SettlementResult:
        return await self.settlement.settle(payment_header, requirements)

    def is_settlement_available(self) -> bool:
        return self.settlement.is_available()


class FacilitatorHub:
    """
    Facilitators keyed by network family.

    Example:
        hub = FacilitatorHub([tron_facilitator])
        hub.for_network("tron-nile").verify(header, requirements)
    """

    def __init__(self, facilitators: List[Facilitator] = (), clients: ChainClientHub = None):
        self._facilitators: Dict[str, Facilitator] = {f.family: f for f in facilitators}
        self._clients = clients

    @classmethod
    def from_config(cls, config: FacilitatorConfig) -> "FacilitatorHub":
        """
        Build one facilitator per chain client family described by ``config``.

        Families without a configured private key still verify; their
        settlement reports unavailable.
        """
        clients = ChainClientHub.from_config(config)
        policy = SettlementPolicy(
            poll_interval=config.poll_interval,
            max_attempts=config.poll_attempts,
        )
        facilitators = []
        for family in clients.families():
            client = clients.get(family)
            facilitators.append(Facilitator(
                client,
                WalletProvider.from_config(config, client),
                policy=policy,
            ))
        return cls(facilitators, clients=clients)

    def get(self, family: str) -> Facilitator:
        """
        Raises:
            UnsupportedNetworkError: If no facilitator serves ``family``
        """
        try:
            return self._facilitators[family]
        except KeyError:
            raise UnsupportedNetworkError(f"no facilitator configured for family: {family}")

    def for_network(self, network: str) -> Facilitator:
        """
        Raises:
            UnsupportedNetworkError: If the network is unknown or its family is not served
        """
        return self.get(network_family(network))

    def availability(self) -> Dict[str, bool]:
        return {family: f.is_settlement_available() for family, f in self._facilitators.items()}

    async def aclose(self) -> None:
        if self._clients is not None:
            await self._clients.aclose()
        else:
            for facilitator in self._facilitators.values():
                await facilitator.client.aclose()
