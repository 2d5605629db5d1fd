"""
Settlement wallet provider.

Holds the facilitator's settlement identity for one network family. The
provider is created empty, initialized at most once (even when several
startup paths race), and read-only afterwards. Verification never needs it;
settlement checks ``is_available()`` before doing anything else.
"""

import threading
from typing import Optional

import structlog
from pydantic import SecretStr

from ..adapters.bases import ChainClient, Wallet
from ..catalog import TRON_FAMILY, EVM_FAMILY
from ..config import FacilitatorConfig
from .exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


class WalletProvider:
    """
    Process-wide holder of a settlement Wallet.

    Example:
        wallets = WalletProvider()
        wallets.initialize(private_key, tron_client)
        if wallets.is_available():
            wallet = wallets.get()
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._wallet: Optional[Wallet] = None

    @classmethod
    def from_config(cls, config: FacilitatorConfig, client: ChainClient) -> "WalletProvider":
        """
        Create a provider for ``client``'s family, initialized when a key is configured.

        A missing key leaves the provider unavailable: the facilitator still
        verifies payments but reports settlement as unavailable.
        """
        provider = cls()
        private_key = {
            TRON_FAMILY: config.tron_private_key,
            EVM_FAMILY: config.evm_private_key,
        }.get(client.family)
        if private_key is None:
            logger.warning("settlement_wallet_not_configured", family=client.family)
            return provider
        endpoint = config.tron_full_host if client.family == TRON_FAMILY else config.evm_rpc_url
        provider.initialize(private_key.get_secret_value(), client, endpoint=endpoint)
        return provider

    def initialize(self, private_key: str, client: ChainClient, endpoint: str = "") -> Wallet:
        """
        Create the settlement wallet once.

        Later calls return the existing wallet without re-deriving it.

        Args:
            private_key: Hex private key (0x prefix optional)
            client: Chain client used to derive the wallet address
            endpoint: Node endpoint the wallet settles through

        Returns:
            Wallet: The provider's wallet

        Raises:
            ConfigurationError: If the private key is empty or invalid
        """
        with self._lock:
            if self._wallet is not None:
                return self._wallet
            if not private_key:
                raise ConfigurationError("settlement private key is empty")
            try:
                address = client.address_from_private_key(private_key)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(f"invalid settlement private key: {e}") from e

            self._wallet = Wallet(
                address=address,
                private_key=SecretStr(private_key),
                endpoint=endpoint,
            )
            logger.info("settlement_wallet_initialized", family=client.family, address=address)
            return self._wallet

    def is_available(self) -> bool:
        return self._wallet is not None

    def get(self) -> Wallet:
        """
        Return the settlement wallet.

        Raises:
            ConfigurationError: If called before ``initialize``
        """
        wallet = self._wallet
        if wallet is None:
            raise ConfigurationError("settlement wallet is not initialized")
        return wallet
