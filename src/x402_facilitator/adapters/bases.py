"""
Abstract Base Classes for Chain Clients

Defines the capability set the verification and settlement engines depend on.
Each supported network family (TRON, EVM) provides one concrete ChainClient;
the engines never import a network SDK directly, so adding a network means
adding a client rather than touching validation logic.

Core Classes:
    - Wallet: The facilitator's settlement identity (address + signing key)
    - ChainClient: Per-family address, signature, submission and status primitives
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ..schemas.bases import TransactionInfo


def strip_hex_prefix(value: str) -> str:
    """Drop a leading ``0x`` or ``0X`` from a hex string."""
    return value[2:] if value[:2] in ("0x", "0X") else value


class Wallet(BaseModel):
    """
    Settlement identity used to sign outgoing transfers.

    Attributes:
        address: Wallet address in the family's display encoding
        private_key: Hex private key, never logged or serialized in clear
        endpoint: Node endpoint the wallet settles through
    """

    model_config = ConfigDict(frozen=True)

    address: str
    private_key: SecretStr = Field(..., repr=False)
    endpoint: str


class ChainClient(ABC):
    """
    Abstract chain client for one network family.

    Responsibilities:
    1. Address handling: normalize every encoding the family defines into a
       single lower-case canonical form used for all equality comparisons
    2. Signatures: recover the signer of a personal message, verify a claimed
       signer (failing closed), and sign messages
    3. Settlement: submit native and token-contract transfers from a Wallet
    4. Status: report what the node knows about a submitted transaction

    Submission methods raise ``TransactionExecutionError`` when the node
    rejects a transaction and ``BlockchainInteractionError`` on transport
    failures. Address and verification helpers never raise.

    Example Implementation:
        class TronClient(ChainClient):
            family = "tron"
            ...
    """

    family: str = ""
    #: Fee ceiling passed to token transfers when the caller does not override it.
    default_fee_limit: int = 0

    @abstractmethod
    def normalize_address(self, address: str) -> str:
        """
        Convert an address in any accepted encoding to canonical form.

        Non-address input is lower-cased best-effort so that it compares
        unequal to every valid address instead of raising.

        Args:
            address: Address string in any encoding

        Returns:
            str: Canonical lower-case address
        """

    @abstractmethod
    def recover_address(self, message: str, signature: str) -> str:
        """
        Recover the address that signed ``message`` as a personal message.

        Args:
            message: UTF-8 message that was signed
            signature: Hex encoded 65-byte signature (0x prefix optional)

        Returns:
            str: Signer address in the family's display encoding

        Raises:
            ValueError: If the signature is malformed or recovery fails
        """

    def verify_signature(self, message: str, signature: str, claimed_address: str) -> bool:
        """
        Check that ``signature`` over ``message`` was produced by ``claimed_address``.

        Fails closed: any error during recovery is reported as not verified.

        Returns:
            bool: True iff the normalized recovered signer equals the normalized claim
        """
        try:
            recovered = self.recover_address(message, signature)
        except Exception:
            return False
        return self.normalize_address(recovered) == self.normalize_address(claimed_address)

    @abstractmethod
    def sign_message(self, message: str, private_key: str) -> str:
        """
        Sign ``message`` as a personal message.

        Returns:
            str: Hex encoded 65-byte signature without 0x prefix
        """

    @abstractmethod
    def address_from_private_key(self, private_key: str) -> str:
        """Derive the display address controlled by ``private_key``."""

    @abstractmethod
    async def submit_native_transfer(self, wallet: Wallet, to: str, value: int) -> str:
        """
        Transfer ``value`` smallest units of the native asset from ``wallet`` to ``to``.

        Returns:
            str: Transaction identifier assigned at broadcast
        """

    @abstractmethod
    async def submit_token_transfer(
        self,
        wallet: Wallet,
        token_address: str,
        to: str,
        value: int,
        fee_limit: int,
    ) -> str:
        """
        Invoke ``transfer(to, value)`` on ``token_address`` from ``wallet``.

        Args:
            wallet: Sending settlement identity
            token_address: Token contract address
            to: Recipient address
            value: Amount in token smallest units
            fee_limit: Fixed fee ceiling (TRON energy fee limit in sun, EVM gas limit)

        Returns:
            str: Transaction identifier assigned at broadcast
        """

    @abstractmethod
    async def get_transaction_info(self, tx_id: str) -> Optional[TransactionInfo]:
        """
        Fetch what the node knows about ``tx_id``.

        Returns:
            Optional[TransactionInfo]: None while the transaction is not yet queryable
        """

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        return None
