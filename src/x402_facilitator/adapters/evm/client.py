"""
EVM Chain Client

Implements the ChainClient capability for EVM networks (Cronos and other
EIP-155 chains) with web3.py.

Key Features:
    - 0x hex address normalization
    - EIP-191 personal message signing and signer recovery
    - Native value transfers and ERC20 ``transfer`` calls with a fixed gas ceiling
    - Receipt lookups mapped onto the shared TransactionInfo shape

Dependencies:
    - web3.py: For blockchain RPC interaction
    - eth_account: For signature recovery and transaction signing
"""

from typing import Any, Dict, Optional

import structlog
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from ...catalog import EVM_FAMILY
from ...config import DEFAULT_EVM_RPC_URL
from ...engine.exceptions import TransactionExecutionError
from ...schemas.bases import TransactionInfo
from ..bases import ChainClient, Wallet, strip_hex_prefix
from .ERC20_ABI import get_transfer_abi
from .constants import (
    NATIVE_TRANSFER_GAS,
    DEFAULT_TOKEN_TRANSFER_GAS,
    RECEIPT_SUCCESS,
    RECEIPT_REVERT,
)

logger = structlog.get_logger(__name__)


def _is_hex(value: str) -> bool:
    try:
        int(value, 16)
    except ValueError:
        return False
    return True


class EVMClient(ChainClient):
    """
    web3.py backed chain client.

    A single AsyncWeb3 instance is created lazily for the configured RPC
    endpoint; pass ``web3`` to supply one (custom provider, tests).

    Example:
        client = EVMClient("https://evm-t3.cronos.org")
        tx_id = await client.submit_native_transfer(wallet, "0x...", 10**18)
        info = await client.get_transaction_info(tx_id)
    """

    family = EVM_FAMILY
    default_fee_limit = DEFAULT_TOKEN_TRANSFER_GAS

    def __init__(
        self,
        rpc_url: str = DEFAULT_EVM_RPC_URL,
        request_timeout: float = 30.0,
        web3: Optional[AsyncWeb3] = None,
    ):
        self.rpc_url = rpc_url
        self._request_timeout = request_timeout
        self._web3 = web3

    def _get_web3_instance(self) -> AsyncWeb3:
        """
        Return the AsyncWeb3 instance for the configured RPC endpoint.

        Returns:
            AsyncWeb3: Instance connected to ``rpc_url``
        """
        if self._web3 is None:
            self._web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
                self.rpc_url,
                request_kwargs={"timeout": self._request_timeout}
            ))
        return self._web3

    # ------------------------------------------------------------------
    # Addresses and signatures
    # ------------------------------------------------------------------

    def normalize_address(self, address: str) -> str:
        if not isinstance(address, str):
            return str(address).lower()
        lowered = address.strip().lower()
        if len(lowered) == 40 and _is_hex(lowered):
            return "0x" + lowered
        return lowered

    def recover_address(self, message: str, signature: str) -> str:
        signable = encode_defunct(text=message)
        return Account.recover_message(signable, signature=bytes.fromhex(strip_hex_prefix(signature)))

    def sign_message(self, message: str, private_key: str) -> str:
        signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
        return bytes(signed.signature).hex()

    def address_from_private_key(self, private_key: str) -> str:
        return Account.from_key(private_key).address

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def _send(self, web3: AsyncWeb3, tx_dict: Dict[str, Any], wallet: Wallet) -> str:
        account = Account.from_key(wallet.private_key.get_secret_value())
        signed_tx = account.sign_transaction(tx_dict)
        tx_hash = await web3.eth.send_raw_transaction(signed_tx.raw_transaction)
        tx_id = Web3.to_hex(tx_hash)
        logger.info("evm_transaction_broadcast", tx_id=tx_id)
        return tx_id

    async def submit_native_transfer(self, wallet: Wallet, to: str, value: int) -> str:
        web3 = self._get_web3_instance()
        sender = AsyncWeb3.to_checksum_address(wallet.address)
        try:
            tx_dict = {
                "from": sender,
                "to": AsyncWeb3.to_checksum_address(to),
                "value": value,
                "gas": NATIVE_TRANSFER_GAS,
                "gasPrice": await web3.eth.gas_price,
                "nonce": await web3.eth.get_transaction_count(sender),
                "chainId": await web3.eth.chain_id,
            }
            return await self._send(web3, tx_dict, wallet)
        except (Web3Exception, ValueError) as e:
            raise TransactionExecutionError(
                f"native transfer failed: {e}", rpc_method="eth_sendRawTransaction"
            ) from e

    async def submit_token_transfer(
        self,
        wallet: Wallet,
        token_address: str,
        to: str,
        value: int,
        fee_limit: int,
    ) -> str:
        web3 = self._get_web3_instance()
        sender = AsyncWeb3.to_checksum_address(wallet.address)
        try:
            contract = web3.eth.contract(
                address=AsyncWeb3.to_checksum_address(token_address),
                abi=get_transfer_abi(),
            )
            tx_fn = contract.functions.transfer(AsyncWeb3.to_checksum_address(to), value)
            tx_dict = await tx_fn.build_transaction({
                "from": sender,
                "gas": fee_limit,
                "gasPrice": await web3.eth.gas_price,
                "nonce": await web3.eth.get_transaction_count(sender),
                "chainId": await web3.eth.chain_id,
            })
            return await self._send(web3, tx_dict, wallet)
        except (Web3Exception, ValueError) as e:
            raise TransactionExecutionError(
                f"token transfer failed: {e}", rpc_method="eth_sendRawTransaction"
            ) from e

    async def get_transaction_info(self, tx_id: str) -> Optional[TransactionInfo]:
        web3 = self._get_web3_instance()
        try:
            receipt = await web3.eth.get_transaction_receipt(tx_id)
        except TransactionNotFound:
            return None
        if not receipt:
            return None

        gas_used = receipt.get("gasUsed", 0)
        return TransactionInfo(
            tx_id=tx_id,
            receipt_result=RECEIPT_SUCCESS if receipt.get("status") == 1 else RECEIPT_REVERT,
            block_number=receipt.get("blockNumber"),
            fee=gas_used * receipt.get("effectiveGasPrice", 0),
            raw={
                "status": receipt.get("status"),
                "blockNumber": receipt.get("blockNumber"),
                "gasUsed": gas_used,
            },
        )
