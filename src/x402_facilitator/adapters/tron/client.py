"""
TRON Chain Client

Implements the ChainClient capability for TRON networks on top of the
TronGrid HTTP API. Transactions are built by the node, signed locally and
broadcast back; message signatures use TronWeb's personal-message framing.

Key Features:
    - base58check / hex address normalization
    - TronWeb compatible message signing and signer recovery
    - TRX transfers and TRC20 ``transfer(address,uint256)`` calls
    - Transaction info lookups for confirmation polling

Dependencies:
    - httpx: Async HTTP client for the TronGrid API
    - eth_account: Personal message hashing and signer recovery (secp256k1)
    - eth_keys: Raw transaction id signing
    - base58: Address encoding
"""

import hashlib
from typing import Any, Dict, Optional

import httpx
import structlog
from eth_account import Account
from eth_account.messages import SignableMessage
from eth_keys import keys

from ...catalog import TRON_FAMILY
from ...config import DEFAULT_TRON_FULL_HOST
from ...engine.exceptions import BlockchainInteractionError, TransactionExecutionError
from ...schemas.bases import TransactionInfo
from ..bases import ChainClient, Wallet, strip_hex_prefix
from .addresses import to_hex_address, to_base58_address, from_account_hash, to_abi_word
from .constants import (
    MESSAGE_VERSION,
    MESSAGE_HEADER,
    TRANSFER_FUNCTION_SELECTOR,
    DEFAULT_FEE_LIMIT,
    API_KEY_HEADER,
    CREATE_TRANSACTION_PATH,
    TRIGGER_SMART_CONTRACT_PATH,
    BROADCAST_TRANSACTION_PATH,
    GET_TRANSACTION_INFO_PATH,
)

logger = structlog.get_logger(__name__)

_UINT256_MAX = 2 ** 256 - 1


def _tron_signable_message(message: str) -> SignableMessage:
    return SignableMessage(
        version=MESSAGE_VERSION,
        header=MESSAGE_HEADER,
        body=message.encode("utf-8"),
    )


def _decode_node_message(message: Optional[str]) -> str:
    """TronGrid hex-encodes error messages; fall back to the raw text."""
    if not message:
        return "unknown error"
    try:
        return bytes.fromhex(message).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return message


def encode_transfer_parameters(to: str, value: int) -> str:
    """
    ABI-encode the arguments of ``transfer(address,uint256)``.

    Raises:
        ValueError: If ``to`` is not a TRON address or ``value`` is out of uint256 range.
    """
    if value < 0 or value > _UINT256_MAX:
        raise ValueError(f"transfer value out of uint256 range: {value}")
    return to_abi_word(to) + format(value, "x").rjust(64, "0")


class TronClient(ChainClient):
    """
    TronGrid backed chain client.

    The HTTP client is created lazily and reused for the lifetime of the
    chain client; pass ``http_client`` to supply a preconfigured one
    (custom transport, proxies, tests).

    Attributes:
        full_host: TronGrid base URL

    Example:
        client = TronClient("https://api.shasta.trongrid.io")
        info = await client.get_transaction_info(tx_id)
        await client.aclose()
    """

    family = TRON_FAMILY
    default_fee_limit = DEFAULT_FEE_LIMIT

    def __init__(
        self,
        full_host: str = DEFAULT_TRON_FULL_HOST,
        api_key: Optional[str] = None,
        request_timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.full_host = full_host.rstrip("/")
        self._api_key = api_key
        self._request_timeout = request_timeout
        self._http_client = http_client

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers[API_KEY_HEADER] = self._api_key
            self._http_client = httpx.AsyncClient(
                base_url=self.full_host,
                headers=headers,
                timeout=self._request_timeout,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST ``payload`` to a TronGrid endpoint and return the decoded JSON object.

        Raises:
            BlockchainInteractionError: On transport errors, non-2xx status or a
                                        body that is not a JSON object
        """
        try:
            response = await self._get_http_client().post(path, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise BlockchainInteractionError(f"TRON node request failed: {e}", rpc_method=path) from e
        except ValueError as e:
            raise BlockchainInteractionError("TRON node returned invalid JSON", rpc_method=path) from e

        if not isinstance(data, dict):
            raise BlockchainInteractionError("TRON node returned unexpected payload", rpc_method=path)
        return data

    # ------------------------------------------------------------------
    # Addresses and signatures
    # ------------------------------------------------------------------

    def normalize_address(self, address: str) -> str:
        return to_hex_address(address)

    def recover_address(self, message: str, signature: str) -> str:
        signable = _tron_signable_message(message)
        evm_address = Account.recover_message(signable, signature=bytes.fromhex(strip_hex_prefix(signature)))
        return from_account_hash(bytes.fromhex(strip_hex_prefix(evm_address)))

    def sign_message(self, message: str, private_key: str) -> str:
        signed = Account.sign_message(_tron_signable_message(message), private_key=private_key)
        return bytes(signed.signature).hex()

    def address_from_private_key(self, private_key: str) -> str:
        account = Account.from_key(private_key)
        return from_account_hash(bytes.fromhex(strip_hex_prefix(account.address)))

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def _sign_transaction(self, transaction: Dict[str, Any], wallet: Wallet) -> Dict[str, Any]:
        """
        Sign a node-built transaction with the wallet key.

        The transaction id must be the sha256 of ``raw_data_hex``; anything else
        means the node returned a transaction we did not ask for.

        Raises:
            TransactionExecutionError: If the transaction id does not match its raw data
        """
        tx_id = transaction.get("txID")
        raw_data_hex = transaction.get("raw_data_hex")
        if not tx_id or not raw_data_hex:
            raise TransactionExecutionError("transaction creation failed: incomplete transaction")
        if hashlib.sha256(bytes.fromhex(raw_data_hex)).hexdigest() != tx_id.lower():
            raise TransactionExecutionError(
                "transaction creation failed: txID does not match raw data", tx_hash=tx_id
            )

        private_key = keys.PrivateKey(bytes.fromhex(strip_hex_prefix(wallet.private_key.get_secret_value())))
        signature = private_key.sign_msg_hash(bytes.fromhex(tx_id))
        signed = dict(transaction)
        signed["signature"] = [signature.to_bytes().hex()]
        return signed

    async def _broadcast(self, signed: Dict[str, Any]) -> str:
        tx_id = signed["txID"]
        response = await self._post(BROADCAST_TRANSACTION_PATH, signed)
        if not response.get("result"):
            code = response.get("code", "UNKNOWN")
            raise TransactionExecutionError(
                f"broadcast failed: {code}: {_decode_node_message(response.get('message'))}",
                rpc_method=BROADCAST_TRANSACTION_PATH,
                tx_hash=tx_id,
            )
        logger.info("tron_transaction_broadcast", tx_id=tx_id)
        return tx_id

    async def submit_native_transfer(self, wallet: Wallet, to: str, value: int) -> str:
        payload = {
            "owner_address": to_base58_address(wallet.address),
            "to_address": to_base58_address(to),
            "amount": value,
            "visible": True,
        }
        transaction = await self._post(CREATE_TRANSACTION_PATH, payload)
        if "Error" in transaction or "txID" not in transaction:
            raise TransactionExecutionError(
                f"transaction creation failed: {transaction.get('Error', 'no transaction returned')}",
                rpc_method=CREATE_TRANSACTION_PATH,
            )
        return await self._broadcast(self._sign_transaction(transaction, wallet))

    async def submit_token_transfer(
        self,
        wallet: Wallet,
        token_address: str,
        to: str,
        value: int,
        fee_limit: int,
    ) -> str:
        payload = {
            "owner_address": to_base58_address(wallet.address),
            "contract_address": to_base58_address(token_address),
            "function_selector": TRANSFER_FUNCTION_SELECTOR,
            "parameter": encode_transfer_parameters(to, value),
            "fee_limit": fee_limit,
            "call_value": 0,
            "visible": True,
        }
        response = await self._post(TRIGGER_SMART_CONTRACT_PATH, payload)
        result = response.get("result") or {}
        transaction = response.get("transaction")
        if not result.get("result") or not transaction:
            raise TransactionExecutionError(
                f"contract trigger failed: {_decode_node_message(result.get('message'))}",
                rpc_method=TRIGGER_SMART_CONTRACT_PATH,
            )
        return await self._broadcast(self._sign_transaction(transaction, wallet))

    async def get_transaction_info(self, tx_id: str) -> Optional[TransactionInfo]:
        data = await self._post(GET_TRANSACTION_INFO_PATH, {"value": tx_id})
        if not data:
            return None

        receipt = data.get("receipt") or {}
        return TransactionInfo(
            tx_id=data.get("id", tx_id),
            receipt_result=receipt.get("result"),
            block_number=data.get("blockNumber"),
            fee=data.get("fee"),
            raw=data,
        )
