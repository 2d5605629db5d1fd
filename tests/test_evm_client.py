"""
EVM Chain Client Tests

Tests for the web3.py backed client. Web3 calls go through MockWeb3Provider;
no RPC endpoint is contacted.
"""

import pytest
from eth_account import Account
from pydantic import SecretStr
from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound

from x402_facilitator.adapters.bases import Wallet, strip_hex_prefix
from x402_facilitator.adapters.evm.client import EVMClient
from x402_facilitator.adapters.tron.client import TronClient
from x402_facilitator.engine.exceptions import TransactionExecutionError

from test_mocks import (
    MockWeb3Provider,
    MOCK_PAYER_PRIVATE_KEY,
    MOCK_PAYER_ADDRESS,
    MOCK_OTHER_ADDRESS,
    MOCK_FACILITATOR_PRIVATE_KEY,
    MOCK_TOKEN_ADDRESS,
    MOCK_EVM_TX_HASH,
    MOCK_GAS_PRICE,
    MOCK_CHAIN_ID,
)


@pytest.fixture
def wallet():
    return Wallet(
        address=Account.from_key(MOCK_FACILITATOR_PRIVATE_KEY).address,
        private_key=SecretStr(MOCK_FACILITATOR_PRIVATE_KEY),
        endpoint="https://evm-t3.cronos.org",
    )


class TestEVMAddresses:
    """Test suite for address normalization."""

    @pytest.mark.parametrize("address", [
        MOCK_OTHER_ADDRESS,
        MOCK_OTHER_ADDRESS.lower(),
        MOCK_OTHER_ADDRESS.upper().replace("0X", "0x"),
        MOCK_OTHER_ADDRESS[2:],
        f" {MOCK_OTHER_ADDRESS} ",
    ])
    def test_equivalent_encodings(self, address):
        assert EVMClient().normalize_address(address) == MOCK_OTHER_ADDRESS.lower()

    def test_non_address_is_lowercased(self):
        client = EVMClient()
        assert client.normalize_address("NotAnAddress") == "notanaddress"
        assert client.normalize_address("z" * 40) == "z" * 40


class TestEVMSignatures:
    """Test suite for EIP-191 personal message signatures."""

    def test_sign_and_recover(self):
        client = EVMClient()
        signature = client.sign_message("pay me", MOCK_PAYER_PRIVATE_KEY)

        assert client.recover_address("pay me", signature) == MOCK_PAYER_ADDRESS
        assert client.recover_address("pay me", "0x" + signature) == MOCK_PAYER_ADDRESS

    def test_verify_signature(self):
        client = EVMClient()
        signature = client.sign_message("pay me", MOCK_PAYER_PRIVATE_KEY)

        assert client.verify_signature("pay me", signature, MOCK_PAYER_ADDRESS.lower())
        assert not client.verify_signature("pay you", signature, MOCK_PAYER_ADDRESS)
        assert not client.verify_signature("pay me", "0x1234", MOCK_PAYER_ADDRESS)

    def test_address_from_private_key(self):
        assert EVMClient().address_from_private_key(MOCK_PAYER_PRIVATE_KEY) == MOCK_PAYER_ADDRESS

    @pytest.mark.parametrize("client_class", [EVMClient, TronClient])
    @pytest.mark.parametrize("prefix", ["", "0x", "0X"])
    def test_families_accept_the_same_signature_prefixes(self, client_class, prefix):
        client = client_class()
        signature = client.sign_message("pay me", MOCK_PAYER_PRIVATE_KEY)
        payer = client.address_from_private_key(MOCK_PAYER_PRIVATE_KEY)

        assert client.recover_address("pay me", prefix + signature) == payer

    @pytest.mark.parametrize("value,expected", [
        ("0xabcd", "abcd"),
        ("0XABCD", "ABCD"),
        ("abcd", "abcd"),
        ("", ""),
    ])
    def test_strip_hex_prefix(self, value, expected):
        assert strip_hex_prefix(value) == expected


class TestEVMTransfers:
    """Test suite for transaction submission."""

    @pytest.mark.asyncio
    async def test_native_transfer(self, wallet):
        web3 = MockWeb3Provider()
        client = EVMClient(web3=web3)

        tx_id = await client.submit_native_transfer(wallet, MOCK_OTHER_ADDRESS.lower(), 10 ** 18)

        assert tx_id == MOCK_EVM_TX_HASH
        web3.eth.get_transaction_count.assert_awaited_once_with(wallet.address)
        web3.eth.send_raw_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_native_transfer_rpc_error(self, wallet):
        web3 = MockWeb3Provider()
        web3.eth.send_raw_transaction.side_effect = ValueError("insufficient funds for gas")
        client = EVMClient(web3=web3)

        with pytest.raises(TransactionExecutionError, match="native transfer failed: insufficient funds"):
            await client.submit_native_transfer(wallet, MOCK_OTHER_ADDRESS, 1)

    @pytest.mark.asyncio
    async def test_token_transfer(self, wallet):
        web3 = MockWeb3Provider()
        client = EVMClient(web3=web3)

        tx_id = await client.submit_token_transfer(
            wallet, MOCK_TOKEN_ADDRESS.lower(), MOCK_OTHER_ADDRESS.lower(), 2500, 90_000
        )

        assert tx_id == MOCK_EVM_TX_HASH
        contract_kwargs = web3.eth.contract.call_args.kwargs
        assert contract_kwargs["address"] == MOCK_TOKEN_ADDRESS
        assert contract_kwargs["abi"][0]["name"] == "transfer"

        params = web3.eth.transfer_call.build_transaction.await_args.args[0]
        assert params == {
            "from": wallet.address,
            "gas": 90_000,
            "gasPrice": MOCK_GAS_PRICE,
            "nonce": 7,
            "chainId": MOCK_CHAIN_ID,
        }

    @pytest.mark.asyncio
    async def test_token_transfer_invalid_recipient(self, wallet):
        client = EVMClient(web3=MockWeb3Provider())

        with pytest.raises(TransactionExecutionError, match="token transfer failed"):
            await client.submit_token_transfer(wallet, MOCK_TOKEN_ADDRESS, "not-an-address", 1, 90_000)


class TestEVMTransactionInfo:
    """Test suite for receipt lookups."""

    @pytest.mark.asyncio
    async def test_pending_transaction(self):
        client = EVMClient(web3=MockWeb3Provider(receipt_error=TransactionNotFound("not found")))
        assert await client.get_transaction_info(MOCK_EVM_TX_HASH) is None

    @pytest.mark.asyncio
    async def test_successful_receipt(self):
        receipt = {"status": 1, "blockNumber": 99, "gasUsed": 21000, "effectiveGasPrice": 5}
        client = EVMClient(web3=MockWeb3Provider(receipt=receipt))

        info = await client.get_transaction_info(MOCK_EVM_TX_HASH)

        assert info.is_success()
        assert info.receipt_result == "SUCCESS"
        assert info.block_number == 99
        assert info.fee == 105000

    @pytest.mark.asyncio
    async def test_reverted_receipt(self):
        client = EVMClient(web3=MockWeb3Provider(receipt={"status": 0, "blockNumber": 100, "gasUsed": 50000}))

        info = await client.get_transaction_info(MOCK_EVM_TX_HASH)

        assert info.receipt_result == "REVERT"
        assert not info.is_success()


class TestEVMClientInit:

    def test_web3_created_lazily(self):
        client = EVMClient("https://evm.cronos.org")

        assert client._web3 is None
        web3 = client._get_web3_instance()
        assert isinstance(web3, AsyncWeb3)
        assert client._get_web3_instance() is web3
