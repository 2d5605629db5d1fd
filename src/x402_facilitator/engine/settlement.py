"""
Settlement Engine

Executes the on-chain transfer described by a payment header and waits for a
terminal outcome. Every call re-verifies the payment from scratch; a previous
successful verify is never trusted.

Flow:
    signer available? -> decode -> verify -> scheme settleable? -> value fits uint256?
        -> tokenAddress present:  token contract transfer, confirmed by receipt result
        -> tokenAddress absent:   native transfer, confirmed once queryable
    -> poll (sleep, status) up to the attempt budget

Confirmation guarantees differ by path. A contract transfer is successful
only when the receipt reports ``SUCCESS``; any other result is a confirmed
failure. A native transfer is treated as confirmed as soon as the node can
report it at all, since no result code is available for it. Exhausting the
budget is reported as a timeout with the transaction id: the transfer may
still land.

Submissions are never retried; only the status read is repeated.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..adapters.bases import ChainClient, Wallet
from ..schemas.bases import (
    PaymentRequirements,
    PaymentToken,
    DecodeFailure,
    SettlementResult,
    SettlementStatus,
    TransactionInfo,
)
from .codec import decode_payment_header
from .polling import poll_until
from .verifier import PaymentVerifier, canonical_uint, compare_uint
from .wallet import WalletProvider

logger = structlog.get_logger(__name__)

SETTLEMENT_UNAVAILABLE = "settlement unavailable: facilitator wallet is not configured"
INVALID_PAYMENT_HEADER = "invalid payment header"
CONFIRMATION_TIMEOUT = "transaction confirmation timeout"
AMOUNT_OUT_OF_RANGE = "unsupported amount: value exceeds uint256"

#: Largest amount either chain family can move in a single transfer.
MAX_TRANSFER_VALUE = str(2 ** 256 - 1)


class SettlementPolicy(BaseModel):
    """
    Confirmation polling budget and fee ceiling.

    Attributes:
        poll_interval: Seconds to wait before each status query
        max_attempts: Status queries before giving up
        fee_limit: Fee ceiling for contract transfers (None: the client's default)
        deadline: Optional total seconds for the polling phase
    """

    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(2.0, ge=0)
    max_attempts: int = Field(30, ge=1)
    fee_limit: Optional[int] = Field(None, gt=0)
    deadline: Optional[float] = Field(None, gt=0)


def _receipt_is_terminal(info: Optional[TransactionInfo]) -> bool:
    return info is not None and info.receipt_result is not None


def _native_is_terminal(info: Optional[TransactionInfo]) -> bool:
    return info is not None


class SettlementEngine:
    """
    Settles verified payments through a ChainClient using the provider's wallet.

    Args:
        client: Chain client for the network family
        wallets: Settlement wallet provider
        verifier: Verification pipeline re-run before every settlement
        policy: Polling budget and fee ceiling
        sleep: Awaitable sleep used between status queries
        monotonic: Clock the polling deadline is measured against
    """

    def __init__(
        self,
        client: ChainClient,
        wallets: WalletProvider,
        verifier: PaymentVerifier,
        policy: SettlementPolicy = SettlementPolicy(),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.wallets = wallets
        self.verifier = verifier
        self.policy = policy
        self._sleep = sleep
        self._monotonic = monotonic

    def is_available(self) -> bool:
        return self.wallets.is_available()

    async def settle(self, payment_header: str, requirements: PaymentRequirements) -> SettlementResult:
        """
        Verify and execute the payment in ``payment_header``.

        Returns:
            SettlementResult: Never raises for bad input, rejected payments or
                              chain failures; task cancellation propagates
        """
        if not self.wallets.is_available():
            logger.warning("settlement_unavailable", network=requirements.network)
            return SettlementResult.failed(
                SETTLEMENT_UNAVAILABLE,
                status=SettlementStatus.UNAVAILABLE,
                network=requirements.network,
            )

        token = decode_payment_header(payment_header)
        if isinstance(token, DecodeFailure):
            logger.info("settlement_rejected", reason=INVALID_PAYMENT_HEADER, cause=token.reason)
            return SettlementResult.failed(
                INVALID_PAYMENT_HEADER,
                status=SettlementStatus.REJECTED,
                network=requirements.network,
            )

        verification = self.verifier.verify_token(token, requirements)
        if not verification.is_valid:
            return SettlementResult.failed(
                f"verification failed: {verification.invalid_reason}",
                status=SettlementStatus.REJECTED,
                network=token.network,
            )

        scheme = self.verifier.schemes.find(token.scheme)
        if scheme is None or not scheme.settleable:
            return SettlementResult.failed(
                f"unsupported scheme: {token.scheme}",
                status=SettlementStatus.REJECTED,
                network=token.network,
            )

        if compare_uint(token.payload.value, MAX_TRANSFER_VALUE) > 0:
            return SettlementResult.failed(
                AMOUNT_OUT_OF_RANGE,
                status=SettlementStatus.REJECTED,
                network=token.network,
            )

        return await self._execute(token, self.wallets.get())

    async def _execute(self, token: PaymentToken, wallet: Wallet) -> SettlementResult:
        payload = token.payload
        network = token.network
        value = int(canonical_uint(payload.value))
        tx_id: Optional[str] = None

        try:
            if payload.is_token_transfer:
                fee_limit = self.policy.fee_limit or self.client.default_fee_limit
                tx_id = await self.client.submit_token_transfer(
                    wallet, payload.token_address, payload.to, value, fee_limit
                )
                is_terminal = _receipt_is_terminal
            else:
                tx_id = await self.client.submit_native_transfer(wallet, payload.to, value)
                is_terminal = _native_is_terminal

            logger.info(
                "settlement_submitted",
                network=network,
                tx_id=tx_id,
                token_address=payload.token_address,
                value=payload.value,
            )

            outcome = await poll_until(
                lambda: self.client.get_transaction_info(tx_id),
                is_terminal,
                interval=self.policy.poll_interval,
                max_attempts=self.policy.max_attempts,
                deadline=self._deadline(),
                sleep=self._sleep,
                clock=self._monotonic,
            )
        except Exception as e:
            logger.error("settlement_error", network=network, tx_id=tx_id, error=str(e))
            return SettlementResult.failed(
                str(e) or type(e).__name__,
                network=network,
                transaction_hash=tx_id or getattr(e, "tx_hash", None),
            )

        if outcome.timed_out:
            logger.warning("settlement_timeout", network=network, tx_id=tx_id, attempts=outcome.attempts)
            return SettlementResult.failed(
                CONFIRMATION_TIMEOUT,
                status=SettlementStatus.TIMEOUT,
                network=network,
                transaction_hash=tx_id,
            )

        info = outcome.value
        if payload.is_token_transfer and not info.is_success():
            logger.warning(
                "settlement_failed",
                network=network,
                tx_id=tx_id,
                receipt_result=info.receipt_result,
                attempts=outcome.attempts,
            )
            return SettlementResult.failed(
                f"transaction failed: {info.receipt_result}",
                network=network,
                transaction_hash=tx_id,
            )

        logger.info("settlement_confirmed", network=network, tx_id=tx_id, attempts=outcome.attempts)
        return SettlementResult.succeeded(
            network=network,
            transaction_hash=tx_id,
            settled_amount=payload.value,
        )

    def _deadline(self) -> Optional[float]:
        if self.policy.deadline is None:
            return None
        return self._monotonic() + self.policy.deadline
