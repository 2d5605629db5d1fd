"""
Base Schema Models for the x402 Facilitator

This module defines the protocol data model shared by the codec, the
verification and settlement engines, the chain clients and the HTTP boundary.
Every model serializes to the camelCase wire form used by x402 clients while
exposing snake_case attributes in Python.

Core Classes:
    - CanonicalModel: Pydantic base model with deterministic JSON serialization
    - PaymentRequirements: Caller-declared constraints a payment must satisfy
    - TransferPayload: Signed transfer fields presented by the payer
    - TransferSignature / AuthorizationSignature: Scheme-defined proof objects
    - PaymentToken: Decoded payment header envelope
    - DecodeFailure: Outcome of a header that could not be decoded
    - VerificationResult: Outcome of the verification pipeline
    - SettlementResult: Outcome of a settlement attempt
    - TransactionInfo: Chain client snapshot of a submitted transaction

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from enum import Enum
from typing import Optional, Dict, Any, Union

from pydantic import BaseModel, ConfigDict, Field


#: Decimal integer string in the asset's smallest unit (or unix seconds).
UINT_PATTERN = r"^[0-9]+$"


class CanonicalModel(BaseModel):
    """
    Pydantic base model with canonical JSON serialization.

    This model ensures a consistent, deterministic JSON representation that is
    suitable for header encoding and for comparing serialized payloads.

    Features:
        - Wire names (camelCase aliases) are used on output
        - Fields left as ``None`` are omitted from output
        - Deterministic key sorting in JSON output
        - No extra whitespace

    Example:
        class MyModel(CanonicalModel):
            pay_to: str = Field(..., alias="payTo")

        model = MyModel(pay_to="T...")
        model.to_canonical_json()  # '{"payTo":"T..."}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to a canonical JSON string.

        The JSON representation is:
        1. Deterministically ordered (sorted keys)
        2. Whitespace-minimal (compact format)
        3. Keyed by wire aliases, with unset optional fields dropped

        Returns:
            str: JSON string with sorted keys and no extra whitespace.

        Example:
            token.to_canonical_json()
            # Returns: '{"network":"tron-shasta","payload":{...},...}'
        """
        return json.dumps(
            self.to_dict(),
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to its wire dictionary representation.

        Returns:
            Dict[str, Any]: JSON-compatible dictionary keyed by wire aliases.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PaymentRequirements(CanonicalModel):
    """
    Caller-declared constraints the payment must satisfy.

    Supplied per request and never mutated. ``max_amount_required`` is kept as
    a decimal string and is only ever compared as an arbitrary-precision int.

    Attributes:
        scheme: Payment scheme identifier (e.g. ``tron-transfer``)
        network: Network tag (e.g. ``tron-shasta``)
        max_amount_required: Required amount in the asset's smallest unit
        resource: Resource being paid for
        pay_to: Recipient address in any encoding the network accepts
        description: Optional human-readable description
        mime_type: Optional MIME type of the resource
        max_timeout_seconds: Optional maximum time the server waits for payment
        asset: Optional asset identifier (token contract address)
        extra: Optional scheme-specific data
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    scheme: str = Field(..., min_length=1, description="Payment scheme identifier")
    network: str = Field(..., min_length=1, description="Network tag")
    max_amount_required: str = Field(
        ...,
        alias="maxAmountRequired",
        pattern=UINT_PATTERN,
        description="Required amount in smallest units (decimal string)",
    )
    resource: str = Field(..., description="Resource being paid for")
    pay_to: str = Field(..., alias="payTo", min_length=1, description="Recipient address")
    description: Optional[str] = Field(None, description="Human-readable description")
    mime_type: Optional[str] = Field(None, alias="mimeType", description="Resource MIME type")
    max_timeout_seconds: Optional[int] = Field(
        None, alias="maxTimeoutSeconds", ge=0, description="Maximum payment wait in seconds"
    )
    asset: Optional[str] = Field(None, description="Asset identifier")
    extra: Optional[Dict[str, Any]] = Field(None, description="Scheme-specific data")


class TransferPayload(CanonicalModel):
    """
    Signed transfer fields presented by the payer.

    All numeric fields are decimal strings. ``token_address`` set means a
    token-contract transfer; ``None`` means a native asset transfer.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    from_address: str = Field(..., alias="from", min_length=1, description="Payer address")
    to: str = Field(..., min_length=1, description="Recipient address")
    value: str = Field(..., pattern=UINT_PATTERN, description="Amount in smallest units")
    valid_after: str = Field(..., alias="validAfter", pattern=UINT_PATTERN)
    valid_before: str = Field(..., alias="validBefore", pattern=UINT_PATTERN)
    nonce: str = Field(..., description="Opaque scheme-defined nonce")
    token_address: Optional[str] = Field(None, alias="tokenAddress", description="Token contract")

    @property
    def is_token_transfer(self) -> bool:
        return self.token_address is not None


class TransferSignature(CanonicalModel):
    """Single opaque signature string used by transfer-style schemes."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    signature: str = Field(..., min_length=1, description="Hex encoded 65-byte signature")


class AuthorizationSignature(CanonicalModel):
    """
    EVM ECDSA authorization signature (v, r, s) used by EIP-3009 style schemes.

    Attributes:
        v: ECDSA recovery ID (27 or 28)
        r: r component, 32 bytes as 64-char hex (0x prefix optional)
        s: s component, 32 bytes as 64-char hex (0x prefix optional)
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    v: int
    r: str
    s: str

    def validate_format(self) -> bool:
        """
        Validate v/r/s components.

        Returns:
            True when all components pass.

        Raises:
            ValueError: Descriptive message on the first failed check.
        """
        if self.v not in (27, 28):
            raise ValueError(f"invalid recovery id {self.v}, must be 27 or 28")

        for name, val in [("r", self.r), ("s", self.s)]:
            hex_str = val[2:] if val[:2] in ("0x", "0X") else val
            if len(hex_str) != 64:
                raise ValueError(f"invalid {name}: expected 64 hex chars, got {len(hex_str)}")
            try:
                int(hex_str, 16)
            except ValueError:
                raise ValueError(f"invalid {name}: not valid hexadecimal")

        return True


SignatureTypes = Union[TransferSignature, AuthorizationSignature]


class PaymentToken(CanonicalModel):
    """
    Decoded payment header presented by the payer.

    Attributes:
        scheme: Scheme the payer signed for
        network: Network the payer signed for
        payload: Transfer fields
        signature: Scheme-defined proof object
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    scheme: str = Field(..., min_length=1)
    network: str = Field(..., min_length=1)
    payload: TransferPayload
    signature: SignatureTypes


class DecodeFailure(CanonicalModel):
    """A payment header that could not be decoded, with the underlying cause."""

    reason: str


class VerificationResult(CanonicalModel):
    """
    Outcome of the verification pipeline.

    ``invalid_reason`` is present iff the payment is invalid; ``payer`` and
    ``payment_token`` are present iff it is valid. Use the ``valid`` and
    ``invalid`` constructors to keep those rules.
    """

    is_valid: bool = Field(..., alias="isValid")
    invalid_reason: Optional[str] = Field(None, alias="invalidReason")
    payer: Optional[str] = None
    payment_token: Optional[PaymentToken] = Field(None, alias="paymentToken")

    @classmethod
    def valid(cls, payer: str, payment_token: PaymentToken) -> "VerificationResult":
        return cls(is_valid=True, payer=payer, payment_token=payment_token)

    @classmethod
    def invalid(cls, reason: str) -> "VerificationResult":
        return cls(is_valid=False, invalid_reason=reason)


class SettlementStatus(str, Enum):
    """
    Terminal state of a settlement attempt.

    Attributes:
        SUCCESS: Transfer confirmed on-chain
        FAILED: Transfer confirmed as failed, or submission raised
        TIMEOUT: Confirmation budget exhausted, outcome unknown
        REJECTED: Nothing submitted (bad header, failed verification, unsupported scheme)
        UNAVAILABLE: Facilitator cannot settle (no signer configured)
    """
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


class SettlementResult(CanonicalModel):
    """
    Outcome of a settlement attempt.

    ``transaction_hash`` is reported as soon as a transaction was submitted,
    including on later failure or timeout, so callers can reconcile.
    ``settled_amount`` is present iff ``success``; ``error`` iff not.
    """

    success: bool
    status: SettlementStatus
    network: Optional[str] = None
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    settled_amount: Optional[str] = Field(None, alias="settledAmount")
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, network: str, transaction_hash: str, settled_amount: str) -> "SettlementResult":
        return cls(
            success=True,
            status=SettlementStatus.SUCCESS,
            network=network,
            transaction_hash=transaction_hash,
            settled_amount=settled_amount,
        )

    @classmethod
    def failed(
        cls,
        error: str,
        status: SettlementStatus = SettlementStatus.FAILED,
        network: Optional[str] = None,
        transaction_hash: Optional[str] = None,
    ) -> "SettlementResult":
        return cls(
            success=False,
            status=status,
            network=network,
            transaction_hash=transaction_hash,
            error=error,
        )


class TransactionInfo(CanonicalModel):
    """
    Snapshot of a submitted transaction as reported by a chain client.

    Attributes:
        tx_id: Transaction identifier
        receipt_result: Receipt result code (``SUCCESS``, ``REVERT``, ...) when the
                        chain reports one
        block_number: Block the transaction was included in, if known
        fee: Fee paid in the native asset's smallest unit, if known
        raw: Untouched node response
    """

    tx_id: str = Field(..., alias="txId")
    receipt_result: Optional[str] = Field(None, alias="receiptResult")
    block_number: Optional[int] = Field(None, alias="blockNumber")
    fee: Optional[int] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    def is_success(self) -> bool:
        return self.receipt_result == "SUCCESS"
