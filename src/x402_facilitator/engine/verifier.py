"""
Payment Verification Engine

Validates a payment header against the caller's payment requirements without
touching the network. Checks run in a fixed order and the first failure is
reported, so a given bad payment always yields the same reason:

    1. header decodes                    "malformed header"
    2. scheme matches                    "scheme mismatch: expected X, got Y"
    3. network matches                   "network mismatch: expected X, got Y"
       scheme is registered              "unsupported scheme: S"
    4. payload signature (transfer-style) "signature verification failed: ..."
    5. value >= maxAmountRequired         "insufficient payment: required X, got Y"
    6. to == payTo (normalized)           "recipient mismatch: expected X, got Y"
    7. validAfter <= now < validBefore    "not yet valid: ..." / "expired: ..."

Amounts and timestamps are compared as decimal digit strings, so values of
any length compare exactly and never hit the interpreter's int/str
conversion limit. Addresses are compared only after normalization by the
network family's ChainClient.
"""

import time
from typing import Callable

import structlog

from ..adapters.bases import ChainClient
from ..schemas.bases import (
    PaymentRequirements,
    PaymentToken,
    TransferPayload,
    TransferSignature,
    AuthorizationSignature,
    DecodeFailure,
    VerificationResult,
)
from .codec import decode_payment_header
from .schemes import SchemeRegistry, PaymentScheme, DEFAULT_SCHEMES

logger = structlog.get_logger(__name__)

#: Separator between signed payload fields; never part of an address, integer or nonce.
SIGNING_DELIMITER = "|"


def canonical_uint(digits: str) -> str:
    """Strip leading zeros from a decimal digit string (``"000"`` becomes ``"0"``)."""
    return digits.lstrip("0") or "0"


def compare_uint(left: str, right: str) -> int:
    """Compare two decimal digit strings numerically; returns -1, 0 or 1."""
    left, right = canonical_uint(left), canonical_uint(right)
    if len(left) != len(right):
        return -1 if len(left) < len(right) else 1
    if left == right:
        return 0
    return -1 if left < right else 1


def build_signing_message(payload: TransferPayload) -> str:
    """
    Build the message a payer signs for a transfer-style scheme.

    Fields are used exactly as presented, in the order
    ``from|to|value|validAfter|validBefore|nonce``, followed by
    ``|tokenAddress`` when the payload names a token contract.
    """
    parts = [
        payload.from_address,
        payload.to,
        payload.value,
        payload.valid_after,
        payload.valid_before,
        payload.nonce,
    ]
    if payload.token_address:
        parts.append(payload.token_address)
    return SIGNING_DELIMITER.join(parts)


class PaymentVerifier:
    """
    Ordered verification pipeline for one network family.

    Args:
        client: Chain client used for signer recovery and address normalization
        schemes: Registered payment schemes
        clock: Returns the current unix time in seconds
    """

    def __init__(
        self,
        client: ChainClient,
        schemes: SchemeRegistry = DEFAULT_SCHEMES,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.schemes = schemes
        self._clock = clock

    def verify(self, payment_header: str, requirements: PaymentRequirements) -> VerificationResult:
        """
        Decode ``payment_header`` and verify it against ``requirements``.

        Returns:
            VerificationResult: Never raises for bad input
        """
        token = decode_payment_header(payment_header)
        if isinstance(token, DecodeFailure):
            logger.info("payment_header_malformed", cause=token.reason)
            return VerificationResult.invalid("malformed header")
        return self.verify_token(token, requirements)

    def verify_token(self, token: PaymentToken, requirements: PaymentRequirements) -> VerificationResult:
        """Run checks 2 to 7 on an already decoded token."""
        result = self._check(token, requirements)
        if result.is_valid:
            logger.info("payment_verified", scheme=token.scheme, network=token.network, payer=result.payer)
        else:
            logger.info(
                "payment_invalid",
                scheme=token.scheme,
                network=token.network,
                reason=result.invalid_reason,
            )
        return result

    def _check(self, token: PaymentToken, requirements: PaymentRequirements) -> VerificationResult:
        if token.scheme != requirements.scheme:
            return VerificationResult.invalid(
                f"scheme mismatch: expected {requirements.scheme}, got {token.scheme}"
            )

        if token.network != requirements.network:
            return VerificationResult.invalid(
                f"network mismatch: expected {requirements.network}, got {token.network}"
            )

        scheme = self.schemes.find(token.scheme)
        if scheme is None:
            return VerificationResult.invalid(f"unsupported scheme: {token.scheme}")

        signature_failure = self._check_signature(scheme, token)
        if signature_failure is not None:
            return VerificationResult.invalid(signature_failure)

        payload = token.payload
        value = canonical_uint(payload.value)
        required = canonical_uint(requirements.max_amount_required)
        if compare_uint(value, required) < 0:
            return VerificationResult.invalid(
                f"insufficient payment: required {required}, got {value}"
            )

        if self.client.normalize_address(payload.to) != self.client.normalize_address(requirements.pay_to):
            return VerificationResult.invalid(
                f"recipient mismatch: expected {requirements.pay_to}, got {payload.to}"
            )

        now = int(self._clock())
        if compare_uint(str(now), payload.valid_after) < 0:
            return VerificationResult.invalid(
                f"not yet valid: validAfter {payload.valid_after}, current time {now}"
            )
        if compare_uint(str(now), payload.valid_before) >= 0:
            return VerificationResult.invalid(
                f"expired: validBefore {payload.valid_before}, current time {now}"
            )

        return VerificationResult.valid(payer=payload.from_address, payment_token=token)

    def _check_signature(self, scheme: PaymentScheme, token: PaymentToken):
        """Return a failure reason, or None when the proof object is acceptable."""
        signature = token.signature

        if not scheme.requires_payload_signature:
            if not isinstance(signature, AuthorizationSignature):
                return "signature verification failed: expected v/r/s authorization signature"
            try:
                signature.validate_format()
            except ValueError as e:
                return f"signature verification failed: {e}"
            return None

        if not isinstance(signature, TransferSignature):
            return "signature verification failed: expected signature string"

        message = build_signing_message(token.payload)
        try:
            recovered = self.client.recover_address(message, signature.signature)
        except Exception as e:
            return f"signature verification failed: {e}"

        if self.client.normalize_address(recovered) != self.client.normalize_address(token.payload.from_address):
            return f"signature verification failed: recovered {recovered}, expected {token.payload.from_address}"
        return None
