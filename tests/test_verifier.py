"""
Payment Verification Tests

Exercises the ordered verification pipeline against MockChainClient, which
uses real EIP-191 signatures so tampering is detected exactly as on-chain.
"""

import pytest

from x402_facilitator.engine.codec import encode_payment_header
from x402_facilitator.engine.verifier import PaymentVerifier, build_signing_message, canonical_uint, compare_uint
from x402_facilitator.schemas.bases import AuthorizationSignature, TransferSignature

from test_mocks import (
    MockChainClient,
    create_mock_facilitator,
    create_mock_header,
    create_mock_payload,
    create_mock_requirements,
    create_mock_token,
    create_tampered_header,
    create_mock_authorization_header,
    MOCK_SCHEMES,
    MOCK_SCHEME,
    MOCK_NETWORK,
    MOCK_AUTHORIZATION_SCHEME,
    MOCK_AUTHORIZATION_SIGNATURE,
    MOCK_PAYER_ADDRESS,
    MOCK_OTHER_ADDRESS,
    MOCK_OTHER_PRIVATE_KEY,
    MOCK_PAY_TO,
    MOCK_TOKEN_ADDRESS,
    MOCK_NOW,
)


@pytest.fixture
def client():
    return MockChainClient()


@pytest.fixture
def facilitator(client):
    return create_mock_facilitator(client)


class TestSigningMessage:
    """Canonical message construction."""

    def test_native_transfer_message(self):
        payload = create_mock_payload(nonce="abc")
        assert build_signing_message(payload) == (
            f"{MOCK_PAYER_ADDRESS}|{MOCK_PAY_TO}|1000|0|9999999999|abc"
        )

    def test_token_transfer_appends_token_address(self):
        payload = create_mock_payload(nonce="abc", tokenAddress=MOCK_TOKEN_ADDRESS)
        assert build_signing_message(payload).endswith(f"|abc|{MOCK_TOKEN_ADDRESS}")

    def test_fields_are_used_as_presented(self):
        payload = create_mock_payload(to=MOCK_OTHER_ADDRESS.lower(), value="007")
        message = build_signing_message(payload)

        assert f"|{MOCK_OTHER_ADDRESS.lower()}|007|" in message


class TestValidPayments:
    """Payments that satisfy every check."""

    def test_exact_amount_is_valid(self, facilitator):
        header = create_mock_header()
        result = facilitator.verify(header, create_mock_requirements())

        assert result.is_valid
        assert result.invalid_reason is None
        assert result.payer == MOCK_PAYER_ADDRESS
        assert encode_payment_header(result.payment_token) == header

    def test_overpayment_is_valid(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(value="5000"))
        assert facilitator.verify(header, create_mock_requirements()).is_valid

    def test_token_transfer_is_valid(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(tokenAddress=MOCK_TOKEN_ADDRESS))
        assert facilitator.verify(header, create_mock_requirements()).is_valid

    def test_verify_never_touches_the_chain(self, client, facilitator):
        facilitator.verify(create_mock_header(), create_mock_requirements())

        client.native_transfer.assert_not_called()
        client.token_transfer.assert_not_called()
        client.transaction_info.assert_not_called()

    def test_valid_result_wire_form(self, facilitator):
        data = facilitator.verify(create_mock_header(), create_mock_requirements()).to_dict()

        assert data["isValid"] is True
        assert data["payer"] == MOCK_PAYER_ADDRESS
        assert data["paymentToken"]["payload"]["from"] == MOCK_PAYER_ADDRESS
        assert "invalidReason" not in data

    def test_invalid_result_wire_form(self, facilitator):
        data = facilitator.verify("%%%", create_mock_requirements()).to_dict()
        assert data == {"isValid": False, "invalidReason": "malformed header"}


class TestCheckOrder:
    """The first failing check determines the reason."""

    def test_malformed_header(self, facilitator):
        result = facilitator.verify("not-a-header", create_mock_requirements())

        assert not result.is_valid
        assert result.invalid_reason == "malformed header"
        assert result.payer is None

    def test_scheme_mismatch_wins_over_everything_else(self, facilitator):
        header = create_mock_header(
            scheme="other-scheme",
            network="other-net",
            private_key=MOCK_OTHER_PRIVATE_KEY,
            payload=create_mock_payload(value="1"),
        )
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == f"scheme mismatch: expected {MOCK_SCHEME}, got other-scheme"

    def test_network_mismatch(self, facilitator):
        header = create_mock_header(network="net-main", private_key=MOCK_OTHER_PRIVATE_KEY)
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == f"network mismatch: expected {MOCK_NETWORK}, got net-main"

    def test_unregistered_scheme(self, facilitator):
        header = create_mock_header(scheme="mystery")
        result = facilitator.verify(header, create_mock_requirements(scheme="mystery"))
        assert result.invalid_reason == "unsupported scheme: mystery"

    def test_signature_checked_before_amount(self, facilitator):
        header = create_mock_header(
            private_key=MOCK_OTHER_PRIVATE_KEY,
            payload=create_mock_payload(value="1"),
        )
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason.startswith("signature verification failed")

    def test_amount_checked_before_recipient(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(value="1", to=MOCK_OTHER_ADDRESS))
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == "insufficient payment: required 1000, got 1"

    def test_recipient_checked_before_time(self, client):
        facilitator = create_mock_facilitator(client, now=5)
        header = create_mock_header(payload=create_mock_payload(to=MOCK_OTHER_ADDRESS, validAfter="100"))
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason.startswith("recipient mismatch")


class TestSignatures:
    """Signer recovery over the canonical message."""

    def test_wrong_signer(self, facilitator):
        header = create_mock_header(private_key=MOCK_OTHER_PRIVATE_KEY)
        result = facilitator.verify(header, create_mock_requirements())

        assert result.invalid_reason == (
            f"signature verification failed: recovered {MOCK_OTHER_ADDRESS}, expected {MOCK_PAYER_ADDRESS}"
        )

    @pytest.mark.parametrize("overrides", [
        {"from_address": MOCK_OTHER_ADDRESS},
        {"to": MOCK_OTHER_ADDRESS},
        {"value": "1001"},
        {"valid_after": "1"},
        {"valid_before": "9999999998"},
        {"nonce": "n2"},
        {"token_address": MOCK_TOKEN_ADDRESS},
    ])
    def test_tampering_any_signed_field_fails(self, facilitator, overrides):
        result = facilitator.verify(create_tampered_header(**overrides), create_mock_requirements())

        assert not result.is_valid
        assert result.invalid_reason.startswith("signature verification failed")

    def test_dropping_token_address_fails(self, facilitator):
        token = create_mock_token(payload=create_mock_payload(tokenAddress=MOCK_TOKEN_ADDRESS))
        stripped = token.payload.model_copy(update={"token_address": None})
        header = encode_payment_header(token.model_copy(update={"payload": stripped}))

        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason.startswith("signature verification failed")

    def test_undecodable_signature_fails_closed(self, facilitator):
        token = create_mock_token().model_copy(update={"signature": TransferSignature(signature="zz-not-hex")})
        result = facilitator.verify(encode_payment_header(token), create_mock_requirements())

        assert result.invalid_reason.startswith("signature verification failed: ")

    def test_authorization_object_rejected_for_transfer_scheme(self, facilitator):
        token = create_mock_token().model_copy(update={"signature": MOCK_AUTHORIZATION_SIGNATURE})
        result = facilitator.verify(encode_payment_header(token), create_mock_requirements())

        assert result.invalid_reason == "signature verification failed: expected signature string"


class TestAuthorizationSchemes:
    """Schemes whose proof is a v/r/s authorization checked for format only."""

    def test_well_formed_authorization_is_valid(self, facilitator):
        result = facilitator.verify(
            create_mock_authorization_header(),
            create_mock_requirements(scheme=MOCK_AUTHORIZATION_SCHEME),
        )
        assert result.is_valid
        assert result.payer == MOCK_PAYER_ADDRESS

    def test_invalid_recovery_id(self, facilitator):
        header = create_mock_authorization_header(
            signature=AuthorizationSignature(v=30, r="0x" + "a" * 64, s="0x" + "b" * 64)
        )
        result = facilitator.verify(header, create_mock_requirements(scheme=MOCK_AUTHORIZATION_SCHEME))
        assert result.invalid_reason == "signature verification failed: invalid recovery id 30, must be 27 or 28"

    def test_short_r_component(self, facilitator):
        header = create_mock_authorization_header(signature=AuthorizationSignature(v=28, r="0xabc", s="b" * 64))
        result = facilitator.verify(header, create_mock_requirements(scheme=MOCK_AUTHORIZATION_SCHEME))
        assert result.invalid_reason == "signature verification failed: invalid r: expected 64 hex chars, got 3"

    def test_transfer_signature_rejected(self, facilitator):
        header = create_mock_header(scheme=MOCK_AUTHORIZATION_SCHEME)
        result = facilitator.verify(header, create_mock_requirements(scheme=MOCK_AUTHORIZATION_SCHEME))
        assert result.invalid_reason == "signature verification failed: expected v/r/s authorization signature"

    def test_remaining_checks_still_apply(self, facilitator):
        header = create_mock_authorization_header(value="10")
        result = facilitator.verify(header, create_mock_requirements(scheme=MOCK_AUTHORIZATION_SCHEME))
        assert result.invalid_reason == "insufficient payment: required 1000, got 10"


class TestAmounts:
    """Amounts compare as arbitrary-precision integers."""

    def test_one_unit_short(self, facilitator):
        result = facilitator.verify(create_mock_header(), create_mock_requirements(maxAmountRequired="1001"))
        assert result.invalid_reason == "insufficient payment: required 1001, got 1000"

    def test_huge_amounts(self, facilitator):
        huge = "1" + "0" * 80
        header = create_mock_header(payload=create_mock_payload(value=huge))

        assert facilitator.verify(header, create_mock_requirements(maxAmountRequired=huge)).is_valid

        bigger = str(int(huge) + 1)
        result = facilitator.verify(header, create_mock_requirements(maxAmountRequired=bigger))
        assert result.invalid_reason == f"insufficient payment: required {bigger}, got {huge}"

    def test_leading_zeros_compare_numerically(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(value="0001000"))
        assert facilitator.verify(header, create_mock_requirements()).is_valid

    def test_values_past_int_conversion_limit(self, facilitator):
        huge = "1" * 5000
        header = create_mock_header(payload=create_mock_payload(value=huge))
        assert facilitator.verify(header, create_mock_requirements()).is_valid

        result = facilitator.verify(create_mock_header(), create_mock_requirements(maxAmountRequired=huge))
        assert result.invalid_reason == f"insufficient payment: required {huge}, got 1000"

    def test_reason_reports_normalized_amounts(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(value="0001000"))
        result = facilitator.verify(header, create_mock_requirements(maxAmountRequired="001001"))
        assert result.invalid_reason == "insufficient payment: required 1001, got 1000"

    def test_zero_requirement(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(value="0"))
        assert facilitator.verify(header, create_mock_requirements(maxAmountRequired="0")).is_valid


class TestRecipients:
    """Recipient comparison after address normalization."""

    def test_recipient_mismatch(self, facilitator):
        header = create_mock_header(payload=create_mock_payload(to=MOCK_OTHER_ADDRESS))
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == f"recipient mismatch: expected {MOCK_PAY_TO}, got {MOCK_OTHER_ADDRESS}"

    @pytest.mark.parametrize("pay_to", [
        MOCK_OTHER_ADDRESS,
        MOCK_OTHER_ADDRESS.lower(),
        MOCK_OTHER_ADDRESS[2:],
    ])
    def test_equivalent_encodings_match(self, facilitator, pay_to):
        header = create_mock_header(payload=create_mock_payload(to=MOCK_OTHER_ADDRESS))
        assert facilitator.verify(header, create_mock_requirements(payTo=pay_to)).is_valid


class TestTimeWindow:
    """validAfter <= now < validBefore."""

    @pytest.fixture
    def header(self):
        return create_mock_header(payload=create_mock_payload(validAfter="1000", validBefore="2000"))

    @pytest.mark.parametrize("now", [1000, 1500, 1999])
    def test_inside_window(self, client, header, now):
        facilitator = create_mock_facilitator(client, now=now)
        assert facilitator.verify(header, create_mock_requirements()).is_valid

    def test_before_valid_after(self, client, header):
        facilitator = create_mock_facilitator(client, now=999)
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == "not yet valid: validAfter 1000, current time 999"

    def test_at_valid_before(self, client, header):
        facilitator = create_mock_facilitator(client, now=2000)
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == "expired: validBefore 2000, current time 2000"

    def test_clock_is_read_per_call(self, client, header):
        now = [1500]
        verifier = PaymentVerifier(client, schemes=MOCK_SCHEMES, clock=lambda: now[0])

        assert verifier.verify(header, create_mock_requirements()).is_valid
        now[0] = 2500
        assert verifier.verify(header, create_mock_requirements()).invalid_reason.startswith("expired")

    def test_fractional_clock_is_truncated(self, client, header):
        verifier = PaymentVerifier(client, schemes=MOCK_SCHEMES, clock=lambda: 1999.9)
        assert verifier.verify(header, create_mock_requirements()).is_valid

    def test_huge_window_bounds(self, facilitator):
        open_ended = create_mock_header(payload=create_mock_payload(validBefore="9" * 5000))
        assert facilitator.verify(open_ended, create_mock_requirements()).is_valid

        far_future = "1" * 5000
        header = create_mock_header(payload=create_mock_payload(validAfter=far_future))
        result = facilitator.verify(header, create_mock_requirements())
        assert result.invalid_reason == f"not yet valid: validAfter {far_future}, current time {MOCK_NOW}"


class TestDigitStrings:

    @pytest.mark.parametrize("left,right,expected", [
        ("0", "000", 0),
        ("0010", "9", 1),
        ("999", "1000", -1),
        ("1" * 5000, "1" * 4999 + "2", -1),
    ])
    def test_compare_uint(self, left, right, expected):
        assert compare_uint(left, right) == expected
        assert compare_uint(right, left) == -expected

    def test_canonical_uint(self):
        assert canonical_uint("000") == "0"
        assert canonical_uint("00420") == "420"
