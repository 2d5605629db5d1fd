"""
Payment header codec.

A payment header is the Base64 encoding of the payment token's UTF-8 JSON.
Decoding is strict: any Base64, UTF-8, JSON or shape problem produces a
DecodeFailure instead of a partial token.
"""

import base64
import binascii
import json
from typing import Union

from pydantic import ValidationError

from ..schemas.bases import PaymentToken, DecodeFailure


def decode_payment_header(header: str) -> Union[PaymentToken, DecodeFailure]:
    """
    Decode a Base64 payment header into a PaymentToken.

    Args:
        header: Base64 encoded UTF-8 JSON of a payment token

    Returns:
        PaymentToken on success, DecodeFailure describing the first problem otherwise
    """
    if not isinstance(header, str) or not header.strip():
        return DecodeFailure(reason="empty payment header")

    try:
        raw = base64.b64decode(header.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        return DecodeFailure(reason=f"invalid base64: {e}")

    try:
        data = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError:
        return DecodeFailure(reason="payment header is not UTF-8")
    except json.JSONDecodeError as e:
        return DecodeFailure(reason=f"invalid JSON: {e.msg}")
    except ValueError as e:
        # integer literals past the int/str conversion limit
        return DecodeFailure(reason=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return DecodeFailure(reason="payment header must encode a JSON object")

    try:
        return PaymentToken.model_validate(data)
    except ValidationError as e:
        return DecodeFailure(reason=f"invalid payment token: {e.error_count()} validation error(s)")


def encode_payment_header(token: PaymentToken) -> str:
    """Encode a PaymentToken as canonical JSON wrapped in Base64."""
    return base64.b64encode(token.to_canonical_json().encode("utf-8")).decode("ascii")
