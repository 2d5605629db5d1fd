"""
Payment Scheme Registry

A scheme names a payment method and fixes the shape of its proof object:

    - TRANSFER: the payer signs the ordered transfer fields as a personal
      message; the token carries a single signature string that the
      verifier checks against ``payload.from``.
    - AUTHORIZATION: the token carries an EIP-3009 style (v, r, s)
      authorization that is itself the transfer authority; the payload is
      not separately signed.

Verification and settlement dispatch on the scheme tag through this registry,
never on the structure of the signature object.
"""

from enum import Enum
from typing import Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict


class SchemeKind(str, Enum):
    TRANSFER = "transfer"
    AUTHORIZATION = "authorization"


class PaymentScheme(BaseModel):
    """
    A registered payment scheme.

    Attributes:
        name: Scheme identifier carried in tokens and requirements
        kind: Proof object shape and verification rule
        settleable: Whether the settlement engine can execute this scheme
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: SchemeKind
    settleable: bool = True

    @property
    def requires_payload_signature(self) -> bool:
        return self.kind == SchemeKind.TRANSFER


class SchemeRegistry:
    """
    Immutable lookup of payment schemes by name.

    Example:
        registry = SchemeRegistry([PaymentScheme(name="x-transfer", kind=SchemeKind.TRANSFER)])
        registry.find("x-transfer").requires_payload_signature  # True
    """

    def __init__(self, schemes: Iterable[PaymentScheme] = ()):
        self._schemes: Dict[str, PaymentScheme] = {scheme.name: scheme for scheme in schemes}

    def find(self, name: str) -> Optional[PaymentScheme]:
        return self._schemes.get(name)


DEFAULT_SCHEMES = SchemeRegistry([
    PaymentScheme(name="tron-transfer", kind=SchemeKind.TRANSFER),
    PaymentScheme(name="exact", kind=SchemeKind.TRANSFER),
    # transferWithAuthorization submission is not implemented by the settlement engine
    PaymentScheme(name="eip-3009", kind=SchemeKind.AUTHORIZATION, settleable=False),
])
