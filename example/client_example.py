import time
import secrets

import httpx

from x402_facilitator import (
    PaymentRequirements,
    PaymentToken,
    TransferPayload,
    TransferSignature,
    TronClient,
    encode_payment_header,
)
from x402_facilitator.engine import build_signing_message

payer_pk = "0xxxx"  # Replace with the payer's TRON private key
pay_to = "TXxxxx"  # Replace with the resource server's TRON address

tron = TronClient("https://api.shasta.trongrid.io")


async def main():
    now = int(time.time())
    payload = TransferPayload(
        from_address=tron.address_from_private_key(payer_pk),
        to=pay_to,
        value="1000000",  # 1 TRX in sun
        valid_after=str(now - 60),
        valid_before=str(now + 600),
        nonce=secrets.token_hex(16),
    )
    token = PaymentToken(
        scheme="tron-transfer",
        network="tron-shasta",
        payload=payload,
        signature=TransferSignature(signature=tron.sign_message(build_signing_message(payload), payer_pk)),
    )
    requirements = PaymentRequirements(
        scheme="tron-transfer",
        network="tron-shasta",
        max_amount_required="1000000",
        resource="https://example.com/premium",
        pay_to=pay_to,
    )

    async with httpx.AsyncClient(timeout=httpx.Timeout(60.0, read=120.0)) as client:
        return await client.post(
            "http://localhost:8000/tron/verify",
            json={
                "paymentHeader": encode_payment_header(token),
                "paymentRequirements": requirements.to_dict(),
            },
        )


if __name__ == "__main__":
    import asyncio
    response = asyncio.run(main())
    print("Response:", response.json())
