from x402_facilitator.servers import create_app

# Reads TRON_PRIVATE_KEY / EVM_PRIVATE_KEY and endpoints from the environment (.env supported).
# Without a private key the facilitator still verifies; /settle answers 503.
app = create_app(title="x402 Facilitator")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="localhost", port=8000, log_level="info")
